# mangalyze/mangadex_api/client.py
#
#
# Imports
import json
from typing import Optional, Dict, Any, List
#
# 3rd-party Libraries
import httpx
from loguru import logger
from pydantic import ValidationError
#
# Local Imports
from ..Constants import (
    DEFAULT_API_BASE_URL, DEFAULT_UPLOADS_BASE_URL, DEFAULT_API_TIMEOUT,
    DEFAULT_PAGE_SIZE, POPULAR_LIMIT, SEARCH_LIMIT, GENRE_LIMIT,
)
from ..Pagination import PageResult
from .schemas import (
    ChapterFilter, ChapterPages, MangaSummary,
    CollectionResponse, RawManga, RawChapter, AtHomeResponse,
)
from .exceptions import APIConnectionError, APIResponseError, MalformedResponseError
from .utils import manga_from_raw, chapter_from_raw
#
########################################################################################################################
#
# Functions:

class MangaDexClient:
    def __init__(self,
                 base_url: str = DEFAULT_API_BASE_URL,
                 uploads_url: str = DEFAULT_UPLOADS_BASE_URL,
                 timeout: float = DEFAULT_API_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip('/')
        self.uploads_url = uploads_url.rstrip('/')
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "MangaDexClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _request(self, method: str, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        client = await self._get_client()
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {url} params={params}")

        try:
            response = await client.request(method, endpoint, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error_detail = str(e)
            response_data = None
            try:
                response_data = e.response.json()
                # Error bodies look like {"result": "error", "errors": [{"title": ..., "detail": ...}]}
                errors = response_data.get("errors") if isinstance(response_data, dict) else None
                if isinstance(errors, list) and errors and isinstance(errors[0], dict):
                    error_detail = errors[0].get("detail") or errors[0].get("title") or error_detail
            except (json.JSONDecodeError, ValueError):
                pass
            raise APIResponseError(e.response.status_code, error_detail, response_data=response_data)
        except httpx.RequestError as e:  # ConnectError, TimeoutException, ...
            raise APIConnectionError(f"Connection error to {url}: {e}") from e

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError):
            raise MalformedResponseError("Failed to decode JSON response", status_code=response.status_code,
                                         response_data={"raw_text": response.text[:500]})
        if not isinstance(payload, dict):
            raise MalformedResponseError(f"Expected a JSON object, got {type(payload).__name__}",
                                         status_code=response.status_code)
        return payload

    async def _get_collection(self, endpoint: str, params: Dict[str, Any]) -> CollectionResponse:
        payload = await self._request("GET", endpoint, params=params)
        try:
            collection = CollectionResponse(**payload)
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected collection shape from {endpoint}: {e.errors()[0]['msg']}",
                                         response_data=payload) from e
        if collection.result != "ok":
            raise MalformedResponseError(f"Collection result was '{collection.result}'", response_data=payload)
        return collection

    async def _get_manga_list(self, params: Dict[str, Any]) -> List[MangaSummary]:
        collection = await self._get_collection("/manga", params)
        try:
            return [manga_from_raw(RawManga(**entry), self.uploads_url) for entry in collection.data]
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected manga entry: {e.errors()[0]['msg']}") from e

    # --- One-shot requests ---

    async def get_popular_manga(self, limit: int = POPULAR_LIMIT) -> List[MangaSummary]:
        return await self._get_manga_list({
            "limit": limit,
            "order[rating]": "desc",
            "includes[]": "cover_art",
        })

    async def search_manga(self, title: str, limit: int = SEARCH_LIMIT) -> List[MangaSummary]:
        if not title or not title.strip():
            return []
        return await self._get_manga_list({
            "title": title.strip(),
            "limit": limit,
            "includes[]": "cover_art",
        })

    async def list_manga_by_tag(self, tag_id: str, limit: int = GENRE_LIMIT) -> List[MangaSummary]:
        return await self._get_manga_list({
            "includedTags[]": tag_id,
            "limit": limit,
            "includes[]": "cover_art",
        })

    async def get_chapter_pages(self, chapter_id: str) -> ChapterPages:
        payload = await self._request("GET", f"/at-home/server/{chapter_id}")
        try:
            at_home = AtHomeResponse(**payload)
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected at-home response: {e.errors()[0]['msg']}",
                                         response_data=payload) from e
        return ChapterPages(
            chapter_id=chapter_id,
            base_url=at_home.baseUrl.rstrip('/'),
            hash=at_home.chapter.hash,
            files=at_home.chapter.data,
        )

    # --- Paginated listing ---

    async def list_chapters(self, chapter_filter: ChapterFilter, offset: int = 0,
                            limit: int = DEFAULT_PAGE_SIZE) -> PageResult:
        """
        Fetches one page of a manga's chapters in one translation language,
        ordered by chapter number. Matches the fetch signature expected by
        ``ListingSynchronizer``.
        """
        collection = await self._get_collection("/chapter", {
            "manga": chapter_filter.manga_id,
            "translatedLanguage[]": chapter_filter.language,
            "order[chapter]": "asc",
            "limit": limit,
            "offset": offset,
        })
        try:
            chapters = [chapter_from_raw(RawChapter(**entry)) for entry in collection.data]
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected chapter entry: {e.errors()[0]['msg']}") from e
        logger.debug(f"list_chapters: {len(chapters)} chapter(s) for {chapter_filter.manga_id} "
                     f"[{chapter_filter.language}] at offset {offset}")
        return PageResult.from_items(chapters, limit)

#
# End of client.py
########################################################################################################################
