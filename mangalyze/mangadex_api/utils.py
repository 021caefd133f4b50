# mangalyze/mangadex_api/utils.py
#
#
# Imports
from typing import Optional, List
#
# Local Imports
from ..Constants import NO_CHAPTER_NUMBER, UNTITLED
from ..Pagination import SyncErrorKind
from .exceptions import APIConnectionError
from .schemas import RawManga, RawChapter, RawRelationship, MangaSummary, ChapterItem
#
#######################################################################################################################
#
# Functions:

def build_cover_url(uploads_url: str, manga_id: str, relationships: List[RawRelationship]) -> Optional[str]:
    """
    Returns the 256px thumbnail URL of the first cover_art relationship,
    or None when the manga was fetched without one.
    """
    for rel in relationships:
        if rel.type != "cover_art":
            continue
        file_name = (rel.attributes or {}).get("fileName")
        if file_name:
            return f"{uploads_url.rstrip('/')}/covers/{manga_id}/{file_name}.256.jpg"
    return None

def manga_from_raw(raw: RawManga, uploads_url: str) -> MangaSummary:
    return MangaSummary(
        id=raw.id,
        title=raw.attributes.title.get("en") or UNTITLED,
        cover_url=build_cover_url(uploads_url, raw.id, raw.relationships),
    )

def chapter_from_raw(raw: RawChapter) -> ChapterItem:
    return ChapterItem(
        id=raw.id,
        chapter=raw.attributes.chapter or NO_CHAPTER_NUMBER,
        title=raw.attributes.title or "",
        language=raw.attributes.translatedLanguage,
    )

def classify_api_error(error: BaseException) -> SyncErrorKind:
    """Maps client exceptions onto the listing error kinds. Non-2xx answers count as uninterpretable."""
    if isinstance(error, (APIConnectionError, ConnectionError, TimeoutError)):
        return SyncErrorKind.NETWORK_FAILURE
    return SyncErrorKind.MALFORMED_RESPONSE

#
# End of utils.py
#######################################################################################################################
