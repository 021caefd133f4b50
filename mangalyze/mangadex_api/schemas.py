# mangalyze/mangadex_api/schemas.py
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field

from ..Constants import DEFAULT_LANGUAGE, NO_CHAPTER_NUMBER, UNTITLED


# --- Filter keys ---
class ChapterFilter(BaseModel):
    """Identifies one chapter listing. Frozen so it compares and hashes by value."""
    model_config = ConfigDict(frozen=True)

    manga_id: str
    language: str = DEFAULT_LANGUAGE


# --- Client-facing models ---
class MangaSummary(BaseModel):
    id: str
    title: str = UNTITLED
    cover_url: Optional[str] = None

class ChapterItem(BaseModel):
    id: str
    chapter: str = NO_CHAPTER_NUMBER
    title: str = ""
    language: Optional[str] = None

    @property
    def display_label(self) -> str:
        label = f"Chapter {self.chapter}"
        return f"{label} - {self.title}" if self.title else label

class ChapterPages(BaseModel):
    chapter_id: str
    base_url: str
    hash: str
    files: List[str] = Field(default_factory=list)

    @property
    def page_urls(self) -> List[str]:
        # Order matches the server's file list, which is reading order.
        return [f"{self.base_url}/data/{self.hash}/{file_name}" for file_name in self.files]


# --- Wire models (mirror the parts of the API responses we read) ---
class RawRelationship(BaseModel):
    id: Optional[str] = None
    type: str
    attributes: Optional[Dict[str, Any]] = None

class RawMangaAttributes(BaseModel):
    title: Dict[str, Optional[str]] = Field(default_factory=dict)

class RawManga(BaseModel):
    id: str
    attributes: RawMangaAttributes = Field(default_factory=RawMangaAttributes)
    relationships: List[RawRelationship] = Field(default_factory=list)

class RawChapterAttributes(BaseModel):
    chapter: Optional[str] = None
    title: Optional[str] = None
    translatedLanguage: Optional[str] = None

class RawChapter(BaseModel):
    id: str
    attributes: RawChapterAttributes = Field(default_factory=RawChapterAttributes)

class CollectionResponse(BaseModel):
    result: str
    data: List[Dict[str, Any]]
    limit: Optional[int] = None
    offset: Optional[int] = None
    total: Optional[int] = None

class AtHomeChapter(BaseModel):
    hash: str
    data: List[str]

class AtHomeResponse(BaseModel):
    result: str = "ok"
    baseUrl: str
    chapter: AtHomeChapter
