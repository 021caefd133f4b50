from .client import MangaDexClient
from .exceptions import (
    MangaDexAPIError, APIConnectionError, APIResponseError, MalformedResponseError
)
from .schemas import (
    ChapterFilter, MangaSummary, ChapterItem, ChapterPages
)
from .utils import classify_api_error

__all__ = [
    "MangaDexClient",
    "MangaDexAPIError", "APIConnectionError", "APIResponseError", "MalformedResponseError",
    "ChapterFilter", "MangaSummary", "ChapterItem", "ChapterPages",
    "classify_api_error",
]
