from .listing_sync import ListingSynchronizer, default_error_classifier
from .sync_state import ListingStatus, PageResult, SyncError, SyncErrorKind, SyncState

__all__ = [
    "ListingSynchronizer", "default_error_classifier",
    "ListingStatus", "PageResult", "SyncError", "SyncErrorKind", "SyncState",
]
