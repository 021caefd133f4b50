# mangalyze/Pagination/sync_state.py
# Description: Value types shared by the listing synchronizer and its consumers.
#
# Imports
import enum
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional, Sequence, Tuple
#
#######################################################################################################################
#
# Classes:

class SyncErrorKind(str, enum.Enum):
    """Why a listing stopped early. A natural end of data is not an error and has no kind."""
    NETWORK_FAILURE = "network_failure"
    MALFORMED_RESPONSE = "malformed_response"


class ListingStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING_INITIAL = "loading_initial"
    LOADING_MORE = "loading_more"
    READY = "ready"


@dataclass(frozen=True)
class SyncError:
    kind: SyncErrorKind
    message: str


@dataclass(frozen=True)
class PageResult:
    """One page returned by a fetch collaborator."""
    items: Tuple[Any, ...] = ()
    # True when the page came back with exactly the requested number of items.
    # The catalog exposes no total count, so a full page is the only hint that more exist.
    was_full: bool = False

    @classmethod
    def from_items(cls, items: Sequence[Any], page_size: int) -> "PageResult":
        items = tuple(items)
        return cls(items=items, was_full=len(items) == page_size)


@dataclass(frozen=True)
class SyncState:
    """
    Immutable snapshot of one listing.

    A new snapshot is produced on every transition; consumers may keep old
    snapshots around without them changing underneath.
    """
    sequence: Tuple[Any, ...] = ()
    next_offset: int = 0
    has_more: bool = True
    is_loading_initial: bool = False
    is_loading_more: bool = False
    active_filter_key: Optional[Any] = None
    generation: int = 0
    error: Optional[SyncError] = field(default=None)

    @property
    def status(self) -> ListingStatus:
        if self.generation == 0:
            return ListingStatus.IDLE
        if self.is_loading_initial:
            return ListingStatus.LOADING_INITIAL
        if self.is_loading_more:
            return ListingStatus.LOADING_MORE
        return ListingStatus.READY

    @property
    def is_loading(self) -> bool:
        return self.is_loading_initial or self.is_loading_more

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["sequence"] = list(self.sequence)
        data["status"] = self.status.value
        if self.error is not None:
            data["error"] = {"kind": self.error.kind.value, "message": self.error.message}
        return data

#
# End of sync_state.py
#######################################################################################################################
