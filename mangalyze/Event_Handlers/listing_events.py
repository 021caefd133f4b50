# listing_events.py
# Description: Messages exchanged between the catalog windows, and the scroll-proximity rules
#              that turn view events into listing triggers.
#
# Imports
from typing import Optional
#
# 3rd-Party Imports
from textual.message import Message
#
# Local Imports
from ..Constants import DEFAULT_LOAD_MORE_THRESHOLD
from ..Pagination import SyncState
from ..mangadex_api import ChapterItem, MangaSummary
#
########################################################################################################################
#
# Messages:

class ListingUpdated(Message):
    """Posted by a window to itself whenever its synchronizer publishes a new snapshot."""
    bubble = False

    def __init__(self, snapshot: SyncState) -> None:
        super().__init__()
        self.snapshot = snapshot

class MangaSelected(Message):
    """A title was chosen on the home window."""
    def __init__(self, manga: MangaSummary) -> None:
        super().__init__()
        self.manga = manga

class ChapterSelected(Message):
    """A chapter was chosen on the chapters window."""
    def __init__(self, chapter: ChapterItem, manga_title: Optional[str] = None) -> None:
        super().__init__()
        self.chapter = chapter
        self.manga_title = manga_title

#
# Functions:

def is_near_end(scroll_y: float, max_scroll_y: float, viewport_height: float,
                threshold: float = DEFAULT_LOAD_MORE_THRESHOLD) -> bool:
    """
    True when the remaining scroll distance is within ``threshold`` viewport heights.

    A list that does not scroll at all counts as near the end, so a short first
    page still lets the user reach the next one.
    """
    if max_scroll_y <= 0:
        return True
    remaining = max_scroll_y - scroll_y
    return remaining <= max(viewport_height, 1) * threshold

def is_highlight_near_end(index: Optional[int], total: int, rows_from_end: int = 5) -> bool:
    """Keyboard navigation equivalent of ``is_near_end``."""
    if index is None or total == 0:
        return False
    return index >= total - rows_from_end

#
# End of listing_events.py
########################################################################################################################
