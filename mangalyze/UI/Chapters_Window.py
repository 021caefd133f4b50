# mangalyze/UI/Chapters_Window.py
#
#
# Imports
from typing import Callable, Optional
#
# Third-party Libraries
from loguru import logger
from textual import on
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, Label, ListView, LoadingIndicator, Select, Static
#
# Local Imports
from ..Constants import CHAPTER_LANGUAGES, DEFAULT_LANGUAGE, DEFAULT_LOAD_MORE_THRESHOLD, DEFAULT_PAGE_SIZE
from ..Event_Handlers.listing_events import (
    ListingUpdated, ChapterSelected, is_near_end, is_highlight_near_end,
)
from ..Pagination import ListingSynchronizer, SyncErrorKind, SyncState
from ..Pagination.listing_sync import FetchPage
from ..Widgets.custom_list_items import ChapterListItem
from ..mangadex_api import ChapterFilter, MangaSummary, classify_api_error
#
########################################################################################################################
#
# Functions:

ERROR_MESSAGES = {
    SyncErrorKind.NETWORK_FAILURE: "Could not reach the catalog.",
    SyncErrorKind.MALFORMED_RESPONSE: "The catalog sent a response that could not be read.",
}


class ChaptersWindow(Container):
    """
    Chapter listing of one title, paged on demand as the user scrolls.

    All paging state lives in a ``ListingSynchronizer``; this window only turns
    UI events into its two triggers and renders the snapshots it publishes.
    """

    def __init__(self,
                 fetch_page: FetchPage,
                 page_size: int = DEFAULT_PAGE_SIZE,
                 default_language: str = DEFAULT_LANGUAGE,
                 load_more_threshold: float = DEFAULT_LOAD_MORE_THRESHOLD,
                 on_language_changed: Optional[Callable[[str], None]] = None,
                 **kwargs):
        super().__init__(**kwargs)
        self.synchronizer = ListingSynchronizer(
            fetch_page,
            page_size=page_size,
            error_classifier=classify_api_error,
        )
        known_languages = {code for _, code in CHAPTER_LANGUAGES}
        self.language = default_language if default_language in known_languages else DEFAULT_LANGUAGE
        self.load_more_threshold = load_more_threshold
        self.manga: Optional[MangaSummary] = None
        self._on_language_changed = on_language_changed
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._rendered_generation = 0
        self._rendered_count = 0

    def compose(self) -> ComposeResult:
        yield Label("Select a title on the Home tab.", id="chapters-title", classes="section-title")
        with Horizontal(id="chapters-toolbar"):
            yield Select(CHAPTER_LANGUAGES, value=self.language, allow_blank=False, id="chapters-language")
            yield Button("Retry", id="chapters-retry")
        yield LoadingIndicator(id="chapters-loading")
        yield Static("", id="chapters-error", classes="error-label")
        yield Static("No chapters found for this language.", id="chapters-empty", classes="status-label")
        yield ListView(id="chapters-list")
        yield Label("", id="chapters-footer", classes="status-label")

    def on_mount(self) -> None:
        self._unsubscribe = self.synchronizer.subscribe(lambda snapshot: self.post_message(ListingUpdated(snapshot)))
        list_view = self.query_one("#chapters-list", ListView)
        self.watch(list_view, "scroll_y", self._on_list_scrolled, init=False)
        self.query_one("#chapters-loading", LoadingIndicator).display = False
        self.query_one("#chapters-error", Static).display = False
        self.query_one("#chapters-empty", Static).display = False
        self.query_one("#chapters-retry", Button).display = False

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        self.synchronizer.close()

    # --- Triggers ---

    def open_manga(self, manga: MangaSummary) -> None:
        self.manga = manga
        self.query_one("#chapters-title", Label).update(manga.title)
        self._start_listing()

    def _start_listing(self, force: bool = False) -> None:
        if self.manga is None:
            return
        chapter_filter = ChapterFilter(manga_id=self.manga.id, language=self.language)
        logger.info(f"Listing chapters of '{self.manga.title}' in '{self.language}' (force={force})")
        self.synchronizer.start_listing(chapter_filter, force=force)

    def load_more_if_near_end(self) -> None:
        list_view = self.query_one("#chapters-list", ListView)
        if list_view.size.height == 0:
            return  # hidden or not laid out yet
        if is_near_end(list_view.scroll_y, list_view.max_scroll_y, list_view.size.height, self.load_more_threshold):
            self.synchronizer.request_next_page()

    def _on_list_scrolled(self, scroll_y: float) -> None:
        self.load_more_if_near_end()

    @on(Select.Changed, "#chapters-language")
    def handle_language_changed(self, event: Select.Changed) -> None:
        if event.value is Select.BLANK or event.value == self.language:
            return
        self.language = str(event.value)
        if self._on_language_changed:
            self._on_language_changed(self.language)
        self._start_listing()

    @on(Button.Pressed, "#chapters-retry")
    def handle_retry(self) -> None:
        self._start_listing(force=True)

    @on(ListView.Highlighted, "#chapters-list")
    def handle_highlighted(self, event: ListView.Highlighted) -> None:
        if is_highlight_near_end(event.list_view.index, len(event.list_view.children)):
            self.synchronizer.request_next_page()

    @on(ListView.Selected, "#chapters-list")
    def handle_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, ChapterListItem):
            self.post_message(ChapterSelected(event.item.chapter, self.manga.title if self.manga else None))

    # --- Rendering ---

    @on(ListingUpdated)
    async def handle_listing_updated(self, message: ListingUpdated) -> None:
        message.stop()
        await self.render_snapshot(message.snapshot)

    async def render_snapshot(self, snapshot: SyncState) -> None:
        list_view = self.query_one("#chapters-list", ListView)
        # Within one generation the sequence only grows, so only the tail needs mounting.
        if snapshot.generation != self._rendered_generation or len(snapshot.sequence) < self._rendered_count:
            await list_view.clear()
            self._rendered_generation = snapshot.generation
            self._rendered_count = 0
        new_chapters = snapshot.sequence[self._rendered_count:]
        if new_chapters:
            await list_view.extend([ChapterListItem(chapter) for chapter in new_chapters])
            self._rendered_count = len(snapshot.sequence)

        self.query_one("#chapters-loading", LoadingIndicator).display = snapshot.is_loading_initial
        error_widget = self.query_one("#chapters-error", Static)
        error_widget.display = snapshot.error is not None
        self.query_one("#chapters-retry", Button).display = snapshot.error is not None
        if snapshot.error is not None:
            error_widget.update(f"{ERROR_MESSAGES[snapshot.error.kind]} ({snapshot.error.message})")
        self.query_one("#chapters-empty", Static).display = (
            not snapshot.is_loading and snapshot.error is None and not snapshot.sequence and snapshot.generation > 0
        )

        footer = self.query_one("#chapters-footer", Label)
        if snapshot.is_loading_more:
            footer.update("Loading more...")
        elif snapshot.sequence and not snapshot.has_more:
            footer.update(f"{len(snapshot.sequence)} chapters")
        else:
            footer.update("")

        # A first page that fits on screen leaves nothing to scroll; check once layout settles.
        if snapshot.has_more and not snapshot.is_loading:
            self.call_after_refresh(self.load_more_if_near_end)

#
# End of Chapters_Window.py
########################################################################################################################
