# mangalyze/UI/Reader_Window.py
#
#
# Imports
from typing import Optional
#
# Third-party Libraries
from loguru import logger
from textual import work
from textual.app import ComposeResult
from textual.containers import Container
from textual.widgets import Label, ListView, LoadingIndicator, Static
#
# Local Imports
from ..Widgets.custom_list_items import PageListItem
from ..mangadex_api import ChapterItem, MangaDexClient, MangaDexAPIError
#
########################################################################################################################
#
# Functions:

class ReaderWindow(Container):
    """Lists the page images of one chapter in reading order."""

    def __init__(self, client: MangaDexClient, **kwargs):
        super().__init__(**kwargs)
        self.client = client
        self.chapter: Optional[ChapterItem] = None

    def compose(self) -> ComposeResult:
        yield Label("Select a chapter on the Chapters tab.", id="reader-title", classes="section-title")
        yield LoadingIndicator(id="reader-loading")
        yield Static("", id="reader-error", classes="error-label")
        yield ListView(id="reader-pages")

    def on_mount(self) -> None:
        self.query_one("#reader-loading", LoadingIndicator).display = False
        self.query_one("#reader-error", Static).display = False

    def open_chapter(self, chapter: ChapterItem, manga_title: Optional[str] = None) -> None:
        self.chapter = chapter
        title = f"{manga_title}: {chapter.display_label}" if manga_title else chapter.display_label
        self.query_one("#reader-title", Label).update(title)
        self.query_one("#reader-loading", LoadingIndicator).display = True
        self.query_one("#reader-error", Static).display = False
        self._load_pages(chapter.id)

    @work(exclusive=True, group="reader-fetch")
    async def _load_pages(self, chapter_id: str) -> None:
        list_view = self.query_one("#reader-pages", ListView)
        await list_view.clear()
        try:
            pages = await self.client.get_chapter_pages(chapter_id)
        except MangaDexAPIError as e:
            logger.error(f"Could not load pages of chapter {chapter_id}: {e}")
            self.query_one("#reader-loading", LoadingIndicator).display = False
            error_widget = self.query_one("#reader-error", Static)
            error_widget.update(f"Could not load pages: {e}")
            error_widget.display = True
            return
        self.query_one("#reader-loading", LoadingIndicator).display = False

        page_urls = pages.page_urls
        logger.info(f"Chapter {chapter_id} has {len(page_urls)} page(s)")
        await list_view.extend([PageListItem(number, url) for number, url in enumerate(page_urls, start=1)])

#
# End of Reader_Window.py
########################################################################################################################
