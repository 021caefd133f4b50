# mangalyze - Textual catalog browser and chapter reader
# Description: Main application: tab navigation between the catalog windows and their shared API client.
#
# Imports
from typing import Optional
#
# 3rd-Party Libraries
from loguru import logger as loguru_logger
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.css.query import QueryError
from textual.reactive import reactive
from textual.widgets import Button, Header
#
# Local Imports
from .Constants import ALL_TABS, TAB_HOME, TAB_CHAPTERS, TAB_READER, css_content
from .Event_Handlers.listing_events import MangaSelected, ChapterSelected
from .Logging_Config import RichLogSink, configure_application_logging
from .UI.Chapters_Window import ChaptersWindow
from .UI.Home_Window import HomeWindow
from .UI.Logs_Window import LogsWindow
from .UI.Reader_Window import ReaderWindow
from .UI.Tab_Bar import TabBar
from .config import get_api_settings, get_listing_settings, save_setting_to_cli_config
from .mangadex_api import MangaDexClient
#
#######################################################################################################################
#
# Functions:

class MangalyzeApp(App[None]):
    """Browse a manga catalog, page through a title's chapters and list a chapter's pages."""

    TITLE = "mangalyze"
    CSS = css_content
    BINDINGS = [Binding("ctrl+q", "quit", "Quit App", show=True)]

    current_tab: reactive[str] = reactive("")

    def __init__(self, client: Optional[MangaDexClient] = None, **kwargs):
        super().__init__(**kwargs)
        self.api_settings = get_api_settings()
        self.listing_settings = get_listing_settings()
        self.client = client or MangaDexClient(
            base_url=self.api_settings["base_url"],
            uploads_url=self.api_settings["uploads_url"],
            timeout=self.api_settings["timeout"],
        )
        self._rich_log_sink: Optional[RichLogSink] = None
        self._ui_ready = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield TabBar(tab_ids=ALL_TABS, initial_active_tab=TAB_HOME)
        with Container(id="content"):
            yield HomeWindow(self.client, id="home-window", classes="window")
            yield ChaptersWindow(
                self.client.list_chapters,
                page_size=self.listing_settings["page_size"],
                default_language=self.listing_settings["default_language"],
                load_more_threshold=self.listing_settings["load_more_threshold"],
                on_language_changed=self._remember_language,
                id="chapters-window",
                classes="window",
            )
            yield ReaderWindow(self.client, id="reader-window", classes="window")
            yield LogsWindow(id="logs-window", classes="window")

    def on_mount(self) -> None:
        self._rich_log_sink = configure_application_logging(self)
        for tab_id in ALL_TABS:
            try:
                self.query_one(f"#{tab_id}-window").display = False
            except QueryError:
                loguru_logger.warning(f"Window for tab '{tab_id}' not found during mount")
        self._ui_ready = True
        self.current_tab = TAB_HOME
        loguru_logger.info("mangalyze UI ready")

    async def on_unmount(self) -> None:
        await self.client.close()
        if self._rich_log_sink:
            await self._rich_log_sink.stop_processor()

    def watch_current_tab(self, old_tab: Optional[str], new_tab: str) -> None:
        """Shows/hides the relevant content window when the tab changes."""
        if not new_tab or not self._ui_ready:
            return
        loguru_logger.debug(f"Switching tab from '{old_tab}' to '{new_tab}'")
        if old_tab and old_tab != new_tab:
            try:
                self.query_one(f"#tab-{old_tab}", Button).remove_class("-active")
                self.query_one(f"#{old_tab}-window").display = False
            except QueryError:
                loguru_logger.warning(f"Could not hide tab '{old_tab}'")
        try:
            self.query_one(f"#tab-{new_tab}", Button).add_class("-active")
            self.query_one(f"#{new_tab}-window").display = True
        except QueryError:
            loguru_logger.error(f"Could not show tab '{new_tab}'")

    @on(Button.Pressed, ".tab-button")
    def handle_tab_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id and event.button.id.startswith("tab-"):
            self.current_tab = event.button.id[len("tab-"):]

    @on(MangaSelected)
    def handle_manga_selected(self, event: MangaSelected) -> None:
        loguru_logger.info(f"Opening chapters of '{event.manga.title}' ({event.manga.id})")
        # Show the window first so the list has a size when the first page renders.
        self.current_tab = TAB_CHAPTERS
        self.query_one(ChaptersWindow).open_manga(event.manga)

    @on(ChapterSelected)
    def handle_chapter_selected(self, event: ChapterSelected) -> None:
        loguru_logger.info(f"Opening reader for chapter {event.chapter.id}")
        self.current_tab = TAB_READER
        self.query_one(ReaderWindow).open_chapter(event.chapter, event.manga_title)

    def _remember_language(self, language: str) -> None:
        save_setting_to_cli_config("listing", "default_language", language)


def main() -> None:
    app_instance = MangalyzeApp()
    try:
        app_instance.run()
    except Exception:
        loguru_logger.exception("--- CRITICAL ERROR DURING app.run() ---")
        raise

if __name__ == "__main__":
    main()

#
# End of app.py
#######################################################################################################################
