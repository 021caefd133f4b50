# mangalyze/UI/Home_Window.py
#
#
# Imports
from typing import Awaitable, Callable, List, Optional
#
# Third-party Libraries
from loguru import logger
from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, Input, Label, ListView, LoadingIndicator, Static
#
# Local Imports
from ..Constants import GENRES
from ..Event_Handlers.listing_events import MangaSelected
from ..Widgets.custom_list_items import MangaListItem
from ..mangadex_api import MangaDexClient, MangaDexAPIError, MangaSummary
#
########################################################################################################################
#
# Functions:

class HomeWindow(Container):
    """Popular titles, title search and genre shortcuts. Every fetch here is a single request."""

    def __init__(self, client: MangaDexClient, **kwargs):
        super().__init__(**kwargs)
        self.client = client

    def compose(self) -> ComposeResult:
        yield Input(placeholder="Search manga...", id="home-search")
        yield Label("Recommended", id="home-section-title", classes="section-title")
        with Horizontal(id="home-genres"):
            for genre_name, tag_id in GENRES:
                yield Button(genre_name, id=f"genre-{tag_id}", classes="genre-button")
        yield LoadingIndicator(id="home-loading")
        yield Static("", id="home-error", classes="error-label")
        yield ListView(id="home-manga-list", classes="manga-list")

    def on_mount(self) -> None:
        self.query_one("#home-error", Static).display = False
        self.show_popular()

    def show_popular(self) -> None:
        self._load("Recommended", self.client.get_popular_manga)

    @on(Input.Submitted, "#home-search")
    def handle_search_submitted(self, event: Input.Submitted) -> None:
        query = event.value.strip()
        if not query:
            self.show_popular()
            return
        self._load(f"Results for '{query}'", lambda: self.client.search_manga(query))

    @on(Input.Changed, "#home-search")
    def handle_search_cleared(self, event: Input.Changed) -> None:
        if not event.value.strip():
            self.show_popular()

    @on(Button.Pressed, ".genre-button")
    def handle_genre_pressed(self, event: Button.Pressed) -> None:
        tag_id = (event.button.id or "").replace("genre-", "", 1)
        genre_name = str(event.button.label)
        self._load(genre_name, lambda: self.client.list_manga_by_tag(tag_id))

    @on(ListView.Selected, "#home-manga-list")
    def handle_manga_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, MangaListItem):
            self.post_message(MangaSelected(event.item.manga))

    def _load(self, section_title: str, request: Callable[[], Awaitable[List[MangaSummary]]]) -> None:
        self.query_one("#home-section-title", Label).update(section_title)
        self.query_one("#home-loading", LoadingIndicator).display = True
        self.query_one("#home-error", Static).display = False
        self._run_request(request)

    @work(exclusive=True, group="home-fetch")
    async def _run_request(self, request: Callable[[], Awaitable[List[MangaSummary]]]) -> None:
        error: Optional[str] = None
        mangas: List[MangaSummary] = []
        try:
            mangas = await request()
        except MangaDexAPIError as e:
            logger.error(f"Home window request failed: {e}")
            error = str(e)
        self.query_one("#home-loading", LoadingIndicator).display = False

        list_view = self.query_one("#home-manga-list", ListView)
        await list_view.clear()
        if error:
            error_widget = self.query_one("#home-error", Static)
            error_widget.update(f"Could not load titles: {error}")
            error_widget.display = True
            return
        await list_view.extend([MangaListItem(manga) for manga in mangas])

#
# End of Home_Window.py
########################################################################################################################
