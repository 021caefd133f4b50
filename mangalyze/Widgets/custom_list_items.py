from textual.widgets import ListItem, Label

from ..mangadex_api import ChapterItem, MangaSummary

class MangaListItem(ListItem):
    def __init__(self, manga: MangaSummary, **kwargs):
        super().__init__(Label(manga.title), **kwargs)
        self.manga: MangaSummary = manga

class ChapterListItem(ListItem):
    def __init__(self, chapter: ChapterItem, **kwargs):
        super().__init__(Label(chapter.display_label), **kwargs)
        self.chapter: ChapterItem = chapter

class PageListItem(ListItem):
    def __init__(self, page_number: int, page_url: str, **kwargs):
        super().__init__(Label(f"{page_number:>3}. {page_url}"), **kwargs)
        self.page_number: int = page_number
        self.page_url: str = page_url
