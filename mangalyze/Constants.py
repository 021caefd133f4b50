# Constants.py
# Description: Constants for the application
#
# Imports
#
# 3rd-Party Imports
#
# Local Imports
#
########################################################################################################################
#
# Functions:

# --- Catalog service ---
DEFAULT_API_BASE_URL = "https://api.mangadex.org"
DEFAULT_UPLOADS_BASE_URL = "https://uploads.mangadex.org"
DEFAULT_API_TIMEOUT = 30.0

# --- Listing defaults ---
DEFAULT_PAGE_SIZE = 100
DEFAULT_LANGUAGE = "en"
POPULAR_LIMIT = 10
SEARCH_LIMIT = 15
GENRE_LIMIT = 15
# Fraction of a viewport height from the end that counts as "near the end".
DEFAULT_LOAD_MORE_THRESHOLD = 0.5
UNTITLED = "Untitled"
NO_CHAPTER_NUMBER = "N/A"

CHAPTER_LANGUAGES = [
    ("Portuguese (pt-br)", "pt-br"),
    ("English (en)", "en"),
    ("Spanish (es)", "es"),
    ("Japanese (ja)", "ja"),
    ("French (fr)", "fr"),
]

# (label, MangaDex tag id)
GENRES = [
    ("Action", "391b0423-d847-456f-aff0-8b0cfc03066b"),
    ("Comedy", "4d32cc48-9f00-4cca-9b5a-a839f0764984"),
    ("Fantasy", "cdc58593-87dd-415e-bbc0-2ec27bf404cc"),
    ("Romance", "423e2eae-a7a2-4a8b-ac03-a8351462d71d"),
    ("Horror", "cdad7e68-1419-41dd-bdce-27753074a640"),
]

# --- Tabs ---
TAB_HOME = "home"
TAB_CHAPTERS = "chapters"
TAB_READER = "reader"
TAB_LOGS = "logs"
ALL_TABS = [TAB_HOME, TAB_CHAPTERS, TAB_READER, TAB_LOGS]
TAB_LABELS = {
    TAB_HOME: "Catalog",
    TAB_CHAPTERS: "Chapters",
    TAB_READER: "Reader",
    TAB_LOGS: "Logs",
}


# --- CSS definition ---
css_content = """
Screen { layout: vertical; }
Header { dock: top; height: 1; background: $accent-darken-1; }
#tabs { dock: top; height: 3; background: $background; padding: 0 1; }
#tabs Button { width: 1fr; height: 100%; border: none; background: $panel; color: $text-muted; }
#tabs Button:hover { background: $panel-lighten-1; color: $text; }
#tabs Button.-active { background: $accent; color: $text; text-style: bold; border: none; }
#content { height: 1fr; width: 100%; }
.window { height: 100%; width: 100%; layout: vertical; padding: 0 1; }
.section-title { text-style: bold; margin: 1 0 0 0; }
.status-label { color: $text-muted; height: 1; }
.error-label { color: $error; height: auto; }
.manga-list { height: 1fr; border: round $primary-background; }
#home-genres { height: 3; }
#home-genres Button { margin: 0 1 0 0; min-width: 10; }
#chapters-list { height: 1fr; border: round $primary-background; }
#chapters-language { width: 40; }
#reader-pages { height: 1fr; border: round $primary-background; }
#app-log-display { height: 1fr; border: round $primary-background; }
"""

#
# End of Constants.py
########################################################################################################################
