# Tab_Bar.py
# Description: Row of buttons switching between the catalog, chapters, reader and logs windows
#
# Imports
from typing import List
#
# Third-Party Imports
from textual.app import ComposeResult
from textual.containers import Horizontal, HorizontalScroll
from textual.widgets import Button
#
# Local Imports
from ..Constants import TAB_LABELS
#
#######################################################################################################################
#
# Functions:

class TabBar(Horizontal):
    """One button per window. The app listens for presses on ``.tab-button``."""

    def __init__(self, tab_ids: List[str], initial_active_tab: str, **kwargs):
        kwargs.setdefault("id", "tabs-outer-container")
        super().__init__(**kwargs)
        self.tab_ids = tab_ids
        self.initial_active_tab = initial_active_tab

    def compose(self) -> ComposeResult:
        with HorizontalScroll(id="tabs"):
            for tab_id in self.tab_ids:
                classes = "tab-button -active" if tab_id == self.initial_active_tab else "tab-button"
                yield Button(TAB_LABELS.get(tab_id, tab_id.capitalize()), id=f"tab-{tab_id}", classes=classes)

#
# End of Tab_Bar.py
#######################################################################################################################
