# Logs_Window.py
# Description: This file contains the UI functions for the Logs tab
#
# Imports
#
# 3rd-Party Imports
from textual import on
from textual.app import ComposeResult
from textual.containers import Container
from textual.widgets import RichLog, Button
#
#######################################################################################################################
#
# Functions:

class LogsWindow(Container):
    """
    Container for the Logs Tab's UI. The RichLog is fed by the loguru sink set up in Logging_Config.
    """
    DEFAULT_CSS = """
    LogsWindow {
        layout: vertical;
    }
    """

    def compose(self) -> ComposeResult:
        yield RichLog(id="app-log-display", wrap=True, highlight=True, markup=False, auto_scroll=True)
        yield Button("Copy All Logs to Clipboard", id="copy-logs-button", classes="logs-action-button")

    @on(Button.Pressed, "#copy-logs-button")
    def handle_copy_logs(self) -> None:
        log_widget = self.query_one("#app-log-display", RichLog)
        all_text = "\n".join(strip.text for strip in log_widget.lines)
        self.app.copy_to_clipboard(all_text)
        self.app.notify(f"Copied {len(log_widget.lines)} log lines to the clipboard.")

#
# End of Logs_Window.py
#######################################################################################################################
