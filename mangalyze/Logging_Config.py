# Logging_Config.py
# Description: Configuration for logging
#
# Imports
import asyncio
import logging
import sys
from typing import Optional
#
# 3rd-Party Imports
from loguru import logger as loguru_logger
from textual.app import App
from textual.css.query import QueryError
from textual.widgets import RichLog
#
# Local Imports
from .config import get_cli_log_file_path, get_cli_setting
#
########################################################################################################################
#
# Functions:

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} [{level:<8}] {name}:{line:<4} : {message}"


# --- Stdlib -> loguru bridge ---
class InterceptHandler(logging.Handler):
    """Forwards records from the standard logging module (httpx, textual, ...) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk past the logging module's own frames so loguru reports the real caller.
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


# --- In-app log pane sink ---
class RichLogSink:
    """
    Loguru sink that feeds formatted messages into a RichLog widget.

    Messages go through an asyncio queue drained by a task on the app's loop,
    so emitting from any thread is safe.
    """

    def __init__(self, rich_log_widget: RichLog):
        self.rich_log_widget = rich_log_widget
        self.log_queue: asyncio.Queue = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._queue_processor_task: Optional[asyncio.Task] = None

    def start_processor(self) -> None:
        """Starts the queue processing task on the running loop."""
        if self._queue_processor_task and not self._queue_processor_task.done():
            return
        self._loop = asyncio.get_running_loop()
        self._queue_processor_task = self._loop.create_task(self._process_log_queue(), name="RichLogProcessor")

    async def stop_processor(self) -> None:
        if self._queue_processor_task and not self._queue_processor_task.done():
            self._queue_processor_task.cancel()
            try:
                await self._queue_processor_task
            except asyncio.CancelledError:
                pass
        self._queue_processor_task = None

    async def _process_log_queue(self) -> None:
        while True:
            message = await self.log_queue.get()
            if self.rich_log_widget.is_mounted:
                self.rich_log_widget.write(message)
            self.log_queue.task_done()

    def __call__(self, message) -> None:
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self.log_queue.put_nowait, str(message).rstrip("\n"))


def configure_application_logging(app_instance: App) -> Optional[RichLogSink]:
    """
    Sets up all logging sinks: a rotating file, the Logs window pane (when present),
    and the stdlib bridge. Returns the pane sink so the app can stop it on exit.
    """
    log_level = str(get_cli_setting("logging", "log_level", "INFO")).upper()
    file_log_level = str(get_cli_setting("logging", "file_log_level", "DEBUG")).upper()

    loguru_logger.remove()

    log_file_path = get_cli_log_file_path()
    try:
        loguru_logger.add(
            str(log_file_path),
            level=file_log_level,
            format=LOG_FORMAT,
            rotation="2 MB",
            retention=3,
            encoding="utf-8",
        )
    except (OSError, ValueError) as e:
        loguru_logger.add(sys.stderr, level="WARNING", format=LOG_FORMAT)
        loguru_logger.warning(f"File logging disabled, could not open {log_file_path}: {e}")

    rich_log_sink: Optional[RichLogSink] = None
    try:
        log_widget = app_instance.query_one("#app-log-display", RichLog)
        rich_log_sink = RichLogSink(log_widget)
        rich_log_sink.start_processor()
        loguru_logger.add(rich_log_sink, level=log_level, format=LOG_FORMAT, colorize=False)
    except QueryError:
        loguru_logger.warning("Log display widget not found; in-app log pane disabled.")

    logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO, force=True)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    loguru_logger.info(f"Logging configured: pane level {log_level}, file {log_file_path} at {file_log_level}")
    return rich_log_sink

#
# End of Logging_Config.py
#######################################################################################################################
