# mangalyze/Pagination/listing_sync.py
# Description: Incremental synchronizer for offset-paginated remote listings.
#
# Imports
import asyncio
import operator
from collections import deque
from dataclasses import replace
from typing import Any, Awaitable, Callable, Deque, List, Optional, Set
#
# 3rd-party Libraries
from loguru import logger
#
# Local Imports
from ..Constants import DEFAULT_PAGE_SIZE
from .sync_state import PageResult, SyncError, SyncErrorKind, SyncState
#
#######################################################################################################################
#
# Types:

FetchPage = Callable[[Any, int, int], Awaitable[PageResult]]
ErrorClassifier = Callable[[BaseException], SyncErrorKind]
Subscriber = Callable[[SyncState], None]

#
# Functions:

def default_error_classifier(error: BaseException) -> SyncErrorKind:
    """Transport-looking failures are network failures, anything else means the response made no sense."""
    # ConnectionError and TimeoutError are both OSError subclasses.
    if isinstance(error, OSError):
        return SyncErrorKind.NETWORK_FAILURE
    return SyncErrorKind.MALFORMED_RESPONSE


class ListingSynchronizer:
    """
    Keeps an in-memory, de-duplicated sequence of items in step with a remote
    offset-paginated listing.

    The consumer drives it through two entry points:

    * ``start_listing(filter_key)`` resets everything and loads the first page
      whenever the filter changes. Repeating the current filter is a no-op.
    * ``request_next_page()`` loads the page at the cursor. It does nothing while
      any fetch is in flight or once the listing is exhausted, so it is safe to call
      on every "scrolled near the end" event.

    Each fetch is tagged with the generation it was issued under. A response that
    arrives after the filter changed belongs to an older generation and is dropped
    without touching the current state. Nothing is ever cancelled because of a
    filter change; the stale request simply runs to completion.

    All transitions happen on the running event loop. Subscribers are called
    synchronously with the new ``SyncState`` after every transition. A transition
    made from inside a subscriber is queued and delivered once the current one
    has reached every subscriber, so all of them see states in order and end on
    the latest.
    """

    def __init__(self,
                 fetch_page: FetchPage,
                 page_size: int = DEFAULT_PAGE_SIZE,
                 id_getter: Optional[Callable[[Any], Any]] = None,
                 error_classifier: Optional[ErrorClassifier] = None):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._fetch_page = fetch_page
        self._page_size = page_size
        self._id_getter = id_getter or operator.attrgetter("id")
        self._error_classifier = error_classifier or default_error_classifier
        self._state = SyncState()
        self._subscribers: List[Subscriber] = []
        self._pending_notifications: Deque[SyncState] = deque()
        self._notifying = False
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def closed(self) -> bool:
        return self._closed

    def get_snapshot(self) -> SyncState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Registers ``callback`` for state changes. Returns a function that unregisters it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass

        return _unsubscribe

    # --- Trigger interface ---

    def start_listing(self, filter_key: Any, force: bool = False) -> Optional[asyncio.Task]:
        """
        Starts (or restarts) the listing for ``filter_key``.

        Returns the task running the initial fetch, or None when the call was a
        no-op because ``filter_key`` is already the active one. ``force=True``
        restarts even for an unchanged filter, which is how a consumer recovers
        from an error.
        """
        if self._closed:
            raise RuntimeError("ListingSynchronizer is closed")
        loop = asyncio.get_running_loop()
        current = self._state
        if not force and current.generation > 0 and current.active_filter_key == filter_key:
            logger.debug(f"start_listing: filter {filter_key!r} already active (generation {current.generation}), ignoring")
            return None

        generation = current.generation + 1
        logger.debug(f"start_listing: generation {current.generation} -> {generation} for filter {filter_key!r}")
        self._transition(SyncState(
            active_filter_key=filter_key,
            generation=generation,
            is_loading_initial=True,
        ))
        return self._issue_fetch(loop, generation, filter_key, 0, is_initial=True)

    def request_next_page(self) -> Optional[asyncio.Task]:
        """Fetches the page at the cursor, unless the gate is closed. Returns the fetch task or None."""
        state = self._state
        if self._closed or state.generation == 0:
            return None
        if not state.has_more or state.is_loading_initial or state.is_loading_more:
            return None
        loop = asyncio.get_running_loop()
        self._transition(replace(state, is_loading_more=True))
        return self._issue_fetch(loop, state.generation, state.active_filter_key, state.next_offset, is_initial=False)

    def close(self) -> None:
        """Tears the listing down: cancels outstanding fetches and drops subscribers."""
        if self._closed:
            return
        self._closed = True
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._subscribers.clear()
        self._pending_notifications.clear()
        logger.debug(f"ListingSynchronizer closed at generation {self._state.generation}")

    # --- Sequence store ---

    def merge_page(self, page: PageResult, is_initial: bool) -> SyncState:
        """
        Folds a page into the current sequence and advances the cursor.

        Items whose identifier is already present are dropped; the rest keep
        the order the page delivered them in. The cursor always moves by the
        requested page size, not by the number of items kept.
        """
        state = self._state
        base = () if is_initial else state.sequence
        seen = {self._id_getter(item) for item in base}
        merged = list(base)
        for item in page.items:
            item_id = self._id_getter(item)
            if item_id in seen:
                continue
            seen.add(item_id)
            merged.append(item)

        dropped = len(base) + len(page.items) - len(merged)
        if dropped:
            logger.debug(f"merge_page: dropped {dropped} duplicate item(s) in generation {state.generation}")

        new_state = replace(
            state,
            sequence=tuple(merged),
            next_offset=state.next_offset + self._page_size,
            has_more=page.was_full,
            is_loading_initial=False,
            is_loading_more=False,
            error=None,
        )
        self._transition(new_state)
        return new_state

    # --- Internals ---

    def _issue_fetch(self, loop: asyncio.AbstractEventLoop, generation: int, filter_key: Any,
                     offset: int, is_initial: bool) -> asyncio.Task:
        logger.debug(f"Fetching offset={offset} size={self._page_size} generation={generation} initial={is_initial}")
        task = loop.create_task(
            self._run_fetch(generation, filter_key, offset, is_initial),
            name=f"listing-fetch-g{generation}-o{offset}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._state.generation

    async def _run_fetch(self, generation: int, filter_key: Any, offset: int, is_initial: bool) -> None:
        try:
            page = await self._fetch_page(filter_key, offset, self._page_size)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._is_current(generation):
                logger.debug(f"Discarding failure from stale generation {generation}: {e!r}")
                return
            self._fail(self._classify(e), str(e) or type(e).__name__)
            return

        if not self._is_current(generation):
            logger.debug(f"Discarding page from stale generation {generation} "
                         f"(current is {self._state.generation})")
            return
        if not isinstance(page, PageResult):
            self._fail(SyncErrorKind.MALFORMED_RESPONSE,
                       f"Fetch returned {type(page).__name__} instead of a page")
            return
        try:
            self.merge_page(page, is_initial)
        except (AttributeError, KeyError, TypeError) as e:
            # Items without a usable identifier.
            self._fail(SyncErrorKind.MALFORMED_RESPONSE, f"Could not merge page: {e}")

    def _classify(self, error: Exception) -> SyncErrorKind:
        try:
            return self._error_classifier(error)
        except Exception:
            logger.exception(f"Error classifier failed on {error!r}; treating it as a malformed response")
            return SyncErrorKind.MALFORMED_RESPONSE

    def _fail(self, kind: SyncErrorKind, message: str) -> None:
        logger.warning(f"Listing fetch failed ({kind.value}) in generation {self._state.generation}: {message}")
        self._transition(replace(
            self._state,
            has_more=False,
            is_loading_initial=False,
            is_loading_more=False,
            error=SyncError(kind=kind, message=message),
        ))

    def _transition(self, new_state: SyncState) -> None:
        self._state = new_state
        self._pending_notifications.append(new_state)
        if self._notifying:
            # A subscriber triggered this transition; the outer loop delivers it after the current one.
            return
        self._notifying = True
        try:
            while self._pending_notifications:
                state = self._pending_notifications.popleft()
                for callback in list(self._subscribers):
                    try:
                        callback(state)
                    except Exception:
                        logger.exception(f"Listing subscriber {callback!r} raised")
        finally:
            self._notifying = False

#
# End of listing_sync.py
#######################################################################################################################
