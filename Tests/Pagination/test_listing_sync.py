# test_listing_sync.py
#
# Unit tests for ListingSynchronizer: cursor movement, de-duplication, the
# single-flight gate and the generation guard against late responses.
#
# Imports
import asyncio
import pytest
#
# Local Imports
from mangalyze.Pagination import (
    ListingSynchronizer, ListingStatus, PageResult, SyncErrorKind, SyncState, default_error_classifier,
)
from Tests.Pagination.listing_fakes import Entry, entries, page_of, settle
#
#######################################################################################################################
#
# Helpers

pytestmark = pytest.mark.asyncio

PAGE_SIZE = 100


def ids(state: SyncState):
    return [item.id for item in state.sequence]


@pytest.fixture
async def sync(fetcher):
    synchronizer = ListingSynchronizer(fetcher, page_size=PAGE_SIZE)
    yield synchronizer
    synchronizer.close()


#
# Starting a listing
#

async def test_initial_state_is_idle(sync):
    snapshot = sync.get_snapshot()
    assert snapshot.status is ListingStatus.IDLE
    assert snapshot.sequence == ()
    assert snapshot.generation == 0
    assert sync.request_next_page() is None


async def test_start_listing_issues_initial_fetch_at_offset_zero(sync, fetcher):
    task = sync.start_listing("en")
    assert task is not None

    snapshot = sync.get_snapshot()
    assert snapshot.status is ListingStatus.LOADING_INITIAL
    assert snapshot.is_loading_initial and not snapshot.is_loading_more
    assert snapshot.generation == 1
    assert snapshot.active_filter_key == "en"

    await settle()
    assert [(c.filter_key, c.offset, c.page_size) for c in fetcher.calls] == [("en", 0, PAGE_SIZE)]

    fetcher.calls[0].resolve(page_of(entries(1, 100)))
    await task
    snapshot = sync.get_snapshot()
    assert snapshot.status is ListingStatus.READY
    assert ids(snapshot) == [str(i) for i in range(1, 101)]
    assert snapshot.next_offset == 100
    assert snapshot.has_more is True


async def test_start_listing_same_filter_is_noop(sync, fetcher):
    sync.start_listing("en")
    assert sync.start_listing("en") is None
    await settle()
    assert len(fetcher.calls) == 1
    assert sync.get_snapshot().generation == 1


async def test_filter_keys_compare_by_value(sync, fetcher):
    sync.start_listing(("manga-1", "en"))
    assert sync.start_listing(("manga-1", "en")) is None
    await settle()
    assert len(fetcher.calls) == 1


async def test_empty_first_page_ends_listing_without_error(sync, fetcher):
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(page_of([]))
    await task

    snapshot = sync.get_snapshot()
    assert snapshot.sequence == ()
    assert snapshot.has_more is False
    assert snapshot.error is None
    assert snapshot.status is ListingStatus.READY
    assert sync.request_next_page() is None


async def test_start_listing_after_close_raises(fetcher):
    synchronizer = ListingSynchronizer(fetcher)
    synchronizer.close()
    with pytest.raises(RuntimeError):
        synchronizer.start_listing("en")


async def test_page_size_must_be_positive(fetcher):
    with pytest.raises(ValueError):
        ListingSynchronizer(fetcher, page_size=0)


#
# Paging, de-duplication and termination
#

async def test_full_then_partial_overlapping_page(sync, fetcher):
    """100 items, then 40 items of which 6 were already seen: 134 unique ids and the listing ends."""
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(page_of(entries(1, 100)))
    await task
    assert sync.get_snapshot().has_more is True
    assert sync.get_snapshot().next_offset == 100

    task = sync.request_next_page()
    assert task is not None
    assert sync.get_snapshot().status is ListingStatus.LOADING_MORE
    await settle()
    assert fetcher.calls[1].offset == 100

    fetcher.calls[1].resolve(page_of(entries(95, 134)))
    await task

    snapshot = sync.get_snapshot()
    assert ids(snapshot) == [str(i) for i in range(1, 135)]
    assert len(set(ids(snapshot))) == 134
    assert snapshot.has_more is False
    assert snapshot.next_offset == 200

    assert sync.request_next_page() is None
    await settle()
    assert len(fetcher.calls) == 2


async def test_cursor_advances_by_requested_size_not_kept_items(sync, fetcher):
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(page_of(entries(1, 100)))
    await task

    # A full page made entirely of repeats still moves the cursor a whole page.
    task = sync.request_next_page()
    await settle()
    fetcher.calls[1].resolve(page_of(entries(1, 100)))
    await task

    snapshot = sync.get_snapshot()
    assert len(snapshot.sequence) == 100
    assert snapshot.next_offset == 200
    assert snapshot.has_more is True


async def test_initial_page_is_deduplicated_internally(sync, fetcher):
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(PageResult(items=(Entry("a"), Entry("b"), Entry("a", label="again")), was_full=False))
    await task
    snapshot = sync.get_snapshot()
    assert ids(snapshot) == ["a", "b"]
    assert snapshot.sequence[0].label == ""


async def test_custom_id_getter(fetcher):
    synchronizer = ListingSynchronizer(fetcher, page_size=2, id_getter=lambda item: item["key"])
    task = synchronizer.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(PageResult.from_items([{"key": 1}, {"key": 1}], 2))
    await task
    assert synchronizer.get_snapshot().sequence == ({"key": 1},)
    synchronizer.close()


#
# Single-flight gate
#

async def test_request_next_page_twice_issues_one_fetch(sync, fetcher):
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(page_of(entries(1, 100)))
    await task

    first = sync.request_next_page()
    second = sync.request_next_page()
    assert first is not None
    assert second is None
    await settle()
    assert len(fetcher.calls) == 2

    fetcher.calls[1].resolve(page_of(entries(101, 200)))
    await first
    assert sync.get_snapshot().next_offset == 200


async def test_request_next_page_ignored_during_initial_load(sync, fetcher):
    sync.start_listing("en")
    assert sync.request_next_page() is None
    await settle()
    assert len(fetcher.calls) == 1
    snapshot = sync.get_snapshot()
    assert snapshot.is_loading_initial and not snapshot.is_loading_more


#
# Generation guard
#

async def test_late_response_from_previous_filter_is_discarded(sync, fetcher):
    en_task = sync.start_listing("en")
    await settle()
    fr_task = sync.start_listing("fr")
    await settle()
    assert sync.get_snapshot().generation == 2
    assert [c.filter_key for c in fetcher.calls] == ["en", "fr"]

    fetcher.calls[0].resolve(page_of(entries(1, 100)))
    await en_task

    snapshot = sync.get_snapshot()
    assert snapshot.sequence == ()
    assert snapshot.status is ListingStatus.LOADING_INITIAL
    assert snapshot.generation == 2
    assert snapshot.next_offset == 0

    fetcher.calls[1].resolve(page_of([Entry("fr-1"), Entry("fr-2")]))
    await fr_task
    snapshot = sync.get_snapshot()
    assert ids(snapshot) == ["fr-1", "fr-2"]
    assert snapshot.has_more is False


async def test_late_failure_from_previous_filter_is_discarded(sync, fetcher):
    en_task = sync.start_listing("en")
    await settle()
    sync.start_listing("fr")
    await settle()

    fetcher.calls[0].fail(ConnectionError("en request dropped"))
    await en_task

    snapshot = sync.get_snapshot()
    assert snapshot.error is None
    assert snapshot.has_more is True
    assert snapshot.is_loading_initial is True


async def test_filter_change_while_loading_more_resets_flags(sync, fetcher):
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(page_of(entries(1, 100)))
    await task

    more_task = sync.request_next_page()
    await settle()
    fr_task = sync.start_listing("fr")
    snapshot = sync.get_snapshot()
    assert snapshot.is_loading_initial is True
    assert snapshot.is_loading_more is False
    assert snapshot.sequence == ()

    # The "en" continuation lands after the switch and must not leak into "fr".
    fetcher.calls[1].resolve(page_of(entries(101, 200)))
    await more_task
    assert sync.get_snapshot().sequence == ()

    await settle()
    fetcher.calls[2].resolve(page_of([Entry("fr-1")]))
    await fr_task
    assert ids(sync.get_snapshot()) == ["fr-1"]


async def test_switching_back_to_earlier_filter_starts_new_generation(sync, fetcher):
    sync.start_listing("en")
    sync.start_listing("fr")
    task = sync.start_listing("en")
    assert task is not None
    assert sync.get_snapshot().generation == 3
    await settle()
    assert [c.filter_key for c in fetcher.calls] == ["en", "fr", "en"]

    # Only the newest "en" request counts, even though an older one asked for the same listing.
    fetcher.calls[0].resolve(page_of([Entry("old")]))
    fetcher.calls[2].resolve(page_of([Entry("new")]))
    await task
    await settle()
    assert ids(sync.get_snapshot()) == ["new"]


#
# Error folding
#

async def test_network_failure_ends_listing_with_error(sync, fetcher):
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].fail(ConnectionError("connection refused"))
    await task

    snapshot = sync.get_snapshot()
    assert snapshot.has_more is False
    assert snapshot.is_loading_initial is False and snapshot.is_loading_more is False
    assert snapshot.next_offset == 0
    assert snapshot.error is not None
    assert snapshot.error.kind is SyncErrorKind.NETWORK_FAILURE
    assert "connection refused" in snapshot.error.message
    assert snapshot.status is ListingStatus.READY

    assert sync.request_next_page() is None


async def test_failure_on_continuation_keeps_sequence_and_cursor(sync, fetcher):
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(page_of(entries(1, 100)))
    await task

    task = sync.request_next_page()
    await settle()
    fetcher.calls[1].fail(ValueError("unexpected payload"))
    await task

    snapshot = sync.get_snapshot()
    assert len(snapshot.sequence) == 100
    assert snapshot.next_offset == 100
    assert snapshot.has_more is False
    assert snapshot.error.kind is SyncErrorKind.MALFORMED_RESPONSE


async def test_non_page_result_is_malformed(sync, fetcher):
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].future.set_result({"result": "error"})
    await task

    snapshot = sync.get_snapshot()
    assert snapshot.error.kind is SyncErrorKind.MALFORMED_RESPONSE
    assert snapshot.has_more is False


async def test_items_without_identifier_are_malformed(sync, fetcher):
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(PageResult(items=("no-id-attribute",), was_full=False))
    await task

    snapshot = sync.get_snapshot()
    assert snapshot.error.kind is SyncErrorKind.MALFORMED_RESPONSE
    assert snapshot.sequence == ()


async def test_custom_error_classifier_is_used(fetcher):
    synchronizer = ListingSynchronizer(fetcher, error_classifier=lambda e: SyncErrorKind.NETWORK_FAILURE)
    task = synchronizer.start_listing("en")
    await settle()
    fetcher.calls[0].fail(KeyError("data"))
    await task
    assert synchronizer.get_snapshot().error.kind is SyncErrorKind.NETWORK_FAILURE
    synchronizer.close()


async def test_raising_error_classifier_still_ends_loading(fetcher):
    def broken_classifier(error):
        raise LookupError("no mapping")

    synchronizer = ListingSynchronizer(fetcher, error_classifier=broken_classifier)
    task = synchronizer.start_listing("en")
    await settle()
    fetcher.calls[0].fail(ConnectionError("reset by peer"))
    await task

    snapshot = synchronizer.get_snapshot()
    assert snapshot.is_loading is False
    assert snapshot.has_more is False
    assert snapshot.error.kind is SyncErrorKind.MALFORMED_RESPONSE
    assert "reset by peer" in snapshot.error.message
    synchronizer.close()


async def test_forced_restart_clears_error(sync, fetcher):
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].fail(TimeoutError("timed out"))
    await task
    assert sync.get_snapshot().error is not None

    # Same filter without force stays put.
    assert sync.start_listing("en") is None

    task = sync.start_listing("en", force=True)
    snapshot = sync.get_snapshot()
    assert snapshot.error is None
    assert snapshot.has_more is True
    assert snapshot.generation == 2
    await settle()
    fetcher.calls[1].resolve(page_of(entries(1, 3)))
    await task
    assert ids(sync.get_snapshot()) == ["1", "2", "3"]


async def test_default_error_classifier():
    assert default_error_classifier(ConnectionError()) is SyncErrorKind.NETWORK_FAILURE
    assert default_error_classifier(TimeoutError()) is SyncErrorKind.NETWORK_FAILURE
    assert default_error_classifier(OSError()) is SyncErrorKind.NETWORK_FAILURE
    assert default_error_classifier(ValueError()) is SyncErrorKind.MALFORMED_RESPONSE


#
# Notifications and teardown
#

async def test_subscribers_see_every_transition(sync, fetcher):
    seen = []
    sync.subscribe(lambda snapshot: seen.append(snapshot.status))

    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(page_of(entries(1, 100)))
    await task
    task = sync.request_next_page()
    await settle()
    fetcher.calls[1].fail(ConnectionError("gone"))
    await task

    assert seen == [
        ListingStatus.LOADING_INITIAL,
        ListingStatus.READY,
        ListingStatus.LOADING_MORE,
        ListingStatus.READY,
    ]


async def test_discarded_responses_do_not_notify(sync, fetcher):
    en_task = sync.start_listing("en")
    sync.start_listing("fr")
    await settle()
    seen = []
    sync.subscribe(seen.append)

    fetcher.calls[0].resolve(page_of(entries(1, 100)))
    await en_task
    assert seen == []


async def test_unsubscribe_and_failing_subscriber(sync, fetcher):
    received = []

    def broken(snapshot):
        raise RuntimeError("render failed")

    sync.subscribe(broken)
    unsubscribe = sync.subscribe(received.append)

    task = sync.start_listing("en")
    assert len(received) == 1
    unsubscribe()
    unsubscribe()  # second call is harmless

    await settle()
    fetcher.calls[0].resolve(page_of(entries(1, 2)))
    await task
    assert len(received) == 1
    assert sync.get_snapshot().status is ListingStatus.READY


async def test_subscriber_restarting_listing_leaves_others_on_latest_state(sync, fetcher):
    delivered = []

    def switch_to_french(snapshot):
        if snapshot.active_filter_key == "en" and snapshot.generation == 1:
            sync.start_listing("fr")

    sync.subscribe(switch_to_french)
    sync.subscribe(delivered.append)

    sync.start_listing("en")

    assert [(s.active_filter_key, s.generation) for s in delivered] == [("en", 1), ("fr", 2)]
    assert delivered[-1] is sync.get_snapshot()
    await settle()
    assert sorted(c.filter_key for c in fetcher.calls) == ["en", "fr"]


async def test_subscriber_paging_from_callback_sees_states_in_order(sync, fetcher):
    delivered = []

    def page_when_ready(snapshot):
        if snapshot.status is ListingStatus.READY and snapshot.next_offset == 100:
            sync.request_next_page()

    sync.subscribe(page_when_ready)
    sync.subscribe(lambda snapshot: delivered.append(snapshot.status))

    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(page_of(entries(1, 100)))
    await task

    assert delivered == [ListingStatus.LOADING_INITIAL, ListingStatus.READY, ListingStatus.LOADING_MORE]
    assert sync.get_snapshot().is_loading_more is True
    await settle()
    assert [c.offset for c in fetcher.calls] == [0, 100]


async def test_close_cancels_outstanding_fetch(fetcher):
    synchronizer = ListingSynchronizer(fetcher)
    task = synchronizer.start_listing("en")
    await settle()

    synchronizer.close()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert synchronizer.closed
    assert synchronizer.request_next_page() is None


async def test_snapshots_are_immutable_values(sync, fetcher):
    before = sync.get_snapshot()
    task = sync.start_listing("en")
    await settle()
    fetcher.calls[0].resolve(page_of([Entry("1")]))
    await task

    assert before.generation == 0
    assert before.sequence == ()
    with pytest.raises(AttributeError):
        sync.get_snapshot().has_more = True

    data = sync.get_snapshot().to_dict()
    assert data["status"] == "ready"
    assert data["generation"] == 1
    assert data["error"] is None
    assert data["sequence"] == [Entry("1")]

#
# End of test_listing_sync.py
########################################################################################################################
