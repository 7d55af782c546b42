import datetime as dt
from unittest.mock import MagicMock

import pytest

from bot.selection import SelectionCollector
from bot.trigger import NO_SELECTION_MESSAGE, TriggerCoordinator
from gitam_booker import IST, BookingExecutor, BookingOutcome, OutcomeKind, target_date


def make_coordinator(store, messenger, outcome=None, executor=None):
    if executor is None:
        executor = MagicMock()
        executor.attempt.return_value = outcome or BookingOutcome(OutcomeKind.SUCCESS, "✅ BOOKED!")
    collector = SelectionCollector(store)
    return TriggerCoordinator(store, executor, collector, messenger), executor


async def test_no_choice_sends_one_message_and_skips_booking(store, messenger):
    coordinator, executor = make_coordinator(store, messenger)
    assert await coordinator.run_execution() is None
    assert [t for t, _ in messenger.sent] == [NO_SELECTION_MESSAGE]
    executor.attempt.assert_not_called()


async def test_unknown_stored_choice_counts_as_no_choice(store, messenger):
    store.save("42")
    coordinator, executor = make_coordinator(store, messenger)
    await coordinator.run_execution()
    assert [t for t, _ in messenger.sent] == [NO_SELECTION_MESSAGE]
    executor.attempt.assert_not_called()
    assert store.load() is None


@pytest.mark.parametrize("kind", list(OutcomeKind))
async def test_choice_is_booked_reported_and_cleared(store, messenger, kind):
    store.save("5")
    outcome = BookingOutcome(kind, f"msg-{kind.value}")
    coordinator, executor = make_coordinator(store, messenger, outcome)

    assert await coordinator.run_execution() is outcome
    executor.attempt.assert_called_once_with("19:00-20:00")
    assert [t for t, _ in messenger.sent] == [f"msg-{kind.value}"]
    assert store.load() is None


async def test_store_cleared_even_if_reporting_fails(store, broken_messenger):
    store.save("5")
    coordinator, executor = make_coordinator(store, broken_messenger)
    await coordinator.run_execution()
    executor.attempt.assert_called_once()
    assert store.load() is None


async def test_store_cleared_even_if_executor_crashes(store, messenger):
    store.save("2")
    executor = MagicMock()
    executor.attempt.side_effect = RuntimeError("boom")
    coordinator, _ = make_coordinator(store, messenger, executor=executor)
    assert await coordinator.run_execution() is None
    assert len(messenger.sent) == 1 and "boom" in messenger.sent[0][0]
    assert store.load() is None


async def test_collection_swallows_messaging_errors(store, broken_messenger):
    coordinator, _ = make_coordinator(store, broken_messenger)
    await coordinator.run_collection()


async def test_choice_survives_restart(tmp_path, messenger):
    """The noon process writes, a fresh process books from disk."""
    from bot.datastore import ChoiceStore

    path = tmp_path / "booking_state.json"
    SelectionCollector(ChoiceStore(path)).on_response("3")

    coordinator, executor = make_coordinator(ChoiceStore(path), messenger)
    await coordinator.run_execution()
    executor.attempt.assert_called_once_with("17:00-18:00")


async def test_end_to_end_first_slot(store, messenger):
    """Pick slot 1 at noon, book at 17:00 with a real executor over a fake HTTP session."""
    now = dt.datetime(2026, 10, 18, 17, 0, tzinfo=IST)
    cache = MagicMock()
    cache.get_credential.return_value = "tok"
    http = MagicMock()
    http.post.return_value = MagicMock(status_code=200)
    executor = BookingExecutor(cache, http=http, now=lambda: now)
    coordinator, _ = make_coordinator(store, messenger, executor=executor)

    coordinator.collector.on_response("1")
    outcome = await coordinator.run_execution()

    payload = http.post.call_args.kwargs["json"]
    assert payload["time_slot"] == "15:00-16:00"
    assert payload["date"] == target_date(now) == "19-OCT-2026"
    assert outcome.success
    assert "15:0" in messenger.sent[0][0]
    assert store.load() is None


def test_pending_slot(store, messenger):
    coordinator, _ = make_coordinator(store, messenger)
    assert coordinator.pending_slot() is None
    store.save("6")
    assert coordinator.pending_slot().label == "8-9 PM"
