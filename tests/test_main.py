"""Run modes of the bot host, exercised without a gateway connection."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from bot import config
from bot import main
from bot.browser_booker import PlaywrightBookingExecutor
from gitam_booker import BookingExecutor


@pytest.fixture
def one_shot(monkeypatch):
    coordinator = MagicMock()
    coordinator.run_collection = AsyncMock()
    coordinator.run_execution = AsyncMock()
    close = AsyncMock()
    monkeypatch.setattr(main, "coordinator", coordinator)
    monkeypatch.setattr(main.bot, "close", close)
    monkeypatch.setattr(main, "_one_shot_done", False)
    return coordinator, close


async def test_booking_mode_books_once_then_disconnects(one_shot, monkeypatch):
    coordinator, close = one_shot
    monkeypatch.setattr(main, "job", "booking")

    await main.on_ready()
    await main.on_ready()  # gateway reconnects fire on_ready again

    coordinator.run_execution.assert_awaited_once()
    coordinator.run_collection.assert_not_awaited()
    close.assert_awaited_once()


async def test_noon_mode_sends_picker_once_then_disconnects(one_shot, monkeypatch):
    coordinator, close = one_shot
    monkeypatch.setattr(main, "job", "noon")

    await main.on_ready()
    await main.on_ready()

    coordinator.run_collection.assert_awaited_once()
    coordinator.run_execution.assert_not_awaited()
    close.assert_awaited_once()


async def test_one_shot_disconnects_even_when_the_job_fails(one_shot, monkeypatch):
    coordinator, close = one_shot
    coordinator.run_execution.side_effect = RuntimeError("boom")
    monkeypatch.setattr(main, "job", "booking")

    with pytest.raises(RuntimeError):
        await main.on_ready()
    close.assert_awaited_once()


def test_executor_follows_booking_mode(monkeypatch):
    monkeypatch.setattr(config, "BOOKING_MODE", "browser")
    assert isinstance(main.build_executor(), PlaywrightBookingExecutor)
    monkeypatch.setattr(config, "BOOKING_MODE", "api")
    assert isinstance(main.build_executor(), BookingExecutor)


def test_unknown_job_is_rejected():
    with pytest.raises(SystemExit):
        main.main(["bogus"])
