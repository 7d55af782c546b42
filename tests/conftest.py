"""Shared fixtures: a throwaway choice store and a recording messenger."""

import pytest

from bot.datastore import ChoiceStore


class RecordingMessenger:
    """Stands in for ChannelMessenger; remembers what would have been posted."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send(self, text, view=None):
        if self.fail:
            raise RuntimeError("discord is down")
        self.sent.append((text, view))


@pytest.fixture
def store(tmp_path):
    return ChoiceStore(tmp_path / "booking_state.json")


@pytest.fixture
def messenger():
    return RecordingMessenger()


@pytest.fixture
def broken_messenger():
    return RecordingMessenger(fail=True)
