# bot/trigger.py
"""
The two daily jobs:

  run_collection()  (noon)  -> post the slot picker
  run_execution()   (17:00) -> read the stored choice, book it once, report,
                               and always clear the choice afterwards

Both swallow and log their errors: a failed day must never take the bot down.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from bot.datastore import ChoiceStore
from bot.selection import SelectionCollector
from bot.slots import Slot, UnknownSlot, resolve
from gitam_booker import BookingOutcome

NO_SELECTION_MESSAGE = "⚠️ You didn't select a time. Booking skipped for today."


class NoSelectionError(Exception):
    """Execution fired with nothing (usable) in the choice store."""


class TriggerCoordinator:
    def __init__(self, store: ChoiceStore, executor, collector: SelectionCollector, messenger):
        self.store = store
        self.executor = executor
        self.collector = collector
        self.messenger = messenger

    def pending_slot(self) -> Slot | None:
        try:
            return self._pending_slot()
        except NoSelectionError:
            return None

    def _pending_slot(self) -> Slot:
        choice = self.store.load()
        if choice is None:
            raise NoSelectionError("no choice recorded")
        try:
            return resolve(choice)
        except UnknownSlot:
            logger.warning(f"[trigger] stored choice {choice!r} is not a known slot")
            raise NoSelectionError(f"unknown slot {choice!r}") from None

    async def run_collection(self) -> None:
        logger.info("[trigger] collection phase")
        try:
            await self.collector.announce(self.messenger)
        except Exception:
            logger.exception("[trigger] sending the noon reminder failed")

    async def run_execution(self) -> BookingOutcome | None:
        logger.info("[trigger] execution phase")
        outcome = None
        try:
            try:
                slot = self._pending_slot()
            except NoSelectionError:
                logger.info("[trigger] no booking choice made today")
                await self._report(NO_SELECTION_MESSAGE)
                return None

            logger.info(f"[trigger] booking {slot.label} ({slot.time_range})")
            try:
                outcome = await asyncio.to_thread(self.executor.attempt, slot.time_range)
            except Exception as e:
                logger.exception("[trigger] booking attempt crashed")
                await self._report(f"❌ Error: {e}")
                return None

            if outcome.success:
                logger.info("[trigger] booking complete")
            else:
                logger.warning(f"[trigger] booking failed: {outcome.kind.value}")
            await self._report(outcome.message)
            return outcome
        finally:
            self.store.clear()

    async def _report(self, text: str) -> None:
        try:
            await self.messenger.send(text)
        except Exception:
            logger.exception("[trigger] could not deliver outcome message")
