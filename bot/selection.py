# bot/selection.py
"""
Noon prompt + button handling.

SlotPicker is a *persistent* view (timeout=None, fixed custom_ids): register it
once with bot.add_view() and presses on a prompt sent by an earlier process
still land here after a restart.
"""

from __future__ import annotations

import discord
from loguru import logger

from bot.datastore import ChoiceStore
from bot.guard import allowed_channel
from bot.slots import SKIP_ID, SLOTS, Slot


def prompt_text(execute_at: str) -> str:
    return (
        "🏋️ **NOON REMINDER**\n\n"
        "Want to book a fitness session today?\n\n"
        "Select time below:\n\n"
        f"(You can answer anytime until {execute_at})\n\n"
        f"_Booking starts at {execute_at}_"
    )


class SlotButton(discord.ui.Button):
    def __init__(self, collector: "SelectionCollector", selection: str, label: str,
                 style: discord.ButtonStyle, row: int):
        super().__init__(label=label, style=style, custom_id=f"slot:{selection}", row=row)
        self.collector = collector
        self.selection = selection

    async def callback(self, interaction: discord.Interaction):
        await self.collector.handle_interaction(interaction, self.selection, view=self.view)


class SlotPicker(discord.ui.View):
    """Two slot buttons per row, then a Skip row."""

    def __init__(self, collector: "SelectionCollector"):
        super().__init__(timeout=None)
        for i, slot in enumerate(SLOTS.values()):
            self.add_item(SlotButton(collector, slot.id, f"{slot.icon} {slot.label}",
                                     discord.ButtonStyle.primary, row=i // 2))
        self.add_item(SlotButton(collector, SKIP_ID, "❌ Skip Today",
                                 discord.ButtonStyle.danger, row=(len(SLOTS) + 1) // 2))


class SelectionCollector:
    def __init__(self, store: ChoiceStore, execute_at: str = "17:00"):
        self.store = store
        self.execute_at = execute_at

    async def announce(self, messenger) -> None:
        """Post the prompt with buttons. The answer (if any) comes back via handle_interaction."""
        logger.info("[collect] sending noon reminder")
        await messenger.send(prompt_text(self.execute_at), view=SlotPicker(self))
        logger.info("[collect] reminder sent")

    def on_response(self, selection: str) -> str | None:
        """
        Record the user's pick and return the text to show in its place.
        Returns None for ids we don't know (store untouched).
        """
        if selection == SKIP_ID:
            self.store.clear()
            logger.info("[collect] user skipped today")
            return "✌️ No booking today. Ask me tomorrow!"

        slot: Slot | None = SLOTS.get(selection)
        if slot is None:
            logger.warning(f"[collect] ignoring unknown selection {selection!r}")
            return None

        self.store.save(slot.id)
        logger.info(f"[collect] user choice saved: {slot.label}")
        return (
            "✅ **Choice Saved**\n\n"
            f"⏰ Time: {slot.label}\n"
            f"🕕 Will book at {self.execute_at} today\n\n"
            "_You can change your choice anytime_"
        )

    async def handle_interaction(self, interaction: discord.Interaction, selection: str,
                                 view: discord.ui.View | None = None) -> None:
        if not allowed_channel(interaction):
            await interaction.response.send_message(
                "This bot is bound to a different channel.", ephemeral=True)
            return

        text = self.on_response(selection)
        if text is None:
            await interaction.response.defer()
            return

        # Keep the buttons so the user can change their mind before the booking runs
        await interaction.response.edit_message(content=text, view=view)
        if selection == SKIP_ID:
            toast = "✌️ Skipped for today"
        else:
            toast = f"⏳ Selected: {SLOTS[selection].label}\n\nBooking at {self.execute_at}..."
        try:
            await interaction.followup.send(toast, ephemeral=True)
        except discord.HTTPException as e:
            logger.warning(f"[collect] confirmation toast failed: {e}")
