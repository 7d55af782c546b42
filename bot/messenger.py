# bot/messenger.py
"""
Outbound side of the chat channel: everything the workflow posts goes through
ChannelMessenger.send(), which finds the bound channel on every call (so a
/bind takes effect without restarting).
"""

from __future__ import annotations

import discord
from loguru import logger

from bot.guard import bound_channel_id


class ChannelMessenger:
    def __init__(self, bot: discord.Client):
        self.bot = bot

    async def resolve_channel(self) -> discord.abc.Messageable:
        channel_id = bound_channel_id()
        if channel_id:
            c = self.bot.get_channel(channel_id)
            if c is None:
                c = await self.bot.fetch_channel(channel_id)
            return c
        # Nothing bound: first text channel we can post in
        for g in self.bot.guilds:
            for c in g.text_channels:
                if c.permissions_for(g.me).send_messages:
                    return c
        raise RuntimeError("No channel to post in. Use /bind or set DISCORD_CHANNEL_ID.")

    async def send(self, text: str, view: discord.ui.View | None = None) -> discord.Message:
        channel = await self.resolve_channel()
        logger.debug(f"[discord] -> #{getattr(channel, 'name', channel)}: {text[:60]!r}")
        if view is None:
            return await channel.send(text)
        return await channel.send(text, view=view)
