# bot/guard.py
"""
Channel binding guard for slash commands and picker buttons.
If a channel is bound (data/bind.json, or DISCORD_CHANNEL_ID as a fallback),
only interactions from that channel are accepted.
"""
from discord import Interaction
from bot import config
from bot.datastore import load_json

def bound_channel_id() -> int | None:
    bound = load_json(config.BIND_JSON, {}).get("channel_id")
    # bind.json is only written by /bind, with interaction.channel_id
    return int(bound) if bound else config.DISCORD_CHANNEL_ID

def allowed_channel(interaction: Interaction) -> bool:
    bound = bound_channel_id()
    return (bound is None) or (bound == interaction.channel_id)
