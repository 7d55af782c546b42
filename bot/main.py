import argparse

import discord
from discord.ext import commands, tasks
from loguru import logger

from bot import config
from bot.datastore import ChoiceStore, save_json
from bot.guard import allowed_channel
from bot.logging_setup import setup_logging
from bot.messenger import ChannelMessenger
from bot.selection import SelectionCollector, SlotPicker
from bot.trigger import TriggerCoordinator
from gitam_booker import BookingExecutor, SessionCache

JOBS = ("run", "noon", "booking")

intents = discord.Intents.default()
bot = commands.Bot(command_prefix="!", intents=intents)


def build_executor():
    if config.BOOKING_MODE == "browser":
        # Playwright is only needed in this mode
        from bot.browser_booker import PlaywrightBookingExecutor
        return PlaywrightBookingExecutor(config.GITAM_EMAIL, config.GITAM_PASSWORD)
    return BookingExecutor(SessionCache(config.GITAM_EMAIL, config.GITAM_PASSWORD))


store = ChoiceStore(config.STATE_JSON)
messenger = ChannelMessenger(bot)
collector = SelectionCollector(store, execute_at=f"{config.EXECUTE_AT:%H:%M}")
coordinator = TriggerCoordinator(store, build_executor(), collector, messenger)

job = "run"
_one_shot_done = False

# ------------- Helpers -----------------

async def assert_channel(inter: discord.Interaction) -> bool:
    """Return True if command is allowed in this channel; otherwise reply ephemeral."""
    if allowed_channel(inter):
        return True
    await inter.response.send_message(
        "This bot is bound to a different channel. Use `/unbind` or run commands in the bound channel.",
        ephemeral=True)
    return False

# ------------- Scheduled jobs -----------------

@tasks.loop(time=config.COLLECT_AT)
async def collection_job():
    logger.info("🔔 collection trigger")
    await coordinator.run_collection()

@tasks.loop(time=config.EXECUTE_AT)
async def execution_job():
    logger.info("🔔 execution trigger")
    await coordinator.run_execution()

@collection_job.before_loop
@execution_job.before_loop
async def _wait_ready():
    await bot.wait_until_ready()

@bot.event
async def setup_hook():
    # Buttons on earlier prompts keep working across restarts
    bot.add_view(SlotPicker(collector))
    if job == "run":
        collection_job.start()
        execution_job.start()
        logger.info(f"Schedules set: collect {config.COLLECT_AT:%H:%M}, book {config.EXECUTE_AT:%H:%M} ({config.SCHEDULE_TZ})")

@bot.event
async def on_ready():
    global _one_shot_done
    logger.info(f"Logged in as {bot.user}")

    if job == "run":
        try:
            synced = await bot.tree.sync()
            logger.info(f"Synced {len(synced)} app commands.")
        except discord.HTTPException as e:
            logger.error(f"App command sync failed: {e}")
        pending = coordinator.pending_slot()
        logger.info(f"Pending choice: {pending.label if pending else 'none'}")
        return

    # One-shot modes: run the job once, then disconnect
    if _one_shot_done:
        return
    _one_shot_done = True
    try:
        if job == "noon":
            await coordinator.run_collection()
        else:
            await coordinator.run_execution()
    finally:
        await bot.close()

# ------------- Slash Commands -----------------

@bot.tree.command(name="ping", description="Ping the bot")
async def ping(inter: discord.Interaction):
    if not await assert_channel(inter): return
    await inter.response.send_message("Pong! 🏓")

@bot.tree.command(name="slots", description="Post the time-slot picker now")
async def slots(inter: discord.Interaction):
    if not await assert_channel(inter): return
    await inter.response.send_message("📤 Sending picker...", ephemeral=True)
    await coordinator.run_collection()

@bot.tree.command(name="pending", description="Show which slot will be booked today")
async def pending(inter: discord.Interaction):
    if not await assert_channel(inter): return
    slot = coordinator.pending_slot()
    if slot is None:
        await inter.response.send_message("ℹ️ No choice recorded for today.", ephemeral=True)
    else:
        await inter.response.send_message(
            f"⏰ {slot.icon} {slot.label} will be booked at {config.EXECUTE_AT:%H:%M}.", ephemeral=True)

@bot.tree.command(name="booknow", description="Book the stored choice immediately")
async def booknow(inter: discord.Interaction):
    if not await assert_channel(inter): return
    await inter.response.send_message("⚡ Booking now...", ephemeral=True)
    await coordinator.run_execution()

# Bind / Unbind
@bot.tree.command(name="bind", description="Bind this bot to the current channel")
async def bind(inter: discord.Interaction):
    if not inter.user.guild_permissions.manage_channels:
        await inter.response.send_message("You need Manage Channels permission to bind.", ephemeral=True)
        return
    save_json(config.BIND_JSON, {"channel_id": inter.channel_id})
    await inter.response.send_message(f"✅ Bound to <#{inter.channel_id}>")

@bot.tree.command(name="unbind", description="Unbind the bot from any channel")
async def unbind(inter: discord.Interaction):
    if not inter.user.guild_permissions.manage_channels:
        await inter.response.send_message("You need Manage Channels permission to unbind.", ephemeral=True)
        return
    save_json(config.BIND_JSON, {"channel_id": None})
    await inter.response.send_message("✅ Unbound. Falling back to DISCORD_CHANNEL_ID (or the first writable channel).")


# ------------- Run -----------------
def main(argv=None):
    global job
    ap = argparse.ArgumentParser(description="GITAM gym booking bot.")
    ap.add_argument(
        "job",
        nargs="?",
        default="run",
        choices=JOBS,
        help="run: stay up and fire both daily jobs; noon: send the picker once; booking: book once",
    )
    args = ap.parse_args(argv)

    setup_logging()
    if not config.DISCORD_TOKEN:
        raise SystemExit("Set DISCORD_BOT_TOKEN in your environment.")
    job = args.job
    logger.info(f"🚀 Gym bot starting ({job} mode, booking via {config.BOOKING_MODE})")
    bot.run(config.DISCORD_TOKEN, log_handler=None)

if __name__ == "__main__":
    main()
