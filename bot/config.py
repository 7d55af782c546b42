import os
from datetime import time, timedelta, timezone
from pathlib import Path

from gitam_booker import IST

# Folders
ROOT = Path(__file__).resolve().parents[1]
DATA = ROOT / "data"
LOGS = ROOT / "logs"
DATA.mkdir(exist_ok=True)
LOGS.mkdir(exist_ok=True)

# Files
STATE_JSON = DATA / "booking_state.json"             # {"choice": "3"}  (absent = no choice)
BIND_JSON = DATA / "bind.json"                       # {"channel_id": 12345}
LOG_FILE = LOGS / "gym_bot.log"

def parse_channel_id(raw):
    """Channel ids are Discord snowflakes; anything else is a config mistake."""
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise SystemExit(f"DISCORD_CHANNEL_ID must be a numeric channel id, got {raw!r}") from None

# Secrets (set in your environment)
DISCORD_TOKEN = os.getenv("DISCORD_BOT_TOKEN")
DISCORD_CHANNEL_ID = parse_channel_id(os.getenv("DISCORD_CHANNEL_ID"))  # fallback when nothing is bound
GITAM_EMAIL = os.getenv("GITAM_EMAIL")
GITAM_PASSWORD = os.getenv("GITAM_PASSWORD")

# "api" posts straight to the booking endpoint, "browser" drives the site with Playwright
BOOKING_MODE = os.getenv("BOOKING_MODE", "api").lower()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Schedule (campus local time)
TIMEZONE = IST
# tasks.loop needs a tzinfo that answers utcoffset(None); IST has no DST
SCHEDULE_TZ = timezone(timedelta(hours=5, minutes=30), "IST")
COLLECT_AT = time(12, 0, tzinfo=SCHEDULE_TZ)
EXECUTE_AT = time(17, 0, tzinfo=SCHEDULE_TZ)

# Browser mode
GSPORTS_FACILITY_PAGE = "https://gsports.gitam.edu/facility/fitness-centre"
BROWSER_STEP_TIMEOUT_MS = 30000
HEADLESS = os.getenv("HEADLESS", "1") != "0"
