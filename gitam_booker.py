"""
---------------
Tiny library to book a GITAM gym slot through the gsports booking API.

Flow:
- SessionCache logs in at login.gitam.edu and keeps the token in memory for
  up to an hour, so back-to-back bookings do not log in twice.
- BookingExecutor posts one booking for *tomorrow* and turns the HTTP status
  into a BookingOutcome the bot can show as-is.

Security notes:
- The session token is never written to disk; a restarted process simply
  logs in again.

Assumptions:
- The login response carries the token as "token" (older deployments use
  "session").
- The booking endpoint's status code is the only signal: 200/201 booked,
  409 means the weekly limit (3 slots) is used up, anything else failed.
"""

from __future__ import annotations

import datetime as dt
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import requests
from dateutil import tz
from loguru import logger

# ---- Constants ---------------------------------------------------------------

# Campus local time; "tomorrow" is computed here, not on the host's clock
IST = tz.gettz("Asia/Kolkata")

LOGIN_URL = "https://login.gitam.edu/api/login"
GSPORTS_BASE_URL = "https://gsports.gitam.edu"
FACILITY_ID = "MjM."      # fitness centre
COURT_ID = "room-1"

LOGIN_TIMEOUT = 8         # seconds
BOOKING_TIMEOUT = 5       # seconds
SESSION_MAX_AGE = 3600    # seconds

# Month abbreviations the API wants, independent of the process locale
_MONTHS = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN",
           "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")

_BROWSER_HEADERS = {
    "Content-Type": "application/json",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Accept": "*/*",
}


# ---- Errors / results --------------------------------------------------------

class BookingError(Exception):
    """Base class for booking-library errors."""


class LoginError(BookingError):
    """Login failed: bad status, network error, or no token in the response."""


class OutcomeKind(Enum):
    SUCCESS = "success"
    WEEKLY_LIMIT = "weekly_limit"
    REJECTED = "rejected"
    LOGIN_FAILED = "login_failed"
    TRANSPORT_ERROR = "transport_error"


@dataclass
class BookingOutcome:
    kind: OutcomeKind
    message: str                       # markdown, ready to post
    status_code: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


# ---- Auth --------------------------------------------------------------------

class SessionCache:
    """
    Time-bounded memo of the login token.

    One instance per process; hand it to BookingExecutor. `clock` returns epoch
    seconds and is injectable so tests can move time forward.
    """

    def __init__(
        self,
        email: Optional[str],
        password: Optional[str],
        *,
        http=None,
        clock: Callable[[], float] = time.time,
        max_age: float = SESSION_MAX_AGE,
        timeout: float = LOGIN_TIMEOUT,
        login_url: str = LOGIN_URL,
    ):
        self.email = email
        self.password = password
        self.http = http or requests.Session()
        self.clock = clock
        self.max_age = max_age
        self.timeout = timeout
        self.login_url = login_url
        self._token: Optional[str] = None
        self._obtained_at: Optional[float] = None

    def is_fresh(self) -> bool:
        return (
            self._token is not None
            and self._obtained_at is not None
            and (self.clock() - self._obtained_at) < self.max_age
        )

    def invalidate(self) -> None:
        self._token = None
        self._obtained_at = None

    def get_credential(self) -> str:
        """
        Return a usable session token, logging in only when the cached one is
        missing or older than `max_age`.

        raises: LoginError (nothing is cached on failure)
        """
        if self.is_fresh():
            logger.debug("[session] using cached session token")
            return self._token

        if not self.email or not self.password:
            raise LoginError("GITAM_EMAIL / GITAM_PASSWORD are not set")

        logger.info("[session] logging into GITAM...")
        try:
            r = self.http.post(
                self.login_url,
                json={"email": self.email, "password": self.password},
                headers=_BROWSER_HEADERS,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise LoginError(f"login request failed: {e}") from e

        if not 200 <= r.status_code < 300:
            raise LoginError(f"login returned HTTP {r.status_code}")

        try:
            payload = r.json()
        except ValueError as e:
            raise LoginError("login response is not JSON") from e

        token = (payload.get("token") or payload.get("session")) if isinstance(payload, dict) else None
        if not token:
            raise LoginError("no token in login response")

        self._token = token
        self._obtained_at = self.clock()
        logger.info("[session] login successful")
        return token


# ---- Formatting helpers ------------------------------------------------------

def target_date(now: Optional[dt.datetime] = None) -> str:
    """
    Tomorrow's date the way gsports wants it: DD-MON-YYYY, e.g. "19-OCT-2026".

    now: aware datetime to count from (defaults to the current IST time).
    """
    if now is None:
        now = dt.datetime.now(IST)
    tomorrow = (now + dt.timedelta(days=1)).date()
    return f"{tomorrow.day:02d}-{_MONTHS[tomorrow.month - 1]}-{tomorrow.year}"


def slot_start(time_range: str) -> str:
    """e.g. "15:00-16:00" -> "15:00"."""
    return time_range.split("-")[0][:5]


def success_message(time_range: str) -> str:
    return f"✅ BOOKED!\n\n📅 Tomorrow at {slot_start(time_range)}\n⚡ Booking confirmed!"


WEEKLY_LIMIT_MESSAGE = "⚠️ Weekly limit reached (3 slots max)\nCannot book more this week"
LOGIN_FAILED_MESSAGE = "❌ Login failed. Check credentials."


# ---- Booking -----------------------------------------------------------------

class BookingExecutor:
    """
    One booking attempt per call to attempt(); never retries.
    """

    def __init__(
        self,
        session_cache: SessionCache,
        *,
        http=None,
        facility_id: str = FACILITY_ID,
        court_id: str = COURT_ID,
        base_url: str = GSPORTS_BASE_URL,
        timeout: float = BOOKING_TIMEOUT,
        now: Optional[Callable[[], dt.datetime]] = None,
    ):
        self.session_cache = session_cache
        self.http = http or requests.Session()
        self.facility_id = facility_id
        self.court_id = court_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.now = now or (lambda: dt.datetime.now(IST))

    def build_payload(self, time_range: str) -> dict:
        return {
            "facility_id": self.facility_id,
            "date": target_date(self.now()),
            "time_slot": time_range,
            "court_id": self.court_id,
        }

    def attempt(self, time_range: str) -> BookingOutcome:
        """
        Book `time_range` ("HH:MM-HH:MM") for tomorrow.

        returns: BookingOutcome; this method does not raise for expected
        failures (login, HTTP status, network).
        """
        logger.info(f"[booking] attempting {time_range}")
        payload = self.build_payload(time_range)

        try:
            token = self.session_cache.get_credential()
        except LoginError as e:
            logger.error(f"[booking] login failed: {e}")
            return BookingOutcome(OutcomeKind.LOGIN_FAILED, LOGIN_FAILED_MESSAGE)

        try:
            r = self.http.post(
                f"{self.base_url}/api/book",
                json=payload,
                headers={
                    "Cookie": f"session={token}",
                    "Content-Type": "application/json",
                    "User-Agent": "Mozilla/5.0",
                    "Connection": "keep-alive",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"[booking] request error: {e}")
            return BookingOutcome(OutcomeKind.TRANSPORT_ERROR, f"❌ Error: {e}")

        status = r.status_code
        logger.info(f"[booking] {payload['date']} {time_range} -> HTTP {status}")
        if status in (200, 201):
            return BookingOutcome(OutcomeKind.SUCCESS, success_message(time_range), status)
        if status == 409:
            return BookingOutcome(OutcomeKind.WEEKLY_LIMIT, WEEKLY_LIMIT_MESSAGE, status)
        if status in (401, 403):
            # Server no longer accepts the cached token; next attempt logs in again
            self.session_cache.invalidate()
        return BookingOutcome(OutcomeKind.REJECTED, f"❌ Booking failed (Status: {status})", status)
