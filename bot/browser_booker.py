"""
Browser-driven booking (BOOKING_MODE=browser).

Same contract as gitam_booker.BookingExecutor.attempt(), but clicks through
gsports in headless Chromium instead of calling the API. Useful when the API
contract changes under us.

Every step has a list of locators tried in order; the first visible one wins.
If none match, the step fails (SelectorNotFound) and the attempt ends there:
no retries beyond the listed alternates.
"""

from __future__ import annotations

import datetime as dt
from typing import Callable, List, Optional

from loguru import logger
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page, sync_playwright
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from bot import config
from gitam_booker import (
    IST,
    LOGIN_FAILED_MESSAGE,
    WEEKLY_LIMIT_MESSAGE,
    BookingOutcome,
    OutcomeKind,
    slot_start,
    success_message,
)

LOGIN_EMAIL = ["input[name='email']", "input[type='email']", "#email"]
LOGIN_PASSWORD = ["input[name='password']", "input[type='password']", "#password"]
LOGIN_SUBMIT = ["button[type='submit']", "button:has-text('Login')", "button:has-text('Sign in')"]
CONFIRM = ["button:has-text('Confirm')", "button:has-text('Book Now')", "button:has-text('Book')"]
BOOKED = ["text=Booking confirmed", "text=Successfully booked", ".alert-success"]
WEEKLY_LIMIT = ["text=Weekly limit reached", "text=maximum bookings for this week", ".alert-limit"]


class SelectorNotFound(LookupError):
    def __init__(self, step: str, selectors: List[str]):
        super().__init__(f"{step}: none of {selectors} matched")
        self.step = step
        self.selectors = selectors


def first_match(page: Page, selectors: List[str], timeout_ms: int, step: str = "step") -> Locator:
    """Return the first selector in `selectors` that becomes visible within `timeout_ms`."""
    for sel in selectors:
        loc = page.locator(sel).first
        try:
            loc.wait_for(state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            logger.debug(f"[browser] {step}: {sel} not found, trying next")
            continue
        logger.debug(f"[browser] {step}: matched {sel}")
        return loc
    raise SelectorNotFound(step, selectors)


def date_selectors(day: dt.date) -> List[str]:
    return [
        f"[data-date='{day.isoformat()}']",
        f"[data-date='{day:%d-%m-%Y}']",
        f"td:not(.disabled) >> text='{day.day}'",
    ]


def slot_selectors(time_range: str) -> List[str]:
    start = slot_start(time_range)
    return [
        f"[data-slot='{time_range}']",
        f"button:has-text('{time_range}')",
        f"button:has-text('{start}')",
    ]


class PlaywrightBookingExecutor:
    def __init__(
        self,
        email: Optional[str],
        password: Optional[str],
        *,
        facility_url: str = config.GSPORTS_FACILITY_PAGE,
        step_timeout_ms: int = config.BROWSER_STEP_TIMEOUT_MS,
        headless: bool = config.HEADLESS,
        now: Optional[Callable[[], dt.datetime]] = None,
    ):
        self.email = email
        self.password = password
        self.facility_url = facility_url
        self.step_timeout_ms = step_timeout_ms
        self.headless = headless
        self.now = now or (lambda: dt.datetime.now(IST))

    def attempt(self, time_range: str) -> BookingOutcome:
        if not self.email or not self.password:
            return BookingOutcome(OutcomeKind.LOGIN_FAILED, LOGIN_FAILED_MESSAGE)
        try:
            with sync_playwright() as pw:
                browser = pw.chromium.launch(headless=self.headless)
                try:
                    page = browser.new_page()
                    return self._run(page, time_range)
                finally:
                    browser.close()
        except SelectorNotFound as e:
            logger.error(f"[browser] {e}")
            return BookingOutcome(OutcomeKind.REJECTED, f"❌ Booking failed (step: {e.step})")
        except PlaywrightError as e:
            logger.error(f"[browser] playwright error: {e}")
            return BookingOutcome(OutcomeKind.TRANSPORT_ERROR, f"❌ Error: {e}")

    def _run(self, page: Page, time_range: str) -> BookingOutcome:
        t = self.step_timeout_ms
        page.goto(self.facility_url, wait_until="domcontentloaded", timeout=t)

        if not self._login(page):
            return BookingOutcome(OutcomeKind.LOGIN_FAILED, LOGIN_FAILED_MESSAGE)

        tomorrow = (self.now() + dt.timedelta(days=1)).date()
        first_match(page, date_selectors(tomorrow), t, "date").click()
        first_match(page, slot_selectors(time_range), t, "slot").click()
        first_match(page, CONFIRM, t, "confirm").click()
        page.wait_for_load_state("networkidle", timeout=t)

        try:
            first_match(page, BOOKED, t, "confirmation")
        except SelectorNotFound:
            # No confirmation: a limit notice is the only refusal we can name
            first_match(page, WEEKLY_LIMIT, t, "confirmation")
            return BookingOutcome(OutcomeKind.WEEKLY_LIMIT, WEEKLY_LIMIT_MESSAGE)
        logger.info(f"[browser] booked {time_range}")
        return BookingOutcome(OutcomeKind.SUCCESS, success_message(time_range))

    def _login(self, page: Page) -> bool:
        t = self.step_timeout_ms
        try:
            first_match(page, LOGIN_EMAIL, t, "login email").fill(self.email)
            first_match(page, LOGIN_PASSWORD, t, "login password").fill(self.password)
            first_match(page, LOGIN_SUBMIT, t, "login submit").click()
        except SelectorNotFound as e:
            logger.error(f"[browser] login form: {e}")
            return False
        page.wait_for_load_state("networkidle", timeout=t)
        # Still looking at a password box -> credentials were rejected
        if page.locator(LOGIN_PASSWORD[1]).count() and page.locator(LOGIN_PASSWORD[1]).first.is_visible():
            logger.error("[browser] still on the login page after submit")
            return False
        return True
