"""
--------------------
Simple command-line entrypoint to book one gym slot for tomorrow without the
Discord bot (handy for checking credentials before the 17:00 run).

Usage example:
    GITAM_EMAIL=... GITAM_PASSWORD=... python cli_book.py --slot 3
    python cli_book.py --list
"""

import argparse
import os
import sys

from bot.slots import SLOTS, UnknownSlot, resolve
from gitam_booker import BookingExecutor, SessionCache, target_date

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Book a GITAM gym slot for tomorrow.")
    group = ap.add_mutually_exclusive_group(required=True)
    group.add_argument("--slot", help="Slot id 1-6 (see --list)")
    group.add_argument("--list", action="store_true", help="Print the slot catalogue and exit")
    ap.add_argument("--email", default=os.getenv("GITAM_EMAIL"), help="Defaults to $GITAM_EMAIL")
    ap.add_argument("--password", default=os.getenv("GITAM_PASSWORD"), help="Defaults to $GITAM_PASSWORD")
    args = ap.parse_args(argv)

    if args.list:
        for s in SLOTS.values():
            print(f"{s.id}  {s.icon} {s.label:<7} {s.time_range}")
        return 0

    try:
        slot = resolve(args.slot)
    except UnknownSlot:
        print(f"Unknown slot {args.slot!r}. Use --list to see valid ids.", file=sys.stderr)
        return 2

    print(f"Booking {slot.label} ({slot.time_range}) for {target_date()}...")
    executor = BookingExecutor(SessionCache(args.email, args.password))
    outcome = executor.attempt(slot.time_range)
    print(outcome.message)
    return 0 if outcome.success else 1

if __name__ == "__main__":
    sys.exit(main())
