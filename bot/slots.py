# bot/slots.py
"""
The fixed catalogue of bookable gym windows (one hour each, 3 PM to 9 PM).
Button ids sent to Discord are the catalogue keys ("1".."6") plus "skip".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

SKIP_ID = "skip"


class UnknownSlot(KeyError):
    """Raised when a stored or clicked id is not in the catalogue."""


@dataclass(frozen=True)
class Slot:
    id: str
    label: str        # "3-4 PM"
    time_range: str   # "15:00-16:00", exactly what the booking API expects
    icon: str


SLOTS: Dict[str, Slot] = {
    s.id: s
    for s in (
        Slot("1", "3-4 PM", "15:00-16:00", "🕒"),
        Slot("2", "4-5 PM", "16:00-17:00", "🕓"),
        Slot("3", "5-6 PM", "17:00-18:00", "🕔"),
        Slot("4", "6-7 PM", "18:00-19:00", "🕕"),
        Slot("5", "7-8 PM", "19:00-20:00", "🕖"),
        Slot("6", "8-9 PM", "20:00-21:00", "🕗"),
    )
}


def resolve(slot_id) -> Slot:
    try:
        return SLOTS[slot_id]
    except (KeyError, TypeError):
        raise UnknownSlot(slot_id) from None
