"""
ludoteca/app/utils/schedule_helper.py

Wall-clock hours ("HH:MM") used by daycare slots and admin range input.

Formats:
- "09:30"          → 570 minutes
- "09:00-12:00"    → {"start": "09:00", "end": "12:00"}
"""

import re
from datetime import date, datetime, time
from typing import Optional

from ludoteca.app.i18n.loader import t
from ludoteca.app.utils.dates import parse_api_datetime

# Day keys, Monday first (date.weekday() order)
DAYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]

HOUR_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
RANGE_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*[-–—]\s*(\d{1,2}):(\d{2})$")


def time_str_to_minutes(value: str) -> int:
    """"09:30" → 570."""
    m = HOUR_RE.match(value.strip())
    if not m:
        raise ValueError(f"invalid hour: {value!r}")
    hour, minute = int(m.group(1)), int(m.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"invalid hour: {value!r}")
    return hour * 60 + minute


def minutes_to_time_str(minutes: int) -> str:
    """570 → "09:30"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_hour(value) -> str:
    """
    Normalise an hour to "HH:MM".

    Accepts "9:00", "09:00", "09:00:00", a full ISO datetime string,
    a datetime/time object or an integer hour.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid hour: {value!r}")
    if isinstance(value, int):
        if not 0 <= value <= 23:
            raise ValueError(f"invalid hour: {value!r}")
        return f"{value:02d}:00"
    if isinstance(value, (datetime, time)):
        return value.strftime("%H:%M")
    if isinstance(value, date):
        raise ValueError(f"invalid hour: {value!r}")

    text = str(value).strip()
    if "T" in text:
        return parse_api_datetime(text).strftime("%H:%M")
    return minutes_to_time_str(time_str_to_minutes(text))


def parse_time_input(text: str) -> Optional[dict]:
    """
    Parse an admin hour range.

    - "09:30-12:00" → {"start": "09:30", "end": "12:00"}
    - "9:00 – 10:00" → {"start": "09:00", "end": "10:00"}

    Returns None if not recognised or if end is not after start.
    """
    match = RANGE_RE.match(text.strip())
    if not match:
        return None

    h1, m1, h2, m2 = (int(g) for g in match.groups())

    if not (0 <= h1 <= 23 and 0 <= h2 <= 23):
        return None
    if not (0 <= m1 <= 59 and 0 <= m2 <= 59):
        return None
    if h2 * 60 + m2 <= h1 * 60 + m1:
        return None

    return {"start": f"{h1:02d}:{m1:02d}", "end": f"{h2:02d}:{m2:02d}"}


def day_name(value: date, lang: str | None = None) -> str:
    """Short day name from i18n."""
    return t(f"day:{DAYS[value.weekday()]}", lang)


def day_name_full(value: date, lang: str | None = None) -> str:
    """Full day name from i18n."""
    return t(f"day:{DAYS[value.weekday()]}:full", lang)


def format_slot_hours(slot) -> str:
    """
    "HH:MM-HH:MM" for either slot variant.

    - EventSlot     → start_time-end_time
    - RecurringSlot → open_hour-close_hour
    """
    if hasattr(slot, "open_hour"):
        return f"{slot.open_hour}-{slot.close_hour}"
    return f"{slot.start_time:%H:%M}-{slot.end_time:%H:%M}"


def format_slot_label(slot, lang: str | None = None) -> str:
    """List and selection label, e.g. "Lun 03.06 09:00-10:00"."""
    return f"{day_name(slot.date, lang)} {slot.date:%d.%m} {format_slot_hours(slot)}"
