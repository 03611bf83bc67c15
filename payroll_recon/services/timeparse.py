from __future__ import annotations

import re
from datetime import datetime, time, timedelta

ABSENT_PUNCH = "-"
MINUTES_PER_DAY = 24 * 60

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?\s*$")
_DURATION_RE = re.compile(r"^\s*(\d+):(\d{1,2})(?::\d{1,2})?\s*$")
_SHIFT_WINDOW_RE = re.compile(r"(\d{1,2}):(\d{2})\s*TO\s*(\d{1,2}):(\d{2})", re.IGNORECASE)


def is_punch(value: object) -> bool:
    """True when a time-clock cell holds a real punch rather than the "-" sentinel."""
    if value is None:
        return False
    if isinstance(value, (time, datetime)):
        return True
    text = str(value).strip()
    return bool(text) and text != ABSENT_PUNCH


def fraction_of_day_to_minutes(value: float) -> int:
    fraction = float(value) % 1
    return int(round(fraction * MINUTES_PER_DAY)) % MINUTES_PER_DAY


def parse_clock_minutes(value: object) -> int:
    """Minutes since midnight for "HH:MM" text, time objects or fractional-day serials.

    Anything unparseable yields 0 so a malformed cell under-counts instead of failing.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, datetime):
        return value.hour * 60 + value.minute
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if isinstance(value, timedelta):
        return int(value.total_seconds() // 60) % MINUTES_PER_DAY
    if isinstance(value, (int, float)):
        if 0 <= value < 1:
            return fraction_of_day_to_minutes(value)
        return 0

    match = _CLOCK_RE.match(str(value))
    if match is None:
        return 0
    hours = int(match.group(1))
    minutes = int(match.group(2))
    if hours > 24 or minutes > 59:
        return 0
    return hours * 60 + minutes


def parse_duration_minutes(value: object) -> int:
    """Minutes in an "HH:MM" duration or a decimal-hours value ("1.5" -> 90)."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, timedelta):
        return max(0, int(value.total_seconds() // 60))
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if isinstance(value, (int, float)):
        return max(0, int(round(float(value) * 60)))

    text = str(value).strip()
    if not text or text == ABSENT_PUNCH:
        return 0
    match = _DURATION_RE.match(text)
    if match is not None:
        return int(match.group(1)) * 60 + int(match.group(2))
    try:
        hours = float(text)
    except ValueError:
        return 0
    if hours != hours or hours < 0:
        return 0
    return int(round(hours * 60))


def parse_minutes_count(value: object) -> int:
    """Plain minute counts such as the sheet's late/early columns."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(0, int(round(value)))
    text = str(value).strip()
    if not text:
        return 0
    if ":" in text:
        return parse_duration_minutes(text)
    try:
        number = float(text)
    except ValueError:
        return 0
    if number != number:
        return 0
    return max(0, int(round(number)))


def parse_shift_window(value: object) -> tuple[int, int] | None:
    """Parse a custom timing such as "9:00 TO 6:00" into (start, end) minutes.

    Twelve-hour style ends that are not after the start are read as PM, so
    "9:00 TO 6:00" means 09:00-18:00.
    """
    if value is None:
        return None
    match = _SHIFT_WINDOW_RE.search(str(value))
    if match is None:
        return None

    start_hour, start_minute = int(match.group(1)), int(match.group(2))
    end_hour, end_minute = int(match.group(3)), int(match.group(4))
    if 1 <= start_hour <= 12 and 1 <= end_hour <= 12 and end_hour <= start_hour:
        end_hour += 12
    return start_hour * 60 + start_minute, end_hour * 60 + end_minute


def minutes_to_hhmm(minutes: float) -> str:
    if minutes is None or minutes != minutes or minutes <= 0:
        return "0:00"
    total = int(round(minutes))
    return f"{total // 60}:{total % 60:02d}"


def minutes_to_decimal_hours(minutes: float) -> str:
    if minutes is None or minutes != minutes or minutes == 0:
        return "0.00"
    return f"{minutes / 60:.2f}"


def minutes_to_hours(minutes: float, digits: int = 2) -> float:
    return round(float(minutes) / 60, digits)
