"""
Helpers for doctor availability labels.

Labels are 24-hour ``HH:MM`` (optionally ``HH:MM:SS``) time-of-day strings.
Matching between labels and appointment timestamps happens at minute
precision, so ``"09:00:00"`` and ``"09:00"`` refer to the same slot.
"""
import re
from datetime import datetime, time
from typing import Optional

_LABEL_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")

AM = "AM"
PM = "PM"


def parse_time_label(label: Optional[str]) -> Optional[time]:
    """Parse an availability label, returning None when it is not a time."""
    if not isinstance(label, str):
        return None
    match = _LABEL_PATTERN.match(label.strip())
    if not match:
        return None
    hour, minute, second = match.groups()
    return time(int(hour), int(minute), int(second or 0))


def slot_key(value: time) -> str:
    """Minute-precision key used to compare labels with booked times."""
    return value.strftime("%H:%M")


def truncate_to_minute(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def normalize_period(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.strip().upper()
    if normalized in (AM, PM):
        return normalized
    return None


def label_period(label: str) -> Optional[str]:
    """Classify a label as AM or PM.

    Parsed labels are AM before 12:00 and PM from 12:00. Labels that do not
    parse fall back to looking for a literal "AM"/"PM" in the text.
    """
    parsed = parse_time_label(label)
    if parsed is not None:
        return AM if parsed.hour < 12 else PM

    upper = (label or "").upper()
    if AM in upper:
        return AM
    if PM in upper:
        return PM
    return None


def has_period(labels, period: str) -> bool:
    """True when any label falls in the given half of the day."""
    return any(label_period(label) == period for label in labels or [] if label)
