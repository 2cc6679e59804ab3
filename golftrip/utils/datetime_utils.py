"""
Datetime utility functions.

Tee times are authored and displayed in the venue's Eastern Time zone and
stored as UTC instants.
"""

import os
from datetime import datetime
from typing import Dict, Union
import pytz

from golftrip.utils.constants import VENUE_TIMEZONE

DATETIME_LOCAL_FORMAT = "%Y-%m-%dT%H:%M"

venue_tz = pytz.timezone(VENUE_TIMEZONE)


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def ensure_utc(value: datetime) -> datetime:
    """
    Return ``value`` as an aware UTC datetime.

    Some database drivers (SQLite) hand back naive datetimes for
    ``DateTime(timezone=True)`` columns; those are treated as UTC.
    """
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def parse_datetime_local(value: str) -> datetime:
    """
    Convert a ``datetime-local`` form value to a UTC instant.

    The value (``YYYY-MM-DDTHH:MM``) is read as Eastern Time wall-clock time.
    Seconds are not accepted, so the value round-trips exactly through
    :func:`format_datetime_local`.
    During the fall-back hour the earlier (daylight time) occurrence is used.

    Args:
        value: Wall-clock string without UTC offset

    Returns:
        Aware UTC datetime

    Raises:
        ValueError: If the string is malformed or names a time skipped by the
            spring-forward transition
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Tee time is required")

    try:
        naive = datetime.strptime(value.strip(), DATETIME_LOCAL_FORMAT)
    except ValueError:
        raise ValueError(f"Tee time must be formatted as YYYY-MM-DDTHH:MM, got '{value}'")

    try:
        local = venue_tz.localize(naive, is_dst=None)
    except pytz.exceptions.NonExistentTimeError:
        raise ValueError(f"{value} does not exist in Eastern Time (daylight saving gap)")
    except pytz.exceptions.AmbiguousTimeError:
        local = venue_tz.localize(naive, is_dst=True)

    return local.astimezone(pytz.UTC)


def to_venue_time(value: datetime) -> datetime:
    """Convert a stored instant to Eastern Time."""
    return ensure_utc(value).astimezone(venue_tz)


def format_datetime_local(value: datetime) -> str:
    """
    Format a stored UTC instant for a ``datetime-local`` input, in Eastern Time.

    Inverse of :func:`parse_datetime_local`.
    """
    return to_venue_time(value).strftime(DATETIME_LOCAL_FORMAT)


def _clock(local: datetime) -> str:
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"


def format_tee_time_display(value: Union[str, datetime]) -> str:
    """
    Format a tee time for display, e.g. ``"Fri 8:30 AM"``.

    Args:
        value: Datetime or ISO 8601 string

    Returns:
        Short weekday and 12-hour clock time in Eastern Time
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    local = to_venue_time(value)
    return f"{local.strftime('%a')} {_clock(local)}"


def format_date_with_timezone(value: datetime) -> Dict[str, str]:
    """Split a tee time into display parts: ``{"date": "Wed, Mar 15", "time": "2:30 PM", "timezone": "ET"}``."""
    local = to_venue_time(value)
    return {
        "date": f"{local.strftime('%a, %b')} {local.day}",
        "time": _clock(local),
        "timezone": "ET",
    }


def current_tournament_year() -> int:
    """
    Year shown when a request does not name one.

    ``DEFAULT_TOURNAMENT_YEAR`` overrides the current Eastern Time year.
    """
    configured = os.getenv("DEFAULT_TOURNAMENT_YEAR")
    if configured and configured.strip().isdigit():
        return int(configured)
    return utcnow().astimezone(venue_tz).year
