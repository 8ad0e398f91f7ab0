"""Admission policy for reservation times.

Everything here is pure: the only outside input is the current instant, which
callers may pass explicitly as ``now``.
"""

import re
from collections.abc import Collection
from datetime import datetime, time, timezone, tzinfo
from enum import Enum

WEEKDAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

_HHMM = re.compile(r"^\s*(\d{1,2}):(\d{1,2})\s*$")


class Admission(str, Enum):
    ACCEPTED = "accepted"
    PAST = "past"
    DAY_CLOSED = "day_closed"
    HOURS_CLOSED = "hours_closed"


def parse_hhmm(value: str | None) -> time | None:
    """Parse ``HH:MM`` (hours 0-23, minutes 0-59); ``None`` if it does not parse."""
    if not isinstance(value, str):
        return None
    match = _HHMM.match(value)
    if match is None:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if 0 <= hours < 24 and 0 <= minutes < 60:
        return time(hours, minutes)
    return None


def day_key(candidate: datetime) -> str:
    return WEEKDAY_KEYS[candidate.weekday()]


def _require_aware(value: datetime, name: str) -> None:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware, got {value!r}")


def is_future(candidate: datetime, now: datetime | None = None) -> bool:
    """Raises ``ValueError`` if either instant is naive."""
    if now is None:
        now = datetime.now(timezone.utc)
    _require_aware(candidate, "candidate")
    _require_aware(now, "now")
    return candidate > now


def time_in_range(candidate: datetime, open_time: str, close_time: str) -> bool:
    """Whether the wall-clock time of ``candidate`` lies in ``[open_time, close_time]``.

    Unparsable bounds allow every time of day.
    """
    opens = parse_hhmm(open_time)
    closes = parse_hhmm(close_time)
    if opens is None or closes is None:
        return True
    wall_clock = candidate.time()
    return opens <= wall_clock <= closes


def evaluate(
    candidate: datetime,
    open_days: Collection[str],
    open_time: str,
    close_time: str,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> Admission:
    """Return the first admission rule ``candidate`` fails, or ``ACCEPTED``."""
    if not is_future(candidate, now):
        return Admission.PAST

    local = candidate.astimezone(tz) if tz is not None else candidate
    if day_key(local) not in {day.strip().lower() for day in open_days}:
        return Admission.DAY_CLOSED
    if not time_in_range(local, open_time, close_time):
        return Admission.HOURS_CLOSED
    return Admission.ACCEPTED


def is_admissible(
    candidate: datetime,
    open_days: Collection[str],
    open_time: str,
    close_time: str,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> bool:
    return evaluate(candidate, open_days, open_time, close_time, now=now, tz=tz) is Admission.ACCEPTED
