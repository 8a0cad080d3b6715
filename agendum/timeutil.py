"""
ICS date-time handling.

Raw DTSTART / DTEND values come in three shapes:

    20250101T080000Z        UTC
    20250101T080000+0100    explicit offset
    20250101T080000         naive, interpreted in the reference zone

All of them are converted into one reference zone (`tz`). In production this
is the machine's current UTC offset (see local_offset()); tests pass
datetime.timezone.utc to get stable expectations.
"""

from __future__ import annotations

import re

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


UTC_FORMAT = "%Y%m%dT%H%M%SZ"
OFFSET_FORMAT = "%Y%m%dT%H%M%S%z"
NAIVE_FORMAT = "%Y%m%dT%H%M%S"

ISO_LOCAL_FORMAT = "%Y-%m-%dT%H:%M:%S"

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def local_offset() -> tzinfo:
    """
    Return the current local UTC offset of this machine as a fixed timezone.
    """
    offset = datetime.now().astimezone().utcoffset() or timedelta(0)
    return timezone(offset)


def resolve_tz(name: Optional[str]) -> tzinfo:
    """
    Turn a user supplied zone name into a tzinfo.

    Accepts "local" (or nothing), "UTC", fixed offsets like "+02:00" / "-0530"
    and IANA names such as "Europe/Paris". Raises ValueError otherwise.
    """
    value = (name or "").strip()
    if not value or value.lower() == "local":
        return local_offset()
    if value.upper() in ("UTC", "Z"):
        return timezone.utc

    m = _OFFSET_RE.match(value)
    if m:
        sign = -1 if m.group(1) == "-" else 1
        hours, minutes = int(m.group(2)), int(m.group(3))
        if hours > 23 or minutes > 59:
            raise ValueError(f"Invalid UTC offset: {name!r}")
        return timezone(sign * timedelta(hours=hours, minutes=minutes))

    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name!r}") from exc


def _localize(naive: datetime, tz: tzinfo) -> Optional[datetime]:
    """
    Attach `tz` to a wall-clock time.

    Repeated wall-clock times resolve to the earlier instant (fold=0).
    Times skipped by a transition have no instant and give None.
    """
    candidate = naive.replace(tzinfo=tz, fold=0)
    roundtrip = candidate.astimezone(timezone.utc).astimezone(tz)
    if roundtrip.replace(tzinfo=None) != naive:
        return None
    return candidate


def parse_ical_datetime(value: str, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Parse one raw ICS date-time into an aware datetime expressed in `tz`.

    Returns None when the value matches none of the supported shapes.
    """
    ref = tz if tz is not None else local_offset()
    raw = (value or "").strip()
    if not raw:
        return None

    # UTC
    try:
        dt = datetime.strptime(raw, UTC_FORMAT).replace(tzinfo=timezone.utc)
        return dt.astimezone(ref)
    except ValueError:
        pass

    # Explicit offset
    try:
        dt = datetime.strptime(raw, OFFSET_FORMAT)
        return dt.astimezone(ref)
    except ValueError:
        pass

    # Naive local time
    try:
        naive = datetime.strptime(raw, NAIVE_FORMAT)
    except ValueError:
        return None
    return _localize(naive, ref)


def format_local_iso(dt: datetime) -> str:
    """
    Render a datetime as local ISO-8601 without offset (YYYY-MM-DDTHH:MM:SS).
    """
    return dt.strftime(ISO_LOCAL_FORMAT)


def duration_hours(start: datetime, end: datetime) -> float:
    """
    Whole minutes between start and end, expressed in hours.

    Partial minutes are truncated toward zero. A reversed interval gives a
    negative value.
    """
    delta = end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    minutes = int(delta.total_seconds() / 60)
    return minutes / 60
