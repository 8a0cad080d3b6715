"""
Persistent cache of raw (decoded, not yet normalized) events.

File format:

    {"raw_events": [{"uid": ..., "summary": ..., ...}, ...]}

Design rationale:
- decoding ICS is the slow, lossy step; normalization rules evolve
- keeping the raw events lets us re-run normalization later without the
  original .ics file (see agendum.api.renormalize_raw_events)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List

from agendum.api import raw_events_from_payload
from agendum.model import InvalidInputError, RawEvent


CACHE_KEY = "raw_events"


def load_raw_events(path: str | Path) -> List[RawEvent]:
    """
    Load raw events from a cache file.

    Returns an empty list if the file does not exist yet.
    Unlike a missing file, a broken one is an error: it raises
    InvalidInputError so callers do not mistake it for an empty calendar.
    """
    cache_path = Path(path)

    # First run: nothing cached yet
    if not cache_path.exists():
        return []

    try:
        data = json.loads(cache_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidInputError(f"{cache_path}: not a valid JSON cache ({exc})") from exc

    if not isinstance(data, dict) or CACHE_KEY not in data:
        raise InvalidInputError(f"{cache_path}: expected an object with a {CACHE_KEY!r} list")

    return raw_events_from_payload(data[CACHE_KEY])


def save_raw_events(events: Iterable[RawEvent], path: str | Path) -> None:
    """
    Save raw events to a cache file.

    Creates parent directories if needed.
    """
    cache_path = Path(path)
    cache_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {CACHE_KEY: [ev.to_dict() for ev in events]}

    cache_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
