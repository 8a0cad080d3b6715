"""
Event normalization (RawEvent -> NormalizedEvent).

Pure and order preserving: one output per input, no I/O, no shared mutable
state. Every step has its own fallback so one odd event never breaks a batch:

- unknown type          -> AUTRE, whole summary as subject
- no teacher found      -> ["—"]
- unparseable date-time -> raw string kept, duration 0.0
"""

from __future__ import annotations

import logging

from datetime import tzinfo
from typing import Iterable, List, Optional

from agendum.classify import classify_summary
from agendum.extract import extract_people_and_promos
from agendum.model import NormalizedEvent, RawEvent
from agendum.timeutil import duration_hours, format_local_iso, local_offset, parse_ical_datetime


logger = logging.getLogger(__name__)


def normalize_event(raw: RawEvent, tz: Optional[tzinfo] = None) -> NormalizedEvent:
    """
    Normalizes exactly one raw event. `tz` is the reference zone for local times.
    """
    ref = tz if tz is not None else local_offset()

    type_, subject = classify_summary(raw.summary)
    teachers, promos, cleaned = extract_people_and_promos(raw.description)

    start_dt = parse_ical_datetime(raw.start, ref)
    end_dt = parse_ical_datetime(raw.end, ref)

    # Each timestamp falls back to its raw value on its own
    start_iso = format_local_iso(start_dt) if start_dt is not None else raw.start
    end_iso = format_local_iso(end_dt) if end_dt is not None else raw.end

    hours = 0.0
    if start_dt is not None and end_dt is not None:
        hours = duration_hours(start_dt, end_dt)
    else:
        logger.debug("Event %s: could not parse start=%r end=%r", raw.uid, raw.start, raw.end)

    return NormalizedEvent(
        raw=raw,
        subject=subject,
        type_=type_,
        start_iso=start_iso,
        end_iso=end_iso,
        duration_hours=hours,
        teachers=teachers,
        promos=promos,
        cleaned_description=cleaned,
    )


def normalize(raw_events: Iterable[RawEvent], tz: Optional[tzinfo] = None) -> List[NormalizedEvent]:
    """
    Normalizes a batch of raw events, keeping count and order.

    The reference zone is resolved once so every event of the batch uses the same offset.
    """
    ref = tz if tz is not None else local_offset()
    events = [normalize_event(raw, ref) for raw in raw_events]
    logger.debug("Normalized %d event(s)", len(events))
    return events
