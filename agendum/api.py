"""
Public entry points.

These are the functions a host (CLI, web worker, notebook ...) calls:

    parse_ics(content)                     -> raw events
    parse_ics_detailed(content)            -> raw events + diagnostics
    parse_and_normalize(content)           -> normalized events
    parse_and_normalize_detailed(content)  -> normalized events + diagnostics
    renormalize_raw_events(payload)        -> normalized events as dicts

Malformed calendar data never raises (it ends up in the diagnostics).
Structurally invalid payloads handed to renormalize_raw_events() raise
InvalidInputError instead of silently producing an empty result.
"""

from __future__ import annotations

from datetime import tzinfo
from collections.abc import Sequence
from typing import Any, Dict, List, Optional

from agendum.model import DetailedResult, InvalidInputError, NormalizedEvent, ParseOutput, RawEvent
from agendum.normalize import normalize
from agendum.parse import parse_ics_content, parse_ics_content_with_diagnostics


def parse_ics(content: str) -> List[RawEvent]:
    return parse_ics_content(content)


def parse_ics_detailed(content: str) -> ParseOutput:
    return parse_ics_content_with_diagnostics(content)


def parse_and_normalize(content: str, tz: Optional[tzinfo] = None) -> List[NormalizedEvent]:
    """
    Decode ICS text and normalize every event in one go.
    """
    return normalize(parse_ics_content(content), tz)


def parse_and_normalize_detailed(content: str, tz: Optional[tzinfo] = None) -> DetailedResult:
    """
    Like parse_and_normalize(), but also returns the decoder diagnostics.
    """
    parsed = parse_ics_content_with_diagnostics(content)
    return DetailedResult(events=normalize(parsed.events, tz), diagnostics=parsed.diagnostics)


def raw_events_from_payload(payload: Any) -> List[RawEvent]:
    """
    Convert a decoded JSON payload (list of objects) into RawEvents.
    """
    if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
        raise InvalidInputError(f"raw events must be a list, got {type(payload).__name__}")

    events: List[RawEvent] = []
    for index, item in enumerate(payload):
        try:
            events.append(RawEvent.from_dict(item))
        except InvalidInputError as exc:
            raise InvalidInputError(f"raw event #{index}: {exc}") from exc
    return events


def renormalize_raw_events(payload: Any, tz: Optional[tzinfo] = None) -> List[Dict[str, Any]]:
    """
    Normalize previously parsed (e.g. cached) raw events without re-parsing ICS.
    """
    return [ev.to_dict() for ev in normalize(raw_events_from_payload(payload), tz)]
