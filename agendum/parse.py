"""
Parsing (ICS text -> raw events).

- Splits the input into top-level VCALENDAR blocks
- Decodes every block with icalendar
- Extracts EACH VEVENT as exactly ONE RawEvent (uid, summary, description,
  location, start, end)
- Collects diagnostics instead of failing:
  - malformed blocks are counted and sampled (first 5 messages)
  - events without UID are skipped and counted

Important rules (DO NOT CHANGE):
- 1 VEVENT with UID = 1 RawEvent
- No recurrence / RRULE logic
- DTSTART / DTEND stay in their raw ICS encoding, interpretation happens
  in agendum.timeutil
"""

from __future__ import annotations

import logging

from typing import Any, Iterator, List, Optional, Tuple

from icalendar import Calendar

from agendum.model import ParseDiagnostics, ParseOutput, RawEvent


logger = logging.getLogger(__name__)

BEGIN_CALENDAR = "BEGIN:VCALENDAR"
END_CALENDAR = "END:VCALENDAR"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _calendar_blocks(content: str) -> Iterator[Tuple[Optional[str], Optional[str]]]:
    """
    Yields (block_text, None) for each complete VCALENDAR block and
    (None, error_message) for each structural problem, in input order.
    """
    current: Optional[List[str]] = None
    opened_at = 0

    for lineno, line in enumerate(content.splitlines(), start=1):
        # Folded continuation lines never open or close a block
        if line[:1] in (" ", "\t"):
            if current is not None:
                current.append(line)
            continue

        marker = line.strip().upper()

        if marker == BEGIN_CALENDAR:
            if current is not None:
                yield None, f"line {opened_at}: VCALENDAR block not terminated before line {lineno}"
            current = [line.strip()]
            opened_at = lineno
            continue

        if current is None:
            if marker == END_CALENDAR:
                yield None, f"line {lineno}: END:VCALENDAR without matching BEGIN"
            continue

        current.append(line)
        if marker == END_CALENDAR:
            yield "\r\n".join(current) + "\r\n", None
            current = None

    if current is not None:
        yield None, f"line {opened_at}: VCALENDAR block not terminated"


def _first(value: Any) -> Any:
    # Repeated properties come back as a list, keep the first one
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _text(component: Any, name: str) -> str:
    """
    Returns an unescaped text property, or "" when it is absent.
    """
    value = _first(component.get(name))
    if value is None:
        return ""
    return str(value)


def _raw_datetime(component: Any, name: str) -> str:
    """
    Returns the date-time property in its ICS wire encoding (e.g. 20250101T080000Z).
    """
    value = _first(component.get(name))
    if value is None:
        return ""
    to_ical = getattr(value, "to_ical", None)
    if to_ical is None:
        return str(value)
    encoded = to_ical()
    if isinstance(encoded, bytes):
        return encoded.decode("utf-8", errors="replace")
    return str(encoded)


def _events_from_calendar(calendar: Calendar, diagnostics: ParseDiagnostics) -> List[RawEvent]:
    events: List[RawEvent] = []

    for component in calendar.walk("VEVENT"):
        uid = _text(component, "UID").strip()
        if not uid:
            diagnostics.skipped_events_without_uid += 1
            continue

        events.append(
            RawEvent(
                uid=uid,
                summary=_text(component, "SUMMARY"),
                description=_text(component, "DESCRIPTION"),
                location=_text(component, "LOCATION"),
                start=_raw_datetime(component, "DTSTART"),
                end=_raw_datetime(component, "DTEND"),
            )
        )

    return events


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_ics_content_with_diagnostics(content: str) -> ParseOutput:
    """
    Parses ICS text and returns all raw events plus diagnostics.

    Never raises for malformed calendar data: broken blocks are recorded in
    the diagnostics and the remaining blocks are still decoded.
    """
    output = ParseOutput()
    diagnostics = output.diagnostics

    for block, error in _calendar_blocks(content or ""):
        if error is not None:
            logger.warning("Skipping malformed calendar data: %s", error)
            diagnostics.record_error(error)
            continue

        try:
            calendar = Calendar.from_ical(block)
        except Exception as exc:  # icalendar raises ValueError, KeyError, ... on broken input
            message = f"{type(exc).__name__}: {exc}"
            logger.warning("Skipping calendar rejected by icalendar: %s", message)
            diagnostics.record_error(message)
            continue

        diagnostics.calendars_parsed += 1
        output.events.extend(_events_from_calendar(calendar, diagnostics))

    logger.debug(
        "Parsed %d calendar(s), %d event(s), %d error(s), %d event(s) without UID",
        diagnostics.calendars_parsed,
        len(output.events),
        diagnostics.parser_errors,
        diagnostics.skipped_events_without_uid,
    )
    return output


def parse_ics_content(content: str) -> List[RawEvent]:
    """
    Parses ICS text and returns only the raw events.
    """
    return parse_ics_content_with_diagnostics(content).events
