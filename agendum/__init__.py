"""
agendum – ICS timetable import and event normalization.
"""

from agendum.api import (
    parse_and_normalize,
    parse_and_normalize_detailed,
    parse_ics,
    parse_ics_detailed,
    renormalize_raw_events,
)
from agendum.model import InvalidInputError, NormalizedEvent, ParseDiagnostics, RawEvent
from agendum.normalize import normalize

__all__ = [
    "InvalidInputError",
    "NormalizedEvent",
    "ParseDiagnostics",
    "RawEvent",
    "normalize",
    "parse_and_normalize",
    "parse_and_normalize_detailed",
    "parse_ics",
    "parse_ics_detailed",
    "renormalize_raw_events",
]
