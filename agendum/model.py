"""
Central data model definitions used across the project.

This module defines the canonical structure of raw and normalized events so that:
- the decoder, the normalizer and the CLI share the same field names
- every record can be turned into plain JSON-compatible dicts and back
- structurally invalid input is reported with one distinct error type
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from collections.abc import Mapping
from typing import Any, List


# Sentinel values used when no information could be extracted
TYPE_OTHER = "AUTRE"
NO_TEACHER = "—"

# Maximum number of parser error messages kept in diagnostics
MAX_ERROR_MESSAGES = 5

RAW_FIELDS = ("uid", "summary", "description", "location", "start", "end")


class InvalidInputError(ValueError):
    """
    Raised when data handed to the public boundary does not have the expected shape.
    """


@dataclass(frozen=True)
class RawEvent:
    """
    One VEVENT as produced by the decoder.

    `start` and `end` keep the raw ICS date-time encoding (e.g. 20250101T080000Z).
    """

    uid: str
    summary: str = ""
    description: str = ""
    location: str = ""
    start: str = ""
    end: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "RawEvent":
        """
        Build a RawEvent from a mapping (e.g. decoded JSON).

        Missing keys and None values become empty strings; anything else
        that is not a string is rejected.
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError(f"raw event must be an object, got {type(data).__name__}")

        values: dict[str, str] = {}
        for name in RAW_FIELDS:
            value = data.get(name)
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise InvalidInputError(f"raw event field {name!r} must be a string, got {type(value).__name__}")
            values[name] = value
        return cls(**values)


@dataclass
class NormalizedEvent:
    """
    Represents one event after normalization.

    Exactly one NormalizedEvent is produced per RawEvent, in the same order.
    """

    raw: RawEvent
    subject: str
    type_: str
    start_iso: str
    end_iso: str
    duration_hours: float
    teachers: List[str] = field(default_factory=lambda: [NO_TEACHER])
    promos: List[str] = field(default_factory=list)
    cleaned_description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw": self.raw.to_dict(),
            "subject": self.subject,
            "type": self.type_,
            "start_iso": self.start_iso,
            "end_iso": self.end_iso,
            "duration_hours": self.duration_hours,
            "teachers": list(self.teachers),
            "promos": list(self.promos),
            "cleaned_description": self.cleaned_description,
        }


@dataclass
class ParseDiagnostics:
    """
    Counters collected while decoding ICS text.
    """

    calendars_parsed: int = 0
    parser_errors: int = 0
    skipped_events_without_uid: int = 0
    parser_error_messages: List[str] = field(default_factory=list)

    def record_error(self, message: str) -> None:
        self.parser_errors += 1
        if len(self.parser_error_messages) < MAX_ERROR_MESSAGES:
            self.parser_error_messages.append(message)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ParseOutput:
    events: List[RawEvent] = field(default_factory=list)
    diagnostics: ParseDiagnostics = field(default_factory=ParseDiagnostics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "events": [ev.to_dict() for ev in self.events],
            "diagnostics": self.diagnostics.to_dict(),
        }


@dataclass
class DetailedResult:
    """
    Normalized events together with the diagnostics of the parse that produced them.
    """

    events: List[NormalizedEvent] = field(default_factory=list)
    diagnostics: ParseDiagnostics = field(default_factory=ParseDiagnostics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "events": [ev.to_dict() for ev in self.events],
            "diagnostics": self.diagnostics.to_dict(),
        }
