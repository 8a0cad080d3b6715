"""
Derived views on normalized events.

Normalization knows nothing about user preferences. This module adds
what a timetable UI needs on top of it:

- rename / hide rules for subjects, teachers and promos ("DUPONT J" -> "DUPONT Jean")
- duplicate detection (the same session exported by two calendars)
- session ordinals ("TD3" = third TD of that subject for that group)
- teacher statistics
"""

from __future__ import annotations

import dataclasses

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from agendum.model import NO_TEACHER, NormalizedEvent
from agendum.timeutil import ISO_LOCAL_FORMAT


CORE_SESSION_TYPES = ("CM", "TD", "TP")

# Session types whose numbering restarts for every group
GROUPED_SESSION_TYPES = frozenset({"TD", "TP"})

NO_GROUP = "__nogroup"


# ---------------------------------------------------------------------------
# Rename / hide rules
# ---------------------------------------------------------------------------


@dataclass
class NormalizationRules:
    """
    User maintained corrections, applied after normalization.

    Maps go from the extracted value to the preferred value; hidden values
    are removed.
    """

    subjects: Dict[str, str] = field(default_factory=dict)
    teachers: Dict[str, str] = field(default_factory=dict)
    promos: Dict[str, str] = field(default_factory=dict)
    hidden_subjects: Set[str] = field(default_factory=set)
    hidden_teachers: Set[str] = field(default_factory=set)
    hidden_promos: Set[str] = field(default_factory=set)


def _rename(value: str, mapping: Dict[str, str], hidden: Set[str]) -> str:
    trimmed = (value or "").strip()
    if trimmed in hidden:
        return ""
    candidate = mapping.get(trimmed)
    return candidate.strip() if candidate else trimmed


def _rename_all(values: Iterable[str], mapping: Dict[str, str], hidden: Set[str]) -> List[str]:
    out: List[str] = []
    for value in values:
        renamed = _rename(value, mapping, hidden)
        if renamed and renamed not in out:
            out.append(renamed)
    return out


def apply_rules(events: Iterable[NormalizedEvent], rules: NormalizationRules) -> List[NormalizedEvent]:
    """
    Return copies of `events` with the rename / hide rules applied.
    """
    out: List[NormalizedEvent] = []
    for ev in events:
        teachers = _rename_all(ev.teachers or [NO_TEACHER], rules.teachers, rules.hidden_teachers)
        out.append(
            dataclasses.replace(
                ev,
                subject=_rename(ev.subject, rules.subjects, rules.hidden_subjects),
                teachers=teachers or [NO_TEACHER],
                promos=_rename_all(ev.promos, rules.promos, rules.hidden_promos),
            )
        )
    return out


# ---------------------------------------------------------------------------
# Duplicates
# ---------------------------------------------------------------------------


def duplicate_key(ev: NormalizedEvent) -> str:
    return "|".join([ev.start_iso, ev.end_iso, ev.subject, ev.type_, ", ".join(ev.teachers)])


def mark_duplicates(events: Iterable[NormalizedEvent]) -> List[bool]:
    """
    One flag per event: True when an earlier event has the same time, subject, type and teachers.
    """
    seen: Set[str] = set()
    flags: List[bool] = []
    for ev in events:
        key = duplicate_key(ev)
        flags.append(key in seen)
        seen.add(key)
    return flags


# ---------------------------------------------------------------------------
# Session ordinals
# ---------------------------------------------------------------------------


def core_session_type(type_: str) -> Optional[str]:
    upper = (type_ or "").upper()
    for core in CORE_SESSION_TYPES:
        if core in upper:
            return core
    return None


def _norm(value: str) -> str:
    return " ".join((value or "").lower().split())


def _group_key(ev: NormalizedEvent) -> str:
    promos = sorted({_norm(p) for p in ev.promos if _norm(p)})
    return "|".join(promos) if promos else NO_GROUP


def _teacher_key(ev: NormalizedEvent) -> str:
    return ",".join(sorted(_norm(t) for t in ev.teachers))


def _subject_key(ev: NormalizedEvent) -> str:
    return _norm(ev.subject or ev.raw.summary)


def _timestamp(iso: str) -> datetime:
    # Only rendered local timestamps are comparable; raw fallbacks sort last
    try:
        return datetime.strptime(iso, ISO_LOCAL_FORMAT)
    except (TypeError, ValueError):
        return datetime.max


def _series_key(ev: NormalizedEvent, core: str) -> str:
    if core in GROUPED_SESSION_TYPES:
        return f"{_subject_key(ev)}|{core}|{_group_key(ev)}"
    return f"{_subject_key(ev)}|{core}"


def _occurrence_key(ev: NormalizedEvent) -> str:
    return "|".join(
        [ev.start_iso, ev.end_iso, _teacher_key(ev), _norm(ev.raw.location), _norm(ev.raw.summary)]
    )


def session_ordinals(events: Sequence[NormalizedEvent]) -> List[Optional[Tuple[str, int]]]:
    """
    Number the CM / TD / TP sessions of each series chronologically.

    Returns one entry per event (same order as `events`): (core type, ordinal),
    or None for events that are not CM / TD / TP. The same occurrence seen
    twice (e.g. imported from two calendars) gets the same ordinal.
    """
    order = sorted(
        range(len(events)),
        key=lambda i: (
            _timestamp(events[i].start_iso),
            _timestamp(events[i].end_iso),
            _subject_key(events[i]),
            _norm(events[i].type_),
            _group_key(events[i]),
            _teacher_key(events[i]),
            _norm(events[i].raw.uid),
        ),
    )

    counters: Dict[str, int] = {}
    occurrences: Dict[str, Dict[str, int]] = {}
    result: List[Optional[Tuple[str, int]]] = [None] * len(events)

    for i in order:
        ev = events[i]
        core = core_session_type(ev.type_)
        if core is None:
            continue

        series = _series_key(ev, core)
        seen = occurrences.setdefault(series, {})
        occurrence = _occurrence_key(ev)

        ordinal = seen.get(occurrence)
        if ordinal is None:
            ordinal = counters.get(series, 0) + 1
            counters[series] = ordinal
            seen[occurrence] = ordinal

        result[i] = (core, ordinal)

    return result


def format_session_label(info: Optional[Tuple[str, int]]) -> str:
    if info is None:
        return ""
    core, ordinal = info
    return f"{core}{ordinal}"


# ---------------------------------------------------------------------------
# Teacher statistics
# ---------------------------------------------------------------------------


def teacher_counts(events: Iterable[NormalizedEvent]) -> List[Tuple[str, int]]:
    """
    (teacher, number of events) pairs, most frequent first, then by name.
    """
    counts: Counter = Counter()
    for ev in events:
        for name in ev.teachers:
            name = name.strip()
            if not name or name == NO_TEACHER or name.lower() == "unknown teacher":
                continue
            counts[name] += 1
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))
