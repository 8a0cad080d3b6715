"""
Course type / subject classification (summary -> (type, subject)).

Summaries are written by hand and follow a handful of conventions:

    "CM PRORES"                  type first
    "Algo - TD2 salle B"         subject, dash, type
    "PPAR TD", "MODX TP3.1"      subject first

The rules below are tried in order, first match wins. When nothing matches
the type is AUTRE and the whole summary is the subject.
"""

from __future__ import annotations

import re

from datetime import date
from typing import Callable, List, Tuple

from agendum.model import TYPE_OTHER


# ---------------------------------------------------------------------------
# Pattern tables (compiled once at import, read-only afterwards)
# ---------------------------------------------------------------------------

TYPE_TOKENS = ("CM", "TD", "TP", "CT", "DS", "CC", "EXAM", "PROJET", "RÉUNION", "REUNION")

# Types that are often part of a plain title ("Présentation projet")
COLLAPSIBLE_TYPES = frozenset({"PROJET", "RÉUNION", "REUNION"})

_TYPE = "(?P<type>" + "|".join(TYPE_TOKENS) + ")"

# "3", "3.1", "1-2", "3A", "-A", "B" ... letters are uppercase only
_SUFFIX = r"(?P<suffix>[.-]?\d+(?:[.-]\d+)*(?:[.-]?(?-i:[A-G]+))?|[.-]?(?-i:[A-G]))?"

_FLAGS = re.IGNORECASE | re.DOTALL

TYPE_THEN_SUBJECT_RE = re.compile(r"^\s*" + _TYPE + _SUFFIX + r"[\s-]+(?P<subject>.+)$", _FLAGS)
SUBJECT_DASH_TYPE_RE = re.compile(r"^\s*(?P<subject>.+?)\s*-\s*" + _TYPE + _SUFFIX + r"\b.*$", _FLAGS)
SUBJECT_THEN_TYPE_RE = re.compile(r"^\s*(?P<subject>.+?)\s+" + _TYPE + _SUFFIX + r"\b", _FLAGS)

_CODE_TOKEN_RE = re.compile(r"^[A-Z0-9]{2,}$")

_TRAILING_DATE_RE = re.compile(
    r"[\s,;:/\-–—]*"
    r"\(?\s*"
    r"(?<!\d)(?P<day>\d{1,2})[/.\-](?P<month>\d{1,2})[/.\-](?P<year>\d{4}|\d{2})"
    r"\s*\)?\s*$"
)


# ---------------------------------------------------------------------------
# Rule handlers
# ---------------------------------------------------------------------------


def looks_like_code(text: str) -> bool:
    """
    True for course codes like "IPD", "BDL2" or "M1 GL", False for plain words.
    """
    if any(ch.isdigit() for ch in text):
        return True
    return any(_CODE_TOKEN_RE.match(tok) for tok in text.split())


def _type_then_subject(m: re.Match[str], summary: str) -> Tuple[str, str]:
    return m.group("type").upper(), m.group("subject")


def _subject_dash_type(m: re.Match[str], summary: str) -> Tuple[str, str]:
    return m.group("type").upper(), m.group("subject")


def _subject_then_type(m: re.Match[str], summary: str) -> Tuple[str, str]:
    type_ = m.group("type").upper()
    subject = m.group("subject")

    # "Présentation projet" is a title, "IPD Projet" is a course code + type
    if type_ in COLLAPSIBLE_TYPES and not looks_like_code(subject):
        subject = summary

    return type_, subject


Rule = Tuple[str, re.Pattern[str], Callable[[re.Match[str], str], Tuple[str, str]]]

RULES: List[Rule] = [
    ("type-then-subject", TYPE_THEN_SUBJECT_RE, _type_then_subject),
    ("subject-dash-type", SUBJECT_DASH_TYPE_RE, _subject_dash_type),
    ("subject-then-type", SUBJECT_THEN_TYPE_RE, _subject_then_type),
]


# ---------------------------------------------------------------------------
# Trailing dates
# ---------------------------------------------------------------------------


def _valid_calendar_date(day: str, month: str, year: str) -> bool:
    y = int(year)
    if len(year) == 2:
        y += 2000
    if not 1900 <= y <= 2200:
        return False
    try:
        date(y, int(month), int(day))
    except ValueError:
        return False
    return True


def strip_trailing_date(subject: str) -> str:
    """
    Remove a trailing date such as "11/12/25" or "(03.02.2025)".

    The text is only touched when the date exists in the calendar and
    something is left once it is gone.
    """
    m = _TRAILING_DATE_RE.search(subject)
    if not m:
        return subject
    if not _valid_calendar_date(m.group("day"), m.group("month"), m.group("year")):
        return subject

    rest = " ".join(subject[: m.start()].split())
    return rest if rest else subject


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify_summary(summary: str) -> Tuple[str, str]:
    """
    Split a summary into (type, subject).

    `type` is always uppercase and never empty (AUTRE when nothing matched).
    """
    text = (summary or "").strip()

    type_, subject = TYPE_OTHER, text
    for _name, pattern, handler in RULES:
        m = pattern.match(text)
        if m:
            type_, subject = handler(m, text)
            break

    return type_, strip_trailing_date(subject.strip())
