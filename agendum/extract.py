"""
Teacher / promo extraction (description -> (teachers, promos, cleaned text)).

ICS descriptions of university timetables usually look like:

    DUPONT Jean
    M1 Informatique Groupe A
    (Modifié le: 01/01/2025 10:12)

Every line is either a list of people or a cohort descriptor ("promo").
Nothing here is exact: the rules are heuristics tuned on French/English
academic exports and every step has a fallback so an event never fails.
"""

from __future__ import annotations

import re
import unicodedata

from typing import Iterable, List, Optional, Set, Tuple

from agendum.model import NO_TEACHER


# ---------------------------------------------------------------------------
# Pattern tables (compiled once at import, read-only afterwards)
# ---------------------------------------------------------------------------

_UPPER = "A-ZÀ-ÖØ-Þ"
_LOWER = "a-zß-öø-ÿ"

_FOLDED_LINE_RE = re.compile(r"\n[ \t]+")
_ESCAPED_NEWLINE_RE = re.compile(r"\\[nN]")
_BLANK_RUN_RE = re.compile(r"\n{3,}")

_MODIFIED_MARKER = r"(?:last\s+)?(?:modifi[eéèêë]e?s?|modified)\s+(?:le|on)\b"
_MODIFIED_RE = re.compile(_MODIFIED_MARKER, re.IGNORECASE)
_MODIFIED_PAREN_RE = re.compile(r"[ \t]*\([^()]*" + _MODIFIED_MARKER + r"[^()]*\)", re.IGNORECASE)
_MODIFIED_TAIL_RE = re.compile(r"[ \t\-–—:,;]*" + _MODIFIED_MARKER + r"[^\n]*", re.IGNORECASE)

_PUNCTUATION_ONLY_RE = re.compile(r"^[\W_]+$")

# M1, L3, D2 ...
_LEVEL_RE = re.compile(r"(?<![a-z])[mld]\d", re.IGNORECASE)

# ";" and "," anywhere, "\ / | & +" only when surrounded by spaces
_CHUNK_SPLIT_RE = re.compile(r"\s*[;,]\s*|\s+[\\/|&+]\s+")

_NAME_BLOCKER_RE = re.compile(r"https?://|www\.|@|[()\[\]{}<>]|\s[-–—]\s|/")
_WORD_PART_RE = re.compile(r"[-'’]")

# MARTINPaul -> MARTIN Paul
_GLUED_NAME_RE = re.compile(rf"^([{_UPPER}]{{2,}})([{_UPPER}][{_LOWER}]+)$")

# 1-3 capitalized words followed by a Title-Case word
_INLINE_NAME_RE = re.compile(
    rf"(?<!\w)((?:[{_UPPER}][{_UPPER}{_LOWER}'’-]*\s+){{1,3}}[{_UPPER}][{_LOWER}][{_LOWER}'’-]*)(?!\w)"
)

# Compared against accent-folded, lowercased words
COHORT_KEYWORDS = frozenset(
    {
        "master",
        "masters",
        "licence",
        "license",
        "bachelor",
        "doctorat",
        "parcours",
        "groupe",
        "groupes",
        "group",
        "grp",
        "mineure",
        "majeure",
        "promo",
        "promotion",
        "alternant",
        "alternants",
        "alternance",
        "apprenti",
        "apprentis",
        "apprentissage",
        "classique",
        "classiques",
        "option",
        "options",
        "module",
        "modules",
        "semestre",
        "semester",
        "annee",
        "classe",
        "section",
        "cohorte",
        "filiere",
        "cm",
        "td",
        "tp",
        "ct",
        "ds",
        "cc",
        "exam",
        "examen",
        "projet",
        "stage",
        "soutenance",
        "rattrapage",
    }
)

STRONG_PROMO_SCORE = 4


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def _fold(word: str) -> str:
    """
    Lowercase and strip accents: "Filière" -> "filiere".
    """
    decomposed = unicodedata.normalize("NFKD", word)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()


def _is_keyword(word: str) -> bool:
    return _fold(word.strip(".,;:!?()[]{}\"'")) in COHORT_KEYWORDS


def _is_all_caps(word: str) -> bool:
    letters = [ch for ch in word if ch.isalpha()]
    return len(letters) >= 2 and all(ch.isupper() for ch in letters)


def _is_title_case(word: str) -> bool:
    parts = [p for p in _WORD_PART_RE.split(word) if p]
    if not parts or not any(ch.islower() for ch in word):
        return False
    return all(p[0].isupper() and p[1:] == p[1:].lower() for p in parts)


def _collapse(text: str) -> str:
    return " ".join(text.split())


def unfold_description(text: str) -> str:
    """
    Normalize line endings, join soft-wrapped lines and turn literal "\\n" into newlines.
    """
    out = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    out = _FOLDED_LINE_RE.sub("", out)
    return _ESCAPED_NEWLINE_RE.sub("\n", out)


def clean_description(text: str) -> str:
    """
    Description text without wrapping artifacts and without "modifié le ..." noise.

    Cleaning an already cleaned description returns it unchanged.
    """
    out = unfold_description(text)
    out = _MODIFIED_PAREN_RE.sub("", out)
    out = _MODIFIED_TAIL_RE.sub("", out)
    out = "\n".join(line.strip() for line in out.split("\n"))
    out = _BLANK_RUN_RE.sub("\n\n", out)
    return out.strip()


def _content_lines(cleaned: str) -> List[str]:
    lines: List[str] = []
    for line in cleaned.split("\n"):
        line = line.strip()
        if not line or _PUNCTUATION_ONLY_RE.match(line):
            continue
        if _MODIFIED_RE.search(line):
            continue
        lines.append(line)
    return lines


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def is_promo_like(line: str) -> bool:
    """
    A line describes a cohort when one of its words carries a digit, an
    academic level (M1, L3 ...) or a cohort keyword.
    """
    for word in line.split():
        if any(ch.isdigit() for ch in word):
            return True
        if _LEVEL_RE.match(word):
            return True
        if _is_keyword(word):
            return True
    return False


def looks_like_person_name(text: str) -> bool:
    """
    "DUPONT Jean", "Marie-Claire MARTIN", "Jean de LA FONTAINE" -> True.

    Requires 2-5 alphabetic words, at least one ALL-CAPS and one Title-Case
    word, and a last word in one of those two forms.
    """
    candidate = _collapse(text)
    if not candidate or any(ch.isdigit() for ch in candidate):
        return False
    if _NAME_BLOCKER_RE.search(candidate):
        return False

    words = candidate.split(" ")
    if not 2 <= len(words) <= 5:
        return False

    for word in words:
        parts = _WORD_PART_RE.split(word)
        if not all(p.isalpha() for p in parts):
            return False
        if _fold(word) in COHORT_KEYWORDS:
            return False

    if not any(_is_all_caps(w) for w in words):
        return False
    if not any(_is_title_case(w) for w in words):
        return False
    return _is_all_caps(words[-1]) or _is_title_case(words[-1])


def repair_glued_name(token: str) -> Optional[str]:
    """
    Split "MARTINPaul" into "MARTIN Paul". Returns None when the token has another shape.
    """
    if any(ch.isspace() for ch in token):
        return None
    m = _GLUED_NAME_RE.match(token)
    if not m:
        return None
    return f"{m.group(1)} {m.group(2)}"


def _names_in_chunk(chunk: str) -> List[str]:
    names: List[str] = []

    if looks_like_person_name(chunk):
        names.append(_collapse(chunk))
    else:
        repaired = repair_glued_name(chunk)
        if repaired and looks_like_person_name(repaired):
            names.append(repaired)

    for m in _INLINE_NAME_RE.finditer(chunk):
        candidate = _collapse(m.group(1))
        if looks_like_person_name(candidate) and candidate not in names:
            names.append(candidate)

    return names


def score_promo(candidate: str) -> int:
    score = 0
    if any(ch.isdigit() for ch in candidate):
        score += 3
    if _LEVEL_RE.search(candidate):
        score += 2
    if any(_is_keyword(w) for w in candidate.split()):
        score += 2
    if candidate.strip():
        score += 1
    return score


def select_promos(candidates: Iterable[str]) -> List[str]:
    """
    Keep every strong candidate (score >= 4); without any, keep only the best one.
    """
    pool = {c for c in candidates if c}
    if not pool:
        return []

    ranked = sorted(pool, key=lambda c: (-score_promo(c), c))
    strong = [c for c in ranked if score_promo(c) >= STRONG_PROMO_SCORE]
    chosen = strong if strong else ranked[:1]
    return sorted(set(chosen))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_people_and_promos(description: str) -> Tuple[List[str], List[str], str]:
    """
    Returns (teachers, promos, cleaned_description) for one event description.

    `teachers` is sorted and never empty (["—"] when no name was found),
    `promos` is sorted and may be empty.
    """
    if not unfold_description(description).strip():
        return [NO_TEACHER], [], ""

    cleaned = clean_description(description)

    teachers: Set[str] = set()
    pool: List[str] = []

    for line in _content_lines(cleaned):
        if is_promo_like(line):
            pool.append(_collapse(line))
            continue

        for chunk in _CHUNK_SPLIT_RE.split(line):
            chunk = chunk.strip()
            if not chunk:
                continue
            names = _names_in_chunk(chunk)
            if names:
                teachers.update(names)
            else:
                pool.append(_collapse(chunk))

    promos = select_promos(pool)
    if not teachers:
        return [NO_TEACHER], promos, cleaned
    return sorted(teachers), promos, cleaned
