"""
Unit tests for derived views: rename / hide rules, duplicates, session ordinals.
"""

import unittest

from agendum.derive import (
    NormalizationRules,
    apply_rules,
    format_session_label,
    mark_duplicates,
    session_ordinals,
    teacher_counts,
)
from agendum.model import NormalizedEvent, RawEvent


def make(
    subject: str,
    type_: str,
    start: str,
    end: str,
    teachers=None,
    promos=None,
    uid: str = "uid",
    location: str = "",
) -> NormalizedEvent:
    raw = RawEvent(uid=uid, summary=f"{type_} {subject}", location=location)
    return NormalizedEvent(
        raw=raw,
        subject=subject,
        type_=type_,
        start_iso=start,
        end_iso=end,
        duration_hours=0.0,
        teachers=list(teachers or ["—"]),
        promos=list(promos or []),
    )


class TestApplyRules(unittest.TestCase):
    def test_rename_and_hide(self) -> None:
        rules = NormalizationRules(
            subjects={"PRORES": "Programmation réseau"},
            teachers={"DUPONT J": "DUPONT Jean"},
            hidden_promos={"Salle informatique"},
        )
        ev = make("PRORES", "CM", "2025-01-01T08:00:00", "2025-01-01T10:00:00",
                  teachers=["DUPONT J", "DUPONT Jean"], promos=["L3 MIAGE", "Salle informatique"])

        (out,) = apply_rules([ev], rules)
        self.assertEqual(out.subject, "Programmation réseau")
        self.assertEqual(out.teachers, ["DUPONT Jean"])
        self.assertEqual(out.promos, ["L3 MIAGE"])
        # The input is left untouched
        self.assertEqual(ev.subject, "PRORES")

    def test_hiding_every_teacher_keeps_sentinel(self) -> None:
        rules = NormalizationRules(hidden_teachers={"DUPONT Jean"})
        ev = make("Algo", "TD", "2025-01-01T08:00:00", "2025-01-01T10:00:00", teachers=["DUPONT Jean"])
        (out,) = apply_rules([ev], rules)
        self.assertEqual(out.teachers, ["—"])


class TestDuplicates(unittest.TestCase):
    def test_mark_duplicates(self) -> None:
        a = make("Algo", "TD", "2025-01-01T08:00:00", "2025-01-01T10:00:00", uid="a")
        b = make("Algo", "TD", "2025-01-01T08:00:00", "2025-01-01T10:00:00", uid="b")
        c = make("Algo", "TP", "2025-01-01T08:00:00", "2025-01-01T10:00:00", uid="c")
        self.assertEqual(mark_duplicates([a, b, c]), [False, True, False])


class TestSessionOrdinals(unittest.TestCase):
    def test_ordinals_are_chronological_per_series(self) -> None:
        events = [
            make("Algo", "CM", "2025-01-08T08:00:00", "2025-01-08T10:00:00", uid="cm2"),
            make("Algo", "CM", "2025-01-01T08:00:00", "2025-01-01T10:00:00", uid="cm1"),
            make("Algo", "TD", "2025-01-02T08:00:00", "2025-01-02T10:00:00", promos=["Groupe 1"], uid="td-g1"),
            make("Algo", "TD", "2025-01-03T08:00:00", "2025-01-03T10:00:00", promos=["Groupe 2"], uid="td-g2"),
            make("Algo", "AUTRE", "2025-01-04T08:00:00", "2025-01-04T10:00:00", uid="other"),
        ]
        labels = [format_session_label(info) for info in session_ordinals(events)]
        # TD numbering restarts per group
        self.assertEqual(labels, ["CM2", "CM1", "TD1", "TD1", ""])

    def test_same_occurrence_shares_ordinal(self) -> None:
        events = [
            make("Algo", "CM", "2025-01-01T08:00:00", "2025-01-01T10:00:00", uid="a"),
            make("Algo", "CM", "2025-01-01T08:00:00", "2025-01-01T10:00:00", uid="b"),
            make("Algo", "CM", "2025-01-02T08:00:00", "2025-01-02T10:00:00", uid="c"),
        ]
        self.assertEqual(session_ordinals(events), [("CM", 1), ("CM", 1), ("CM", 2)])

    def test_unparsed_dates_sort_last(self) -> None:
        events = [
            make("Algo", "TP", "garbage", "garbage", uid="late"),
            make("Algo", "TP", "2025-01-02T08:00:00", "2025-01-02T10:00:00", uid="early"),
        ]
        self.assertEqual(session_ordinals(events), [("TP", 2), ("TP", 1)])

    def test_raw_fallback_with_offset_sorts_last(self) -> None:
        # A start that failed to parse keeps its raw text, which may carry an offset
        events = [
            make("Algo", "CM", "2025-01-02T08:00:00+01:00", "x", uid="raw"),
            make("Algo", "CM", "2025-01-03T08:00:00", "2025-01-03T10:00:00", uid="parsed"),
        ]
        self.assertEqual(session_ordinals(events), [("CM", 2), ("CM", 1)])


class TestTeacherCounts(unittest.TestCase):
    def test_counts(self) -> None:
        events = [
            make("Algo", "CM", "", "", teachers=["DUPONT Jean"]),
            make("Algo", "TD", "", "", teachers=["DUPONT Jean", "MARTIN Paul"]),
            make("Algo", "TD", "", "", teachers=["—"]),
            make("Algo", "TD", "", "", teachers=["Unknown teacher", "CURIE Marie"]),
        ]
        self.assertEqual(
            teacher_counts(events),
            [("DUPONT Jean", 2), ("CURIE Marie", 1), ("MARTIN Paul", 1)],
        )


if __name__ == "__main__":
    unittest.main()
