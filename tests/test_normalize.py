"""
Unit tests for the normalization pipeline (RawEvent -> NormalizedEvent).

The reference zone is fixed to UTC so local times equal the inputs.
"""

import unittest
from datetime import timezone

from agendum.model import RawEvent
from agendum.normalize import normalize, normalize_event


UTC = timezone.utc


def make_event(summary: str, start: str, end: str, description: str = "", uid: str = "uid") -> RawEvent:
    return RawEvent(uid=uid, summary=summary, description=description, location="", start=start, end=end)


class TestNormalize(unittest.TestCase):
    def test_heuristics_and_duration(self) -> None:
        events = [
            make_event("CM PRORES", "20250101T080000", "20250101T100000"),
            make_event("IPD TP Cla 1", "20250101T100000Z", "20250101T113000Z"),
            make_event("TD Standard résidentiel", "20250101T140000", "20250101T170000"),
            make_event("Réunion pédagogique Responsables formation", "20250101T090000", "20250101T094500"),
            make_event("Autre chose", "20250101T120000", "20250101T120000"),
        ]
        normalized = normalize(events, UTC)

        self.assertEqual(normalized[0].type_, "CM")
        self.assertEqual(normalized[0].subject, "PRORES")
        self.assertEqual(normalized[0].duration_hours, 2.0)
        self.assertEqual(normalized[0].start_iso, "2025-01-01T08:00:00")
        self.assertEqual(normalized[0].end_iso, "2025-01-01T10:00:00")

        self.assertEqual(normalized[1].type_, "TP")
        self.assertEqual(normalized[1].subject, "IPD")
        self.assertEqual(normalized[1].duration_hours, 1.5)
        self.assertEqual(normalized[1].start_iso, "2025-01-01T10:00:00")
        self.assertEqual(normalized[1].end_iso, "2025-01-01T11:30:00")

        self.assertEqual(normalized[2].type_, "TD")
        self.assertEqual(normalized[2].subject, "Standard résidentiel")
        self.assertEqual(normalized[2].duration_hours, 3.0)

        self.assertEqual(normalized[3].type_, "RÉUNION")
        self.assertEqual(normalized[3].subject, "pédagogique Responsables formation")
        self.assertEqual(normalized[3].duration_hours, 0.75)

        self.assertEqual(normalized[4].type_, "AUTRE")
        self.assertEqual(normalized[4].subject, "Autre chose")
        self.assertEqual(normalized[4].duration_hours, 0.0)

    def test_count_and_order_are_preserved(self) -> None:
        events = [make_event(f"CM Cours{i}", "bad", "", uid=f"uid-{i}") for i in range(10)]
        normalized = normalize(events, UTC)
        self.assertEqual(len(normalized), len(events))
        self.assertEqual([ev.raw.uid for ev in normalized], [f"uid-{i}" for i in range(10)])
        self.assertEqual([ev.raw for ev in normalized], events)

    def test_type_and_teachers_never_empty(self) -> None:
        events = [
            make_event("", "", ""),
            make_event("   ", "x", "y", description="\n\n"),
            make_event("TP", "20250101T080000", "20250101T090000", description="L3 MIAGE"),
        ]
        for ev in normalize(events, UTC):
            self.assertTrue(ev.type_)
            self.assertTrue(ev.teachers)

    def test_unparseable_dates_fall_back_to_raw(self) -> None:
        ev = normalize_event(make_event("CM Algo", "20250101", "garbage"), UTC)
        self.assertEqual(ev.start_iso, "20250101")
        self.assertEqual(ev.end_iso, "garbage")
        self.assertEqual(ev.duration_hours, 0.0)

    def test_one_unparseable_date_zeroes_duration(self) -> None:
        ev = normalize_event(make_event("CM Algo", "20250101T080000", "garbage"), UTC)
        self.assertEqual(ev.start_iso, "2025-01-01T08:00:00")
        self.assertEqual(ev.end_iso, "garbage")
        self.assertEqual(ev.duration_hours, 0.0)

    def test_description_fields(self) -> None:
        ev = normalize_event(
            make_event(
                "MODX TP3.1",
                "20250101T080000",
                "20250101T100000",
                description="DUPONT Jean\nM1 Informatique Groupe A\nModifié le: 01/01/2025",
            ),
            UTC,
        )
        self.assertEqual(ev.type_, "TP")
        self.assertEqual(ev.subject, "MODX")
        self.assertEqual(ev.teachers, ["DUPONT Jean"])
        self.assertEqual(ev.promos, ["M1 Informatique Groupe A"])
        self.assertEqual(ev.cleaned_description, "DUPONT Jean\nM1 Informatique Groupe A")

    def test_empty_description(self) -> None:
        ev = normalize_event(make_event("CM Algo", "20250101T080000", "20250101T100000"), UTC)
        self.assertEqual(ev.teachers, ["—"])
        self.assertEqual(ev.promos, [])
        self.assertEqual(ev.cleaned_description, "")

    def test_to_dict_uses_type_key(self) -> None:
        ev = normalize_event(make_event("CM PRORES", "20250101T080000", "20250101T100000"), UTC)
        data = ev.to_dict()
        self.assertEqual(data["type"], "CM")
        self.assertEqual(data["raw"]["summary"], "CM PRORES")
        self.assertEqual(data["duration_hours"], 2.0)
        self.assertEqual(data["teachers"], ["—"])


if __name__ == "__main__":
    unittest.main()
