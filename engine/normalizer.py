"""Normalisierung von Zuweisungen: Dubletten und Team-Teaching.

Wiederholte Importe und manuelle Bearbeitung erzeugen doppelte Datensätze für
dieselbe Zuweisung. Für die Auslastung darf pro Lehrkraft und Slot nur EIN
Stundenwert zählen:

1. Datensätze mit Stunden ≤ 0 oder nicht endlichen Stunden werden ignoriert
   (Platzhalter, kein Unterricht mit 0 Stunden).
2. Schlüssel:
   - Team-Teaching:  (Gruppe, Klasse, Fach, Halbjahr, Lehrkraft)
   - Einzeln:        (Klasse, Fach, Lehrkraft, Halbjahr)
   Jede Lehrkraft einer Team-Gruppe wird für sich dedupliziert.
3. Mehrere Datensätze pro Schlüssel → der GRÖSSTE Stundenwert gilt.
   Summieren würde Re-Importe doppelt zählen; das Maximum ist idempotent.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from models.assignment import Assignment, Semester


@dataclass(frozen=True)
class SlotKey:
    """Schlüssel eines normalisierten Slots.

    team_teaching_id ist None für Einzelunterricht; damit unterscheiden sich
    Team- und Einzel-Schlüssel derselben Lehrkraft im selben Slot.
    """

    teacher_id: str
    subject_id: str
    class_id: str
    semester: Semester
    team_teaching_id: Optional[str] = None

    @property
    def is_team(self) -> bool:
        return self.team_teaching_id is not None


def has_effective_hours(assignment: Assignment) -> bool:
    """True wenn die Zuweisung echte Unterrichtsstunden (> 0, endlich) enthält."""
    hours = assignment.hours_per_week
    return math.isfinite(hours) and hours > 0


def slot_key(assignment: Assignment) -> SlotKey:
    """Baut den Deduplizierungs-Schlüssel einer Zuweisung."""
    return SlotKey(
        teacher_id=assignment.teacher_id,
        subject_id=assignment.subject_id,
        class_id=assignment.class_id,
        semester=Semester(assignment.semester),
        team_teaching_id=assignment.team_teaching_id or None,
    )


def normalize_records(assignments: Iterable[Assignment]) -> dict[SlotKey, Assignment]:
    """Gibt pro Schlüssel den Datensatz mit den meisten Stunden zurück.

    Bei Gleichstand gewinnt der zuerst gesehene Datensatz.
    """
    best: dict[SlotKey, Assignment] = {}
    for a in assignments:
        if not has_effective_hours(a):
            continue
        key = slot_key(a)
        current = best.get(key)
        if current is None or a.hours_per_week > current.hours_per_week:
            best[key] = a
    return best


def normalize_assignments(assignments: Iterable[Assignment]) -> dict[SlotKey, float]:
    """Normalisierte Zuweisungsmenge: Schlüssel → effektive Wochenstunden."""
    return {
        key: record.hours_per_week
        for key, record in normalize_records(assignments).items()
    }


def find_duplicates(assignments: Iterable[Assignment]) -> dict[SlotKey, list[Assignment]]:
    """Schlüssel, zu denen mehr als ein Datensatz mit Stunden > 0 existiert."""
    groups: dict[SlotKey, list[Assignment]] = {}
    for a in assignments:
        if has_effective_hours(a):
            groups.setdefault(slot_key(a), []).append(a)
    return {k: v for k, v in groups.items() if len(v) > 1}
