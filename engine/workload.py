"""Auslastung der Lehrkräfte aus den normalisierten Zuweisungen.

Die beiden Halbjahre laufen nicht gleichzeitig. Die Wochenbelastung einer
Lehrkraft ist deshalb das MAXIMUM der beiden Halbjahressummen, nicht deren
Summe oder Durchschnitt.
"""

from __future__ import annotations

from collections import defaultdict
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel

from config.schema import WorkloadConfig
from engine.normalizer import normalize_assignments
from models.assignment import Assignment, Semester
from models.teacher import Teacher


class WorkloadStatus(str, Enum):
    OVERLOADED = "overloaded"        # > 100 %
    UNDERLOADED = "underloaded"      # < underload_fraction
    FULLY_ASSIGNED = "fully_assigned"


STATUS_LABELS: dict[WorkloadStatus, str] = {
    WorkloadStatus.OVERLOADED: "Überzuweisung",
    WorkloadStatus.UNDERLOADED: "Unterzuweisung",
    WorkloadStatus.FULLY_ASSIGNED: "Vollständig zugewiesen",
}


class Workload(BaseModel):
    """Wochenbelastung einer Lehrkraft."""

    teacher_id: str
    semester1_total: float
    semester2_total: float
    current_hours: float     # max(semester1_total, semester2_total)
    max_hours: float
    percentage: float        # current_hours / max_hours * 100, nach oben offen

    @property
    def remaining_hours(self) -> float:
        """Freie Stunden bis zum Deputat (negativ bei Überzuweisung)."""
        return self.max_hours - self.current_hours

    def total_for(self, semester: str) -> float:
        return self.semester1_total if semester == "1" else self.semester2_total

    def status(self, config: Optional[WorkloadConfig] = None) -> WorkloadStatus:
        """Einordnung über-/unter-/vollständig zugewiesen."""
        config = config or WorkloadConfig()
        if self.percentage > 100:
            return WorkloadStatus.OVERLOADED
        if self.percentage < config.underload_fraction * 100:
            return WorkloadStatus.UNDERLOADED
        return WorkloadStatus.FULLY_ASSIGNED


def semester_totals(assignments: Iterable[Assignment],
                    teacher_id: Optional[str] = None) -> tuple[float, float]:
    """Normalisierte Stundensummen (Halbjahr 1, Halbjahr 2).

    Mit teacher_id werden nur Zuweisungen dieser Lehrkraft berücksichtigt.
    """
    if teacher_id is not None:
        assignments = [a for a in assignments if a.teacher_id == teacher_id]
    totals = {Semester.FIRST: 0.0, Semester.SECOND: 0.0}
    for key, hours in normalize_assignments(assignments).items():
        totals[key.semester] += hours
    return totals[Semester.FIRST], totals[Semester.SECOND]


def current_hours(assignments: Iterable[Assignment], teacher_id: str) -> float:
    """Aktuelle Wochenstunden einer Lehrkraft (schwereres Halbjahr)."""
    return max(semester_totals(assignments, teacher_id))


def compute_workload(teacher: Teacher, assignments: Iterable[Assignment]) -> Workload:
    """Berechnet die Auslastung einer Lehrkraft. Rein, ohne Schreibzugriffe."""
    s1, s2 = semester_totals(assignments, teacher.id)
    current = max(s1, s2)
    return Workload(
        teacher_id=teacher.id,
        semester1_total=s1,
        semester2_total=s2,
        current_hours=current,
        max_hours=teacher.max_hours,
        percentage=current / teacher.max_hours * 100,
    )


def compute_all_workloads(
    teachers: Iterable[Teacher], assignments: Iterable[Assignment]
) -> dict[str, Workload]:
    """Auslastung aller Lehrkräfte; Zuweisungen werden einmal nach Lehrkraft gruppiert."""
    by_teacher: dict[str, list[Assignment]] = defaultdict(list)
    for a in assignments:
        by_teacher[a.teacher_id].append(a)
    return {
        t.id: compute_workload(t, by_teacher.get(t.id, []))
        for t in teachers
    }


def class_semester_totals(assignments: Iterable[Assignment],
                          class_id: str) -> tuple[float, float]:
    """Normalisierte Stundensummen einer Klasse pro Halbjahr.

    Team-Teaching zählt hier pro Lehrkraft, wie in der Lehrer-Sicht.
    """
    scoped = [a for a in assignments if a.class_id == class_id]
    return semester_totals(scoped)
