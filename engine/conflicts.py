"""Konfliktprüfung für Zuweisungen: Qualifikation und Überlastung.

Regeln in dieser Reihenfolge, die erste zutreffende gewinnt:
  1. Fehlende Qualifikation           → error
  2. Projizierte Stunden > Deputat    → error
  3. Projizierte Stunden > 90 % Dep.  → warning
  4. sonst                            → ok

Die Prüfung ist rein beratend und blockiert keine Schreibzugriffe. Ob ein
Fehler das Anlegen verhindert, entscheidet der Aufrufer.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel

from config.schema import ConflictConfig, QualificationMatch, WorkloadConfig
from engine.workload import current_hours
from models.assignment import Assignment
from models.subject import Subject
from models.teacher import Teacher


class ConflictStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class ConflictKind(str, Enum):
    QUALIFICATION = "qualification"
    OVERLOAD = "overload"
    HIGH_LOAD = "high_load"


class ConflictResult(BaseModel):
    """Ergebnis der Konfliktprüfung einer einzelnen Zuweisung."""

    status: ConflictStatus
    kind: Optional[ConflictKind] = None
    message: str = ""
    projected_hours: float = 0.0
    max_hours: float = 0.0

    @property
    def is_ok(self) -> bool:
        return self.status == ConflictStatus.OK

    @property
    def blocks_creation(self) -> bool:
        """Fehler verhindern das Anlegen NEUER Zuweisungen (Entscheidung des Aufrufers)."""
        return self.status == ConflictStatus.ERROR


class ConflictDetector:
    """Klassifiziert Zuweisungen als ok / warning / error."""

    def __init__(
        self,
        workload: Optional[WorkloadConfig] = None,
        conflicts: Optional[ConflictConfig] = None,
    ) -> None:
        self.workload = workload or WorkloadConfig()
        self.conflicts = conflicts or ConflictConfig()

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def classify(
        self,
        teacher: Teacher,
        subject: Subject,
        projected_hours: float,
        match: Optional[QualificationMatch] = None,
    ) -> ConflictResult:
        """Klassifiziert anhand der bereits projizierten Wochenstunden."""
        match = match or self.conflicts.qualification_match
        substring = match == QualificationMatch.SUBSTRING
        max_hours = teacher.max_hours

        if not teacher.is_qualified_for(subject.short_code, subject.name,
                                        substring=substring):
            return ConflictResult(
                status=ConflictStatus.ERROR,
                kind=ConflictKind.QUALIFICATION,
                message=(
                    f"{teacher.name} ({teacher.short_code}) hat keine Qualifikation "
                    f"für {subject.name} ({subject.short_code})"
                ),
                projected_hours=projected_hours,
                max_hours=max_hours,
            )

        if projected_hours > max_hours:
            return ConflictResult(
                status=ConflictStatus.ERROR,
                kind=ConflictKind.OVERLOAD,
                message=(
                    f"{teacher.name} wäre mit {projected_hours:g}h überbelastet "
                    f"(Max: {max_hours:g}h)"
                ),
                projected_hours=projected_hours,
                max_hours=max_hours,
            )

        if projected_hours > max_hours * self.workload.high_load_fraction:
            return ConflictResult(
                status=ConflictStatus.WARNING,
                kind=ConflictKind.HIGH_LOAD,
                message=(
                    f"{teacher.name} wäre stark ausgelastet "
                    f"({projected_hours:g}/{max_hours:g}h)"
                ),
                projected_hours=projected_hours,
                max_hours=max_hours,
            )

        return ConflictResult(
            status=ConflictStatus.OK,
            message="OK",
            projected_hours=projected_hours,
            max_hours=max_hours,
        )

    def check_proposed(
        self,
        teacher: Teacher,
        subject: Subject,
        hours: float,
        existing: Iterable[Assignment],
        match: Optional[QualificationMatch] = None,
    ) -> ConflictResult:
        """Prüft eine NEUE Zuweisung: aktuelle Stunden + vorgeschlagene Stunden."""
        projected = current_hours(existing, teacher.id) + hours
        return self.classify(teacher, subject, projected, match)

    def check_existing(
        self,
        teacher: Teacher,
        subject: Subject,
        existing: Iterable[Assignment],
        match: Optional[QualificationMatch] = None,
    ) -> ConflictResult:
        """Prüft eine bereits gespeicherte Zuweisung (Hinweis in Listen)."""
        return self.classify(teacher, subject,
                             current_hours(existing, teacher.id), match)

    def check_all(
        self,
        teachers: Iterable[Teacher],
        subjects: Iterable[Subject],
        assignments: Iterable[Assignment],
    ) -> list[tuple[Assignment, ConflictResult]]:
        """Prüft alle gespeicherten Zuweisungen; nur Warnungen/Fehler werden geliefert.

        Zuweisungen mit unbekannter Lehrkraft oder unbekanntem Fach werden übersprungen.
        """
        assignments = list(assignments)
        teacher_map = {t.id: t for t in teachers}
        subject_map = {s.id: s for s in subjects}
        hours_cache: dict[str, float] = {}
        findings: list[tuple[Assignment, ConflictResult]] = []

        for a in assignments:
            teacher = teacher_map.get(a.teacher_id)
            subject = subject_map.get(a.subject_id)
            if teacher is None or subject is None:
                continue
            if teacher.id not in hours_cache:
                hours_cache[teacher.id] = current_hours(assignments, teacher.id)
            result = self.classify(teacher, subject, hours_cache[teacher.id])
            if not result.is_ok:
                findings.append((a, result))
        return findings
