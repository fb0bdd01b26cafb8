"""Klassen-Matrix: Zuweisungen einer Klasse zellenweise bearbeiten.

Zeilen = Lehrkräfte, Spalten = Fächer, eine Matrix pro Halbjahr. Änderungen
werden lokal gesammelt (Schlüssel: Lehrkraft × Fach je Halbjahr) und beim
Speichern als Einzeloperationen an die Ablage gegeben:

  Zelle neu, Stunden > 0          → anlegen
  Zelle vorhanden, Stunden > 0    → ändern
  Zelle vorhanden, Stunden = 0    → löschen

Im atomaren Modus läuft das Speichern in einer Transaktion der Ablage: schlägt
eine Zelle fehl, wird nichts übernommen. Ohne atomaren Modus bleiben bereits
gespeicherte Zellen erhalten und das Ergebnis meldet die Fehlschläge.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from engine.results import BatchResult
from models.assignment import Assignment, Semester

if TYPE_CHECKING:
    from data.repository import SchoolRepository

logger = logging.getLogger(__name__)

CellKey = tuple[str, str]   # (teacher_id, subject_id)


class MatrixSaveError(Exception):
    """Atomares Speichern fehlgeschlagen; alle Änderungen wurden zurückgerollt."""

    def __init__(self, message: str, result: BatchResult) -> None:
        super().__init__(message)
        self.result = result


class IntentAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class CellIntent:
    """Geplante Einzeloperation für eine geänderte Zelle."""

    action: IntentAction
    teacher_id: str
    subject_id: str
    semester: Semester
    hours: float
    assignment_ids: tuple[str, ...] = ()


class MatrixEditor:
    """Sammelt Zellenänderungen einer Klasse und speichert sie gebündelt."""

    def __init__(self, repository: "SchoolRepository", class_id: str,
                 atomic: bool = True) -> None:
        if repository.get_class(class_id) is None:
            raise ValueError(f"Klasse nicht gefunden: {class_id}")
        self.repository = repository
        self.class_id = class_id
        self.atomic = atomic
        self._changes: dict[Semester, dict[CellKey, float]] = {
            Semester.FIRST: {},
            Semester.SECOND: {},
        }

    # ─── Bearbeiten ──────────────────────────────────────────────────────────

    def set_cell(self, semester: str, teacher_id: str, subject_id: str,
                 hours: float) -> None:
        """Merkt eine Zellenänderung vor. 0 Stunden = Lehrkraft austragen."""
        if not math.isfinite(hours):
            raise ValueError(f"Stunden müssen eine endliche Zahl sein: {hours}")
        if hours < 0:
            raise ValueError(f"Stunden dürfen nicht negativ sein: {hours}")
        self._changes[Semester(semester)][(teacher_id, subject_id)] = float(hours)

    def reset(self) -> None:
        for changes in self._changes.values():
            changes.clear()

    @property
    def has_changes(self) -> bool:
        return any(self._changes.values())

    def _individual_cells(self, semester: Semester) -> dict[CellKey, list[Assignment]]:
        """Gespeicherte Einzel-Zuweisungen (ohne Team-Teaching) je Zelle."""
        cells: dict[CellKey, list[Assignment]] = {}
        for a in self.repository.assignments(class_id=self.class_id, semester=semester):
            if a.team_teaching_id:
                continue
            cells.setdefault((a.teacher_id, a.subject_id), []).append(a)
        return cells

    def view(self, semester: str) -> dict[CellKey, float]:
        """Matrix eines Halbjahres: gespeicherte Werte mit vorgemerkten Änderungen."""
        semester = Semester(semester)
        matrix = {
            key: max(a.hours_per_week for a in records)
            for key, records in self._individual_cells(semester).items()
        }
        matrix.update(self._changes[semester])
        return {k: v for k, v in matrix.items() if v > 0}

    # ─── Speichern ───────────────────────────────────────────────────────────

    def plan(self) -> list[CellIntent]:
        """Übersetzt die vorgemerkten Änderungen in Einzeloperationen.

        Unveränderte Zellen (gleicher Wert wie gespeichert) erzeugen keine Operation.
        Mehrere gespeicherte Dubletten einer Zelle werden beim Ändern auf
        einen Datensatz reduziert.
        """
        intents: list[CellIntent] = []
        for semester in (Semester.FIRST, Semester.SECOND):
            stored = self._individual_cells(semester)
            for (teacher_id, subject_id), hours in self._changes[semester].items():
                records = stored.get((teacher_id, subject_id), [])
                ids = tuple(a.id for a in records)
                if not records:
                    if hours > 0:
                        intents.append(CellIntent(IntentAction.CREATE, teacher_id,
                                                  subject_id, semester, hours))
                elif hours == 0:
                    intents.append(CellIntent(IntentAction.DELETE, teacher_id,
                                              subject_id, semester, 0.0, ids))
                elif len(records) > 1 or records[0].hours_per_week != hours:
                    intents.append(CellIntent(IntentAction.UPDATE, teacher_id,
                                              subject_id, semester, hours, ids))
        return intents

    def _apply(self, intent: CellIntent) -> None:
        repo = self.repository
        if intent.action == IntentAction.CREATE:
            repo.create_assignment(Assignment(
                teacher_id=intent.teacher_id,
                subject_id=intent.subject_id,
                class_id=self.class_id,
                semester=intent.semester,
                hours_per_week=intent.hours,
            ))
        elif intent.action == IntentAction.UPDATE:
            keep, *duplicates = intent.assignment_ids
            repo.update_assignment(keep, hours_per_week=intent.hours)
            for assignment_id in duplicates:
                repo.delete_assignment(assignment_id)
        else:
            for assignment_id in intent.assignment_ids:
                repo.delete_assignment(assignment_id)

    def save(self, atomic: Optional[bool] = None) -> BatchResult:
        """Speichert alle vorgemerkten Änderungen.

        Raises:
            MatrixSaveError: im atomaren Modus, wenn eine Zelle fehlschlägt.
        """
        from data.repository import RepositoryError

        atomic = self.atomic if atomic is None else atomic
        intents = self.plan()
        result = BatchResult()

        if atomic:
            try:
                with self.repository.transaction():
                    for intent in intents:
                        try:
                            self._apply(intent)
                        except RepositoryError as e:
                            result.fail(self._describe(intent, e))
                            raise
                        result.succeeded += 1
            except RepositoryError as e:
                logger.warning(f"Matrix-Speichern zurückgerollt: {e}")
                result.succeeded = 0
                raise MatrixSaveError(
                    f"Speichern abgebrochen, keine Änderung übernommen: {e}", result
                ) from e
        else:
            for intent in intents:
                try:
                    self._apply(intent)
                    result.succeeded += 1
                except RepositoryError as e:
                    logger.warning(f"Matrix-Zelle nicht gespeichert: {e}")
                    result.fail(self._describe(intent, e))

        logger.info(f"Matrix {self.class_id}: {result.summary()}")
        if result.ok:
            self.reset()
        return result

    @staticmethod
    def _describe(intent: CellIntent, error: Exception) -> str:
        return (
            f"HJ {intent.semester.value} {intent.teacher_id}/{intent.subject_id} "
            f"({intent.action.value}): {error}"
        )
