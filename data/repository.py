"""Datenablage für Lehrkräfte, Fächer, Klassen und Zuweisungen.

Hält einen SchoolData-Datensatz im Speicher und schreibt ihn nach jeder
Änderung als JSON-Datei zurück (falls ein Pfad gesetzt ist). Die Engine liest
vor jeder Berechnung den aktuellen Stand und hält selbst keine Referenzen.
"""

import logging
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from pydantic import ValidationError

from models.assignment import Assignment
from models.school_class import SchoolClass, canonical_class_name
from models.school_data import SchoolData
from models.subject import Subject
from models.teacher import Teacher

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Fehler beim Lesen oder Schreiben eines Datensatzes."""


def _new_id() -> str:
    return uuid.uuid4().hex


class SchoolRepository:
    """JSON-Ablage mit einfachen Lese-/Schreiboperationen.

    Ohne Pfad arbeitet die Ablage rein im Speicher (z.B. für Tests).
    """

    def __init__(self, path: Optional[Path] = None,
                 data: Optional[SchoolData] = None) -> None:
        self.path = Path(path) if path is not None else None
        if data is not None:
            self._data = data
        elif self.path is not None and self.path.exists():
            self._data = SchoolData.load_json(self.path)
        else:
            self._data = SchoolData()
        self._in_transaction = False

    @property
    def data(self) -> SchoolData:
        return self._data

    # ─── Persistenz ──────────────────────────────────────────────────────────

    def _commit(self) -> None:
        if self.path is None or self._in_transaction:
            return
        try:
            self._data.save_json(self.path)
        except OSError as e:
            raise RepositoryError(f"Datendatei nicht schreibbar: {self.path}: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator["SchoolRepository"]:
        """Alles-oder-nichts: bei einer Ausnahme wird der vorherige Stand wiederhergestellt."""
        if self._in_transaction:
            yield self
            return
        snapshot = self._data.model_copy(deep=True)
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            self._data = snapshot
            logger.warning("Transaktion zurückgerollt")
            raise
        finally:
            self._in_transaction = False
        self._commit()

    # ─── Lesen ───────────────────────────────────────────────────────────────

    def teachers(self, active_only: bool = False) -> list[Teacher]:
        return [t for t in self._data.teachers if t.is_active or not active_only]

    def subjects(self) -> list[Subject]:
        return list(self._data.subjects)

    def classes(self) -> list[SchoolClass]:
        return list(self._data.classes)

    def assignments(
        self,
        teacher_id: Optional[str] = None,
        class_id: Optional[str] = None,
        semester: Optional[str] = None,
        subject_id: Optional[str] = None,
    ) -> list[Assignment]:
        """Zuweisungen, optional gefiltert nach Lehrkraft, Klasse, Halbjahr, Fach."""
        return [
            a for a in self._data.assignments
            if (teacher_id is None or a.teacher_id == teacher_id)
            and (class_id is None or a.class_id == class_id)
            and (semester is None or a.semester == semester)
            and (subject_id is None or a.subject_id == subject_id)
        ]

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        return next((t for t in self._data.teachers if t.id == teacher_id), None)

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        return next((s for s in self._data.subjects if s.id == subject_id), None)

    def get_class(self, class_id: str) -> Optional[SchoolClass]:
        return next((c for c in self._data.classes if c.id == class_id), None)

    def get_assignment(self, assignment_id: str) -> Optional[Assignment]:
        return next((a for a in self._data.assignments if a.id == assignment_id), None)

    def find_teacher(self, short_code: str) -> Optional[Teacher]:
        """Lehrkraft per Kürzel (Groß-/Kleinschreibung egal)."""
        code = short_code.strip().upper()
        return next((t for t in self._data.teachers if t.short_code == code), None)

    def find_subject(self, short_code: str) -> Optional[Subject]:
        """Fach per Kürzel; fällt auf den Fachnamen zurück."""
        code = short_code.strip()
        return (
            next((s for s in self._data.subjects if s.short_code == code), None)
            or next((s for s in self._data.subjects if s.name == code), None)
        )

    def find_class(self, name: str) -> Optional[SchoolClass]:
        """Klasse per Name (Groß-/Kleinschreibung egal, "7a" findet "07A")."""
        wanted = canonical_class_name(name)
        return next((c for c in self._data.classes if c.name.upper() == wanted), None)

    # ─── Stammdaten ──────────────────────────────────────────────────────────

    def add_teacher(self, teacher: Teacher) -> Teacher:
        if self.find_teacher(teacher.short_code) is not None:
            raise RepositoryError(f"Kürzel '{teacher.short_code}' ist bereits vergeben")
        self._data.teachers.append(teacher)
        self._commit()
        return teacher

    def add_subject(self, subject: Subject) -> Subject:
        if any(s.short_code == subject.short_code for s in self._data.subjects):
            raise RepositoryError(f"Fachkürzel '{subject.short_code}' ist bereits vergeben")
        self._data.subjects.append(subject)
        self._commit()
        return subject

    def add_class(self, school_class: SchoolClass) -> SchoolClass:
        if self.find_class(school_class.name) is not None:
            raise RepositoryError(f"Klasse '{school_class.name}' existiert bereits")
        self._data.classes.append(school_class)
        self._commit()
        return school_class

    def update_teacher(self, teacher_id: str, **changes) -> Teacher:
        for i, t in enumerate(self._data.teachers):
            if t.id == teacher_id:
                updated = self._validated(Teacher, t, changes)
                self._data.teachers[i] = updated
                self._commit()
                return updated
        raise RepositoryError(f"Lehrkraft nicht gefunden: {teacher_id}")

    def deactivate_teacher(self, teacher_id: str) -> Teacher:
        """Lehrkräfte werden nie gelöscht, nur deaktiviert."""
        return self.update_teacher(teacher_id, is_active=False)

    # ─── Zuweisungen ─────────────────────────────────────────────────────────

    def _check_references(self, a: Assignment) -> None:
        if self.get_teacher(a.teacher_id) is None:
            raise RepositoryError(f"Lehrkraft nicht gefunden: {a.teacher_id}")
        if self.get_subject(a.subject_id) is None:
            raise RepositoryError(f"Fach nicht gefunden: {a.subject_id}")
        if self.get_class(a.class_id) is None:
            raise RepositoryError(f"Klasse nicht gefunden: {a.class_id}")

    def create_assignment(self, assignment: Assignment) -> Assignment:
        """Speichert eine neue Zuweisung und vergibt eine ID."""
        self._check_references(assignment)
        stored = assignment.model_copy(update={"id": _new_id()})
        self._data.assignments.append(stored)
        self._commit()
        return stored

    def update_assignment(self, assignment_id: str, **changes) -> Assignment:
        """Ändert Felder einer Zuweisung (z.B. hours_per_week)."""
        for i, a in enumerate(self._data.assignments):
            if a.id == assignment_id:
                updated = self._validated(Assignment, a, changes)
                self._check_references(updated)
                self._data.assignments[i] = updated
                self._commit()
                return updated
        raise RepositoryError(f"Zuweisung nicht gefunden: {assignment_id}")

    def delete_assignment(self, assignment_id: str) -> Assignment:
        for i, a in enumerate(self._data.assignments):
            if a.id == assignment_id:
                del self._data.assignments[i]
                self._commit()
                return a
        raise RepositoryError(f"Zuweisung nicht gefunden: {assignment_id}")

    @staticmethod
    def _validated(model, current, changes: dict):
        changes.pop("id", None)
        try:
            return model.model_validate({**current.model_dump(), **changes})
        except ValidationError as e:
            raise RepositoryError(f"Ungültige Änderung: {e}") from e
