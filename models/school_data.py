"""SchoolData: Vollständiger Datensatz (Lehrkräfte, Fächer, Klassen, Zuweisungen)."""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from models.assignment import Assignment
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher


class SchoolData(BaseModel):
    """Momentaufnahme aller Stammdaten und Zuweisungen einer Schule."""

    teachers: list[Teacher] = []
    subjects: list[Subject] = []
    classes: list[SchoolClass] = []
    assignments: list[Assignment] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        active = sum(1 for t in self.teachers if t.is_active)
        s1 = sum(1 for a in self.assignments if a.semester == "1")
        s2 = sum(1 for a in self.assignments if a.semester == "2")
        team = sum(1 for a in self.assignments if a.team_teaching_id)
        lines = [
            f"Lehrkräfte: {len(self.teachers)} ({active} aktiv)",
            f"Fächer: {len(self.subjects)}",
            f"Klassen: {len(self.classes)} "
            f"({len(set(c.grade for c in self.classes))} Jahrgänge)",
            f"Zuweisungen: {len(self.assignments)} "
            f"(Halbjahr 1: {s1}, Halbjahr 2: {s2})",
            f"davon Team-Teaching: {team}" if team else "",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Persistenz ───

    def save_json(self, path: Path) -> None:
        """Schreibt den Datensatz als JSON.

        Geschrieben wird in eine Nachbardatei, die danach die alte ersetzt. Ein
        Abbruch mitten im Schreiben hinterlässt so keine halbe Datendatei.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc)
        stamped = self.model_copy(update={
            "created_at": self.created_at or stamp,
            "modified_at": stamp,
        })
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(stamped.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp, path)

    @classmethod
    def load_json(cls, path: Path) -> "SchoolData":
        """Liest eine mit save_json geschriebene Datei.

        Raises:
            FileNotFoundError: Datei fehlt.
            ValueError: Inhalt ist kein gültiger Datensatz.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Datendatei nicht gefunden: {path}")
        try:
            return cls.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            raise ValueError(f"Datendatei {path} ist beschädigt:\n{e}") from e
