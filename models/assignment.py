"""Datenmodell für eine Unterrichtszuweisung Lehrkraft × Fach × Klasse (Pydantic v2)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Semester(str, Enum):
    """Halbjahr. Es gibt genau zwei gültige Werte."""
    FIRST = "1"
    SECOND = "2"


class Assignment(BaseModel):
    """Eine Zuweisung: Lehrkraft unterrichtet Fach in Klasse im Halbjahr.

    Dasselbe 4-Tupel (Lehrkraft, Fach, Klasse, Halbjahr) darf nur innerhalb
    einer Team-Teaching-Gruppe mehrfach vorkommen. Für die Auslastung zählt
    pro Lehrkraft trotzdem nur ein Wert (siehe engine.normalizer).
    """

    id: Optional[str] = None            # None = noch nicht gespeichert
    teacher_id: str
    subject_id: str
    class_id: str
    semester: Semester
    hours_per_week: float = Field(ge=0, allow_inf_nan=False)  # 0.5-Schritte erlaubt
    team_teaching_id: Optional[str] = None
    is_optimized: bool = False          # False = manuell, True = automatisch erzeugt

    @property
    def slot(self) -> tuple[str, str, str]:
        """(Lehrkraft, Fach, Klasse) – unabhängig vom Halbjahr."""
        return (self.teacher_id, self.subject_id, self.class_id)
