"""Datenmodell für eine Schulklasse (Pydantic v2)."""

import re
from typing import Optional

from pydantic import BaseModel, Field, model_validator

# Zweistelliger Jahrgang + Buchstabe/Kürzel, z.B. "07A", "08INF"
CLASS_NAME_PATTERN = re.compile(r"^(\d{2})([A-Za-z0-9ÄÖÜäöü]+)$")


def grade_from_name(name: str) -> Optional[int]:
    """Liest den Jahrgang aus dem Klassennamen ("07A" → 7); None wenn ungültig."""
    m = CLASS_NAME_PATTERN.match(name.strip())
    return int(m.group(1)) if m else None


def canonical_class_name(name: str) -> str:
    """Großbuchstaben, einstelliger Jahrgang mit führender Null ("7a" → "07A")."""
    wanted = name.strip().upper()
    if len(wanted) >= 2 and wanted[0].isdigit() and not wanted[1].isdigit():
        wanted = "0" + wanted
    return wanted


class SchoolClass(BaseModel):
    """Repräsentiert eine einzelne Klasse (z.B. 07A, 10INF)."""

    id: str
    name: str                                 # "07A", "08INF"
    grade: int = Field(ge=5, le=10)           # redundant zum Namen gespeichert
    student_count: int = Field(0, ge=0)
    target_hours_s1: Optional[float] = Field(None, ge=0)  # Soll-Stunden Halbjahr 1
    target_hours_s2: Optional[float] = Field(None, ge=0)  # Soll-Stunden Halbjahr 2

    @model_validator(mode='after')
    def _check_grade_matches_name(self):
        prefix = grade_from_name(self.name)
        if prefix is None:
            raise ValueError(
                f"Klassenname '{self.name}' ungültig – erwartet z.B. '07A' oder '08INF'."
            )
        if prefix != self.grade:
            raise ValueError(
                f"Jahrgang {self.grade} passt nicht zum Klassennamen '{self.name}'."
            )
        return self

    @classmethod
    def from_name(cls, id: str, name: str, **kwargs) -> "SchoolClass":
        """Erzeugt eine Klasse, Jahrgang wird aus dem Namen abgeleitet."""
        grade = grade_from_name(name)
        if grade is None:
            raise ValueError(
                f"Klassenname '{name}' ungültig – erwartet z.B. '07A' oder '08INF'."
            )
        return cls(id=id, name=name.strip(), grade=grade, **kwargs)

    def target_hours(self, semester: str) -> Optional[float]:
        """Soll-Wochenstunden für ein Halbjahr ("1" oder "2")."""
        return self.target_hours_s1 if semester == "1" else self.target_hours_s2
