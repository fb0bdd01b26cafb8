"""Datenmodell für ein Unterrichtsfach (Pydantic v2)."""

from enum import Enum

from pydantic import BaseModel, Field


class SubjectCategory(str, Enum):
    CORE = "core"
    MINOR = "minor"
    ELECTIVE = "elective"
    SPECIAL_AREA = "special-area"
    DIFFERENTIATION = "differentiation"


class Subject(BaseModel):
    """Repräsentiert ein Unterrichtsfach."""

    id: str
    name: str
    short_code: str = Field(min_length=1, max_length=10)
    category: SubjectCategory = SubjectCategory.CORE
    # Jahrgang → Wochenstunden (nur Richtwert, wird nicht geprüft)
    hours_per_grade: dict[int, float] = {}

    def target_hours(self, grade: int) -> float:
        """Richtwert Wochenstunden für einen Jahrgang (0 wenn nicht vorgesehen)."""
        return self.hours_per_grade.get(grade, 0.0)
