"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Teacher(BaseModel):
    """Repräsentiert eine einzelne Lehrkraft."""

    id: str                                       # Interne ID (UUID)
    name: str                                     # "Müller, Hans"
    short_code: str = Field(min_length=1, max_length=4)  # Kürzel ("MÜL")
    qualifications: list[str] = []                # Fachkürzel/-namen, case-sensitiv
    max_hours: float = Field(gt=0, allow_inf_nan=False)  # Deputat (Wochenstunden)
    is_active: bool = True                        # False = deaktiviert (kein Löschen)
    notes: Optional[str] = None

    @field_validator("short_code")
    @classmethod
    def normalize_short_code(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("qualifications")
    @classmethod
    def dedupe_qualifications(cls, v: list[str]) -> list[str]:
        """Mengen-Semantik: Leere Einträge und Dubletten entfernen, Reihenfolge bleibt."""
        seen: list[str] = []
        for q in v:
            q = q.strip()
            if q and q not in seen:
                seen.append(q)
        return seen

    def is_qualified_for(self, short_code: str, name: str = "",
                         substring: bool = False) -> bool:
        """Prüft, ob die Lehrkraft das Fach unterrichten darf.

        Exakt: Kürzel oder Fachname steht in der Qualifikationsliste.
        substring=True: Kürzel ist Teil eines Qualifikations-Eintrags
        (z.B. "M" in "M/Inf"); Groß-/Kleinschreibung zählt immer.
        """
        if short_code in self.qualifications or (name and name in self.qualifications):
            return True
        if substring:
            return any(short_code in q for q in self.qualifications)
        return False
