from pydantic import BaseModel, Field, model_validator
from typing import Optional
from enum import Enum


class QualificationMatch(str, Enum):
    # Kürzel oder Fachname muss exakt in der Qualifikationsliste stehen
    EXACT = "exact"
    # Fachkürzel darf Teil eines Qualifikations-Eintrags sein ("M" in "M/Inf")
    SUBSTRING = "substring"


# ─── DEPUTAT / AUSLASTUNG ───

class WorkloadConfig(BaseModel):
    """Schwellenwerte für die Auslastungs-Bewertung der Lehrkräfte."""
    # Deputat für Lehrkräfte ohne eigene Angabe (z.B. beim CSV-Import)
    default_max_hours: float = Field(25.0, gt=0, le=40,
        description="Standard-Deputat (Wochenstunden)")
    # Ab diesem Anteil des Deputats wird "hohe Belastung" gemeldet
    high_load_fraction: float = Field(0.90, gt=0.0, le=1.0,
        description="Warnschwelle hohe Belastung (Anteil am Deputat)")
    # Unterhalb dieses Anteils gilt eine Lehrkraft als unterzugewiesen
    underload_fraction: float = Field(0.80, ge=0.0, le=1.0,
        description="Schwelle Unterzuweisung (Anteil am Deputat)")

    @model_validator(mode='after')
    def validate_fractions(self):
        """Unterzuweisung muss unterhalb der Warnschwelle liegen."""
        if self.underload_fraction > self.high_load_fraction:
            raise ValueError(
                f"underload_fraction ({self.underload_fraction}) > "
                f"high_load_fraction ({self.high_load_fraction})"
            )
        return self


# ─── KONFLIKTPRÜFUNG ───

class ConflictConfig(BaseModel):
    """Einstellungen der Konfliktprüfung (Qualifikation, Überlastung)."""
    # Vergleichsmodus für Qualifikationen
    qualification_match: QualificationMatch = Field(QualificationMatch.EXACT,
        description="exact = Kürzel/Name exakt, substring = Kürzel als Teilstring")


# ─── IMPORT ───

class ImportConfig(BaseModel):
    """Einstellungen für den CSV-/Excel-Import von Zuweisungen."""
    # Trennzeichen; None = automatisch erkennen (, ; Tab |)
    delimiter: Optional[str] = Field(None,
        description="CSV-Trennzeichen (leer = automatisch)")
    # Erste Zeile enthält Spaltenüberschriften
    has_headers: bool = Field(True,
        description="Erste Zeile ist Kopfzeile")
    # Zeichensatz der CSV-Dateien (utf-8-sig entfernt ein BOM)
    encoding: str = Field("utf-8-sig",
        description="Zeichensatz der Importdateien")
    # Wochenstunden pro Zuweisung oberhalb dieses Werts erzeugen eine Warnung
    max_plausible_hours: float = Field(10.0, gt=0,
        description="Plausibilitätsgrenze Wochenstunden pro Zuweisung")

    @model_validator(mode='after')
    def validate_delimiter(self):
        """Trennzeichen muss genau ein Zeichen lang sein."""
        if self.delimiter is not None and len(self.delimiter) != 1:
            raise ValueError(
                f"Trennzeichen '{self.delimiter}' muss genau ein Zeichen sein")
        return self


# ─── MATRIX-BEARBEITUNG ───

class MatrixConfig(BaseModel):
    """Einstellungen für das Speichern der Klassen-Matrix."""
    # True = alle Zellen oder keine (Rollback bei Fehler)
    atomic_save: bool = Field(True,
        description="Matrix-Speichern als Transaktion (alles oder nichts)")


# ─── GESAMT-CONFIG ───

class EngineConfig(BaseModel):
    """Gesamtkonfiguration der Unterrichtsverteilung."""
    # Name der Schule
    school_name: str = Field("Muster-Realschule",
        description="Name der Schule")
    # Pfad der JSON-Datendatei (Lehrkräfte, Fächer, Klassen, Zuweisungen)
    data_path: str = Field("output/school_data.json",
        description="Pfad der Datendatei")
    # Deputat- und Auslastungs-Schwellen
    workload: WorkloadConfig = Field(default_factory=WorkloadConfig)
    # Konfliktprüfung
    conflicts: ConflictConfig = Field(default_factory=ConflictConfig)
    # Import-Einstellungen
    imports: ImportConfig = Field(default_factory=ImportConfig)
    # Matrix-Bearbeitung
    matrix: MatrixConfig = Field(default_factory=MatrixConfig)
