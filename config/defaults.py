from config.schema import (
    ConflictConfig,
    EngineConfig,
    ImportConfig,
    MatrixConfig,
    QualificationMatch,
    WorkloadConfig,
)
from models.subject import SubjectCategory


# Anzeigenamen der Fachkategorien
CATEGORY_LABELS: dict[SubjectCategory, str] = {
    SubjectCategory.CORE: "Hauptfach",
    SubjectCategory.MINOR: "Nebenfach",
    SubjectCategory.ELECTIVE: "Wahlpflichtfach",
    SubjectCategory.SPECIAL_AREA: "Fachbereich",
    SubjectCategory.DIFFERENTIATION: "Differenzierung",
}


# Standard-Fächer einer Realschule (NRW), Sek I.
# Stunden pro Jahrgang sind Richtwerte und werden nicht erzwungen.
SUBJECT_METADATA: dict[str, dict] = {
    "Deutsch":      {"short": "D",   "category": SubjectCategory.CORE,
                     "hours": {5: 5, 6: 5, 7: 4, 8: 4, 9: 4, 10: 4}},
    "Mathematik":   {"short": "M",   "category": SubjectCategory.CORE,
                     "hours": {5: 4, 6: 4, 7: 4, 8: 4, 9: 4, 10: 4}},
    "Englisch":     {"short": "E",   "category": SubjectCategory.CORE,
                     "hours": {5: 5, 6: 4, 7: 4, 8: 3, 9: 3, 10: 3}},
    "Biologie":     {"short": "BI",  "category": SubjectCategory.MINOR,
                     "hours": {5: 2, 6: 2, 7: 1, 8: 2, 9: 2, 10: 1}},
    "Physik":       {"short": "PH",  "category": SubjectCategory.MINOR,
                     "hours": {6: 2, 7: 2, 8: 1, 9: 2, 10: 2}},
    "Chemie":       {"short": "CH",  "category": SubjectCategory.MINOR,
                     "hours": {7: 2, 8: 2, 9: 2, 10: 2}},
    "Geschichte":   {"short": "GE",  "category": SubjectCategory.MINOR,
                     "hours": {6: 2, 7: 2, 8: 2, 9: 2, 10: 2}},
    "Erdkunde":     {"short": "EK",  "category": SubjectCategory.MINOR,
                     "hours": {5: 2, 7: 1, 8: 2, 9: 1, 10: 2}},
    "Politik":      {"short": "PK",  "category": SubjectCategory.MINOR,
                     "hours": {5: 1, 6: 1, 8: 1, 9: 2, 10: 2}},
    "Religion":     {"short": "KR",  "category": SubjectCategory.MINOR,
                     "hours": {5: 2, 6: 2, 7: 2, 8: 2, 9: 2, 10: 2}},
    "Praktische Philosophie": {"short": "PP", "category": SubjectCategory.MINOR,
                     "hours": {5: 2, 6: 2, 7: 2, 8: 2, 9: 2, 10: 2}},
    "Kunst":        {"short": "KU",  "category": SubjectCategory.SPECIAL_AREA,
                     "hours": {5: 2, 6: 2, 7: 1, 8: 1, 9: 1, 10: 1}},
    "Musik":        {"short": "MU",  "category": SubjectCategory.SPECIAL_AREA,
                     "hours": {5: 2, 6: 2, 7: 1, 8: 1, 9: 1, 10: 1}},
    "Sport":        {"short": "SP",  "category": SubjectCategory.SPECIAL_AREA,
                     "hours": {5: 3, 6: 3, 7: 3, 8: 3, 9: 3, 10: 3}},
    "Informatik":   {"short": "INF", "category": SubjectCategory.ELECTIVE,
                     "hours": {7: 3, 8: 3, 9: 3, 10: 3}},
    "Französisch":  {"short": "F",   "category": SubjectCategory.ELECTIVE,
                     "hours": {7: 3, 8: 3, 9: 3, 10: 3}},
    "Förderunterricht": {"short": "FÖ", "category": SubjectCategory.DIFFERENTIATION,
                     "hours": {5: 1, 6: 1}},
}


def default_engine_config() -> EngineConfig:
    """Standard-Konfiguration: 25h Deputat, Warnung ab 90 %, atomares Speichern."""
    return EngineConfig(
        school_name="Muster-Realschule",
        data_path="output/school_data.json",
        workload=WorkloadConfig(
            default_max_hours=25.0,
            high_load_fraction=0.90,
            underload_fraction=0.80,
        ),
        conflicts=ConflictConfig(qualification_match=QualificationMatch.EXACT),
        imports=ImportConfig(delimiter=None, has_headers=True),
        matrix=MatrixConfig(atomic_save=True),
    )
