"""CSV-Import für Zuweisungen und Stammdaten (Lehrkräfte, Fächer, Klassen).

Jede Zeile läuft durch einen Zeilen-Transformer:
    (row: list[str], headers: list[str] | None) → Vorschlag(e) oder None

None bedeutet "Zeile überspringen" (zu wenige Spalten, Pflichtfeld leer,
Stunden nicht lesbar). Übersprungene Zeilen werden gezählt, nie als Fehler
geworfen. Fehler beim Speichern zählen getrennt als "fehlgeschlagen".

Formate:
  Zuweisungen:          Lehrer, Fach, Klasse, Halbjahr, Stunden
  Zuweisungen (Gesamt): Lehrer, Fach, Klasse, Gesamtstunden[, Verteilung]
                        Verteilung: both | 1 | 2 | a-b (siehe engine.distribution)
  Lehrkräfte:           Name, Kürzel[, Qualifikationen (;-getrennt), Deputat]
  Fächer:               Name, Kürzel[, Kategorie]
  Klassen:              Name[, Schülerzahl]
"""

import csv
import io
import logging
import uuid
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from pydantic import BaseModel, ValidationError

from config.schema import ImportConfig
from data.repository import RepositoryError, SchoolRepository
from engine.distribution import to_hours, expand_distribution
from engine.normalizer import slot_key
from engine.results import BatchResult
from models.assignment import Assignment, Semester
from models.school_class import SchoolClass, canonical_class_name, grade_from_name
from models.subject import Subject, SubjectCategory
from models.teacher import Teacher

logger = logging.getLogger(__name__)


class AssignmentImportError(Exception):
    """Fehler beim Lesen einer Importdatei (nicht gefunden, unbekanntes Format)."""


class ProposedAssignment(BaseModel):
    """Zuweisung aus einer Importzeile, Referenzen noch als Kürzel/Name."""

    teacher_short: str
    subject_short: str
    class_name: str
    semester: Semester
    hours_per_week: float
    team_teaching_id: Optional[str] = None


Row = list[str]
Transformer = Callable[[Row, Optional[Row]], Optional[Union[list, BaseModel]]]


# ─── Format-Erkennung ─────────────────────────────────────────────────────────

_DELIMITERS = [",", ";", "\t", "|"]


def detect_csv_format(content: str) -> tuple[str, bool]:
    """Erkennt Trennzeichen und Kopfzeile anhand der ersten 5 Zeilen.

    Trennzeichen: das mit den meisten Feldern im Durchschnitt.
    Kopfzeile: erste Zeile enthält nicht-numerische Werte und > 1 Feld.
    """
    lines = [l for l in content.splitlines()[:5] if l.strip()]
    if not lines:
        return ",", False

    best, best_avg = ",", 0.0
    for delimiter in _DELIMITERS:
        avg = sum(len(l.split(delimiter)) for l in lines) / len(lines)
        if avg > best_avg:
            best, best_avg = delimiter, avg

    first = lines[0].split(best)
    has_headers = len(first) > 1 and any(to_hours(f) is None for f in first)
    return best, has_headers


def read_csv_rows(content: str, config: Optional[ImportConfig] = None
                  ) -> tuple[Optional[Row], list[Row]]:
    """Zerlegt CSV-Text in (Kopfzeile, Datenzeilen). Felder werden getrimmt."""
    config = config or ImportConfig()
    delimiter = config.delimiter
    has_headers = config.has_headers
    if delimiter is None:
        delimiter, _ = detect_csv_format(content)

    reader = csv.reader(io.StringIO(content), delimiter=delimiter)
    rows = [[field.strip() for field in row] for row in reader]
    headers = None
    if has_headers and rows:
        headers, rows = rows[0], rows[1:]
    return headers, rows


def read_csv_file(path: Path, config: Optional[ImportConfig] = None
                  ) -> tuple[Optional[Row], list[Row]]:
    config = config or ImportConfig()
    path = Path(path)
    try:
        with open(path, encoding=config.encoding, newline="") as f:
            content = f.read()
    except FileNotFoundError:
        raise AssignmentImportError(f"Datei nicht gefunden: {path}")
    except UnicodeDecodeError as e:
        raise AssignmentImportError(f"Zeichensatz von {path} nicht lesbar: {e}")
    return read_csv_rows(content, config)


# ─── Zeilen-Transformer ───────────────────────────────────────────────────────

def _field(row: Row, index: int) -> str:
    return row[index].strip() if index < len(row) and row[index] else ""


def transform_assignment_row(row: Row, headers: Optional[Row] = None
                             ) -> Optional[list[ProposedAssignment]]:
    """Lehrer, Fach, Klasse, Halbjahr, Stunden → eine Zuweisung."""
    if len(row) < 5:
        return None
    teacher, subject, class_name = _field(row, 0), _field(row, 1), _field(row, 2)
    semester = _field(row, 3) or "1"
    hours = to_hours(_field(row, 4))
    if not teacher or not subject or not class_name:
        return None
    if hours is None or hours <= 0 or semester not in ("1", "2"):
        return None
    return [ProposedAssignment(
        teacher_short=teacher,
        subject_short=subject,
        class_name=class_name,
        semester=semester,
        hours_per_week=hours,
        team_teaching_id=_field(row, 5) or None,
    )]


def transform_distribution_row(row: Row, headers: Optional[Row] = None
                               ) -> Optional[list[ProposedAssignment]]:
    """Lehrer, Fach, Klasse, Gesamtstunden[, Verteilung] → 0–2 Zuweisungen."""
    if len(row) < 4:
        return None
    teacher, subject, class_name = _field(row, 0), _field(row, 1), _field(row, 2)
    if not teacher or not subject or not class_name:
        return None
    parts = expand_distribution(_field(row, 3), _field(row, 4) or None)
    if not parts:
        return None
    return [
        ProposedAssignment(
            teacher_short=teacher,
            subject_short=subject,
            class_name=class_name,
            semester=semester,
            hours_per_week=hours,
        )
        for semester, hours in parts
    ]


def transform_teacher_row(row: Row, headers: Optional[Row] = None,
                          default_max_hours: float = 25.0) -> Optional[Teacher]:
    """Name, Kürzel[, Qualifikationen, Deputat] → Lehrkraft (Deputat 1–40h)."""
    if len(row) < 2:
        return None
    name, short = _field(row, 0), _field(row, 1)
    if not name or not short or len(short) > 4:
        return None
    qualifications = [q.strip() for q in _field(row, 2).split(";") if q.strip()]
    max_hours = to_hours(_field(row, 3))
    if max_hours is None:
        max_hours = default_max_hours
    if not 1 <= max_hours <= 40:
        return None
    try:
        return Teacher(id=uuid.uuid4().hex, name=name, short_code=short,
                       qualifications=qualifications, max_hours=max_hours)
    except ValidationError:
        return None


_CATEGORY_ALIASES = {
    "hauptfach": SubjectCategory.CORE,
    "nebenfach": SubjectCategory.MINOR,
    "wahlpflicht": SubjectCategory.ELECTIVE,
    "wahlpflichtfach": SubjectCategory.ELECTIVE,
    "fachbereich": SubjectCategory.SPECIAL_AREA,
    "differenzierung": SubjectCategory.DIFFERENTIATION,
}


def _parse_category(raw: str) -> SubjectCategory:
    key = raw.strip().lower()
    if key in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[key]
    try:
        return SubjectCategory(key)
    except ValueError:
        return SubjectCategory.CORE


def transform_subject_row(row: Row, headers: Optional[Row] = None) -> Optional[Subject]:
    """Name, Kürzel[, Kategorie] → Fach (Kürzel ≤ 10 Zeichen)."""
    if len(row) < 2:
        return None
    name, short = _field(row, 0), _field(row, 1)
    if not name or not short or len(short) > 10:
        return None
    return Subject(id=uuid.uuid4().hex, name=name, short_code=short,
                   category=_parse_category(_field(row, 2)))


def transform_class_row(row: Row, headers: Optional[Row] = None) -> Optional[SchoolClass]:
    """Name[, Schülerzahl] → Klasse; Jahrgang aus dem Namen (5–10)."""
    if not row:
        return None
    name = canonical_class_name(_field(row, 0))
    grade = grade_from_name(name)
    if grade is None or not 5 <= grade <= 10:
        return None
    count = to_hours(_field(row, 1)) or 0
    if count < 0:
        return None
    return SchoolClass(id=uuid.uuid4().hex, name=name, grade=grade,
                       student_count=int(count))


# ─── Importer ─────────────────────────────────────────────────────────────────

def run_transformer(headers: Optional[Row], rows: Iterable[Row],
                    transformer: Transformer,
                    result: Optional[BatchResult] = None) -> tuple[list, BatchResult]:
    """Wendet einen Transformer auf alle Zeilen an.

    Leere Zeilen und Zeilen mit weniger Spalten als die Kopfzeile werden
    übersprungen. Eine Zeile kann mehrere Vorschläge liefern.
    """
    result = result or BatchResult()
    proposals: list = []
    for line_no, row in enumerate(rows, 2 if headers else 1):
        if not any(field.strip() for field in row):
            result.skip()
            continue
        if headers and len(row) < len(headers):
            result.skip(f"Zeile {line_no}: zu wenige Spalten")
            continue
        transformed = transformer(row, headers)
        if transformed is None:
            result.skip(f"Zeile {line_no}: unvollständig oder nicht lesbar")
            continue
        if isinstance(transformed, list):
            proposals.extend(transformed)
        else:
            proposals.append(transformed)
    return proposals, result


class AssignmentImporter:
    """Übernimmt Vorschläge in die Ablage.

    Kürzel und Klassennamen werden aufgelöst; unbekannte Referenzen führen zum
    Überspringen. Jeder Vorschlag wird über den Normalisierungs-Schlüssel
    abgeglichen: existiert der Slot bereits, gilt das Maximum der Stunden
    (Re-Import ändert nichts), sonst wird neu angelegt.
    """

    def __init__(self, repository: SchoolRepository,
                 config: Optional[ImportConfig] = None) -> None:
        self.repository = repository
        self.config = config or ImportConfig()

    def _resolve(self, p: ProposedAssignment) -> Optional[Assignment]:
        teacher = self.repository.find_teacher(p.teacher_short)
        subject = self.repository.find_subject(p.subject_short)
        school_class = self.repository.find_class(p.class_name)
        if teacher is None or subject is None or school_class is None:
            return None
        return Assignment(
            teacher_id=teacher.id,
            subject_id=subject.id,
            class_id=school_class.id,
            semester=p.semester,
            hours_per_week=p.hours_per_week,
            team_teaching_id=p.team_teaching_id,
        )

    def import_proposals(self, proposals: Iterable[ProposedAssignment],
                         result: Optional[BatchResult] = None) -> BatchResult:
        result = result or BatchResult()
        for p in proposals:
            label = f"{p.teacher_short}/{p.subject_short}/{p.class_name} HJ {p.semester.value}"
            assignment = self._resolve(p)
            if assignment is None:
                result.skip(f"{label}: Lehrkraft, Fach oder Klasse unbekannt")
                continue
            if p.hours_per_week > self.config.max_plausible_hours:
                result.messages.append(
                    f"{label}: {p.hours_per_week:g}h erscheinen unrealistisch hoch"
                )
            try:
                self._upsert(assignment)
                result.succeeded += 1
            except RepositoryError as e:
                logger.warning(f"Import fehlgeschlagen ({label}): {e}")
                result.fail(f"{label}: {e}")
        return result

    def _upsert(self, assignment: Assignment) -> None:
        key = slot_key(assignment)
        existing = [
            a for a in self.repository.assignments(
                teacher_id=assignment.teacher_id,
                class_id=assignment.class_id,
                semester=assignment.semester,
                subject_id=assignment.subject_id,
            )
            if slot_key(a) == key
        ]
        if not existing:
            self.repository.create_assignment(assignment)
            return
        top = max(existing, key=lambda a: a.hours_per_week)
        if assignment.hours_per_week > top.hours_per_week:
            self.repository.update_assignment(top.id,
                                              hours_per_week=assignment.hours_per_week)

    def import_rows(self, headers: Optional[Row], rows: Iterable[Row],
                    transformer: Transformer = transform_assignment_row) -> BatchResult:
        proposals, result = run_transformer(headers, rows, transformer)
        result = self.import_proposals(proposals, result)
        logger.info(f"Import Zuweisungen: {result.summary()}")
        return result


def import_master_data(repository: SchoolRepository, headers: Optional[Row],
                       rows: Iterable[Row], transformer: Transformer) -> BatchResult:
    """Importiert Lehrkräfte, Fächer oder Klassen; Dubletten werden übersprungen."""
    records, result = run_transformer(headers, rows, transformer)
    adders = {
        Teacher: repository.add_teacher,
        Subject: repository.add_subject,
        SchoolClass: repository.add_class,
    }
    for record in records:
        try:
            adders[type(record)](record)
            result.succeeded += 1
        except RepositoryError as e:
            result.skip(str(e))
    logger.info(f"Import Stammdaten: {result.summary()}")
    return result
