"""Tests für CSV- und Excel-Import (data.csv_import, data.excel_import)."""

from pathlib import Path

import pytest

from config.schema import ImportConfig
from data.csv_import import (
    AssignmentImporter,
    AssignmentImportError,
    detect_csv_format,
    import_master_data,
    read_csv_file,
    read_csv_rows,
    transform_class_row,
    transform_distribution_row,
    transform_subject_row,
    transform_teacher_row,
)
from data.excel_import import TEMPLATE_SHEETS, generate_template, read_excel_rows
from data.repository import SchoolRepository
from models.assignment import Semester
from models.school_class import SchoolClass
from models.subject import Subject, SubjectCategory
from models.teacher import Teacher


def _repo() -> SchoolRepository:
    repo = SchoolRepository()
    repo.add_teacher(Teacher(id="T1", name="Müller", short_code="MÜL",
                             qualifications=["M", "PH"], max_hours=25))
    repo.add_subject(Subject(id="M", name="Mathematik", short_code="M"))
    repo.add_subject(Subject(id="PH", name="Physik", short_code="PH"))
    repo.add_class(SchoolClass(id="07A", name="07A", grade=7))
    repo.add_class(SchoolClass(id="08B", name="08B", grade=8))
    return repo


# ─── FORMAT-ERKENNUNG ─────────────────────────────────────────────────────────

class TestDetectFormat:
    def test_semicolon_with_headers(self):
        content = "Lehrer;Fach;Klasse;Halbjahr;Stunden\nMÜL;M;07A;1;4\n"
        assert detect_csv_format(content) == (";", True)

    def test_comma_without_headers(self):
        assert detect_csv_format("1,2,3\n4,5,6\n") == (",", False)

    def test_empty(self):
        assert detect_csv_format("") == (",", False)

    def test_read_rows_auto_delimiter(self):
        headers, rows = read_csv_rows("a;b\n1 ; 2\n")
        assert headers == ["a", "b"]
        assert rows == [["1", "2"]]

    def test_read_rows_without_headers(self):
        headers, rows = read_csv_rows("1,2\n", ImportConfig(delimiter=",", has_headers=False))
        assert headers is None
        assert rows == [["1", "2"]]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(AssignmentImportError):
            read_csv_file(tmp_path / "fehlt.csv")


# ─── ZEILEN-TRANSFORMER ───────────────────────────────────────────────────────

class TestTransformers:
    def test_distribution_both(self):
        proposals = transform_distribution_row(["MÜL", "M", "07A", "4", "both"])
        assert [(p.semester, p.hours_per_week) for p in proposals] == [
            (Semester.FIRST, 4.0), (Semester.SECOND, 4.0)
        ]

    def test_distribution_without_tag(self):
        assert len(transform_distribution_row(["MÜL", "M", "07A", "4"])) == 2

    def test_distribution_invalid_hours(self):
        assert transform_distribution_row(["MÜL", "M", "07A", "x", "1"]) is None

    def test_teacher_row(self):
        t = transform_teacher_row(["Müller, Hans", "mül", "M; PH", "25,5"])
        assert t.short_code == "MÜL"
        assert t.qualifications == ["M", "PH"]
        assert t.max_hours == 25.5

    def test_teacher_row_default_hours(self):
        t = transform_teacher_row(["Müller", "MÜL"], default_max_hours=20)
        assert t.max_hours == 20

    @pytest.mark.parametrize("row", [
        ["Müller", "MÜLLER"],          # Kürzel zu lang
        ["Müller", "MÜL", "", "45"],   # Deputat außerhalb 1–40
        ["", "MÜL"],
    ])
    def test_teacher_row_invalid(self, row):
        assert transform_teacher_row(row) is None

    def test_subject_row_category_alias(self):
        s = transform_subject_row(["Mathematik", "M", "Hauptfach"])
        assert s.category == SubjectCategory.CORE
        assert transform_subject_row(["Kunst", "KU", "Nebenfach"]).category == SubjectCategory.MINOR

    def test_class_row(self):
        c = transform_class_row(["07a", "28"])
        assert c.name == "07A"
        assert c.grade == 7
        assert c.student_count == 28

    def test_class_row_short_form_gets_leading_zero(self):
        """"7a" wird wie bei der Klassensuche zu "07A"."""
        c = transform_class_row(["7a"])
        assert c.name == "07A"
        assert c.grade == 7
        repo = _repo()
        assert repo.find_class(c.name).id == "07A"

    def test_class_row_grade_out_of_range(self):
        assert transform_class_row(["11A"]) is None
        assert transform_class_row(["Foo"]) is None


# ─── IMPORTER ─────────────────────────────────────────────────────────────────

class TestAssignmentImporter:
    def test_import_assignments(self):
        repo = _repo()
        headers, rows = read_csv_rows(
            "Lehrer;Fach;Klasse;Halbjahr;Stunden\n"
            "MÜL;M;07A;1;4\n"
            "MÜL;PH;8b;2;2\n"
            "XYZ;M;07A;1;4\n"
            ";;;;\n"
        )
        result = AssignmentImporter(repo).import_rows(headers, rows)
        assert result.succeeded == 2
        assert result.skipped == 2
        assert result.errored == 0
        assert len(repo.assignments()) == 2

    def test_reimport_is_idempotent(self):
        repo = _repo()
        headers, rows = read_csv_rows("L,F,K,G,V\nMÜL,M,07A,4,both\n")
        importer = AssignmentImporter(repo)
        importer.import_rows(headers, rows, transform_distribution_row)
        importer.import_rows(headers, rows, transform_distribution_row)
        assert len(repo.assignments()) == 2

    def test_reimport_takes_maximum(self):
        repo = _repo()
        importer = AssignmentImporter(repo)
        importer.import_rows(None, [["MÜL", "M", "07A", "1", "3"]])
        importer.import_rows(None, [["MÜL", "M", "07A", "1", "5"]])
        importer.import_rows(None, [["MÜL", "M", "07A", "1", "2"]])
        assert [a.hours_per_week for a in repo.assignments()] == [5.0]

    def test_unrealistic_hours_flagged(self):
        repo = _repo()
        result = AssignmentImporter(repo).import_rows(None, [["MÜL", "M", "07A", "1", "12"]])
        assert result.succeeded == 1
        assert any("unrealistisch" in m for m in result.messages)

    def test_team_teaching_column(self):
        repo = _repo()
        AssignmentImporter(repo).import_rows(None, [["MÜL", "M", "07A", "1", "2", "G1"]])
        assert repo.assignments()[0].team_teaching_id == "G1"


class TestMasterData:
    def test_duplicates_skipped(self):
        repo = SchoolRepository()
        rows = [["Müller", "MÜL", "M"], ["Müller, Anna", "mül", "D"], ["Schmidt", "SCH"]]
        result = import_master_data(repo, None, rows, transform_teacher_row)
        assert result.succeeded == 2
        assert result.skipped == 1
        assert len(repo.teachers()) == 2


# ─── EXCEL ────────────────────────────────────────────────────────────────────

class TestExcel:
    def test_template_roundtrip(self, tmp_path: Path):
        """Die Beispielzeilen der Vorlage lassen sich wieder importieren."""
        path = tmp_path / "vorlage.xlsx"
        generate_template(path)

        headers, rows = read_excel_rows(path, "zuweisungen")
        assert headers == TEMPLATE_SHEETS["Zuweisungen"][0]
        assert rows[0] == ["MÜL", "M", "07A", "4", "both"]

        repo = _repo()
        result = AssignmentImporter(repo).import_rows(
            headers, rows[:2], transform_distribution_row)
        assert result.succeeded == 3

    def test_missing_optional_column_padded(self, tmp_path: Path):
        import openpyxl

        path = tmp_path / "daten.xlsx"
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["Lehrer", "Fach", "Klasse", "Gesamtstunden", "Verteilung"])
        ws.append(["MÜL", "M", "07A", 4])
        wb.save(path)

        headers, rows = read_excel_rows(path)
        assert rows == [["MÜL", "M", "07A", "4", ""]]

    def test_unknown_sheet(self, tmp_path: Path):
        path = tmp_path / "vorlage.xlsx"
        generate_template(path)
        with pytest.raises(AssignmentImportError):
            read_excel_rows(path, "Räume")
