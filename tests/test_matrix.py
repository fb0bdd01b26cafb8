"""Tests für die Klassen-Matrix (vorgemerkte Änderungen, atomares Speichern)."""

import pytest

from data.repository import RepositoryError, SchoolRepository
from engine.matrix import IntentAction, MatrixEditor, MatrixSaveError
from models.assignment import Assignment
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher


class FailingRepository(SchoolRepository):
    """Ablage, die das Anlegen für eine bestimmte Lehrkraft verweigert."""

    fail_teacher = "T2"

    def create_assignment(self, assignment):
        if assignment.teacher_id == self.fail_teacher:
            raise RepositoryError("Datenbank nicht erreichbar")
        return super().create_assignment(assignment)


def _fill(repo: SchoolRepository) -> SchoolRepository:
    repo.add_teacher(Teacher(id="T1", name="Müller", short_code="MÜL",
                             qualifications=["M"], max_hours=25))
    repo.add_teacher(Teacher(id="T2", name="Schmidt", short_code="SCH",
                             qualifications=["D"], max_hours=25))
    repo.add_subject(Subject(id="M", name="Mathematik", short_code="M"))
    repo.add_subject(Subject(id="D", name="Deutsch", short_code="D"))
    repo.add_class(SchoolClass(id="07A", name="07A", grade=7))
    return repo


def _a(hours, teacher="T1", subject="M", semester="1", team=None):
    return Assignment(teacher_id=teacher, subject_id=subject, class_id="07A",
                      semester=semester, hours_per_week=hours, team_teaching_id=team)


class TestEditing:
    def test_unknown_class_raises(self):
        with pytest.raises(ValueError):
            MatrixEditor(_fill(SchoolRepository()), "99Z")

    def test_negative_hours_rejected(self):
        editor = MatrixEditor(_fill(SchoolRepository()), "07A")
        with pytest.raises(ValueError):
            editor.set_cell("1", "T1", "M", -1)

    @pytest.mark.parametrize("hours", [float("inf"), float("nan")])
    def test_non_finite_hours_rejected(self, hours):
        editor = MatrixEditor(_fill(SchoolRepository()), "07A")
        with pytest.raises(ValueError):
            editor.set_cell("1", "T1", "M", hours)
        assert not editor.has_changes

    def test_view_overlays_changes(self):
        repo = _fill(SchoolRepository())
        repo.create_assignment(_a(4))
        repo.create_assignment(_a(2, teacher="T2", subject="D", team="G1"))
        editor = MatrixEditor(repo, "07A")
        assert editor.view("1") == {("T1", "M"): 4.0}
        editor.set_cell("1", "T2", "D", 3)
        editor.set_cell("1", "T1", "M", 0)
        assert editor.view("1") == {("T2", "D"): 3.0}
        assert editor.has_changes
        editor.reset()
        assert not editor.has_changes


class TestPlan:
    def test_intents(self):
        repo = _fill(SchoolRepository())
        repo.create_assignment(_a(4))
        repo.create_assignment(_a(2, subject="M", semester="2"))
        editor = MatrixEditor(repo, "07A")
        editor.set_cell("1", "T1", "M", 5)        # update
        editor.set_cell("1", "T2", "D", 3)        # create
        editor.set_cell("2", "T1", "M", 0)        # delete
        actions = sorted(i.action.value for i in editor.plan())
        assert actions == sorted([IntentAction.UPDATE.value, IntentAction.CREATE.value,
                                  IntentAction.DELETE.value])

    def test_unchanged_cell_is_noop(self):
        repo = _fill(SchoolRepository())
        repo.create_assignment(_a(4))
        editor = MatrixEditor(repo, "07A")
        editor.set_cell("1", "T1", "M", 4)
        editor.set_cell("1", "T2", "D", 0)
        assert editor.plan() == []

    def test_update_collapses_duplicates(self):
        repo = _fill(SchoolRepository())
        repo.create_assignment(_a(4))
        repo.create_assignment(_a(4))
        editor = MatrixEditor(repo, "07A")
        editor.set_cell("1", "T1", "M", 3)
        result = editor.save()
        assert result.ok
        remaining = repo.assignments(class_id="07A", semester="1")
        assert [a.hours_per_week for a in remaining] == [3.0]


class TestSave:
    def test_save_applies_and_resets(self):
        repo = _fill(SchoolRepository())
        editor = MatrixEditor(repo, "07A")
        editor.set_cell("1", "T1", "M", 4)
        editor.set_cell("2", "T1", "M", 4)
        result = editor.save()
        assert result.succeeded == 2
        assert len(repo.assignments()) == 2
        assert not editor.has_changes

    def test_atomic_save_rolls_back(self):
        """Schlägt eine Zelle fehl, bleibt der Datenbestand unverändert."""
        repo = _fill(FailingRepository())
        repo.create_assignment(_a(4))
        editor = MatrixEditor(repo, "07A", atomic=True)
        editor.set_cell("1", "T1", "M", 5)
        editor.set_cell("1", "T2", "D", 3)

        with pytest.raises(MatrixSaveError) as exc_info:
            editor.save()

        assert exc_info.value.result.errored == 1
        assert exc_info.value.result.succeeded == 0
        assert [a.hours_per_week for a in repo.assignments()] == [4.0]
        assert editor.has_changes

    def test_partial_save_keeps_successful_cells(self):
        repo = _fill(FailingRepository())
        repo.create_assignment(_a(4))
        editor = MatrixEditor(repo, "07A", atomic=False)
        editor.set_cell("1", "T1", "M", 5)
        editor.set_cell("1", "T2", "D", 3)

        result = editor.save()

        assert result.succeeded == 1
        assert result.errored == 1
        assert [a.hours_per_week for a in repo.assignments()] == [5.0]
        assert editor.has_changes

    def test_saved_matrix_reloads_from_file(self, tmp_path):
        """Gespeicherte Zellen lassen sich aus der Datendatei wieder laden."""
        path = tmp_path / "daten.json"
        editor = MatrixEditor(_fill(SchoolRepository(path)), "07A")
        editor.set_cell("1", "T1", "M", 4.5)
        with pytest.raises(ValueError):
            editor.set_cell("1", "T2", "D", float("inf"))
        editor.save()
        reloaded = SchoolRepository(path)
        assert [a.hours_per_week for a in reloaded.assignments()] == [4.5]
