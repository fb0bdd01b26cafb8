"""Tests für Nachtrag Halbjahr 2 und Halbjahres-Abgleich (engine.backfill)."""

from data.repository import RepositoryError, SchoolRepository
from engine.backfill import (
    apply_backfill,
    find_discrepancies,
    find_missing_semester2,
    semester_coverage,
    uneven_subjects,
)
from models.assignment import Assignment, Semester
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher


def _a(hours, teacher="T1", subject="M", cls="07A", semester="1", team=None, id=None):
    return Assignment(id=id, teacher_id=teacher, subject_id=subject, class_id=cls,
                      semester=semester, hours_per_week=hours, team_teaching_id=team)


def _repo() -> SchoolRepository:
    repo = SchoolRepository()
    repo.add_teacher(Teacher(id="T1", name="Müller", short_code="MÜL",
                             qualifications=["M"], max_hours=25))
    repo.add_subject(Subject(id="M", name="Mathematik", short_code="M"))
    repo.add_subject(Subject(id="D", name="Deutsch", short_code="D"))
    repo.add_class(SchoolClass(id="07A", name="07A", grade=7))
    repo.add_class(SchoolClass(id="07B", name="07B", grade=7))
    return repo


class TestFindMissingSemester2:
    def test_proposes_copy_for_missing_slot(self):
        proposals = find_missing_semester2([_a(4, id="x", team="G1")])
        assert len(proposals) == 1
        p = proposals[0]
        assert p.semester == Semester.SECOND
        assert p.id is None
        assert p.hours_per_week == 4
        assert p.team_teaching_id == "G1"

    def test_existing_counterpart_not_proposed(self):
        """Andere Stundenzahl in Halbjahr 2 zählt trotzdem als Gegenstück."""
        assert find_missing_semester2([_a(4), _a(2, semester="2")]) == []

    def test_only_first_to_second(self):
        assert find_missing_semester2([_a(4, semester="2")]) == []

    def test_duplicates_yield_one_proposal_with_max_hours(self):
        proposals = find_missing_semester2([_a(3), _a(4)])
        assert [p.hours_per_week for p in proposals] == [4]

    def test_zero_hour_records_ignored(self):
        assert find_missing_semester2([_a(0)]) == []

    def test_rerun_without_persisting_gives_same_proposal(self):
        records = [_a(4, id="x")]
        first = find_missing_semester2(records)
        second = find_missing_semester2(records)
        assert len(first) == 1
        assert first == second
        assert records[0].semester == Semester.FIRST

    def test_team_groups_in_same_slot_kept_apart(self):
        """Zwei Team-Gruppen im selben Slot ergeben zwei Vorschläge."""
        proposals = find_missing_semester2(
            [_a(4, team="G1"), _a(2, team="G2"), _a(3, team="G1")]
        )
        assert sorted((p.team_teaching_id, p.hours_per_week) for p in proposals) == [
            ("G1", 4), ("G2", 2),
        ]


class TestApplyBackfill:
    def test_creates_missing_assignments(self):
        repo = _repo()
        repo.create_assignment(_a(4))
        repo.create_assignment(_a(3, subject="D", cls="07B"))
        proposals, result = apply_backfill(repo)
        assert len(proposals) == 2
        assert result.succeeded == 2
        assert len(repo.assignments(semester="2")) == 2

    def test_second_run_is_noop(self):
        """Nachtrag ist idempotent."""
        repo = _repo()
        repo.create_assignment(_a(4))
        apply_backfill(repo)
        proposals, result = apply_backfill(repo)
        assert proposals == []
        assert result.total == 0
        assert len(repo.assignments()) == 2

    def test_dry_run_writes_nothing(self):
        repo = _repo()
        repo.create_assignment(_a(4))
        proposals, result = apply_backfill(repo, dry_run=True)
        assert len(proposals) == 1
        assert result.succeeded == 0
        assert repo.assignments(semester="2") == []

    def test_failures_are_counted(self):
        class FailingRepository(SchoolRepository):
            def create_assignment(self, assignment):
                if assignment.class_id == "07B":
                    raise RepositoryError("Schreibfehler")
                return super().create_assignment(assignment)

        repo = FailingRepository()
        base = _repo()
        repo._data = base.data
        repo._data.assignments.extend([_a(4, id="a"), _a(4, cls="07B", id="b")])
        _, result = apply_backfill(repo)
        assert result.succeeded == 1
        assert result.errored == 1
        assert not result.ok


class TestCoverage:
    def test_semester_coverage(self):
        coverage = semester_coverage([_a(4), _a(4, semester="2"), _a(2, subject="D")])
        assert coverage[("T1", "M")] == {Semester.FIRST, Semester.SECOND}
        assert coverage[("T1", "D")] == {Semester.FIRST}

    def test_uneven_subjects(self):
        result = uneven_subjects([_a(4), _a(4, semester="2"), _a(2, subject="D", semester="2")])
        assert result == {("T1", "D"): Semester.SECOND}

    def test_discrepancies(self):
        records = [_a(4), _a(3, semester="2"), _a(2, subject="D")]
        found = find_discrepancies(records)
        assert len(found) == 1
        assert found[0].semester1_hours == 4
        assert found[0].semester2_hours == 3
        assert found[0].difference == -1
