"""Auslastungsbericht: Stunden je Lehrkraft und Halbjahr plus Konflikt-Hinweise."""

from collections import defaultdict

from pydantic import BaseModel

from config.schema import EngineConfig
from data.repository import SchoolRepository
from engine.backfill import find_discrepancies, find_missing_semester2, uneven_subjects
from engine.conflicts import ConflictDetector
from engine.normalizer import find_duplicates
from engine.workload import STATUS_LABELS, WorkloadStatus, compute_all_workloads


class TeacherWorkloadRow(BaseModel):
    """Eine Zeile des Berichts (eine Lehrkraft)."""

    teacher_id: str
    short_code: str
    name: str
    semester1_total: float
    semester2_total: float
    current_hours: float
    max_hours: float
    percentage: float
    status: WorkloadStatus
    errors: list[str] = []
    warnings: list[str] = []


class WorkloadReport(BaseModel):
    """Bericht über alle aktiven Lehrkräfte."""

    school_name: str
    rows: list[TeacherWorkloadRow]
    duplicate_slots: int = 0
    missing_semester2: int = 0
    discrepancies: int = 0
    uneven_pairs: int = 0

    @property
    def overloaded(self) -> list[TeacherWorkloadRow]:
        return [r for r in self.rows if r.status == WorkloadStatus.OVERLOADED]

    def print_rich(self) -> None:
        """Gibt den Bericht formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title=f"Auslastung – {self.school_name}", box=box.ROUNDED)
        table.add_column("Kürzel", style="bold")
        table.add_column("Name")
        table.add_column("HJ 1", justify="right")
        table.add_column("HJ 2", justify="right")
        table.add_column("Ist", justify="right")
        table.add_column("Max", justify="right")
        table.add_column("%", justify="right")
        table.add_column("Status")

        colors = {
            WorkloadStatus.OVERLOADED: "red",
            WorkloadStatus.UNDERLOADED: "yellow",
            WorkloadStatus.FULLY_ASSIGNED: "green",
        }
        for r in self.rows:
            color = colors[r.status]
            table.add_row(
                r.short_code, r.name,
                f"{r.semester1_total:g}", f"{r.semester2_total:g}",
                f"{r.current_hours:g}", f"{r.max_hours:g}",
                f"[{color}]{r.percentage:.0f}[/{color}]",
                f"[{color}]{STATUS_LABELS[r.status]}[/{color}]",
            )
        console.print(table)

        lines = []
        for r in self.rows:
            for e in r.errors:
                lines.append(f"  [red]• {r.short_code}: {e}[/red]")
            for w in r.warnings:
                lines.append(f"  [yellow]• {r.short_code}: {w}[/yellow]")
        if self.duplicate_slots:
            lines.append(f"  [dim]{self.duplicate_slots} Slots mit doppelten Datensätzen "
                         f"(zählen einfach)[/dim]")
        if self.missing_semester2:
            lines.append(f"  [yellow]• {self.missing_semester2} Zuweisungen ohne "
                         f"Halbjahr-2-Gegenstück (siehe 'backfill')[/yellow]")
        if self.discrepancies:
            lines.append(f"  [yellow]• {self.discrepancies} Slots mit abweichenden "
                         f"Stunden zwischen den Halbjahren[/yellow]")
        if self.uneven_pairs:
            lines.append(f"  [dim]{self.uneven_pairs} Lehrkraft/Fach-Paare nur in "
                         f"einem Halbjahr[/dim]")
        if not lines:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")
        console.print(Panel("\n".join(lines), title="Hinweise", border_style="cyan"))


def build_workload_report(repository: SchoolRepository,
                          config: EngineConfig) -> WorkloadReport:
    """Liest den aktuellen Stand und berechnet Auslastung und Hinweise."""
    teachers = repository.teachers(active_only=True)
    subjects = repository.subjects()
    assignments = repository.assignments()

    workloads = compute_all_workloads(teachers, assignments)
    detector = ConflictDetector(config.workload, config.conflicts)
    messages: dict[str, dict[str, set[str]]] = defaultdict(lambda: defaultdict(set))
    for assignment, result in detector.check_all(teachers, subjects, assignments):
        level = "errors" if result.blocks_creation else "warnings"
        messages[assignment.teacher_id][level].add(result.message)

    rows = []
    for t in sorted(teachers, key=lambda t: t.short_code):
        w = workloads[t.id]
        rows.append(TeacherWorkloadRow(
            teacher_id=t.id,
            short_code=t.short_code,
            name=t.name,
            semester1_total=w.semester1_total,
            semester2_total=w.semester2_total,
            current_hours=w.current_hours,
            max_hours=w.max_hours,
            percentage=w.percentage,
            status=w.status(config.workload),
            errors=sorted(messages[t.id]["errors"]),
            warnings=sorted(messages[t.id]["warnings"]),
        ))

    return WorkloadReport(
        school_name=config.school_name,
        rows=rows,
        duplicate_slots=len(find_duplicates(assignments)),
        missing_semester2=len(find_missing_semester2(assignments)),
        discrepancies=len(find_discrepancies(assignments)),
        uneven_pairs=len(uneven_subjects(assignments)),
    )
