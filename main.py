"""Unterrichtsverteilung: Haupt-CLI.

Verwendung:
  python main.py init                          Konfiguration + Datendatei anlegen
  python main.py config show                   Konfiguration anzeigen
  python main.py template                      Excel-Import-Vorlage erzeugen
  python main.py import <datei> --kind ...     CSV/Excel importieren
  python main.py workload                      Auslastung je Lehrkraft
  python main.py check <LK> <Fach> <Std>       Neue Zuweisung vorab prüfen
  python main.py conflicts                     Konflikte gespeicherter Zuweisungen
  python main.py backfill [--dry-run]          Fehlende Halbjahr-2-Zuweisungen anlegen
  python main.py coverage                      Halbjahres-Abgleich
  python main.py matrix show <Klasse>          Klassen-Matrix anzeigen
  python main.py matrix set <Klasse> ...       Zellen der Klassen-Matrix ändern
  python main.py export <datei.xlsx>           Excel-Export
  python main.py deactivate <LK>               Lehrkraft deaktivieren
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

IMPORT_KINDS = ["assignments", "distribution", "teachers", "subjects", "classes"]


def _load_context(config_path):
    """Lädt Konfiguration (oder Standard) und die Datenablage."""
    from config.manager import ConfigManager
    from data.repository import SchoolRepository

    mgr = ConfigManager(Path(config_path) if config_path else None)
    try:
        config = mgr.load_or_default()
        repo = SchoolRepository(Path(config.data_path))
    except ValueError as e:
        console.print(f"[red bold]{e}[/red bold]")
        sys.exit(1)
    return config, repo


def _teacher_or_abort(repo, short_code: str):
    teacher = repo.find_teacher(short_code)
    if teacher is None:
        console.print(f"[red]Lehrkraft '{short_code}' nicht gefunden.[/red]")
        sys.exit(1)
    return teacher


# ─── INIT ─────────────────────────────────────────────────────────────────────

@click.command("init")
@click.option("--school-name", default=None, help="Name der Schule.")
@click.option("--with-subjects/--no-subjects", default=True,
              help="Fächerkatalog mit Stundentafel anlegen.")
@click.pass_context
def cmd_init(ctx, school_name, with_subjects: bool):
    """Legt Konfiguration und leere Datendatei an."""
    from config.defaults import SUBJECT_METADATA, default_engine_config
    from config.manager import ConfigManager
    from data.repository import RepositoryError, SchoolRepository
    from models.subject import Subject

    mgr = ConfigManager(Path(ctx.obj["config_path"]) if ctx.obj["config_path"] else None)
    if not mgr.first_run_check():
        console.print("[yellow]Eine Konfiguration existiert bereits.[/yellow]")
        if not click.confirm("Überschreiben?", default=False):
            return

    config = default_engine_config()
    if school_name:
        config = config.model_copy(update={"school_name": school_name})
    mgr.save(config)

    repo = SchoolRepository(Path(config.data_path))
    if with_subjects:
        added = 0
        with repo.transaction():
            for i, (name, meta) in enumerate(SUBJECT_METADATA.items(), 1):
                try:
                    repo.add_subject(Subject(
                        id=f"S{i:02d}",
                        name=name,
                        short_code=meta["short"],
                        category=meta["category"],
                        hours_per_grade=meta["hours"],
                    ))
                    added += 1
                except RepositoryError:
                    continue
        console.print(f"[green]✓[/green] {added} Fächer angelegt")
    repo.data.save_json(Path(config.data_path))
    console.print(f"[green]✓[/green] Datendatei: {config.data_path}")
    console.print(f"\n[dim]{repo.data.summary()}[/dim]")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
@click.pass_context
def config_show(ctx):
    """Zeigt die aktuelle Konfiguration an."""
    config, _ = _load_context(ctx.obj["config_path"])

    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  Daten: {config.data_path}",
        title="Konfiguration",
        border_style="cyan",
    ))
    wc = config.workload
    table = Table(title="Auslastung & Konflikte", box=box.ROUNDED)
    table.add_column("Einstellung")
    table.add_column("Wert", justify="right")
    table.add_row("Standard-Deputat", f"{wc.default_max_hours:g}h")
    table.add_row("Warnschwelle", f"{wc.high_load_fraction:.0%}")
    table.add_row("Unterauslastung unter", f"{wc.underload_fraction:.0%}")
    table.add_row("Qualifikationsabgleich", config.conflicts.qualification_match.value)
    table.add_row("Matrix atomar speichern",
                  "ja" if config.matrix.atomic_save else "nein")
    console.print(table)

    ic = config.imports
    console.print(
        f"\n[bold]Import:[/bold] Trennzeichen "
        f"{repr(ic.delimiter) if ic.delimiter else 'automatisch'} | "
        f"Kopfzeile: {'ja' if ic.has_headers else 'nein'} | "
        f"Plausibel bis {ic.max_plausible_hours:g}h"
    )


# ─── TEMPLATE ─────────────────────────────────────────────────────────────────

@click.command("template")
@click.option("--output", "-o", default="output/import_vorlage.xlsx",
              help="Ausgabepfad der Vorlage.")
def cmd_template(output: str):
    """Erzeugt eine Excel-Vorlage mit allen Importformaten."""
    from data.excel_import import generate_template

    out_path = Path(output)
    generate_template(out_path)
    console.print(f"[green]✓[/green] Vorlage gespeichert: {out_path}")
    console.print(
        "[dim]Import z.B. mit: python main.py import "
        f"{out_path} --kind distribution --sheet Zuweisungen[/dim]"
    )


# ─── IMPORT ───────────────────────────────────────────────────────────────────

@click.command("import")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.option("--kind", type=click.Choice(IMPORT_KINDS), default="assignments",
              show_default=True, help="Art der Daten.")
@click.option("--sheet", default=None, help="Tabellenblatt (nur Excel).")
@click.pass_context
def cmd_import(ctx, datei: Path, kind: str, sheet):
    """Importiert Zuweisungen oder Stammdaten aus CSV oder Excel."""
    from functools import partial

    from data import csv_import as ci
    from data.excel_import import read_excel_rows

    config, repo = _load_context(ctx.obj["config_path"])
    console.print(f"[bold]Importiere:[/bold] {datei} ({kind})")

    try:
        if datei.suffix.lower() in (".xlsx", ".xlsm"):
            headers, rows = read_excel_rows(datei, sheet, config.imports.has_headers)
        else:
            headers, rows = ci.read_csv_file(datei, config.imports)
    except ci.AssignmentImportError as e:
        console.print(f"[red bold]Import fehlgeschlagen:[/red bold]\n{e}")
        sys.exit(1)

    if kind in ("assignments", "distribution"):
        transformer = (ci.transform_assignment_row if kind == "assignments"
                       else ci.transform_distribution_row)
        result = ci.AssignmentImporter(repo, config.imports).import_rows(
            headers, rows, transformer)
    else:
        transformer = {
            "teachers": partial(ci.transform_teacher_row,
                                default_max_hours=config.workload.default_max_hours),
            "subjects": ci.transform_subject_row,
            "classes": ci.transform_class_row,
        }[kind]
        result = ci.import_master_data(repo, headers, rows, transformer)

    result.print_rich("Import")
    if result.errored:
        sys.exit(1)


# ─── AUSLASTUNG / KONFLIKTE ───────────────────────────────────────────────────

@click.command("workload")
@click.pass_context
def cmd_workload(ctx):
    """Zeigt die Auslastung aller aktiven Lehrkräfte."""
    from analysis.workload_report import build_workload_report

    config, repo = _load_context(ctx.obj["config_path"])
    build_workload_report(repo, config).print_rich()


@click.command("check")
@click.argument("teacher")
@click.argument("subject")
@click.argument("hours", type=float)
@click.pass_context
def cmd_check(ctx, teacher: str, subject: str, hours: float):
    """Prüft eine geplante Zuweisung (Kürzel Lehrkraft, Kürzel Fach, Stunden)."""
    from engine.conflicts import ConflictDetector, ConflictStatus

    config, repo = _load_context(ctx.obj["config_path"])
    t = _teacher_or_abort(repo, teacher)
    s = repo.find_subject(subject)
    if s is None:
        console.print(f"[red]Fach '{subject}' nicht gefunden.[/red]")
        sys.exit(1)

    detector = ConflictDetector(config.workload, config.conflicts)
    result = detector.check_proposed(t, s, hours, repo.assignments(teacher_id=t.id))
    color = {ConflictStatus.OK: "green", ConflictStatus.WARNING: "yellow",
             ConflictStatus.ERROR: "red"}[result.status]
    console.print(f"[{color} bold]{result.status.value.upper()}[/{color} bold]  "
                  f"{result.message}")
    if result.blocks_creation:
        sys.exit(2)


@click.command("conflicts")
@click.pass_context
def cmd_conflicts(ctx):
    """Listet Warnungen und Fehler aller gespeicherten Zuweisungen."""
    from engine.conflicts import ConflictDetector

    config, repo = _load_context(ctx.obj["config_path"])
    detector = ConflictDetector(config.workload, config.conflicts)
    findings = detector.check_all(repo.teachers(active_only=True), repo.subjects(),
                                  repo.assignments())
    if not findings:
        console.print("[green]Keine Konflikte gefunden.[/green]")
        return

    table = Table(title="Konflikte", box=box.ROUNDED)
    table.add_column("Status")
    table.add_column("Klasse")
    table.add_column("HJ", justify="center")
    table.add_column("Meldung")
    for a, result in findings:
        cls = repo.get_class(a.class_id)
        color = "red" if result.blocks_creation else "yellow"
        table.add_row(f"[{color}]{result.status.value}[/{color}]",
                      cls.name if cls else a.class_id,
                      a.semester.value, result.message)
    console.print(table)


# ─── HALBJAHRES-ABGLEICH ──────────────────────────────────────────────────────

@click.command("backfill")
@click.option("--dry-run", is_flag=True, default=False,
              help="Nur anzeigen, nichts speichern.")
@click.pass_context
def cmd_backfill(ctx, dry_run: bool):
    """Legt fehlende Halbjahr-2-Zuweisungen als Kopie aus Halbjahr 1 an."""
    from engine.backfill import apply_backfill

    _, repo = _load_context(ctx.obj["config_path"])
    proposals, result = apply_backfill(repo, dry_run=dry_run)
    if not proposals:
        console.print("[green]Alle Halbjahr-1-Zuweisungen haben ein Gegenstück.[/green]")
        return

    table = Table(title="Halbjahr 2 – Nachtrag", box=box.SIMPLE)
    table.add_column("Lehrkraft")
    table.add_column("Fach")
    table.add_column("Klasse")
    table.add_column("Std.", justify="right")
    for p in proposals:
        t, s, c = (repo.get_teacher(p.teacher_id), repo.get_subject(p.subject_id),
                   repo.get_class(p.class_id))
        table.add_row(t.short_code if t else p.teacher_id,
                      s.short_code if s else p.subject_id,
                      c.name if c else p.class_id,
                      f"{p.hours_per_week:g}")
    console.print(table)
    if dry_run:
        console.print(f"[dim]{len(proposals)} Vorschläge (dry-run, nichts gespeichert)[/dim]")
    else:
        result.print_rich("Nachtrag")


@click.command("coverage")
@click.pass_context
def cmd_coverage(ctx):
    """Zeigt Fächer, die nur in einem Halbjahr unterrichtet werden, und Stundenabweichungen."""
    from engine.backfill import find_discrepancies, uneven_subjects

    _, repo = _load_context(ctx.obj["config_path"])
    assignments = repo.assignments()

    uneven = uneven_subjects(assignments)
    table = Table(title="Nur in einem Halbjahr", box=box.ROUNDED)
    table.add_column("Lehrkraft")
    table.add_column("Fach")
    table.add_column("Halbjahr", justify="center")
    for (teacher_id, subject_id), semester in sorted(uneven.items()):
        t, s = repo.get_teacher(teacher_id), repo.get_subject(subject_id)
        table.add_row(t.short_code if t else teacher_id,
                      s.name if s else subject_id, semester.value)
    console.print(table)

    discrepancies = find_discrepancies(assignments)
    table2 = Table(title="Abweichende Stunden HJ 1 / HJ 2", box=box.ROUNDED)
    table2.add_column("Lehrkraft")
    table2.add_column("Fach")
    table2.add_column("Klasse")
    table2.add_column("HJ 1", justify="right")
    table2.add_column("HJ 2", justify="right")
    for d in discrepancies:
        t, s, c = (repo.get_teacher(d.teacher_id), repo.get_subject(d.subject_id),
                   repo.get_class(d.class_id))
        table2.add_row(t.short_code if t else d.teacher_id,
                       s.short_code if s else d.subject_id,
                       c.name if c else d.class_id,
                       f"{d.semester1_hours:g}", f"{d.semester2_hours:g}")
    console.print(table2)


# ─── MATRIX ───────────────────────────────────────────────────────────────────

@click.group("matrix")
def cmd_matrix():
    """Zuweisungen einer Klasse als Matrix (Lehrkraft × Fach) bearbeiten."""


def _class_or_abort(repo, name: str):
    school_class = repo.find_class(name)
    if school_class is None:
        console.print(f"[red]Klasse '{name}' nicht gefunden.[/red]")
        sys.exit(1)
    return school_class


@cmd_matrix.command("show")
@click.argument("klasse")
@click.option("--semester", type=click.Choice(["1", "2"]), default="1", show_default=True)
@click.pass_context
def matrix_show(ctx, klasse: str, semester: str):
    """Zeigt die Matrix einer Klasse für ein Halbjahr."""
    from engine.matrix import MatrixEditor

    config, repo = _load_context(ctx.obj["config_path"])
    school_class = _class_or_abort(repo, klasse)
    editor = MatrixEditor(repo, school_class.id, atomic=config.matrix.atomic_save)
    matrix = editor.view(semester)

    table = Table(title=f"{school_class.name} – Halbjahr {semester}", box=box.ROUNDED)
    table.add_column("Lehrkraft")
    table.add_column("Fach")
    table.add_column("Std.", justify="right")
    for (teacher_id, subject_id), hours in sorted(matrix.items()):
        t, s = repo.get_teacher(teacher_id), repo.get_subject(subject_id)
        table.add_row(t.short_code if t else teacher_id,
                      s.name if s else subject_id, f"{hours:g}")
    console.print(table)


@cmd_matrix.command("set")
@click.argument("klasse")
@click.argument("cells", nargs=-1, required=True)
@click.option("--semester", type=click.Choice(["1", "2"]), default="1", show_default=True)
@click.option("--partial", is_flag=True, default=False,
              help="Teilweise speichern statt alles-oder-nichts.")
@click.pass_context
def matrix_set(ctx, klasse: str, cells: tuple, semester: str, partial: bool):
    """Setzt Zellen im Format LK:FACH=STUNDEN (0 = austragen)."""
    from engine.matrix import MatrixEditor, MatrixSaveError

    config, repo = _load_context(ctx.obj["config_path"])
    school_class = _class_or_abort(repo, klasse)
    editor = MatrixEditor(repo, school_class.id,
                          atomic=config.matrix.atomic_save and not partial)

    for cell in cells:
        try:
            ref, raw_hours = cell.split("=", 1)
            teacher_short, subject_short = ref.split(":", 1)
            hours = float(raw_hours.replace(",", "."))
        except ValueError:
            console.print(f"[red]Ungültige Zelle '{cell}' (erwartet LK:FACH=STUNDEN)[/red]")
            sys.exit(1)
        teacher = _teacher_or_abort(repo, teacher_short)
        subject = repo.find_subject(subject_short)
        if subject is None:
            console.print(f"[red]Fach '{subject_short}' nicht gefunden.[/red]")
            sys.exit(1)
        try:
            editor.set_cell(semester, teacher.id, subject.id, hours)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)

    try:
        result = editor.save()
    except MatrixSaveError as e:
        console.print(f"[red bold]{e}[/red bold]")
        e.result.print_rich("Matrix")
        sys.exit(1)
    result.print_rich("Matrix")


# ─── EXPORT / STAMMDATEN ──────────────────────────────────────────────────────

@click.command("export")
@click.argument("output", type=click.Path(path_type=Path))
@click.pass_context
def cmd_export(ctx, output: Path):
    """Exportiert Auslastung und Zuweisungen als Excel-Datei."""
    from analysis.workload_report import build_workload_report
    from export.excel_export import ExcelExporter

    config, repo = _load_context(ctx.obj["config_path"])
    report = build_workload_report(repo, config)
    ExcelExporter(repo, report).export(output)
    console.print(f"[green]✓[/green] Excel gespeichert: {output}")


@click.command("deactivate")
@click.argument("teacher")
@click.pass_context
def cmd_deactivate(ctx, teacher: str):
    """Deaktiviert eine Lehrkraft (Zuweisungen bleiben erhalten)."""
    _, repo = _load_context(ctx.obj["config_path"])
    t = _teacher_or_abort(repo, teacher)
    repo.deactivate_teacher(t.id)
    console.print(f"[green]✓[/green] {t.name} ({t.short_code}) deaktiviert")


# ─── CLI-Gruppe ───────────────────────────────────────────────────────────────

@click.group()
@click.option("--config", "config_path", default=None,
              help="Pfad zur Konfigurationsdatei (Standard: config/engine_config.yaml).")
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Ausführliche Log-Ausgabe.")
@click.pass_context
def cli(ctx, config_path, verbose: bool):
    """Unterrichtsverteilung: Zuweisungen, Auslastung und Halbjahres-Abgleich.

    Starten Sie mit: python main.py init
    """
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


cli.add_command(cmd_init)
cli.add_command(cmd_config)
cli.add_command(cmd_template)
cli.add_command(cmd_import)
cli.add_command(cmd_workload)
cli.add_command(cmd_check)
cli.add_command(cmd_conflicts)
cli.add_command(cmd_backfill)
cli.add_command(cmd_coverage)
cli.add_command(cmd_matrix)
cli.add_command(cmd_export)
cli.add_command(cmd_deactivate)


if __name__ == "__main__":
    cli()
