"""Excel-Export der Unterrichtsverteilung (openpyxl)."""

from pathlib import Path

from analysis.workload_report import WorkloadReport
from data.repository import SchoolRepository
from engine.workload import STATUS_LABELS, WorkloadStatus
from models.assignment import Semester

from export.helpers import COLORS, today_str


class ExcelExporter:
    """Exportiert Auslastung und Zuweisungen in eine Excel-Datei.

    Blätter: "Auslastung" (eine Zeile je Lehrkraft) sowie "Halbjahr 1" und
    "Halbjahr 2" (alle Zuweisungen, sortiert nach Klasse, Fach, Lehrkraft).
    """

    COL_W = {"short": 8, "name": 28, "num": 10, "status": 24}
    ROW_HEADER_H = 22

    def __init__(self, repository: SchoolRepository, report: WorkloadReport):
        self.repository = repository
        self.report = report

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_auslastung(wb)
        for semester in (Semester.FIRST, Semester.SECOND):
            self._sheet_halbjahr(wb, semester)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header_row(self, ws, headers: list[str], widths: list[int]) -> None:
        from openpyxl.styles import Alignment, Font
        from openpyxl.utils import get_column_letter
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, (text, width) in enumerate(zip(headers, widths), 1):
            cell = ws.cell(row=1, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border
            ws.column_dimensions[get_column_letter(col)].width = width
        ws.row_dimensions[1].height = self.ROW_HEADER_H
        ws.freeze_panes = "A2"

    # ─── Blätter ──────────────────────────────────────────────────────────────

    def _sheet_auslastung(self, wb) -> None:
        ws = wb.create_sheet("Auslastung")
        w = self.COL_W
        self._write_header_row(
            ws,
            ["Kürzel", "Name", "HJ 1", "HJ 2", "Ist", "Max", "%", "Status"],
            [w["short"], w["name"], w["num"], w["num"], w["num"], w["num"],
             w["num"], w["status"]],
        )
        status_colors = {
            WorkloadStatus.OVERLOADED: COLORS["overloaded"],
            WorkloadStatus.UNDERLOADED: COLORS["underloaded"],
            WorkloadStatus.FULLY_ASSIGNED: COLORS["ok"],
        }
        border = self._thin_border()
        for r, row in enumerate(self.report.rows, 2):
            values = [
                row.short_code, row.name, row.semester1_total, row.semester2_total,
                row.current_hours, row.max_hours, round(row.percentage, 1),
                STATUS_LABELS[row.status],
            ]
            for col, val in enumerate(values, 1):
                cell = ws.cell(row=r, column=col, value=val)
                cell.border = border
            ws.cell(row=r, column=8).fill = self._fill(status_colors[row.status])

        footer = len(self.report.rows) + 3
        ws.cell(row=footer, column=1, value=f"Stand: {today_str()}")

    def _sheet_halbjahr(self, wb, semester: Semester) -> None:
        ws = wb.create_sheet(f"Halbjahr {semester.value}")
        self._write_header_row(
            ws,
            ["Klasse", "Fach", "Lehrkraft", "Stunden", "Team", "Automatisch"],
            [10, 22, 10, 10, 14, 12],
        )
        teachers = {t.id: t for t in self.repository.teachers()}
        subjects = {s.id: s for s in self.repository.subjects()}
        classes = {c.id: c for c in self.repository.classes()}

        rows = []
        for a in self.repository.assignments(semester=semester):
            rows.append((
                classes[a.class_id].name if a.class_id in classes else a.class_id,
                subjects[a.subject_id].name if a.subject_id in subjects else a.subject_id,
                teachers[a.teacher_id].short_code if a.teacher_id in teachers else a.teacher_id,
                a.hours_per_week,
                a.team_teaching_id or "",
                "ja" if a.is_optimized else "nein",
            ))
        border = self._thin_border()
        for r, values in enumerate(sorted(rows, key=lambda v: v[:3]), 2):
            for col, val in enumerate(values, 1):
                ws.cell(row=r, column=col, value=val).border = border
