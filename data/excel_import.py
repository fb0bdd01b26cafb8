"""Excel-Import und Vorlagen-Generator für Zuweisungen.

Vorlage:   Leere Excel-Datei mit Kopfzeilen und Beispielzeilen.
Import:    Excel-Blatt → Zeilen als Strings → dieselben Zeilen-Transformer wie
           beim CSV-Import (data.csv_import).
"""

from pathlib import Path
from typing import Optional

from data.csv_import import AssignmentImportError, Row


# Blattname → (Kopfzeile, Beispielzeilen)
TEMPLATE_SHEETS: dict[str, tuple[list[str], list[list]]] = {
    "Zuweisungen": (
        ["Lehrer", "Fach", "Klasse", "Gesamtstunden", "Verteilung"],
        [["MÜL", "M", "07A", 4, "both"],
         ["MÜL", "PH", "08B", 2, "1"],
         ["SCH", "D", "05C", 4, "3-1"]],
    ),
    "Lehrkräfte": (
        ["Name", "Kürzel", "Qualifikationen (;-getrennt)", "Deputat"],
        [["Müller, Hans", "MÜL", "M;PH", 25.5]],
    ),
    "Fächer": (
        ["Fachname", "Kürzel", "Kategorie"],
        [["Mathematik", "M", "Hauptfach"]],
    ),
    "Klassen": (
        ["Klasse", "Schülerzahl"],
        [["07A", 28]],
    ),
}


def _cell_text(value) -> str:
    """Zellwert → getrimmter String; 4.0 wird zu "4"."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def read_excel_rows(path: Path, sheet_name: Optional[str] = None,
                    has_headers: bool = True) -> tuple[Optional[Row], list[Row]]:
    """Liest ein Tabellenblatt als (Kopfzeile, Datenzeilen) aus Strings.

    Ohne sheet_name wird das erste Blatt gelesen. Der Blattname wird ohne
    Beachtung der Groß-/Kleinschreibung gesucht.
    """
    try:
        import openpyxl
    except ImportError:
        raise ImportError("openpyxl nicht installiert. Bitte: pip install openpyxl")

    path = Path(path)
    try:
        wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
    except FileNotFoundError:
        raise AssignmentImportError(f"Datei nicht gefunden: {path}")
    except Exception as e:
        raise AssignmentImportError(f"Fehler beim Öffnen der Excel-Datei: {e}")

    try:
        if sheet_name is None:
            sheet = wb.worksheets[0]
        else:
            match = next((sn for sn in wb.sheetnames
                          if sn.strip().lower() == sheet_name.strip().lower()), None)
            if match is None:
                raise AssignmentImportError(
                    f"Tabellenblatt '{sheet_name}' nicht gefunden. "
                    f"Vorhanden: {', '.join(wb.sheetnames)}"
                )
            sheet = wb[match]
        rows = [[_cell_text(v) for v in row] for row in sheet.iter_rows(values_only=True)]
    finally:
        wb.close()

    # Leere Zellen am Zeilenende abschneiden (read_only liefert volle Breite)
    rows = [row[:max((i + 1 for i, v in enumerate(row) if v), default=0)] for row in rows]
    headers = None
    if has_headers and rows:
        headers, rows = rows[0], rows[1:]
        # Fehlende optionale Spalten wieder auffüllen
        rows = [row + [""] * (len(headers) - len(row)) for row in rows]
    return headers, rows


def generate_template(path: Path) -> None:
    """Erzeugt eine Excel-Vorlage mit einem Blatt je Importformat."""
    try:
        import openpyxl
        from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
        from openpyxl.utils import get_column_letter
    except ImportError:
        raise ImportError("openpyxl nicht installiert. Bitte: pip install openpyxl")

    hdr_font = Font(bold=True, color="FFFFFF", size=11)
    hdr_fill = PatternFill("solid", fgColor="2E6DA4")
    ex_font = Font(italic=True, color="888888")
    ex_fill = PatternFill("solid", fgColor="F5F5F5")
    center = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="BBBBBB")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)

    wb = openpyxl.Workbook()
    wb.remove(wb.active)

    for title, (headers, examples) in TEMPLATE_SHEETS.items():
        ws = wb.create_sheet(title)
        for col, h in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=h)
            cell.font = hdr_font
            cell.fill = hdr_fill
            cell.alignment = center
            cell.border = border
            ws.column_dimensions[get_column_letter(col)].width = max(12, len(h) + 4)
        for r, example in enumerate(examples, 2):
            for col, val in enumerate(example, 1):
                cell = ws.cell(row=r, column=col, value=val)
                cell.font = ex_font
                cell.fill = ex_fill
                cell.border = border
        ws.freeze_panes = "A2"

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(path))
