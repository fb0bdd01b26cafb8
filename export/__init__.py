"""Export-Modul: Excel (openpyxl) für die Unterrichtsverteilung."""

from export.excel_export import ExcelExporter

__all__ = ["ExcelExporter"]
