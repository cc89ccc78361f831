"""Export-Modul: Excel (openpyxl) und Terminal-Tabellen für den Stundenplan."""

from export.excel_export import ExcelExporter
from export.tui_renderer import render_class_rows, render_teacher_rows

__all__ = ["ExcelExporter", "render_class_rows", "render_teacher_rows"]
