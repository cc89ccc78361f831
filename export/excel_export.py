"""Excel-Export für den Stundenplan (openpyxl)."""

from pathlib import Path
from typing import Optional

from solver.engine import TimetableEngine
from models.teacher import Teacher

from export.helpers import (
    COLORS, build_slot_map, count_gaps, gap_slots, get_subject_color,
    subject_label, today_str,
)


class ExcelExporter:
    """Exportiert den Zustand einer TimetableEngine in eine Excel-Datei.

    Sheets: Übersicht, ein Blatt pro Klassen-Bereich, ein Blatt pro
    Lehrkraft und "Validierung" mit allen aktuellen Befunden.
    """

    # Spaltenbreiten (Excel-Einheiten)
    COL_STD_W = 6
    COL_DAY_W = 22

    # Zeilenhöhen (Punkte)
    ROW_HEADER_H = 22
    ROW_LESSON_H = 36

    def __init__(self, engine: TimetableEngine):
        self.engine = engine
        self.config = engine.config
        self.tg = engine.config.time_grid
        self.subjects = engine.subjects

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei mit allen Sheets."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)

        for class_id in self.engine.class_scopes:
            self._sheet_klasse(wb, class_id)

        for teacher in sorted(self.engine.teachers, key=lambda t: t.id):
            self._sheet_lehrer(wb, teacher)

        self._sheet_validierung(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _center_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="center", vertical="center")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header(self, ws, headers: list[str], row: int = 1) -> None:
        from openpyxl.styles import Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = self._center_align(wrap=False)
            cell.border = border
        ws.row_dimensions[row].height = self.ROW_HEADER_H

    def _setup_grid_sheet(self, ws) -> None:
        from openpyxl.utils import get_column_letter
        ws.column_dimensions["A"].width = self.COL_STD_W
        for col in range(2, 2 + len(self.tg.day_names)):
            ws.column_dimensions[get_column_letter(col)].width = self.COL_DAY_W
        self._write_header(ws, ["Std."] + list(self.tg.day_names))

    # ─── Zeitraster-Tabelle ───────────────────────────────────────────────────

    def _write_schedule_table(self, ws, entries, mode: str) -> int:
        """Schreibt das Zeitraster; gibt die nächste freie Excel-Zeile zurück.

        mode: 'class' | 'teacher'
        """
        from openpyxl.styles import Font

        slot_map = build_slot_map(entries)
        gaps = gap_slots(entries) if mode == "teacher" else set()
        border = self._thin_border()
        excel_row = 2   # Zeile 1 = Header

        for period in self.tg.periods:
            c = ws.cell(row=excel_row, column=1, value=period)
            c.alignment = self._center_align(wrap=False)
            c.border = border
            c.font = Font(bold=True, size=9)

            for day_idx, day in enumerate(self.tg.day_names):
                entry = slot_map.get((day, period))
                if entry is None:
                    content = ""
                    color = COLORS["gap"] if (day, period) in gaps else COLORS["free"]
                elif mode == "teacher":
                    content = entry.subject_id
                    if entry.class_id is not None:
                        content += f"\n{entry.class_id}"
                    color = get_subject_color(entry.subject_id, self.subjects)
                else:
                    content = f"{subject_label(entry.subject_id, self.subjects)}\n{entry.teacher_id}"
                    color = get_subject_color(entry.subject_id, self.subjects)

                c = ws.cell(row=excel_row, column=day_idx + 2, value=content)
                c.fill = self._fill(color)
                c.alignment = self._center_align()
                c.border = border
                c.font = Font(size=8)
            ws.row_dimensions[excel_row].height = self.ROW_LESSON_H
            excel_row += 1

        return excel_row

    # ─── Sheet: Übersicht ─────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Übersicht", index=0)

        ws.cell(row=1, column=1, value=self.config.school_name).font = Font(bold=True, size=14)
        ws.cell(row=2, column=1, value=f"Erstellt: {today_str()}")
        ws.cell(row=2, column=3, value=f"Einträge: {len(self.engine.entries)}")
        ws.cell(row=2, column=4, value=f"Fehler: {len(self.engine.errors)}")

        row = 4
        self._write_header(ws, ["Kürzel", "Name", "Verfügbar", "Ist", "Springstd."], row=row)
        border = self._thin_border()
        row += 1
        for teacher in sorted(self.engine.teachers, key=lambda t: t.id):
            entries = self.engine.entries_for_teacher(teacher.id)
            values = [
                teacher.id, teacher.name, teacher.available_slot_count,
                len(entries), count_gaps(entries),
            ]
            for col, value in enumerate(values, 1):
                ws.cell(row=row, column=col, value=value).border = border
            row += 1

        ws.column_dimensions["A"].width = 10
        ws.column_dimensions["B"].width = 28
        for col in "CDE":
            ws.column_dimensions[col].width = 12

    # ─── Sheet: Klasse ────────────────────────────────────────────────────────

    def _sheet_klasse(self, wb, class_id: Optional[str]) -> None:
        title = f"Klasse {class_id}" if class_id is not None else "Stundenplan"
        ws = wb.create_sheet(title=title[:31])
        self._setup_grid_sheet(ws)
        self._write_schedule_table(ws, self.engine.entries_for_class(class_id), mode="class")

    # ─── Sheet: Lehrer ────────────────────────────────────────────────────────

    def _sheet_lehrer(self, wb, teacher: Teacher) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title=f"Lehrer {teacher.id}"[:31])
        self._setup_grid_sheet(ws)
        entries = self.engine.entries_for_teacher(teacher.id)
        last_row = self._write_schedule_table(ws, entries, mode="teacher") + 1

        ws.cell(row=last_row, column=1, value="Ist:").font = Font(bold=True)
        ws.cell(row=last_row, column=2, value=f"{len(entries)}h")
        ws.cell(row=last_row, column=3, value="Springstunden:").font = Font(bold=True)
        ws.cell(row=last_row, column=4, value=str(count_gaps(entries)))

    # ─── Sheet: Validierung ───────────────────────────────────────────────────

    def _sheet_validierung(self, wb) -> None:
        ws = wb.create_sheet(title="Validierung")
        self._write_header(ws, ["Schwere", "Regel", "Meldung"])
        border = self._thin_border()

        for row, issue in enumerate(self.engine.issues, 2):
            fill = self._fill(COLORS["error"] if issue.is_error else COLORS["warning"])
            values = [issue.severity, issue.rule, issue.message]
            for col, value in enumerate(values, 1):
                c = ws.cell(row=row, column=col, value=value)
                c.border = border
                c.fill = fill

        ws.column_dimensions["A"].width = 10
        ws.column_dimensions["B"].width = 26
        ws.column_dimensions["C"].width = 90
