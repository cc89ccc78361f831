"""Tests für Export-Hilfen, Terminal-Renderer und Excel-Export."""

from pathlib import Path

import pytest

from config.schema import TimeGridConfig, TimetableConfig
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher
from models.timeslot import TimeSlot
from models.timetable_entry import TimetableEntry
from solver.engine import TimetableEngine
from export.helpers import (
    COLORS,
    SUBJECT_PALETTE,
    build_slot_map,
    count_gaps,
    gap_slots,
    get_subject_color,
)
from export.tui_renderer import render_class_rows, render_teacher_rows


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def _make_engine(classes=None) -> TimetableEngine:
    config = TimetableConfig(
        school_name="Export-Schule",
        time_grid=TimeGridConfig(day_names=["Monday", "Tuesday"], periods_per_day=3),
    )
    slots = config.time_grid.slots
    subjects = [
        Subject(id="MA", name="Mathematics", weekly_lectures=2),
        Subject(id="EN", name="English", weekly_lectures=1),
    ]
    teachers = [
        Teacher(id="SMI", name="Mr. Smith", available_slots=frozenset(slots)),
        Teacher(
            id="JOH",
            name="Mrs. Johnson",
            available_slots=frozenset(s for s in slots if s.day != "Tuesday"),
        ),
    ]
    return TimetableEngine(config, subjects, teachers, classes)


def _entry(day: str, period: int, subject: str = "MA") -> TimetableEntry:
    return TimetableEntry(subject_id=subject, teacher_id="SMI", day=day, period=period)


@pytest.fixture(scope="module")
def generated_engine() -> TimetableEngine:
    engine = _make_engine()
    engine.generate()
    return engine


# ─── HILFSFUNKTIONEN ──────────────────────────────────────────────────────────

class TestHelpers:
    def test_count_gaps(self):
        """Lücke zwischen 1. und 3. Stunde → eine Springstunde."""
        entries = [_entry("Monday", 1), _entry("Monday", 3), _entry("Tuesday", 2)]
        assert count_gaps(entries) == 1
        assert gap_slots(entries) == {("Monday", 2)}

    def test_no_gaps(self):
        assert count_gaps([]) == 0
        assert count_gaps([_entry("Monday", 1), _entry("Monday", 2)]) == 0

    def test_build_slot_map_first_wins(self):
        a, b = _entry("Monday", 1, "MA"), _entry("Monday", 1, "EN")
        assert build_slot_map([a, b]) == {("Monday", 1): a}

    def test_subject_color(self):
        subjects = [Subject(id="A", name="A", weekly_lectures=1), Subject(id="B", name="B", weekly_lectures=1)]
        assert get_subject_color("B", subjects) == SUBJECT_PALETTE[1]
        assert get_subject_color("X", subjects) == COLORS["free"]


# ─── TERMINAL-RENDERER ────────────────────────────────────────────────────────

class TestTuiRenderer:
    def test_class_rows_shape(self, generated_engine: TimetableEngine):
        """Eine Zeile pro Stunde, eine Spalte pro Tag plus Stundenspalte."""
        rows = render_class_rows(generated_engine)
        assert len(rows) == 3
        assert all(len(r) == 3 for r in rows)
        assert [r[0] for r in rows] == ["1", "2", "3"]

    def test_class_rows_content(self):
        engine = _make_engine()
        engine.add_entry("MA", "SMI", "Tuesday", 2)
        rows = render_class_rows(engine)
        assert rows[1][2] == "Mathematics\nSMI"
        assert rows[0][1] == "—"

    def test_class_rows_multi_class(self):
        """Nur Einträge der gewünschten Klasse erscheinen."""
        engine = _make_engine([SchoolClass(id="1a", name="1a"), SchoolClass(id="1b", name="1b")])
        engine.add_entry("MA", "SMI", "Monday", 1, class_id="1a")
        assert render_class_rows(engine, "1a")[0][1] == "Mathematics\nSMI"
        assert render_class_rows(engine, "1b")[0][1] == "—"

    def test_teacher_rows_marks_unavailable_and_gaps(self):
        engine = _make_engine()
        engine.add_entry("EN", "JOH", "Monday", 1)
        engine.add_entry("MA", "JOH", "Monday", 3)
        rows = render_teacher_rows(engine, "JOH")
        assert rows[0][1] == "EN"
        assert rows[1][1] == "↕ Springstunde"
        assert rows[0][2] == "×"   # Dienstag gesperrt


# ─── EXCEL-EXPORT ─────────────────────────────────────────────────────────────

class TestExcelExport:
    def test_export_creates_sheets(self, generated_engine: TimetableEngine, tmp_path: Path):
        """Übersicht, Plan, Lehrer-Blätter und Validierung werden angelegt."""
        from openpyxl import load_workbook
        from export.excel_export import ExcelExporter

        out = tmp_path / "export" / "plan.xlsx"
        ExcelExporter(generated_engine).export(out)
        assert out.exists()

        wb = load_workbook(out)
        assert wb.sheetnames == [
            "Übersicht", "Stundenplan", "Lehrer JOH", "Lehrer SMI", "Validierung",
        ]
        assert wb["Übersicht"].cell(row=1, column=1).value == "Export-Schule"
        assert wb["Stundenplan"].cell(row=1, column=2).value == "Monday"

    def test_validation_sheet_lists_issues(self, tmp_path: Path):
        """Jeder aktuelle Befund erscheint als Zeile im Validierungs-Blatt."""
        from openpyxl import load_workbook
        from export.excel_export import ExcelExporter

        engine = _make_engine()
        engine.add_entry("MA", "SMI", "Monday", 1)
        out = tmp_path / "plan.xlsx"
        ExcelExporter(engine).export(out)

        ws = load_workbook(out)["Validierung"]
        rules = [ws.cell(row=r, column=2).value for r in range(2, 2 + len(engine.issues))]
        assert rules == [i.rule for i in engine.issues]
        assert ws.cell(row=2 + len(engine.issues), column=2).value is None

    def test_one_sheet_per_class(self, tmp_path: Path):
        from openpyxl import load_workbook
        from export.excel_export import ExcelExporter

        engine = _make_engine([SchoolClass(id="1a", name="1a"), SchoolClass(id="1b", name="1b")])
        engine.generate_all()
        out = tmp_path / "plan.xlsx"
        ExcelExporter(engine).export(out)
        names = load_workbook(out).sheetnames
        assert "Klasse 1a" in names and "Klasse 1b" in names
