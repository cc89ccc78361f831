"""Gemeinsamer Renderer für Terminal-Stundenplan-Anzeige.

Liefert reine Tabellenzeilen; die CLI gibt sie über Rich aus.
"""

from typing import TYPE_CHECKING, Optional

from export.helpers import build_slot_map, gap_slots, subject_label

if TYPE_CHECKING:
    from solver.engine import TimetableEngine


def render_class_rows(
    engine: "TimetableEngine", class_id: Optional[str] = None
) -> list[list[str]]:
    """Gibt Tabellenzeilen für den Stundenplan eines Klassen-Bereichs zurück.

    Jede Zeile: [Stunde, Tag1, Tag2, ...]; freie Slots als '—'.
    """
    tg = engine.config.time_grid
    subjects = engine.subjects
    slot_map = build_slot_map(engine.entries_for_class(class_id))
    rows: list[list[str]] = []

    for period in tg.periods:
        cells = [str(period)]
        for day in tg.day_names:
            entry = slot_map.get((day, period))
            if entry is None:
                cells.append("—")
            else:
                cells.append(f"{subject_label(entry.subject_id, subjects)}\n{entry.teacher_id}")
        rows.append(cells)
    return rows


def render_teacher_rows(engine: "TimetableEngine", teacher_id: str) -> list[list[str]]:
    """Gibt Tabellenzeilen für den Lehrer-Stundenplan zurück.

    Springstunden werden als 'Springstunde' markiert, gesperrte Slots als '×'.
    """
    tg = engine.config.time_grid
    entries = engine.entries_for_teacher(teacher_id)
    slot_map = build_slot_map(entries)
    gaps = gap_slots(entries)
    rows: list[list[str]] = []

    for period in tg.periods:
        cells = [str(period)]
        for day in tg.day_names:
            entry = slot_map.get((day, period))
            if entry is not None:
                label = entry.subject_id
                if entry.class_id is not None:
                    label = f"{label}\n{entry.class_id}"
                cells.append(label)
            elif not engine.is_teacher_available(teacher_id, day, period):
                cells.append("×")
            elif (day, period) in gaps:
                cells.append("↕ Springstunde")
            else:
                cells.append("—")
        rows.append(cells)
    return rows
