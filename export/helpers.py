"""Gemeinsame Hilfsfunktionen für Terminal- und Excel-Darstellung."""

from collections import defaultdict
from datetime import date
from typing import Optional

from models.subject import Subject
from models.timetable_entry import TimetableEntry

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "gap":     "FF9999",
    "free":    "F5F5F5",
    "header":  "4472C4",
    "error":   "FFCCCC",
    "warning": "FFF2B3",
}

# Fach-Farben, zyklisch in Fach-Reihenfolge vergeben
SUBJECT_PALETTE: list[str] = [
    "B3D4FF", "B3FFB3", "FFF2B3", "D4B3FF",
    "FFD4B3", "FFB3E6", "B3FFF2", "E0E0E0",
]


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def get_subject_color(subject_id: str, subjects: list[Subject]) -> str:
    """Hex-Farbe eines Fachs (Position in der Fachliste → Palette)."""
    for idx, s in enumerate(subjects):
        if s.id == subject_id:
            return SUBJECT_PALETTE[idx % len(SUBJECT_PALETTE)]
    return COLORS["free"]


def build_slot_map(
    entries: list[TimetableEntry],
) -> dict[tuple[str, int], TimetableEntry]:
    """{(day, period): entry}; bei Mehrfachbelegung gewinnt der erste Eintrag."""
    slot_map: dict[tuple[str, int], TimetableEntry] = {}
    for e in entries:
        slot_map.setdefault((e.day, e.period), e)
    return slot_map


def gap_slots(entries: list[TimetableEntry]) -> set[tuple[str, int]]:
    """Freie Slots zwischen erster und letzter Stunde eines Tages."""
    by_day: dict[str, set[int]] = defaultdict(set)
    for e in entries:
        by_day[e.day].add(e.period)
    gaps: set[tuple[str, int]] = set()
    for day, periods in by_day.items():
        for p in range(min(periods) + 1, max(periods)):
            if p not in periods:
                gaps.add((day, p))
    return gaps


def count_gaps(entries: list[TimetableEntry]) -> int:
    """Zählt Springstunden (freie Slots zwischen erster und letzter Stunde pro Tag)."""
    return len(gap_slots(entries))


def subject_label(subject_id: str, subjects: list[Subject]) -> str:
    s: Optional[Subject] = next((s for s in subjects if s.id == subject_id), None)
    return s.name if s else subject_id
