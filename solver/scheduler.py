"""Greedy-Stundenplan-Scheduler.

Architektur:
  - Fach → Lehrer-Zuweisung vorab (solver.assignment)
  - Fächer absteigend nach Wochenstunden (stabil)
  - Wiederholte Durchläufe; pro Durchlauf höchstens eine Stunde je Fach
  - Bevorzugter Tag = Tag mit den wenigsten Stunden dieses Fachs
  - Kein Backtracking: bei vollem Raster bleibt das Soll unerfüllt
    (wird von der Validierung als "insufficient_lectures" gemeldet)
"""

import logging
import time
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel

from config.schema import SchedulerConfig, TimeGridConfig
from models.subject import Subject
from models.teacher import Teacher
from models.timetable_entry import TimetableEntry
from solver.assignment import assign_teachers

logger = logging.getLogger(__name__)


# ─── Ergebnis-Modell ──────────────────────────────────────────────────────────

class ScheduleSolution(BaseModel):
    """Ergebnis eines Scheduler-Laufs für einen Klassen-Bereich."""

    entries: list[TimetableEntry]
    assignments: dict[str, str]          # subject_id → teacher_id
    class_id: Optional[str] = None
    passes: int
    solve_time_seconds: float
    shortfall: dict[str, int] = {}       # subject_id → fehlende Stunden

    @property
    def is_complete(self) -> bool:
        """True wenn jedes Fach sein Wochen-Soll erreicht hat."""
        return not self.shortfall

    def get_teacher_schedule(self, teacher_id: str) -> list[TimetableEntry]:
        """Alle Einträge für einen bestimmten Lehrer."""
        return [e for e in self.entries if e.teacher_id == teacher_id]

    def get_subject_schedule(self, subject_id: str) -> list[TimetableEntry]:
        """Alle Einträge für ein bestimmtes Fach."""
        return [e for e in self.entries if e.subject_id == subject_id]

    def save_json(self, path: Path) -> None:
        """Speichert die Lösung als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))


# ─── Haupt-Scheduler ──────────────────────────────────────────────────────────

class GreedyScheduler:
    """Deterministischer Greedy-Scheduler (ohne Zufall, ohne Backtracking).

    Verwendung:
        scheduler = GreedyScheduler(config.time_grid)
        solution = scheduler.solve(subjects, teachers)
    """

    def __init__(
        self,
        time_grid: TimeGridConfig,
        scheduler_config: Optional[SchedulerConfig] = None,
    ) -> None:
        self.time_grid = time_grid
        self.config = scheduler_config or SchedulerConfig()

        # Zustand eines Laufs (wird in solve() zurückgesetzt)
        self._filled: set[tuple[str, int]] = set()              # (day, period) im Klassen-Bereich
        self._teacher_busy: set[tuple[str, str, int]] = set()   # (teacher_id, day, period) global
        self._availability: dict[str, set[tuple[str, int]]] = {}
        self._per_day: dict[str, dict[str, int]] = {}           # subject_id → day → Anzahl

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def solve(
        self,
        subjects: list[Subject],
        teachers: list[Teacher],
        assignments: Optional[dict[str, str]] = None,
        class_id: Optional[str] = None,
        existing_entries: Iterable[TimetableEntry] = (),
    ) -> ScheduleSolution:
        """Füllt das Raster eines Klassen-Bereichs best-effort.

        existing_entries: bereits eingeplante Stunden ANDERER Klassen; deren
        Lehrer-Belegung wird respektiert (keine Doppelbuchung über Klassen).

        Raises:
            NoTeachersAvailable: wenn keine Zuweisung übergeben wurde und die
                Lehrerliste leer ist.
        """
        t0 = time.time()
        if assignments is None:
            assignments = assign_teachers(subjects, teachers)

        self._reset(subjects, teachers, existing_entries)
        teacher_map = {t.id: t for t in teachers}

        order = sorted(subjects, key=lambda s: -s.weekly_lectures)
        placed: dict[str, int] = {s.id: 0 for s in subjects}
        skipped: set[str] = set()
        entries: list[TimetableEntry] = []

        passes = 0
        while passes < self.config.max_passes:
            pending = [
                s for s in order
                if placed[s.id] < s.weekly_lectures and s.id not in skipped
            ]
            if not pending:
                break
            passes += 1
            progress = False

            for subject in pending:
                teacher = teacher_map.get(assignments.get(subject.id, ""))
                if teacher is None:
                    logger.warning(
                        f"Fach {subject.id} ({subject.name}): keine Lehrkraft zugewiesen – übersprungen"
                    )
                    skipped.add(subject.id)
                    continue

                slot = self._find_slot(subject.id, teacher.id)
                if slot is None:
                    continue

                day, period = slot
                entry = TimetableEntry(
                    subject_id=subject.id,
                    teacher_id=teacher.id,
                    day=day,
                    period=period,
                    class_id=class_id,
                )
                entries.append(entry)
                self._book(entry)
                placed[subject.id] += 1
                progress = True

            if not progress:
                logger.info(
                    f"Durchlauf {passes}: keine weitere Stunde platzierbar – Raster gesättigt"
                )
                break

        shortfall = {
            s.id: s.weekly_lectures - placed[s.id]
            for s in subjects
            if placed[s.id] < s.weekly_lectures
        }
        if passes >= self.config.max_passes and shortfall:
            logger.warning(f"Durchlauf-Obergrenze ({self.config.max_passes}) erreicht")
        elapsed = time.time() - t0
        logger.info(
            f"Greedy-Scheduler beendet: {len(entries)} Einträge | "
            f"Durchläufe: {passes} | "
            f"Fehlend: {sum(shortfall.values())}h | "
            f"Zeit: {elapsed:.3f}s"
        )

        return ScheduleSolution(
            entries=entries,
            assignments=dict(assignments),
            class_id=class_id,
            passes=passes,
            solve_time_seconds=elapsed,
            shortfall=shortfall,
        )

    # ─── Interne Hilfen ───────────────────────────────────────────────────────

    def _reset(
        self,
        subjects: list[Subject],
        teachers: list[Teacher],
        existing_entries: Iterable[TimetableEntry],
    ) -> None:
        days = self.time_grid.day_names
        self._filled = set()
        self._teacher_busy = {
            (e.teacher_id, e.day, e.period) for e in existing_entries
        }
        self._availability = {}
        for teacher in teachers:
            self._availability.setdefault(
                teacher.id, {(s.day, s.period) for s in teacher.available_slots}
            )
        self._per_day = {s.id: {d: 0 for d in days} for s in subjects}

    def _book(self, entry: TimetableEntry) -> None:
        self._filled.add((entry.day, entry.period))
        self._teacher_busy.add((entry.teacher_id, entry.day, entry.period))
        self._per_day[entry.subject_id][entry.day] += 1

    def _preferred_day(self, subject_id: str) -> str:
        """Tag mit den wenigsten Stunden des Fachs (Gleichstand: Raster-Reihenfolge)."""
        counts = self._per_day[subject_id]
        return min(self.time_grid.day_names, key=lambda d: counts[d])

    def _slot_is_free(self, teacher_id: str, day: str, period: int) -> bool:
        return (
            (day, period) not in self._filled
            and (day, period) in self._availability.get(teacher_id, ())
            and (teacher_id, day, period) not in self._teacher_busy
        )

    def _find_slot(self, subject_id: str, teacher_id: str) -> Optional[tuple[str, int]]:
        """Erster freier Slot: zuerst am bevorzugten Tag, dann übrige Tage in Reihenfolge."""
        preferred = self._preferred_day(subject_id)
        periods = self.time_grid.periods

        for period in periods:
            if self._slot_is_free(teacher_id, preferred, period):
                return (preferred, period)

        for day in self.time_grid.day_names:
            if day == preferred:
                continue
            for period in periods:
                if self._slot_is_free(teacher_id, day, period):
                    return (day, period)
        return None


def generate_schedule(
    subjects: list[Subject],
    teachers: list[Teacher],
    days: list[str],
    periods_per_day: int,
    max_passes: int = 1000,
) -> list[TimetableEntry]:
    """Kurzform: erzeugt die Einträge für einen einzelnen Klassen-Bereich.

    Raises:
        NoTeachersAvailable: wenn die Lehrerliste leer ist. Nur die
            TimetableEngine übersetzt das in ein abgelehntes MutationResult.
    """
    time_grid = TimeGridConfig(day_names=list(days), periods_per_day=periods_per_day)
    scheduler = GreedyScheduler(time_grid, SchedulerConfig(max_passes=max_passes))
    return scheduler.solve(subjects, teachers).entries
