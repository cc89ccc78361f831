"""Beispieldaten-Generator für die Stundenplan-Engine.

Erzeugt den festen Satz von acht Beispiel-Fächern und sechs Lehrkräften.
Pro Lehrkraft wird ein Anteil der Raster-Slots zufällig gesperrt
(SAMPLE_UNAVAILABLE_FRACTION, Standard ~20 %). Mit gleichem Seed entsteht
immer derselbe Datensatz.
"""

import random
from typing import Optional

from config.schema import TimetableConfig
from config.defaults import (
    SAMPLE_SUBJECTS,
    SAMPLE_TEACHERS,
    SAMPLE_UNAVAILABLE_FRACTION,
)
from models.school_class import SchoolClass
from models.school_data import TimetableData
from models.subject import Subject
from models.teacher import Teacher


class SampleDataGenerator:
    """Generiert Beispiel-Stammdaten auf Basis der TimetableConfig."""

    def __init__(
        self,
        config: TimetableConfig,
        seed: Optional[int] = None,
        num_classes: int = 0,
        unavailable_fraction: float = SAMPLE_UNAVAILABLE_FRACTION,
    ) -> None:
        if not 0.0 <= unavailable_fraction < 1.0:
            raise ValueError(
                f"unavailable_fraction muss in [0, 1) liegen, ist {unavailable_fraction}"
            )
        self.config = config
        self.rng = random.Random(seed)
        self.num_classes = num_classes
        self.unavailable_fraction = unavailable_fraction

    # ─── Fächer ───────────────────────────────────────────────────────────────

    def _generate_subjects(self) -> list[Subject]:
        return [
            Subject(id=sid, name=name, weekly_lectures=weekly)
            for sid, (name, weekly) in SAMPLE_SUBJECTS.items()
        ]

    # ─── Lehrkräfte ───────────────────────────────────────────────────────────

    def _generate_teachers(self) -> list[Teacher]:
        """Jede Lehrkraft verliert zufällig ~20 % der Slots (mindestens einer bleibt)."""
        slots = self.config.time_grid.slots
        teachers = []
        for tid, name in SAMPLE_TEACHERS.items():
            blocked = min(len(slots) - 1, round(len(slots) * self.unavailable_fraction))
            unavailable = set(self.rng.sample(slots, blocked)) if blocked > 0 else set()
            teachers.append(Teacher(
                id=tid,
                name=name,
                available_slots=frozenset(s for s in slots if s not in unavailable),
            ))
        return teachers

    # ─── Klassen ──────────────────────────────────────────────────────────────

    def _generate_classes(self) -> list[SchoolClass]:
        """Klassen "1a", "1b", ... (leer im Einzelklassen-Modus)."""
        classes = []
        for i in range(self.num_classes):
            label = f"{1 + i // 26}{chr(ord('a') + i % 26)}"
            classes.append(SchoolClass(id=label, name=f"Klasse {label}"))
        return classes

    # ─── Vollständiger Datensatz ──────────────────────────────────────────────

    def generate(self) -> TimetableData:
        """Erzeugt den vollständigen Datensatz als TimetableData-Objekt."""
        return TimetableData(
            subjects=self._generate_subjects(),
            teachers=self._generate_teachers(),
            classes=self._generate_classes(),
            config=self.config,
        )

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: TimetableData) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Beispieldaten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        total_need = sum(s.weekly_lectures for s in data.subjects)
        avail = [t.available_slot_count for t in data.teachers]
        table.add_row("Fächer", str(len(data.subjects)), f"{total_need} Stunden/Woche")
        table.add_row(
            "Lehrkräfte", str(len(data.teachers)),
            f"{min(avail, default=0)}–{max(avail, default=0)} verfügbare Slots",
        )
        table.add_row(
            "Klassen", str(len(data.classes)) if data.classes else "–",
            ", ".join(c.id for c in data.classes) or "Einzelklassen-Modus",
        )
        table.add_row("Raster", str(self.config.time_grid.slot_count), "Slots pro Klasse")

        console.print(table)
