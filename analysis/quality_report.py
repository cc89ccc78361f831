"""Kennzahlen für einen fertigen Stundenplan.

Vollständigkeit pro Fach, Auslastung pro Lehrkraft und Tag sowie die
beiden Qualitäts-Scores aus analysis.scoring.
"""

from typing import Optional

from pydantic import BaseModel

from config.schema import TimeGridConfig
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher
from models.timetable_entry import TimetableEntry
from analysis.scoring import distribution_score, teacher_workload_stddev


# ─── Metriken-Modelle ─────────────────────────────────────────────────────────

class SubjectCompleteness(BaseModel):
    """Soll/Ist für ein Fach (über alle Klassen-Bereiche summiert)."""

    subject_id: str
    name: str
    required: int
    actual: int

    @property
    def percentage(self) -> int:
        if self.required == 0:
            return 100
        return round(100 * self.actual / self.required)

    @property
    def is_complete(self) -> bool:
        return self.actual >= self.required


class TimetableStatistics(BaseModel):
    """Zusammenfassende Kennzahlen eines Stundenplans."""

    total_entries: int
    total_required: int
    subjects: list[SubjectCompleteness]
    entries_per_teacher: dict[str, int]
    entries_per_day: dict[str, int]
    distribution_score: float
    workload_stddev: float

    @property
    def completeness_percentage(self) -> int:
        """round(100 × Einträge / Σ Wochen-Soll); 100 bei leerem Soll."""
        if self.total_required == 0:
            return 100
        return round(100 * self.total_entries / self.total_required)


# ─── Analyzer ─────────────────────────────────────────────────────────────────

class QualityAnalyzer:
    """Berechnet Kennzahlen für eine Menge von Einträgen."""

    def analyze(
        self,
        entries: list[TimetableEntry],
        subjects: list[Subject],
        teachers: list[Teacher],
        time_grid: TimeGridConfig,
        classes: Optional[list[SchoolClass]] = None,
    ) -> TimetableStatistics:
        """Hauptmethode: berechnet alle Kennzahlen."""
        num_scopes = max(1, len(classes or []))
        days = time_grid.day_names

        completeness = []
        for subject in subjects:
            actual = sum(1 for e in entries if e.subject_id == subject.id)
            completeness.append(SubjectCompleteness(
                subject_id=subject.id,
                name=subject.name,
                required=subject.weekly_lectures * num_scopes,
                actual=actual,
            ))

        per_teacher = {t.id: 0 for t in teachers}
        per_day = {d: 0 for d in days}
        for e in entries:
            if e.teacher_id in per_teacher:
                per_teacher[e.teacher_id] += 1
            if e.day in per_day:
                per_day[e.day] += 1

        # Verteilungs-Score pro Klassen-Bereich, dann gemittelt
        if classes:
            scores = [
                distribution_score([e for e in entries if e.class_id == c.id], subjects, days)
                for c in classes
            ]
            dist = sum(scores) / len(scores)
        else:
            dist = distribution_score(entries, subjects, days)

        return TimetableStatistics(
            total_entries=len(entries),
            total_required=sum(c.required for c in completeness),
            subjects=completeness,
            entries_per_teacher=per_teacher,
            entries_per_day=per_day,
            distribution_score=round(dist, 3),
            workload_stddev=round(teacher_workload_stddev(entries, teachers), 3),
        )

    def print_rich(self, stats: TimetableStatistics, teachers: Optional[list[Teacher]] = None) -> None:
        """Gibt die Kennzahlen formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        pct = stats.completeness_percentage
        pct_color = "green" if pct >= 100 else "yellow" if pct >= 90 else "red"
        console.print(Panel(
            f"Einträge: [bold]{stats.total_entries}[/bold] / {stats.total_required} | "
            f"Vollständigkeit: [{pct_color}]{pct}%[/{pct_color}]\n"
            f"Verteilungs-Score: [bold]{stats.distribution_score:.3f}[/bold] | "
            f"Auslastung σ: [bold]{stats.workload_stddev:.2f}[/bold]",
            title="Statistik – Übersicht",
            border_style="cyan",
        ))

        s_table = Table(title="Fächer", box=box.ROUNDED)
        s_table.add_column("ID", width=6)
        s_table.add_column("Fach", width=22)
        s_table.add_column("Soll", justify="right", width=5)
        s_table.add_column("Ist", justify="right", width=5)
        s_table.add_column("%", justify="right", width=5)
        for s in stats.subjects:
            color = "green" if s.is_complete else "red"
            s_table.add_row(
                s.subject_id, s.name, str(s.required), str(s.actual),
                f"[{color}]{s.percentage}[/{color}]",
            )
        console.print(s_table)

        names = {t.id: t.name for t in teachers or []}
        t_table = Table(title="Lehrer-Auslastung", box=box.ROUNDED)
        t_table.add_column("ID", width=6)
        t_table.add_column("Name", width=22)
        t_table.add_column("Stunden", justify="right", width=8)
        for tid, count in stats.entries_per_teacher.items():
            t_table.add_row(tid, names.get(tid, ""), str(count))
        console.print(t_table)
