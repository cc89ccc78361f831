"""TimetableData: Stammdaten-Satz + Machbarkeits-Check (Pydantic v2)."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from models.subject import Subject
from models.teacher import Teacher
from models.school_class import SchoolClass
from config.schema import TimetableConfig


class FeasibilityReport(BaseModel):
    """Ergebnis des Machbarkeits-Checks."""

    is_feasible: bool
    errors: list[str]      # Kritische Probleme (Soll nicht erreichbar)
    warnings: list[str]    # Hinweise (Plan schwierig aber möglich)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_feasible:
            status = "[bold green]✓ LÖSBAR[/bold green]"
        else:
            status = "[bold red]✗ NICHT VOLLSTÄNDIG LÖSBAR[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler (kritisch):[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Machbarkeits-Check", border_style="cyan"))


class TimetableData(BaseModel):
    """Vollständiger Stammdaten-Satz: Fächer, Lehrkräfte, Klassen, Config."""

    subjects: list[Subject]
    teachers: list[Teacher]
    classes: list[SchoolClass] = []
    config: TimetableConfig
    created_at: Optional[datetime] = None

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        tg = self.config.time_grid
        total_need = sum(s.weekly_lectures for s in self.subjects)
        total_avail = sum(t.available_slot_count for t in self.teachers)
        lines = [
            f"Schule: {self.config.school_name}",
            f"Raster: {len(tg.day_names)} Tage × {tg.periods_per_day} Stunden "
            f"({tg.slot_count} Slots)",
            f"Fächer: {len(self.subjects)} ({total_need} Stunden/Woche)",
            f"Lehrkräfte: {len(self.teachers)} ({total_avail} verfügbare Slots)",
            f"Klassen: {len(self.classes)}" if self.classes else "",
        ]
        return "\n".join(l for l in lines if l)

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        return next((s for s in self.subjects if s.id == subject_id), None)

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        return next((t for t in self.teachers if t.id == teacher_id), None)

    # ─── Machbarkeits-Check ───

    def validate_feasibility(self) -> FeasibilityReport:
        """Prüft ob die Stammdaten das Wochen-Soll grundsätzlich erlauben.

        Prüfungen:
        1. Lehrkräfte vorhanden
        2. Gesamt-Soll pro Klasse ≤ Slots im Raster
        3. Lehrkräfte ohne verfügbare Slots
        4. Verfügbarkeiten außerhalb des Rasters
        5. Gesamt-Soll ≤ Summe aller verfügbaren Lehrer-Slots
        """
        errors: list[str] = []
        warnings: list[str] = []

        tg = self.config.time_grid
        num_scopes = max(1, len(self.classes))
        total_need = sum(s.weekly_lectures for s in self.subjects)

        # ── 1. Lehrkräfte vorhanden ──────────────────────────────────────
        if not self.teachers:
            errors.append("Keine Lehrkräfte definiert – Fächer können nicht zugewiesen werden.")

        # ── 2. Soll pro Klasse ≤ Raster ──────────────────────────────────
        if total_need == 0:
            warnings.append("Kein Wochen-Soll definiert – Machbarkeit kann nicht geprüft werden.")
        elif total_need > tg.slot_count:
            errors.append(
                f"Wochen-Soll ({total_need}h) übersteigt das Raster "
                f"({tg.slot_count} Slots). Mindestens {total_need - tg.slot_count}h bleiben offen."
            )
        elif total_need == tg.slot_count:
            warnings.append(
                f"Wochen-Soll ({total_need}h) füllt das Raster vollständig – "
                f"kein Spielraum für Verteilung."
            )

        # ── 3./4. Verfügbarkeit je Lehrkraft ─────────────────────────────
        for teacher in self.teachers:
            if not teacher.available_slots:
                warnings.append(
                    f"Lehrkraft {teacher.id} ({teacher.name}): keine verfügbaren Slots."
                )
            outside = [s for s in teacher.available_slots if not tg.contains(s.day, s.period)]
            if outside:
                warnings.append(
                    f"Lehrkraft {teacher.id}: {len(outside)} Slot(s) außerhalb des Rasters "
                    f"werden ignoriert."
                )

        # ── 5. Gesamtbilanz ──────────────────────────────────────────────
        total_avail = sum(
            1
            for t in self.teachers
            for s in t.available_slots
            if tg.contains(s.day, s.period)
        )
        if self.teachers and total_avail < total_need * num_scopes:
            errors.append(
                f"Gesamtbilanz: Lehrer-Verfügbarkeit ({total_avail} Slots) < "
                f"Gesamtbedarf ({total_need * num_scopes}h)."
            )

        return FeasibilityReport(
            is_feasible=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    # ─── Persistenz der Stammdaten ─────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den Stammdaten-Satz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        updated = self.model_copy(update={
            "created_at": self.created_at or datetime.now(timezone.utc),
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "TimetableData":
        """Lädt einen Stammdaten-Satz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
