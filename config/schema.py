from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:
    from models.timeslot import TimeSlot


# ─── ZEITRASTER ───

class TimeGridConfig(BaseModel):
    """Wochenraster aus Tagen × Stunden.

    Das Zeitraster definiert:
    - Welche Unterrichtstage es gibt (in Kalender-Reihenfolge)
    - Wie viele Stunden pro Tag unterrichtet werden (1..N)

    Die Reihenfolge der Tage bestimmt die deterministische Iteration
    im Scheduler und im Validator.
    """
    # Namen der Unterrichtstage in Kalender-Reihenfolge
    day_names: list[str] = Field(
        default=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
        description="Unterrichtstage in Kalender-Reihenfolge")
    # Anzahl Stunden pro Tag
    periods_per_day: int = Field(7, ge=1, le=16,
        description="Stunden pro Tag")

    @field_validator("day_names")
    @classmethod
    def validate_day_names(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("Mindestens ein Unterrichtstag erforderlich")
        if len(set(v)) != len(v):
            raise ValueError(f"Doppelte Tagesnamen im Zeitraster: {v}")
        return v

    @property
    def periods(self) -> list[int]:
        """Stunden-Nummern 1..N."""
        return list(range(1, self.periods_per_day + 1))

    @property
    def slots(self) -> list["TimeSlot"]:
        """Alle Slots in globaler Reihenfolge (Tag, dann Stunde aufsteigend)."""
        from models.timeslot import TimeSlot
        return [TimeSlot(day=d, period=p) for d in self.day_names for p in self.periods]

    @property
    def slot_count(self) -> int:
        return len(self.day_names) * self.periods_per_day

    def contains(self, day: str, period: int) -> bool:
        """True wenn (day, period) im Raster liegt."""
        return day in self.day_names and 1 <= period <= self.periods_per_day

    def day_index(self, day: str) -> int:
        """Position des Tages im Raster (unbekannte Tage ans Ende)."""
        try:
            return self.day_names.index(day)
        except ValueError:
            return len(self.day_names)


# ─── SCHEDULER ───

class SchedulerConfig(BaseModel):
    """Einstellungen des Greedy-Schedulers."""
    # Sicherheitsobergrenze für Durchläufe über alle Fächer
    max_passes: int = Field(1000, ge=1,
        description="Max. Durchläufe (Schutz gegen pathologische Eingaben)")


# ─── VALIDIERUNG ───

class ValidationConfig(BaseModel):
    """Schwellwerte für die weichen Qualitätsregeln."""
    # Verteilungs-Score < Faktor × Fächeranzahl → Hinweis
    distribution_factor: float = Field(0.7, ge=0.0,
        description="Schwelle Verteilungs-Score (× Anzahl Fächer)")
    # Standardabweichung der Lehrer-Auslastung > Limit → Hinweis
    workload_stddev_limit: float = Field(2.0, ge=0.0,
        description="Max. Standardabweichung der Lehrer-Auslastung")
    # Ab so vielen Wochenstunden gilt ein Fach als "schwer"
    difficult_subject_min_lectures: int = Field(4, ge=1,
        description="Wochenstunden ab denen ein Fach als schwer gilt")
    # Ab dieser Länge gilt eine Folge gleicher Fächer als zu lang
    consecutive_run_length: int = Field(3, ge=2,
        description="Länge einer Fach-Folge, ab der gewarnt wird")


# ─── GESAMT-CONFIG ───

class TimetableConfig(BaseModel):
    """Gesamtkonfiguration des Stundenplans."""
    # Name der Schule
    school_name: str = Field("Muster-Schule",
        description="Name der Schule")
    # Wochenraster
    time_grid: TimeGridConfig = Field(default_factory=TimeGridConfig)
    # Scheduler-Einstellungen
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    # Schwellwerte der Validierung
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
