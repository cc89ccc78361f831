from config.schema import (
    TimeGridConfig,
    SchedulerConfig,
    ValidationConfig,
    TimetableConfig,
)


def default_time_grid() -> TimeGridConfig:
    """Standard-Wochenraster: Montag bis Freitag, je 7 Stunden.

    Ergibt 35 Slots pro Woche und Klasse.
    """
    return TimeGridConfig(
        day_names=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
        periods_per_day=7,
    )


def default_config() -> TimetableConfig:
    """Vollständige Standard-Konfiguration."""
    return TimetableConfig(
        school_name="Muster-Schule",
        time_grid=default_time_grid(),
        scheduler=SchedulerConfig(),
        validation=ValidationConfig(),
    )


# ─── Beispiel-Fächer ──────────────────────────────────────────────────────────
# Kürzel → (Anzeigename, Wochenstunden)

SAMPLE_SUBJECTS: dict[str, tuple[str, int]] = {
    "MA": ("Mathematics", 5),
    "SC": ("Science", 4),
    "EN": ("English", 5),
    "HI": ("History", 3),
    "GE": ("Geography", 2),
    "PE": ("Physical Education", 3),
    "AR": ("Art", 2),
    "MU": ("Music", 1),
}

# Kürzel → Name der Beispiel-Lehrkräfte
SAMPLE_TEACHERS: dict[str, str] = {
    "SMI": "Mr. Smith",
    "JOH": "Mrs. Johnson",
    "WIL": "Mr. Williams",
    "BRO": "Ms. Brown",
    "DAV": "Mr. Davis",
    "MIL": "Mrs. Miller",
}

# Anteil der Slots, die pro Lehrkraft zufällig gesperrt werden
SAMPLE_UNAVAILABLE_FRACTION: float = 0.2
