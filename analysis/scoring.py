"""Statistische Bewertung von Verteilung und Lehrer-Auslastung.

Liefert die Kennzahlen für die Verbesserungs-Hinweise der Validierung.
"""

from collections import defaultdict
from statistics import pstdev
from typing import Iterable

from models.subject import Subject
from models.teacher import Teacher
from models.timetable_entry import TimetableEntry


def subject_day_counts(
    entries: Iterable[TimetableEntry], subject_id: str, days: list[str]
) -> dict[str, int]:
    """Stunden eines Fachs pro Tag (alle Tage des Rasters, auch leere)."""
    counts = {d: 0 for d in days}
    for e in entries:
        if e.subject_id == subject_id and e.day in counts:
            counts[e.day] += 1
    return counts


def distribution_score(
    entries: list[TimetableEntry], subjects: list[Subject], days: list[str]
) -> float:
    """Summe über Fächer mit > 1 Wochenstunde von 1 / (1 + σ).

    σ = Populations-Standardabweichung der Stunden pro Tag.
    Gleichmäßigere Verteilung → kleineres σ → höherer Score.
    """
    if not days:
        return 0.0
    score = 0.0
    for subject in subjects:
        if subject.weekly_lectures <= 1:
            continue
        counts = subject_day_counts(entries, subject.id, days)
        score += 1.0 / (1.0 + pstdev(list(counts.values())))
    return score


def teacher_workloads(
    entries: Iterable[TimetableEntry], teachers: list[Teacher]
) -> dict[str, int]:
    """Anzahl Einträge pro Lehrkraft; unbekannte Lehrer-IDs werden ignoriert."""
    loads = {t.id: 0 for t in teachers}
    for e in entries:
        if e.teacher_id in loads:
            loads[e.teacher_id] += 1
    return loads


def teacher_workload_stddev(
    entries: list[TimetableEntry], teachers: list[Teacher]
) -> float:
    """Populations-Standardabweichung der Lehrer-Auslastung (kleiner = besser)."""
    loads = teacher_workloads(entries, teachers)
    if not loads:
        return 0.0
    return pstdev(list(loads.values()))


def difficult_subject_days(
    entries: list[TimetableEntry],
    subjects: list[Subject],
    days: list[str],
    min_lectures: int = 4,
) -> list[tuple[str, int]]:
    """Tage, an denen mehr "schwere" Stunden liegen als es schwere Fächer gibt.

    Rückgabe: Liste (Tag, Anzahl schwerer Stunden) in Raster-Reihenfolge.
    """
    difficult = {s.id for s in subjects if s.is_difficult(min_lectures)}
    per_day: dict[str, int] = defaultdict(int)
    for e in entries:
        if e.subject_id in difficult:
            per_day[e.day] += 1
    return [(d, per_day[d]) for d in days if per_day[d] > len(difficult)]

