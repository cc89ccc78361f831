"""Zuweisung Fach → Lehrkraft.

Einmaliger Durchlauf mit Kapazitäts-Ausgleich: Fächer mit vielen
Wochenstunden zuerst, jeweils an die Lehrkraft mit der größten
Rest-Kapazität. Frühere Zuweisungen werden nicht revidiert.
"""

import logging

from models.subject import Subject
from models.teacher import Teacher
from solver.outcomes import NoTeachersAvailable

logger = logging.getLogger(__name__)


def assign_teachers(
    subjects: list[Subject], teachers: list[Teacher]
) -> dict[str, str]:
    """Ordnet jedem Fach genau eine Lehrkraft zu.

    Kapazität einer Lehrkraft = Anzahl verfügbarer Slots, abzüglich der
    Wochenstunden bereits zugewiesener Fächer. Gleichstände werden über
    die Eingabe-Reihenfolge (Fächer und Lehrkräfte) aufgelöst.

    Raises:
        NoTeachersAvailable: wenn die Lehrerliste leer ist.
    """
    if not teachers:
        raise NoTeachersAvailable()

    capacity: dict[str, int] = {}
    for teacher in teachers:
        capacity.setdefault(teacher.id, teacher.available_slot_count)

    assignments: dict[str, str] = {}
    # sorted() ist stabil → Gleichstand in Eingabe-Reihenfolge
    for subject in sorted(subjects, key=lambda s: -s.weekly_lectures):
        best = teachers[0]
        for teacher in teachers[1:]:
            if capacity[teacher.id] > capacity[best.id]:
                best = teacher
        assignments[subject.id] = best.id
        capacity[best.id] -= subject.weekly_lectures
        logger.debug(
            f"Fach {subject.id} ({subject.weekly_lectures}h) → {best.id} "
            f"(Rest-Kapazität {capacity[best.id]})"
        )

    return assignments
