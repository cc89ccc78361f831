"""Solver-Modul: Lehrer-Zuweisung, Greedy-Scheduler und Bearbeitungs-Engine."""

from .assignment import assign_teachers
from .engine import TimetableEngine
from .outcomes import MutationResult, NoTeachersAvailable, RejectionReason, SchedulingError
from .scheduler import GreedyScheduler, ScheduleSolution, generate_schedule

__all__ = [
    "assign_teachers",
    "TimetableEngine",
    "MutationResult",
    "NoTeachersAvailable",
    "RejectionReason",
    "SchedulingError",
    "GreedyScheduler",
    "ScheduleSolution",
    "generate_schedule",
]
