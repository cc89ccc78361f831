"""Ergebnis-Typen für Zuweisung, Generierung und Bearbeitung.

Strukturelle Ablehnungen werden als Rückgabewert gemeldet, nie als Exception
über die Engine-Grenze hinweg.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class RejectionReason(str, Enum):
    SLOT_OCCUPIED = "slot_occupied"
    TEACHER_UNAVAILABLE = "teacher_unavailable"
    TEACHER_DOUBLE_BOOKED = "teacher_double_booked"
    NO_TEACHERS_AVAILABLE = "no_teachers_available"
    ENTRY_NOT_FOUND = "entry_not_found"
    UNKNOWN_SUBJECT = "unknown_subject"
    INVALID_SLOT = "invalid_slot"
    UNKNOWN_CLASS = "unknown_class"


class MutationResult(BaseModel):
    """Ergebnis einer Änderung am Stundenplan."""

    ok: bool
    entry_id: Optional[str] = None
    rejection: Optional[RejectionReason] = None
    message: str = ""

    @classmethod
    def success(cls, entry_id: Optional[str] = None, message: str = "") -> "MutationResult":
        return cls(ok=True, entry_id=entry_id, message=message)

    @classmethod
    def rejected(cls, reason: RejectionReason, message: str) -> "MutationResult":
        return cls(ok=False, rejection=reason, message=message)

    def __bool__(self) -> bool:
        return self.ok


class SchedulingError(Exception):
    """Basisklasse für Fehler bei Zuweisung/Generierung."""

    reason: RejectionReason


class NoTeachersAvailable(SchedulingError):
    """Es gibt keine Lehrkräfte, denen Fächer zugewiesen werden können."""

    reason = RejectionReason.NO_TEACHERS_AVAILABLE

    def __init__(self, message: str = "Keine Lehrkräfte verfügbar – Fächer können nicht zugewiesen werden.") -> None:
        super().__init__(message)
