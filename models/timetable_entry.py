"""Datenmodell für einen Eintrag im Stundenplan."""

import uuid
from typing import Optional

from pydantic import BaseModel, Field


def new_entry_id() -> str:
    """Erzeugt eine neue, von allen Fach-/Lehrer-IDs verschiedene Eintrags-ID."""
    return uuid.uuid4().hex


class TimetableEntry(BaseModel):
    """Eine einzelne eingeplante Unterrichtsstunde.

    Belegt genau einen (day, period)-Slot innerhalb ihrer Klasse.
    day/period werden nur durch Verschieben geändert.
    """

    id: str = Field(default_factory=new_entry_id)
    subject_id: str
    teacher_id: str
    day: str
    period: int = Field(ge=1)
    class_id: Optional[str] = None   # None = Einzelklassen-Modus

    @property
    def slot_key(self) -> tuple[str, int]:
        return (self.day, self.period)
