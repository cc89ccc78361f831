"""Datenmodell für ein Unterrichtsfach (Pydantic v2)."""

from pydantic import BaseModel, ConfigDict, Field


class Subject(BaseModel):
    """Repräsentiert ein Unterrichtsfach mit Wochenstunden-Soll.

    Unveränderlich; Änderungen erfolgen nur durch Ersetzen.
    """

    model_config = ConfigDict(frozen=True)

    id: str                                 # "MA", "EN"
    name: str                               # "Mathematics"
    weekly_lectures: int = Field(ge=0)      # Soll-Stunden pro Woche

    def is_difficult(self, min_lectures: int = 4) -> bool:
        """True für Fächer mit vielen Wochenstunden (Hauptfach-ähnlich)."""
        return self.weekly_lectures >= min_lectures
