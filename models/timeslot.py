"""Datenmodell für einen Zeitslot im Wochenraster."""

from pydantic import BaseModel, ConfigDict, Field


class TimeSlot(BaseModel):
    """Repräsentiert einen einzelnen Unterrichtszeitslot im Wochenraster.

    Kombination aus Wochentag und Stunde.
    Immutable (frozen=True) damit es als Dict-Key / Set-Element nutzbar ist.
    """

    model_config = ConfigDict(frozen=True)

    # Wochentag, z.B. "Monday" (Reihenfolge kommt aus dem Zeitraster)
    day: str
    # Stunde (1-basiert, z.B. 1 = 1. Stunde)
    period: int = Field(ge=1)

    @property
    def slot_id(self) -> str:
        """Eindeutiger String-Bezeichner (z.B. "Monday-1")."""
        return f"{self.day}-{self.period}"

    def __repr__(self) -> str:
        return f"TimeSlot({self.day}, Std.{self.period})"

    def __str__(self) -> str:
        return f"{self.day} {self.period}."
