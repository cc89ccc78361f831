"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from pydantic import BaseModel, ConfigDict, field_validator

from models.timeslot import TimeSlot


class Teacher(BaseModel):
    """Repräsentiert eine einzelne Lehrkraft."""

    model_config = ConfigDict(frozen=True)

    id: str                                        # Kürzel ("SMI")
    name: str                                      # "Mr. Smith"
    available_slots: frozenset[TimeSlot] = frozenset()  # Doppelte fallen weg

    @field_validator("id")
    @classmethod
    def normalize_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Lehrer-ID darf nicht leer sein.")
        return v

    def is_available(self, day: str, period: int) -> bool:
        """True wenn die Lehrkraft im Slot (day, period) unterrichten kann."""
        return TimeSlot(day=day, period=period) in self.available_slots

    @property
    def available_slot_count(self) -> int:
        """Anzahl verfügbarer Slots (Start-Kapazität bei der Fachzuweisung)."""
        return len(self.available_slots)
