"""Datenmodell für einen Befund der Validierung."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

Severity = Literal["error", "warning"]


class ValidationIssue(BaseModel):
    """Ein einzelner Validierungs-Befund.

    Die Identität ist strukturell: (rule, entities). Zwei Durchläufe auf
    identischem Zustand liefern gleiche Issues.
    """

    model_config = ConfigDict(frozen=True)

    rule: str                       # z.B. "teacher_double_booked"
    severity: Severity
    message: str
    entities: tuple[str, ...] = ()  # beteiligte IDs (Fach, Lehrer, Tag, Stunde, ...)

    @property
    def key(self) -> tuple[str, tuple[str, ...]]:
        return (self.rule, self.entities)

    @property
    def id(self) -> str:
        return f"{self.rule}:{'/'.join(self.entities)}"

    @property
    def is_error(self) -> bool:
        return self.severity == "error"
