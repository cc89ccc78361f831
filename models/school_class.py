"""Datenmodell für eine Schulklasse (Pydantic v2)."""

from pydantic import BaseModel, ConfigDict


class SchoolClass(BaseModel):
    """Eine Klasse im Mehrklassen-Modus (eigenes Teil-Raster)."""

    model_config = ConfigDict(frozen=True)

    id: str      # "5a"
    name: str    # "Klasse 5a"
