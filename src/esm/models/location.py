"""
Location models.

A Location is the normalized form of an `asukoht` entity: the shape the map,
the location list and the visit aggregator all work with. Locations are
rebuilt from scratch on every fetch and never mutated.
"""

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    """Latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def __str__(self) -> str:
        return f"{self.lat:.5f}, {self.lng:.5f}"


class Location(BaseModel):
    """
    Canonical location.

    `name` and `description` stay None when the CMS has no value for them;
    placeholders are a rendering concern.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    coordinates: Coordinates
    name: str | None = None
    description: str | None = None
