"""
Response models.

A Response is one submission by a user against a task, optionally tied to
the location the user chose to answer about.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .location import Coordinates


class Response(BaseModel):
    """Normalized `vastus` entity."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    task_id: str | None = None
    location_id: str | None = Field(default=None, description="Referenced Location id")
    coordinates: Coordinates | None = Field(
        default=None, description="Device GPS position at submission time"
    )
    text: str | None = None
    photo_id: str | None = None
    submitted_at: datetime | None = None
