"""
Task models.

A task (`ulesanne`) points at a map whose locations the students visit and
at the group it is assigned to.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Task(BaseModel):
    """Normalized task entity."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str | None = None
    description: str | None = None
    map_id: str | None = None
    group_id: str | None = None
    deadline: datetime | None = None
    expected_responses: int | None = Field(default=None, ge=0)

    @property
    def display_name(self) -> str:
        return self.name or "Untitled task"
