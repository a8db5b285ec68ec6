"""
Progress and marker state models.

Both are derived values: they are recomputed from the current location and
response collections and never stored.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .location import Location


class Progress(BaseModel):
    """Visited/total ratio for one task's map."""

    model_config = ConfigDict(frozen=True)

    visited_ids: frozenset[str] = Field(default_factory=frozenset)
    visited_count: int = Field(default=0, ge=0)
    total_count: int = Field(default=0, ge=0)
    percent: float = Field(default=0.0, ge=0, description="Unrounded percentage")

    @property
    def rounded_percent(self) -> int:
        """Percentage rounded for display."""
        return round(self.percent)

    @property
    def is_complete(self) -> bool:
        return self.total_count > 0 and self.visited_count == self.total_count


class TaskStats(BaseModel):
    """
    Visited locations against the task's expected response count.

    Secondary to Progress. `expected` is entered by hand on the task, so
    `percent` can exceed 100 when students visit more locations than asked for.
    """

    model_config = ConfigDict(frozen=True)

    actual: int = Field(default=0, ge=0)
    expected: int = Field(default=1, ge=1)
    percent: int = Field(default=0, ge=0, description="Rounded percentage")


class MarkerIcon(str, Enum):
    """Single icon for renderers that can only draw one marker style."""

    SELECTED = "selected"
    VISITED = "visited"
    DEFAULT = "default"


class MarkerState(BaseModel):
    """
    Display state of one map marker.

    Visited is the persistent state, selected is a transient overlay; both
    flags are kept so a renderer can combine them (e.g. a visited marker
    with a highlighted border).
    """

    model_config = ConfigDict(frozen=True)

    location: Location
    is_visited: bool = False
    is_selected: bool = False

    @computed_field
    @property
    def icon(self) -> MarkerIcon:
        if self.is_selected:
            return MarkerIcon.SELECTED
        if self.is_visited:
            return MarkerIcon.VISITED
        return MarkerIcon.DEFAULT
