"""
Workspace snapshot returned by the task workspace coordinator and the API.
"""

from pydantic import BaseModel, ConfigDict, Field

from .location import Location
from .progress import MarkerState, Progress, TaskStats
from .response import Response
from .task import Task


class TaskWorkspaceView(BaseModel):
    """Everything a task screen renders: map, list, progress and selection."""

    model_config = ConfigDict(frozen=True)

    task: Task
    locations: list[Location] = Field(default_factory=list)
    responses: list[Response] = Field(default_factory=list)
    progress: Progress = Field(default_factory=Progress)
    stats: TaskStats = Field(default_factory=TaskStats)
    markers: list[MarkerState] = Field(default_factory=list)
    selected_id: str | None = None
