"""
Task workspace coordinator.

Owns the state of one task screen: the location and response collections,
the derived progress, and the shared selection. Map and list views read
from it and send selection intents to it; every data change recomputes
progress explicitly instead of relying on framework reactivity.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from esm.models import (
    Location,
    MarkerState,
    Progress,
    Response,
    Task,
    TaskStats,
    TaskWorkspaceView,
)
from esm.services.markers import present_markers
from esm.services.responses import responses_for_task
from esm.services.selection import DEFAULT_TOLERANCE, SelectionSource, SelectionState
from esm.services.visits import compute_progress, task_stats
from esm.utils.ids import validate_entity_id

if TYPE_CHECKING:
    from esm.entu.client import EntuClient

logger = logging.getLogger(__name__)


class TaskWorkspace:
    """
    State for one task: locations, the user's responses, progress, selection.

    Collections are replaced wholesale, never edited in place.
    """

    def __init__(
        self,
        task: Task,
        locations: Iterable[Location] = (),
        responses: Iterable[Response] = (),
        tolerance: float = DEFAULT_TOLERANCE,
    ):
        self.task = task
        self.selection = SelectionState(tolerance)
        self._locations: tuple[Location, ...] = tuple(locations)
        self._responses: tuple[Response, ...] = tuple(responses)
        self._progress = compute_progress(self._responses, self._locations)

    @property
    def locations(self) -> tuple[Location, ...]:
        return self._locations

    @property
    def responses(self) -> tuple[Response, ...]:
        return self._responses

    @property
    def progress(self) -> Progress:
        return self._progress

    @property
    def stats(self) -> TaskStats:
        return task_stats(self._progress, self.task)

    @property
    def markers(self) -> list[MarkerState]:
        return present_markers(
            self._locations, self._progress.visited_ids, self.selection.selected_id
        )

    # ------------------------------------------------------------------------
    # Data changes
    # ------------------------------------------------------------------------

    def refresh(
        self,
        locations: Iterable[Location] | None = None,
        responses: Iterable[Response] | None = None,
    ) -> Progress:
        """
        Replace one or both collections and recompute progress.

        A selected location that is gone from the new location list is
        deselected.
        """
        if locations is not None:
            self._locations = tuple(locations)
            self.selection.rebind(self._locations)
        if responses is not None:
            self._responses = tuple(responses)

        self._progress = compute_progress(self._responses, self._locations)
        return self._progress

    def add_response(self, response: Response) -> Progress:
        """Append a newly submitted response and recompute progress."""
        if response.task_id and response.task_id != self.task.id:
            logger.warning(
                "Ignoring response %s for task %s in workspace of task %s",
                response.id,
                response.task_id,
                self.task.id,
            )
            return self._progress

        return self.refresh(responses=(*self._responses, response))

    # ------------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------------

    def select_location_id(
        self, location_id: str, source: SelectionSource = SelectionSource.LIST
    ) -> Location | None:
        return self.selection.select_by_id(location_id, self._locations, source)

    def select_at(self, point: Any) -> Location | None:
        """Select the location under a map click."""
        return self.selection.select_by_coordinates(point, self._locations, SelectionSource.MAP)

    def deselect(self) -> None:
        self.selection.deselect()

    def snapshot(self) -> TaskWorkspaceView:
        return TaskWorkspaceView(
            task=self.task,
            locations=list(self._locations),
            responses=list(self._responses),
            progress=self._progress,
            stats=self.stats,
            markers=self.markers,
            selected_id=self.selection.selected_id,
        )


async def load_task_workspace(
    client: EntuClient,
    task_id: str,
    user_id: str | None = None,
    tolerance: float = DEFAULT_TOLERANCE,
) -> TaskWorkspace:
    """
    Fetch a task with its map locations and the user's responses.

    Without a `user_id` (and none known from authentication) the task's
    responses visible to the current token are used. A task without a map
    yields an empty workspace.

    Raises:
        InvalidEntityIdError: If `task_id` or `user_id` is not an entity id
        EntuError: If any fetch fails
    """
    if user_id:
        validate_entity_id(user_id, "user")

    task = await client.get_task(task_id)
    user_id = user_id or client.user_id

    def fetch_responses():
        if user_id:
            return client.get_user_responses(user_id)
        return client.get_task_responses(task_id)

    if not task.map_id:
        logger.info("Task %s has no map; no locations to visit", task_id)
        return TaskWorkspace(
            task=task,
            responses=responses_for_task(await fetch_responses(), task_id),
            tolerance=tolerance,
        )

    # A failing fetch cancels the other one; callers see the first error as-is
    try:
        async with asyncio.TaskGroup() as group:
            locations_task = group.create_task(client.get_map_locations(task.map_id))
            responses_task = group.create_task(fetch_responses())
    except BaseExceptionGroup as errors:
        raise errors.exceptions[0] from None
    locations, responses = locations_task.result(), responses_task.result()

    return TaskWorkspace(
        task=task,
        locations=locations,
        responses=responses_for_task(responses, task_id),
        tolerance=tolerance,
    )
