"""
API routes for ESM Map Tasks.

Provides read-only endpoints for:
- Locations: normalized locations of a map
- Progress: visited/total for a task and user
- Markers: per-location map state, with an optional selected location
- Workspace: the full task screen snapshot
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from esm.api.auth import get_entu_client
from esm.entu.client import EntityNotFoundError, EntuAuthError, EntuClient, EntuError
from esm.models import Location, MarkerState, TaskStats, TaskWorkspaceView
from esm.services.workspace import TaskWorkspace, load_task_workspace
from esm.settings import Settings, get_settings
from esm.utils.ids import InvalidEntityIdError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["tasks"])


# =============================================================================
# Response Models
# =============================================================================


class LocationsResponse(BaseModel):
    """Locations of one map."""

    map_id: str
    locations: list[Location]
    count: int


class ProgressResponse(BaseModel):
    """Visit progress for one task."""

    task_id: str
    visited_ids: list[str] = Field(..., description="Visited location ids, sorted")
    visited_count: int
    total_count: int
    percent: float = Field(..., description="Unrounded percentage")
    rounded_percent: int
    stats: TaskStats = Field(
        ..., description="Visited locations against the expected response count"
    )


class MarkersResponse(BaseModel):
    """Map marker states for one task."""

    task_id: str
    selected_id: str | None = None
    markers: list[MarkerState]
    progress: ProgressResponse


# =============================================================================
# Helpers
# =============================================================================


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, InvalidEntityIdError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, EntuAuthError):
        return HTTPException(status_code=401, detail=str(e))
    if isinstance(e, EntityNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    logger.error("Entu request failed: %s", e)
    return HTTPException(status_code=502, detail="Failed to communicate with Entu API")


async def _load(
    client: EntuClient, task_id: str, user_id: str | None, settings: Settings
) -> TaskWorkspace:
    try:
        return await load_task_workspace(
            client, task_id, user_id, tolerance=settings.coordinate_tolerance
        )
    except (InvalidEntityIdError, EntuError) as e:
        raise _http_error(e) from e


def _progress_response(workspace: TaskWorkspace) -> ProgressResponse:
    progress = workspace.progress
    return ProgressResponse(
        task_id=workspace.task.id,
        visited_ids=sorted(progress.visited_ids),
        visited_count=progress.visited_count,
        total_count=progress.total_count,
        percent=progress.percent,
        rounded_percent=progress.rounded_percent,
        stats=workspace.stats,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/locations/{map_id}", response_model=LocationsResponse)
async def get_locations(
    map_id: str,
    client: EntuClient = Depends(get_entu_client),
) -> LocationsResponse:
    """Get the coordinate-valid locations of a map."""
    try:
        locations = await client.get_map_locations(map_id)
    except (InvalidEntityIdError, EntuError) as e:
        raise _http_error(e) from e

    logger.info("Loaded %d locations for map %s", len(locations), map_id)
    return LocationsResponse(map_id=map_id, locations=locations, count=len(locations))


@router.get("/tasks/{task_id}/progress", response_model=ProgressResponse)
async def get_task_progress(
    task_id: str,
    user_id: str | None = Query(None, description="Respondent; defaults to the token's user"),
    client: EntuClient = Depends(get_entu_client),
    settings: Settings = Depends(get_settings),
) -> ProgressResponse:
    """Get how many of a task's locations the user has visited."""
    workspace = await _load(client, task_id, user_id, settings)
    return _progress_response(workspace)


@router.get("/tasks/{task_id}/markers", response_model=MarkersResponse)
async def get_task_markers(
    task_id: str,
    user_id: str | None = Query(None),
    selected: str | None = Query(None, description="Location id to mark as selected"),
    client: EntuClient = Depends(get_entu_client),
    settings: Settings = Depends(get_settings),
) -> MarkersResponse:
    """Get marker states for a task's map."""
    workspace = await _load(client, task_id, user_id, settings)
    if selected:
        workspace.select_location_id(selected)

    return MarkersResponse(
        task_id=task_id,
        selected_id=workspace.selection.selected_id,
        markers=workspace.markers,
        progress=_progress_response(workspace),
    )


@router.get("/tasks/{task_id}/workspace", response_model=TaskWorkspaceView)
async def get_task_workspace(
    task_id: str,
    user_id: str | None = Query(None),
    client: EntuClient = Depends(get_entu_client),
    settings: Settings = Depends(get_settings),
) -> TaskWorkspaceView:
    """Get the full task screen: task, locations, responses, progress, markers."""
    workspace = await _load(client, task_id, user_id, settings)
    return workspace.snapshot()
