"""
Services for ESM Map Tasks.

Property reading, normalization, visit progress, marker state and selection.
Everything here except the workspace loader is pure and synchronous.
"""

from .locations import (
    display_name,
    distance_km,
    format_distance,
    normalize_location,
    normalize_locations,
    parse_coordinates,
    sort_by_distance,
)
from .markers import marker_counts, present_markers
from .responses import normalize_response, normalize_responses, responses_for_task
from .selection import (
    DEFAULT_TOLERANCE,
    SelectionSource,
    SelectionState,
    find_matching_location,
    is_same_location,
)
from .tasks import normalize_task
from .visits import (
    compute_progress,
    is_location_visited,
    orphaned_references,
    task_stats,
    unvisited_locations,
    visited_location_ids,
)
from .workspace import TaskWorkspace, load_task_workspace

__all__ = [
    # Locations
    "display_name",
    "distance_km",
    "format_distance",
    "normalize_location",
    "normalize_locations",
    "parse_coordinates",
    "sort_by_distance",
    # Markers
    "marker_counts",
    "present_markers",
    # Responses
    "normalize_response",
    "normalize_responses",
    "responses_for_task",
    # Selection
    "DEFAULT_TOLERANCE",
    "SelectionSource",
    "SelectionState",
    "find_matching_location",
    "is_same_location",
    # Tasks
    "normalize_task",
    # Visits
    "compute_progress",
    "is_location_visited",
    "orphaned_references",
    "task_stats",
    "unvisited_locations",
    "visited_location_ids",
    # Workspace
    "TaskWorkspace",
    "load_task_workspace",
]
