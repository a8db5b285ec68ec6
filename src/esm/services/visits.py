"""
Visit aggregator.

Computes which of a task's locations the user has visited and the resulting
progress ratio. A location counts as visited once no matter how many
responses reference it, and references to locations outside the current
set never count.

All functions are pure and never raise; empty inputs give 0/0 -> 0%.
"""

import logging
from collections.abc import Iterable

from esm.models import Location, Progress, Response, Task, TaskStats

logger = logging.getLogger(__name__)


def visited_location_ids(responses: Iterable[Response]) -> set[str]:
    """Unique location references across responses, orphans included."""
    return {response.location_id for response in responses if response.location_id}


def compute_progress(responses: Iterable[Response], locations: Iterable[Location]) -> Progress:
    """
    Compute the visited set and progress for one task.

    Args:
        responses: The current user's responses for the task
        locations: The task's coordinate-valid locations

    Returns:
        Progress whose `visited_ids` only contains ids of known locations.
        `percent` is not rounded.
    """
    locations = list(locations)
    location_ids = {location.id for location in locations}
    referenced = visited_location_ids(responses)
    visited = referenced & location_ids

    orphaned = referenced - location_ids
    if orphaned:
        logger.debug("Ignoring %d response reference(s) to unknown locations", len(orphaned))

    total = len(locations)
    percent = 0.0 if total == 0 else len(visited) / total * 100

    return Progress(
        visited_ids=frozenset(visited),
        visited_count=len(visited),
        total_count=total,
        percent=percent,
    )


def is_location_visited(responses: Iterable[Response], location_id: str) -> bool:
    return location_id in visited_location_ids(responses)


def unvisited_locations(locations: Iterable[Location], visited_ids: Iterable[str]) -> list[Location]:
    """Locations not yet visited, in their original order."""
    visited = set(visited_ids)
    return [location for location in locations if location.id not in visited]


def orphaned_references(responses: Iterable[Response], locations: Iterable[Location]) -> set[str]:
    """Referenced location ids that match no known location."""
    return visited_location_ids(responses) - {location.id for location in locations}


def task_stats(progress: Progress, task: Task) -> TaskStats:
    """
    Visited locations against the task's `expected_responses`.

    A task without an expected count (or with 0) counts as expecting one.
    """
    expected = task.expected_responses or 1
    return TaskStats(
        actual=progress.visited_count,
        expected=expected,
        percent=round(progress.visited_count / expected * 100),
    )
