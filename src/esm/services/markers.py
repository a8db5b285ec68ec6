"""
Map marker presenter.

Assigns each location its display flags for the map. Visited and selected
are independent: a visited location that is also selected reports both.
"""

from collections.abc import Iterable

from esm.models import Location, MarkerState


def present_markers(
    locations: Iterable[Location],
    visited_ids: Iterable[str],
    selected_id: str | None = None,
) -> list[MarkerState]:
    """One marker per location, in input order."""
    visited = set(visited_ids)
    return [
        MarkerState(
            location=location,
            is_visited=location.id in visited,
            is_selected=selected_id is not None and location.id == selected_id,
        )
        for location in locations
    ]


def marker_counts(markers: Iterable[MarkerState]) -> dict[str, int]:
    """Count markers by flag, for map legends."""
    counts = {"visited": 0, "unvisited": 0, "selected": 0}
    for marker in markers:
        counts["visited" if marker.is_visited else "unvisited"] += 1
        if marker.is_selected:
            counts["selected"] += 1
    return counts
