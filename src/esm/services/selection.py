"""
Selection synchronizer.

Keeps the single "selected location" shared by the map and the location
list. Either side can select; both observe the same value.

Identity is the location id. Raw map clicks only carry coordinates, so those
are matched against known locations with a small tolerance (about one metre)
because the map library and the CMS round coordinates differently.
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from enum import Enum
from typing import Any

from esm.models import Coordinates, Location
from esm.services.locations import display_name, make_coordinates

logger = logging.getLogger(__name__)

# ~1 m at the equator
DEFAULT_TOLERANCE = 0.00001

SelectionListener = Callable[[Location | None], None]


class SelectionSource(str, Enum):
    """Where a selection intent came from."""

    MAP = "map"
    LIST = "list"


# ============================================================================
# Matching helpers
# ============================================================================


def coordinates_of(value: Any) -> Coordinates | None:
    """
    Extract coordinates from the shapes map and list widgets hand around.

    Accepts a Location, Coordinates, a `{lat, lng}` or
    `{latitude, longitude}` mapping, a `[lat, lng]` pair, or a mapping with
    a nested `coordinates` / `coords` entry.
    """
    if value is None:
        return None
    if isinstance(value, Coordinates):
        return value
    if isinstance(value, Location):
        return value.coordinates

    if isinstance(value, Mapping):
        if "lat" in value and "lng" in value:
            return _coerce(value["lat"], value["lng"])
        if "latitude" in value and "longitude" in value:
            return _coerce(value["latitude"], value["longitude"])
        if "coordinates" in value:
            return coordinates_of(value["coordinates"])
        if "coords" in value:
            return coordinates_of(value["coords"])
        return None

    if isinstance(value, Sequence) and not isinstance(value, str) and len(value) >= 2:
        return _coerce(value[0], value[1])

    return None


def _coerce(lat: Any, lng: Any) -> Coordinates | None:
    try:
        return make_coordinates(float(lat), float(lng))
    except (TypeError, ValueError):
        return None


def is_same_location(a: Any, b: Any, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """True when both points resolve and differ by less than `tolerance` on each axis."""
    first, second = coordinates_of(a), coordinates_of(b)
    if first is None or second is None:
        return False
    return abs(first.lat - second.lat) < tolerance and abs(first.lng - second.lng) < tolerance


def find_matching_location(
    target: Any, locations: Iterable[Location], tolerance: float = DEFAULT_TOLERANCE
) -> Location | None:
    """First location at the same point as `target`, or None."""
    for location in locations:
        if is_same_location(target, location, tolerance):
            return location
    return None


def location_identifier(location: Location | None) -> str:
    """Short label for logs, e.g. `Museum (59.43700, 24.74500)`."""
    if location is None:
        return "none"
    return f"{display_name(location)} ({location.coordinates})"


# ============================================================================
# Shared selection
# ============================================================================


class SelectionState:
    """
    The one selected location of a task screen.

    Two states: nothing selected, or one location selected. Selecting the
    location that is already selected does nothing; it does not toggle the
    selection off. Listeners run only when the selection actually changes.
    """

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        self.tolerance = tolerance
        self._selected: Location | None = None
        self._listeners: list[SelectionListener] = []

    @property
    def selected(self) -> Location | None:
        return self._selected

    @property
    def selected_id(self) -> str | None:
        return self._selected.id if self._selected else None

    def is_selected(self, location_id: str) -> bool:
        return self.selected_id == location_id

    def select(self, location: Location, source: SelectionSource | None = None) -> Location:
        if self._selected is not None and self._selected.id == location.id:
            return self._selected

        self._selected = location
        logger.debug(
            "Selected %s from %s",
            location_identifier(location),
            source.value if source else "code",
        )
        self._notify()
        return location

    def select_by_id(
        self,
        location_id: str,
        locations: Iterable[Location],
        source: SelectionSource | None = None,
    ) -> Location | None:
        """Select the location with `location_id`; unknown ids change nothing."""
        for location in locations:
            if location.id == location_id:
                return self.select(location, source)
        return None

    def select_by_coordinates(
        self,
        point: Any,
        locations: Iterable[Location],
        source: SelectionSource | None = SelectionSource.MAP,
    ) -> Location | None:
        """Select the location at `point`; clicks that match nothing change nothing."""
        match = find_matching_location(point, locations, self.tolerance)
        if match is None:
            return None
        return self.select(match, source)

    def deselect(self) -> None:
        if self._selected is None:
            return
        self._selected = None
        self._notify()

    # Navigating away from the task clears the selection
    reset = deselect

    def rebind(self, locations: Iterable[Location]) -> Location | None:
        """
        Re-point the selection at a freshly loaded location list.

        Keeps the selection when its id is still present (swapping in the
        new object silently) and clears it otherwise.
        """
        if self._selected is None:
            return None

        for location in locations:
            if location.id == self._selected.id:
                self._selected = location
                return location

        self.deselect()
        return None

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Register an observer; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._selected)
