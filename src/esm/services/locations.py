"""
Location normalizer and geo helpers.

Converts `asukoht` entities into canonical `Location` objects. A location
without usable coordinates can neither be drawn nor matched for visit
tracking, so it is dropped rather than defaulted to (0, 0).
"""

import logging
import math
from collections.abc import Iterable

from esm.models import Coordinates, Entity, Location
from esm.services.properties import get_number, get_string

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

# Entu property names on location entities
PROP_LAT = "lat"
PROP_LNG = "long"
PROP_NAME = "name"
PROP_DESCRIPTION = "kirjeldus"

UNNAMED_LOCATION = "Unnamed location"


def make_coordinates(lat: float | None, lng: float | None) -> Coordinates | None:
    """
    Build coordinates from two optional numbers.

    Returns None when either value is missing, not finite, or outside the
    valid latitude/longitude range.
    """
    if lat is None or lng is None:
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return Coordinates(lat=lat, lng=lng)


def parse_coordinates(text: str | None) -> Coordinates | None:
    """
    Parse a `"lat,lng"` string as stored in response GPS fields.

    Examples:
        >>> parse_coordinates("59.437, 24.745")
        Coordinates(lat=59.437, lng=24.745)
        >>> parse_coordinates("north") is None
        True
    """
    if not text or not isinstance(text, str):
        return None

    parts = [part.strip() for part in text.split(",")]
    if len(parts) != 2:
        return None

    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError:
        return None

    return make_coordinates(lat, lng)


# ============================================================================
# Normalization
# ============================================================================


def normalize_location(entity: Entity) -> Location | None:
    """
    Normalize one location entity.

    Returns None (rejected) when `lat` or `long` is absent or not a finite
    number. Name and description are passed through as-is, None included.
    """
    coordinates = make_coordinates(
        get_number(entity.get(PROP_LAT)),
        get_number(entity.get(PROP_LNG)),
    )
    if coordinates is None:
        return None

    return Location(
        id=entity.id,
        coordinates=coordinates,
        name=get_string(entity.get(PROP_NAME)),
        description=get_string(entity.get(PROP_DESCRIPTION)),
    )


def normalize_locations(entities: Iterable[Entity]) -> list[Location]:
    """Normalize a collection, dropping rejected entries and keeping order."""
    locations: list[Location] = []
    for entity in entities:
        location = normalize_location(entity)
        if location is None:
            logger.debug("Dropping location %s: no valid coordinates", entity.id)
            continue
        locations.append(location)
    return locations


def display_name(location: Location) -> str:
    return location.name or UNNAMED_LOCATION


# ============================================================================
# Distance
# ============================================================================


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points (haversine), in kilometres."""
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def sort_by_distance(
    locations: Iterable[Location], origin: Coordinates | None
) -> list[tuple[Location, float | None]]:
    """
    Order locations nearest-first from `origin`.

    Without an origin the input order is kept and distances are None.
    """
    if origin is None:
        return [(location, None) for location in locations]

    pairs = [(location, distance_km(origin, location.coordinates)) for location in locations]
    pairs.sort(key=lambda pair: pair[1])
    return pairs


def format_distance(km: float) -> str:
    """
    Human-readable distance.

    Examples:
        >>> format_distance(0.005)
        '< 10 m'
        >>> format_distance(0.25)
        '250 m'
        >>> format_distance(3.14)
        '3.1 km'
        >>> format_distance(42.4)
        '42 km'
    """
    if km < 0.01:
        return "< 10 m"
    if km < 1:
        return f"{round(km * 1000)} m"
    if km < 10:
        return f"{km:.1f} km"
    return f"{round(km)} km"
