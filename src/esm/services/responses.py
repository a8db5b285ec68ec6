"""
Response normalizer.

Reads `vastus` entities into `Response` objects. Older responses use the
legacy field names (`asukoht`, `geopunkt`, `kirjeldus`); newer ones use
`valitud_asukoht`, `seadme_gps` and `vastus`. The newer field wins when both
are present.
"""

from collections.abc import Iterable

from esm.models import Entity, Response
from esm.services.locations import parse_coordinates
from esm.services.properties import (
    get_created,
    get_parent_reference,
    get_reference,
    get_string,
)

PROP_LOCATION = "valitud_asukoht"
PROP_LOCATION_LEGACY = "asukoht"
PROP_GPS = "seadme_gps"
PROP_GPS_LEGACY = "geopunkt"
PROP_TEXT = "vastus"
PROP_TEXT_LEGACY = "kirjeldus"
PROP_PHOTO = "photo"


def normalize_response(entity: Entity) -> Response:
    """Normalize one response entity. Every field but the id is optional."""
    location_id = get_reference(entity.get(PROP_LOCATION)) or get_reference(
        entity.get(PROP_LOCATION_LEGACY)
    )
    coordinates = parse_coordinates(get_string(entity.get(PROP_GPS))) or parse_coordinates(
        get_string(entity.get(PROP_GPS_LEGACY))
    )
    text = get_string(entity.get(PROP_TEXT)) or get_string(entity.get(PROP_TEXT_LEGACY))

    photos = entity.get(PROP_PHOTO)
    photo_id = photos[0].id if photos else None

    return Response(
        id=entity.id,
        task_id=get_parent_reference(entity),
        location_id=location_id,
        coordinates=coordinates,
        text=text,
        photo_id=photo_id,
        submitted_at=get_created(entity),
    )


def normalize_responses(entities: Iterable[Entity]) -> list[Response]:
    return [normalize_response(entity) for entity in entities]


def responses_for_task(responses: Iterable[Response], task_id: str) -> list[Response]:
    """Keep only the responses submitted against `task_id`."""
    return [response for response in responses if response.task_id == task_id]
