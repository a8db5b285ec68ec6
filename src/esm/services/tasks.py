"""
Task normalizer.
"""

import math

from esm.models import Entity, Task
from esm.services.properties import get_datetime, get_number, get_reference, get_string

PROP_NAME = "name"
PROP_DESCRIPTION = "kirjeldus"
PROP_MAP = "kaart"
PROP_GROUP = "grupp"
PROP_DEADLINE = "tahtaeg"
PROP_EXPECTED_RESPONSES = "vastuseid"


def normalize_task(entity: Entity) -> Task:
    """Normalize an `ulesanne` entity. Missing fields stay None."""
    expected = get_number(entity.get(PROP_EXPECTED_RESPONSES))
    if expected is not None and (not math.isfinite(expected) or expected < 0):
        expected = None

    return Task(
        id=entity.id,
        name=get_string(entity.get(PROP_NAME)),
        description=get_string(entity.get(PROP_DESCRIPTION)),
        map_id=get_reference(entity.get(PROP_MAP)),
        group_id=get_reference(entity.get(PROP_GROUP)),
        deadline=get_datetime(entity.get(PROP_DEADLINE)),
        expected_responses=int(expected) if expected is not None else None,
    )
