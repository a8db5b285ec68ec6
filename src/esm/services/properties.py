"""
Entity property reader.

Extracts typed scalars from Entu's array-of-objects property encoding.
Every property on every entity is optional, so these helpers never raise:
a missing key, a short array and a value of the wrong type all read as
None and call sites supply their own defaults.

Property arrays may hold `EntuProperty` models or raw JSON dicts.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from esm.models import Entity, EntuProperty

PropertyArray = Sequence[EntuProperty | Mapping[str, Any]] | None


def _entry(prop: PropertyArray, index: int) -> EntuProperty | None:
    if not prop or index < 0 or index >= len(prop):
        return None

    entry = prop[index]
    if isinstance(entry, EntuProperty):
        return entry
    if isinstance(entry, Mapping):
        return EntuProperty.model_validate(entry)
    return None


# ============================================================================
# Scalar readers
# ============================================================================


def get_string(prop: PropertyArray, index: int = 0) -> str | None:
    """Return the `string` value at `index`, or None."""
    entry = _entry(prop, index)
    return entry.string if entry else None


def get_number(prop: PropertyArray, index: int = 0) -> float | None:
    """
    Return the `number` value at `index`, or None.

    Missing numbers are None, never 0, so a missing coordinate cannot turn
    into a point on the equator.
    """
    entry = _entry(prop, index)
    return entry.number if entry else None


def get_reference(prop: PropertyArray, index: int = 0) -> str | None:
    """Return the referenced entity id at `index`, or None."""
    entry = _entry(prop, index)
    return entry.reference if entry else None


def get_boolean(prop: PropertyArray, index: int = 0) -> bool | None:
    """Return the `boolean` value at `index`, or None."""
    entry = _entry(prop, index)
    return entry.boolean if entry else None


def get_datetime(prop: PropertyArray, index: int = 0) -> datetime | None:
    """Return the `datetime` value at `index` parsed as ISO-8601, or None."""
    entry = _entry(prop, index)
    if entry is None or not entry.datetime:
        return None
    try:
        return datetime.fromisoformat(entry.datetime)
    except ValueError:
        return None


def get_reference_with_string(prop: PropertyArray, index: int = 0) -> tuple[str, str | None] | None:
    """Return `(reference, display string)` at `index`, or None."""
    entry = _entry(prop, index)
    if entry is None or not entry.reference:
        return None
    return entry.reference, entry.string


# ============================================================================
# Multi-value readers
# ============================================================================


def get_strings(prop: PropertyArray) -> list[str]:
    """All non-empty string values, in order."""
    values = (get_string(prop, i) for i in range(len(prop or ())))
    return [v for v in values if v]


def get_references(prop: PropertyArray) -> list[str]:
    """All non-empty reference ids, in order."""
    values = (get_reference(prop, i) for i in range(len(prop or ())))
    return [v for v in values if v]


# ============================================================================
# System properties
# ============================================================================


def get_entity_type(entity: Entity) -> str | None:
    return get_string(entity.get("_type"))


def get_parent_reference(entity: Entity) -> str | None:
    return get_reference(entity.get("_parent"))


def get_owner_reference(entity: Entity) -> str | None:
    return get_reference(entity.get("_owner"))


def get_created(entity: Entity) -> datetime | None:
    return get_datetime(entity.get("_created"))


def is_public(entity: Entity) -> bool:
    return "public" in get_strings(entity.get("_sharing"))
