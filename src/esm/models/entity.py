"""
Entity models for the Entu CMS.

Entu stores every field as an ordered array of property-value objects,
which is how it supports multi-valued and multi-language fields:

    {
        "_id": "6869...",
        "name": [{"_id": "...", "string": "Museum", "language": "et"}],
        "lat": [{"_id": "...", "number": 59.437}],
    }

These models are read-only snapshots. Entities are created and destroyed by
the CMS; this package only reads what the API returns.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class EntityType(str, Enum):
    """Entity type names used in `_type.string` queries."""

    RESPONSE = "vastus"
    TASK = "ulesanne"
    LOCATION = "asukoht"
    MAP = "kaart"
    GROUP = "grupp"


# ============================================================================
# Property values
# ============================================================================


class EntuProperty(BaseModel):
    """
    One element of an entity property array.

    Only one of the scalar fields is normally set. Values of the wrong type
    are coerced to None instead of failing validation so a single malformed
    field never makes a whole entity unreadable.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    id: str | None = Field(default=None, alias="_id")
    type: str | None = None
    string: str | None = None
    number: float | None = None
    boolean: bool | None = None
    reference: str | None = None
    datetime: str | None = None
    language: str | None = None
    entity_type: str | None = None
    filename: str | None = None
    filesize: int | None = None
    filetype: str | None = None

    @field_validator(
        "id",
        "type",
        "string",
        "reference",
        "datetime",
        "language",
        "entity_type",
        "filename",
        "filetype",
        mode="before",
    )
    @classmethod
    def _text_or_none(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("number", mode="before")
    @classmethod
    def _number_or_none(cls, value: Any) -> float | None:
        # bool is an int subclass; a boolean is never a coordinate
        if isinstance(value, bool):
            return None
        if isinstance(value, int | float):
            try:
                return float(value)
            except OverflowError:
                # integer beyond float range
                return None
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return None
        return None

    @field_validator("boolean", mode="before")
    @classmethod
    def _bool_or_none(cls, value: Any) -> bool | None:
        return value if isinstance(value, bool) else None

    @field_validator("filesize", mode="before")
    @classmethod
    def _size_or_none(cls, value: Any) -> int | None:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(value)


# ============================================================================
# Entities
# ============================================================================


class Entity(BaseModel):
    """Generic CMS record: an opaque id plus named property arrays."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., alias="_id", min_length=1)
    properties: dict[str, list[EntuProperty]] = Field(default_factory=dict)

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "Entity":
        """
        Build an entity from the JSON the Entu API returns.

        Every list-valued key becomes a property, including system
        properties such as `_type`, `_parent` and `_owner`. Empty arrays and
        non-object array items are dropped, so a present key always has at
        least one value.
        """
        properties: dict[str, list[EntuProperty]] = {}
        for key, values in raw.items():
            if key == "_id" or not isinstance(values, list):
                continue
            entries = [EntuProperty.model_validate(v) for v in values if isinstance(v, Mapping)]
            if entries:
                properties[key] = entries

        return cls(id=raw.get("_id"), properties=properties)

    def get(self, name: str) -> list[EntuProperty] | None:
        """Return the property array for `name`, or None when absent."""
        return self.properties.get(name) or None

    def has(self, name: str) -> bool:
        return name in self.properties


def parse_entities(raws: Iterable[Any]) -> list[Entity]:
    """
    Parse a batch of raw API entities, skipping records without a usable id.

    One broken record must not hide the rest of a search result.
    """
    entities: list[Entity] = []
    for raw in raws:
        if not isinstance(raw, Mapping):
            logger.debug("Skipping non-object entity payload: %r", raw)
            continue
        try:
            entities.append(Entity.from_api(raw))
        except ValidationError as e:
            logger.warning("Skipping malformed entity %r: %s", raw.get("_id"), e)
    return entities
