"""
Entity id helpers.

Entu ids are MongoDB ObjectIds: 24 hexadecimal characters.
"""

import re

ENTITY_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


class InvalidEntityIdError(ValueError):
    """Raised when a string is not a valid Entu entity id."""

    pass


def is_entity_id(value: object) -> bool:
    """
    Check whether `value` looks like an Entu entity id.

    Examples:
        >>> is_entity_id("686917401749f351b9c82f58")
        True
        >>> is_entity_id("not-an-id")
        False
    """
    return isinstance(value, str) and ENTITY_ID_PATTERN.fullmatch(value) is not None


def validate_entity_id(value: str, kind: str = "entity") -> str:
    """Return `value` unchanged, or raise InvalidEntityIdError."""
    if not is_entity_id(value):
        raise InvalidEntityIdError(f"Invalid {kind} id: {value!r}")
    return value
