"""
Entu CMS access.
"""

from .client import (
    EntityNotFoundError,
    EntuAPIError,
    EntuAuthError,
    EntuClient,
    EntuError,
)

__all__ = [
    "EntuClient",
    "EntuError",
    "EntuAuthError",
    "EntityNotFoundError",
    "EntuAPIError",
]
