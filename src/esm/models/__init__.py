"""
ESM Map Tasks models.

Exports all Pydantic models for easy importing.
"""

# Entity
from .entity import Entity, EntityType, EntuProperty, parse_entities

# Location
from .location import Coordinates, Location

# Progress
from .progress import MarkerIcon, MarkerState, Progress, TaskStats

# Response
from .response import Response

# Task
from .task import Task

# Workspace
from .workspace import TaskWorkspaceView

__all__ = [
    # Entity
    "Entity",
    "EntityType",
    "EntuProperty",
    "parse_entities",
    # Location
    "Coordinates",
    "Location",
    # Progress
    "MarkerIcon",
    "MarkerState",
    "Progress",
    "TaskStats",
    # Response
    "Response",
    # Task
    "Task",
    # Workspace
    "TaskWorkspaceView",
]
