"""
ESM Map Tasks.

Location-based learning tasks on top of the Entu CMS: entity property
reading, location normalization, visit progress, map marker state and the
shared map/list selection.
"""

__version__ = "0.1.0"
