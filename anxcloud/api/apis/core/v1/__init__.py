"""Core API objects: locations, resources and tags."""

from .location import Location
from .resource import Resource, ResourceType, ResourceWithTag
from .tags import list_tags, tag, untag

__all__ = [
    "Location",
    "Resource",
    "ResourceType",
    "ResourceWithTag",
    "list_tags",
    "tag",
    "untag",
]
