"""Tagging helpers working on any identified object."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ....core.context import Context
from ....core.exceptions import HTTPError, ignore_not_found
from ....core.identifier import get_object_identifier
from .resource import Resource, ResourceWithTag

if TYPE_CHECKING:
    from ....runtime.dispatcher import API

logger = logging.getLogger(__name__)


def _resource_with_tag_objects(obj: Any, tags: tuple[str, ...]) -> list[ResourceWithTag]:
    identifier = get_object_identifier(obj, True)
    return [ResourceWithTag(identifier=identifier, tag=tag) for tag in tags]


async def tag(ctx: Context, api: API, obj: Any, *tags: str) -> None:
    """Add tags to the identified object; tags already present are skipped."""
    for resource_tag in _resource_with_tag_objects(obj, tags):
        try:
            await api.create(ctx, resource_tag)
        except HTTPError as e:
            # 422 means the resource is already tagged
            if e.status_code != 422:
                raise
            logger.debug("Resource already tagged", extra={"tag": resource_tag.tag})


async def untag(ctx: Context, api: API, obj: Any, *tags: str) -> None:
    """Remove tags from the identified object; missing tags are ignored."""
    for resource_tag in _resource_with_tag_objects(obj, tags):
        with ignore_not_found():
            await api.destroy(ctx, resource_tag)


async def list_tags(ctx: Context, api: API, obj: Any) -> list[str]:
    """Names of the tags attached to the identified object."""
    resource = Resource(identifier=get_object_identifier(obj, True))
    await api.get(ctx, resource)
    return resource.tags
