"""Generic engine resources and their tags.

Every object created on the engine is also a Resource, identified by the same
identifier. Resources carry the tags of an object; tags are attached and
removed by creating and destroying ResourceWithTag objects.
"""

from __future__ import annotations

import posixpath
from dataclasses import replace

from multidict import CIMultiDict
from pydantic import BaseModel, Field
from yarl import URL

from ....core.context import OperationContext
from ....core.enums import Operation
from ....core.exceptions import OperationNotSupportedError
from ....core.object import TAG_IDENTIFIER, tagged
from ....runtime.codec import update_from_json
from ....runtime.rest.messages import Request, Response

RESOURCE_PATH = "/api/core/v1/resource.json"


class ResourceType(BaseModel):
    identifier: str = ""
    name: str = ""


class Resource(BaseModel):
    """Any object on the engine, with its type and tags.

    List filters by the first entry of tags; Get returns the tags of the
    identified resource. Create, Update and Destroy are not supported.
    """

    identifier: str = tagged(TAG_IDENTIFIER, "", description="Resource identifier")
    name: str = Field("", description="Resource name")
    type: ResourceType = Field(
        default_factory=ResourceType, alias="resource_type", description="Resource type"
    )
    tags: list[str] = Field(default_factory=list, description="Tag names")

    model_config = {"populate_by_name": True}

    def endpoint_url(self, ctx: OperationContext) -> str:
        if ctx.operation in (Operation.CREATE, Operation.UPDATE, Operation.DESTROY):
            raise OperationNotSupportedError()

        if ctx.operation == Operation.LIST and self.tags:
            if len(self.tags) > 1:
                ctx.logger.info("Listing with multiple tags isn't supported, only first one used")
            return str(URL(RESOURCE_PATH).with_query(tag_name=self.tags[0]))

        return RESOURCE_PATH

    def decode_api_response(self, ctx: OperationContext, data: bytes) -> None:
        if ctx.operation != Operation.GET:
            update_from_json(self, data)
            return

        # Get returns tag objects instead of names
        decoded = _APIResource.model_validate_json(data)
        for name in decoded.model_fields_set & set(Resource.model_fields):
            if name != "tags":
                setattr(self, name, getattr(decoded, name))
        self.tags = [tag.name for tag in decoded.tags]


class _APITag(BaseModel):
    identifier: str = ""
    name: str = ""


class _APIResource(Resource):
    tags: list[_APITag] = Field(default_factory=list)  # type: ignore[assignment]


class ResourceWithTag(BaseModel):
    """Attachment of one tag to a resource; supports Create and Destroy only."""

    identifier: str = tagged(TAG_IDENTIFIER, "", description="Identifier of the tagged resource")
    tag: str = Field("", description="Tag name")

    def endpoint_url(self, ctx: OperationContext) -> str:
        if ctx.operation not in (Operation.CREATE, Operation.DESTROY):
            raise OperationNotSupportedError(
                "requested operation is not supported by the resource type: "
                "ResourceWithTag only supports Create and Destroy operations"
            )
        return f"{RESOURCE_PATH}/{self.identifier}/tags/{self.tag}"

    def filter_api_request(self, ctx: OperationContext, request: Request) -> Request:
        # The engine expects neither the identifier suffix nor a body
        endpoint = posixpath.normpath(self.endpoint_url(ctx))
        path = request.url.path
        prefix = path[: path.find(RESOURCE_PATH)] if RESOURCE_PATH in path else ""

        headers = CIMultiDict(
            (k, v)
            for k, v in request.headers.items()
            if k.lower() not in ("content-type", "content-length")
        )
        return Request(
            method=request.method,
            url=request.url.with_path(prefix.rstrip("/") + endpoint),
            headers=headers,
            body=None,
        )

    def filter_api_response(self, ctx: OperationContext, response: Response) -> Response:
        if response.status == 200:
            return replace(response, status=204, body=b"")
        return response
