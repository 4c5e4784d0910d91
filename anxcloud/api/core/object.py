"""Resource capability protocol.

Architecture:
    A resource description is a pydantic model instance the caller passes to
    the generic API. The only required capability is endpoint_url(); every
    other step of the request/response pipeline can be customized by
    implementing one of the optional hook protocols below. The dispatcher
    checks for each hook with isinstance() right before the step it
    customizes.

    Fields are annotated for the generic API through pydantic field metadata,
    see tagged(). Exactly one field, at any embedding depth, is tagged as the
    identifier.

Design Decisions:
    - Runtime-checkable protocols: bindings implement only the hooks they need,
      without a base class or registration
    - Plain methods: hooks work on in-memory Request/Response values, so they
      stay synchronous
    - Metadata tags: the identifier tag lives in json_schema_extra, next to the
      field definition

See Also:
    - get_object_identifier: Scans models for the identifier tag
    - API: Invokes the hooks
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import Field

if TYPE_CHECKING:
    from yarl import URL

    from ..runtime.rest.messages import Request, Response
    from .context import OperationContext

# json_schema_extra key holding the generic API tag of a field
TAG_KEY = "anxcloud"

# The field holds the identifier of the object
TAG_IDENTIFIER = "identifier"

# The field holds a nested model whose fields count as fields of the outer model
TAG_EMBEDDED = "embedded"

# The field can be used by bindings to build List filters
TAG_FILTERABLE = "filterable"


def tagged(tag: str, default: Any = ..., **kwargs: Any) -> Any:
    """Define a model field carrying a generic API tag.

    Example:
        >>> class Location(BaseModel):
        ...     identifier: str = tagged("identifier", "")
        ...     name: str = ""
    """
    extra = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[TAG_KEY] = tag
    if "default_factory" in kwargs:
        return Field(json_schema_extra=extra, **kwargs)
    return Field(default, json_schema_extra=extra, **kwargs)


class RawMessage(bytes):
    """Undecoded JSON encoding of a single record."""


@runtime_checkable
class Object(Protocol):
    """Interface every object passed to the generic API implements.

    The request URL is the client base URL joined with the path returned here;
    single-object operations get the identifier appended. APIs with other URL
    schemes implement FilterRequestURLHook or RequestFilterHook.
    """

    def endpoint_url(self, ctx: OperationContext) -> str: ...


@runtime_checkable
class RequestFilterHook(Protocol):
    """Modify requests before they are sent to the engine."""

    def filter_api_request(self, ctx: OperationContext, request: Request) -> Request: ...


@runtime_checkable
class RequestBodyHook(Protocol):
    """Return the object sent as request body instead of the object itself."""

    def filter_api_request_body(self, ctx: OperationContext) -> Any: ...


@runtime_checkable
class FilterRequestURLHook(Protocol):
    """Return the request URL to use instead of the generated one."""

    def filter_request_url(self, ctx: OperationContext, url: URL) -> URL: ...


@runtime_checkable
class ResponseFilterHook(Protocol):
    """Modify responses before they are decoded."""

    def filter_api_response(self, ctx: OperationContext, response: Response) -> Response: ...


@runtime_checkable
class ResponseDecodeHook(Protocol):
    """Decode the API response into the object this is called on."""

    def decode_api_response(self, ctx: OperationContext, data: bytes) -> None: ...


@runtime_checkable
class PaginationSupportHook(Protocol):
    """Declare whether the addressed List endpoint supports pagination.

    Mind filters applied in endpoint_url(), which may address different
    endpoints with different pagination support.
    """

    def has_pagination(self, ctx: OperationContext) -> bool: ...
