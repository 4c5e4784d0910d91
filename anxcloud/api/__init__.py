"""anxcloud-api - Generic client for the Anexia Engine API.

Resource descriptions are pydantic models implementing endpoint_url() and,
optionally, hooks customizing requests and responses. The API dispatches the
operations Get, Create, Update, Destroy and List on them:

    async with API(HTTPClient.from_env()) as api:
        ctx = Context.background()
        backend = Backend(identifier="a57c5a5b1cab4f1c8ff4a0cc6ba9ef64")
        await api.get(ctx, backend)

Ready-made bindings live in anxcloud.api.apis.
"""

import logging

from .core import (
    TAG_EMBEDDED,
    TAG_FILTERABLE,
    TAG_IDENTIFIER,
    AccessDeniedError,
    AnyOption,
    APIError,
    AsObjectChannel,
    AutoTag,
    CannotListChannelAndPagedError,
    ContextRequiredError,
    Context,
    CreateOptions,
    DestroyOptions,
    EnvironmentOption,
    FilterRequestURLHook,
    FullObjects,
    GetOptions,
    HTTPError,
    KeyAlreadySetError,
    KeyNotSetError,
    ListOptions,
    NotFoundError,
    Object,
    ObjectChannelNotReadyError,
    ObjectIdentifierTypeNotSupportedError,
    ObjectWithMultipleIdentifierError,
    ObjectWithoutIdentifierError,
    Operation,
    OperationContext,
    OperationNotSupportedError,
    OptionNotSupportedError,
    Options,
    Paged,
    PageResponseNotSupportedError,
    PaginationSupportHook,
    RateLimitError,
    RawMessage,
    RequestBodyHook,
    RequestFilterHook,
    ResponseDecodeHook,
    ResponseFilterHook,
    RetrieverConsumedError,
    TaggingFailedError,
    TransportError,
    TypeNotSupportedError,
    UnidentifiedObjectError,
    UnsupportedResponseFormatError,
    UpdateOptions,
    get_environment_path_segment,
    get_object_identifier,
    ignore_not_found,
    is_rate_limit_error,
    tagged,
)
from .runtime import (
    API,
    Client,
    HTTPClient,
    ObjectChannel,
    ObjectRetriever,
    PageInfo,
    Request,
    Response,
)

# Library logging is discarded unless the application configures handlers
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "API",
    "Client",
    "HTTPClient",
    "Request",
    "Response",
    "Context",
    "OperationContext",
    "Operation",
    # Objects
    "Object",
    "RawMessage",
    "tagged",
    "TAG_IDENTIFIER",
    "TAG_EMBEDDED",
    "TAG_FILTERABLE",
    "get_object_identifier",
    "RequestFilterHook",
    "RequestBodyHook",
    "FilterRequestURLHook",
    "ResponseFilterHook",
    "ResponseDecodeHook",
    "PaginationSupportHook",
    # Listing
    "PageInfo",
    "ObjectChannel",
    "ObjectRetriever",
    # Options
    "Options",
    "GetOptions",
    "CreateOptions",
    "UpdateOptions",
    "DestroyOptions",
    "ListOptions",
    "AnyOption",
    "Paged",
    "AsObjectChannel",
    "FullObjects",
    "AutoTag",
    "EnvironmentOption",
    "get_environment_path_segment",
    # Errors
    "APIError",
    "ContextRequiredError",
    "TypeNotSupportedError",
    "OperationNotSupportedError",
    "CannotListChannelAndPagedError",
    "ObjectChannelNotReadyError",
    "OptionNotSupportedError",
    "KeyNotSetError",
    "KeyAlreadySetError",
    "RetrieverConsumedError",
    "ObjectWithoutIdentifierError",
    "ObjectWithMultipleIdentifierError",
    "ObjectIdentifierTypeNotSupportedError",
    "UnidentifiedObjectError",
    "TransportError",
    "UnsupportedResponseFormatError",
    "PageResponseNotSupportedError",
    "HTTPError",
    "NotFoundError",
    "AccessDeniedError",
    "RateLimitError",
    "TaggingFailedError",
    "ignore_not_found",
    "is_rate_limit_error",
]
