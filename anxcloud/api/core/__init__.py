"""Core components."""

from .context import Context, OperationContext
from .enums import Operation
from .exceptions import (
    AccessDeniedError,
    APIError,
    CannotListChannelAndPagedError,
    ContextRequiredError,
    HTTPError,
    KeyAlreadySetError,
    KeyNotSetError,
    NotFoundError,
    ObjectChannelNotReadyError,
    ObjectIdentifierTypeNotSupportedError,
    ObjectWithMultipleIdentifierError,
    ObjectWithoutIdentifierError,
    OperationNotSupportedError,
    OptionNotSupportedError,
    PageResponseNotSupportedError,
    RateLimitError,
    RetrieverConsumedError,
    TaggingFailedError,
    TransportError,
    TypeNotSupportedError,
    UnidentifiedObjectError,
    UnsupportedResponseFormatError,
    error_from_response,
    ignore_not_found,
    is_rate_limit_error,
)
from .identifier import get_object_identifier
from .object import (
    TAG_EMBEDDED,
    TAG_FILTERABLE,
    TAG_IDENTIFIER,
    FilterRequestURLHook,
    Object,
    PaginationSupportHook,
    RawMessage,
    RequestBodyHook,
    RequestFilterHook,
    ResponseDecodeHook,
    ResponseFilterHook,
    tagged,
)
from .options import (
    AnyOption,
    AsObjectChannel,
    AutoTag,
    CreateOptions,
    DestroyOptions,
    EnvironmentOption,
    FullObjects,
    GetOptions,
    ListOptions,
    Options,
    Paged,
    UpdateOptions,
    get_environment_path_segment,
)

__all__ = [
    "Context",
    "OperationContext",
    "Operation",
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
    "error_from_response",
    "ignore_not_found",
    "is_rate_limit_error",
    # Objects
    "get_object_identifier",
    "tagged",
    "TAG_IDENTIFIER",
    "TAG_EMBEDDED",
    "TAG_FILTERABLE",
    "RawMessage",
    "Object",
    "RequestFilterHook",
    "RequestBodyHook",
    "FilterRequestURLHook",
    "ResponseFilterHook",
    "ResponseDecodeHook",
    "PaginationSupportHook",
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
]
