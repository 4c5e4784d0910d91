"""Custom exception hierarchy."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from http import HTTPStatus
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from yarl import URL

    from ..runtime.rest.messages import Request, Response


class APIError(Exception):
    """Base exception for all library errors."""

    pass


# Caller usage errors


class ContextRequiredError(APIError):
    """No context was passed to an API operation."""

    def __init__(self, message: str = "no context given") -> None:
        super().__init__(message)


class TypeNotSupportedError(APIError, TypeError):
    """A value given to the API is of a type it cannot work with."""

    pass


class OperationNotSupportedError(APIError):
    """The requested operation is not supported by the resource type."""

    def __init__(
        self, message: str = "requested operation is not supported by the resource type"
    ) -> None:
        super().__init__(message)


class CannotListChannelAndPagedError(APIError):
    """List was asked to return both a PageInfo iterator and an ObjectChannel."""

    def __init__(
        self,
        message: str = (
            "list with Paged and AsObjectChannel is only valid when not retrieving "
            "the PageInfo iterator via the Paged option"
        ),
    ) -> None:
        super().__init__(message)


class ObjectChannelNotReadyError(APIError):
    """ObjectChannel was used before it was passed to API.list()."""

    def __init__(
        self, message: str = "object channel was not yet passed to a list operation"
    ) -> None:
        super().__init__(message)


class OptionNotSupportedError(APIError, TypeError):
    """An option was given to an operation it does not apply to."""

    pass


class KeyNotSetError(APIError):
    """The requested key is not set on the given Options."""

    def __init__(self, key: str) -> None:
        super().__init__(f"requested key not set on the given Options: {key}")
        self.key = key


class KeyAlreadySetError(APIError):
    """The given key is already set on the given Options."""

    def __init__(self, key: str) -> None:
        super().__init__(f"given key is already set on the given Options: {key}")
        self.key = key


class RetrieverConsumedError(APIError):
    """An ObjectRetriever was invoked a second time."""

    def __init__(self, message: str = "object retriever was already used") -> None:
        super().__init__(message)


# Resource shape errors


class ObjectWithoutIdentifierError(APIError):
    """The object type has no field tagged as identifier."""

    pass


class ObjectWithMultipleIdentifierError(APIError):
    """The object type has more than one field tagged as identifier."""

    pass


class ObjectIdentifierTypeNotSupportedError(APIError):
    """The identifier field is of a type not supported as identifier."""

    pass


class UnidentifiedObjectError(APIError):
    """A single-object operation was requested on an object without identifier value."""

    def __init__(self, message: str = "object has no identifier set") -> None:
        super().__init__(message)


# Transport and protocol errors


class TransportError(APIError):
    """The HTTP request could not be executed."""

    pass


class UnsupportedResponseFormatError(APIError):
    """The engine responded in a format we don't understand."""

    def __init__(self, message: str = "response format is not supported") -> None:
        super().__init__(message)


class PageResponseNotSupportedError(UnsupportedResponseFormatError):
    """A paged response body is not in any of the supported formats."""

    def __init__(
        self, message: str = "paged response invalid: response format is not supported"
    ) -> None:
        super().__init__(message)


class HTTPError(APIError):
    """The engine answered with an error status.

    Subclasses map well-known status codes to specific errors, decoupling error
    handling from the transport protocol. Every instance carries the request
    method, URL and the response status code.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        method: str | None = None,
        url: URL | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.method = method
        self.url = url

    @classmethod
    def from_status(
        cls, status_code: int, method: str | None = None, url: URL | None = None
    ) -> HTTPError:
        """Create an error for the given status, mostly useful for mock-testing."""
        return cls(_status_phrase(status_code), status_code=status_code, method=method, url=url)


class NotFoundError(HTTPError):
    """The given identified object does not exist in the engine."""

    pass


class AccessDeniedError(HTTPError):
    """The used credential is not authorized to do the requested operation."""

    pass


class RateLimitError(HTTPError):
    """The engine rate limited the request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 429,
        method: str | None = None,
        url: URL | None = None,
        retry_after: datetime | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, method=method, url=url)
        # The engine sends no Retry-After header yet, assume 30 minutes
        self.retry_after = retry_after or datetime.now(UTC) + timedelta(minutes=30)


class TaggingFailedError(APIError):
    """Tagging a resource after creating it failed."""

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"failed tagging resource: {cause}")
        self.__cause__ = cause


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"HTTP status {status_code}"


_STATUS_ERRORS: dict[int, tuple[type[HTTPError], str]] = {
    403: (AccessDeniedError, "access to requested resource was denied by the engine"),
    404: (NotFoundError, "requested resource does not exist on the engine"),
    429: (RateLimitError, "rate limited by the engine"),
}


def error_from_response(request: Request, response: Response) -> HTTPError | None:
    """Create the matching HTTPError for the given response, None if it succeeded."""
    specific = _STATUS_ERRORS.get(response.status)
    if specific is not None:
        error_cls, message = specific
        return error_cls(
            message, status_code=response.status, method=request.method, url=request.url
        )

    # Redirects are handled by the transport already
    if response.status > 300:
        return HTTPError(
            "Engine returned an error: "
            f"{response.reason or _status_phrase(response.status)} ({response.status})",
            status_code=response.status,
            method=request.method,
            url=request.url,
        )

    return None


@contextmanager
def ignore_not_found() -> Iterator[None]:
    """Suppress NotFoundError raised inside the block.

    Example:
        >>> with ignore_not_found():
        ...     await api.destroy(ctx, backend)
    """
    try:
        yield
    except NotFoundError:
        pass


def is_rate_limit_error(exc: BaseException) -> bool:
    """Whether the error is a RateLimitError or an HTTPError with status 429."""
    return isinstance(exc, HTTPError) and (
        isinstance(exc, RateLimitError) or exc.status_code == HTTPStatus.TOO_MANY_REQUESTS
    )
