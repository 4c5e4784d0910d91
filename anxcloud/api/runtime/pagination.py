"""Page-by-page iteration over List results.

Architecture:
    Paged List operations return a PageInfo iterator. The iterator is built
    from the first page, already fetched by API.list(), and a fetcher that
    retrieves any other page by number. Each call to next() advances exactly
    one page and decodes its records into a caller-provided list.

Wire Formats:
    Engine APIs answer paged List requests in one of three shapes, detected
    independently for every page, in this order:
    - Envelope: {"state": ..., "messages": [...], "data": {<page object>}}
    - Page object: {"page", "total_pages", "total_items", "limit", "data": [...]}
    - Bare array: [...], page and limit are taken from the request since the
      response carries none

    Detection is strict: unknown fields and mistyped values reject a shape, so
    a completely different response cannot be decoded into one of them by
    accident.

Error Handling:
    Errors are sticky: next() returns False until reset_error() is called.
    Every failed fetch of the same page increments a retry counter; once it
    reaches MAX_PAGE_FETCH_RETRY the error can no longer be reset.

See Also:
    - API.list: Creates PageIter instances
    - ObjectChannel: Streams the records of a private PageIter
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ..config import MAX_PAGE_FETCH_RETRY
from ..core.context import OperationContext
from ..core.exceptions import PageResponseNotSupportedError, TypeNotSupportedError
from ..core.object import Object, RawMessage
from .codec import decode_record

# Retrieves the raw response body of the given page
PageFetcher = Callable[[int], Awaitable[bytes]]


class _PageBody(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    page: int = Field(0, ge=0)
    total_pages: int = Field(0, ge=0)
    total_items: int = Field(0, ge=0)
    limit: int = Field(0, ge=0)
    data: list[Any] | None


class _EnvelopeBody(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    state: str = ""
    messages: list[str] = Field(default_factory=list)
    data: _PageBody


_ARRAY_BODY = TypeAdapter(list[Any])


@dataclass(frozen=True)
class PageResponse:
    """One decoded page of a List response."""

    page: int
    limit: int
    total_pages: int
    total_items: int
    data: list[RawMessage]


def _raw_records(records: list[Any] | None) -> list[RawMessage]:
    return [RawMessage(json.dumps(record).encode()) for record in records or []]


def decode_pagination_response_body(data: bytes, page: int, limit: int) -> PageResponse:
    """Decode a paged response body in any of the supported formats.

    Args:
        data: Raw response body
        page: Requested page, reported for bare array responses
        limit: Requested page size, reported for bare array responses

    Raises:
        PageResponseNotSupportedError: The body matches none of the formats
    """
    body: _PageBody | None = None

    try:
        body = _EnvelopeBody.model_validate_json(data).data
    except ValidationError:
        try:
            body = _PageBody.model_validate_json(data)
        except ValidationError:
            pass

    if body is not None:
        return PageResponse(
            page=body.page,
            limit=body.limit,
            total_pages=body.total_pages,
            total_items=body.total_items,
            data=_raw_records(body.data),
        )

    try:
        records = _ARRAY_BODY.validate_json(data, strict=True)
    except ValidationError:
        raise PageResponseNotSupportedError() from None

    return PageResponse(
        page=page, limit=limit, total_pages=0, total_items=0, data=_raw_records(records)
    )


class PageInfo(ABC):
    """Information about the current page and a way to iterate over the following ones."""

    @property
    @abstractmethod
    def current_page(self) -> int:
        """1-based number of the last page processed in next()."""

    @property
    @abstractmethod
    def total_pages(self) -> int:
        """Total number of pages if supported by the API, 0 otherwise."""

    @property
    @abstractmethod
    def total_items(self) -> int:
        """Total number of items if supported by the API, 0 otherwise."""

    @property
    @abstractmethod
    def items_per_page(self) -> int:
        """Desired number of items per page."""

    @abstractmethod
    async def next(self, objects: list[Any], kind: type[Any] = RawMessage) -> bool:
        """Retrieve the next page, storing its decoded records in objects."""

    @property
    @abstractmethod
    def error(self) -> Exception | None:
        """Error preventing next() from continuing."""

    @abstractmethod
    def reset_error(self) -> None:
        """Clear the error; some errors cannot be cleared, check error afterwards."""


def _is_supported_kind(kind: Any) -> bool:
    if not isinstance(kind, type):
        return False
    if issubclass(kind, RawMessage):
        return True
    return issubclass(kind, BaseModel) and issubclass(kind, Object)


class PageIter(PageInfo):
    """PageInfo implementation backed by a page fetcher.

    The first call to next() yields the records of the page the iterator was
    created with, so List and iterating together observe every record once.
    """

    def __init__(
        self,
        ctx: OperationContext,
        response_body: bytes,
        page: int,
        limit: int,
        fetcher: PageFetcher,
        *,
        single_page: bool = False,
    ) -> None:
        first = decode_pagination_response_body(response_body, page, limit)

        self._ctx = ctx
        self._current_page = max(first.page - 1, 0)
        self._total_pages = first.total_pages
        self._total_items = first.total_items
        self._items_per_page = first.limit

        self._fetcher = fetcher
        self._first_page: list[RawMessage] | None = first.data
        self._single_page = single_page
        self._exhausted = False

        self._error: Exception | None = None
        self._retry_counter = 0

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def total_pages(self) -> int:
        return self._total_pages

    @property
    def total_items(self) -> int:
        return self._total_items

    @property
    def items_per_page(self) -> int:
        return self._items_per_page

    @property
    def error(self) -> Exception | None:
        return self._error

    def reset_error(self) -> None:
        if self._retry_counter < MAX_PAGE_FETCH_RETRY:
            self._error = None

    async def next(self, objects: list[Any], kind: type[Any] = RawMessage) -> bool:
        """Retrieve the next page of records.

        Args:
            objects: List replaced with the records of the page
            kind: Model class implementing Object to decode records into, or
                RawMessage to keep them undecoded

        Returns:
            True when another page was retrieved, False on completion or error.
            Check error after False to tell both apart.
        """
        if self._error is not None:
            return False

        if not isinstance(objects, list) or not _is_supported_kind(kind):
            self._error = TypeNotSupportedError(
                "next() takes a list and a model class implementing Object or RawMessage; "
                f"got {type(objects).__name__} of {kind!r}"
            )
            return False

        if self._exhausted:
            return False

        page = self._current_page + 1

        try:
            if self._first_page is not None:
                records, self._first_page = self._first_page, None
            else:
                body = await self._fetcher(page)
                records = decode_pagination_response_body(body, page, self._items_per_page).data

            if issubclass(kind, RawMessage):
                decoded: list[Any] = list(records)
            else:
                decoded = [decode_record(self._ctx, kind, record) for record in records]
        except Exception as e:
            self._retry_counter += 1
            self._error = e
            return False

        objects[:] = decoded
        retrieved = len(decoded)

        if self._items_per_page > 0 and retrieved > self._items_per_page:
            self._ctx.logger.info(
                "Retrieved more elements in one next() than wanted",
                extra={"wanted": self._items_per_page, "retrieved": retrieved},
            )
        else:
            self._ctx.logger.debug(
                "Retrieved elements from engine",
                extra={"limit": self._items_per_page, "retrieved": retrieved},
            )

        self._retry_counter = 0
        self._current_page = page

        if retrieved == 0:
            self._exhausted = True
            return False

        if (
            self._single_page
            or retrieved < self._items_per_page
            or (self._total_pages > 0 and page >= self._total_pages)
        ):
            self._exhausted = True

        return True
