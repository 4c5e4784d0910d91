"""Streaming List results through an async iterator of object retrievers.

Architecture:
    An ObjectChannel is passed to API.list() with the AsObjectChannel option.
    The listing then runs in one background task that pulls pages from a
    private PageIter and hands out one ObjectRetriever per record. Consumers
    iterate the channel and call each retriever with the object to decode the
    record into:

        async with ObjectChannel() as channel:
            await api.list(ctx, Backend(), AsObjectChannel(channel))
            async for retrieve in channel:
                backend = Backend()
                await retrieve(backend)

Handoff:
    The background task offers a retriever and waits until it was invoked
    before offering the next one (or until the context is cancelled). At most
    one retriever is outstanding, records are delivered in order, and the
    consumer has finished decoding record n before record n+1 is produced.

    The channel is closed exactly once: after the last page, after an error
    (see ObjectChannel.error) or on cancellation. A channel neither drained
    nor closed leaks its background task; every retriever received must be
    invoked.

See Also:
    - PageIter: Page iteration the channel is built on
    - API.list: Starts the background task
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, TypeVar

from ..config import JSON_MEDIA_TYPE, LIST_CHANNEL_DEFAULT_PAGE_SIZE
from ..core.context import Context, OperationContext
from ..core.exceptions import (
    CannotListChannelAndPagedError,
    ObjectChannelNotReadyError,
    RetrieverConsumedError,
)
from ..core.object import RawMessage
from ..core.options import ListOptions
from .codec import decode_response
from .pagination import PageInfo

if TYPE_CHECKING:
    from .dispatcher import API

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class _ChannelCancelled(Exception):
    pass


class ObjectRetriever:
    """Single-use decoder for one listed record.

    Attributes:
        data: Raw JSON of the record
    """

    def __init__(self, ctx: OperationContext, data: RawMessage, api: API | None = None) -> None:
        self.data = data
        self._ctx = ctx
        self._api = api
        self._used = False
        self._retrieved = asyncio.Event()

    async def __call__(self, out: Any) -> None:
        """Decode the record into out, retrieving the full object if configured.

        Raises:
            RetrieverConsumedError: The retriever was invoked before
        """
        if self._used:
            raise RetrieverConsumedError()
        self._used = True

        try:
            decode_response(self._ctx, JSON_MEDIA_TYPE, self.data, out)
            if self._api is not None:
                await self._api.get(self._ctx.ctx, out)
        finally:
            self._retrieved.set()

    async def wait_retrieved(self) -> None:
        await self._retrieved.wait()


class ObjectChannel:
    """Async iterator of ObjectRetrievers filled by a List operation."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=1)
        self._ctx: Context | None = None
        self._page_info: PageInfo | None = None
        self._task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def error(self) -> Exception | None:
        """Error that stopped the listing, if any."""
        return self._page_info.error if self._page_info is not None else None

    def prepare(self, ctx: Context, options: ListOptions) -> Context:
        """Configure the List options for channel delivery.

        Without explicit paging, pages of LIST_CHANNEL_DEFAULT_PAGE_SIZE objects
        starting at page 1 are used.

        Returns:
            The cancellable context the listing has to run in

        Raises:
            CannotListChannelAndPagedError: The PageInfo iterator was requested, too
        """
        if not options.paged:
            options.paged = True
            options.page = 1
            options.entries_per_page = LIST_CHANNEL_DEFAULT_PAGE_SIZE
        elif options.page_info:
            # The single page iterator is consumed by the channel
            raise CannotListChannelAndPagedError()

        self._ctx = ctx.with_cancel()
        return self._ctx

    def start(self, ctx: OperationContext, page_info: PageInfo, api: API | None = None) -> None:
        """Start the background task listing objects from page_info.

        Args:
            ctx: Context of the List operation
            page_info: Iterator positioned before the first page
            api: API to retrieve full objects with, None to hand out listed data only
        """
        self._page_info = page_info
        self._task = asyncio.create_task(self._run(ctx, page_info, api))

    def __aiter__(self) -> ObjectChannel:
        if self._task is None:
            raise ObjectChannelNotReadyError()
        return self

    async def __anext__(self) -> ObjectRetriever:
        item = await self._queue.get()
        if item is _CLOSED:
            # keep the channel closed for later readers
            self._queue.put_nowait(_CLOSED)
            raise StopAsyncIteration
        return item

    async def close(self) -> None:
        """Abort listing objects and wait for the background task to finish."""
        if self._ctx is None:
            raise ObjectChannelNotReadyError()

        self._ctx.cancel()
        if self._task is not None:
            await self._task

    async def __aenter__(self) -> ObjectChannel:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._ctx is not None and not self._closed:
            await self.close()

    async def _unless_cancelled(self, aw: Awaitable[T]) -> T:
        if self._ctx is None:
            raise ObjectChannelNotReadyError()
        work = asyncio.ensure_future(aw)
        cancelled = asyncio.ensure_future(self._ctx.wait_cancelled())

        try:
            done, _ = await asyncio.wait({work, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            cancelled.cancel()

        if work not in done:
            work.cancel()
            raise _ChannelCancelled()

        return work.result()

    async def _run(self, ctx: OperationContext, page_info: PageInfo, api: API | None) -> None:
        page: list[RawMessage] = []

        try:
            while await self._unless_cancelled(page_info.next(page, RawMessage)):
                for record in page:
                    retriever = ObjectRetriever(ctx, record, api)
                    await self._unless_cancelled(self._queue.put(retriever))
                    await self._unless_cancelled(retriever.wait_retrieved())

                ctx.logger.debug(
                    "Retrieving next page", extra={"page": page_info.current_page + 1}
                )

            if page_info.error is not None:
                ctx.logger.warning(
                    "Listing via object channel stopped by error: %s", page_info.error
                )
        except _ChannelCancelled:
            ctx.logger.debug("Listing via object channel cancelled")
        finally:
            self._close_queue()
            # detaches the listing context from the caller's
            if self._ctx is not None:
                self._ctx.cancel()

    def _close_queue(self) -> None:
        if self._closed:
            return
        self._closed = True

        # a retriever not taken before cancellation is dropped
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)
        logger.debug("Object channel closed")
