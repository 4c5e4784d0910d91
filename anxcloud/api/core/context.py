"""Caller context and the operation-scoped parameter object.

Architecture:
    Two layers of context flow through every generic API call:
    - Context: supplied by the caller; carries cancellation and, optionally,
      the logger to use. Cancelling a Context cancels all contexts derived
      from it, which is how background object channel tasks are stopped.
    - OperationContext: built by the dispatcher for one call; carries the
      Operation, the Options bag, the resolved endpoint URL and the logger,
      and is passed explicitly to every resource hook.

Design Decisions:
    - Explicit parameter object: hooks receive everything they may look at as
      typed attributes instead of looking values up by key
    - Immutable OperationContext: with_url() returns a copy, so the context
      given to endpoint_url() never sees a URL
    - Event-based cancellation: background tasks can wait on cancellation
      next to other awaitables

See Also:
    - API: Builds OperationContext instances
    - ObjectChannel: Waits on Context cancellation in its background task
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .enums import Operation

if TYPE_CHECKING:
    from yarl import URL

    from .options import Options

Logger = logging.Logger | logging.LoggerAdapter


class OperationLogger(logging.LoggerAdapter):
    """Logger adapter adding operation values to every record.

    Values passed via extra= on a single call are kept next to the adapter's.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


class Context:
    """Cancellation and logger carrier passed to every API operation."""

    def __init__(self, *, logger: Logger | None = None, parent: Context | None = None) -> None:
        self._logger = logger
        self._parent = parent
        self._cancelled = asyncio.Event()
        self._children: list[Context] = []

        if parent is not None:
            if parent.cancelled:
                self._cancelled.set()
            else:
                parent._children.append(self)

    @classmethod
    def background(cls) -> Context:
        """Return a new root context that is only cancelled explicitly."""
        return cls()

    @property
    def logger(self) -> Logger | None:
        """Logger attached to this context or any of its parents."""
        if self._logger is not None:
            return self._logger
        if self._parent is not None:
            return self._parent.logger
        return None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def with_cancel(self) -> Context:
        """Derive a child context that can be cancelled on its own."""
        return Context(parent=self)

    def with_logger(self, logger: Logger) -> Context:
        """Derive a child context using the given logger."""
        return Context(logger=logger, parent=self)

    def cancel(self) -> None:
        """Cancel this context and everything derived from it."""
        if self._cancelled.is_set():
            return
        self._cancelled.set()
        children, self._children = self._children, []
        for child in children:
            child.cancel()
        if self._parent is not None and self in self._parent._children:
            self._parent._children.remove(self)

    async def wait_cancelled(self) -> None:
        """Block until the context is cancelled."""
        await self._cancelled.wait()


@dataclass(frozen=True)
class OperationContext:
    """Request-scoped parameters for one generic API operation.

    Attributes:
        ctx: Caller context the operation runs in
        operation: Operation being executed
        options: Operation-specific options bag
        logger: Logger carrying operation and resource values
        url: URL returned by the object's endpoint_url(), None while it is resolved
    """

    ctx: Context
    operation: Operation
    options: Options
    logger: OperationLogger
    url: URL | None = None

    def with_url(self, url: URL) -> OperationContext:
        return replace(self, url=url)
