"""Generic API dispatcher mapping operations on objects to engine requests.

Architecture:
    API is the single entry point of the generic client. Each of its public
    operations builds the options bag for the operation, applies the default
    request options configured on the API and the per-call options, and runs
    the object through the request pipeline:

        identifier -> endpoint_url() -> URL -> body -> RequestFilterHook
        -> client.do() -> ResponseFilterHook -> status check -> decode

    Every step can be customized by the object through the hook protocols in
    core.object. List additionally wraps the response in a PageIter and,
    with the AsObjectChannel option, streams the records through an
    ObjectChannel.

Design Decisions:
    - Transport as a protocol: any object with base_url and async do() can be
      used, which is how tests inject mock transports
    - No automatic retries: errors are raised to the caller, classified by
      status into HTTPError subclasses
    - Return values over out-parameters: list() returns the PageInfo iterator

See Also:
    - Object: Capabilities of the objects passed in
    - PageIter: Iteration over List results
    - ObjectChannel: Streaming List results
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable
from typing import Any

from multidict import CIMultiDict, MultiDict
from yarl import URL

from ..config import REQUEST_CONTENT_TYPE
from ..core.context import Context, Logger, OperationContext, OperationLogger
from ..core.enums import Operation
from ..core.exceptions import (
    APIError,
    ContextRequiredError,
    OperationNotSupportedError,
    TaggingFailedError,
    TransportError,
    TypeNotSupportedError,
    error_from_response,
)
from ..core.identifier import get_object_identifier
from ..core.object import (
    FilterRequestURLHook,
    Object,
    PaginationSupportHook,
    RequestBodyHook,
    RequestFilterHook,
    ResponseFilterHook,
)
from ..core.options import (
    CreateOptions,
    DestroyOptions,
    GetOptions,
    ListOptions,
    Options,
    UpdateOptions,
    apply_options,
)
from .codec import decode_response, encode_body, response_media_type
from .pagination import PageInfo, PageIter
from .rest.http_client import Client, HTTPClient
from .rest.messages import Request, Response

logger = logging.getLogger(__name__)

_METHODS = {
    Operation.GET: "GET",
    Operation.LIST: "GET",
    Operation.CREATE: "POST",
    Operation.UPDATE: "PUT",
    Operation.DESTROY: "DELETE",
}

_BODY_OPERATIONS = (Operation.CREATE, Operation.UPDATE)


class API:
    """Generic client for the engine API.

    Example:
        >>> async with API(HTTPClient.from_env()) as api:
        ...     location = Location(identifier="52b5f6b2fd3a4a7eaaedf1a7c019e9ea")
        ...     await api.get(Context.background(), location)
    """

    def __init__(
        self,
        client: Client | None = None,
        *,
        logger: Logger | None = None,
        request_options: Iterable[Any] = (),
    ) -> None:
        """Initialize the API.

        Args:
            client: Transport to use, an HTTPClient configured from the
                environment if None
            logger: Logger overriding the ones of the context and the client
            request_options: Options applied to every operation supporting them,
                before the per-call options
        """
        self._owns_client = client is None
        if client is None:
            client_logger = logger
            if isinstance(logger, logging.Logger):
                client_logger = logger.getChild("client")
            client = HTTPClient.from_env(logger=client_logger)

        self.client = client
        self._logger = logger
        self._request_options = list(request_options)

    def logger(self, ctx: Context) -> Logger:
        """Logger for operations in the given context.

        The logger given to the API is used first, then the one of the context,
        then the one of the client and finally the library logger.
        """
        if self._logger is not None:
            return self._logger
        if ctx.logger is not None:
            return ctx.logger

        client_logger = getattr(self.client, "logger", None)
        if client_logger is not None:
            return client_logger
        return logger

    async def get(self, ctx: Context, obj: Any, *opts: Any) -> None:
        """Get the identified object from the engine, updating obj in place."""
        if ctx is None:
            raise ContextRequiredError()

        options = GetOptions()
        apply_options(options, Operation.GET, self._request_options, opts)
        await self.do(ctx, obj, obj, options, Operation.GET)

    async def create(self, ctx: Context, obj: Any, *opts: Any) -> None:
        """Create the given object on the engine, updating obj from the response.

        Raises:
            TaggingFailedError: The object was created, but tagging it with the
                tags given via AutoTag failed
        """
        if ctx is None:
            raise ContextRequiredError()

        options = CreateOptions()
        apply_options(options, Operation.CREATE, self._request_options, opts)
        await self.do(ctx, obj, obj, options, Operation.CREATE)

        if options.auto_tags is not None:
            await self._auto_tag(ctx, obj, options.auto_tags)

    async def update(self, ctx: Context, obj: Any, *opts: Any) -> None:
        """Update the identified object on the engine."""
        if ctx is None:
            raise ContextRequiredError()

        options = UpdateOptions()
        apply_options(options, Operation.UPDATE, self._request_options, opts)
        await self.do(ctx, obj, obj, options, Operation.UPDATE)

    async def destroy(self, ctx: Context, obj: Any, *opts: Any) -> None:
        """Destroy the identified object."""
        if ctx is None:
            raise ContextRequiredError()

        options = DestroyOptions()
        apply_options(options, Operation.DESTROY, self._request_options, opts)
        await self.do(ctx, obj, obj, options, Operation.DESTROY)

    async def list(self, ctx: Context, obj: Any, *opts: Any) -> PageInfo | None:
        """List objects matching the filters given in obj.

        Listing is done either page by page, requested with Paged, or through
        an ObjectChannel, requested with AsObjectChannel.

        Returns:
            The PageInfo iterator positioned before the first page if requested
            via Paged(info=True), None otherwise

        Raises:
            CannotListChannelAndPagedError: Both the PageInfo iterator and an
                ObjectChannel were requested
        """
        if ctx is None:
            raise ContextRequiredError()

        options = ListOptions()
        apply_options(options, Operation.LIST, self._request_options, opts)

        channel = options.object_channel
        if channel is not None:
            ctx = channel.prepare(ctx, options)

        try:
            return await self._list(ctx, obj, options)
        except Exception:
            if channel is not None:
                ctx.cancel()
            raise

    async def _list(self, ctx: Context, obj: Any, options: ListOptions) -> PageInfo | None:
        op_ctx = self._prepare(ctx, obj, Operation.LIST, options)
        op_ctx, request = self._make_request(op_ctx, obj, None)

        single_page = False
        if isinstance(obj, PaginationSupportHook):
            single_page = not obj.has_pagination(op_ctx)

        if options.paged:
            if options.page == 0:
                op_ctx.logger.debug("List called requesting page 0, fixing to page 1")
                options.page = 1

            if not single_page:
                request.url = request.url.extend_query(
                    page=str(options.page), limit=str(options.entries_per_page)
                )

        _, body = await self._do_request(op_ctx, request, obj)

        if not options.paged:
            return None

        async def fetch_page(page: int) -> bytes:
            page_request = request.clone()
            if not single_page:
                page_request.url = page_request.url.update_query(page=str(page))

            _, page_body = await self._do_request(op_ctx, page_request, obj)
            return page_body

        page_iter = PageIter(
            op_ctx,
            body,
            options.page,
            options.entries_per_page,
            fetch_page,
            single_page=single_page,
        )

        if options.object_channel is not None:
            options.object_channel.start(
                op_ctx, page_iter, api=self if options.full_objects else None
            )

        return page_iter if options.page_info else None

    async def do(
        self,
        ctx: Context,
        obj: Any,
        body: Any,
        options: Options,
        operation: Operation,
    ) -> None:
        """Run the full request pipeline for one operation.

        The object addresses the request and customizes it through its hooks,
        body is sent for Create and Update and receives the decoded response.
        """
        op_ctx = self._prepare(ctx, obj, operation, options)
        op_ctx, request = self._make_request(op_ctx, obj, body)

        media_type, data = await self._do_request(op_ctx, request, obj)
        if media_type is not None:
            decode_response(op_ctx, media_type, data, body)

    async def close(self) -> None:
        """Close the client if it was created by the API."""
        if self._owns_client and isinstance(self.client, HTTPClient):
            await self.client.close()

    async def __aenter__(self) -> API:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _prepare(
        self, ctx: Context, obj: Any, operation: Operation, options: Options
    ) -> OperationContext:
        if ctx is None:
            raise ContextRequiredError()

        try:
            operation = Operation(operation)
        except ValueError:
            raise OperationNotSupportedError() from None

        op_logger = OperationLogger(
            self.logger(ctx),
            {"operation": str(operation), "resource": type(obj).__name__},
        )
        return OperationContext(ctx=ctx, operation=operation, options=options, logger=op_logger)

    def _make_request(
        self, ctx: OperationContext, obj: Any, body: Any
    ) -> tuple[OperationContext, Request]:
        method = _METHODS[ctx.operation]

        if isinstance(obj, type) or not isinstance(obj, Object):
            raise TypeNotSupportedError(
                f"objects must implement endpoint_url(), got {type(obj).__name__}"
            )

        single_object = ctx.operation.is_single_object
        identifier = get_object_identifier(obj, single_object) if single_object else ""

        resource_url = URL(obj.endpoint_url(ctx))
        ctx = ctx.with_url(resource_url)

        url = self._join_url(URL(self.client.base_url), resource_url, identifier)
        if isinstance(obj, FilterRequestURLHook):
            url = obj.filter_request_url(ctx, url)

        request = Request(method=method, url=url, headers=CIMultiDict())

        if ctx.operation in _BODY_OPERATIONS:
            request_body = body
            if isinstance(obj, RequestBodyHook):
                request_body = obj.filter_api_request_body(ctx)
            request.body = encode_body(request_body)
            request.headers.add("Content-Type", REQUEST_CONTENT_TYPE)

        if isinstance(obj, RequestFilterHook):
            request = obj.filter_api_request(ctx, request)

        return ctx, request

    @staticmethod
    def _join_url(base_url: URL, resource_url: URL, identifier: str) -> URL:
        segments = [base_url.path, resource_url.path, identifier]
        path = "/" + "/".join(s.strip("/") for s in segments if s.strip("/"))

        query: MultiDict[str] = MultiDict(base_url.query)
        query.extend(resource_url.query)

        # Fragments are never sent to the server
        return base_url.with_path(posixpath.normpath(path)).with_query(query)

    async def _do_request(
        self, ctx: OperationContext, request: Request, obj: Any
    ) -> tuple[str | None, bytes]:
        """Execute the request, returning media type and body of the response.

        The media type is None for 204 responses, which carry no body to decode.
        """
        try:
            response: Response = await self.client.do(request)
        except APIError:
            raise
        except Exception as e:
            raise TransportError(f"HTTP request failed: {e}") from e

        if isinstance(obj, ResponseFilterHook):
            response = obj.filter_api_response(ctx, response)

        error = error_from_response(request, response)
        if error is not None:
            ctx.logger.debug(
                "Engine returned an error",
                extra={"status": response.status, "method": request.method},
            )
            raise error

        if response.status == 204:
            return None, b""

        return response_media_type(response), response.body

    async def _auto_tag(self, ctx: Context, obj: Any, tags: list[str]) -> None:
        # Bindings import the runtime, so the tagging helper is resolved late
        from ..apis.core.v1.tags import tag

        try:
            await tag(ctx, self, obj, *tags)
        except Exception as e:
            raise TaggingFailedError(e) from e
