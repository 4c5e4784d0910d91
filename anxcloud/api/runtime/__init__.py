"""Runtime components: dispatching, pagination and streaming."""

from .dispatcher import API
from .object_channel import ObjectChannel, ObjectRetriever
from .pagination import (
    PageFetcher,
    PageInfo,
    PageIter,
    PageResponse,
    decode_pagination_response_body,
)
from .rest import Client, HTTPClient, Request, Response

__all__ = [
    "API",
    "ObjectChannel",
    "ObjectRetriever",
    "PageInfo",
    "PageIter",
    "PageFetcher",
    "PageResponse",
    "decode_pagination_response_body",
    "Client",
    "HTTPClient",
    "Request",
    "Response",
]
