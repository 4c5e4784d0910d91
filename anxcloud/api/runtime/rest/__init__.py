"""REST transport abstractions."""

from .http_client import Client, HTTPClient
from .messages import Request, Response

__all__ = [
    "Client",
    "HTTPClient",
    "Request",
    "Response",
]
