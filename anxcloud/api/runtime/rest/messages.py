"""HTTP request and response values exchanged with the transport."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from multidict import CIMultiDict
from yarl import URL


@dataclass
class Request:
    """HTTP request built by the dispatcher.

    Resource hooks may modify it in place or return a changed copy.
    """

    method: str
    url: URL
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)
    body: bytes | None = None

    def clone(self) -> Request:
        return replace(self, headers=CIMultiDict(self.headers))


@dataclass
class Response:
    """HTTP response returned by the transport, body already read."""

    status: int
    reason: str = ""
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)
    body: bytes = b""

    @property
    def content_type(self) -> str | None:
        return self.headers.get("Content-Type")
