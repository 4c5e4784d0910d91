"""HTTP transport for the generic API."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Protocol

import aiohttp
from multidict import CIMultiDict

from ...config import (
    BASE_URL_ENV_NAME,
    DEFAULT_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_USER_AGENT,
    TOKEN_ENV_NAME,
)
from ...core.exceptions import TransportError
from .messages import Request, Response

logger = logging.getLogger(__name__)


class Client(Protocol):
    """Transport executing requests for the generic API.

    Implementations return every response, including error statuses; only
    failures to execute the request at all are raised.
    """

    base_url: str

    async def do(self, request: Request) -> Response: ...


class HTTPClient:
    """Async HTTP client wrapper executing generic API requests."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        *,
        token: str | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.user_agent = user_agent
        self._token = token
        self._logger = logger
        self._session: aiohttp.ClientSession | None = None

    @classmethod
    def from_env(cls, **kwargs: Any) -> HTTPClient:
        """Create a client with token and base URL taken from the environment.

        Raises:
            KeyError: If the token environment variable is not set
        """
        kwargs.setdefault("token", os.environ[TOKEN_ENV_NAME])
        if BASE_URL_ENV_NAME in os.environ:
            kwargs.setdefault("base_url", os.environ[BASE_URL_ENV_NAME])
        return cls(**kwargs)

    @property
    def logger(self) -> logging.Logger | logging.LoggerAdapter:
        return self._logger if self._logger is not None else logger

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def _headers(self, request: Request) -> CIMultiDict[str]:
        headers = CIMultiDict(request.headers)
        headers.setdefault("User-Agent", self.user_agent)
        if self._token:
            headers.setdefault("Authorization", f"Token {self._token}")
        return headers

    async def do(self, request: Request) -> Response:
        """Execute the request and return the response with its body read."""
        self.logger.debug(
            "Sending request", extra={"method": request.method, "url": str(request.url)}
        )

        try:
            async with self.session.request(
                request.method,
                request.url,
                data=request.body,
                headers=self._headers(request),
            ) as response:
                body = await response.read()
                result = Response(
                    status=response.status,
                    reason=response.reason or "",
                    headers=CIMultiDict(response.headers),
                    body=body,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"HTTP request failed: {e}") from e

        self.logger.debug(
            "Received response",
            extra={"method": request.method, "url": str(request.url), "status": result.status},
        )
        return result

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
