"""Shared fixtures for unit tests."""

from __future__ import annotations

import json
import logging
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from multidict import CIMultiDict

from anxcloud.api import Context, Operation, OperationContext
from anxcloud.api.core.context import OperationLogger
from anxcloud.api.core.options import ListOptions, Options
from anxcloud.api.runtime.rest import Client, Response

BASE_URL = "https://engine.example.com"


def _make_response(
    payload: Any = None,
    status: int = 200,
    content_type: str | None = "application/json",
    raw: bytes | None = None,
) -> Response:
    headers: CIMultiDict[str] = CIMultiDict()
    if content_type is not None:
        headers["Content-Type"] = content_type

    if raw is None:
        raw = b"" if payload is None else json.dumps(payload).encode()

    return Response(status=status, reason="", headers=headers, body=raw)


def _make_op_ctx(
    operation: Operation = Operation.LIST, options: Options | None = None
) -> OperationContext:
    return OperationContext(
        ctx=Context.background(),
        operation=operation,
        options=options if options is not None else ListOptions(),
        logger=OperationLogger(logging.getLogger("tests"), {}),
    )


@pytest.fixture
def make_response():
    """Factory for transport responses with JSON bodies."""
    return _make_response


@pytest.fixture
def make_op_ctx():
    """Factory for operation contexts passed to hooks and iterators."""
    return _make_op_ctx


@pytest.fixture
def ctx():
    """Root context for API calls."""
    return Context.background()


@pytest.fixture
def mock_client():
    """Create mock transport answering 200 with an empty JSON object."""
    client = MagicMock(spec=Client)
    client.base_url = BASE_URL
    client.do = AsyncMock(return_value=_make_response({}))
    return client
