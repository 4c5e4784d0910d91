"""Unit tests for paged response decoding and PageIter.

Tests focus on the three wire formats, the iteration end conditions and the
sticky error handling with its retry ceiling.
"""

from __future__ import annotations

import json
import logging
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel

from anxcloud.api import (
    PageResponseNotSupportedError,
    RawMessage,
    TransportError,
    TypeNotSupportedError,
    tagged,
)
from anxcloud.api.runtime.pagination import PageIter, decode_pagination_response_body


class Item(BaseModel):
    identifier: str = tagged("identifier", "")
    value: int = 0

    def endpoint_url(self, ctx) -> str:
        return "/api/test/v1/item.json"


class NotAnObject(BaseModel):
    identifier: str = ""


def _records(*identifiers: str) -> list[dict]:
    return [{"identifier": i, "value": n} for n, i in enumerate(identifiers)]


def _flat_page(page: int, total_pages: int, limit: int, records: list[dict]) -> bytes:
    return json.dumps(
        {
            "page": page,
            "total_pages": total_pages,
            "total_items": total_pages * limit,
            "limit": limit,
            "data": records,
        }
    ).encode()


class TestDecodePaginationResponseBody:
    """Test detection of the paged response formats."""

    def test_envelope(self):
        """Test the envelope format carrying a page object."""
        body = json.dumps(
            {
                "state": "success",
                "messages": [],
                "data": {
                    "page": 2,
                    "total_pages": 5,
                    "total_items": 45,
                    "limit": 10,
                    "data": _records("a"),
                },
            }
        ).encode()

        page = decode_pagination_response_body(body, 0, 0)

        assert (page.page, page.total_pages, page.total_items, page.limit) == (2, 5, 45, 10)
        assert [json.loads(r) for r in page.data] == _records("a")

    def test_flat_page(self):
        """Test the page object without envelope."""
        page = decode_pagination_response_body(_flat_page(1, 3, 2, _records("a", "b")), 7, 7)

        assert (page.page, page.total_pages, page.limit) == (1, 3, 2)
        assert len(page.data) == 2
        assert all(isinstance(r, RawMessage) for r in page.data)

    def test_bare_array_uses_request_values(self):
        """Test bare arrays report the requested page and limit."""
        page = decode_pagination_response_body(json.dumps(_records("a")).encode(), 3, 20)

        assert (page.page, page.limit) == (3, 20)
        assert (page.total_pages, page.total_items) == (0, 0)
        assert len(page.data) == 1

    def test_formats_decode_alike(self):
        """Test one page sent in each format decodes to the same page, limit and records."""
        records = _records("a", "b")
        flat = _flat_page(1, 1, 2, records)
        envelope = json.dumps(
            {"state": "success", "messages": [], "data": json.loads(flat)}
        ).encode()
        bare = json.dumps(records).encode()

        decoded = [
            decode_pagination_response_body(body, 1, 2) for body in (envelope, flat, bare)
        ]

        results = {
            (page.page, page.limit, json.dumps([json.loads(r) for r in page.data]))
            for page in decoded
        }
        assert results == {(1, 2, json.dumps(records))}

    def test_null_data(self):
        """Test a page object with null data has no records."""
        body = json.dumps(
            {"page": 1, "total_pages": 0, "total_items": 0, "limit": 10, "data": None}
        ).encode()
        assert decode_pagination_response_body(body, 1, 10).data == []

    @pytest.mark.parametrize(
        "body",
        [
            {"page": 1, "limit": 10, "data": [], "unknown": True},
            {"page": "1", "total_pages": 1, "total_items": 1, "limit": 10, "data": []},
            {"state": "success", "messages": [], "data": [], "extra": 1},
            {"results": []},
            "just a string",
            42,
        ],
    )
    def test_unsupported(self, body):
        """Test bodies matching no format are rejected."""
        with pytest.raises(PageResponseNotSupportedError):
            decode_pagination_response_body(json.dumps(body).encode(), 1, 10)

    def test_invalid_json(self):
        """Test non-JSON bodies are rejected."""
        with pytest.raises(PageResponseNotSupportedError):
            decode_pagination_response_body(b"<html>", 1, 10)


class TestPageIterIteration:
    """Test advancing through pages."""

    @pytest.mark.asyncio
    async def test_first_page_replayed(self, make_op_ctx):
        """Test the first page is returned without fetching it again."""
        fetcher = AsyncMock()
        it = PageIter(make_op_ctx(), _flat_page(1, 1, 2, _records("a", "b")), 1, 2, fetcher)

        objects: list = []
        assert await it.next(objects)
        assert [json.loads(o)["identifier"] for o in objects] == ["a", "b"]
        assert it.current_page == 1

        assert not await it.next(objects)
        assert it.error is None
        fetcher.assert_not_called()

    @pytest.mark.asyncio
    async def test_iterates_until_total_pages(self, make_op_ctx):
        """Test fetching follow-up pages until total_pages is reached."""
        pages = {
            2: _flat_page(2, 3, 2, _records("c", "d")),
            3: _flat_page(3, 3, 2, _records("e", "f")),
        }
        fetcher = AsyncMock(side_effect=lambda page: pages[page])
        it = PageIter(make_op_ctx(), _flat_page(1, 3, 2, _records("a", "b")), 1, 2, fetcher)

        seen = []
        objects: list = []
        while await it.next(objects, Item):
            seen.extend(o.identifier for o in objects)

        assert seen == ["a", "b", "c", "d", "e", "f"]
        assert it.error is None
        assert it.current_page == 3
        assert it.total_pages == 3
        assert it.items_per_page == 2
        assert [c.args[0] for c in fetcher.call_args_list] == [2, 3]

    @pytest.mark.asyncio
    async def test_short_page_ends_iteration(self, make_op_ctx):
        """Test no further fetch happens after a page shorter than the limit."""
        fetcher = AsyncMock(return_value=json.dumps(_records("c")).encode())
        it = PageIter(make_op_ctx(), json.dumps(_records("a", "b")).encode(), 1, 2, fetcher)

        objects: list = []
        assert await it.next(objects)
        assert await it.next(objects)
        assert len(objects) == 1
        assert not await it.next(objects)

        fetcher.assert_called_once_with(2)

    @pytest.mark.asyncio
    async def test_empty_page_ends_iteration(self, make_op_ctx):
        """Test an empty page ends iteration without error."""
        fetcher = AsyncMock(return_value=b"[]")
        it = PageIter(make_op_ctx(), json.dumps(_records("a", "b")).encode(), 1, 2, fetcher)

        objects: list = []
        assert await it.next(objects)
        assert not await it.next(objects)
        assert it.error is None
        assert not await it.next(objects)
        fetcher.assert_called_once_with(2)

    @pytest.mark.asyncio
    async def test_envelope_starting_on_later_page(self, make_op_ctx):
        """Test the iterator starts before the page List returned."""
        body = json.dumps(
            {
                "state": "",
                "messages": [],
                "data": {
                    "page": 2,
                    "total_pages": 2,
                    "total_items": 3,
                    "limit": 2,
                    "data": _records("c"),
                },
            }
        ).encode()
        it = PageIter(make_op_ctx(), body, 2, 2, AsyncMock())

        assert it.current_page == 1
        objects: list = []
        assert await it.next(objects)
        assert it.current_page == 2
        assert not await it.next(objects)

    @pytest.mark.asyncio
    async def test_single_page_mode(self, make_op_ctx, caplog):
        """Test single-page mode returns all records at once and never fetches."""
        fetcher = AsyncMock()
        body = json.dumps(_records(*"abcdefghijkl")).encode()
        it = PageIter(make_op_ctx(), body, 1, 10, fetcher, single_page=True)

        objects: list = []
        with caplog.at_level(logging.INFO, logger="tests"):
            assert await it.next(objects)

        assert len(objects) == 12
        assert "more elements" in caplog.text
        assert not await it.next(objects)
        fetcher.assert_not_called()


class TestPageIterErrors:
    """Test sticky errors and the retry ceiling."""

    @pytest.mark.asyncio
    async def test_fetch_error_is_sticky(self, make_op_ctx):
        """Test a failed fetch keeps next() returning False until reset."""
        fetcher = AsyncMock(side_effect=TransportError("boom"))
        it = PageIter(make_op_ctx(), json.dumps(_records("a", "b")).encode(), 1, 2, fetcher)

        objects: list = []
        assert await it.next(objects)
        first_page = list(objects)

        assert not await it.next(objects)
        assert isinstance(it.error, TransportError)
        assert objects == first_page
        assert it.current_page == 1

        assert not await it.next(objects)
        assert fetcher.call_count == 1

        it.reset_error()
        assert it.error is None
        assert not await it.next(objects)
        assert fetcher.call_count == 2
        assert it.current_page == 1

    @pytest.mark.asyncio
    async def test_reset_refused_after_retry_ceiling(self, make_op_ctx):
        """Test the error becomes permanent after ten failed fetches."""
        fetcher = AsyncMock(side_effect=TransportError("boom"))
        it = PageIter(make_op_ctx(), json.dumps(_records("a", "b")).encode(), 1, 2, fetcher)

        objects: list = []
        assert await it.next(objects)

        for _ in range(9):
            assert not await it.next(objects)
            it.reset_error()
            assert it.error is None

        assert not await it.next(objects)
        it.reset_error()
        assert isinstance(it.error, TransportError)
        assert fetcher.call_count == 10

    @pytest.mark.asyncio
    async def test_success_resets_retry_counter(self, make_op_ctx):
        """Test a successful fetch resets the retry counter."""
        failures = [TransportError("boom")] * 9
        second_page = json.dumps(_records("c", "d")).encode()
        fetcher = AsyncMock(side_effect=[*failures, second_page, TransportError("boom")])
        it = PageIter(make_op_ctx(), json.dumps(_records("a", "b")).encode(), 1, 2, fetcher)

        objects: list = []
        assert await it.next(objects)
        for _ in range(9):
            assert not await it.next(objects)
            it.reset_error()

        assert await it.next(objects)
        assert it.current_page == 2

        assert not await it.next(objects)
        it.reset_error()
        assert it.error is None

    @pytest.mark.asyncio
    async def test_first_page_decode_error_refetches(self, make_op_ctx):
        """Test retrying after a failed decode of the first page fetches it."""
        fetcher = AsyncMock(return_value=json.dumps(_records("a")).encode())
        bad = json.dumps([{"identifier": ["not", "a", "string"]}]).encode()
        it = PageIter(make_op_ctx(), bad, 1, 2, fetcher)

        objects: list = []
        assert not await it.next(objects, Item)
        assert it.error is not None
        assert it.current_page == 0

        it.reset_error()
        assert await it.next(objects, Item)
        fetcher.assert_called_once_with(1)
        assert objects[0].identifier == "a"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("objects", "kind"),
        [("not a list", RawMessage), ((), RawMessage), ([], dict), ([], NotAnObject), ([], "x")],
    )
    async def test_unsupported_destination(self, make_op_ctx, objects, kind):
        """Test invalid destinations store a type error without advancing."""
        fetcher = AsyncMock()
        it = PageIter(make_op_ctx(), json.dumps(_records("a")).encode(), 1, 2, fetcher)

        assert not await it.next(objects, kind)
        assert isinstance(it.error, TypeNotSupportedError)
        assert it.current_page == 0

        it.reset_error()
        valid: list = []
        assert await it.next(valid)
        assert len(valid) == 1
