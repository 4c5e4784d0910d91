"""Unit tests for the core/v1 bindings: locations, resources and tags."""

from __future__ import annotations

import logging

import pytest

from anxcloud.api import (
    API,
    HTTPError,
    NotFoundError,
    OperationNotSupportedError,
    Paged,
)
from anxcloud.api.apis.core.v1 import (
    Location,
    Resource,
    ResourceWithTag,
    list_tags,
    tag,
    untag,
)


@pytest.fixture
def api(mock_client):
    return API(mock_client)


def _sent(mock_client, index: int = -1):
    return mock_client.do.call_args_list[index].args[0]


class TestLocation:
    """Test the Location binding."""

    @pytest.mark.asyncio
    async def test_get(self, api, mock_client, ctx, make_response):
        """Test coordinates sent as strings are parsed."""
        mock_client.do.return_value = make_response(
            {
                "identifier": "52b5f6b2fd3a4a7eaaedf1a7c019e9ea",
                "code": "ANX04",
                "name": "AT, Vienna, Datasix",
                "country": "AT",
                "city_code": "VIE",
                "lat": "48.192258",
                "lon": "16.3661",
            }
        )
        location = Location(identifier="52b5f6b2fd3a4a7eaaedf1a7c019e9ea")

        await api.get(ctx, location)

        request = _sent(mock_client)
        assert request.method == "GET"
        assert request.url.path == "/api/core/v1/location.json/52b5f6b2fd3a4a7eaaedf1a7c019e9ea"
        assert location.code == "ANX04"
        assert location.country_code == "AT"
        assert location.latitude == pytest.approx(48.192258)
        assert location.longitude == pytest.approx(16.3661)

    @pytest.mark.asyncio
    async def test_get_without_coordinates(self, api, mock_client, ctx, make_response):
        """Test missing coordinates stay unset."""
        mock_client.do.return_value = make_response({"identifier": "x", "code": "ANX04"})
        location = Location(identifier="x")

        await api.get(ctx, location)

        assert location.latitude is None
        assert location.longitude is None

    @pytest.mark.asyncio
    async def test_invalid_coordinate(self, api, mock_client, ctx, make_response):
        """Test unparsable coordinates are reported."""
        mock_client.do.return_value = make_response({"identifier": "x", "lat": "north"})

        with pytest.raises(ValueError, match="latitude"):
            await api.get(ctx, Location(identifier="x"))

    @pytest.mark.asyncio
    async def test_list(self, api, mock_client, ctx, make_response):
        """Test listed locations are decoded through the decode hook."""
        mock_client.do.return_value = make_response(
            [
                {"identifier": "a", "code": "ANX04", "lat": "48.2", "lon": "16.3"},
                {"identifier": "b", "code": "ANX63", "lat": None, "lon": None},
            ]
        )

        page_iter = await api.list(ctx, Location(), Paged(1, 10))
        locations: list = []
        assert await page_iter.next(locations, Location)

        assert [loc.code for loc in locations] == ["ANX04", "ANX63"]
        assert locations[0].latitude == pytest.approx(48.2)
        assert locations[1].latitude is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["create", "update", "destroy"])
    async def test_modifications_not_supported(self, api, mock_client, ctx, method):
        """Test only Get and List are supported."""
        with pytest.raises(OperationNotSupportedError):
            await getattr(api, method)(ctx, Location(identifier="x"))

        mock_client.do.assert_not_called()


class TestResource:
    """Test the Resource binding."""

    @pytest.mark.asyncio
    async def test_get_flattens_tags(self, api, mock_client, ctx, make_response):
        """Test tag objects are reduced to their names."""
        mock_client.do.return_value = make_response(
            {
                "identifier": "r1",
                "name": "my-vm",
                "resource_type": {"identifier": "t1", "name": "Virtual Machine"},
                "tags": [{"identifier": "t", "name": "prod"}, {"identifier": "u", "name": "web"}],
            }
        )
        resource = Resource(identifier="r1")

        await api.get(ctx, resource)

        assert _sent(mock_client).url.path == "/api/core/v1/resource.json/r1"
        assert resource.name == "my-vm"
        assert resource.type.name == "Virtual Machine"
        assert resource.tags == ["prod", "web"]

    @pytest.mark.asyncio
    async def test_list_by_tag(self, api, mock_client, ctx, make_response, caplog):
        """Test List filters by the first tag only."""
        caplog.set_level(logging.INFO, logger="anxcloud")
        mock_client.do.return_value = make_response([{"identifier": "r1", "name": "my-vm"}])

        page_iter = await api.list(ctx, Resource(tags=["prod", "web"]), Paged(1, 20))
        resources: list = []
        assert await page_iter.next(resources, Resource)

        query = _sent(mock_client).url.query
        assert query["tag_name"] == "prod"
        assert query["page"] == "1"
        assert query["limit"] == "20"
        assert resources[0].identifier == "r1"
        assert "only first one used" in caplog.text

    @pytest.mark.asyncio
    async def test_list_without_tag(self, api, mock_client, ctx, make_response):
        """Test List without tags has no tag filter."""
        mock_client.do.return_value = make_response([])

        await api.list(ctx, Resource(), Paged(1, 10))

        assert "tag_name" not in _sent(mock_client).url.query

    @pytest.mark.asyncio
    async def test_create_not_supported(self, api, ctx):
        """Test resources cannot be created directly."""
        with pytest.raises(OperationNotSupportedError):
            await api.create(ctx, Resource(name="x"))


class TestResourceWithTag:
    """Test attaching and removing single tags."""

    @pytest.mark.asyncio
    async def test_create(self, api, mock_client, ctx, make_response):
        """Test Create is a bodyless POST to the tag URL."""
        mock_client.do.return_value = make_response({"name": "prod"})

        await api.create(ctx, ResourceWithTag(identifier="r1", tag="prod"))

        request = _sent(mock_client)
        assert request.method == "POST"
        assert request.url.path == "/api/core/v1/resource.json/r1/tags/prod"
        assert request.body is None
        assert "Content-Type" not in request.headers

    @pytest.mark.asyncio
    async def test_destroy(self, api, mock_client, ctx, make_response):
        """Test Destroy uses the tag URL without appending the identifier again."""
        mock_client.do.return_value = make_response({"name": "prod"})

        await api.destroy(ctx, ResourceWithTag(identifier="r1", tag="prod"))

        request = _sent(mock_client)
        assert request.method == "DELETE"
        assert request.url.path == "/api/core/v1/resource.json/r1/tags/prod"

    @pytest.mark.asyncio
    async def test_get_not_supported(self, api, ctx):
        """Test only Create and Destroy are supported."""
        with pytest.raises(OperationNotSupportedError, match="Create and Destroy"):
            await api.get(ctx, ResourceWithTag(identifier="r1", tag="prod"))


class TestTagHelpers:
    """Test tag(), untag() and list_tags()."""

    @pytest.mark.asyncio
    async def test_tag(self, api, mock_client, ctx, make_response):
        """Test one request per tag."""
        mock_client.do.return_value = make_response({})

        await tag(ctx, api, Resource(identifier="r1"), "prod", "web")

        paths = [c.args[0].url.path for c in mock_client.do.call_args_list]
        assert paths == [
            "/api/core/v1/resource.json/r1/tags/prod",
            "/api/core/v1/resource.json/r1/tags/web",
        ]

    @pytest.mark.asyncio
    async def test_tag_already_present(self, api, mock_client, ctx, make_response):
        """Test an already attached tag is skipped."""
        mock_client.do.side_effect = [
            make_response({"error": "already tagged"}, status=422),
            make_response({}),
        ]

        await tag(ctx, api, Resource(identifier="r1"), "prod", "web")

        assert mock_client.do.call_count == 2

    @pytest.mark.asyncio
    async def test_tag_error(self, api, mock_client, ctx, make_response):
        """Test other errors are raised."""
        mock_client.do.return_value = make_response({}, status=500)

        with pytest.raises(HTTPError) as exc_info:
            await tag(ctx, api, Resource(identifier="r1"), "prod")

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_untag_ignores_missing(self, api, mock_client, ctx, make_response):
        """Test removing a tag not attached is no error."""
        mock_client.do.return_value = make_response({}, status=404)

        await untag(ctx, api, Resource(identifier="r1"), "prod")

        assert _sent(mock_client).method == "DELETE"

    @pytest.mark.asyncio
    async def test_untag_raises_others(self, api, mock_client, ctx, make_response):
        """Test errors other than not found are raised."""
        mock_client.do.return_value = make_response({}, status=403)

        with pytest.raises(HTTPError) as exc_info:
            await untag(ctx, api, Resource(identifier="r1"), "prod")

        assert not isinstance(exc_info.value, NotFoundError)

    @pytest.mark.asyncio
    async def test_list_tags(self, api, mock_client, ctx, make_response):
        """Test tag names are read from the resource."""
        mock_client.do.return_value = make_response(
            {"identifier": "lb1", "tags": [{"identifier": "t", "name": "prod"}]}
        )

        assert await list_tags(ctx, api, Location(identifier="lb1")) == ["prod"]
        assert _sent(mock_client).url.path == "/api/core/v1/resource.json/lb1"
