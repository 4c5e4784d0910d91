"""Anexia sites resources can be deployed in."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ....core.context import OperationContext
from ....core.enums import Operation
from ....core.exceptions import OperationNotSupportedError
from ....core.object import TAG_IDENTIFIER, tagged


class Location(BaseModel):
    """Anexia site where resources can be deployed.

    Locations can only be retrieved, via Get and List.
    """

    identifier: str = tagged(TAG_IDENTIFIER, "", description="Location identifier")
    code: str = Field("", description="Location code, e.g. ANX04")
    name: str = Field("", description="Human readable name")
    country_code: str = Field("", alias="country", description="ISO country code")
    city_code: str = Field("", description="City code")
    latitude: float | None = Field(None, alias="lat", description="Latitude in degrees")
    longitude: float | None = Field(None, alias="lon", description="Longitude in degrees")

    model_config = {"populate_by_name": True}

    def endpoint_url(self, ctx: OperationContext) -> str:
        if ctx.operation not in (Operation.GET, Operation.LIST):
            raise OperationNotSupportedError()
        return "/api/core/v1/location.json"

    def decode_api_response(self, ctx: OperationContext, data: bytes) -> None:
        decoded = _APILocation.model_validate_json(data)

        for name in Location.model_fields:
            if name not in ("latitude", "longitude"):
                setattr(self, name, getattr(decoded, name))

        self.latitude = _parse_coordinate("latitude", decoded.latitude)
        self.longitude = _parse_coordinate("longitude", decoded.longitude)


class _APILocation(Location):
    # The engine sends coordinates as strings
    latitude: str | None = Field(None, alias="lat")  # type: ignore[assignment]
    longitude: str | None = Field(None, alias="lon")  # type: ignore[assignment]


def _parse_coordinate(name: str, value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as e:
        raise ValueError(f"error parsing {name}: {e}") from e
