"""CloudDNS zones.

The CloudDNS API deviates from the engine conventions in several places, all
handled by hooks on Zone:
- Update is sent to the collection URL, not to the zone URL
- Create and Update expect the zone name as "zoneName" in the body
- List responses carry the zones under "results" and are not paginated
"""

from __future__ import annotations

import json
import posixpath
from dataclasses import replace
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ....core.context import OperationContext
from ....core.enums import Operation
from ....core.object import TAG_IDENTIFIER, tagged
from ....runtime.codec import update_from_json
from ....runtime.rest.messages import Request, Response


class Revision(BaseModel):
    created_at: datetime | None = None
    identifier: str = ""
    modified_at: datetime | None = None
    records: list[dict[str, Any]] = Field(default_factory=list)
    serial: int = 0
    state: str = ""


class DNSServer(BaseModel):
    server: str = Field("", description="DNS server name (FQDN)")
    alias: str = Field("", description="DNS server alias")


class Zone(BaseModel):
    """DNS zone managed by CloudDNS, identified by its name."""

    name: str = tagged(TAG_IDENTIFIER, "", description="Zone name")
    is_master: bool = Field(False, alias="master", description="CloudDNS operates as master")
    dnssec_mode: str = Field("", description='"managed" or "unvalidated", master only')
    admin_email: str = Field("", description="Admin email address used in SOA record")
    refresh: int = Field(0, description="Refresh value used in SOA record")
    retry: int = Field(0, description="Retry value used in SOA record")
    expire: int = Field(0, description="Expire value used in SOA record")
    ttl: int = Field(0, description="Default TTL for NS records")
    master_ns: str | None = Field(None, description="Master name server")
    notify_allowed_ips: list[str] | None = Field(
        None, description="IP addresses allowed to initiate domain transfer"
    )
    dns_servers: list[DNSServer] | None = Field(
        None, description="Configured DNS servers, default servers if empty"
    )

    customer: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    published_at: datetime | None = None
    is_editable: bool = False
    validation_level: int = 0
    deployment_level: int = 0
    revisions: list[Revision] = Field(default_factory=list)
    current_revision: str | None = None

    model_config = {"populate_by_name": True}

    def endpoint_url(self, ctx: OperationContext) -> str:
        return "/api/clouddns/v1/zone.json/"

    def decode_api_response(self, ctx: OperationContext, data: bytes) -> None:
        # Zone does not model every field the API returns
        update_from_json(self, data)

    def filter_api_request(self, ctx: OperationContext, request: Request) -> Request:
        if ctx.operation == Operation.UPDATE:
            # Update is done on ".../zone.json", without the zone name appended
            url = request.url
            request.url = url.with_path(posixpath.dirname(url.path)).with_query(url.query)
        return request

    def filter_api_request_body(self, ctx: OperationContext) -> Any:
        if ctx.operation in (Operation.CREATE, Operation.UPDATE):
            body = self.model_dump(
                mode="json", by_alias=True, exclude={"name"}, exclude_none=True
            )
            body["zoneName"] = self.name
            return body
        return self

    def filter_api_response(self, ctx: OperationContext, response: Response) -> Response:
        if ctx.operation == Operation.LIST and response.status < 300:
            # Zones are listed under "results", next to non-functional paging fields
            results = json.loads(response.body).get("results", [])
            return replace(response, body=json.dumps(results).encode())
        return response

    def has_pagination(self, ctx: OperationContext) -> bool:
        return False
