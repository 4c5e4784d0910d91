"""LBaaS backends."""

from __future__ import annotations

from enum import Enum
from typing import Any
from urllib.parse import urlencode

from pydantic import Field
from yarl import URL

from ....core.context import OperationContext
from ....core.enums import Operation
from ....core.object import TAG_FILTERABLE, TAG_IDENTIFIER, tagged
from ....runtime.rest.messages import Response
from .common import destroy_response
from .loadbalancer import LoadBalancer, RuleInfo
from .state import NEWLY_CREATED, HasState


class Mode(str, Enum):
    TCP = "tcp"
    HTTP = "http"


class Backend(HasState):
    """Settings common to all backend servers linked to it.

    List filters by load balancer and mode.
    """

    customer_identifier: str = ""
    reseller_identifier: str = ""
    identifier: str = tagged(TAG_IDENTIFIER, "", description="Backend identifier")
    name: str = Field("", description="Backend name")
    health_check: str = ""
    mode: Mode | None = tagged(TAG_FILTERABLE, None, description="Balancing mode")
    server_timeout: int = 0
    automation_rules: list[RuleInfo] | None = None

    # Only name and identifier are used and returned
    load_balancer: LoadBalancer = tagged(TAG_FILTERABLE, default_factory=LoadBalancer)

    def endpoint_url(self, ctx: OperationContext) -> str:
        url = URL("/api/LBaaS/v1/backend.json")

        if ctx.operation == Operation.LIST:
            filters: dict[str, str] = {}
            if self.load_balancer.identifier:
                filters["load_balancer"] = self.load_balancer.identifier
            if self.mode:
                filters["mode"] = self.mode.value
            url = url.with_query(filters=urlencode(filters))

        return str(url)

    def filter_api_request_body(self, ctx: OperationContext) -> Any:
        if ctx.operation == Operation.CREATE:
            return {
                "name": self.name,
                "load_balancer": self.load_balancer.identifier,
                "mode": self.mode.value if self.mode else "",
                "state": NEWLY_CREATED.id,
            }

        if ctx.operation == Operation.UPDATE:
            body = self.model_dump(mode="json", by_alias=True, exclude_none=True)
            body["load_balancer"] = self.load_balancer.identifier
            return body

        return self

    def filter_api_response(self, ctx: OperationContext, response: Response) -> Response:
        return destroy_response(ctx, response)
