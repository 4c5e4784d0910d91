"""LBaaS load balancer instances."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ....core.context import OperationContext
from ....core.enums import Operation
from ....core.object import TAG_IDENTIFIER, tagged
from ....runtime.rest.messages import Response
from .common import destroy_response
from .state import HasState


class RuleInfo(BaseModel):
    """Name and identifier of an automation rule."""

    identifier: str = tagged(TAG_IDENTIFIER, "")
    name: str = ""


class LoadBalancer(HasState):
    """Load balancer instance."""

    customer_identifier: str = ""
    reseller_identifier: str = ""
    identifier: str = tagged(TAG_IDENTIFIER, "", description="Load balancer identifier")
    name: str = Field("", description="Load balancer name")
    ip_address: str = Field("", description="IP address the load balancer listens on")
    automation_rules: list[RuleInfo] = Field(default_factory=list)

    def endpoint_url(self, ctx: OperationContext) -> str:
        return "/api/LBaaS/v1/loadbalancer.json"

    def filter_api_request_body(self, ctx: OperationContext) -> Any:
        if ctx.operation == Operation.CREATE:
            return {"name": self.name, "ip_address": self.ip_address, "state": "2"}
        return self

    def filter_api_response(self, ctx: OperationContext, response: Response) -> Response:
        return destroy_response(ctx, response)
