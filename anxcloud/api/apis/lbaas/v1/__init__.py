"""LBaaS API objects."""

from .backend import Backend, Mode
from .loadbalancer import LoadBalancer, RuleInfo
from .state import (
    DEPLOYED,
    DEPLOYMENT_ERROR,
    NEWLY_CREATED,
    UPDATED,
    UPDATING,
    HasState,
    State,
)

__all__ = [
    "Backend",
    "Mode",
    "LoadBalancer",
    "RuleInfo",
    "State",
    "HasState",
    "UPDATING",
    "UPDATED",
    "DEPLOYMENT_ERROR",
    "DEPLOYED",
    "NEWLY_CREATED",
]
