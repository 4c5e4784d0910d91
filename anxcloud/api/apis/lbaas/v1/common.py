"""Hooks shared by all LBaaS objects."""

from __future__ import annotations

from dataclasses import replace

from ....core.context import OperationContext
from ....core.enums import Operation
from ....runtime.rest.messages import Response


def destroy_response(ctx: OperationContext, response: Response) -> Response:
    """Replace the body of Destroy responses with an empty object.

    LBaaS answers Destroy with a body that does not decode into the destroyed
    object.
    """
    if ctx.operation == Operation.DESTROY:
        return replace(response, body=b"{}")
    return response
