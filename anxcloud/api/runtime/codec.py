"""Request body encoding and response decoding."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from ..config import JSON_MEDIA_TYPE, KNOWN_MEDIA_TYPES
from ..core.context import OperationContext
from ..core.exceptions import UnsupportedResponseFormatError
from ..core.object import ResponseDecodeHook
from .rest.messages import Response


def encode_body(body: Any) -> bytes:
    """JSON-encode a request body; models are dumped by alias."""
    if isinstance(body, BaseModel):
        return body.model_dump_json(by_alias=True).encode()
    return json.dumps(body).encode()


def response_media_type(response: Response) -> str:
    """Media type of the response, JSON if the Content-Type header is missing."""
    content_type = response.content_type
    if not content_type:
        return JSON_MEDIA_TYPE

    media_type = content_type.split(";", 1)[0].strip().lower()
    if not media_type or "/" not in media_type:
        raise UnsupportedResponseFormatError(
            f"error parsing Content-Type header in engine response (was: {content_type!r})"
        )

    if media_type not in KNOWN_MEDIA_TYPES:
        raise UnsupportedResponseFormatError(
            f"response format is not supported: unknown media type {media_type}"
        )

    return media_type


def decode_response(ctx: OperationContext, media_type: str, data: bytes, out: Any) -> None:
    """Decode data into out, using its decode hook if it implements one."""
    if media_type != JSON_MEDIA_TYPE:
        raise UnsupportedResponseFormatError(
            f"response format is not supported: no idea how to handle media type {media_type}"
        )

    if isinstance(out, ResponseDecodeHook):
        out.decode_api_response(ctx, data)
        return

    if not isinstance(out, BaseModel):
        raise UnsupportedResponseFormatError(
            f"cannot decode into value of type {type(out).__name__}"
        )

    update_from_json(out, data)


def update_from_json(out: BaseModel, data: bytes) -> None:
    """Validate data as JSON of out's model and copy the fields present onto out.

    Fields missing in data keep their current value, unknown keys are ignored
    unless the model forbids them. Decode hooks use this as fallback.
    """
    decoded = type(out).model_validate_json(data)
    for name in decoded.model_fields_set:
        setattr(out, name, getattr(decoded, name))


def decode_record(ctx: OperationContext, kind: type[BaseModel], data: bytes) -> BaseModel:
    """Create a new instance of kind from one raw record."""
    obj = kind.model_construct()
    decode_response(ctx, JSON_MEDIA_TYPE, data, obj)
    return obj
