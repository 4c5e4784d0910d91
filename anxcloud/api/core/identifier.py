"""Identifier resolution for resource descriptions.

The identifier of an object is the value of the single field tagged with
tagged("identifier"). The tagged field may live on the model itself, on a base
model, or inside a field tagged with tagged("embedded"), at any depth.

Resolution is split in two steps: locating the tagged field is done once per
model class and cached, reading the value is done per object.
"""

from __future__ import annotations

import types
import uuid
from functools import lru_cache
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from .exceptions import (
    ObjectIdentifierTypeNotSupportedError,
    ObjectWithMultipleIdentifierError,
    ObjectWithoutIdentifierError,
    TypeNotSupportedError,
    UnidentifiedObjectError,
)
from .object import TAG_EMBEDDED, TAG_IDENTIFIER, TAG_KEY

_IDENTIFIER_TYPES = (str, uuid.UUID)


def get_object_identifier(obj: Any, single_object_operation: bool) -> str:
    """Extract the identifier of the given object.

    Args:
        obj: Resource description, a pydantic model instance
        single_object_operation: Whether the identifier must be set

    Returns:
        The identifier, UUIDs in canonical string form. Empty if unset and not
        required.

    Raises:
        TypeNotSupportedError: obj is not a model instance
        ObjectWithoutIdentifierError: No field is tagged as identifier
        ObjectWithMultipleIdentifierError: More than one field is tagged as identifier
        ObjectIdentifierTypeNotSupportedError: The tagged field is neither str nor UUID
        UnidentifiedObjectError: The identifier is empty but required
    """
    if isinstance(obj, type) or not isinstance(obj, BaseModel):
        raise TypeNotSupportedError(
            f"objects must be pydantic model instances, got {type(obj).__name__}"
        )

    path = identifier_path(type(obj))

    value: Any = obj
    for name in path:
        value = getattr(value, name, None)
        if value is None:
            break

    if _is_zero(value):
        if single_object_operation:
            raise UnidentifiedObjectError()
        return ""

    return str(value)


@lru_cache(maxsize=None)
def identifier_path(model: type[BaseModel]) -> tuple[str, ...]:
    """Field names leading from the model to its identifier field."""
    return _find_identifier(model, frozenset())


def _find_identifier(model: type[BaseModel], visiting: frozenset[type]) -> tuple[str, ...]:
    found: tuple[str, ...] | None = None
    visiting = visiting | {model}

    for name, info in model.model_fields.items():
        tag = _field_tag(info)

        if tag == TAG_EMBEDDED:
            embedded = _embedded_model(info.annotation)
            if embedded is None or embedded in visiting:
                continue

            try:
                subpath = _find_identifier(embedded, visiting)
            except ObjectWithoutIdentifierError:
                continue

            if found is not None:
                raise ObjectWithMultipleIdentifierError(
                    f"type {model.__name__} has multiple fields tagged as identifier"
                )
            found = (name, *subpath)

        elif tag == TAG_IDENTIFIER:
            if not _is_identifier_type(info.annotation):
                raise ObjectIdentifierTypeNotSupportedError(
                    f"type {model.__name__} has an identifier of type {info.annotation}"
                )
            if found is not None:
                raise ObjectWithMultipleIdentifierError(
                    f"type {model.__name__} has multiple fields tagged as identifier"
                )
            found = (name,)

    if found is None:
        raise ObjectWithoutIdentifierError(
            f"type {model.__name__} does not have a field tagged as identifier"
        )

    return found


def _field_tag(info: FieldInfo) -> str | None:
    extra = info.json_schema_extra
    if isinstance(extra, dict):
        tag = extra.get(TAG_KEY)
        return tag if isinstance(tag, str) else None
    return None


def _strip_optional(annotation: Any) -> list[Any]:
    if get_origin(annotation) in (Union, types.UnionType):
        return [arg for arg in get_args(annotation) if arg is not type(None)]
    return [annotation]


def _embedded_model(annotation: Any) -> type[BaseModel] | None:
    args = _strip_optional(annotation)
    if len(args) == 1 and isinstance(args[0], type) and issubclass(args[0], BaseModel):
        return args[0]
    return None


def _is_identifier_type(annotation: Any) -> bool:
    args = _strip_optional(annotation)
    return len(args) == 1 and args[0] in _IDENTIFIER_TYPES


def _is_zero(value: Any) -> bool:
    if value is None or value == "":
        return True
    return isinstance(value, uuid.UUID) and value.int == 0
