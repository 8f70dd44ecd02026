"""Strict decoding of write payloads into models.

Unknown keys are rejected before anything else is looked at; a value
whose shape does not fit its field (a list field given a number, say)
is rejected next.  Both stop decoding: there is no document to validate.
"""

from __future__ import annotations

import types
import typing
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import ErrorDetails

from content_store.content.models import (
    CONTENT_ITEM_FIELDS,
    PUBLISH_INTENT_FIELDS,
    ContentItem,
    PublishIntent,
)
from content_store.errors import TypeMismatchError, UnrecognisedFieldError

M = TypeVar("M", bound=BaseModel)

# pydantic error type -> the kind of value the field wanted
_EXPECTED_KINDS = {
    "list_type": "list",
    "dict_type": "dict",
    "string_type": "str",
    "datetime_type": "datetime",
    "datetime_parsing": "datetime",
    "datetime_from_date_parsing": "datetime",
}


def _annotation_kind(annotation: Any) -> str:
    """Name of a field's declared kind, ignoring ``None``."""
    if isinstance(annotation, types.UnionType) or typing.get_origin(annotation) is typing.Union:
        members = [a for a in typing.get_args(annotation) if a is not type(None)]
        annotation = members[0] if members else annotation
    origin = typing.get_origin(annotation) or annotation
    return getattr(origin, "__name__", str(origin))


def _type_mismatch(model: type[BaseModel], error: ErrorDetails) -> TypeMismatchError:
    field = str(error["loc"][0])
    expected = _EXPECTED_KINDS.get(error["type"])
    if expected is None:
        expected = _annotation_kind(model.model_fields[field].annotation)
    return TypeMismatchError(field, expected, type(error["input"]).__name__)


def _decode(
    model: type[M],
    fields: tuple[str, ...],
    base_path: str,
    attributes: Mapping[str, Any],
) -> M:
    unknown = [key for key in attributes if key not in fields]
    if unknown:
        raise UnrecognisedFieldError(unknown)

    data = {**attributes, "base_path": base_path}
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise _type_mismatch(model, exc.errors()[0]) from exc


def decode_content_item(base_path: str, attributes: Mapping[str, Any]) -> ContentItem:
    """Build a ContentItem at *base_path* from a write payload.

    The path the item is written to wins over any ``base_path`` in the
    payload.

    Raises:
        UnrecognisedFieldError: payload has keys ContentItem does not know.
        TypeMismatchError: a value does not fit its field.
    """
    return _decode(ContentItem, CONTENT_ITEM_FIELDS, base_path, attributes)


def decode_publish_intent(base_path: str, attributes: Mapping[str, Any]) -> PublishIntent:
    """Build a PublishIntent at *base_path* from a write payload."""
    return _decode(PublishIntent, PUBLISH_INTENT_FIELDS, base_path, attributes)
