"""Constraint checks shared by every field type."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any

from loguru import logger

from ..errors import SchemaValidationError, field_error

if TYPE_CHECKING:  # pragma: no cover
    from .base import FieldBase


def raw_string(raw: Any) -> str:
    """
    String form of a raw value, as used by pattern and length constraints.

    Strings are returned unchanged, booleans as ``"true"``/``"false"``, lists
    and mappings as compact JSON, anything else through ``str()``.
    """
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, (list, tuple, dict)):
        return json.dumps(raw, separators=(",", ":"), default=str)
    return str(raw)


def allowed_values(field: FieldBase) -> list[Any]:
    """Cast each enum member through the field's own caster."""
    values = []
    for member in field.enum:
        result = field.cast_bound(member)
        if not result.ok:
            logger.warning(
                f"Field '{field.name}': enum member {member!r} is not a valid "
                f"{field.type_name}, ignoring it"
            )
            continue
        values.append(result.value)
    return values


def _bound(field: FieldBase, key: str) -> Any:
    result = field.cast_bound(field.constraints[key])
    if not result.ok:
        logger.warning(
            f"Field '{field.name}': {key} {field.constraints[key]!r} is not a "
            f"valid {field.type_name}, ignoring it"
        )
        return None
    return result.value


def _range_errors(field: FieldBase, value: Any) -> list[str]:
    """Messages for violated bounds. A value that cannot be compared fails once."""
    messages = []
    for key, message, violated in (
        ("minimum", "value is below minimum", lambda bound: value < bound),
        ("maximum", "value is above maximum", lambda bound: value > bound),
    ):
        if field.constraints.get(key) is None:
            continue
        bound = _bound(field, key)
        if bound is None:
            continue
        try:
            if bool(violated(bound)):
                messages.append(message)
        except TypeError:
            messages.append(message)
            break
    return messages


def check_constraints(
    field: FieldBase, value: Any, raw: Any
) -> list[SchemaValidationError]:
    """
    Check ``value`` (native) and ``raw`` against the field's constraints.

    Every constraint is evaluated; all violations are returned in the order
    enum, pattern, minimum, maximum, minLength, maxLength. Never raises.

    Parameters
    ----------
    field : FieldBase
        The field whose constraints apply.
    value : Any
        The successfully cast native value.
    raw : Any
        The raw value it was cast from.

    Returns
    -------
    list[SchemaValidationError]
        Empty when every constraint holds.
    """
    constraints = field.constraints
    errors: list[SchemaValidationError] = []

    def fail(message: str) -> None:
        errors.append(field_error(field.name, raw, message))

    allowed = allowed_values(field)
    if allowed and value not in allowed:
        fail("value not in enum")

    pattern = constraints.get("pattern")
    if pattern is not None:
        try:
            matched = re.fullmatch(pattern, raw_string(raw)) is not None
        except re.error as e:
            logger.warning(f"Field '{field.name}': invalid pattern {pattern!r}: {e}")
            matched = False
        if not matched:
            fail("value does not match pattern")

    for message in _range_errors(field, value):
        fail(message)

    min_length = constraints.get("minLength")
    if min_length is not None and len(raw_string(raw)) < min_length:
        fail("value is below minimum length")

    max_length = constraints.get("maxLength")
    if max_length is not None and len(raw_string(raw)) > max_length:
        fail("value is above maximum length")

    return errors
