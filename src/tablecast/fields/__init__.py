"""Field types, the type registry and single-value inference."""

from __future__ import annotations

from typing import Any, Mapping

from loguru import logger

from .base import DEFAULT_FORMAT, CastResult, FieldBase
from .constraints import check_constraints, raw_string
from .primitive import AnyField, BooleanField, IntegerField, NumberField, StringField
from .structured import ArrayField, GeojsonField, GeopointField, ObjectField
from .temporal import (
    DateField,
    DatetimeField,
    Duration,
    DurationField,
    TimeField,
    YearField,
    YearMonthField,
)

DEFAULT_TYPE = "string"

# Type tag -> field class
FIELD_CLASSES: dict[str, type[FieldBase]] = {
    cls.type_name: cls
    for cls in (
        StringField,
        IntegerField,
        NumberField,
        BooleanField,
        DateField,
        TimeField,
        DatetimeField,
        YearField,
        YearMonthField,
        DurationField,
        ArrayField,
        ObjectField,
        GeopointField,
        GeojsonField,
        AnyField,
    )
}

# Candidates tried by inference, most specific first
INFERENCE_ORDER: tuple[type[FieldBase], ...] = (
    IntegerField,
    NumberField,
    BooleanField,
    DateField,
    TimeField,
    DatetimeField,
    YearMonthField,
    DurationField,
    GeopointField,
    GeojsonField,
    ArrayField,
    ObjectField,
    StringField,
    AnyField,
)


def field_from_descriptor(descriptor: Mapping[str, Any]) -> FieldBase:
    """
    Create the field matching ``descriptor["type"]``.

    A missing ``type`` means ``string``.

    Raises
    ------
    ValueError
        If the type is unknown. Schema descriptors are validated before
        fields are built, so this only happens for hand-built descriptors.
    """
    descriptor = dict(descriptor)
    descriptor.setdefault("type", DEFAULT_TYPE)
    for cls in FIELD_CLASSES.values():
        field = cls.infer_descriptor(descriptor)
        if field is not None:
            return field
    raise ValueError(
        f"Field '{descriptor.get('name')}': unknown field type "
        f"'{descriptor['type']}'. Supported types: {', '.join(FIELD_CLASSES)}"
    )


def infer_field(
    value: Any,
    descriptor: Mapping[str, Any] | None = None,
    lenient: bool = False,
) -> FieldBase | None:
    """
    Return the most specific field that can cast ``value``.

    Candidates are tried in `INFERENCE_ORDER`; the first applicable one
    wins. Never raises. Returns None only when nothing applies, which
    cannot happen while ``any`` is a candidate.
    """
    descriptor = {
        key: val for key, val in (descriptor or {}).items() if key not in ("type", "format")
    }
    for cls in INFERENCE_ORDER:
        field = cls.infer(value, descriptor, lenient)
        if field is not None:
            logger.debug(f"Inferred {field.type_name} ({field.format}) for {value!r}")
            return field
    return None


__all__ = [
    "AnyField",
    "ArrayField",
    "BooleanField",
    "CastResult",
    "DEFAULT_FORMAT",
    "DEFAULT_TYPE",
    "DateField",
    "DatetimeField",
    "Duration",
    "DurationField",
    "FIELD_CLASSES",
    "FieldBase",
    "GeojsonField",
    "GeopointField",
    "INFERENCE_ORDER",
    "IntegerField",
    "NumberField",
    "ObjectField",
    "StringField",
    "TimeField",
    "YearField",
    "YearMonthField",
    "check_constraints",
    "field_from_descriptor",
    "infer_field",
    "raw_string",
]
