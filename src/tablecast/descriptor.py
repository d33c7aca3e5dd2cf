"""Structural validation of schema descriptors."""

from __future__ import annotations

import re
from typing import Annotated, Any, Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import ErrorKind, SchemaValidationError
from .fields import DEFAULT_FORMAT, DEFAULT_TYPE, FIELD_CLASSES, field_from_descriptor

Length = Annotated[StrictInt, Field(ge=0)]


class ConstraintsDescriptor(BaseModel):
    """The ``constraints`` object of a field descriptor."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    required: StrictBool | None = None
    unique: StrictBool | None = None
    enum: list[Any] | None = None
    pattern: StrictStr | None = None
    minimum: Any = None
    maximum: Any = None
    min_length: Length | None = Field(default=None, alias="minLength")
    max_length: Length | None = Field(default=None, alias="maxLength")

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid pattern {value!r}: {e}") from e
        return value


class FieldDescriptor(BaseModel):
    """One entry of the ``fields`` array."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: StrictStr = Field(min_length=1)
    type: StrictStr = DEFAULT_TYPE
    format: StrictStr = DEFAULT_FORMAT
    title: StrictStr | None = None
    description: StrictStr | None = None
    constraints: ConstraintsDescriptor | None = None

    # Type-specific keys (number, integer, boolean)
    decimal_char: Annotated[StrictStr, Field(min_length=1)] | None = Field(
        default=None, alias="decimalChar"
    )
    group_char: StrictStr | None = Field(default=None, alias="groupChar")
    bare_number: StrictBool | None = Field(default=None, alias="bareNumber")
    true_values: list[StrictStr] | None = Field(default=None, alias="trueValues")
    false_values: list[StrictStr] | None = Field(default=None, alias="falseValues")

    @model_validator(mode="after")
    def _known_type_and_format(self) -> "FieldDescriptor":
        field_class = FIELD_CLASSES.get(self.type)
        if field_class is None:
            raise ValueError(
                f"unknown field type '{self.type}'; "
                f"supported types: {', '.join(FIELD_CLASSES)}"
            )
        if field_class.formats is not None and self.format not in field_class.formats:
            raise ValueError(
                f"unknown format '{self.format}' for type '{self.type}'; "
                f"supported formats: {', '.join(field_class.formats)}"
            )
        return self


class SchemaDescriptor(BaseModel):
    """A table schema descriptor."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    fields: list[FieldDescriptor] = Field(min_length=1)
    missing_values: list[StrictStr] = Field(default_factory=list, alias="missingValues")
    primary_key: StrictStr | list[StrictStr] | None = Field(
        default=None, alias="primaryKey"
    )

    @model_validator(mode="after")
    def _names_consistent(self) -> "SchemaDescriptor":
        names = [field.name for field in self.fields]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate field names: {', '.join(duplicates)}")

        for key in primary_key_names(self.primary_key):
            if key not in names:
                raise ValueError(f"primary key field '{key}' is not declared")
        return self


def primary_key_names(primary_key: str | list[str] | None) -> list[str]:
    """Normalize a ``primaryKey`` value to a list of field names."""
    if primary_key is None:
        return []
    if isinstance(primary_key, str):
        return [primary_key]
    return list(primary_key)


def _field_name(descriptor: Mapping[str, Any], loc: tuple[Any, ...]) -> str | None:
    if len(loc) >= 2 and loc[0] == "fields" and isinstance(loc[1], int):
        fields = descriptor.get("fields")
        if isinstance(fields, list) and loc[1] < len(fields):
            entry = fields[loc[1]]
            if isinstance(entry, Mapping) and isinstance(entry.get("name"), str):
                return entry["name"]
    return None


def _bound_errors(descriptor: Mapping[str, Any]) -> list[SchemaValidationError]:
    """Cast every enum member and range bound through its field's type."""
    errors = []

    def fail(where: str, field: Any, value: Any) -> None:
        errors.append(
            SchemaValidationError(
                ErrorKind.SCHEMA_VALIDATION_FAILED,
                f"{where}: {value!r} is not a valid {field.type_name}",
                field=field.name,
                value=value,
            )
        )

    for index, entry in enumerate(descriptor["fields"]):
        field = field_from_descriptor(entry)
        constraints = entry.get("constraints") or {}
        for position, member in enumerate(constraints.get("enum") or []):
            if not field.cast_bound(member).ok:
                fail(f"fields.{index}.constraints.enum.{position}", field, member)
        for key in ("minimum", "maximum"):
            bound = constraints.get(key)
            if bound is not None and not field.cast_bound(bound).ok:
                fail(f"fields.{index}.constraints.{key}", field, bound)
    return errors


def validate_descriptor(descriptor: Any) -> list[SchemaValidationError]:
    """
    Check the structure of a parsed descriptor.

    Structure is checked first. Once it holds, every enum member and
    ``minimum``/``maximum`` bound must cast as its field's type.

    Parameters
    ----------
    descriptor : Any
        The parsed descriptor, normally a dict.

    Returns
    -------
    list[SchemaValidationError]
        One SCHEMA_VALIDATION_FAILED record per problem; empty when the
        descriptor is valid.

    Examples
    --------
        >>> validate_descriptor({"fields": [{"name": "id", "type": "integer"}]})
        []
        >>> errors = validate_descriptor({"fields": [{"name": "x", "type": "nope"}]})
        >>> errors[0].field
        'x'
    """
    if not isinstance(descriptor, Mapping):
        return [
            SchemaValidationError(
                ErrorKind.SCHEMA_VALIDATION_FAILED, "descriptor must be an object"
            )
        ]

    try:
        SchemaDescriptor.model_validate(descriptor)
    except ValidationError as exc:
        errors = []
        for error in exc.errors():
            loc = tuple(error["loc"])
            where = ".".join(str(part) for part in loc) or "descriptor"
            errors.append(
                SchemaValidationError(
                    ErrorKind.SCHEMA_VALIDATION_FAILED,
                    f"{where}: {error['msg']}",
                    field=_field_name(descriptor, loc),
                    value=error.get("input"),
                )
            )
        return errors
    return _bound_errors(descriptor)
