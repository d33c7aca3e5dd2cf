"""Base field class shared by every field type."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Mapping

from ..errors import FieldValidationError, SchemaValidationError, field_error
from .constraints import check_constraints

DEFAULT_FORMAT = "default"


@dataclass(frozen=True)
class CastResult:
    """
    Outcome of casting one raw value.

    Holds either the native ``value`` or a non-empty tuple of ``errors``.
    """

    value: Any = None
    errors: tuple[SchemaValidationError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> Any:
        """Return the value, or raise `FieldValidationError` with every error."""
        if self.errors:
            raise FieldValidationError(list(self.errors))
        return self.value


class FieldBase:
    """
    Base field class for table schema fields.

    A field wraps one field descriptor and knows how to cast raw values
    (strings, numbers, booleans, lists, mappings as handed over by a loader)
    into its native Python type, then check the descriptor's constraints.

    Subclasses set ``type_name`` and implement ``parse``. Fields are immutable
    once constructed and are safe to share between threads.

    Parameters
    ----------
    descriptor : Mapping, optional
        The field descriptor (``name``, ``type``, ``format``,
        ``constraints`` and type-specific keys). It is copied, never mutated.
    check_constraints : bool, default True
        When False, ``cast`` skips the required and constraint checks. Use
        ``disable_constraints()`` instead of passing this directly.

    Examples
    --------
        >>> from tablecast.fields import IntegerField
        >>> field = IntegerField({"name": "age", "constraints": {"maximum": 150}})
        >>> field.cast_value("42")
        42
        >>> [e.error for e in field.validate_value("200")]
        ['value is above maximum']
    """

    type_name: str = ""
    # Allowed values for "format"; None accepts any string (e.g. strptime patterns)
    formats: tuple[str, ...] | None = (DEFAULT_FORMAT,)

    def __init__(
        self,
        descriptor: Mapping[str, Any] | None = None,
        *,
        check_constraints: bool = True,
    ):
        self._descriptor: dict[str, Any] = copy.deepcopy(dict(descriptor or {}))
        self._check_constraints = check_constraints

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name!r}, format={self.format!r})"
        )

    @property
    def descriptor(self) -> dict[str, Any]:
        return copy.deepcopy(self._descriptor)

    def full_descriptor(self) -> dict[str, Any]:
        """Return the descriptor with ``type`` and ``format`` filled in."""
        descriptor = self.descriptor
        descriptor["type"] = self.type_name
        descriptor["format"] = self.format
        return descriptor

    @property
    def name(self) -> str | None:
        return self._descriptor.get("name")

    @property
    def format(self) -> str:
        return self._descriptor.get("format") or DEFAULT_FORMAT

    @property
    def constraints(self) -> dict[str, Any]:
        if not self._check_constraints:
            return {}
        return dict(self._descriptor.get("constraints") or {})

    @property
    def required(self) -> bool:
        return bool(self.constraints.get("required", False))

    @property
    def unique(self) -> bool:
        return bool(self.constraints.get("unique", False))

    @property
    def enum(self) -> list[Any]:
        return list(self.constraints.get("enum") or [])

    def disable_constraints(self) -> "FieldBase":
        """Return a copy of this field that skips all constraint checks."""
        return type(self)(self._descriptor, check_constraints=False)

    def is_empty(self, raw: Any) -> bool:
        return raw is None

    def parse(self, raw: Any) -> Any:
        """
        Interpret a non-empty raw value as the native type.

        Raises
        ------
        ValueError
            If the value cannot be cast. The message becomes the error text.
        """
        raise NotImplementedError

    def cast(self, raw: Any) -> CastResult:
        """Cast ``raw``, returning a `CastResult` instead of raising."""
        return self._cast(raw, self._check_constraints)

    def cast_bound(self, raw: Any) -> CastResult:
        """Cast a constraint bound or enum member, with constraints disabled."""
        return self._cast(raw, False)

    def _cast(self, raw: Any, constrained: bool) -> CastResult:
        if self.is_empty(raw):
            if constrained and self.required:
                return CastResult(errors=(self._error(raw, "field is required"),))
            return CastResult(None)

        try:
            value = self.parse(raw)
        except ValueError as e:
            return CastResult(errors=(self._error(raw, str(e)),))

        if constrained:
            errors = check_constraints(self, value, raw)
            if errors:
                return CastResult(errors=tuple(errors))
        return CastResult(value)

    def cast_value(self, raw: Any) -> Any:
        """
        Cast a raw value to the native type and check constraints.

        Returns
        -------
        Any
            The native value, or None for an empty value.

        Raises
        ------
        FieldValidationError
            Carrying every error found: the required error, the parse error,
            or all violated constraints.
        """
        return self.cast(raw).unwrap()

    def validate_value(self, raw: Any) -> list[SchemaValidationError]:
        """Return the list of errors for ``raw``; empty when it is valid."""
        return list(self.cast(raw).errors)

    def _error(self, raw: Any, message: str) -> SchemaValidationError:
        return field_error(self.name, raw, message)

    def _type_error(self, suffix: str = "") -> ValueError:
        message = f"value is not {self.type_name}"
        if self.format != DEFAULT_FORMAT:
            message += f" (format: {self.format})"
        return ValueError(message + suffix)

    @classmethod
    def infer_descriptor(cls, descriptor: Mapping[str, Any]) -> "FieldBase | None":
        """Build a field when ``descriptor["type"]`` is this field's type."""
        if descriptor.get("type") == cls.type_name:
            return cls(descriptor)
        return None

    @classmethod
    def infer(
        cls,
        value: Any,
        descriptor: Mapping[str, Any] | None = None,
        lenient: bool = False,
    ) -> "FieldBase | None":
        """
        Try to build a field of this type that can hold ``value``.

        Returns
        -------
        FieldBase | None
            A field with a refined descriptor, or None when ``value`` does
            not cast as this type.
        """
        field = cls(descriptor)
        if not field.cast(value).ok:
            return None
        return field.infer_properties(value, lenient)

    def infer_properties(self, value: Any, lenient: bool) -> "FieldBase":
        """Return a copy whose descriptor records what was learned from ``value``."""
        descriptor = self.descriptor
        descriptor["type"] = self.type_name
        return type(self)(descriptor, check_constraints=self._check_constraints)

    def get_infer_identifier(self, lenient: bool = False) -> str:
        """Key used to group values of the same kind during inference."""
        return self.type_name

    def get_python_type(self) -> type:
        """Return the Python type for this field."""
        raise NotImplementedError

    def get_polars_dtype(self):
        """Return the Polars dtype for this field."""
        raise NotImplementedError

    def get_sqlalchemy_type(self):
        """Return a SQLAlchemy type instance for this field."""
        raise NotImplementedError

    def to_polars_value(self, value: Any) -> Any:
        """Convert a native value to what a Polars column of this dtype holds."""
        return value
