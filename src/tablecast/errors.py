"""Structured validation errors and the exceptions that carry them."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Category of a validation error."""

    LOAD_FAILED = "LOAD_FAILED"
    SCHEMA_VALIDATION_FAILED = "SCHEMA_VALIDATION_FAILED"
    FIELD_VALIDATION = "FIELD_VALIDATION"


@dataclass(frozen=True)
class SchemaValidationError:
    """
    One validation problem.

    Parameters
    ----------
    kind : ErrorKind
        What stage produced the error.
    error : str
        Human-readable message, e.g. ``"value is above maximum"``.
    field : str, optional
        Name of the field the error belongs to.
    value : Any, optional
        The raw value that was rejected.
    row : int, optional
        Index of the row, set by frame-level casting.
    """

    kind: ErrorKind
    error: str
    field: str | None = None
    value: Any = None
    row: int | None = None

    @property
    def message(self) -> str:
        return self.error

    def with_row(self, row: int) -> "SchemaValidationError":
        return replace(self, row=row)

    def __str__(self) -> str:
        text = self.error
        if self.field is not None:
            text = f"{self.field}: {text} ({self.value!r})"
        if self.row is not None:
            text = f"row {self.row}: {text}"
        return text


def field_error(field: str | None, value: Any, error: str) -> SchemaValidationError:
    """Build a FIELD_VALIDATION error record."""
    return SchemaValidationError(
        ErrorKind.FIELD_VALIDATION, error, field=field, value=value
    )


class TableSchemaError(Exception):
    """Base exception; carries the full list of validation errors."""

    kind: ErrorKind = ErrorKind.FIELD_VALIDATION

    def __init__(self, validation_errors: list[SchemaValidationError]):
        self.validation_errors = list(validation_errors)
        super().__init__(self._format())

    def _format(self) -> str:
        lines = [str(error) for error in self.validation_errors]
        if len(lines) == 1:
            return lines[0]
        return f"{len(lines)} validation errors:\n" + "\n".join(
            f"  - {line}" for line in lines
        )


class SchemaLoadError(TableSchemaError):
    """The descriptor source could not be read or parsed."""

    kind = ErrorKind.LOAD_FAILED

    def __init__(self, message: str, source: Any = None):
        self.source = source
        super().__init__([SchemaValidationError(ErrorKind.LOAD_FAILED, message)])


class SchemaValidationFailedError(TableSchemaError):
    """The descriptor is structurally invalid."""

    kind = ErrorKind.SCHEMA_VALIDATION_FAILED


class FieldValidationError(TableSchemaError, ValueError):
    """One or more values failed required, parse or constraint checks."""

    kind = ErrorKind.FIELD_VALIDATION
