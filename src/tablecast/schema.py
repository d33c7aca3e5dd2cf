"""The `Schema` class: builds fields from a descriptor and casts rows."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from loguru import logger

from .descriptor import primary_key_names, validate_descriptor
from .errors import (
    FieldValidationError,
    SchemaValidationError,
    SchemaValidationFailedError,
    TableSchemaError,
)
from .fields import CastResult, FieldBase, field_from_descriptor
from .inference import infer_schema
from .loader import load_descriptor

if TYPE_CHECKING:  # pragma: no cover
    from sqlalchemy import MetaData, Table

    from .generators.polars import PolarsCaster


class Schema:
    """
    A table schema: an ordered set of typed, constrained fields.

    Construction loads the descriptor, validates its structure and builds
    one field per entry. It either succeeds completely or raises; a partial
    schema is never returned. Instances are immutable and can be shared.

    Parameters
    ----------
    descriptor : Mapping | str | os.PathLike
        A descriptor mapping, JSON text, a file path or an ``http(s)`` URL.

    Raises
    ------
    SchemaLoadError
        If the source cannot be read or parsed.
    SchemaValidationFailedError
        If the descriptor is structurally invalid; carries every problem.

    Examples
    --------
    Cast and validate rows:

        >>> from tablecast import Schema
        >>> schema = Schema({
        ...     "fields": [
        ...         {"name": "id", "type": "integer", "constraints": {"required": True}},
        ...         {"name": "age", "type": "integer",
        ...          "constraints": {"minimum": 0, "maximum": 150}},
        ...     ],
        ...     "missingValues": ["", "NA"],
        ... })
        >>> schema.cast_row({"id": "1", "age": "NA"})
        {'id': 1, 'age': None}
        >>> [e.error for e in schema.validate_row({"id": "2", "age": "200"})]
        ['value is above maximum']

    Infer a schema from sample rows:

        >>> schema = Schema.infer([{"id": "1", "name": "Alice"}])
        >>> [f.type_name for f in schema.fields().values()]
        ['integer', 'string']
    """

    def __init__(self, descriptor: Any):
        self._descriptor = load_descriptor(descriptor)
        errors = validate_descriptor(self._descriptor)
        if errors:
            raise SchemaValidationFailedError(errors)

        self._fields: dict[str, FieldBase] = {}
        for field_descriptor in self._descriptor["fields"]:
            field = field_from_descriptor(field_descriptor)
            self._fields[field.name] = field
        self._missing_values = list(self._descriptor.get("missingValues") or [])
        self._primary_key = primary_key_names(self._descriptor.get("primaryKey"))

        logger.debug(f"Built schema with fields: {', '.join(self._fields)}")

    def __repr__(self) -> str:
        return f"Schema(fields={list(self._fields)!r})"

    @staticmethod
    def validate(descriptor: Any) -> list[SchemaValidationError]:
        """
        Load and validate a descriptor source without keeping the schema.

        Returns
        -------
        list[SchemaValidationError]
            Empty on success; a single LOAD_FAILED record if the source
            could not be loaded; otherwise every structural error.
        """
        try:
            Schema(descriptor)
        except TableSchemaError as e:
            return e.validation_errors
        return []

    @classmethod
    def infer(
        cls,
        rows: Iterable[Mapping[str, Any]],
        lenient: bool = False,
        missing_values: list[str] | None = None,
    ) -> "Schema":
        """Build a schema whose fields are inferred from sample ``rows``."""
        return cls(infer_schema(rows, lenient=lenient, missing_values=missing_values))

    @property
    def descriptor(self) -> dict[str, Any]:
        return copy.deepcopy(self._descriptor)

    def fields(self) -> dict[str, FieldBase]:
        """Return a name -> field mapping in declaration order."""
        return self._fields.copy()

    def field(self, name: str) -> FieldBase:
        """
        Return the field called ``name``.

        Raises
        ------
        KeyError
            If no such field is declared.
        """
        return self._fields[name]

    @property
    def field_names(self) -> list[str]:
        return list(self._fields)

    def missing_values(self) -> list[Any]:
        return list(self._missing_values)

    def primary_key(self) -> list[str]:
        return list(self._primary_key)

    def _is_missing(self, value: Any) -> bool:
        return any(
            type(value) is type(missing) and value == missing
            for missing in self._missing_values
        )

    def cast(self, row: Mapping[str, Any]) -> CastResult:
        """
        Cast every declared field of ``row`` without raising.

        Returns
        -------
        CastResult
            The cast row as ``value``, or every error from every field.
        """
        out_row: dict[str, Any] = {}
        errors: list[SchemaValidationError] = []
        for name, field in self._fields.items():
            raw = row.get(name)
            if self._is_missing(raw):
                raw = None
            result = field.cast(raw)
            if result.ok:
                out_row[name] = result.value
            else:
                errors.extend(result.errors)

        if errors:
            return CastResult(errors=tuple(errors))
        return CastResult(out_row)

    def cast_row(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """
        Cast a row to native values.

        Missing keys read as None, missing-value sentinels become None, and
        keys not declared in the schema are dropped.

        Raises
        ------
        FieldValidationError
            Carrying the errors of all fields, not just the first failure.
        """
        result = self.cast(row)
        if not result.ok:
            raise FieldValidationError(list(result.errors))
        return result.value

    def validate_row(self, row: Mapping[str, Any]) -> list[SchemaValidationError]:
        """Return every error for ``row``; empty when it casts cleanly."""
        return list(self.cast(row).errors)

    def to_polars_caster(self) -> "PolarsCaster":
        """
        Build a caster that applies this schema to Polars DataFrames.

        Examples
        --------
            >>> import polars as pl
            >>> schema = Schema({"fields": [{"name": "n", "type": "integer"}]})
            >>> schema.to_polars_caster().cast(pl.DataFrame({"n": ["1", "2"]}))["n"].to_list()
            [1, 2]
        """
        from .generators.polars import create_polars_caster

        return create_polars_caster(self)

    def to_sqlalchemy(self, table_name: str, metadata: "MetaData | None" = None) -> "Table":
        """Generate a SQLAlchemy `Table` with one column per field."""
        from .generators.sqlalchemy import create_sqlalchemy_table

        return create_sqlalchemy_table(self, table_name=table_name, metadata=metadata)
