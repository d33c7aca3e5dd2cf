"""Cast whole Polars DataFrames through a schema, row by row."""

from typing import TYPE_CHECKING, Any, Dict, List

import polars as pl
from loguru import logger

from ..errors import FieldValidationError, SchemaValidationError

if TYPE_CHECKING:
    from ..schema import Schema


class PolarsCaster:
    """Applies a schema to Polars DataFrames of raw values."""

    def __init__(self, schema: "Schema") -> None:
        self.schema = schema
        self.fields = schema.fields()
        self._polars_schema = self._build_polars_schema()

    def _build_polars_schema(self) -> Dict[str, pl.DataType]:
        """Build Polars schema dict from fields."""
        return {name: field.get_polars_dtype() for name, field in self.fields.items()}

    def _cast_rows(
        self, df: pl.DataFrame
    ) -> tuple[List[Dict[str, Any]], List[SchemaValidationError]]:
        rows = []
        errors = []
        for index, row in enumerate(df.iter_rows(named=True)):
            result = self.schema.cast(row)
            if result.ok:
                rows.append(result.value)
            else:
                errors.extend(error.with_row(index) for error in result.errors)
        return rows, errors

    def _build_frame(self, rows: List[Dict[str, Any]]) -> pl.DataFrame:
        columns = []
        for name, field in self.fields.items():
            values = [field.to_polars_value(row[name]) for row in rows]
            columns.append(pl.Series(name, values, dtype=self._polars_schema[name]))
        return pl.DataFrame(columns)

    def cast(
        self,
        df: pl.DataFrame,
        strict: bool = True,
        show_violations: bool = False,
    ) -> pl.DataFrame:
        """
        Cast every row of a DataFrame and return a typed DataFrame.

        Columns not declared in the schema are dropped; declared columns
        missing from ``df`` read as null.

        Parameters
        ----------
        df : pl.DataFrame
            Input DataFrame of raw values (typically all ``Utf8``).
        strict : bool, default True
            If True, raise when any row fails. If False, drop failing rows.
        show_violations : bool, default False
            If True, log each error of dropped rows.

        Returns
        -------
        pl.DataFrame
            One column per field, in declaration order, with the field's
            Polars dtype.

        Raises
        ------
        FieldValidationError
            If ``strict`` and any row fails; carries the errors of every
            row, each tagged with its row index.
        """
        rows, errors = self._cast_rows(df)

        if errors:
            failed = len({error.row for error in errors})
            if strict:
                raise FieldValidationError(errors)
            logger.info(f"Dropped {failed} of {df.height} rows that failed casting")
            if show_violations:
                for error in errors:
                    logger.warning(f"Cast error: {error}")

        return self._build_frame(rows)

    def validate(self, df: pl.DataFrame) -> List[SchemaValidationError]:
        """Return every error in ``df``, each tagged with its row index."""
        _, errors = self._cast_rows(df)
        return errors

    @property
    def polars_schema(self) -> Dict[str, pl.DataType]:
        """Return the Polars schema dict."""
        return self._polars_schema.copy()


def create_polars_caster(schema: "Schema") -> PolarsCaster:
    """
    Create a Polars caster from a Schema.

    Parameters
    ----------
    schema : Schema
        The schema to apply.

    Returns
    -------
    PolarsCaster
        An instance of PolarsCaster for the given schema.
    """
    return PolarsCaster(schema)
