"""SQLAlchemy table generator."""

from typing import TYPE_CHECKING

from sqlalchemy import Column, MetaData, Table

if TYPE_CHECKING:
    from ..schema import Schema


def create_sqlalchemy_table(
    schema: "Schema",
    table_name: str,
    metadata: MetaData | None = None,
) -> Table:
    """
    Generate a SQLAlchemy Table from a Schema.

    Parameters
    ----------
    schema : Schema
        The schema whose fields become columns.
    table_name : str
        The name of the SQL table to create.
    metadata : sqlalchemy.MetaData, optional
        An existing MetaData instance. If not provided, a new MetaData
        object is created.

    Returns
    -------
    sqlalchemy.Table
        Columns follow field order; ``required`` fields are NOT NULL,
        ``unique`` fields get a unique constraint and ``primaryKey``
        fields form the primary key.
    """
    if metadata is None:
        metadata = MetaData()

    primary_key = set(schema.primary_key())
    columns = []

    for field_name, field in schema.fields().items():
        column_kwargs = {"nullable": not field.required}

        if field_name in primary_key:
            column_kwargs["primary_key"] = True
            column_kwargs["nullable"] = False
            # Composite and text keys must not become SERIAL columns
            column_kwargs["autoincrement"] = False

        if field.unique:
            column_kwargs["unique"] = True

        description = field.descriptor.get("description")
        if description:
            column_kwargs["comment"] = description

        columns.append(Column(field_name, field.get_sqlalchemy_type(), **column_kwargs))

    return Table(table_name, metadata, *columns)
