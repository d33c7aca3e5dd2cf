"""Generators for Polars and SQLAlchemy."""

from .polars import PolarsCaster, create_polars_caster
from .sqlalchemy import create_sqlalchemy_table

__all__ = ["PolarsCaster", "create_polars_caster", "create_sqlalchemy_table"]
