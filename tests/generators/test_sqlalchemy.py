"""Tests for SQLAlchemy table generation."""

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Text,
)

from tablecast import Schema
from tablecast.generators import create_sqlalchemy_table


class TestSQLAlchemyTableGeneration:
    """Test SQLAlchemy table generation."""

    def test_basic_table_generation(self, person_schema):
        """Basic table is generated correctly."""
        table = person_schema.to_sqlalchemy("people")

        assert table.name == "people"
        assert [c.name for c in table.columns] == ["id", "name", "age", "code"]

    def test_function_matches_method(self, person_schema):
        table = create_sqlalchemy_table(person_schema, "people")
        assert len(table.columns) == 4

    def test_all_field_types_in_table(self, typed_descriptor):
        """Field types map to SQLAlchemy column types."""
        table = Schema(typed_descriptor).to_sqlalchemy("typed")

        assert isinstance(table.c.id.type, Integer)
        assert isinstance(table.c.price.type, Float)
        assert isinstance(table.c.active.type, Boolean)
        assert isinstance(table.c.born.type, Date)
        assert isinstance(table.c.seen_at.type, DateTime)
        assert isinstance(table.c.period.type, String)
        assert table.c.period.type.length == 7

    def test_string_length(self, person_schema):
        """maxLength gives VARCHAR, otherwise TEXT."""
        table = person_schema.to_sqlalchemy("people")

        assert type(table.c.name.type) is String
        assert table.c.name.type.length == 20
        assert isinstance(table.c.code.type, Text)

    def test_structured_types_are_json(self):
        schema = Schema(
            {"fields": [{"name": "tags", "type": "array"}, {"name": "meta", "type": "object"}]}
        )
        table = schema.to_sqlalchemy("docs")
        assert isinstance(table.c.tags.type, JSON)
        assert isinstance(table.c.meta.type, JSON)


class TestSQLAlchemyConstraints:
    """Test column options derived from constraints."""

    def test_required_is_not_nullable(self, person_schema):
        table = person_schema.to_sqlalchemy("people")

        assert table.c.id.nullable is False
        assert table.c.name.nullable is True

    def test_primary_key(self, person_schema):
        table = person_schema.to_sqlalchemy("people")

        assert [c.name for c in table.primary_key.columns] == ["id"]
        assert table.c.id.autoincrement is False

    def test_composite_primary_key(self):
        schema = Schema(
            {
                "fields": [
                    {"name": "country", "type": "string"},
                    {"name": "year", "type": "year"},
                    {"name": "value", "type": "number"},
                ],
                "primaryKey": ["country", "year"],
            }
        )
        table = schema.to_sqlalchemy("stats")

        assert [c.name for c in table.primary_key.columns] == ["country", "year"]
        assert table.c.country.nullable is False

    def test_unique(self):
        schema = Schema(
            {"fields": [{"name": "email", "type": "string", "constraints": {"unique": True}}]}
        )
        assert schema.to_sqlalchemy("users").c.email.unique is True

    def test_description_becomes_comment(self):
        schema = Schema(
            {"fields": [{"name": "n", "type": "integer", "description": "Row count"}]}
        )
        assert schema.to_sqlalchemy("counts").c.n.comment == "Row count"


class TestSQLAlchemyMetadata:
    """Test MetaData handling."""

    def test_custom_metadata(self, person_schema):
        metadata = MetaData()
        table = person_schema.to_sqlalchemy("people", metadata=metadata)

        assert table.metadata is metadata
        assert "people" in metadata.tables

    def test_tables_share_metadata(self, person_schema, typed_descriptor):
        metadata = MetaData()
        person_schema.to_sqlalchemy("people", metadata=metadata)
        Schema(typed_descriptor).to_sqlalchemy("typed", metadata=metadata)

        assert set(metadata.tables) == {"people", "typed"}
