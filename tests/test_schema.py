"""Tests for Schema construction and row casting."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from tablecast import (
    ErrorKind,
    FieldValidationError,
    Schema,
    SchemaLoadError,
    SchemaValidationFailedError,
)
from tablecast.fields import IntegerField, StringField


class TestSchemaConstruction:
    """Test building a Schema from a descriptor."""

    def test_fields_in_declaration_order(self, person_schema):
        fields = person_schema.fields()
        assert list(fields) == ["id", "name", "age", "code"]
        assert isinstance(fields["id"], IntegerField)
        assert isinstance(fields["code"], StringField)

    def test_fields_returns_copy(self, person_schema):
        fields = person_schema.fields()
        fields.pop("id")
        assert "id" in person_schema.fields()

    def test_field_lookup(self, person_schema):
        assert person_schema.field("age").name == "age"
        assert person_schema.field_names == ["id", "name", "age", "code"]
        with pytest.raises(KeyError):
            person_schema.field("missing")

    def test_missing_values_and_primary_key(self, person_schema):
        assert person_schema.missing_values() == ["", "NA"]
        assert person_schema.primary_key() == ["id"]

    def test_defaults_when_options_absent(self):
        schema = Schema({"fields": [{"name": "a"}]})
        assert schema.missing_values() == []
        assert schema.primary_key() == []
        assert isinstance(schema.field("a"), StringField)

    def test_descriptor_is_copied(self, person_descriptor):
        schema = Schema(person_descriptor)
        person_descriptor["fields"].append({"name": "extra"})
        assert "extra" not in schema.fields()
        schema.descriptor["fields"].clear()
        assert len(schema.fields()) == 4

    def test_from_json_text(self, person_descriptor):
        schema = Schema(json.dumps(person_descriptor))
        assert schema.field_names == ["id", "name", "age", "code"]

    def test_from_file(self, tmp_path, person_descriptor):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps(person_descriptor), encoding="utf-8")
        assert Schema(str(path)).field_names == ["id", "name", "age", "code"]
        assert Schema(path).field_names == ["id", "name", "age", "code"]

    def test_invalid_descriptor_raises_with_all_errors(self):
        descriptor = {
            "fields": [
                {"name": "a", "type": "money"},
                {"type": "integer"},
            ]
        }
        with pytest.raises(SchemaValidationFailedError) as exc_info:
            Schema(descriptor)

        errors = exc_info.value.validation_errors
        assert len(errors) == 2
        assert all(e.kind is ErrorKind.SCHEMA_VALIDATION_FAILED for e in errors)

    @pytest.mark.parametrize(
        "field",
        [
            {"name": "s", "type": "string", "constraints": {"maxLength": "5"}},
            {"name": "n", "type": "number", "decimalChar": 5},
            {"name": "n", "type": "integer", "bareNumber": "false"},
            {"name": "b", "type": "boolean", "trueValues": "yes"},
            {"name": "n", "type": "integer", "constraints": {"maximum": "ten"}},
            {"name": "n", "type": "integer", "constraints": {"enum": ["one"]}},
        ],
    )
    def test_mistyped_options_rejected_at_construction(self, field):
        """Options that would break casting later are structural errors."""
        with pytest.raises(SchemaValidationFailedError):
            Schema({"fields": [field]})
        assert len(Schema.validate({"fields": [field]})) == 1

    def test_unloadable_source_raises(self, tmp_path):
        with pytest.raises(SchemaLoadError):
            Schema(str(tmp_path / "nope.json"))


class TestSchemaValidate:
    """Test the static Schema.validate."""

    def test_valid_descriptor(self, person_descriptor):
        assert Schema.validate(person_descriptor) == []

    def test_load_failure(self):
        errors = Schema.validate("{not json")
        assert len(errors) == 1
        assert errors[0].kind is ErrorKind.LOAD_FAILED

    def test_structural_failure(self):
        errors = Schema.validate({"fields": [{"name": "a", "type": "money"}]})
        assert len(errors) == 1
        assert errors[0].kind is ErrorKind.SCHEMA_VALIDATION_FAILED
        assert errors[0].field == "a"


class TestCastRow:
    """Test Schema.cast_row and validate_row."""

    def test_valid_row(self, person_schema):
        row = person_schema.cast_row({"id": "1", "name": "Alice", "age": "34", "code": "ABC"})
        assert row == {"id": 1, "name": "Alice", "age": 34, "code": "ABC"}

    def test_output_has_exactly_declared_fields(self, person_schema):
        """Missing keys become None and undeclared keys are dropped."""
        row = person_schema.cast_row({"id": "1", "extra": "ignored"})
        assert row == {"id": 1, "name": None, "age": None, "code": None}

    def test_above_maximum(self):
        schema = Schema(
            {
                "fields": [
                    {
                        "name": "age",
                        "type": "integer",
                        "constraints": {"minimum": 0, "maximum": 150},
                    }
                ]
            }
        )
        with pytest.raises(FieldValidationError) as exc_info:
            schema.cast_row({"age": "200"})

        (error,) = exc_info.value.validation_errors
        assert error.kind is ErrorKind.FIELD_VALIDATION
        assert error.field == "age"
        assert error.error == "value is above maximum"

    def test_pattern(self):
        schema = Schema(
            {"fields": [{"name": "code", "type": "string", "constraints": {"pattern": "[A-Z]{3}"}}]}
        )
        assert [e.error for e in schema.validate_row({"code": "abc"})] == [
            "value does not match pattern"
        ]
        assert schema.cast_row({"code": "ABC"}) == {"code": "ABC"}

    def test_errors_from_every_field_collected(self, person_schema):
        """A required-missing field and a pattern violation give two errors."""
        errors = person_schema.validate_row({"name": "Bob", "code": "abc"})
        assert [(e.field, e.error) for e in errors] == [
            ("id", "field is required"),
            ("code", "value does not match pattern"),
        ]

    def test_missing_value_for_optional_field(self, person_schema):
        row = person_schema.cast_row({"id": "1", "age": "NA"})
        assert row["age"] is None

    def test_missing_value_for_required_field(self, person_schema):
        errors = person_schema.validate_row({"id": "NA"})
        assert [(e.field, e.error) for e in errors] == [("id", "field is required")]

    def test_missing_values_compare_by_type(self):
        """A numeric 0 is not the missing-value string '0'."""
        schema = Schema({"fields": [{"name": "n", "type": "integer"}], "missingValues": ["0"]})
        assert schema.cast_row({"n": 0}) == {"n": 0}
        assert schema.cast_row({"n": "0"}) == {"n": None}

    def test_parse_error_does_not_stop_other_fields(self, person_schema):
        errors = person_schema.validate_row({"id": "x", "age": "y", "name": "Al"})
        assert [(e.field, e.error) for e in errors] == [
            ("id", "value is not integer"),
            ("age", "value is not integer"),
        ]

    def test_validate_row_never_raises_on_huge_numbers(self):
        schema = Schema(
            {
                "fields": [
                    {"name": "x", "type": "number"},
                    {"name": "p", "type": "geopoint", "format": "array"},
                ]
            }
        )
        errors = schema.validate_row({"x": 10**400, "p": [10**400, 0]})
        assert [(e.field, e.error) for e in errors] == [
            ("x", "value is not number"),
            ("p", "value is not geopoint (format: array)"),
        ]

    def test_validate_row_empty_on_success(self, person_schema, valid_rows):
        for row in valid_rows:
            assert person_schema.validate_row(row) == []

    def test_cast_result(self, person_schema):
        result = person_schema.cast({"id": "1"})
        assert result.ok
        assert result.value["id"] == 1

    def test_error_message(self, person_schema):
        with pytest.raises(FieldValidationError, match="2 validation errors"):
            person_schema.cast_row({"id": "NA", "age": "200"})

    def test_schema_shared_across_threads(self, person_schema):
        rows = [{"id": str(i), "age": str(i % 200)} for i in range(200)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(person_schema.validate_row, rows))

        failing = [i for i, errors in enumerate(results) if errors]
        assert failing == [i for i in range(200) if i % 200 > 150]


class TestSchemaInfer:
    """Test building a Schema from sample rows."""

    def test_infer_builds_working_schema(self):
        schema = Schema.infer(
            [
                {"id": "1", "price": "9.99", "when": "2024-01-05"},
                {"id": "2", "price": "3", "when": "2024-02-01"},
            ]
        )
        assert [f.type_name for f in schema.fields().values()] == [
            "integer",
            "number",
            "date",
        ]
        assert schema.cast_row({"id": "3", "price": "1.5", "when": "2024-03-01"})["id"] == 3
