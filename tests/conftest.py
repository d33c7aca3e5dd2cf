"""Shared fixtures for tablecast tests."""

import pytest

from tablecast import Schema


@pytest.fixture
def person_descriptor():
    """Descriptor with required, range, length and pattern constraints."""
    return {
        "fields": [
            {"name": "id", "type": "integer", "constraints": {"required": True}},
            {
                "name": "name",
                "type": "string",
                "constraints": {"minLength": 1, "maxLength": 20},
            },
            {
                "name": "age",
                "type": "integer",
                "constraints": {"minimum": 0, "maximum": 150},
            },
            {"name": "code", "type": "string", "constraints": {"pattern": "[A-Z]{3}"}},
        ],
        "missingValues": ["", "NA"],
        "primaryKey": "id",
    }


@pytest.fixture
def person_schema(person_descriptor):
    """Schema built from person_descriptor."""
    return Schema(person_descriptor)


@pytest.fixture
def typed_descriptor():
    """Descriptor covering the common scalar types."""
    return {
        "fields": [
            {"name": "id", "type": "integer"},
            {"name": "price", "type": "number"},
            {"name": "active", "type": "boolean"},
            {"name": "born", "type": "date"},
            {"name": "seen_at", "type": "datetime"},
            {"name": "period", "type": "yearmonth"},
        ]
    }


@pytest.fixture
def valid_rows():
    """Raw rows that satisfy person_descriptor."""
    return [
        {"id": "1", "name": "Alice", "age": "34", "code": "ABC"},
        {"id": "2", "name": "Bob", "age": "NA", "code": "XYZ"},
        {"id": "3", "name": "Charlie", "age": "0", "code": ""},
    ]


@pytest.fixture
def invalid_rows():
    """Raw rows with violations of person_descriptor."""
    return [
        {"id": "1", "name": "Alice", "age": "34", "code": "ABC"},
        {"id": "NA", "name": "Bob", "age": "200", "code": "ABC"},
        {"id": "3", "name": "Charlie", "age": "-1", "code": "abc"},
    ]
