"""
Tablecast: Table Schema casting and validation

Declare your fields once. Cast loose rows into typed values. Collect every error.
"""

from .errors import (
    ErrorKind,
    FieldValidationError,
    SchemaLoadError,
    SchemaValidationError,
    SchemaValidationFailedError,
    TableSchemaError,
)
from .fields import (
    CastResult,
    Duration,
    FieldBase,
    field_from_descriptor,
    infer_field,
)
from .inference import FieldsInferrer, infer_schema
from .schema import Schema

__version__ = "0.1.0"

__all__ = [
    # Core
    "Schema",
    "FieldBase",
    "CastResult",
    "Duration",
    "field_from_descriptor",
    # Inference
    "infer_field",
    "infer_schema",
    "FieldsInferrer",
    # Errors
    "ErrorKind",
    "SchemaValidationError",
    "TableSchemaError",
    "SchemaLoadError",
    "SchemaValidationFailedError",
    "FieldValidationError",
]
