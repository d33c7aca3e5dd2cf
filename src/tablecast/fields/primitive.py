"""String, numeric, boolean and untyped fields."""

from __future__ import annotations

import base64
import binascii
import re
import uuid
from typing import Any
from urllib.parse import urlparse

import polars as pl

from .base import DEFAULT_FORMAT, FieldBase

DEFAULT_TRUE_VALUES = ["true", "True", "TRUE", "1"]
DEFAULT_FALSE_VALUES = ["false", "False", "FALSE", "0"]

_EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
_INTEGER_RE = re.compile(r"[+-]?\d+")
_NUMBER_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_SPECIAL_NUMBERS = {
    "NaN": float("nan"),
    "INF": float("inf"),
    "+INF": float("inf"),
    "-INF": float("-inf"),
}


def _strip_bare_number(text: str, keep: str = "") -> str:
    """Remove leading and trailing non-numeric characters like currency or %."""
    kept = re.escape(keep)
    text = re.sub(rf"^[^\d+\-{kept}]+", "", text)
    return re.sub(r"[^\d]+$", "", text)


class StringField(FieldBase):
    """
    String field.

    Formats: ``default`` (any string), ``email``, ``uri``, ``binary``
    (base64 text) and ``uuid``. Empty strings count as empty values.

    Examples
    --------
        >>> StringField({"name": "code", "format": "email"}).cast_value("a@b.io")
        'a@b.io'
    """

    type_name = "string"
    formats = (DEFAULT_FORMAT, "email", "uri", "binary", "uuid")

    def is_empty(self, raw: Any) -> bool:
        return raw is None or raw == ""

    def parse(self, raw: Any) -> str:
        if not isinstance(raw, str):
            raise self._type_error()

        fmt = self.format
        if fmt == "email":
            if not _EMAIL_RE.fullmatch(raw):
                raise ValueError("value is not a valid email")
        elif fmt == "uri":
            parsed = urlparse(raw)
            if not parsed.scheme or not (parsed.netloc or parsed.path):
                raise ValueError("value is not a valid uri")
        elif fmt == "binary":
            try:
                base64.b64decode(raw, validate=True)
            except (binascii.Error, ValueError):
                raise ValueError("value is not valid base64 binary") from None
        elif fmt == "uuid":
            try:
                uuid.UUID(raw)
            except ValueError:
                raise ValueError("value is not a valid uuid") from None
        return raw

    def get_python_type(self):
        return str

    def get_polars_dtype(self):
        return pl.Utf8

    def get_sqlalchemy_type(self):
        from sqlalchemy import String, Text

        max_length = self.constraints.get("maxLength")
        if max_length:
            return String(max_length)
        return Text()


class IntegerField(FieldBase):
    """
    Integer field.

    Accepts ints, integral floats and strings of digits with an optional
    sign. With ``bareNumber: false`` leading and trailing non-numeric
    characters (currency symbols, units) are stripped first.

    Examples
    --------
        >>> IntegerField({"name": "n"}).cast_value("-12")
        -12
        >>> IntegerField({"name": "n", "bareNumber": False}).cast_value("€95")
        95
    """

    type_name = "integer"

    @property
    def bare_number(self) -> bool:
        return bool(self._descriptor.get("bareNumber", True))

    def parse(self, raw: Any) -> int:
        if isinstance(raw, bool):
            raise self._type_error()
        if isinstance(raw, int):
            return raw
        if isinstance(raw, float):
            if raw.is_integer():
                return int(raw)
            raise self._type_error()
        if not isinstance(raw, str):
            raise self._type_error()

        text = raw if self.bare_number else _strip_bare_number(raw)
        if not _INTEGER_RE.fullmatch(text):
            raise self._type_error()
        return int(text)

    def get_python_type(self):
        return int

    def get_polars_dtype(self):
        return pl.Int64

    def get_sqlalchemy_type(self):
        from sqlalchemy import Integer

        return Integer()


class NumberField(FieldBase):
    """
    Number field, cast to float.

    Descriptor keys: ``decimalChar`` (default ``"."``), ``groupChar``
    (default none) and ``bareNumber`` (default True). ``NaN``, ``INF`` and
    ``-INF`` are accepted.

    Examples
    --------
        >>> field = NumberField({"name": "x", "decimalChar": ",", "groupChar": "."})
        >>> field.cast_value("1.234,5")
        1234.5
    """

    type_name = "number"

    @property
    def decimal_char(self) -> str:
        return self._descriptor.get("decimalChar") or "."

    @property
    def group_char(self) -> str:
        return self._descriptor.get("groupChar") or ""

    @property
    def bare_number(self) -> bool:
        return bool(self._descriptor.get("bareNumber", True))

    def parse(self, raw: Any) -> float:
        if isinstance(raw, bool):
            raise self._type_error()
        if isinstance(raw, (int, float)):
            try:
                return float(raw)
            except OverflowError:
                raise self._type_error() from None
        if not isinstance(raw, str):
            raise self._type_error()

        if raw in _SPECIAL_NUMBERS:
            return _SPECIAL_NUMBERS[raw]

        text = raw
        if not self.bare_number:
            text = _strip_bare_number(text, keep=self.decimal_char)
        if self.group_char:
            text = text.replace(self.group_char, "")
        if self.decimal_char != ".":
            if "." in text:
                raise self._type_error()
            text = text.replace(self.decimal_char, ".")
        if not _NUMBER_RE.fullmatch(text):
            raise self._type_error()
        return float(text)

    def get_python_type(self):
        return float

    def get_polars_dtype(self):
        return pl.Float64

    def get_sqlalchemy_type(self):
        from sqlalchemy import Float

        return Float()


class BooleanField(FieldBase):
    """
    Boolean field.

    Strings are matched against ``trueValues`` and ``falseValues``; native
    booleans pass through.
    """

    type_name = "boolean"

    @property
    def true_values(self) -> list[str]:
        values = self._descriptor.get("trueValues")
        return list(DEFAULT_TRUE_VALUES if values is None else values)

    @property
    def false_values(self) -> list[str]:
        values = self._descriptor.get("falseValues")
        return list(DEFAULT_FALSE_VALUES if values is None else values)

    def parse(self, raw: Any) -> bool:
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str):
            if raw in self.true_values:
                return True
            if raw in self.false_values:
                return False
        raise self._type_error()

    def get_python_type(self):
        return bool

    def get_polars_dtype(self):
        return pl.Boolean

    def get_sqlalchemy_type(self):
        from sqlalchemy import Boolean

        return Boolean()


class AnyField(FieldBase):
    """Field that accepts any value unchanged."""

    type_name = "any"

    def parse(self, raw: Any) -> Any:
        return raw

    def get_python_type(self):
        return object

    def get_polars_dtype(self):
        return pl.Object

    def get_sqlalchemy_type(self):
        from sqlalchemy import JSON

        return JSON()
