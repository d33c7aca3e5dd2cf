"""Date, time, datetime, year, yearmonth and duration fields."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from functools import total_ordering
from typing import Any, Mapping

import polars as pl
from dateutil import parser as date_parser

from .base import DEFAULT_FORMAT, FieldBase

ANY_FORMAT = "any"

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_TIME_RE = re.compile(r"\d{2}:\d{2}:\d{2}")
_DATETIME_RE = re.compile(
    r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d{1,6}))?(Z|[+-]\d{2}:\d{2})?"
)
_YEAR_RE = re.compile(r"\d{4}")
_YEARMONTH_RE = re.compile(r"(\d{4})-(\d{2})")
_DURATION_RE = re.compile(
    r"P(?:(?P<years>\d+)Y)?(?:(?P<months>\d+)M)?(?:(?P<weeks>\d+)W)?"
    r"(?:(?P<days>\d+)D)?"
    r"(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?"
)


def strptime_pattern(fmt: str) -> str:
    """Pattern of an explicit format, accepting the legacy ``fmt:`` prefix."""
    return fmt[4:] if fmt.startswith("fmt:") else fmt


class _TemporalField(FieldBase):
    """
    Shared parsing for date, time and datetime.

    ``format`` is ``default`` (ISO form), ``any`` (free-form, via dateutil)
    or an explicit strptime pattern such as ``%d/%m/%Y``.
    """

    formats = None
    native: type = object

    def parse(self, raw: Any) -> Any:
        if isinstance(raw, self.native):
            return self._from_native(raw)
        if not isinstance(raw, str):
            raise self._type_error()

        fmt = self.format
        try:
            if fmt == DEFAULT_FORMAT:
                return self._parse_default(raw)
            if fmt == ANY_FORMAT:
                return self._from_datetime(date_parser.parse(raw))
            return self._from_datetime(datetime.strptime(raw, strptime_pattern(fmt)))
        except (ValueError, OverflowError):
            raise self._type_error() from None

    def _from_native(self, raw: Any) -> Any:
        return raw

    def _parse_default(self, raw: str) -> Any:
        raise NotImplementedError

    def _from_datetime(self, value: datetime) -> Any:
        raise NotImplementedError

    @classmethod
    def infer(
        cls,
        value: Any,
        descriptor: Mapping[str, Any] | None = None,
        lenient: bool = False,
    ) -> FieldBase | None:
        field = super().infer(value, descriptor, lenient)
        if field is None and lenient and not (descriptor or {}).get("format"):
            descriptor = {**(descriptor or {}), "format": ANY_FORMAT}
            field = super().infer(value, descriptor, lenient)
        return field

    def get_infer_identifier(self, lenient: bool = False) -> str:
        if lenient:
            return self.type_name
        return f"{self.type_name}:{self.format}"


class DateField(_TemporalField):
    """
    Date field, cast to `datetime.date`.

    Examples
    --------
        >>> DateField({"name": "d"}).cast_value("2024-02-29")
        datetime.date(2024, 2, 29)
        >>> DateField({"name": "d", "format": "%d/%m/%Y"}).cast_value("01/12/2024")
        datetime.date(2024, 12, 1)
    """

    type_name = "date"
    native = date

    def _from_native(self, raw: date) -> date:
        if isinstance(raw, datetime):
            return raw.date()
        return raw

    def _parse_default(self, raw: str) -> date:
        if not _DATE_RE.fullmatch(raw):
            raise ValueError(raw)
        return date.fromisoformat(raw)

    def _from_datetime(self, value: datetime) -> date:
        return value.date()

    def get_python_type(self):
        return date

    def get_polars_dtype(self):
        return pl.Date

    def get_sqlalchemy_type(self):
        from sqlalchemy import Date

        return Date()


class TimeField(_TemporalField):
    """Time of day field, cast to `datetime.time`. Default format ``HH:MM:SS``."""

    type_name = "time"
    native = time

    def _parse_default(self, raw: str) -> time:
        if not _TIME_RE.fullmatch(raw):
            raise ValueError(raw)
        return time.fromisoformat(raw)

    def _from_datetime(self, value: datetime) -> time:
        return value.time()

    def get_python_type(self):
        return time

    def get_polars_dtype(self):
        return pl.Time

    def get_sqlalchemy_type(self):
        from sqlalchemy import Time

        return Time()


class DatetimeField(_TemporalField):
    """
    Datetime field, cast to `datetime.datetime`.

    The default format is ISO 8601 with a ``T`` separator, optional
    fractional seconds and an optional ``Z`` or ``+HH:MM`` offset.
    Values without an offset stay naive.

    Examples
    --------
        >>> DatetimeField({"name": "ts"}).cast_value("2024-01-05T10:00:00Z")
        datetime.datetime(2024, 1, 5, 10, 0, tzinfo=datetime.timezone.utc)
    """

    type_name = "datetime"
    native = datetime

    def _parse_default(self, raw: str) -> datetime:
        match = _DATETIME_RE.fullmatch(raw)
        if not match:
            raise ValueError(raw)
        base, fraction, offset = match.groups()
        text = base
        if fraction:
            text += "." + fraction.ljust(6, "0")
        if offset == "Z":
            text += "+00:00"
        elif offset:
            text += offset
        return datetime.fromisoformat(text)

    def _from_datetime(self, value: datetime) -> datetime:
        return value

    def get_python_type(self):
        return datetime

    def get_polars_dtype(self):
        return pl.Datetime("us")

    def get_sqlalchemy_type(self):
        from sqlalchemy import DateTime

        return DateTime()

    def to_polars_value(self, value: Any) -> Any:
        # Polars columns hold one timezone; store UTC as naive
        if isinstance(value, datetime) and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class YearField(FieldBase):
    """Calendar year, cast to int. Accepts ints or four-digit strings."""

    type_name = "year"

    def parse(self, raw: Any) -> int:
        if isinstance(raw, bool):
            raise self._type_error()
        if isinstance(raw, int):
            return raw
        if isinstance(raw, str) and _YEAR_RE.fullmatch(raw):
            return int(raw)
        raise self._type_error()

    def get_python_type(self):
        return int

    def get_polars_dtype(self):
        return pl.Int64

    def get_sqlalchemy_type(self):
        from sqlalchemy import Integer

        return Integer()


class YearMonthField(FieldBase):
    """
    Year and month, cast to a ``(year, month)`` tuple.

    Accepts ``"YYYY-MM"`` strings or two-item ``[year, month]`` lists.
    """

    type_name = "yearmonth"

    def parse(self, raw: Any) -> tuple[int, int]:
        if isinstance(raw, str):
            match = _YEARMONTH_RE.fullmatch(raw)
            if not match:
                raise self._type_error()
            year, month = int(match.group(1)), int(match.group(2))
        elif isinstance(raw, (list, tuple)) and len(raw) == 2:
            if not all(isinstance(p, int) and not isinstance(p, bool) for p in raw):
                raise self._type_error()
            year, month = raw
        else:
            raise self._type_error()

        if not 1 <= month <= 12:
            raise self._type_error()
        return (year, month)

    def get_python_type(self):
        return tuple

    def get_polars_dtype(self):
        return pl.Utf8

    def get_sqlalchemy_type(self):
        from sqlalchemy import String

        return String(7)

    def to_polars_value(self, value: Any) -> Any:
        if value is None:
            return None
        return f"{value[0]:04d}-{value[1]:02d}"


@total_ordering
@dataclass(frozen=True)
class Duration:
    """
    An ISO 8601 duration.

    Years and months have no fixed length, so ordering compares an
    approximation (365-day years, 30-day months).
    """

    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: float = 0

    @classmethod
    def parse(cls, text: str) -> "Duration":
        match = _DURATION_RE.fullmatch(text)
        if not match or text in ("P", "") or text.endswith("T"):
            raise ValueError(f"invalid duration: {text!r}")
        parts = match.groupdict()
        seconds = float(parts["seconds"]) if parts["seconds"] else 0
        if isinstance(seconds, float) and seconds.is_integer():
            seconds = int(seconds)
        return cls(
            years=int(parts["years"] or 0),
            months=int(parts["months"] or 0),
            days=int(parts["days"] or 0) + 7 * int(parts["weeks"] or 0),
            hours=int(parts["hours"] or 0),
            minutes=int(parts["minutes"] or 0),
            seconds=seconds,
        )

    @classmethod
    def from_timedelta(cls, value: timedelta) -> "Duration":
        seconds = value.seconds + value.microseconds / 1_000_000
        if float(seconds).is_integer():
            seconds = int(seconds)
        return cls(days=value.days, seconds=seconds)

    def total_seconds(self) -> float:
        days = self.years * 365 + self.months * 30 + self.days
        return days * 86400 + self.hours * 3600 + self.minutes * 60 + self.seconds

    def isoformat(self) -> str:
        date_part = "".join(
            f"{amount}{unit}"
            for amount, unit in ((self.years, "Y"), (self.months, "M"), (self.days, "D"))
            if amount
        )
        time_part = "".join(
            f"{amount}{unit}"
            for amount, unit in (
                (self.hours, "H"),
                (self.minutes, "M"),
                (self.seconds, "S"),
            )
            if amount
        )
        if not date_part and not time_part:
            return "PT0S"
        return "P" + date_part + ("T" + time_part if time_part else "")

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self.total_seconds() < other.total_seconds()

    def __str__(self) -> str:
        return self.isoformat()


class DurationField(FieldBase):
    """
    ISO 8601 duration field (``P1Y2M10DT2H30M``), cast to `Duration`.

    Examples
    --------
        >>> DurationField({"name": "d"}).cast_value("P1DT12H")
        Duration(years=0, months=0, days=1, hours=12, minutes=0, seconds=0)
    """

    type_name = "duration"

    def parse(self, raw: Any) -> Duration:
        if isinstance(raw, Duration):
            return raw
        if isinstance(raw, timedelta):
            return Duration.from_timedelta(raw)
        if not isinstance(raw, str):
            raise self._type_error()
        try:
            return Duration.parse(raw)
        except ValueError:
            raise self._type_error() from None

    def get_python_type(self):
        return Duration

    def get_polars_dtype(self):
        return pl.Utf8

    def get_sqlalchemy_type(self):
        from sqlalchemy import String

        return String()

    def to_polars_value(self, value: Any) -> Any:
        if value is None:
            return None
        return value.isoformat()
