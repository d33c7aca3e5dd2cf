"""Array, object, geopoint and geojson fields."""

from __future__ import annotations

import json
import re
from typing import Any

import polars as pl

from .base import DEFAULT_FORMAT, FieldBase

_GEOPOINT_RE = re.compile(r"\s*([+-]?\d+(?:\.\d+)?)\s*,\s*([+-]?\d+(?:\.\d+)?)\s*")

GEOMETRY_TYPES = (
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
)
GEOJSON_TYPES = GEOMETRY_TYPES + ("GeometryCollection", "Feature", "FeatureCollection")


def _load_json(raw: Any) -> Any:
    if isinstance(raw, str):
        return json.loads(raw)
    return raw


class ArrayField(FieldBase):
    """Array field. Accepts lists, tuples or JSON text of a list."""

    type_name = "array"

    def parse(self, raw: Any) -> list[Any]:
        try:
            value = _load_json(raw)
        except ValueError:
            raise self._type_error() from None
        if not isinstance(value, (list, tuple)):
            raise self._type_error()
        return list(value)

    def get_python_type(self):
        return list

    def get_polars_dtype(self):
        return pl.Object

    def get_sqlalchemy_type(self):
        from sqlalchemy import JSON

        return JSON()


class ObjectField(FieldBase):
    """Object field. Accepts mappings or JSON text of an object."""

    type_name = "object"

    def parse(self, raw: Any) -> dict[str, Any]:
        try:
            value = _load_json(raw)
        except ValueError:
            raise self._type_error() from None
        if not isinstance(value, dict):
            raise self._type_error()
        return value

    def get_python_type(self):
        return dict

    def get_polars_dtype(self):
        return pl.Object

    def get_sqlalchemy_type(self):
        from sqlalchemy import JSON

        return JSON()


class GeopointField(FieldBase):
    """
    Geographic point, cast to a ``(lon, lat)`` tuple of floats.

    Formats:
      - ``default``: ``"lon, lat"`` string
      - ``array``: ``[lon, lat]`` list or its JSON text
      - ``object``: ``{"lon": ..., "lat": ...}`` mapping or its JSON text

    Examples
    --------
        >>> GeopointField({"name": "p"}).cast_value("90, 45")
        (90.0, 45.0)
    """

    type_name = "geopoint"
    formats = (DEFAULT_FORMAT, "array", "object")

    def parse(self, raw: Any) -> tuple[float, float]:
        fmt = self.format
        if fmt == DEFAULT_FORMAT:
            if not isinstance(raw, str):
                raise self._type_error()
            match = _GEOPOINT_RE.fullmatch(raw)
            if not match:
                raise self._type_error()
            lon, lat = match.groups()
        else:
            try:
                value = _load_json(raw)
            except ValueError:
                raise self._type_error() from None
            if fmt == "array":
                if not isinstance(value, (list, tuple)) or len(value) != 2:
                    raise self._type_error()
                lon, lat = value
            else:
                if not isinstance(value, dict) or set(value) != {"lon", "lat"}:
                    raise self._type_error()
                lon, lat = value["lon"], value["lat"]

        try:
            if isinstance(lon, bool) or isinstance(lat, bool):
                raise TypeError
            point = (float(lon), float(lat))
        except (TypeError, ValueError, OverflowError):
            raise self._type_error() from None

        if not -180 <= point[0] <= 180 or not -90 <= point[1] <= 90:
            raise ValueError("geopoint is out of range")
        return point

    def get_python_type(self):
        return tuple

    def get_polars_dtype(self):
        return pl.List(pl.Float64)

    def get_sqlalchemy_type(self):
        from sqlalchemy import JSON

        return JSON()

    def to_polars_value(self, value: Any) -> Any:
        if value is None:
            return None
        return list(value)


class GeojsonField(FieldBase):
    """
    GeoJSON field, cast to a dict.

    ``default`` checks for a GeoJSON object (geometry, Feature or
    FeatureCollection); ``topojson`` checks for a TopoJSON Topology.
    """

    type_name = "geojson"
    formats = (DEFAULT_FORMAT, "topojson")

    def parse(self, raw: Any) -> dict[str, Any]:
        try:
            value = _load_json(raw)
        except ValueError:
            raise self._type_error() from None
        if not isinstance(value, dict):
            raise self._type_error()

        if self.format == "topojson":
            valid = (
                value.get("type") == "Topology"
                and isinstance(value.get("objects"), dict)
                and isinstance(value.get("arcs", []), list)
            )
        else:
            valid = self._is_geojson(value)
        if not valid:
            raise self._type_error()
        return value

    @classmethod
    def _is_geojson(cls, value: Any) -> bool:
        if not isinstance(value, dict):
            return False
        kind = value.get("type")
        if kind in GEOMETRY_TYPES:
            return isinstance(value.get("coordinates"), list)
        if kind == "GeometryCollection":
            geometries = value.get("geometries")
            return isinstance(geometries, list) and all(
                cls._is_geojson(g) for g in geometries
            )
        if kind == "Feature":
            geometry = value.get("geometry", "missing")
            return geometry is None or cls._is_geojson(geometry)
        if kind == "FeatureCollection":
            features = value.get("features")
            return isinstance(features, list) and all(
                cls._is_geojson(f) for f in features
            )
        return False

    def get_python_type(self):
        return dict

    def get_polars_dtype(self):
        return pl.Object

    def get_sqlalchemy_type(self):
        from sqlalchemy import JSON

        return JSON()
