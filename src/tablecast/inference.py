"""Infer a schema descriptor from sample rows."""

from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, Mapping

from loguru import logger

from .fields import DEFAULT_TYPE, INFERENCE_ORDER, FieldBase, infer_field

_RANK = {cls.type_name: rank for rank, cls in enumerate(INFERENCE_ORDER)}


class FieldsInferrer:
    """
    Accumulates sample rows and infers one field per column.

    Each non-empty value is matched to its most specific field, and the
    field's inference identifier is counted per column. In strict mode the
    chosen field is the most specific candidate that casts every sampled
    value; in lenient mode it is the most frequent identifier.

    Parameters
    ----------
    rows : Iterable[Mapping], optional
        Initial rows to sample.
    lenient : bool, default False
        Prefer the majority type over one that fits every value.
    missing_values : list, optional
        Raw values to ignore, in addition to None and ``""``.

    Examples
    --------
        >>> inferrer = FieldsInferrer([{"id": "1", "price": "9.99"}, {"id": "2", "price": "3"}])
        >>> [(f["name"], f["type"]) for f in inferrer.descriptor()["fields"]]
        [('id', 'integer'), ('price', 'number')]
    """

    def __init__(
        self,
        rows: Iterable[Mapping[str, Any]] | None = None,
        lenient: bool = False,
        missing_values: list[str] | None = None,
    ):
        self.lenient = lenient
        self.missing_values = list(missing_values or [])
        self._values: dict[str, list[Any]] = {}
        self._counts: dict[str, Counter[str]] = {}
        self._candidates: dict[str, dict[str, FieldBase]] = {}
        if rows is not None:
            self.add_rows(rows)

    def add_rows(self, rows: Iterable[Mapping[str, Any]]) -> None:
        for row in rows:
            for name, value in row.items():
                self._observe(name, value)

    def _is_missing(self, value: Any) -> bool:
        if value is None or value == "":
            return True
        return any(type(value) is type(m) and value == m for m in self.missing_values)

    def _observe(self, name: str, value: Any) -> None:
        values = self._values.setdefault(name, [])
        counts = self._counts.setdefault(name, Counter())
        candidates = self._candidates.setdefault(name, {})
        if self._is_missing(value):
            return

        field = infer_field(value, {"name": name}, self.lenient)
        if field is None:
            return
        values.append(value)
        identifier = field.get_infer_identifier(self.lenient)
        counts[identifier] += 1
        candidates.setdefault(identifier, field)

    def _fits_all(self, field: FieldBase, values: list[Any]) -> bool:
        return all(field.cast(value).ok for value in values)

    def infer_field_descriptor(self, name: str) -> dict[str, Any]:
        """Return the inferred descriptor for column ``name``."""
        values = self._values.get(name, [])
        candidates = self._candidates.get(name, {})
        if not candidates:
            return {"name": name, "type": DEFAULT_TYPE, "format": "default"}

        if self.lenient:
            identifier, _ = self._counts[name].most_common(1)[0]
            chosen = candidates[identifier]
        else:
            ordered = sorted(candidates.values(), key=lambda f: _RANK[f.type_name])
            chosen = next((f for f in ordered if self._fits_all(f, values)), None)
            if chosen is None:
                chosen = next(
                    f
                    for f in (cls({"name": name}) for cls in INFERENCE_ORDER)
                    if self._fits_all(f, values)
                )

        logger.debug(
            f"Column '{name}': inferred {chosen.type_name} ({chosen.format}) "
            f"from {len(values)} values"
        )
        return chosen.full_descriptor()

    def descriptor(self) -> dict[str, Any]:
        """Return a full schema descriptor for every column seen so far."""
        descriptor: dict[str, Any] = {
            "fields": [self.infer_field_descriptor(name) for name in self._values]
        }
        if self.missing_values:
            descriptor["missingValues"] = list(self.missing_values)
        return descriptor


def infer_schema(
    rows: Iterable[Mapping[str, Any]],
    lenient: bool = False,
    missing_values: list[str] | None = None,
) -> dict[str, Any]:
    """Infer a schema descriptor from ``rows``. See `FieldsInferrer`."""
    return FieldsInferrer(rows, lenient=lenient, missing_values=missing_values).descriptor()
