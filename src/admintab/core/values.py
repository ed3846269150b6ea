"""
Tagged scalar values for rows crossing the data-source boundary.

Rows handed back by relational queries or custom data-source functions are
heterogeneous mappings. Before they reach display callbacks or the UI they are
normalized to the closed scalar set ``str | int | float | bool | None``; each value
carries its tag through its Python type and ``value_kind`` names it explicitly.

Normalization rules:
    - None, bool, int, float, str pass through unchanged.
    - datetime -> "YYYY-MM-DD HH:MM:SS" (microseconds kept when non-zero).
    - date / time -> ISO string.
    - Decimal -> float; Enum -> its value (normalized recursively).
    - bytes -> UTF-8 text (invalid sequences replaced).
    - Anything else (lists, dicts, objects) is rejected with DataSourceFailure.

Examples:
    >>> from datetime import date
    >>> from admintab.core.values import coerce_scalar, value_kind, ValueKind
    >>> coerce_scalar(date(2020, 1, 2))
    '2020-01-02'
    >>> value_kind(True) is ValueKind.BOOL
    True
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from .errors import DataSourceFailure
from .typing import Row, Scalar

__all__ = [
    "ValueKind",
    "value_kind",
    "coerce_scalar",
    "normalize_row",
    "normalize_rows",
    "as_text",
]


class ValueKind(Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    NULL = "null"


def value_kind(value: Scalar) -> ValueKind:
    """
    Return the tag of a normalized scalar.

    Raises:
        DataSourceFailure: If value is outside the scalar set.
    """
    # bool is a subclass of int; test it first.
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    raise DataSourceFailure(f"value {value!r} of type {type(value).__name__} is not a scalar")


def coerce_scalar(value: Any) -> Scalar:
    """
    Normalize a raw cell value into the tagged scalar set.

    Args:
        value (Any): Raw value from a database row or a custom data source.

    Returns:
        Scalar: Normalized value.

    Raises:
        DataSourceFailure: If the value has no scalar representation.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, datetime):
        return value.isoformat(sep=" ", timespec="seconds" if not value.microsecond else "auto")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Enum):
        return coerce_scalar(value.value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    raise DataSourceFailure(f"unsupported cell value of type {type(value).__name__}: {value!r}")


def normalize_row(row: Mapping[str, Any]) -> Row:
    """
    Normalize one row mapping: string keys, scalar values.

    Raises:
        DataSourceFailure: If row is not a mapping, has a non-string key, or holds a
            value with no scalar representation.
    """
    if not isinstance(row, Mapping):
        raise DataSourceFailure(f"row must be a mapping, got {type(row).__name__}")
    out: Row = {}
    for key, value in row.items():
        if not isinstance(key, str):
            raise DataSourceFailure(f"row keys must be strings, got {key!r}")
        out[key] = coerce_scalar(value)
    return out


def normalize_rows(rows: Iterable[Mapping[str, Any]]) -> list[Row]:
    return [normalize_row(r) for r in rows]


def as_text(value: Scalar) -> str:
    """Render a scalar the way display callbacks receive it ("" for None)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)
