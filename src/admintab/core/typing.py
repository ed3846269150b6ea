"""
Lightweight typing aliases used across descriptors, data sources and the UI.

Provides minimal aliases to improve readability and static checks. This module
contains no runtime logic and is zero-IO.

Examples:
    >>> from admintab.core.typing import Row, Scalar
    >>> def first_title(rows: list[Row]) -> Scalar:
    ...     return rows[0].get("title") if rows else None
    >>> first_title([{"id": 1, "title": "hello"}])
    'hello'
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeAlias

__all__ = [
    "Scalar",
    "Row",
    "RawRow",
    "FetchResult",
    "JsonDict",
]

# Tagged scalar set allowed to cross the data-source boundary (see core.values).
Scalar: TypeAlias = str | int | float | bool | None

Row: TypeAlias = dict[str, Scalar]

# What a custom data source may hand back before normalization.
RawRow: TypeAlias = Mapping[str, Any]
FetchResult: TypeAlias = tuple[Sequence[RawRow], int]

JsonDict: TypeAlias = dict[str, Any]

