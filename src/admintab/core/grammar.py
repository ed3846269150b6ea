"""
Canonical admintab grammar and helpers.

Defines the enumerations that descriptors are built from (storage field types, form
widgets, list-view edit types, filter operators, action kinds, display kinds) and the
zero-IO validators used across the stack.

Design principles
-----------------
1) One naming standard:
   - Enum classes: PascalCase
   - Enum member names: UPPER_SNAKE (Python constants)
   - Enum serialized values (query params, configs, SQL aliases): lower_snake
   - Table names, field names, action ids: lower_snake

2) Descriptors describe, they never render:
   - WidgetKind and DisplayKind are hints for a rendering layer (app.ui); the core
     never produces HTML.

Downstream usage
----------------
- admintab.core.validate calls `assert_lower_snake` on table names, field names and
  action ids.
- admintab.core.query parses operators with `filter_operator_from_value`.
- app.ui maps WidgetKind/DisplayKind to Streamlit widgets and cell formatting.

Examples
--------
>>> from admintab.core.grammar import filter_operator_from_value, FilterOperator
>>> filter_operator_from_value("like") == FilterOperator.LIKE
True
>>> is_lower_snake("first_name")
True
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from typing import Final

from .errors import GrammarError

__all__ = [
    "FieldType",
    "WidgetKind",
    "EditType",
    "FilterOperator",
    "SortOrder",
    "ActionKind",
    "ActionScope",
    "DisplayKind",
    "DataSourceKind",
    "FormMode",
    # helpers/validators
    "is_lower_snake",
    "assert_lower_snake",
    "filter_operator_from_value",
    "sort_order_from_value",
    "form_mode_from_value",
    "ensure_all_enum_values_lower_snake",
]


# ============================================================================
# STORAGE AND FORM TYPES
# ============================================================================


class FieldType(Enum):
    """
    Declared storage type of a column or form field.

    Notes:
      Mapped to SQLite column affinities by admintab.io.schema; the values follow the
      driver-neutral names the demo tables were written against.
    """

    INT = "int"
    TINYINT = "tinyint"
    FLOAT = "float"
    VARCHAR = "varchar"
    TEXT = "text"
    DATE = "date"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    BOOL = "bool"


class WidgetKind(Enum):
    """Input widget used by add/edit forms."""

    DEFAULT = "default"
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    CURRENCY = "currency"
    RATE = "rate"
    SLIDER = "slider"
    EMAIL = "email"
    URL = "url"
    IP = "ip"
    PASSWORD = "password"
    DATE = "date"
    DATETIME = "datetime"
    DATE_RANGE = "date_range"
    DATETIME_RANGE = "datetime_range"
    SELECT = "select"
    SELECT_SINGLE = "select_single"
    SELECT_BOX = "select_box"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    CHECKBOX_STACKED = "checkbox_stacked"
    SWITCH = "switch"
    RICHTEXT = "richtext"
    CODE = "code"
    FILE = "file"
    MULTIFILE = "multifile"
    ARRAY = "array"


class EditType(Enum):
    """Inline editor offered by the list view for an editable column."""

    TEXT = "text"
    TEXTAREA = "textarea"
    SWITCH = "switch"
    SELECT = "select"
    DATETIME = "datetime"


# ============================================================================
# QUERIES
# ============================================================================


class FilterOperator(Enum):
    """
    Comparison applied by a filter predicate.

    Notes:
      The relational layer wraps LIKE values in '%' wildcards; custom data sources
      receive the predicate exactly as requested.
    """

    EQ = "eq"
    NE = "ne"
    LIKE = "like"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


# ============================================================================
# ACTIONS AND DISPLAY
# ============================================================================


class ActionKind(Enum):
    """
    Operation attached to a list view.

    - jump: navigate to a URL.
    - ajax: run a callback and report success/message.
    - popup: run a callback and show the returned content in a modal.
    - iframe: open a modal that embeds another admin URL.
    - field_filter: a select box that filters the list by one field.
    """

    JUMP = "jump"
    AJAX = "ajax"
    POPUP = "popup"
    IFRAME = "iframe"
    FIELD_FILTER = "field_filter"


class ActionScope(Enum):
    ROW = "row"
    TABLE = "table"


class DisplayKind(Enum):
    """Cell formatting hint for the rendering layer."""

    TEXT = "text"
    BOOL = "bool"
    DOT = "dot"
    PROGRESS = "progress"
    FILE_SIZE = "file_size"
    CAROUSEL = "carousel"
    DOWNLOAD = "download"
    COPYABLE = "copyable"
    LINK = "link"
    IMAGE = "image"


class DataSourceKind(Enum):
    RELATIONAL = "relational"
    CUSTOM = "custom"


class FormMode(Enum):
    ADD = "add"
    EDIT = "edit"


# ============================================================================
# Helpers & Validators (zero I/O)
# ============================================================================

_LOWER_SNAKE_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:_[a-z0-9]+)*$")


def is_lower_snake(value: str) -> bool:
    """
    Check whether a string is lower_snake.

    Args:
      value (str): Candidate string to validate.

    Returns:
      bool: True if value matches lower_snake (e.g., "first_name"), False otherwise.

    Examples:
      >>> is_lower_snake("first_name")
      True
      >>> is_lower_snake("FirstName")
      False
    """
    return bool(_LOWER_SNAKE_RE.match(value or ""))


def assert_lower_snake(value: str, what: str = "value") -> None:
    """
    Validate that a string is lower_snake.

    Args:
      value (str): Candidate string to validate.
      what (str): Human-friendly label used in the error message.

    Raises:
      GrammarError: If value is not lower_snake.
    """
    if not is_lower_snake(value):
        raise GrammarError(f"{what} must be lower_snake (got: {value!r})")


def _enum_from_value(enum_cls: type[Enum], s: str, what: str) -> Enum:
    if isinstance(s, enum_cls):
        return s
    lowered = (s or "").strip().lower()
    assert_lower_snake(lowered, what)
    try:
        return enum_cls(lowered)
    except ValueError as exc:
        allowed = sorted(m.value for m in enum_cls)
        raise GrammarError(f"{what} must be one of {allowed} (got {s!r})") from exc


def filter_operator_from_value(s: str | FilterOperator) -> FilterOperator:
    """
    Parse an operator token ("eq", "like", ...) into a FilterOperator.

    Args:
      s (str | FilterOperator): Operator token or enum member.

    Returns:
      FilterOperator: Parsed operator.

    Raises:
      GrammarError: If s is not a known operator.
    """
    return _enum_from_value(FilterOperator, s, "filter operator")  # type: ignore[return-value]


def sort_order_from_value(s: str | SortOrder) -> SortOrder:
    """Parse "asc"/"desc" (case-insensitive) into a SortOrder."""
    return _enum_from_value(SortOrder, s, "sort order")  # type: ignore[return-value]


def form_mode_from_value(s: str | FormMode) -> FormMode:
    return _enum_from_value(FormMode, s, "form mode")  # type: ignore[return-value]


def ensure_all_enum_values_lower_snake(enums: Iterable[type[Enum]]) -> None:
    """
    Assert that every enum member's value is lower_snake.

    Args:
      enums (Iterable[type[Enum]]): Iterable of Enum classes to inspect.

    Raises:
      AssertionError: If any enum member has a non-lower_snake value.

    Examples:
      >>> ensure_all_enum_values_lower_snake([FieldType, WidgetKind, FilterOperator])
    """
    for E in enums:
        for m in E:
            if not is_lower_snake(m.value):
                raise AssertionError(
                    f"{E.__name__}.{m.name} has non-lower_snake value: {m.value!r}"
                )
