"""
Shared UI helper utilities for the admin Streamlit application.

This module centralizes small cross-cutting helpers (cell formatting by display
kind, pagination windows, filter query keys, request-context construction) used by
multiple page modules. Keeping these here avoids circular imports and keeps the page
modules lean.

Notes:
    - Everything here is pure: no Streamlit state manipulation, no IO.
    - Page modules map DisplayKind.IMAGE and DisplayKind.LINK to Streamlit column
      configs; the remaining kinds are rendered to text by ``format_cell``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from urllib.parse import urlencode

import polars as pl

from admintab.core.context import RequestContext
from admintab.core.descriptors import ColumnSpec, FieldOption, TableDescriptor
from admintab.core.display import project_rows
from admintab.core.grammar import DisplayKind, FilterOperator
from admintab.core.query import OPERATOR_SEPARATOR, Page
from admintab.core.typing import Row, Scalar
from admintab.core.values import as_text
from admintab.io.config import AdminSettings

from .router import Route, View, parse_path

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")

_DOTS = {
    "danger": "🔴",
    "warning": "🟠",
    "info": "🔵",
    "primary": "🔵",
    "success": "🟢",
}


def human_file_size(n: Scalar) -> str:
    """Format a byte count, e.g. 1048576 -> "1.0 MB"; non-numbers -> "".

    Args:
        n (Scalar): Byte count as int, float or numeric text.

    Returns:
        str: Human-readable size with one decimal above bytes.
    """
    try:
        size = float(as_text(n))
    except ValueError:
        return ""
    unit = 0
    while size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    if unit == 0:
        return f"{int(size)} B"
    return f"{size:.1f} {_SIZE_UNITS[unit]}"


def format_cell(column: ColumnSpec, value: Scalar) -> str:
    """Render one displayed value as text according to the column's display kind.

    Args:
        column (ColumnSpec): Column whose display_kind/display_options apply.
        value (Scalar): Projected cell value (after display callbacks).

    Returns:
        str: Text shown in the list or detail view.
    """
    text = as_text(value)
    kind = column.display_kind
    opts = column.display_options
    if kind is DisplayKind.BOOL:
        if text == str(opts.get("true", "1")):
            return "✓"
        if text == str(opts.get("false", "0")):
            return "✗"
        return text
    if kind is DisplayKind.FILE_SIZE:
        return human_file_size(value)
    if kind is DisplayKind.PROGRESS:
        return f"{text}%" if text else ""
    if kind is DisplayKind.DOT:
        colors = opts.get("colors", {})
        color = colors.get(text, opts.get("default", ""))
        return f"{_DOTS.get(color, '⚪')} {text}"
    if kind is DisplayKind.CAROUSEL:
        parts = [p for p in text.split(str(opts.get("separator", ","))) if p]
        return f"{len(parts)} image(s)" if parts else ""
    if kind is DisplayKind.DOWNLOAD:
        return f"⬇ {text}" if text else ""
    return text


def cell_url(column: ColumnSpec, value: Scalar) -> str:
    """Target URL for link-like kinds (download prefix applied); "" otherwise."""
    text = as_text(value)
    if not text:
        return ""
    if column.display_kind is DisplayKind.DOWNLOAD:
        return f"{column.display_options.get('prefix', '')}{text}"
    if column.display_kind in (DisplayKind.LINK, DisplayKind.IMAGE):
        return text
    return ""


def href(url: str, prefix: str = "admin") -> str:
    """Browser target for a URL: admin paths become query strings, others pass through."""
    if url.startswith("/"):
        route = parse_path(url, prefix)
        if route.view is not View.NOT_FOUND:
            return "?" + urlencode(route.to_query())
    return url


def display_frame(
    desc: TableDescriptor, rows: Sequence[Row], *, prefix: str = "admin"
) -> pl.DataFrame:
    """Visible columns of `rows` as an all-string DataFrame keyed by column label.

    Image and link columns keep their URL so Streamlit can render them; every other
    kind goes through ``format_cell``.
    """
    columns = desc.visible_columns
    projected = project_rows(desc, rows)
    data: dict[str, list[str]] = {}
    for c in columns:
        if c.display_kind is DisplayKind.LINK:
            data[c.label] = [href(cell_url(c, r.get(c.key)), prefix) for r in projected]
        elif c.display_kind is DisplayKind.IMAGE:
            data[c.label] = [cell_url(c, r.get(c.key)) for r in projected]
        else:
            data[c.label] = [format_cell(c, r.get(c.key)) for r in projected]
    return pl.DataFrame(data, schema={c.label: pl.Utf8 for c in columns})


def page_window(page: int, count: int, width: int = 5) -> list[int]:
    """Page numbers shown by the paginator, centered on `page` where possible.

    Args:
        page (int): Current 1-based page.
        count (int): Total number of pages (0 when there are no rows).
        width (int): Maximum number of page links.

    Returns:
        list[int]: Ascending page numbers; empty when count is 0.
    """
    if count <= 0:
        return []
    width = max(1, min(width, count))
    page = min(max(1, page), count)
    start = max(1, page - width // 2)
    start = min(start, count - width + 1)
    return list(range(start, start + width))


def page_summary(page: Page) -> str:
    """Footer line under the list, e.g. "Showing 1 to 10 of 42 entries"."""
    if page.total == 0 or not page.rows:
        return f"Showing 0 to 0 of {page.total} entries"
    first = (page.page - 1) * page.page_size + 1
    last = first + len(page.rows) - 1
    return f"Showing {first} to {last} of {page.total} entries"


def filter_key(column: ColumnSpec) -> str:
    """Query key a column's filter widget writes ("name" or "name__like")."""
    if column.filter is None or column.filter.operator is FilterOperator.EQ:
        return column.key
    return f"{column.key}{OPERATOR_SEPARATOR}{column.filter.operator.value}"


def option_labels(options: Iterable[FieldOption]) -> dict[str, str]:
    return {o.value: o.label for o in options}


def selected_values(options: Iterable[FieldOption]) -> list[str]:
    return [o.value for o in options if o.selected]


def build_context(
    settings: AdminSettings,
    route: Route,
    form: Mapping[str, str] | None = None,
) -> RequestContext:
    """Request context for the configured demo user on `route`."""
    return RequestContext(
        user=settings.demo_user,
        roles=frozenset(settings.demo_roles),
        locale=settings.language,
        path=route.path(settings.url_prefix),
        query=route.to_query(),
        form=form or {},
    )
