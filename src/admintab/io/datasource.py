"""
Data-source dispatch with graceful degradation.

Responsibilities
- Route a PageRequest to the descriptor's source: the relational layer for
  RelationalSource, the caller's function for CustomSource.
- Enforce the page contract on custom results: a sequence of row mappings plus an
  int total >= 0; rows are normalized to the tagged scalar set.
- Degrade every read failure (exception, malformed result, database error) to an
  empty page with a zero total, logging the cause. One broken table never takes
  down the page that renders it.
- Persist add/edit form submissions and deletions for relational tables.
- Adapt a polars DataFrame into a custom fetch function (``frame_source``).

Examples:
    >>> from admintab.core.builder import TableBuilder
    >>> from admintab.core.query import PageRequest
    >>> def boom(req):
    ...     raise RuntimeError("upstream down")
    >>> desc = TableBuilder("ext").add_column("ID", "id").set_data_fn(boom).build()
    >>> page = fetch_page(desc, PageRequest(page=2, page_size=20))
    >>> (page.rows, page.total)
    ([], 0)
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import polars as pl

from admintab.core.descriptors import (
    CustomSource,
    DataSource,
    RelationalSource,
    TableDescriptor,
)
from admintab.core.errors import DataSourceFailure
from admintab.core.forms import prepare_submission
from admintab.core.grammar import FilterOperator, FormMode, SortOrder
from admintab.core.query import FilterPredicate, Page, PageRequest
from admintab.core.typing import FetchResult, Row, Scalar
from admintab.core.values import as_text, normalize_rows

from . import relational
from .errors import IoQueryError

__all__ = [
    "fetch_page",
    "fetch_detail",
    "check_result",
    "frame_source",
    "save_form",
    "delete_records",
]

logger = logging.getLogger(__name__)


def check_result(result: Any) -> tuple[list[Row], int]:
    """
    Validate and normalize what a custom fetch function returned.

    Raises:
        DataSourceFailure: If the result is not (rows, total) with mapping rows and an
            int total >= 0, or a cell has no scalar representation.
    """
    if not isinstance(result, tuple) or len(result) != 2:
        raise DataSourceFailure(f"expected (rows, total), got {type(result).__name__}")
    rows, total = result
    if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Sequence):
        raise DataSourceFailure(f"rows must be a sequence of mappings, got {type(rows).__name__}")
    if isinstance(total, bool) or not isinstance(total, int) or total < 0:
        raise DataSourceFailure(f"total must be an int >= 0, got {total!r}")
    return normalize_rows(rows), total


def _run(
    desc: TableDescriptor,
    source: DataSource,
    request: PageRequest,
    conn: sqlite3.Connection | None,
) -> Page:
    if isinstance(source, RelationalSource):
        if conn is None:
            raise IoQueryError(f"table {desc.name!r} needs a database connection")
        return relational.select_page(conn, desc, request)
    if isinstance(source, CustomSource):
        rows, total = check_result(source.fetch(request))
        return Page(rows=rows, total=total, page=request.page, page_size=request.page_size)
    raise DataSourceFailure(f"table {desc.name!r} has no usable data source")


def fetch_page(
    desc: TableDescriptor,
    request: PageRequest,
    *,
    conn: sqlite3.Connection | None = None,
) -> Page:
    """
    Fetch one list page; never raises.

    Args:
        desc (TableDescriptor): Resolved descriptor.
        request (PageRequest): Normalized request, handed to custom sources unmodified.
        conn (sqlite3.Connection | None): Required for relational sources.

    Returns:
        Page: The page, or ``Page.empty(request)`` if the source failed.
    """
    try:
        return _run(desc, desc.source, request, conn)
    except Exception:
        logger.exception(
            "data source for %s failed on page=%d page_size=%d; serving empty page",
            desc.name,
            request.page,
            request.page_size,
        )
        return Page.empty(request)


def _pk_request(desc: TableDescriptor, pk: Scalar) -> PageRequest:
    return PageRequest(
        page=1,
        page_size=1,
        filters=(FilterPredicate(field=desc.primary_key.name, value=pk),),
    )


def fetch_detail(
    desc: TableDescriptor,
    pk: Scalar,
    *,
    conn: sqlite3.Connection | None = None,
) -> Row | None:
    """
    Fetch the row shown by the detail view; never raises.

    A custom detail source receives a one-row request filtered on the primary key and
    its first row is used. Without a detail source the list source is used; custom
    list sources must return a row whose primary key matches.
    """
    try:
        if desc.detail_source is not None:
            if isinstance(desc.detail_source, RelationalSource):
                if conn is None:
                    raise IoQueryError(f"table {desc.name!r} needs a database connection")
                return relational.select_one(conn, desc, pk)
            rows, _ = check_result(desc.detail_source.fetch(_pk_request(desc, pk)))
            return rows[0] if rows else None
        if isinstance(desc.source, RelationalSource):
            if conn is None:
                raise IoQueryError(f"table {desc.name!r} needs a database connection")
            return relational.select_one(conn, desc, pk)
        rows, _ = check_result(desc.source.fetch(_pk_request(desc, pk)))
        wanted = as_text(pk)
        return next((r for r in rows if as_text(desc.pk_of(r)) == wanted), None)
    except Exception:
        logger.exception("detail lookup for %s pk=%r failed", desc.name, pk)
        return None


# ---------------------------------------------------------------------------
# polars-backed custom sources
# ---------------------------------------------------------------------------


def _predicate_expr(df: pl.DataFrame, pred: FilterPredicate) -> pl.Expr | None:
    if pred.field not in df.columns:
        return None
    col = pl.col(pred.field)
    if pred.operator is FilterOperator.LIKE:
        needle = as_text(pred.value).strip("%")
        return col.cast(pl.Utf8).str.contains(needle, literal=True)
    value: Any = pred.value
    if df.schema[pred.field].is_numeric():
        value = float(as_text(value))
    else:
        col = col.cast(pl.Utf8)
        value = as_text(value)
    ops: dict[FilterOperator, Callable[[pl.Expr, Any], pl.Expr]] = {
        FilterOperator.EQ: lambda c, v: c == v,
        FilterOperator.NE: lambda c, v: c != v,
        FilterOperator.GT: lambda c, v: c > v,
        FilterOperator.GTE: lambda c, v: c >= v,
        FilterOperator.LT: lambda c, v: c < v,
        FilterOperator.LTE: lambda c, v: c <= v,
    }
    return ops[pred.operator](col, value)


def frame_source(df: pl.DataFrame) -> Callable[[PageRequest], FetchResult]:
    """
    Serve a DataFrame as a custom data source.

    The returned function filters on predicates naming existing columns, sorts by the
    requested column when present, slices the page and reports the filtered height as
    the total.

    Examples:
        >>> import polars as pl
        >>> fetch = frame_source(pl.DataFrame({"id": [1, 2, 3], "title": ["a", "b", "ab"]}))
        >>> rows, total = fetch(PageRequest.from_query({"title__like": "a", "page_size": "1"}))
        >>> (len(rows), total)
        (1, 2)
    """

    def fetch(request: PageRequest) -> FetchResult:
        frame = df
        exprs = [e for e in (_predicate_expr(df, p) for p in request.filters) if e is not None]
        if exprs:
            frame = frame.filter(pl.all_horizontal(exprs))
        if request.sort_field and request.sort_field in frame.columns:
            frame = frame.sort(
                request.sort_field, descending=request.sort_order is SortOrder.DESC
            )
        total = frame.height
        return frame.slice(request.offset, request.page_size).to_dicts(), total

    return fetch


# ---------------------------------------------------------------------------
# writes
# ---------------------------------------------------------------------------


def save_form(
    desc: TableDescriptor,
    values: Mapping[str, Any],
    mode: FormMode,
    conn: sqlite3.Connection,
    *,
    pk: Scalar = None,
) -> Scalar:
    """
    Persist a submitted add/edit form.

    Applies the persistence rule of admintab.core.forms, writes the row, commits and
    then runs the descriptor's post hook with the persisted values.

    Returns:
        Scalar: Primary key of the inserted or updated row.

    Raises:
        PermissionError: If the table's config forbids adding or editing.
        IoQueryError: If the table is not relational or the write fails.
        InvalidSubmission: If a value cannot be coerced to its field type.
    """
    if mode is FormMode.ADD and not desc.config.can_add:
        raise PermissionError(f"table {desc.name!r} does not allow adding rows")
    if mode is FormMode.EDIT and not desc.config.editable:
        raise PermissionError(f"table {desc.name!r} does not allow editing rows")
    if not isinstance(desc.source, RelationalSource):
        raise IoQueryError(f"table {desc.name!r} is read-only")
    data = prepare_submission(desc, values, mode)
    if mode is FormMode.ADD:
        pk = relational.insert_row(conn, desc, data)
    else:
        if pk is None:
            raise IoQueryError(f"editing {desc.name!r} requires a primary key")
        relational.update_row(conn, desc, pk, data)
    conn.commit()
    logger.info("saved %s row %s (%s)", desc.name, pk, mode.value)
    if desc.post_hook is not None:
        desc.post_hook({**data, desc.primary_key.name: pk})
    return pk


def delete_records(
    desc: TableDescriptor, pks: Sequence[Scalar], conn: sqlite3.Connection
) -> int:
    """
    Delete rows of a relational table.

    Raises:
        PermissionError: If the table's config forbids deletion.
        IoQueryError: If the table is not relational or the delete fails.
    """
    if not desc.config.deletable:
        raise PermissionError(f"table {desc.name!r} does not allow deleting rows")
    n = relational.delete_rows(conn, desc, pks)
    conn.commit()
    logger.info("deleted %d %s rows", n, desc.name)
    return n
