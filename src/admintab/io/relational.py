"""
Relational query layer: interprets descriptors with a RelationalSource against SQLite.

Query shape
- ``SELECT "t".*, COALESCE("j0"."col", '') AS "{table}_joined_{col}", ...``
  ``FROM "<table>" AS "t" LEFT JOIN "<join table>" AS "j0" ON "t"."<field>" = "j0"."<join_field>"``
- One LEFT JOIN per distinct JoinSpec; a missing related row projects "".
- WHERE: one condition per predicate on a filterable column, joined with AND. A bare
  predicate (no ``__op`` suffix) takes the column's declared operator, an explicit one is
  applied as given. LIKE escapes "%", "_" and "\\" in the value and wraps it in "%".
  Predicates on other fields are ignored.
- ORDER BY the requested column when it is sortable, otherwise the primary key; the
  primary key breaks ties.
- LIMIT/OFFSET from the page request; COUNT(*) runs over the same FROM/WHERE.

Notes
- Every identifier is checked against a strict pattern and double-quoted; values are
  always bound parameters.
- sqlite3 errors surface as IoQueryError.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from admintab.core.descriptors import ColumnSpec, JoinSpec, RelationalSource, TableDescriptor
from admintab.core.grammar import FilterOperator, SortOrder
from admintab.core.query import FilterPredicate, Page, PageRequest
from admintab.core.typing import Row, Scalar
from admintab.core.values import normalize_row

from .errors import IoQueryError

__all__ = [
    "quote_ident",
    "build_select",
    "select_page",
    "select_one",
    "insert_row",
    "update_row",
    "update_cell",
    "delete_rows",
    "table_columns",
]

logger = logging.getLogger(__name__)

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_BASE = "t"

_OPERATOR_SQL: dict[FilterOperator, str] = {
    FilterOperator.EQ: "{expr} = ?",
    FilterOperator.NE: "{expr} != ?",
    FilterOperator.LIKE: "{expr} LIKE ? ESCAPE '\\'",
    FilterOperator.GT: "{expr} > ?",
    FilterOperator.GTE: "{expr} >= ?",
    FilterOperator.LT: "{expr} < ?",
    FilterOperator.LTE: "{expr} <= ?",
}


def quote_ident(name: str) -> str:
    """
    Validate and double-quote an SQL identifier.

    Raises:
        IoQueryError: If name is empty or contains characters outside [A-Za-z0-9_].
    """
    if not name or not _IDENT_RE.match(name):
        raise IoQueryError(f"unsafe SQL identifier {name!r}")
    return f'"{name}"'


def _table_of(desc: TableDescriptor) -> str:
    if not isinstance(desc.source, RelationalSource):
        raise IoQueryError(f"table {desc.name!r} is not backed by a database table")
    return desc.source.table


def _join_aliases(desc: TableDescriptor) -> dict[JoinSpec, str]:
    aliases: dict[JoinSpec, str] = {}
    for c in desc.columns:
        if c.join is not None and c.join not in aliases:
            aliases[c.join] = f"j{len(aliases)}"
    return aliases


def _column_expr(c: ColumnSpec, aliases: Mapping[JoinSpec, str]) -> str:
    if c.join is not None:
        return f"{quote_ident(aliases[c.join])}.{quote_ident(c.field)}"
    return f"{quote_ident(_BASE)}.{quote_ident(c.field)}"


def _from_clause(desc: TableDescriptor, aliases: Mapping[JoinSpec, str]) -> str:
    parts = [f"FROM {quote_ident(_table_of(desc))} AS {quote_ident(_BASE)}"]
    for join, alias in aliases.items():
        parts.append(
            f"LEFT JOIN {quote_ident(join.table)} AS {quote_ident(alias)} "
            f"ON {quote_ident(_BASE)}.{quote_ident(join.field)} = "
            f"{quote_ident(alias)}.{quote_ident(join.join_field)}"
        )
    return " ".join(parts)


def _like_value(value: Scalar) -> str:
    text = "" if value is None else str(value)
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _where_clause(
    desc: TableDescriptor,
    filters: Iterable[FilterPredicate],
    aliases: Mapping[JoinSpec, str],
) -> tuple[str, list[Any]]:
    declared = {
        c.key: c.filter.operator
        for c in desc.columns
        if c.filter is not None and not c.virtual
    }
    columns = {c.key: c for c in desc.columns}
    fragments: list[str] = []
    params: list[Any] = []
    for pred in filters:
        if pred.field not in declared:
            logger.debug("ignoring filter on non-filterable field %s.%s", desc.name, pred.field)
            continue
        col = columns[pred.field]
        op = pred.operator if pred.explicit else declared[pred.field]
        fragments.append(_OPERATOR_SQL[op].format(expr=_column_expr(col, aliases)))
        params.append(_like_value(pred.value) if op is FilterOperator.LIKE else pred.value)
    if not fragments:
        return "", []
    return "WHERE " + " AND ".join(fragments), params


def _order_clause(
    desc: TableDescriptor, request: PageRequest, aliases: Mapping[JoinSpec, str]
) -> str:
    direction = "ASC" if request.sort_order is SortOrder.ASC else "DESC"
    pk_expr = f"{quote_ident(_BASE)}.{quote_ident(desc.primary_key.name)}"
    field = request.sort_field
    if field and field in desc.sortable_keys and field != desc.primary_key.name:
        col = desc.column(field)
        if not col.virtual:
            return f"ORDER BY {_column_expr(col, aliases)} {direction}, {pk_expr} {direction}"
    if field and field not in desc.sortable_keys:
        logger.debug("ignoring sort on non-sortable field %s.%s", desc.name, field)
    return f"ORDER BY {pk_expr} {direction}"


def _projection(desc: TableDescriptor, aliases: Mapping[JoinSpec, str]) -> str:
    cols = [f"{quote_ident(_BASE)}.*"]
    for c in desc.columns:
        if c.join is not None:
            cols.append(f"COALESCE({_column_expr(c, aliases)}, '') AS {quote_ident(c.key)}")
    return ", ".join(cols)


def build_select(
    desc: TableDescriptor, request: PageRequest
) -> tuple[str, list[Any], str, list[Any]]:
    """
    Build the page query and its count query.

    Returns:
        tuple: (select_sql, select_params, count_sql, count_params)

    Raises:
        IoQueryError: If the descriptor is not relational or names an unsafe identifier.
    """
    aliases = _join_aliases(desc)
    from_sql = _from_clause(desc, aliases)
    where_sql, where_params = _where_clause(desc, request.filters, aliases)
    select_parts = [f"SELECT {_projection(desc, aliases)}", from_sql]
    count_parts = ["SELECT COUNT(*)", from_sql]
    if where_sql:
        select_parts.append(where_sql)
        count_parts.append(where_sql)
    select_parts.append(_order_clause(desc, request, aliases))
    select_parts.append("LIMIT ? OFFSET ?")
    return (
        " ".join(select_parts),
        [*where_params, request.page_size, request.offset],
        " ".join(count_parts),
        list(where_params),
    )


def select_page(conn: sqlite3.Connection, desc: TableDescriptor, request: PageRequest) -> Page:
    """
    Fetch one page of rows for a relational descriptor.

    Raises:
        IoQueryError: If the query cannot be built or fails to execute.
    """
    select_sql, select_params, count_sql, count_params = build_select(desc, request)
    try:
        rows = conn.execute(select_sql, select_params).fetchall()
        total = conn.execute(count_sql, count_params).fetchone()[0]
    except sqlite3.Error as exc:
        raise IoQueryError(f"query on {desc.name!r} failed: {exc}") from exc
    logger.debug("%s: page %d -> %d rows of %d", desc.name, request.page, len(rows), total)
    return Page(
        rows=[normalize_row(dict(r)) for r in rows],
        total=int(total),
        page=request.page,
        page_size=request.page_size,
    )


def select_one(conn: sqlite3.Connection, desc: TableDescriptor, pk: Scalar) -> Row | None:
    """Fetch one row (with join projections) by primary key, or None."""
    aliases = _join_aliases(desc)
    pk_expr = f"{quote_ident(_BASE)}.{quote_ident(desc.primary_key.name)}"
    sql = f"SELECT {_projection(desc, aliases)} {_from_clause(desc, aliases)} WHERE {pk_expr} = ?"
    try:
        row = conn.execute(sql, (pk,)).fetchone()
    except sqlite3.Error as exc:
        raise IoQueryError(f"lookup on {desc.name!r} failed: {exc}") from exc
    return normalize_row(dict(row)) if row is not None else None


def table_columns(conn: sqlite3.Connection, table: str) -> tuple[list[str], list[str]]:
    """
    Column names and primary-key column names of a database table, in table order.

    Raises:
        IoQueryError: If the table does not exist.
    """
    try:
        info = conn.execute(f"PRAGMA table_info({quote_ident(table)})").fetchall()
    except sqlite3.Error as exc:
        raise IoQueryError(f"cannot inspect table {table!r}: {exc}") from exc
    if not info:
        raise IoQueryError(f"unknown table {table!r}")
    names = [r[1] for r in info]
    pks = [r[1] for r in info if r[5]]
    return names, pks


def _writable(
    conn: sqlite3.Connection, desc: TableDescriptor, values: Mapping[str, Scalar]
) -> dict[str, Scalar]:
    table = _table_of(desc)
    names, pks = table_columns(conn, table)
    unknown = sorted(k for k in values if k not in names)
    if unknown:
        raise IoQueryError(f"table {table!r} has no columns {unknown}")
    skip = set(pks) | {desc.primary_key.name}
    return {k: v for k, v in values.items() if k not in skip}


def insert_row(conn: sqlite3.Connection, desc: TableDescriptor, values: Mapping[str, Scalar]) -> int:
    """
    Insert a row and return its new primary key.

    Raises:
        IoQueryError: On unknown columns or sqlite3 errors.
    """
    data = _writable(conn, desc, values)
    table = quote_ident(_table_of(desc))
    if data:
        cols = ", ".join(quote_ident(k) for k in data)
        marks = ", ".join("?" for _ in data)
        sql = f"INSERT INTO {table} ({cols}) VALUES ({marks})"
    else:
        sql = f"INSERT INTO {table} DEFAULT VALUES"
    try:
        cur = conn.execute(sql, list(data.values()))
    except sqlite3.Error as exc:
        raise IoQueryError(f"insert into {desc.name!r} failed: {exc}") from exc
    return int(cur.lastrowid or 0)


def update_row(
    conn: sqlite3.Connection, desc: TableDescriptor, pk: Scalar, values: Mapping[str, Scalar]
) -> int:
    """
    Update columns of one row; returns the number of rows changed (0 or 1).

    Raises:
        IoQueryError: On unknown columns or sqlite3 errors.
    """
    data = _writable(conn, desc, values)
    if not data:
        return 0
    assignments = ", ".join(f"{quote_ident(k)} = ?" for k in data)
    sql = (
        f"UPDATE {quote_ident(_table_of(desc))} SET {assignments} "
        f"WHERE {quote_ident(desc.primary_key.name)} = ?"
    )
    try:
        cur = conn.execute(sql, [*data.values(), pk])
    except sqlite3.Error as exc:
        raise IoQueryError(f"update of {desc.name!r} failed: {exc}") from exc
    return cur.rowcount


def update_cell(
    conn: sqlite3.Connection, desc: TableDescriptor, pk: Scalar, key: str, value: Scalar
) -> int:
    """
    Inline list-view edit of one cell.

    Raises:
        IoQueryError: If the column is unknown, not editable, joined or virtual.
    """
    try:
        col = desc.column(key)
    except KeyError as exc:
        raise IoQueryError(str(exc)) from exc
    if not col.editable or not col.stored:
        raise IoQueryError(f"column {key!r} of {desc.name!r} is not inline-editable")
    return update_row(conn, desc, pk, {col.field: value})


def delete_rows(conn: sqlite3.Connection, desc: TableDescriptor, pks: Sequence[Scalar]) -> int:
    """Delete rows by primary key; returns the number of rows removed."""
    if not pks:
        return 0
    marks = ", ".join("?" for _ in pks)
    sql = (
        f"DELETE FROM {quote_ident(_table_of(desc))} "
        f"WHERE {quote_ident(desc.primary_key.name)} IN ({marks})"
    )
    try:
        cur = conn.execute(sql, list(pks))
    except sqlite3.Error as exc:
        raise IoQueryError(f"delete from {desc.name!r} failed: {exc}") from exc
    return cur.rowcount
