"""
Display projection of fetched rows.

``project_rows`` turns normalized rows into the values the list view shows: each
visible column contributes its key, display callbacks are applied to the cell text,
virtual columns are computed, and joined columns that found no related row show "".

Examples:
    >>> from admintab.core.builder import TableBuilder
    >>> from admintab.core.descriptors import JoinSpec
    >>> desc = (
    ...     TableBuilder("posts")
    ...     .add_column("ID", "id")
    ...     .add_column("Author", "first_name", join=JoinSpec("author_id", "id", "authors"))
    ...     .add_column("Title", "title", display=lambda m: m.value.upper())
    ...     .set_table("posts")
    ...     .build()
    ... )
    >>> project_rows(desc, [{"id": 1, "title": "go"}])
    [{'id': 1, 'authors_joined_first_name': '', 'title': 'GO'}]
"""

from __future__ import annotations

from collections.abc import Iterable

from .descriptors import ColumnSpec, FieldModel, TableDescriptor
from .typing import Row, Scalar
from .values import as_text, coerce_scalar

__all__ = ["project_cell", "project_row", "project_rows"]


def project_cell(desc: TableDescriptor, column: ColumnSpec, row: Row) -> Scalar:
    """Displayed value of one column for one row."""
    raw = row.get(column.key)
    if column.joined and raw is None:
        raw = ""
    if column.display is None:
        return raw
    model = FieldModel(value=as_text(raw), row=row, pk=as_text(desc.pk_of(row)))
    return coerce_scalar(column.display(model))


def project_row(desc: TableDescriptor, row: Row, *, include_hidden: bool = False) -> Row:
    columns = desc.columns if include_hidden else desc.visible_columns
    return {c.key: project_cell(desc, c, row) for c in columns}


def project_rows(
    desc: TableDescriptor, rows: Iterable[Row], *, include_hidden: bool = False
) -> list[Row]:
    return [project_row(desc, r, include_hidden=include_hidden) for r in rows]
