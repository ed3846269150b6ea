"""External table: rows served by a function instead of the database."""

from __future__ import annotations

import polars as pl

from admintab.core.builder import TableBuilder
from admintab.core.context import RequestContext
from admintab.core.descriptors import TableDescriptor
from admintab.core.grammar import FieldType, WidgetKind
from admintab.core.query import PageRequest
from admintab.core.typing import FetchResult
from admintab.io.datasource import frame_source

__all__ = ["get_external_table", "EXTERNAL_FRAME"]

EXTERNAL_FRAME = pl.DataFrame(
    {
        "id": list(range(10, 20)),
        "title": [f"This is a title {n}" for n in range(1, 11)],
    }
)

_fetch_external = frame_source(EXTERNAL_FRAME)


def _fetch_detail(request: PageRequest) -> FetchResult:
    rows, _ = _fetch_external(request)
    return rows[:1], min(len(rows), 1)


def get_external_table(ctx: RequestContext) -> TableDescriptor:
    return (
        TableBuilder("external", title="External data", description="External data")
        .configure(can_add=False, editable=False, deletable=False)
        .add_column("ID", "id", FieldType.INT, sortable=True)
        .add_column("Title", "title", filter="like")
        .add_form_field("ID", "id", FieldType.INT, WidgetKind.DEFAULT,
                        allow_add=False, allow_edit=False)
        .add_form_field("Title", "title")
        .set_data_fn(_fetch_external)
        .set_detail_fn(_fetch_detail)
        .build()
    )
