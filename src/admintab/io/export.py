"""CSV export of list-view rows via polars."""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl

from admintab.core.descriptors import TableDescriptor
from admintab.core.display import project_rows
from admintab.core.typing import Row
from admintab.core.values import as_text

__all__ = ["rows_frame", "export_csv"]


def rows_frame(desc: TableDescriptor, rows: Sequence[Row]) -> pl.DataFrame:
    """
    Displayed rows as an all-string DataFrame with column labels as headers.

    Every value is rendered as text so mixed-type cells from display callbacks never
    break schema inference.
    """
    columns = desc.visible_columns
    projected = project_rows(desc, rows)
    data = {c.label: [as_text(r.get(c.key)) for r in projected] for c in columns}
    return pl.DataFrame(data, schema={c.label: pl.Utf8 for c in columns})


def export_csv(desc: TableDescriptor, rows: Sequence[Row]) -> str:
    """
    Render displayed rows to CSV text.

    Examples:
        >>> from admintab.core.builder import TableBuilder
        >>> desc = TableBuilder("t").add_column("ID", "id").set_data_fn(lambda r: ([], 0)).build()
        >>> export_csv(desc, [{"id": 1}, {"id": 2}]).splitlines()
        ['ID', '1', '2']
    """
    return rows_frame(desc, rows).write_csv()
