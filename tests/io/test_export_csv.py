from __future__ import annotations

import polars as pl

from admintab.core.builder import TableBuilder
from admintab.core.context import RequestContext
from admintab.io.export import export_csv, rows_frame
from admintab.tables.users import get_users_table


def _desc():
    return (
        TableBuilder("notes")
        .add_column("ID", "id")
        .add_column("Title", "title", display=lambda m: m.value.upper())
        .add_column("Secret", "secret", hidden=True)
        .set_data_fn(lambda request: ([], 0))
        .build()
    )


def test_export_uses_labels_and_displayed_values() -> None:
    text = export_csv(_desc(), [{"id": 1, "title": "go", "secret": "s"}, {"id": 2, "title": "ok"}])
    assert text.splitlines() == ["ID,Title", "1,GO", "2,OK"]


def test_rows_frame_is_all_text() -> None:
    frame = rows_frame(_desc(), [{"id": 1, "title": "go"}, {"id": None, "title": None}])
    assert frame.columns == ["ID", "Title"]
    assert frame.row(1) == ("", "")
    assert all(dtype == pl.Utf8 for dtype in frame.dtypes)


def test_users_export_header() -> None:
    users = get_users_table(RequestContext())
    header = export_csv(users, []).splitlines()[0]
    assert header.split(",") == [c.label for c in users.visible_columns]
