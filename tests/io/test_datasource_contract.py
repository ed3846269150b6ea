from __future__ import annotations

import sqlite3
from datetime import datetime

import polars as pl
import pytest

from admintab.core.builder import TableBuilder
from admintab.core.context import RequestContext
from admintab.core.errors import DataSourceFailure, InvalidSubmission
from admintab.core.grammar import FieldType, FormMode
from admintab.core.query import PageRequest
from admintab.io.database import connect, init_db, seed_demo_data
from admintab.io.datasource import (
    check_result,
    delete_records,
    fetch_detail,
    fetch_page,
    frame_source,
    save_form,
)
from admintab.io.errors import IoQueryError
from admintab.tables.authors import get_authors_table
from admintab.tables.external import EXTERNAL_FRAME, get_external_table
from admintab.tables.users import get_users_table

ADMIN = RequestContext(user="admin", roles=frozenset({"administrator"}))


@pytest.fixture
def conn() -> sqlite3.Connection:
    c = connect(":memory:")
    init_db(c)
    seed_demo_data(c)
    return c


def _custom(fetch):
    return TableBuilder("ext").add_column("ID", "id").add_column("Title", "title").set_data_fn(
        fetch
    ).build()


def test_failing_source_degrades_to_empty_page() -> None:
    def boom(request: PageRequest):
        raise RuntimeError("upstream down")

    page = fetch_page(_custom(boom), PageRequest(page=2, page_size=20))
    assert (page.rows, page.total, page.page, page.page_size) == ([], 0, 2, 20)


def test_malformed_results_degrade_to_empty_page() -> None:
    for bad in (None, [], ([{"id": 1}], -1), ({"id": 1}, 1), ([{"id": [1]}], 1)):
        page = fetch_page(_custom(lambda request, bad=bad: bad), PageRequest())
        assert page.rows == [] and page.total == 0


def test_custom_source_receives_request_unmodified() -> None:
    seen: list[PageRequest] = []

    def fetch(request: PageRequest):
        seen.append(request)
        return [{"id": 1, "title": "go"}], 42

    req = PageRequest.from_query({"title__like": "go", "page": "3"})
    page = fetch_page(_custom(fetch), req)
    assert seen == [req]
    assert seen[0].filters[0].value == "go"
    assert page.total == 42 and page.page_count == 5


def test_relational_source_without_connection_is_empty() -> None:
    page = fetch_page(get_authors_table(RequestContext()), PageRequest())
    assert page.rows == [] and page.total == 0


def test_check_result_normalizes_rows() -> None:
    rows, total = check_result(([{"id": 1, "at": datetime(2020, 1, 2, 3, 4, 5)}], 1))
    assert rows == [{"id": 1, "at": "2020-01-02 03:04:05"}] and total == 1
    with pytest.raises(DataSourceFailure):
        check_result(([{"id": 1}], True))
    with pytest.raises(DataSourceFailure):
        check_result(("rows", 1))


def test_frame_source_filters_sorts_and_pages() -> None:
    fetch = frame_source(EXTERNAL_FRAME)
    rows, total = fetch(PageRequest.from_query({"page": "2", "page_size": "3", "sort": "id",
                                                "order": "asc"}))
    assert [r["id"] for r in rows] == [13, 14, 15] and total == 10
    rows, total = fetch(PageRequest.from_query({"title__like": "title 1"}))
    assert total == 2
    _, total = fetch(PageRequest.from_query({"id__gt": "15", "missing": "x"}))
    assert total == 4


def test_frame_source_eq_on_text() -> None:
    fetch = frame_source(pl.DataFrame({"id": [1, 2], "state": ["on", "off"]}))
    rows, total = fetch(PageRequest.from_query({"state": "off"}))
    assert rows == [{"id": 2, "state": "off"}] and total == 1


def test_external_table_pages() -> None:
    desc = get_external_table(RequestContext())
    page = fetch_page(desc, PageRequest(page=1, page_size=10))
    assert len(page.rows) == 10 and page.total == 10
    assert page.page_count == 1


def test_fetch_detail_custom_sources() -> None:
    desc = get_external_table(RequestContext())
    assert fetch_detail(desc, 12) == {"id": 12, "title": "This is a title 3"}
    assert fetch_detail(desc, 99) is None

    listed = _custom(lambda request: ([{"id": 1, "title": "a"}, {"id": 2, "title": "b"}], 2))
    assert fetch_detail(listed, "2") == {"id": 2, "title": "b"}


def test_fetch_detail_relational(conn) -> None:
    desc = get_authors_table(RequestContext())
    assert fetch_detail(desc, 1, conn=conn)["email"] == "hkuhn@example.org"
    assert fetch_detail(desc, 1) is None


def test_save_form_add_and_edit(conn) -> None:
    desc = get_authors_table(RequestContext())
    pk = save_form(
        desc,
        {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.org",
         "birthdate": "", "added": ""},
        FormMode.ADD,
        conn,
    )
    assert pk == 4
    row = fetch_detail(desc, pk, conn=conn)
    assert row["first_name"] == "Ada" and row["birthdate"] is None

    save_form(desc, {"email": "new@example.org"}, FormMode.EDIT, conn, pk=1)
    assert fetch_detail(desc, 1, conn=conn)["email"] == "new@example.org"
    with pytest.raises(IoQueryError):
        save_form(desc, {"email": "x"}, FormMode.EDIT, conn)


def test_save_form_runs_post_hook(conn) -> None:
    saved: list[dict] = []
    desc = (
        TableBuilder("authors")
        .add_column("ID", "id")
        .add_form_field("First name", "first_name")
        .add_form_field("Last name", "last_name", FieldType.INT)
        .set_post_hook(lambda values: saved.append(dict(values)))
        .set_table("authors")
        .build()
    )
    pk = save_form(desc, {"first_name": "Bo", "last_name": "7"}, FormMode.ADD, conn)
    assert saved == [{"first_name": "Bo", "last_name": 7, "id": pk}]
    with pytest.raises(InvalidSubmission):
        save_form(desc, {"last_name": "seven"}, FormMode.ADD, conn)
    assert len(saved) == 1


def test_save_form_on_table_outside_demo_schema(conn) -> None:
    conn.execute('CREATE TABLE "notes" ("id" INTEGER PRIMARY KEY AUTOINCREMENT, "body" TEXT)')
    desc = (
        TableBuilder("notes")
        .add_column("ID", "id", FieldType.INT)
        .add_column("Body", "body")
        .add_form_field("Body", "body")
        .set_table("notes")
        .build()
    )
    pk = save_form(desc, {"body": "remember"}, FormMode.ADD, conn)
    assert fetch_detail(desc, pk, conn=conn) == {"id": pk, "body": "remember"}
    save_form(desc, {"body": "forgotten"}, FormMode.EDIT, conn, pk=pk)
    assert fetch_page(desc, PageRequest(), conn=conn).rows == [{"id": pk, "body": "forgotten"}]


def test_users_form_drops_custom_field(conn) -> None:
    desc = get_users_table(ADMIN)
    pk = save_form(
        desc,
        {"name": "Ann", "ip": "10.0.0.9", "gender": "1", "phone": "1", "country": "3",
         "city": "toronto", "role": "ignored"},
        FormMode.ADD,
        conn,
    )
    row = fetch_detail(desc, pk, conn=conn)
    assert row["name"] == "Ann" and row["gender"] == 1 and row["country"] == 3
    assert row["role"] is None


def test_capabilities_gate_writes(conn) -> None:
    external = get_external_table(RequestContext())
    with pytest.raises(PermissionError):
        save_form(external, {"title": "x"}, FormMode.ADD, conn)
    with pytest.raises(PermissionError):
        save_form(external, {"title": "x"}, FormMode.EDIT, conn, pk=10)

    anonymous_users = get_users_table(RequestContext())
    with pytest.raises(PermissionError):
        delete_records(anonymous_users, [1], conn)
    assert delete_records(get_users_table(ADMIN), [1, 2], conn) == 2
