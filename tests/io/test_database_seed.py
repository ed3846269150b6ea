from __future__ import annotations

from pathlib import Path

import pytest

from admintab.io.database import connect, init_db, open_database, seed_demo_data, table_exists
from admintab.io.errors import IoQueryError
from admintab.io.schema import create_table_sql, get_schema, list_schemas
from admintab.io.statistics import Statistics, first_statistics


def _count(conn, table: str) -> int:
    return conn.execute(f'SELECT COUNT(*) FROM "{table}"').fetchone()[0]


def test_init_creates_every_table_and_is_idempotent() -> None:
    conn = connect(":memory:")
    init_db(conn)
    init_db(conn)
    for schema in list_schemas():
        assert table_exists(conn, schema.name)
    assert [s.name for s in list_schemas()] == [
        "users",
        "posts",
        "authors",
        "profile",
        "statistics",
    ]


def test_seed_once() -> None:
    conn = connect(":memory:")
    init_db(conn)
    assert seed_demo_data(conn) is True
    assert seed_demo_data(conn) is False
    counts = {t: _count(conn, t) for t in ("authors", "posts", "users", "profile", "statistics")}
    assert counts == {"authors": 3, "posts": 4, "users": 4, "profile": 3, "statistics": 1}
    # post 4 points at an author that does not exist
    orphan = conn.execute('SELECT "author_id" FROM "posts" WHERE "id" = 4').fetchone()[0]
    assert conn.execute('SELECT 1 FROM "authors" WHERE "id" = ?', (orphan,)).fetchone() is None


def test_schema_ddl() -> None:
    sql = create_table_sql(get_schema("statistics"))
    assert sql.startswith('CREATE TABLE IF NOT EXISTS "statistics"')
    assert '"id" INTEGER PRIMARY KEY AUTOINCREMENT' in sql
    assert '"cpu" INTEGER' in sql
    assert '"created_at" TEXT DEFAULT CURRENT_TIMESTAMP' in sql
    with pytest.raises(KeyError):
        get_schema("missing")


def test_open_database_commits_and_rolls_back(tmp_path: Path) -> None:
    db = tmp_path / "nested" / "admin.db"
    with open_database(db) as conn:
        init_db(conn)
        conn.execute('INSERT INTO "authors" ("first_name") VALUES (?)', ("Ada",))
    assert db.exists()

    with pytest.raises(RuntimeError):
        with open_database(db) as conn:
            conn.execute('INSERT INTO "authors" ("first_name") VALUES (?)', ("Bob",))
            raise RuntimeError("abort")

    with open_database(db) as conn:
        names = [r["first_name"] for r in conn.execute('SELECT "first_name" FROM "authors"')]
    assert names == ["Ada"]


def test_first_statistics() -> None:
    conn = connect(":memory:")
    init_db(conn)
    assert first_statistics(conn) == Statistics()
    seed_demo_data(conn)
    stats = first_statistics(conn)
    assert (stats.id, stats.cpu, stats.likes, stats.sales, stats.new_members) == (
        1,
        62,
        41410,
        760,
        2000,
    )
    assert stats.kpis() == {
        "CPU traffic": 62,
        "Likes": 41410,
        "Sales": 760,
        "New members": 2000,
    }
    assert stats.created_at is not None


def test_first_statistics_without_table() -> None:
    with pytest.raises(IoQueryError):
        first_statistics(connect(":memory:"))
