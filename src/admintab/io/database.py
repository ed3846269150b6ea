"""
SQLite connection management, schema creation and demo seed data.

Purpose
- Open connections with sqlite3.Row rows, commit-or-rollback semantics and foreign
  keys enabled.
- Create every table declared in admintab.io.schema (idempotent).
- Seed the demo rows the admin panel shows on first start.

Notes
- Connections are opened per request (``open_database``) and never shared across
  threads; ``check_same_thread=False`` only lets Streamlit's script thread close a
  connection opened on it.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .errors import IoQueryError
from .schema import create_table_sql, list_schemas

__all__ = ["connect", "init_db", "seed_demo_data", "open_database", "table_exists"]

logger = logging.getLogger(__name__)


def connect(db_path: str | Path) -> sqlite3.Connection:
    """
    Open a SQLite connection configured for the admin layer.

    Args:
        db_path: Database file, or ":memory:".

    Returns:
        sqlite3.Connection: Connection with sqlite3.Row row factory.
    """
    path = str(db_path)
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def open_database(db_path: str | Path) -> Iterator[sqlite3.Connection]:
    """
    Connection context manager: commit on success, rollback on error, always close.

    Yields:
        sqlite3.Connection
    """
    conn = connect(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def table_exists(conn: sqlite3.Connection, name: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
    ).fetchone()
    return row is not None


def init_db(conn: sqlite3.Connection) -> None:
    """
    Create all declared tables if they do not exist.

    Raises:
        IoQueryError: If DDL fails.
    """
    try:
        for schema in list_schemas():
            conn.execute(create_table_sql(schema))
        conn.commit()
    except sqlite3.Error as exc:
        raise IoQueryError(f"failed to create tables: {exc}") from exc
    logger.debug("schema ready (%d tables)", len(list_schemas()))


_AUTHORS = [
    ("Hilton", "Kuhn", "hkuhn@example.org", "1970-08-18", "2012-11-21 07:37:59"),
    ("Kaylin", "Hills", "kaylin.hills@example.com", "1988-06-07", "2015-03-02 10:11:09"),
    ("Elwin", "Bogan", "elwin.bogan@example.net", "1993-01-30", "2018-09-14 21:45:00"),
]

_POSTS = [
    (1, "Hello GoAdmin", "first post", "<p>Welcome to the demo.</p>", "2019-09-11 10:00:00"),
    (2, "Descriptors", "how tables are declared", "<p>Columns and forms.</p>", "2019-09-12 08:30:00"),
    (1, "Data sources", "relational and custom", "<p>Rows plus a total.</p>", "2019-09-13 16:05:00"),
    (9, "Orphan", "author was removed", "<p>No author row.</p>", "2019-09-14 12:00:00"),
]

_USERS = [
    ("Jack", 0, "beijing", "127.0.0.1", "13888888888", 0, "", "", "2019-09-01 10:00:00"),
    ("Rose", 1, "london", "10.0.0.2", "13999999999", 2, "", "", "2019-09-02 11:00:00"),
    ("Tom", 0, "new york", "10.0.0.3", "13777777777", 1, "", "", "2019-09-03 12:00:00"),
    ("Lily", 1, "toronto", "10.0.0.4", "13666666666", 3, "", "", "2019-09-04 13:00:00"),
]

_PROFILES = [
    (
        "f1e2d3c4-0001",
        "https://quick.go-admin.cn/demo/assets/dist/img/gopher_avatar.png",
        "resumes/jack.pdf",
        1048576,
        0,
        20,
        1,
    ),
    ("f1e2d3c4-0002", "", "resumes/rose.pdf", 52428, 1, 60, 0),
    ("f1e2d3c4-0003", "", "resumes/tom.pdf", 7340032, 2, 100, 1),
]

_STATISTICS = [(62, 41410, 760, 2000)]


def seed_demo_data(conn: sqlite3.Connection) -> bool:
    """
    Insert demo rows into an empty database.

    Returns:
        bool: True if rows were inserted, False if the users table already had rows.
    """
    if conn.execute('SELECT COUNT(*) FROM "users"').fetchone()[0]:
        return False
    conn.executemany(
        'INSERT INTO "authors" ("first_name", "last_name", "email", "birthdate", "added") '
        "VALUES (?, ?, ?, ?, ?)",
        _AUTHORS,
    )
    conn.executemany(
        'INSERT INTO "posts" ("author_id", "title", "description", "content", "date") '
        "VALUES (?, ?, ?, ?, ?)",
        _POSTS,
    )
    conn.executemany(
        'INSERT INTO "users" ("name", "gender", "city", "ip", "phone", "country", "avatar", '
        '"role", "created_at") VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)',
        _USERS,
    )
    conn.executemany(
        'INSERT INTO "profile" ("uuid", "photos", "resume", "resume_size", "finish_state", '
        '"finish_progress", "pass") VALUES (?, ?, ?, ?, ?, ?, ?)',
        _PROFILES,
    )
    conn.executemany(
        'INSERT INTO "statistics" ("cpu", "likes", "sales", "new_members") VALUES (?, ?, ?, ?)',
        _STATISTICS,
    )
    conn.commit()
    logger.info("seeded demo data")
    return True
