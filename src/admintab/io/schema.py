"""
Frozen storage schemas for the demo SQLite database.

Notes:
    - Schemas declare column names and FieldType per table; the primary key is an
      auto-incrementing integer named "id".
    - Column names are lower_snake.
    - The statistics table keeps one logical field per column (cpu is its own column,
      not an alias of the primary key).
    - ``create_table_sql`` renders idempotent DDL (CREATE TABLE IF NOT EXISTS).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from admintab.core.constants import DEFAULT_PRIMARY_KEY
from admintab.core.grammar import FieldType, assert_lower_snake

__all__ = [
    "TableSchema",
    "USERS_SCHEMA",
    "POSTS_SCHEMA",
    "AUTHORS_SCHEMA",
    "PROFILE_SCHEMA",
    "STATISTICS_SCHEMA",
    "get_schema",
    "list_schemas",
    "sqlite_type",
    "create_table_sql",
]

_SQLITE_TYPES: dict[FieldType, str] = {
    FieldType.INT: "INTEGER",
    FieldType.TINYINT: "INTEGER",
    FieldType.BOOL: "INTEGER",
    FieldType.FLOAT: "REAL",
    FieldType.VARCHAR: "TEXT",
    FieldType.TEXT: "TEXT",
    FieldType.DATE: "TEXT",
    FieldType.DATETIME: "TEXT",
    FieldType.TIMESTAMP: "TEXT",
}


@dataclass(frozen=True)
class TableSchema:
    """
    Frozen storage schema for one table.

    Attributes:
        name (str): Table name (lower_snake).
        columns (dict[str, FieldType]): Column name -> declared type, in DDL order.
            Includes the primary key.
        primary_key (str): Primary key column (INTEGER PRIMARY KEY AUTOINCREMENT).
        defaults (dict[str, str]): Column -> SQL default expression.

    Examples:
        >>> from admintab.io.schema import get_schema
        >>> "author_id" in get_schema("posts").columns
        True
    """

    name: str
    columns: dict[str, FieldType]
    primary_key: str = DEFAULT_PRIMARY_KEY
    defaults: dict[str, str] = field(default_factory=dict)

    def has_column(self, name: str) -> bool:
        return name in self.columns


USERS_SCHEMA = TableSchema(
    name="users",
    columns={
        "id": FieldType.INT,
        "name": FieldType.VARCHAR,
        "gender": FieldType.TINYINT,
        "city": FieldType.VARCHAR,
        "ip": FieldType.VARCHAR,
        "phone": FieldType.VARCHAR,
        "country": FieldType.TINYINT,
        "avatar": FieldType.VARCHAR,
        "role": FieldType.VARCHAR,
        "created_at": FieldType.TIMESTAMP,
        "updated_at": FieldType.TIMESTAMP,
    },
    defaults={"created_at": "CURRENT_TIMESTAMP", "updated_at": "CURRENT_TIMESTAMP"},
)

POSTS_SCHEMA = TableSchema(
    name="posts",
    columns={
        "id": FieldType.INT,
        "author_id": FieldType.INT,
        "title": FieldType.VARCHAR,
        "description": FieldType.VARCHAR,
        "content": FieldType.TEXT,
        "date": FieldType.VARCHAR,
    },
)

AUTHORS_SCHEMA = TableSchema(
    name="authors",
    columns={
        "id": FieldType.INT,
        "first_name": FieldType.VARCHAR,
        "last_name": FieldType.VARCHAR,
        "email": FieldType.VARCHAR,
        "birthdate": FieldType.DATE,
        "added": FieldType.TIMESTAMP,
    },
    defaults={"added": "CURRENT_TIMESTAMP"},
)

PROFILE_SCHEMA = TableSchema(
    name="profile",
    columns={
        "id": FieldType.INT,
        "uuid": FieldType.VARCHAR,
        "photos": FieldType.VARCHAR,
        "resume": FieldType.VARCHAR,
        "resume_size": FieldType.INT,
        "finish_state": FieldType.TINYINT,
        "finish_progress": FieldType.INT,
        "pass": FieldType.TINYINT,
    },
)

STATISTICS_SCHEMA = TableSchema(
    name="statistics",
    columns={
        "id": FieldType.INT,
        "cpu": FieldType.INT,
        "likes": FieldType.INT,
        "sales": FieldType.INT,
        "new_members": FieldType.INT,
        "created_at": FieldType.TIMESTAMP,
        "updated_at": FieldType.TIMESTAMP,
    },
    defaults={"created_at": "CURRENT_TIMESTAMP", "updated_at": "CURRENT_TIMESTAMP"},
)

_SCHEMAS: dict[str, TableSchema] = {
    s.name: s
    for s in (USERS_SCHEMA, POSTS_SCHEMA, AUTHORS_SCHEMA, PROFILE_SCHEMA, STATISTICS_SCHEMA)
}


def get_schema(name: str) -> TableSchema:
    """
    Return the schema for a table name.

    Raises:
        KeyError: If no schema is declared for name.
    """
    try:
        return _SCHEMAS[name]
    except KeyError:
        raise KeyError(f"no storage schema for table {name!r}") from None


def list_schemas() -> list[TableSchema]:
    """Return all schemas in creation order."""
    return list(_SCHEMAS.values())


def sqlite_type(t: FieldType) -> str:
    return _SQLITE_TYPES[t]


def create_table_sql(schema: TableSchema) -> str:
    """
    Render CREATE TABLE IF NOT EXISTS for a schema.

    Examples:
        >>> print(create_table_sql(get_schema("authors")).splitlines()[1].strip())
        "id" INTEGER PRIMARY KEY AUTOINCREMENT,
    """
    assert_lower_snake(schema.name, "table name")
    lines: list[str] = []
    for col, ftype in schema.columns.items():
        assert_lower_snake(col, "column name")
        if col == schema.primary_key:
            lines.append(f'"{col}" INTEGER PRIMARY KEY AUTOINCREMENT')
            continue
        ddl = f'"{col}" {sqlite_type(ftype)}'
        if col in schema.defaults:
            ddl += f" DEFAULT {schema.defaults[col]}"
        lines.append(ddl)
    body = ",\n    ".join(lines)
    return f'CREATE TABLE IF NOT EXISTS "{schema.name}" (\n    {body}\n)'
