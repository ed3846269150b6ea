"""
admintab.io: SQLite, data-source and settings layer for admintab.

## Responsibilities
- Materialize the storage schemas declared in admintab.io.schema into an embedded
  SQLite database and seed demo rows.
- Interpret descriptors with a RelationalSource as parameterised SQL (joins, filters,
  sort, pagination, counts) and persist form submissions.
- Dispatch page requests to relational or custom sources, degrading failures to an
  empty page.
- Load runtime settings with precedence env > TOML > defaults.

## Public API
- AdminSettings: runtime settings (database path, page sizes, port, logging).
- fetch_page / fetch_detail: never-raising reads used by the UI.
- save_form / delete_records: writes for relational tables.
- open_database / init_db / seed_demo_data: connection lifecycle and schema setup.

## Import DAG discipline
- Depends only on stdlib, polars, pydantic and admintab.core.*.
- MUST NOT import higher layers: admintab.tables or app.

## Examples
```python
from admintab.core.query import PageRequest
from admintab.io import AdminSettings, fetch_page, init_db, open_database
from admintab.tables import build_registry
from admintab.core.context import RequestContext

settings = AdminSettings.load()  # doctest: +SKIP
with open_database(settings.db_path) as conn:  # doctest: +SKIP
    init_db(conn)
    desc = build_registry().resolve("posts", RequestContext())
    page = fetch_page(desc, PageRequest(page=1, page_size=10), conn=conn)
```
"""

from __future__ import annotations

from .config import AdminSettings
from .database import init_db, open_database, seed_demo_data
from .datasource import delete_records, fetch_detail, fetch_page, save_form

__all__ = [
    "AdminSettings",
    "init_db",
    "open_database",
    "seed_demo_data",
    "fetch_page",
    "fetch_detail",
    "save_form",
    "delete_records",
]
