"""
Process-wide resources and dashboard data for the Streamlit app.

Resources (settings, frozen registry, prepared database) are built once per server
process with ``st.cache_resource``; the statistics snapshot is cached with
``st.cache_data`` and a short TTL so edits show up without a restart.

The chart, goal and order figures are fixed demo data for the dashboard page.
"""

from __future__ import annotations

import logging
from dataclasses import replace

import polars as pl
import streamlit as st

from admintab.core.registry import TableRegistry
from admintab.io import AdminSettings, init_db, open_database, seed_demo_data
from admintab.io.statistics import Statistics, first_statistics
from admintab.tables import build_registry

__all__ = [
    "get_settings",
    "get_registry",
    "ensure_database",
    "load_statistics",
    "sales_frame",
    "browser_share_frame",
    "GOALS",
    "ORDERS",
    "REVENUE_BLOCKS",
    "SALES_MONTHS",
]

logger = logging.getLogger(__name__)

# ---------- Cached resources ----------


@st.cache_resource
def get_settings(config_path: str | None = None, db_path: str | None = None) -> AdminSettings:
    """Load settings once per process; an explicit db path overrides env and TOML."""
    settings = AdminSettings.load(config_path)
    if db_path:
        settings = replace(settings, db_path=db_path).validate()
    logger.info("settings loaded (db=%s, prefix=/%s)", settings.db_path, settings.url_prefix)
    return settings


@st.cache_resource
def get_registry() -> TableRegistry:
    """Frozen registry of the demo tables; built before the first page renders."""
    return build_registry()


@st.cache_resource
def ensure_database(db_path: str, seed: bool = True) -> str:
    """Create tables (and demo rows when `seed` is set) once per database file."""
    with open_database(db_path) as conn:
        init_db(conn)
        if seed:
            seed_demo_data(conn)
    return db_path


@st.cache_data(ttl=30)
def load_statistics(db_path: str) -> Statistics:
    with open_database(db_path) as conn:
        return first_statistics(conn)


# ---------- Dashboard demo data ----------

SALES_MONTHS: tuple[str, ...] = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul")

_SALES: dict[str, tuple[int, ...]] = {
    "Electronics": (65, 59, 80, 81, 56, 55, 40),
    "Digital goods": (28, 48, 40, 19, 86, 27, 90),
}

_BROWSERS: dict[str, int] = {
    "Navigator": 100,
    "Opera": 300,
    "Safari": 600,
    "Firefox": 400,
    "IE": 500,
    "Chrome": 700,
}

# (title, done, total)
GOALS: tuple[tuple[str, int, int], ...] = (
    ("Add products to cart", 160, 200),
    ("Complete purchase", 310, 400),
    ("Visit premium page", 490, 800),
    ("Send inquiries", 250, 500),
)

ORDERS: tuple[dict[str, str], ...] = tuple(
    {"Order ID": "OR9842", "Item": "Call of Duty IV", "Status": "shipped", "Popularity": "90%"}
    for _ in range(4)
)

# (title, amount, change percent)
REVENUE_BLOCKS: tuple[tuple[str, str, int], ...] = (
    ("Total revenue", "¥140,100", 17),
    ("Total cost", "440,560", 2),
    ("Total profit", "¥140,050", 12),
    ("Goal completions", "30943", 1),
)


def sales_frame() -> pl.DataFrame:
    """Monthly sales in long form: month, month_index, series, sales."""
    return pl.DataFrame(
        {
            "month": [m for _ in _SALES for m in SALES_MONTHS],
            "month_index": [i for _ in _SALES for i in range(len(SALES_MONTHS))],
            "series": [name for name, values in _SALES.items() for _ in values],
            "sales": [v for values in _SALES.values() for v in values],
        }
    )


def browser_share_frame() -> pl.DataFrame:
    """Browser usage counts with their share of the total."""
    df = pl.DataFrame({"browser": list(_BROWSERS), "visits": list(_BROWSERS.values())})
    return df.with_columns((pl.col("visits") / pl.col("visits").sum()).alias("share"))
