from __future__ import annotations

import polars as pl
import pytest

from app import charts as app_charts
from app.data import (
    GOALS,
    ORDERS,
    REVENUE_BLOCKS,
    SALES_MONTHS,
    browser_share_frame,
    sales_frame,
)


def test_sales_frame_is_long_form() -> None:
    df = sales_frame()
    assert df.columns == ["month", "month_index", "series", "sales"]
    assert df.height == 2 * len(SALES_MONTHS)
    assert set(df["series"].to_list()) == {"Electronics", "Digital goods"}
    jan = df.filter((pl.col("series") == "Electronics") & (pl.col("month") == "Jan"))
    assert jan["sales"].item() == 65


def test_browser_shares_sum_to_one() -> None:
    df = browser_share_frame()
    assert df.columns == ["browser", "visits", "share"]
    assert abs(df["share"].sum() - 1.0) < 1e-9
    assert df.filter(pl.col("browser") == "Chrome")["visits"].item() == 700


def test_static_panels() -> None:
    assert all(0 < done <= total for _, done, total in GOALS)
    assert len(ORDERS) == 4 and ORDERS[0]["Status"] == "shipped"
    assert [title for title, _, _ in REVENUE_BLOCKS][0] == "Total revenue"


def test_charts_build_from_demo_frames() -> None:
    line = app_charts.sales_line_chart(sales_frame()).to_dict()
    assert line["mark"]["type"] == "line"
    assert line["encoding"]["x"]["field"] == "month"
    pie = app_charts.browser_pie_chart(browser_share_frame()).to_dict()
    assert pie["mark"]["type"] == "arc"
    assert pie["mark"]["innerRadius"] == 50


def test_charts_require_columns() -> None:
    with pytest.raises(ValueError):
        app_charts.sales_line_chart(pl.DataFrame({"month": ["Jan"]}))
    with pytest.raises(ValueError):
        app_charts.browser_pie_chart(pl.DataFrame({"browser": ["IE"]}))
