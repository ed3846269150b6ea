"""
Dashboard page: statistics tiles, sales and browser charts, goals and orders.

KPI tiles read the first row of the ``statistics`` table (cached by app.data); the
remaining panels show fixed demo figures.
"""

from __future__ import annotations

from typing import Any, cast

import streamlit as st

from admintab.io import AdminSettings
from admintab.io.errors import IoQueryError
from app import charts as app_charts
from app.data import (
    GOALS,
    ORDERS,
    REVENUE_BLOCKS,
    browser_share_frame,
    load_statistics,
    sales_frame,
)


def render_dashboard(settings: AdminSettings) -> None:
    """Render the dashboard.

    Args:
        settings (AdminSettings): Provides the database path for statistics.
    """
    st.subheader("Dashboard")

    try:
        stats = load_statistics(settings.db_path)
    except IoQueryError as e:
        st.error(f"Failed to load statistics: {e}")
    else:
        cols = st.columns(4)
        for col, (label, value) in zip(cols, stats.kpis().items()):
            with col:
                st.metric(label, f"{value:,}")

    left, right = st.columns([0.65, 0.35])
    with left:
        try:
            ch = app_charts.sales_line_chart(sales_frame())
            st.altair_chart(cast(Any, ch), theme=None, use_container_width=True)
        except Exception as e:
            st.error(f"Failed to render sales chart: {e}")
    with right:
        st.markdown("**Goal completion**")
        for title, done, total in GOALS:
            st.progress(done / total, text=f"{title}: {done}/{total}")

    cols = st.columns(len(REVENUE_BLOCKS))
    for col, (title, amount, change) in zip(cols, REVENUE_BLOCKS):
        with col:
            st.metric(title, amount, delta=f"{change}%")

    left, right = st.columns(2)
    with left:
        st.markdown("**Latest orders**")
        st.dataframe(list(ORDERS), hide_index=True, use_container_width=True)
    with right:
        try:
            ch = app_charts.browser_pie_chart(browser_share_frame())
            st.altair_chart(cast(Any, ch), theme=None, use_container_width=True)
        except Exception as e:
            st.error(f"Failed to render browser chart: {e}")
