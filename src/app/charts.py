from __future__ import annotations

import altair as alt
import polars as pl


# Uniform chart defaults for a professional look
def _apply_chart_defaults(ch: alt.TopLevelMixin) -> alt.TopLevelMixin:
    try:
        return (
            ch.configure_axis(labelFontSize=12, titleFontSize=12, grid=True)
            .configure_legend(labelFontSize=12, titleFontSize=12)
            .configure_title(fontSize=14)
            .configure_view(strokeOpacity=0)
        )
    except Exception:
        # If configuration fails (e.g., non-top-level), return chart as-is
        return ch


def _require(df: pl.DataFrame, cols: set[str]) -> None:
    missing = sorted(cols - set(df.columns))
    if missing:
        raise ValueError(f"chart data missing columns: {missing}")


def sales_line_chart(df: pl.DataFrame, *, title: str = "Sales: 2019-01-01 - 2019-07-30") -> alt.TopLevelMixin:
    """Monthly sales lines, one per series.

    Args:
        df (pl.DataFrame): Long-form frame with month, month_index, series, sales.
        title (str): Chart title.

    Returns:
        alt.TopLevelMixin: Configured line chart.
    """
    _require(df, {"month", "month_index", "series", "sales"})
    ch = (
        alt.Chart(alt.Data(values=df.to_dicts()))
        .mark_line(point=True)
        .encode(
            x=alt.X("month:N", sort=alt.SortField("month_index"), title="Month"),
            y=alt.Y("sales:Q", title="Sales"),
            color=alt.Color("series:N", title=None),
            tooltip=["series:N", "month:N", "sales:Q"],
        )
        .properties(title=title, height=260)
    )
    return _apply_chart_defaults(ch)


def browser_pie_chart(df: pl.DataFrame) -> alt.TopLevelMixin:
    """Donut of browser visits (expects browser, visits, share)."""
    _require(df, {"browser", "visits", "share"})
    ch = (
        alt.Chart(alt.Data(values=df.to_dicts()))
        .mark_arc(innerRadius=50)
        .encode(
            theta=alt.Theta("visits:Q"),
            color=alt.Color("browser:N", title="Browser"),
            tooltip=["browser:N", "visits:Q", alt.Tooltip("share:Q", format=".0%")],
        )
        .properties(title="Browser usage", height=220)
    )
    return _apply_chart_defaults(ch)
