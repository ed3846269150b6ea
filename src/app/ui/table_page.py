"""Standalone table page: static rows served by a function plus an ajax button."""

from __future__ import annotations

import logging

import polars as pl
import streamlit as st

from admintab.core.builder import TableBuilder
from admintab.core.context import RequestContext
from admintab.core.descriptors import ActionResult, TableDescriptor
from admintab.core.grammar import ActionKind, ActionScope, FieldType
from admintab.io import AdminSettings
from admintab.io.datasource import frame_source

from .info import render_list
from .router import Route

__all__ = ["get_table_demo", "render_table_demo", "TABLE_DEMO_FRAME"]

logger = logging.getLogger(__name__)

TABLE_DEMO_FRAME = pl.DataFrame(
    {
        "id": [0, 1],
        "name": ["Jack", "Jane"],
        "gender": ["male", "female"],
        "age": [20, 23],
    }
)


def _click_me(ctx: RequestContext) -> ActionResult:
    logger.info("table demo button clicked (id=%r)", ctx.form_value("id"))
    return ActionResult(success=True, message="Operation succeeded")


def get_table_demo() -> TableDescriptor:
    return (
        TableBuilder("table_demo", title="Table", description="Table example")
        .configure(can_add=False, editable=False, deletable=False)
        .add_column("ID", "id", FieldType.INT, sortable=True)
        .add_column("Name", "name")
        .add_column("Gender", "gender")
        .add_column("Age", "age", FieldType.INT, sortable=True)
        .add_action("click_me", "Click me", ActionKind.AJAX, scope=ActionScope.TABLE,
                    url="/admin/table/ajax", handler=_click_me, icon="arrow-left")
        .set_data_fn(frame_source(TABLE_DEMO_FRAME))
        .build()
    )


def render_table_demo(route: Route, ctx: RequestContext, settings: AdminSettings) -> None:
    desc = get_table_demo()
    st.subheader(desc.title)
    st.caption(desc.description)
    render_list(desc, route, ctx, settings, None)
