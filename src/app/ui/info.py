"""
List and detail views for registered tables.

The list view is driven entirely by the descriptor: filter widgets come from
filterable columns and field-filter actions, sort choices from sortable columns,
toolbar buttons from table-scoped actions and row buttons from row-scoped actions.
Every control writes the route's query parameters, so a page is reproducible from its
URL and PageRequest.from_query parses it.

Notes:
    - Reads go through admintab.io.fetch_page/fetch_detail and never raise; a broken
      data source shows an empty page.
    - Writes (inline edit, delete) propagate errors, shown here with st.error.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

import streamlit as st
import streamlit.components.v1 as components

from admintab.core.actions import run_action
from admintab.core.context import RequestContext
from admintab.core.descriptors import (
    ActionSpec,
    ColumnSpec,
    RelationalSource,
    TableDescriptor,
)
from admintab.core.display import project_row
from admintab.core.grammar import ActionKind, ActionScope, DisplayKind, EditType, SortOrder
from admintab.core.query import PageRequest
from admintab.core.typing import Row
from admintab.core.values import as_text
from admintab.io import AdminSettings, delete_records, fetch_detail, fetch_page
from admintab.io.errors import IoQueryError
from admintab.io.export import export_csv
from admintab.io.relational import update_cell

from .helpers import (
    display_frame,
    filter_key,
    format_cell,
    option_labels,
    page_summary,
    page_window,
)
from .nav import go, go_path, is_internal
from .router import Route, View

__all__ = ["render_info", "render_detail", "render_list"]

logger = logging.getLogger(__name__)


def _with_params(route: Route, **updates: Any) -> Route:
    params = dict(route.params)
    for key, value in updates.items():
        if value is None or value == "":
            params.pop(key, None)
        else:
            params[key] = str(value)
    return replace(route, params=params)


# ----------------------------
# Actions
# ----------------------------


def _render_action(
    desc: TableDescriptor,
    action: ActionSpec,
    ctx: RequestContext,
    settings: AdminSettings,
    *,
    pk: str = "",
) -> None:
    key = f"act:{desc.name}:{action.id}:{pk}"
    label = action.label or action.id
    if action.kind is ActionKind.JUMP:
        if is_internal(action.url, settings.url_prefix):
            if st.button(label, key=key):
                go_path(action.url, settings.url_prefix)
        else:
            st.link_button(label, action.url)
        return
    if action.kind is ActionKind.IFRAME:
        if st.button(label, key=key, help=action.title or None):
            if is_internal(action.iframe_src, settings.url_prefix):
                go_path(action.iframe_src, settings.url_prefix)
            else:
                components.iframe(action.iframe_src, height=480)
        return
    if action.kind in (ActionKind.AJAX, ActionKind.POPUP):
        if st.button(label, key=key):
            result = run_action(desc, action.id, ctx.with_form(id=pk))
            if not result.success:
                st.error(result.message or "action failed")
            elif action.kind is ActionKind.POPUP:
                with st.expander(action.title or label, expanded=True):
                    st.markdown(as_text(result.data), unsafe_allow_html=True)
            else:
                st.success(result.message or "ok")


def _render_field_filters(desc: TableDescriptor, route: Route) -> None:
    for action in desc.actions_in(ActionScope.TABLE):
        if action.kind is not ActionKind.FIELD_FILTER:
            continue
        labels = option_labels(action.options)
        choices = ["", *labels]
        current = route.params.get(action.field, "")
        chosen = st.selectbox(
            action.label,
            choices,
            index=choices.index(current) if current in choices else 0,
            format_func=lambda v: labels.get(v, "All"),
            key=f"ff:{desc.name}:{action.id}:{current}",
        )
        if chosen != current:
            go(_with_params(route, **{action.field: chosen, "page": None}))


def _render_toolbar(
    desc: TableDescriptor,
    route: Route,
    ctx: RequestContext,
    settings: AdminSettings,
    rows: Sequence[Row],
) -> None:
    buttons = [
        a for a in desc.actions_in(ActionScope.TABLE) if a.kind is not ActionKind.FIELD_FILTER
    ]
    cols = st.columns(len(buttons) + 2)
    with cols[0]:
        if desc.config.can_add and isinstance(desc.source, RelationalSource):
            if st.button("New", key=f"new:{desc.name}", type="primary"):
                go(Route(view=View.NEW, table=desc.name))
    with cols[1]:
        if desc.config.exportable:
            st.download_button(
                "Export",
                data=export_csv(desc, rows),
                file_name=f"{desc.name}.csv",
                mime="text/csv",
                key=f"export:{desc.name}",
            )
    for col, action in zip(cols[2:], buttons):
        with col:
            _render_action(desc, action, ctx, settings)


# ----------------------------
# Filters, sort, page size
# ----------------------------


def _render_filter_area(desc: TableDescriptor, route: Route) -> None:
    columns = desc.filterable_columns
    if desc.config.hide_filter_area or not columns:
        return
    with st.expander("Filter", expanded=any(filter_key(c) in route.params for c in columns)):
        with st.form(f"filters:{desc.name}"):
            values: dict[str, str] = {}
            for c in columns:
                spec = c.filter
                if spec is None:
                    continue
                key = filter_key(c)
                current = route.params.get(key, "")
                if spec.options:
                    labels = option_labels(spec.options)
                    choices = ["", *labels]
                    values[key] = st.selectbox(
                        c.label,
                        choices,
                        index=choices.index(current) if current in choices else 0,
                        format_func=lambda v, labels=labels: labels.get(v, "All"),
                    )
                else:
                    values[key] = st.text_input(
                        f"{c.label} ({spec.operator.value})", value=current
                    )
            search, reset = st.columns(2)
            if search.form_submit_button("Search"):
                go(_with_params(route, page=None, **values))
            if reset.form_submit_button("Reset"):
                go(_with_params(route, page=None, **{k: None for k in values}))


def _render_view_controls(
    desc: TableDescriptor, route: Route, request: PageRequest, settings: AdminSettings
) -> None:
    c1, c2, c3 = st.columns(3)
    sortable = {c.key: c.label for c in desc.columns if c.sortable}
    with c1:
        choices = ["", *sortable]
        current = request.sort_field if request.sort_field in sortable else ""
        sort = st.selectbox(
            "Sort by",
            choices,
            index=choices.index(current),
            format_func=lambda k: sortable.get(k, desc.primary_key.name),
            key=f"sort:{desc.name}:{current}",
        )
    with c2:
        orders = [o.value for o in SortOrder]
        order = st.selectbox(
            "Order",
            orders,
            index=orders.index(request.sort_order.value),
            key=f"order:{desc.name}:{request.sort_order.value}",
        )
    with c3:
        sizes = list(settings.page_sizes)
        size = st.selectbox(
            "Page size",
            sizes,
            index=sizes.index(request.page_size) if request.page_size in sizes else 0,
            key=f"size:{desc.name}:{request.page_size}",
        )
    if (sort, order, size) != (current, request.sort_order.value, request.page_size):
        go(_with_params(route, sort=sort, order=order, page_size=size, page=None))


def _render_pagination(route: Route, page_count: int, current: int, name: str) -> None:
    window = page_window(current, page_count)
    if len(window) <= 1:
        return
    cols = st.columns(len(window) + 2)
    if cols[0].button("«", key=f"prev:{name}", disabled=current <= 1):
        go(_with_params(route, page=current - 1))
    for col, n in zip(cols[1:-1], window):
        if col.button(str(n), key=f"page:{name}:{n}", disabled=n == current):
            go(_with_params(route, page=n))
    if cols[-1].button("»", key=f"next:{name}", disabled=current >= page_count):
        go(_with_params(route, page=current + 1))


# ----------------------------
# Selected rows
# ----------------------------


def _edit_widget(c: ColumnSpec, current: str, key: str) -> str:
    opts = list(c.edit_options)
    if c.edit is EditType.SWITCH and len(opts) >= 2:
        on = st.toggle(f"{c.label} ({opts[0].label}/{opts[1].label})", value=current == opts[1].value, key=key)
        return opts[1].value if on else opts[0].value
    if c.edit is EditType.SELECT and opts:
        labels = option_labels(opts)
        values = list(labels)
        return st.selectbox(
            c.label,
            values,
            index=values.index(current) if current in values else 0,
            format_func=lambda v: labels.get(v, v),
            key=key,
        )
    if c.edit is EditType.TEXTAREA:
        return st.text_area(c.label, value=current, key=key)
    return st.text_input(c.label, value=current, key=key)


def _render_quick_edit(desc: TableDescriptor, row: Row, conn: sqlite3.Connection) -> None:
    editable = [c for c in desc.columns if c.editable and c.stored]
    if not editable or not desc.config.editable or not isinstance(desc.source, RelationalSource):
        return
    pk = desc.pk_of(row)
    with st.expander("Quick edit"):
        changes: dict[str, str] = {}
        for c in editable:
            current = as_text(row.get(c.key))
            new = _edit_widget(c, current, f"qe:{desc.name}:{pk}:{c.key}")
            if new != current:
                changes[c.key] = new
        if st.button("Save changes", key=f"qe-save:{desc.name}:{pk}", disabled=not changes):
            try:
                for key, value in changes.items():
                    update_cell(conn, desc, pk, key, value)
                conn.commit()
            except IoQueryError as exc:
                st.error(str(exc))
            else:
                logger.info("inline edit of %s row %s: %s", desc.name, pk, sorted(changes))
                st.rerun()


def _render_selection(
    desc: TableDescriptor,
    rows: Sequence[Row],
    ctx: RequestContext,
    settings: AdminSettings,
    conn: sqlite3.Connection,
) -> None:
    if not rows:
        return
    pks = [desc.pk_of(r) for r in rows]
    st.caption(f"{len(rows)} row(s) selected")
    if len(rows) == 1:
        pk = as_text(pks[0])
        row_actions = desc.actions_in(ActionScope.ROW)
        cols = st.columns(len(row_actions) + 2)
        if cols[0].button("Detail", key=f"detail:{desc.name}:{pk}"):
            go(Route(view=View.DETAIL, table=desc.name, pk=pk))
        if desc.config.editable and isinstance(desc.source, RelationalSource):
            if cols[1].button("Edit", key=f"edit:{desc.name}:{pk}"):
                go(Route(view=View.EDIT, table=desc.name, pk=pk))
        for col, action in zip(cols[2:], row_actions):
            with col:
                _render_action(desc, action, ctx, settings, pk=pk)
        _render_quick_edit(desc, rows[0], conn)
    if desc.config.deletable and isinstance(desc.source, RelationalSource):
        confirm = st.checkbox("Confirm delete", key=f"del-confirm:{desc.name}")
        if st.button("Delete selected", key=f"del:{desc.name}", disabled=not confirm):
            try:
                n = delete_records(desc, pks, conn)
            except (IoQueryError, PermissionError) as exc:
                st.error(str(exc))
            else:
                st.success(f"Deleted {n} row(s)")
                st.rerun()


# ----------------------------
# Pages
# ----------------------------


def _column_config(desc: TableDescriptor) -> dict[str, Any]:
    cfg: dict[str, Any] = {}
    for c in desc.visible_columns:
        if c.display_kind is DisplayKind.IMAGE:
            cfg[c.label] = st.column_config.ImageColumn(c.label)
        elif c.display_kind is DisplayKind.LINK:
            cfg[c.label] = st.column_config.LinkColumn(c.label)
    return cfg


def render_list(
    desc: TableDescriptor,
    route: Route,
    ctx: RequestContext,
    settings: AdminSettings,
    conn: sqlite3.Connection | None,
) -> None:
    """Render the list view of `desc` for the query parameters of `route`.

    Args:
        desc (TableDescriptor): Resolved descriptor.
        route (Route): Current route; its params carry filters, sort and paging.
        ctx (RequestContext): Request context handed to action handlers.
        settings (AdminSettings): Page sizes and URL prefix.
        conn (sqlite3.Connection | None): Database connection for relational tables.
    """
    request = PageRequest.from_query(route.params, default_page_size=settings.page_size)
    page = fetch_page(desc, request, conn=conn)

    _render_toolbar(desc, route, ctx, settings, page.rows)
    _render_field_filters(desc, route)
    _render_filter_area(desc, route)
    _render_view_controls(desc, route, request, settings)

    event = st.dataframe(
        display_frame(desc, page.rows, prefix=settings.url_prefix),
        column_config=_column_config(desc),
        hide_index=True,
        use_container_width=True,
        on_select="rerun",
        selection_mode="multi-row",
        key=f"grid:{desc.name}",
    )
    st.caption(page_summary(page))
    _render_pagination(route, page.page_count, page.page, desc.name)

    picked = [page.rows[i] for i in event.selection.rows if i < len(page.rows)]
    if conn is not None:
        _render_selection(desc, picked, ctx, settings, conn)
    elif picked:
        pk = as_text(desc.pk_of(picked[0]))
        if st.button("Detail", key=f"detail:{desc.name}:{pk}"):
            go(Route(view=View.DETAIL, table=desc.name, pk=pk))


def render_info(
    desc: TableDescriptor,
    route: Route,
    ctx: RequestContext,
    settings: AdminSettings,
    conn: sqlite3.Connection | None,
) -> None:
    st.subheader(desc.title or desc.name)
    if desc.description and desc.description != desc.title:
        st.caption(desc.description)
    render_list(desc, route, ctx, settings, conn)


def render_detail(
    desc: TableDescriptor,
    route: Route,
    ctx: RequestContext,
    settings: AdminSettings,
    conn: sqlite3.Connection | None,
) -> None:
    """Read-only view of one row, every non-hidden column formatted by display kind."""
    st.subheader(f"{desc.title or desc.name} · detail")
    back, edit = st.columns(2)
    if back.button("Back to list", key=f"back:{desc.name}"):
        go(Route(view=View.INFO, table=desc.name))
    row = fetch_detail(desc, route.pk, conn=conn)
    if row is None:
        st.warning(f"No row with {desc.primary_key.name} = {route.pk}")
        return
    if desc.config.editable and isinstance(desc.source, RelationalSource):
        if edit.button("Edit", key=f"edit:{desc.name}:{route.pk}"):
            go(Route(view=View.EDIT, table=desc.name, pk=route.pk))
    shown = project_row(desc, row)
    st.table(
        {
            "Field": [c.label for c in desc.visible_columns],
            "Value": [format_cell(c, shown.get(c.key)) for c in desc.visible_columns],
        }
    )
