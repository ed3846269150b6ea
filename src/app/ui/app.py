"""
Streamlit application orchestrator for the admin panel.

This module wires process-wide resources (settings, registry, database) to the page
modules under app.ui.* and dispatches on the route parsed from query parameters.

Responsibilities:
    - Configure the Streamlit page.
    - Load settings, prepare the database and build the frozen registry (cached).
    - Render the sidebar navigation (dashboard, registered tables, demo pages).
    - Resolve the route and mount the matching page; unknown tables show not-found.

Notes:
    - One SQLite connection is opened per script run and closed when it ends.
    - Settings errors and database preparation errors stop the page with st.error.
"""

from __future__ import annotations

import logging

import streamlit as st

from admintab.core.registry import TableRegistry
from admintab.io import AdminSettings, open_database
from admintab.io.errors import IoError
from app.data import ensure_database, get_registry, get_settings

from .dashboard import render_dashboard
from .form_page import render_form, render_form_demo
from .helpers import build_context
from .info import render_detail, render_info
from .nav import go, pop_flash
from .router import ResolvedRoute, Route, View, parse_route, resolve_route
from .table_page import render_table_demo

logger = logging.getLogger(__name__)


def _render_sidebar(settings: AdminSettings, registry: TableRegistry, route: Route) -> None:
    with st.sidebar:
        st.markdown(f"### {settings.title}")
        st.caption(f"{settings.demo_user} · {', '.join(settings.demo_roles) or 'no roles'}")
        if st.button("Dashboard", use_container_width=True,
                     disabled=route.view is View.DASHBOARD):
            go(Route(view=View.DASHBOARD))
        st.markdown("**Tables**")
        for name in registry.names():
            current = route.table == name
            if st.button(name.replace("_", " ").title(), key=f"nav:{name}",
                         use_container_width=True, disabled=current and route.view is View.INFO):
                go(Route(view=View.INFO, table=name))
        st.markdown("**Examples**")
        if st.button("Form", key="nav:form", use_container_width=True):
            go(Route(view=View.FORM))
        if st.button("Table", key="nav:table", use_container_width=True):
            go(Route(view=View.TABLE))


def _render_page(resolved: ResolvedRoute, settings: AdminSettings) -> None:
    route = resolved.route
    ctx = build_context(settings, route)
    if route.view is View.DASHBOARD:
        render_dashboard(settings)
        return
    if route.view is View.FORM:
        render_form_demo(settings)
        return
    if route.view is View.TABLE:
        render_table_demo(route, ctx, settings)
        return
    if not resolved.found or resolved.descriptor is None:
        st.error(f"404 · {route.reason or 'page not found'}")
        if st.button("Back to dashboard"):
            go(Route(view=View.DASHBOARD))
        return

    desc = resolved.descriptor
    with open_database(settings.db_path) as conn:
        if route.view is View.INFO:
            render_info(desc, route, ctx, settings, conn)
        elif route.view is View.DETAIL:
            render_detail(desc, route, ctx, settings, conn)
        else:
            render_form(desc, route, ctx, settings, conn)


def streamlit_app(config_path: str | None = None, db_path: str | None = None) -> None:
    """Render the admin Streamlit application.

    Args:
        config_path (str | None): Optional TOML settings file (see AdminSettings.load).
        db_path (str | None): Optional database path overriding env and TOML.

    Returns:
        None
    """
    try:
        settings = get_settings(config_path, db_path)
    except IoError as e:
        st.set_page_config(page_title="admintab", layout="wide")
        st.error(f"Invalid settings: {e}")
        return

    # Page config
    st.set_page_config(page_title=settings.title, layout="wide")

    try:
        ensure_database(settings.db_path, settings.seed_demo)
    except IoError as e:
        st.error(f"Failed to prepare database {settings.db_path}: {e}")
        return
    registry = get_registry()

    route = parse_route(st.query_params.to_dict())
    _render_sidebar(settings, registry, route)

    message = pop_flash()
    if message:
        st.success(message)

    resolved = resolve_route(registry, route, build_context(settings, route))
    logger.debug("rendering %s", resolved.route.path(settings.url_prefix))
    _render_page(resolved, settings)
