"""
Admin panel UI package.

This package contains the decomposed Streamlit UI for the admin panel. It exposes the
top-level orchestrator and focused modules for separate concerns.

Modules:
    - app: Streamlit application orchestrator (streamlit_app).
    - router: query-parameter routes and descriptor resolution.
    - nav: navigation and one-shot messages.
    - info: list and detail views of registered tables.
    - form_page: add/edit forms and the form demo page.
    - table_page: static table demo page.
    - dashboard: statistics and charts.
    - helpers: pure formatting and pagination helpers.

Usage:
    from app.ui import streamlit_app
    streamlit_app(config_path="admintab.toml")
"""

from __future__ import annotations

from .app import streamlit_app

__all__ = [
    "streamlit_app",
]
