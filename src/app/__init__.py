from __future__ import annotations

"""
Top-level Streamlit app package.

This package hosts the interactive admin panel (Streamlit) decoupled from the
admintab.* library modules. Descriptors, data sources and settings live under
admintab.*; the Streamlit UI shell and app-specific helpers live here.

CLI entrypoint (configured in pyproject.toml):
    admintab = app.main:main
"""
