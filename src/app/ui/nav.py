"""Navigation between routes by rewriting Streamlit query parameters."""

from __future__ import annotations

import streamlit as st

from .router import Route, View, parse_path


def go(route: Route) -> None:
    """Replace the query string with `route` and rerun the script."""
    st.query_params.from_dict(route.to_query())
    st.rerun()


def go_path(path: str, prefix: str) -> None:
    """Navigate to an admin-style path such as /admin/info/users/new."""
    go(parse_path(path, prefix))


def is_internal(url: str, prefix: str) -> bool:
    """True for paths under the admin prefix that resolve to a route."""
    if not url.startswith("/"):
        return False
    return parse_path(url, prefix).view is not View.NOT_FOUND


_FLASH_KEY = "admintab_flash"


def flash(message: str) -> None:
    """Queue a success message shown once on the next render."""
    st.session_state[_FLASH_KEY] = message


def pop_flash() -> str:
    return str(st.session_state.pop(_FLASH_KEY, "") or "")
