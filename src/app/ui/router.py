"""
Query-parameter routing for the Streamlit admin panel.

Streamlit serves one script, so pages are selected by query parameters instead of
URL paths. A Route is the parsed form of those parameters; it can also be rebuilt
from the admin-style paths descriptors carry in links and iframe actions
(e.g., ``/admin/info/authors/detail?pk=1``).

Views:
    - dashboard: statistics and charts (default)
    - info: list view of a registered table
    - detail / edit: one row of a table (needs pk)
    - new: add form of a table
    - form / table: standalone demo pages
    - not_found: anything that does not resolve

Examples:
    >>> parse_route({"view": "info", "table": "users", "name__like": "ja"}).params
    {'name__like': 'ja'}
    >>> parse_path("/admin/info/authors/detail?pk=1").to_query()
    {'view': 'detail', 'table': 'authors', 'pk': '1'}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import parse_qsl, urlsplit

from admintab.core.context import RequestContext
from admintab.core.descriptors import TableDescriptor
from admintab.core.errors import UnknownDescriptor
from admintab.core.registry import TableRegistry

__all__ = ["View", "Route", "ResolvedRoute", "parse_route", "parse_path", "resolve_route"]

logger = logging.getLogger(__name__)


class View(Enum):
    DASHBOARD = "dashboard"
    INFO = "info"
    DETAIL = "detail"
    NEW = "new"
    EDIT = "edit"
    FORM = "form"
    TABLE = "table"
    NOT_FOUND = "not_found"


TABLE_VIEWS = frozenset({View.INFO, View.DETAIL, View.NEW, View.EDIT})
_PK_VIEWS = frozenset({View.DETAIL, View.EDIT})
_ROUTE_KEYS = frozenset({"view", "table", "pk"})


@dataclass(frozen=True)
class Route:
    """
    Parsed page selection.

    Attributes:
        view (View): Page to render.
        table (str): Registered table name for table views.
        pk (str): Primary key for detail/edit.
        params (dict[str, str]): Remaining query parameters (filters, paging, sort).
        reason (str): Why the route is not_found, when it is.
    """

    view: View = View.DASHBOARD
    table: str = ""
    pk: str = ""
    params: dict[str, str] = field(default_factory=dict)
    reason: str = ""

    def to_query(self) -> dict[str, str]:
        """Query parameters that reproduce this route."""
        q: dict[str, str] = {"view": self.view.value}
        if self.table:
            q["table"] = self.table
        if self.pk:
            q["pk"] = self.pk
        q.update(self.params)
        return q

    def path(self, prefix: str = "admin") -> str:
        """Admin-style path for logs and the request context (e.g., /admin/info/users)."""
        base = f"/{prefix.strip('/')}" if prefix.strip("/") else ""
        if self.view is View.DASHBOARD:
            return base or "/"
        if self.view in (View.FORM, View.TABLE):
            return f"{base}/{self.view.value}"
        if self.view is View.INFO:
            return f"{base}/info/{self.table}"
        if self.view in TABLE_VIEWS:
            return f"{base}/info/{self.table}/{self.view.value}"
        return f"{base}/not_found"


def not_found(reason: str) -> Route:
    return Route(view=View.NOT_FOUND, reason=reason)


def parse_route(query: Mapping[str, str]) -> Route:
    """
    Build a Route from query parameters.

    A ``table`` without a ``view`` means the list view. Unknown views, table views
    without a table, and detail/edit without a pk produce a not_found route.
    """
    q = {str(k): str(v) for k, v in query.items()}
    table = q.get("table", "").strip()
    raw_view = q.get("view", "").strip().lower() or ("info" if table else "dashboard")
    try:
        view = View(raw_view)
    except ValueError:
        return not_found(f"unknown view {raw_view!r}")
    if view is View.NOT_FOUND:
        return not_found("not found")
    pk = q.get("pk", "").strip()
    if view in TABLE_VIEWS and not table:
        return not_found(f"view {view.value!r} needs a table")
    if view in _PK_VIEWS and not pk:
        return not_found(f"view {view.value!r} needs a pk")
    params = {k: v for k, v in q.items() if k not in _ROUTE_KEYS}
    return Route(view=view, table=table if view in TABLE_VIEWS else "", pk=pk, params=params)


def parse_path(path: str, prefix: str = "admin") -> Route:
    """
    Build a Route from an admin-style path such as ``/admin/info/users/new``.

    Recognized shapes (below the prefix): "", "form", "table", "info/<t>",
    "info/<t>/new", "info/<t>/detail?pk=..", "info/<t>/edit?pk=..".
    """
    parts = urlsplit(path)
    query = dict(parse_qsl(parts.query))
    segs = [s for s in parts.path.strip("/").split("/") if s]
    pre = [s for s in prefix.strip("/").split("/") if s]
    if segs[: len(pre)] != pre:
        return not_found(f"path {path!r} is outside /{prefix.strip('/')}")
    segs = segs[len(pre):]
    if not segs:
        return parse_route({**query, "view": "dashboard"})
    if segs[0] in ("form", "table") and len(segs) == 1:
        return parse_route({**query, "view": segs[0]})
    if segs[0] == "info" and len(segs) in (2, 3):
        view = segs[2] if len(segs) == 3 else "info"
        if len(segs) == 3 and view not in ("new", "detail", "edit"):
            return not_found(f"unknown path {path!r}")
        return parse_route({**query, "view": view, "table": segs[1]})
    return not_found(f"unknown path {path!r}")


@dataclass(frozen=True)
class ResolvedRoute:
    route: Route
    descriptor: TableDescriptor | None = None

    @property
    def found(self) -> bool:
        return self.route.view is not View.NOT_FOUND


def resolve_route(registry: TableRegistry, route: Route, ctx: RequestContext) -> ResolvedRoute:
    """
    Attach the descriptor a table route needs.

    Unknown table names map to a not_found route; other builder errors propagate.
    """
    if route.view not in TABLE_VIEWS:
        return ResolvedRoute(route)
    try:
        desc = registry.resolve(route.table, ctx)
    except UnknownDescriptor as exc:
        logger.info("route to unknown table %r: %s", route.table, exc)
        return ResolvedRoute(not_found(f"no table named {route.table!r}"))
    return ResolvedRoute(route, desc)
