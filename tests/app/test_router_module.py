from __future__ import annotations

from admintab.core.context import RequestContext
from admintab.tables import build_registry
from app.ui.router import Route, View, parse_path, parse_route, resolve_route


def test_parse_route_defaults() -> None:
    assert parse_route({}).view is View.DASHBOARD
    route = parse_route({"table": "users", "page": "2"})
    assert (route.view, route.table, route.params) == (View.INFO, "users", {"page": "2"})


def test_parse_route_not_found_cases() -> None:
    assert parse_route({"view": "bogus"}).view is View.NOT_FOUND
    assert parse_route({"view": "info"}).view is View.NOT_FOUND
    missing_pk = parse_route({"view": "detail", "table": "users"})
    assert missing_pk.view is View.NOT_FOUND and "pk" in missing_pk.reason


def test_demo_views_drop_table() -> None:
    route = parse_route({"view": "form", "table": "users"})
    assert route.view is View.FORM and route.table == ""


def test_route_round_trips_through_query() -> None:
    route = Route(view=View.EDIT, table="posts", pk="3", params={"sort": "title"})
    assert list(route.to_query()) == ["view", "table", "pk", "sort"]
    assert parse_route(route.to_query()) == route


def test_route_paths() -> None:
    assert Route().path() == "/admin"
    assert Route().path("") == "/"
    assert Route(view=View.INFO, table="users").path() == "/admin/info/users"
    assert Route(view=View.NEW, table="users").path("backend") == "/backend/info/users/new"
    assert Route(view=View.TABLE).path() == "/admin/table"


def test_parse_path() -> None:
    assert parse_path("/admin").view is View.DASHBOARD
    assert parse_path("/admin/form").view is View.FORM
    info = parse_path("/admin/info/users?name__like=ja")
    assert (info.view, info.table, info.params) == (View.INFO, "users", {"name__like": "ja"})
    assert parse_path("/admin/info/profile/new").view is View.NEW
    detail = parse_path("/admin/info/authors/detail?pk=1")
    assert (detail.view, detail.pk) == (View.DETAIL, "1")
    assert parse_path("/admin/info/users/delete").view is View.NOT_FOUND
    assert parse_path("/elsewhere/info/users").view is View.NOT_FOUND
    assert parse_path("/backend/info/users", "backend").table == "users"


def test_resolve_route() -> None:
    registry = build_registry()
    ctx = RequestContext()
    found = resolve_route(registry, Route(view=View.INFO, table="users"), ctx)
    assert found.found and found.descriptor is not None
    assert found.descriptor.name == "users"

    missing = resolve_route(registry, Route(view=View.INFO, table="orders"), ctx)
    assert not missing.found and missing.descriptor is None
    assert "orders" in missing.route.reason

    dashboard = resolve_route(registry, Route(), ctx)
    assert dashboard.found and dashboard.descriptor is None
