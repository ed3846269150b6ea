from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from admintab.core.actions import run_action
from admintab.core.builder import TableBuilder
from admintab.core.context import RequestContext
from admintab.core.descriptors import ActionResult, FieldModel, JoinSpec, TableDescriptor
from admintab.core.display import project_row, project_rows
from admintab.core.errors import DataSourceFailure
from admintab.core.grammar import ActionKind, ActionScope
from admintab.core.values import ValueKind, as_text, coerce_scalar, normalize_row, value_kind

AUTHOR = JoinSpec(field="author_id", join_field="id", table="authors")


def _label(model: FieldModel) -> str:
    return f"#{model.pk}: {model.value}"


def _posts() -> TableDescriptor:
    return (
        TableBuilder("posts")
        .add_column("ID", "id")
        .add_column("Title", "title", display=_label)
        .add_column("Author", "first_name", join=AUTHOR)
        .add_column("Secret", "secret", hidden=True)
        .add_virtual_column("Length", "length", lambda m: len(str(m.row.get("title") or "")))
        .set_table("posts")
        .build()
    )


def test_projection_applies_display_and_join_fallback() -> None:
    rows = [
        {"id": 1, "title": "go", "authors_joined_first_name": "Hilton", "secret": "s"},
        {"id": 4, "title": "orphan", "authors_joined_first_name": None, "secret": "s"},
    ]
    assert project_rows(_posts(), rows) == [
        {"id": 1, "title": "#1: go", "authors_joined_first_name": "Hilton", "length": 2},
        {"id": 4, "title": "#4: orphan", "authors_joined_first_name": "", "length": 6},
    ]


def test_hidden_columns_on_request() -> None:
    row = project_row(_posts(), {"id": 1, "title": "go", "secret": "s"}, include_hidden=True)
    assert row["secret"] == "s"


def _actions(handler) -> TableDescriptor:
    return (
        TableBuilder("users")
        .add_column("ID", "id")
        .add_action("audit", "Audit", ActionKind.AJAX, handler=handler)
        .add_action("google", "Google", ActionKind.JUMP, scope=ActionScope.TABLE,
                    url="https://google.com")
        .set_table("users")
        .build()
    )


def test_run_action_passes_context() -> None:
    def audit(ctx: RequestContext) -> ActionResult:
        return ActionResult(True, f"audited {ctx.form_value('id')}")

    ctx = RequestContext(user="admin").with_form(id="7")
    assert run_action(_actions(audit), "audit", ctx) == ActionResult(True, "audited 7")


def test_run_action_reports_handler_failures() -> None:
    def broken(ctx: RequestContext) -> ActionResult:
        raise RuntimeError("upstream down")

    def wrong(ctx: RequestContext):
        return "ok"

    result = run_action(_actions(broken), "audit", RequestContext())
    assert not result.success and result.message == "upstream down"
    assert not run_action(_actions(wrong), "audit", RequestContext()).success


def test_run_action_rejects_unknown_and_handlerless_actions() -> None:
    desc = _actions(lambda ctx: ActionResult(True))
    with pytest.raises(KeyError):
        run_action(desc, "missing", RequestContext())
    with pytest.raises(ValueError):
        run_action(desc, "google", RequestContext())


def test_scalar_normalization() -> None:
    assert coerce_scalar(datetime(2020, 1, 2, 3, 4, 5)) == "2020-01-02 03:04:05"
    assert coerce_scalar(date(2020, 1, 2)) == "2020-01-02"
    assert coerce_scalar(Decimal("1.5")) == 1.5
    assert coerce_scalar(b"abc") == "abc"
    assert value_kind(True) is ValueKind.BOOL
    assert value_kind(1) is ValueKind.INT
    assert value_kind(None) is ValueKind.NULL
    assert as_text(None) == "" and as_text(False) == "0"
    with pytest.raises(DataSourceFailure):
        coerce_scalar([1, 2])
    with pytest.raises(DataSourceFailure):
        normalize_row({1: "x"})


def test_context_is_immutable() -> None:
    ctx = RequestContext(roles={"administrator"}, query={"page": "2"})
    assert ctx.has_role("administrator")
    assert ctx.query_value("page") == "2"
    with pytest.raises(TypeError):
        ctx.query["page"] = "3"  # type: ignore[index]
