from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

from admintab.core.actions import run_action
from admintab.core.context import RequestContext
from admintab.core.forms import prepare_submission, resolve_options
from admintab.core.grammar import FormMode, WidgetKind
from admintab.core.query import PageRequest
from admintab.io.datasource import fetch_page
from app.ui.form_page import get_form_demo, store_upload
from app.ui.table_page import get_table_demo


def test_form_demo_covers_widgets() -> None:
    desc = get_form_demo()
    widgets = {f.widget for f in desc.form_fields}
    assert {
        WidgetKind.SWITCH,
        WidgetKind.RATE,
        WidgetKind.SLIDER,
        WidgetKind.CODE,
        WidgetKind.CHECKBOX_STACKED,
        WidgetKind.MULTIFILE,
        WidgetKind.DATETIME_RANGE,
    } <= widgets
    assert [t.header for t in desc.tabs] == ["Input", "Select"]


def test_form_demo_dynamic_cities() -> None:
    city = get_form_demo().form_field("city")
    assert [o.value for o in resolve_options(city, {"province": "2"})] == [
        "guangzhou",
        "shenzhen",
        "dongguan",
    ]


def test_form_demo_submission() -> None:
    values = {"name": "Jo", "age": "7", "snacks": ["0", "2"], "website": "1"}
    assert prepare_submission(get_form_demo(), values, FormMode.ADD) == {
        "name": "Jo",
        "age": 7,
        "snacks": "0,2",
        "website": 1,
    }


def test_table_demo_rows_and_action() -> None:
    desc = get_table_demo()
    page = fetch_page(desc, PageRequest(sort_field="age", sort_order="desc"))
    assert [r["name"] for r in page.rows] == ["Jane", "Jack"]
    assert page.total == 2
    result = run_action(desc, "click_me", RequestContext().with_form(id="1"))
    assert result.success and result.message == "Operation succeeded"


def test_store_upload(tmp_path: Path) -> None:
    upload = SimpleNamespace(name="../resume.pdf", getvalue=lambda: b"%PDF")
    stored = store_upload(upload, str(tmp_path / "uploads"))
    assert stored == (tmp_path / "uploads" / "resume.pdf").as_posix()
    assert Path(stored).read_bytes() == b"%PDF"
