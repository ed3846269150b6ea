from __future__ import annotations

import pytest

from admintab.core.builder import TableBuilder, options
from admintab.core.descriptors import PostedField, TableDescriptor
from admintab.core.errors import InvalidSubmission
from admintab.core.forms import (
    SKIP,
    form_defaults,
    is_skipped,
    prepare_submission,
    resolve_options,
    tab_layout,
)
from admintab.core.grammar import FieldType, FormMode, WidgetKind

CITIES = {"0": options("beijing", "shanghai"), "1": options("new york")}


def _cities(country: str):
    return CITIES.get(country, ())


def _upper(posted: PostedField) -> object:
    return str(posted.value).upper()


def _desc() -> TableDescriptor:
    return (
        TableBuilder("users")
        .add_column("ID", "id", FieldType.INT)
        .add_form_field("ID", "id", FieldType.INT, WidgetKind.DEFAULT,
                        allow_add=False, allow_edit=False)
        .add_form_field("Name", "name", post_filter=_upper)
        .add_form_field("Age", "age", FieldType.INT, default=18)
        .add_form_field("Score", "score", FieldType.FLOAT)
        .add_form_field("Tags", "tags", widget=WidgetKind.SELECT, options=["a", "b"])
        .add_form_field("Country", "country", FieldType.TINYINT, WidgetKind.SELECT_SINGLE,
                        default="0")
        .add_form_field("City", "city", widget=WidgetKind.SELECT_SINGLE,
                        depends_on="country", options_fn=_cities)
        .add_form_field("Role", "role", post_filter=lambda p: SKIP)
        .add_form_field("Note", "note", post_filter=lambda p: "")
        .add_form_field("Token", "token", hidden=True)
        .add_form_field("Updated", "updated_at", allow_add=False)
        .set_tabs(("Main", "Extra"), ("name", "age"), ("country", "city"))
        .set_table("users")
        .build()
    )


def test_submission_coerces_and_applies_post_filters() -> None:
    out = prepare_submission(
        _desc(),
        {
            "name": "jack",
            "age": "21",
            "score": "",
            "tags": ["a", "b"],
            "role": "admin",
            "note": "x",
            "token": "injected",
            "updated_at": "2020-01-01",
        },
        FormMode.ADD,
    )
    assert out == {"name": "JACK", "age": 21, "score": None, "tags": "a,b"}


def test_edit_mode_writes_edit_only_fields() -> None:
    out = prepare_submission(_desc(), {"updated_at": "2020-01-01"}, FormMode.EDIT)
    assert out["updated_at"] == "2020-01-01"


def test_post_filter_sees_coerced_values_and_mode() -> None:
    seen: list[PostedField] = []

    def keep_if_adult(posted: PostedField) -> object:
        seen.append(posted)
        return posted.value if posted.values["age"] >= 18 else SKIP

    desc = (
        TableBuilder("people")
        .add_column("ID", "id")
        .add_form_field("Age", "age", FieldType.INT)
        .add_form_field("Nick", "nick", post_filter=keep_if_adult)
        .set_table("people")
        .build()
    )
    assert prepare_submission(desc, {"age": "30", "nick": "jo"}, FormMode.EDIT) == {
        "age": 30,
        "nick": "jo",
    }
    assert prepare_submission(desc, {"age": "9", "nick": "jo"}, FormMode.ADD) == {"age": 9}
    assert [p.mode for p in seen] == [FormMode.EDIT, FormMode.ADD]


def test_invalid_number_raises() -> None:
    with pytest.raises(InvalidSubmission):
        prepare_submission(_desc(), {"age": "old"}, FormMode.ADD)


def test_is_skipped() -> None:
    assert is_skipped(None) and is_skipped("") and is_skipped(SKIP)
    assert not is_skipped(0) and not is_skipped("0")
    assert not SKIP


def test_defaults_per_mode() -> None:
    desc = _desc()
    add = form_defaults(desc, FormMode.ADD)
    assert add["age"] == 18 and add["country"] == "0"
    assert "updated_at" not in add and "token" not in add
    edit = form_defaults(desc, FormMode.EDIT, {"age": 40, "updated_at": "2020"})
    assert edit["age"] == 40 and edit["updated_at"] == "2020"
    assert edit["country"] == "0"


def test_dynamic_options_follow_the_parent_field() -> None:
    city = _desc().form_field("city")
    assert [o.value for o in resolve_options(city, {"country": "1"})] == ["new york"]
    assert [o.value for o in resolve_options(city, {"country": 0})] == ["beijing", "shanghai"]
    assert resolve_options(city, {}) == ()
    tags = _desc().form_field("tags")
    assert [o.value for o in resolve_options(tags)] == ["a", "b"]


def test_tab_layout_groups_and_trailing_fields() -> None:
    groups = tab_layout(_desc(), FormMode.ADD)
    assert [h for h, _ in groups] == ["Main", "Extra", ""]
    assert [f.field for f in groups[0][1]] == ["name", "age"]
    assert [f.field for f in groups[2][1]] == ["score", "tags", "role", "note"]


def test_tab_layout_without_tabs() -> None:
    desc = (
        TableBuilder("notes")
        .add_column("ID", "id")
        .add_form_field("Body", "body")
        .set_table("notes")
        .build()
    )
    assert [(h, [f.field for f in fs]) for h, fs in tab_layout(desc, FormMode.ADD)] == [
        ("", ["body"])
    ]
