from __future__ import annotations

import pytest

from admintab.core.builder import TableBuilder, options
from admintab.core.descriptors import ActionResult, FieldModel, JoinSpec
from admintab.core.errors import BuilderLocked, MalformedDescriptor
from admintab.core.grammar import (
    ActionKind,
    ActionScope,
    EditType,
    FieldType,
    FilterOperator,
    FormMode,
    WidgetKind,
)

AUTHOR = JoinSpec(field="author_id", join_field="id", table="authors")


def _base(name: str = "posts") -> TableBuilder:
    return TableBuilder(name).add_column("ID", "id", FieldType.INT, sortable=True)


def _upper(model: FieldModel) -> str:
    return model.value.upper()


def test_minimal_descriptor_builds() -> None:
    desc = (
        _base()
        .add_column("Title", "title", filter="like")
        .add_column("Author", "first_name", join=AUTHOR)
        .add_virtual_column("Shout", "shout", _upper)
        .add_form_field("Title", "title")
        .set_table("posts")
        .build()
    )
    assert [c.key for c in desc.columns] == ["id", "title", "authors_joined_first_name", "shout"]
    assert desc.column("title").filter is not None
    assert desc.column("title").filter.operator is FilterOperator.LIKE
    assert desc.sortable_keys == ("id",)
    assert desc.config.can_add and desc.config.editable and desc.config.deletable


def test_primary_key_must_appear_exactly_once() -> None:
    with pytest.raises(MalformedDescriptor):
        TableBuilder("posts").add_column("Title", "title").set_table("posts").build()
    with pytest.raises(MalformedDescriptor):
        _base().add_column("ID again", "id").set_table("posts").build()


def test_custom_primary_key_name() -> None:
    desc = (
        TableBuilder("tags", primary_key="slug", pk_type=FieldType.VARCHAR)
        .add_column("Slug", "slug")
        .set_table("tags")
        .build()
    )
    assert desc.pk_of({"slug": "go"}) == "go"


def test_duplicate_columns_and_form_fields_are_rejected() -> None:
    with pytest.raises(MalformedDescriptor):
        _base().add_column("A", "title").add_column("B", "title").set_table("posts").build()
    with pytest.raises(MalformedDescriptor):
        (
            _base()
            .add_form_field("A", "title")
            .add_form_field("B", "title")
            .set_table("posts")
            .build()
        )


def test_joined_columns_are_read_only() -> None:
    with pytest.raises(MalformedDescriptor):
        (
            _base()
            .add_column("Author", "first_name", join=AUTHOR, edit=EditType.TEXT)
            .set_table("posts")
            .build()
        )


def test_virtual_column_rules() -> None:
    with pytest.raises(MalformedDescriptor):
        _base().add_column("X", "x", virtual=True).set_table("posts").build()
    with pytest.raises(MalformedDescriptor):
        (
            _base()
            .add_column("X", "x", virtual=True, display=_upper, sortable=True)
            .set_table("posts")
            .build()
        )


def test_names_must_be_lower_snake() -> None:
    with pytest.raises(MalformedDescriptor):
        _base().add_column("Title", "Title").set_table("posts").build()
    with pytest.raises(MalformedDescriptor):
        _base().set_table("Posts").build()


def test_actions_need_their_parameters() -> None:
    with pytest.raises(MalformedDescriptor):
        _base().add_action("go", "Go", ActionKind.JUMP).set_table("posts").build()
    with pytest.raises(MalformedDescriptor):
        _base().add_action("ping", "Ping", ActionKind.AJAX).set_table("posts").build()
    with pytest.raises(MalformedDescriptor):
        _base().add_action("embed", "Embed", ActionKind.IFRAME).set_table("posts").build()
    with pytest.raises(MalformedDescriptor):
        (
            _base()
            .add_action("by_state", "State", ActionKind.FIELD_FILTER, field="state")
            .set_table("posts")
            .build()
        )


def test_action_ids_are_unique_and_scoped() -> None:
    def ok(ctx) -> ActionResult:
        return ActionResult(True)

    with pytest.raises(MalformedDescriptor):
        (
            _base()
            .add_action("ping", "Ping", ActionKind.AJAX, handler=ok)
            .add_action("ping", "Ping", ActionKind.POPUP, handler=ok)
            .set_table("posts")
            .build()
        )
    desc = (
        _base()
        .add_action("ping", "Ping", ActionKind.AJAX, handler=ok)
        .add_action("home", "Home", ActionKind.JUMP, scope=ActionScope.TABLE, url="/admin")
        .set_table("posts")
        .build()
    )
    assert [a.id for a in desc.actions_in(ActionScope.ROW)] == ["ping"]
    assert [a.id for a in desc.actions_in(ActionScope.TABLE)] == ["home"]


def test_depends_on_requires_options_fn_and_known_field() -> None:
    with pytest.raises(MalformedDescriptor):
        (
            _base()
            .add_form_field("City", "city", depends_on="country")
            .set_table("posts")
            .build()
        )
    with pytest.raises(MalformedDescriptor):
        (
            _base()
            .add_form_field("City", "city", depends_on="country", options_fn=lambda v: ())
            .set_table("posts")
            .build()
        )


def test_tabs_validation() -> None:
    with pytest.raises(MalformedDescriptor):
        _base().set_tabs(("One", "Two"), ("title",))
    with pytest.raises(MalformedDescriptor):
        (
            _base()
            .add_form_field("Title", "title")
            .set_tabs(("One",), ("title", "missing"))
            .set_table("posts")
            .build()
        )
    with pytest.raises(MalformedDescriptor):
        (
            _base()
            .add_form_field("Title", "title")
            .set_tabs(("One", "Two"), ("title",), ("title",))
            .set_table("posts")
            .build()
        )


def test_source_is_required() -> None:
    with pytest.raises(MalformedDescriptor):
        _base().build()


def test_unknown_config_flag_is_rejected() -> None:
    with pytest.raises(MalformedDescriptor):
        _base().configure(sortable_everything=True)


def test_builder_is_single_use() -> None:
    b = _base().set_table("posts")
    b.build()
    with pytest.raises(BuilderLocked):
        b.build()
    with pytest.raises(BuilderLocked):
        b.add_column("Title", "title")


def test_form_field_visibility_by_mode() -> None:
    desc = (
        _base()
        .add_form_field("ID", "id", FieldType.INT, WidgetKind.DEFAULT,
                        allow_add=False, allow_edit=False)
        .add_form_field("Title", "title")
        .add_form_field("Created", "created_at", allow_add=False)
        .add_form_field("Secret", "secret", hidden=True)
        .set_table("posts")
        .build()
    )
    assert [f.field for f in desc.form_fields_for(FormMode.ADD)] == ["title"]
    assert [f.field for f in desc.form_fields_for(FormMode.EDIT)] == ["title", "created_at"]


def test_options_helper_normalizes_items() -> None:
    opts = options(("0", "male"), "other", selected=["other"])
    assert [(o.value, o.label, o.selected) for o in opts] == [
        ("0", "male", False),
        ("other", "other", True),
    ]
