from __future__ import annotations

import pytest

from admintab.core.context import RequestContext
from admintab.core.errors import UnknownDescriptor
from admintab.core.grammar import ActionKind, ActionScope, FormMode
from admintab.tables import GENERATORS, build_registry
from admintab.tables.users import cities_for

ADMIN = RequestContext(user="admin", roles=frozenset({"administrator"}))
CONTEXTS = [ADMIN, RequestContext()]


def test_registry_contains_every_generator() -> None:
    registry = build_registry()
    assert registry.frozen
    assert registry.names() == list(GENERATORS)
    with pytest.raises(UnknownDescriptor):
        registry.resolve("orders", ADMIN)


@pytest.mark.parametrize("ctx", CONTEXTS)
def test_descriptors_contract(ctx: RequestContext) -> None:
    registry = build_registry()
    for name in GENERATORS:
        desc = registry.resolve(name, ctx)
        assert desc.name == name
        pk = desc.primary_key.name
        assert sum(1 for c in desc.columns if c.field == pk and c.stored) == 1
        keys = [c.key for c in desc.columns]
        assert len(keys) == len(set(keys)), f"duplicate column keys in {name}"
        fields = [f.field for f in desc.form_fields]
        assert len(fields) == len(set(fields)), f"duplicate form fields in {name}"
        assert not any(c.joined and c.editable for c in desc.columns)


def test_users_capabilities_follow_roles() -> None:
    registry = build_registry()
    assert registry.resolve("users", ADMIN).config.deletable
    assert not registry.resolve("users", RequestContext()).config.deletable
    assert registry.resolve("users", ADMIN).config.exportable


def test_users_actions_and_tabs() -> None:
    users = build_registry().resolve("users", ADMIN)
    table_kinds = {a.kind for a in users.actions_in(ActionScope.TABLE)}
    assert table_kinds == {
        ActionKind.JUMP,
        ActionKind.POPUP,
        ActionKind.IFRAME,
        ActionKind.AJAX,
        ActionKind.FIELD_FILTER,
    }
    assert [t.header for t in users.tabs] == ["Profile 1", "Profile 2"]
    assert users.form_field("city").depends_on == "country"
    assert "role" in [f.field for f in users.form_fields_for(FormMode.ADD)]


def test_cities_for_country() -> None:
    assert [o.value for o in cities_for("3")] == ["vancouver", "toronto"]
    assert cities_for("unknown") == cities_for("0")


def test_external_table_is_read_only() -> None:
    external = build_registry().resolve("external", ADMIN)
    assert not external.config.can_add
    assert not external.config.editable
    assert not external.config.deletable
    assert external.detail_source is not None


def test_posts_author_columns() -> None:
    posts = build_registry().resolve("posts", ADMIN)
    assert posts.column("authors_joined_first_name").hidden
    assert posts.column("author_name").virtual
