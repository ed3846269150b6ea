from __future__ import annotations

from dataclasses import replace

import pytest

from admintab.core.builder import TableBuilder
from admintab.core.context import RequestContext
from admintab.core.descriptors import ColumnSpec, TableDescriptor
from admintab.core.errors import (
    DuplicateRegistration,
    GrammarError,
    MalformedDescriptor,
    RegistryFrozen,
    UnknownDescriptor,
)
from admintab.core.registry import TableRegistry


def _notes(ctx: RequestContext) -> TableDescriptor:
    return TableBuilder("notes").add_column("ID", "id").set_table("notes").build()


def test_register_and_resolve() -> None:
    reg = TableRegistry()
    reg.register("notes", _notes)
    reg.freeze()
    assert reg.frozen
    assert "notes" in reg and len(reg) == 1
    assert reg.names() == ["notes"]
    assert reg.resolve("notes", RequestContext()).name == "notes"


def test_duplicate_registration_fails_fast() -> None:
    reg = TableRegistry()
    reg.register("notes", _notes)
    with pytest.raises(DuplicateRegistration):
        reg.register("notes", _notes)


def test_register_after_freeze_is_rejected() -> None:
    reg = TableRegistry()
    reg.freeze()
    with pytest.raises(RegistryFrozen):
        reg.register("notes", _notes)


def test_names_must_be_lower_snake() -> None:
    reg = TableRegistry()
    with pytest.raises(GrammarError):
        reg.register("Notes", _notes)


def test_unknown_name_fails_closed() -> None:
    reg = TableRegistry()
    reg.register("notes", _notes)
    reg.freeze()
    with pytest.raises(UnknownDescriptor):
        reg.resolve("missing", RequestContext())


def test_builder_runs_per_request_unless_cached() -> None:
    calls = {"plain": 0, "cached": 0}

    def plain(ctx: RequestContext) -> TableDescriptor:
        calls["plain"] += 1
        return TableBuilder("plain").add_column("ID", "id").set_table("plain").build()

    def cached(ctx: RequestContext) -> TableDescriptor:
        calls["cached"] += 1
        return TableBuilder("cached").add_column("ID", "id").set_table("cached").build()

    reg = TableRegistry()
    reg.register("plain", plain)
    reg.register("cached", cached, cache=True)
    reg.freeze()
    ctx = RequestContext()
    for _ in range(3):
        reg.resolve("plain", ctx)
        reg.resolve("cached", ctx)
    assert calls == {"plain": 3, "cached": 1}
    assert reg.resolve("cached", ctx) is reg.resolve("cached", ctx)


def test_builder_varies_descriptor_on_context() -> None:
    def builder(ctx: RequestContext) -> TableDescriptor:
        return (
            TableBuilder("notes")
            .configure(deletable=ctx.has_role("administrator"))
            .add_column("ID", "id")
            .set_table("notes")
            .build()
        )

    reg = TableRegistry()
    reg.register("notes", builder)
    reg.freeze()
    admin = RequestContext(user="admin", roles=frozenset({"administrator"}))
    assert reg.resolve("notes", admin).config.deletable
    assert not reg.resolve("notes", RequestContext()).config.deletable


def test_descriptor_name_must_match_registration() -> None:
    reg = TableRegistry()
    reg.register("other", _notes)
    reg.freeze()
    with pytest.raises(MalformedDescriptor):
        reg.resolve("other", RequestContext())


def test_freeze_probe_surfaces_malformed_builders() -> None:
    def broken(ctx: RequestContext) -> TableDescriptor:
        return TableBuilder("broken").add_column("Title", "title").set_table("broken").build()

    reg = TableRegistry()
    reg.register("broken", broken)
    with pytest.raises(MalformedDescriptor):
        reg.freeze(probe=RequestContext())
    assert not reg.frozen


def test_registry_validates_descriptors_built_by_hand() -> None:
    def duplicated(ctx: RequestContext) -> TableDescriptor:
        desc = _notes(ctx)
        return replace(
            desc,
            name="duplicated",
            columns=(*desc.columns, ColumnSpec("A", "title"), ColumnSpec("B", "title")),
        )

    reg = TableRegistry()
    reg.register("duplicated", duplicated)
    with pytest.raises(MalformedDescriptor):
        reg.freeze(probe=RequestContext())
    assert not reg.frozen

    reg.freeze()
    with pytest.raises(MalformedDescriptor):
        reg.resolve("duplicated", RequestContext())
