"""
Structural validation for table descriptors.

Purpose
- Reject malformed descriptors when they are built, so a broken table never reaches the
  render path in a half-working state.

Checks performed
- Naming: table name, column keys, form field names and action ids are lower_snake.
- Primary key: declared once, present exactly once among the stored columns.
- Uniqueness: column keys, form field names, action ids.
- Columns: joined columns are not editable; virtual columns have a display callback
  and are neither sortable, filterable, editable nor joined.
- Forms: depends_on names another form field and comes with options_fn (and vice
  versa); tab groups reference declared fields at most once.
- Actions: each kind carries what it needs (url, handler, iframe_src, field).
- Data sources: custom sources are callable; relational sources name a table.

Notes
- All failures raise MalformedDescriptor with a message naming the table and the
  offending element.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from .descriptors import (
    ActionSpec,
    ColumnSpec,
    CustomSource,
    DataSource,
    FormFieldSpec,
    RelationalSource,
    TableDescriptor,
)
from .errors import GrammarError, MalformedDescriptor
from .grammar import ActionKind, assert_lower_snake

__all__ = ["validate_descriptor"]


def _duplicates(items: Iterable[str]) -> list[str]:
    return sorted(k for k, n in Counter(items).items() if n > 1)


def _check_names(desc: TableDescriptor) -> None:
    try:
        assert_lower_snake(desc.name, "table name")
        assert_lower_snake(desc.primary_key.name, "primary key")
        for c in desc.columns:
            assert_lower_snake(c.field, f"column field in {desc.name!r}")
        for f in desc.form_fields:
            assert_lower_snake(f.field, f"form field in {desc.name!r}")
        for a in desc.actions:
            assert_lower_snake(a.id, f"action id in {desc.name!r}")
    except GrammarError as exc:
        raise MalformedDescriptor(str(exc)) from exc


def _check_primary_key(desc: TableDescriptor) -> None:
    pk = desc.primary_key.name
    hits = [c for c in desc.columns if c.field == pk and c.stored]
    if len(hits) != 1:
        raise MalformedDescriptor(
            f"table {desc.name!r}: primary key {pk!r} must appear exactly once among its "
            f"stored columns (found {len(hits)})"
        )


def _check_column(desc: TableDescriptor, c: ColumnSpec) -> None:
    if c.join is not None:
        if c.editable:
            raise MalformedDescriptor(
                f"table {desc.name!r}: joined column {c.key!r} cannot be editable"
            )
        for part, what in ((c.join.field, "join field"), (c.join.join_field, "join key"),
                           (c.join.table, "join table")):
            try:
                assert_lower_snake(part, what)
            except GrammarError as exc:
                raise MalformedDescriptor(f"table {desc.name!r}: {exc}") from exc
    if c.virtual:
        if c.display is None:
            raise MalformedDescriptor(
                f"table {desc.name!r}: virtual column {c.field!r} needs a display callback"
            )
        if c.sortable or c.filterable or c.editable or c.joined:
            raise MalformedDescriptor(
                f"table {desc.name!r}: virtual column {c.field!r} cannot be sortable, "
                "filterable, editable or joined"
            )


def _check_form_field(desc: TableDescriptor, f: FormFieldSpec, names: set[str]) -> None:
    if (f.depends_on is None) != (f.options_fn is None):
        raise MalformedDescriptor(
            f"table {desc.name!r}: form field {f.field!r} must set depends_on and "
            "options_fn together"
        )
    if f.depends_on is not None:
        if f.depends_on == f.field or f.depends_on not in names:
            raise MalformedDescriptor(
                f"table {desc.name!r}: form field {f.field!r} depends on unknown field "
                f"{f.depends_on!r}"
            )


def _check_tabs(desc: TableDescriptor, names: set[str]) -> None:
    if not desc.tabs:
        return
    seen: list[str] = [name for tab in desc.tabs for name in tab.fields]
    unknown = sorted(set(seen) - names)
    if unknown:
        raise MalformedDescriptor(f"table {desc.name!r}: tabs reference unknown fields {unknown}")
    dups = _duplicates(seen)
    if dups:
        raise MalformedDescriptor(f"table {desc.name!r}: fields listed in more than one tab {dups}")


def _check_action(desc: TableDescriptor, a: ActionSpec) -> None:
    missing: str | None = None
    if a.kind is ActionKind.JUMP and not a.url:
        missing = "url"
    elif a.kind in (ActionKind.AJAX, ActionKind.POPUP) and a.handler is None:
        missing = "handler"
    elif a.kind is ActionKind.IFRAME and not a.iframe_src:
        missing = "iframe_src"
    elif a.kind is ActionKind.FIELD_FILTER and (not a.field or not a.options):
        missing = "field and options"
    if missing:
        raise MalformedDescriptor(
            f"table {desc.name!r}: {a.kind.value} action {a.id!r} requires {missing}"
        )


def _check_source(desc: TableDescriptor, source: DataSource | None, what: str) -> None:
    if isinstance(source, RelationalSource):
        try:
            assert_lower_snake(source.table, f"{what} table")
        except GrammarError as exc:
            raise MalformedDescriptor(f"table {desc.name!r}: {exc}") from exc
    elif isinstance(source, CustomSource):
        if not callable(source.fetch):
            raise MalformedDescriptor(f"table {desc.name!r}: {what} function is not callable")
    else:
        raise MalformedDescriptor(f"table {desc.name!r}: {what} is not a data source: {source!r}")


def validate_descriptor(desc: TableDescriptor) -> TableDescriptor:
    """
    Validate a descriptor and return it unchanged.

    Args:
        desc (TableDescriptor): Descriptor produced by a builder.

    Returns:
        TableDescriptor: The same descriptor, for chaining.

    Raises:
        MalformedDescriptor: On the first violated rule.
    """
    _check_names(desc)
    _check_primary_key(desc)

    dups = _duplicates(c.key for c in desc.columns)
    if dups:
        raise MalformedDescriptor(f"table {desc.name!r}: duplicate column fields {dups}")
    for c in desc.columns:
        _check_column(desc, c)

    form_names = [f.field for f in desc.form_fields]
    dups = _duplicates(form_names)
    if dups:
        raise MalformedDescriptor(f"table {desc.name!r}: duplicate form fields {dups}")
    names = set(form_names)
    for f in desc.form_fields:
        _check_form_field(desc, f, names)
    _check_tabs(desc, names)

    dups = _duplicates(a.id for a in desc.actions)
    if dups:
        raise MalformedDescriptor(f"table {desc.name!r}: duplicate action ids {dups}")
    for a in desc.actions:
        _check_action(desc, a)

    _check_source(desc, desc.source, "data source")
    if desc.detail_source is not None:
        _check_source(desc, desc.detail_source, "detail source")
    return desc
