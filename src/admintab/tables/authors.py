"""Authors table: name composed from hidden first/last name columns."""

from __future__ import annotations

from admintab.core.builder import TableBuilder
from admintab.core.context import RequestContext
from admintab.core.descriptors import FieldModel, TableDescriptor
from admintab.core.grammar import ActionKind, ActionScope, FieldType, WidgetKind
from admintab.core.values import as_text

__all__ = ["get_authors_table"]


def _full_name(model: FieldModel) -> str:
    return f"{as_text(model.row.get('first_name'))} {as_text(model.row.get('last_name'))}".strip()


def get_authors_table(ctx: RequestContext) -> TableDescriptor:
    b = TableBuilder("authors", title="Authors", description="Authors")
    b.add_column("ID", "id", FieldType.INT, sortable=True)
    b.add_column("First name", "first_name", hidden=True)
    b.add_column("Last name", "last_name", hidden=True)
    b.add_virtual_column("Name", "name", _full_name)
    b.add_column("Email", "email", filter=True)
    b.add_column("Birthdate", "birthdate", FieldType.DATE, sortable=True)
    b.add_column("Added", "added", FieldType.TIMESTAMP)
    b.add_action(
        "posts",
        "Posts",
        ActionKind.IFRAME,
        scope=ActionScope.TABLE,
        url="/authors/list",
        title="Posts",
        iframe_src="/admin/info/posts",
        width="900px",
        height="560px",
        icon="tv",
    )
    b.add_form_field("ID", "id", FieldType.INT, WidgetKind.DEFAULT,
                     allow_add=False, allow_edit=False)
    b.add_form_field("First name", "first_name")
    b.add_form_field("Last name", "last_name")
    b.add_form_field("Email", "email", widget=WidgetKind.EMAIL)
    b.add_form_field("Birthdate", "birthdate", FieldType.DATE, WidgetKind.DATE)
    b.add_form_field("Added", "added", FieldType.TIMESTAMP, WidgetKind.DATETIME)
    return b.set_table("authors").build()
