"""Posts table: author name projected through a join on authors."""

from __future__ import annotations

from admintab.core.builder import TableBuilder
from admintab.core.context import RequestContext
from admintab.core.descriptors import FieldModel, JoinSpec, TableDescriptor
from admintab.core.grammar import DisplayKind, EditType, FieldType, WidgetKind
from admintab.core.values import as_text

__all__ = ["get_posts_table", "AUTHOR_JOIN"]

AUTHOR_JOIN = JoinSpec(field="author_id", join_field="id", table="authors")


def _author_link(model: FieldModel) -> str:
    return f"/admin/info/authors/detail?pk={model.value}"


def _author_name(model: FieldModel) -> str:
    first = as_text(model.row.get(AUTHOR_JOIN.alias("first_name")))
    last = as_text(model.row.get(AUTHOR_JOIN.alias("last_name")))
    return f"{first} {last}".strip()


def get_posts_table(ctx: RequestContext) -> TableDescriptor:
    return (
        TableBuilder("posts", title="Posts", description="Posts")
        .add_column("ID", "id", FieldType.INT, sortable=True)
        .add_column("Title", "title")
        .add_column(
            "Author ID",
            "author_id",
            FieldType.INT,
            display=_author_link,
            display_kind=DisplayKind.LINK,
            display_options={"text_field": "author_id", "new_tab": True},
        )
        .add_virtual_column("Author name", "author_name", _author_name)
        .add_column("First name", "first_name", join=AUTHOR_JOIN, hidden=True)
        .add_column("Last name", "last_name", join=AUTHOR_JOIN, hidden=True)
        .add_column("Description", "description")
        .add_column("Content", "content", edit=EditType.TEXTAREA)
        .add_column("Date", "date")
        .add_form_field("ID", "id", FieldType.INT, WidgetKind.DEFAULT,
                        allow_add=False, allow_edit=False)
        .add_form_field("Title", "title")
        .add_form_field("Description", "description")
        .add_form_field("Content", "content", FieldType.TEXT, WidgetKind.RICHTEXT,
                        file_upload=True)
        .add_form_field("Date", "date", widget=WidgetKind.DATETIME)
        .set_table("posts")
        .build()
    )
