"""
Users table: inline edits, select-box filters, dynamic city options, tabbed form.

Shows most descriptor features in one place:
- a switch-editable gender column with display mapping and a select filter,
- a virtual "personality" column and a "more" popup on every row,
- jump/ajax/popup/iframe table buttons and a gender field filter,
- a country field whose value drives the city options,
- a custom field whose post filter keeps it out of the write,
- two form tabs and a post hook.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from admintab.core.builder import TableBuilder, options
from admintab.core.context import RequestContext
from admintab.core.descriptors import (
    ActionResult,
    FieldModel,
    FieldOption,
    FilterSpec,
    PostedField,
    TableDescriptor,
)
from admintab.core.forms import SKIP
from admintab.core.grammar import (
    ActionKind,
    ActionScope,
    DisplayKind,
    EditType,
    FieldType,
    FilterOperator,
    WidgetKind,
)
from admintab.core.typing import Scalar

__all__ = ["get_users_table", "cities_for", "GENDERS", "COUNTRIES"]

logger = logging.getLogger(__name__)

GENDERS = options(("0", "male"), ("1", "female"))
COUNTRIES = options(("0", "China"), ("1", "United States"), ("2", "United Kingdom"), ("3", "Canada"))

_CITIES: dict[str, tuple[FieldOption, ...]] = {
    "0": options(
        ("beijing", "Beijing"), ("shangHai", "Shanghai"),
        ("guangZhou", "Guangzhou"), ("shenZhen", "Shenzhen"),
    ),
    "1": options(
        ("los angeles", "Los Angeles"), ("washington, dc", "Washington, D.C."),
        ("new york", "New York"), ("las vegas", "Las Vegas"),
    ),
    "2": options(
        ("london", "London"), ("cambridge", "Cambridge"),
        ("manchester", "Manchester"), ("liverpool", "Liverpool"),
    ),
    "3": options(("vancouver", "Vancouver"), ("toronto", "Toronto")),
}

AVATAR_URL = "https://quick.go-admin.cn/demo/assets/dist/img/gopher_avatar.png"


def cities_for(country: str) -> tuple[FieldOption, ...]:
    """City choices for a country code; unknown codes fall back to China."""
    return _CITIES.get(country, _CITIES["0"])


def _gender(model: FieldModel) -> str:
    return {"0": "male", "1": "female"}.get(model.value, "unknown")


def _ok(message: str = "ok", data: str = "") -> ActionResult:
    return ActionResult(success=True, message=message, data=data)


def _see_more(ctx: RequestContext) -> ActionResult:
    return _ok(data="<h1>Detail</h1><p>More about this user.</p>")


def _audit(ctx: RequestContext) -> ActionResult:
    return _ok("audited")


def _hello(ctx: RequestContext) -> ActionResult:
    return _ok("", "<h2>hello world</h2>")


def _drop_custom_field(posted: PostedField) -> object:
    logger.debug("custom field %s=%r not persisted", posted.field, posted.value)
    return SKIP


def _post_hook(values: Mapping[str, Scalar]) -> None:
    logger.info("users form saved: %s", dict(values))


def get_users_table(ctx: RequestContext) -> TableDescriptor:
    b = TableBuilder("users", title="Users", description="Users").configure(
        exportable=True, deletable=ctx.has_role("administrator")
    )

    b.add_column("ID", "id", FieldType.INT, sortable=True)
    b.add_column(
        "Name", "name", edit=EditType.TEXT, filter=FilterOperator.LIKE
    )
    b.add_column(
        "Gender",
        "gender",
        FieldType.TINYINT,
        display=_gender,
        edit=EditType.SWITCH,
        edit_options=[("0", "male"), ("1", "female")],
        filter=FilterSpec(widget=WidgetKind.SELECT_SINGLE, options=GENDERS),
    )
    b.add_virtual_column("Personality", "personality", lambda m: "handsome")
    b.add_column("Phone", "phone", filter=True)
    b.add_column("City", "city", filter=True)
    b.add_column(
        "Avatar",
        "avatar",
        display=lambda m: m.value or AVATAR_URL,
        display_kind=DisplayKind.IMAGE,
        display_options={"width": 120, "height": 120},
    )
    b.add_column(
        "Created at",
        "created_at",
        FieldType.TIMESTAMP,
        filter=FilterSpec(operator=FilterOperator.GTE, widget=WidgetKind.DATETIME_RANGE),
    )
    b.add_column("Updated at", "updated_at", FieldType.TIMESTAMP, edit=EditType.DATETIME)

    b.add_action("more", "See more", ActionKind.POPUP, url="/see/more/example",
                 title="Detail", handler=_see_more, icon="info")
    b.add_action("google", "Google", ActionKind.JUMP, url="https://google.com")
    b.add_action("audit", "Audit", ActionKind.AJAX, url="/admin/audit", handler=_audit)
    b.add_action("preview", "Preview", ActionKind.POPUP, url="/admin/preview",
                 title="Preview", handler=_hello)
    b.add_action("google_link", "Google", ActionKind.JUMP, scope=ActionScope.TABLE,
                 url="https://google.com", icon="google")
    b.add_action("popup", "Popup", ActionKind.POPUP, scope=ActionScope.TABLE,
                 url="/admin/popup", title="Popup example", handler=_hello, icon="terminal")
    b.add_action("iframe", "iframe", ActionKind.IFRAME, scope=ActionScope.TABLE,
                 url="/admin/iframe", title="Iframe example",
                 iframe_src="/admin/info/profile/new", width="900px", height="480px", icon="tv")
    b.add_action("ajax", "ajax", ActionKind.AJAX, scope=ActionScope.TABLE,
                 url="/admin/ajax", handler=_audit, icon="android")
    b.add_action("gender_filter", "Gender", ActionKind.FIELD_FILTER, scope=ActionScope.TABLE,
                 field="gender", options=GENDERS)

    b.add_form_field("ID", "id", FieldType.INT, WidgetKind.DEFAULT,
                     allow_add=False, allow_edit=False)
    b.add_form_field("IP", "ip", widget=WidgetKind.IP)
    b.add_form_field("Name", "name")
    b.add_form_field("Gender", "gender", FieldType.TINYINT, WidgetKind.RADIO,
                     options=GENDERS, default="0")
    b.add_form_field("Phone", "phone")
    b.add_form_field("Country", "country", FieldType.TINYINT, WidgetKind.SELECT_SINGLE,
                     options=COUNTRIES, default="0")
    b.add_form_field("City", "city", widget=WidgetKind.SELECT_SINGLE,
                     depends_on="country", options_fn=cities_for)
    b.add_form_field("Custom field", "role", post_filter=_drop_custom_field)
    b.add_form_field("Updated at", "updated_at", FieldType.TIMESTAMP, WidgetKind.DEFAULT,
                     allow_add=False)
    b.add_form_field("Created at", "created_at", FieldType.TIMESTAMP, WidgetKind.DEFAULT,
                     allow_add=False)
    b.set_tabs(
        ("Profile 1", "Profile 2"),
        ("id", "ip", "name", "gender", "country", "city"),
        ("phone", "role", "created_at", "updated_at"),
    )
    b.set_post_hook(_post_hook)

    return b.set_table("users").build()
