"""
Add/edit forms for registered tables and the standalone form demo page.

Widgets are chosen from each field's WidgetKind. Plain widgets are used instead of
``st.form`` so a dependent field (e.g., city after country) re-resolves its options
as soon as the field it depends on changes.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import streamlit as st

from admintab.core.builder import TableBuilder, options
from admintab.core.context import RequestContext
from admintab.core.descriptors import FieldOption, FormFieldSpec, RelationalSource, TableDescriptor
from admintab.core.errors import InvalidSubmission
from admintab.core.forms import form_defaults, prepare_submission, resolve_options, tab_layout
from admintab.core.grammar import FieldType, FormMode, WidgetKind
from admintab.core.typing import Scalar
from admintab.core.values import as_text
from admintab.io import AdminSettings, fetch_detail, save_form
from admintab.io.errors import IoQueryError

from .helpers import option_labels, selected_values
from .nav import flash, go
from .router import Route, View

__all__ = ["render_fields", "render_form", "get_form_demo", "render_form_demo"]

logger = logging.getLogger(__name__)

_SINGLE_CHOICE = (WidgetKind.SELECT_SINGLE, WidgetKind.RADIO)
_MULTI_CHOICE = (WidgetKind.SELECT, WidgetKind.SELECT_BOX)
_CHECKBOXES = (WidgetKind.CHECKBOX, WidgetKind.CHECKBOX_STACKED)
_LONG_TEXT = (WidgetKind.TEXTAREA, WidgetKind.RICHTEXT, WidgetKind.CODE)
_UPLOADS = (WidgetKind.FILE, WidgetKind.MULTIFILE)

_PLACEHOLDERS = {
    WidgetKind.EMAIL: "name@example.com",
    WidgetKind.URL: "https://",
    WidgetKind.IP: "127.0.0.1",
    WidgetKind.DATE: "YYYY-MM-DD",
    WidgetKind.DATETIME: "YYYY-MM-DD HH:MM:SS",
    WidgetKind.DATE_RANGE: "YYYY-MM-DD,YYYY-MM-DD",
    WidgetKind.DATETIME_RANGE: "YYYY-MM-DD HH:MM:SS,YYYY-MM-DD HH:MM:SS",
}


def _int(text: str, fallback: int = 0) -> int:
    try:
        return int(float(text))
    except ValueError:
        return fallback


def store_upload(upload: Any, upload_dir: str) -> str:
    """Write an uploaded file under upload_dir and return its stored path."""
    dest_dir = Path(upload_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest = dest_dir / Path(upload.name).name
    dest.write_bytes(upload.getvalue())
    logger.info("stored upload %s (%d bytes)", dest, dest.stat().st_size)
    return dest.as_posix()


def _choice_widget(
    spec: FormFieldSpec, text: str, choices: Sequence[FieldOption], key: str
) -> Any:
    labels = option_labels(choices)
    values = list(labels)
    help_ = spec.help or None

    def fmt(v: str) -> str:
        return labels.get(v, v)

    if spec.widget in _SINGLE_CHOICE:
        idx = values.index(text) if text in values else 0
        if spec.widget is WidgetKind.RADIO:
            return st.radio(spec.label, values, index=idx, format_func=fmt, key=key,
                            help=help_, horizontal=True)
        return st.selectbox(spec.label, values, index=idx, format_func=fmt, key=key, help=help_)
    current = [v for v in text.split(",") if v in labels] or selected_values(choices)
    if spec.widget in _MULTI_CHOICE:
        return st.multiselect(spec.label, values, default=current, format_func=fmt, key=key,
                              help=help_)
    st.caption(spec.label)
    horizontal = spec.widget is WidgetKind.CHECKBOX
    slots = st.columns(len(values)) if horizontal else [st.container() for _ in values]
    return [
        v
        for slot, v in zip(slots, values)
        if slot.checkbox(labels[v], value=v in current, key=f"{key}:{v}")
    ]


def _field_widget(spec: FormFieldSpec, value: Scalar, choices: Sequence[FieldOption], key: str) -> Any:
    text = as_text(value)
    w = spec.widget
    help_ = spec.help or None
    if choices and (w in _SINGLE_CHOICE or w in _MULTI_CHOICE or w in _CHECKBOXES):
        return _choice_widget(spec, text, choices, key)
    if w is WidgetKind.SWITCH:
        off, on = (choices[0].value, choices[-1].value) if len(choices) >= 2 else ("0", "1")
        return on if st.toggle(spec.label, value=text == on, key=key, help=help_) else off
    if w is WidgetKind.RATE:
        return st.slider(spec.label, 0, 5, min(max(_int(text), 0), 5), key=key, help=help_)
    if w is WidgetKind.SLIDER:
        return st.slider(spec.label, 0, 1000, min(max(_int(text), 0), 1000), key=key, help=help_)
    if w in _LONG_TEXT:
        return st.text_area(spec.label, value=text, key=key, help=help_,
                            height=240 if w is WidgetKind.RICHTEXT else None)
    if w is WidgetKind.ARRAY:
        raw = st.text_area(f"{spec.label} (one per line)", value="\n".join(text.split(",")) if text else "",
                           key=key, help=help_)
        return [line.strip() for line in raw.splitlines() if line.strip()]
    if w is WidgetKind.PASSWORD:
        return st.text_input(spec.label, value=text, type="password", key=key, help=help_)
    return st.text_input(spec.label, value=text, placeholder=_PLACEHOLDERS.get(w, ""), key=key,
                         help=help_)


def render_fields(
    desc: TableDescriptor,
    mode: FormMode,
    initial: Mapping[str, Scalar],
    *,
    key_prefix: str,
    upload_dir: str = "uploads",
) -> dict[str, Any]:
    """Render the form fields shown in `mode` and return the posted values.

    Args:
        desc (TableDescriptor): Descriptor whose form is rendered.
        mode (FormMode): add or edit.
        initial (Mapping[str, Scalar]): Starting values (see form_defaults).
        key_prefix (str): Prefix for widget keys; distinct per table/mode/row.
        upload_dir (str): Directory receiving uploaded files.

    Returns:
        dict[str, Any]: field -> posted value. Read-only fields and file fields with
        no new upload are left out.
    """
    posted: dict[str, Any] = {}
    groups = tab_layout(desc, mode)
    if len(groups) == 1 and not groups[0][0]:
        slots = [st.container()]
    else:
        slots = st.tabs([header or "Other" for header, _ in groups])
    for slot, (_, fields) in zip(slots, groups):
        with slot:
            for spec in fields:
                key = f"{key_prefix}:{spec.field}"
                value = initial.get(spec.field)
                if spec.widget is WidgetKind.DEFAULT:
                    st.text_input(spec.label, value=as_text(value), disabled=True, key=key)
                elif spec.widget in _UPLOADS:
                    multi = spec.widget is WidgetKind.MULTIFILE
                    if value:
                        st.caption(f"{spec.label}: {as_text(value)}")
                    uploads = st.file_uploader(spec.label, accept_multiple_files=multi, key=key,
                                               help=spec.help or None)
                    files = [u for u in (uploads if multi else [uploads]) if u is not None]
                    if files:
                        posted[spec.field] = [store_upload(u, upload_dir) for u in files]
                else:
                    choices = resolve_options(spec, {**initial, **posted})
                    posted[spec.field] = _field_widget(spec, value, choices, key)
                if spec.divider:
                    st.divider()
                    st.markdown(f"**{spec.divider}**")
    return posted


def render_form(
    desc: TableDescriptor,
    route: Route,
    ctx: RequestContext,
    settings: AdminSettings,
    conn: sqlite3.Connection,
) -> None:
    """Add (view=new) or edit (view=edit) form of a relational table."""
    mode = FormMode.EDIT if route.view is View.EDIT else FormMode.ADD
    st.subheader(f"{desc.title or desc.name} · {'edit' if mode is FormMode.EDIT else 'new'}")
    if not isinstance(desc.source, RelationalSource):
        st.warning(f"{desc.title or desc.name} is read-only.")
        return
    if (mode is FormMode.ADD and not desc.config.can_add) or (
        mode is FormMode.EDIT and not desc.config.editable
    ):
        st.warning(f"{desc.title or desc.name} does not allow this operation.")
        return

    row = None
    if mode is FormMode.EDIT:
        row = fetch_detail(desc, route.pk, conn=conn)
        if row is None:
            st.warning(f"No row with {desc.primary_key.name} = {route.pk}")
            return

    posted = render_fields(
        desc,
        mode,
        form_defaults(desc, mode, row),
        key_prefix=f"form:{desc.name}:{mode.value}:{route.pk}",
        upload_dir=settings.upload_dir,
    )
    save, cancel = st.columns(2)
    if cancel.button("Cancel", key=f"cancel:{desc.name}"):
        go(Route(view=View.INFO, table=desc.name))
    if save.button("Save", type="primary", key=f"save:{desc.name}"):
        try:
            pk = save_form(desc, posted, mode, conn, pk=route.pk or None)
        except (InvalidSubmission, IoQueryError, PermissionError) as exc:
            st.error(str(exc))
            return
        logger.info("%s saved %s row %s", ctx.user, desc.name, pk)
        flash(f"Saved {desc.title or desc.name} #{pk}")
        go(Route(view=View.INFO, table=desc.name))


# ----------------------------
# Standalone form demo
# ----------------------------

_PROVINCES = options(("0", "Beijing"), ("1", "Shanghai"), ("2", "Guangdong"), ("3", "Chongqing"))

_PROVINCE_CITIES: dict[str, tuple[FieldOption, ...]] = {
    "0": options(("beijing", "Beijing")),
    "1": options(("shanghai", "Shanghai")),
    "2": options(("guangzhou", "Guangzhou"), ("shenzhen", "Shenzhen"), ("dongguan", "Dongguan")),
    "3": options(("chongqing", "Chongqing")),
}

_CODE_SAMPLE = 'package main\n\nimport "fmt"\n\nfunc main() {\n\tfmt.Println("hello GoAdmin!")\n}\n'


def _cities(province: str) -> tuple[FieldOption, ...]:
    return _PROVINCE_CITIES.get(province, _PROVINCE_CITIES["0"])


def get_form_demo() -> TableDescriptor:
    """Descriptor of the standalone form page: one field per widget kind."""
    b = TableBuilder("form_demo", title="Form", description="Form example")
    b.add_column("ID", "id", FieldType.INT)
    b.add_form_field("Name", "name")
    b.add_form_field("Age", "age", FieldType.INT, WidgetKind.NUMBER)
    b.add_form_field("Homepage", "homepage", widget=WidgetKind.URL, default="http://google.com")
    b.add_form_field("Email", "email", widget=WidgetKind.EMAIL, default="xxxx@xxx.com")
    b.add_form_field("Birthday", "birthday", widget=WidgetKind.DATE, default="2010-09-03")
    b.add_form_field("Time", "time", widget=WidgetKind.DATETIME, default="2010-09-05 18:09:05")
    b.add_form_field("Time range", "time_range", widget=WidgetKind.DATETIME_RANGE)
    b.add_form_field("Date range", "date_range", widget=WidgetKind.DATE_RANGE)
    b.add_form_field("Password", "password", widget=WidgetKind.PASSWORD, divider="Divider")
    b.add_form_field("IP", "ip", widget=WidgetKind.IP)
    b.add_form_field("Certificate", "certificate", widget=WidgetKind.MULTIFILE)
    b.add_form_field("Amount", "currency", FieldType.INT, WidgetKind.CURRENCY)
    b.add_form_field("Rate", "rate", FieldType.INT, WidgetKind.RATE)
    b.add_form_field("Reward", "reward", FieldType.INT, WidgetKind.SLIDER)
    b.add_form_field("Content", "content", FieldType.TEXT, WidgetKind.RICHTEXT,
                     default="<h1>343434</h1><p>34344433434</p>", divider="Divider 2")
    b.add_form_field("Code", "code", FieldType.TEXT, WidgetKind.CODE, default=_CODE_SAMPLE)
    b.add_form_field(
        "Website",
        "website",
        FieldType.TINYINT,
        WidgetKind.SWITCH,
        help="When closed the website is unreachable, but the admin panel can still log in.",
        options=["0", "1"],
    )
    b.add_form_field(
        "Fruit",
        "fruit",
        widget=WidgetKind.SELECT_BOX,
        options=options(("apple", "Apple"), ("banana", "Banana"), ("watermelon", "Watermelon"),
                        ("pear", "Pear"), selected=("pear",)),
    )
    b.add_form_field("Gender", "gender", FieldType.TINYINT, WidgetKind.RADIO,
                     options=[("0", "male"), ("1", "female")])
    b.add_form_field(
        "Drink",
        "drink",
        widget=WidgetKind.SELECT,
        options=[("beer", "Beer"), ("juice", "Juice"), ("water", "Water"), ("red bull", "Red Bull")],
        default="beer",
    )
    b.add_form_field(
        "Experience",
        "experience",
        FieldType.TINYINT,
        WidgetKind.SELECT_SINGLE,
        options=[("0", "two years"), ("1", "three years"), ("2", "four years"), ("3", "five years")],
    )
    b.add_form_field("Snacks", "snacks", widget=WidgetKind.CHECKBOX,
                     options=[("0", "Oatmeal"), ("1", "Chips"), ("2", "Spicy strips"), ("3", "Ice cream")])
    b.add_form_field("Cat", "cat", widget=WidgetKind.CHECKBOX_STACKED,
                     options=[("0", "Garfield"), ("1", "British shorthair"), ("2", "American shorthair")])
    b.add_form_field("Province", "province", FieldType.TINYINT, WidgetKind.SELECT_SINGLE,
                     options=_PROVINCES, default="0")
    b.add_form_field("City", "city", widget=WidgetKind.SELECT_SINGLE,
                     depends_on="province", options_fn=_cities)
    b.set_tabs(
        ("Input", "Select"),
        ("name", "age", "homepage", "email", "birthday", "time", "time_range", "date_range",
         "password", "ip", "certificate", "currency", "rate", "reward", "content", "code"),
        ("website", "fruit", "gender", "drink", "experience", "snacks", "cat", "province", "city"),
    )
    return b.set_data_fn(lambda request: ([], 0)).build()


def render_form_demo(settings: AdminSettings) -> None:
    """Form page: submitting shows the values that would be persisted."""
    desc = get_form_demo()
    st.subheader(desc.title)
    st.caption(desc.description)
    prefix = "form_demo"
    posted = render_fields(
        desc, FormMode.ADD, form_defaults(desc, FormMode.ADD), key_prefix=prefix,
        upload_dir=settings.upload_dir,
    )
    save, reset = st.columns(2)
    if reset.button("Reset", key="form_demo:reset"):
        for key in [k for k in st.session_state if str(k).startswith(prefix + ":")]:
            del st.session_state[key]
        st.rerun()
    if save.button("Save", type="primary", key="form_demo:save"):
        try:
            st.json(prepare_submission(desc, posted, FormMode.ADD))
        except InvalidSubmission as exc:
            st.error(str(exc))
