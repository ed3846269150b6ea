"""
Add/edit form semantics: initial values, dynamic options, tab layout and the
post-submit persistence rule.

Persistence rule
- Only fields visible in the submitted mode are written; hidden fields are never
  written from user input.
- Posted text is coerced to the field's declared type ("" becomes None for numeric
  and date types).
- A field with a post_filter is persisted iff the transform returns something other
  than None, "" or SKIP. The return value decides, not the presence of a transform.

Examples:
    >>> from admintab.core.builder import TableBuilder
    >>> from admintab.core.grammar import FieldType, FormMode
    >>> desc = (
    ...     TableBuilder("notes")
    ...     .add_column("ID", "id", FieldType.INT)
    ...     .add_form_field("Body", "body")
    ...     .add_form_field("Secret", "secret", post_filter=lambda p: SKIP)
    ...     .add_form_field("Stars", "stars", FieldType.INT)
    ...     .set_table("notes")
    ...     .build()
    ... )
    >>> prepare_submission(desc, {"body": "hi", "secret": "x", "stars": "3"}, FormMode.ADD)
    {'body': 'hi', 'stars': 3}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Final

from .descriptors import FieldOption, FormFieldSpec, PostedField, TableDescriptor
from .errors import InvalidSubmission
from .grammar import FieldType, FormMode
from .typing import Row, Scalar
from .values import as_text, coerce_scalar

__all__ = [
    "SKIP",
    "form_defaults",
    "prepare_submission",
    "resolve_options",
    "tab_layout",
    "is_skipped",
]

logger = logging.getLogger(__name__)


class _Skip:
    _instance: _Skip | None = None

    def __new__(cls) -> _Skip:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


# Returned by a post_filter to leave the field out of the write.
SKIP: Final = _Skip()

_NUMERIC_INT = {FieldType.INT, FieldType.TINYINT}
_EMPTY_IS_NULL = _NUMERIC_INT | {
    FieldType.FLOAT,
    FieldType.DATE,
    FieldType.DATETIME,
    FieldType.TIMESTAMP,
}


def is_skipped(result: Any) -> bool:
    """True when a post_filter result means "do not persist"."""
    return result is None or result is SKIP or (isinstance(result, str) and result == "")


def _flatten(raw: Any) -> Any:
    # multi-choice widgets post lists; storage keeps them comma-joined
    if isinstance(raw, (list, tuple, set, frozenset)):
        return ",".join(as_text(coerce_scalar(v)) for v in raw)
    return raw


def _coerce(spec: FormFieldSpec, raw: Any) -> Scalar:
    raw = _flatten(raw)
    if isinstance(raw, str):
        text = raw.strip()
        if text == "" and spec.type in _EMPTY_IS_NULL:
            return None
        try:
            if spec.type in _NUMERIC_INT:
                return int(text)
            if spec.type is FieldType.FLOAT:
                return float(text)
            if spec.type is FieldType.BOOL:
                return text.lower() in {"1", "true", "on", "yes"}
        except ValueError as exc:
            raise InvalidSubmission(
                f"field {spec.field!r} expects {spec.type.value}, got {raw!r}"
            ) from exc
        return raw
    return coerce_scalar(raw)


def form_defaults(
    desc: TableDescriptor, mode: FormMode, row: Row | None = None
) -> dict[str, Scalar]:
    """
    Initial values for the fields shown in `mode`.

    Add forms start from each field's default; edit forms start from the stored row
    and fall back to the default for fields the row lacks.
    """
    out: dict[str, Scalar] = {}
    for spec in desc.form_fields_for(mode):
        if mode is FormMode.EDIT and row is not None and spec.field in row:
            out[spec.field] = row[spec.field]
        else:
            out[spec.field] = spec.default
    return out


def prepare_submission(
    desc: TableDescriptor, values: Mapping[str, Any], mode: FormMode
) -> dict[str, Scalar]:
    """
    Turn posted values into the column -> value mapping to persist.

    Args:
        desc (TableDescriptor): Descriptor whose form was submitted.
        values (Mapping[str, Any]): Posted values keyed by field name.
        mode (FormMode): add or edit.

    Returns:
        dict[str, Scalar]: Values to write, in form order.

    Raises:
        InvalidSubmission: If a value cannot be coerced to its declared type.
    """
    visible = [s for s in desc.form_fields_for(mode) if s.field in values or s.post_filter]
    coerced: dict[str, Scalar] = {
        s.field: _coerce(s, values[s.field]) for s in visible if s.field in values
    }
    out: dict[str, Scalar] = {}
    for spec in visible:
        value = coerced.get(spec.field)
        if spec.post_filter is not None:
            result = spec.post_filter(
                PostedField(field=spec.field, value=value, values=dict(coerced), mode=mode)
            )
            if is_skipped(result):
                logger.debug("post filter skipped %s.%s", desc.name, spec.field)
                continue
            value = coerce_scalar(result)
        out[spec.field] = value
    return out


def resolve_options(
    spec: FormFieldSpec, values: Mapping[str, Any] | None = None
) -> tuple[FieldOption, ...]:
    """
    Options for a choice widget given the form's current values.

    Dynamic fields call ``options_fn`` with the text of the field they depend on;
    static fields return their declared options.
    """
    if spec.options_fn is None or spec.depends_on is None:
        return spec.options
    current = (values or {}).get(spec.depends_on)
    return tuple(spec.options_fn(as_text(coerce_scalar(_flatten(current)))))


def tab_layout(
    desc: TableDescriptor, mode: FormMode
) -> list[tuple[str, list[FormFieldSpec]]]:
    """
    Group the fields shown in `mode` by tab.

    Without tabs, a single untitled group holds every field. Fields not listed in any
    tab go to a trailing untitled group.
    """
    shown = desc.form_fields_for(mode)
    if not desc.tabs:
        return [("", list(shown))]
    by_name = {s.field: s for s in shown}
    groups: list[tuple[str, list[FormFieldSpec]]] = []
    placed: set[str] = set()
    for tab in desc.tabs:
        fields = [by_name[n] for n in tab.fields if n in by_name]
        placed.update(tab.fields)
        groups.append((tab.header, fields))
    rest = [s for s in shown if s.field not in placed]
    if rest:
        groups.append(("", rest))
    return groups
