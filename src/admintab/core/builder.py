"""
Local, single-use builder that accumulates a TableDescriptor.

A descriptor builder function creates one TableBuilder per call, chains configuration
steps on it and returns ``build()``. The builder is never shared across requests; once
built it refuses further mutation (BuilderLocked).

Examples:
    >>> from admintab.core.builder import TableBuilder, options
    >>> from admintab.core.grammar import FieldType, WidgetKind
    >>> desc = (
    ...     TableBuilder("notes")
    ...     .add_column("ID", "id", FieldType.INT, sortable=True)
    ...     .add_column("Body", "body", filter="like")
    ...     .add_form_field("Body", "body", widget=WidgetKind.TEXTAREA)
    ...     .set_table("notes")
    ...     .build()
    ... )
    >>> desc.column("body").filter.operator.value
    'like'
    >>> [o.value for o in options(("0", "off"), ("1", "on"))]
    ['0', '1']
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from .descriptors import (
    ActionResult,
    ActionSpec,
    ColumnSpec,
    CustomSource,
    DataSource,
    FieldModel,
    FieldOption,
    FilterSpec,
    FormFieldSpec,
    FormTab,
    JoinSpec,
    PostedField,
    PrimaryKey,
    RelationalSource,
    TableConfig,
    TableDescriptor,
)
from .constants import DEFAULT_PRIMARY_KEY
from .context import RequestContext
from .errors import BuilderLocked, MalformedDescriptor
from .grammar import (
    ActionKind,
    ActionScope,
    DisplayKind,
    EditType,
    FieldType,
    FilterOperator,
    WidgetKind,
    filter_operator_from_value,
)
from .query import PageRequest
from .typing import FetchResult, Scalar
from .validate import validate_descriptor

__all__ = ["TableBuilder", "options"]

OptionLike = FieldOption | tuple[str, str] | str


def options(*items: OptionLike, selected: Iterable[str] = ()) -> tuple[FieldOption, ...]:
    """
    Build a tuple of FieldOption from options, (value, text) pairs or bare values.

    Args:
        *items: Options to normalize.
        selected: Values to mark as initially selected.
    """
    chosen = set(selected)
    out: list[FieldOption] = []
    for item in items:
        if isinstance(item, FieldOption):
            opt = item
        elif isinstance(item, tuple):
            value, text = item
            opt = FieldOption(value=str(value), text=str(text))
        else:
            opt = FieldOption(value=str(item), text=str(item))
        if opt.value in chosen and not opt.selected:
            opt = replace(opt, selected=True)
        out.append(opt)
    return tuple(out)


def _as_options(value: Sequence[OptionLike] | None) -> tuple[FieldOption, ...]:
    return options(*value) if value else ()


def _as_filter(value: FilterSpec | FilterOperator | str | bool | None) -> FilterSpec | None:
    if value is None or value is False:
        return None
    if value is True:
        return FilterSpec()
    if isinstance(value, FilterSpec):
        return value
    return FilterSpec(operator=filter_operator_from_value(value))


class TableBuilder:
    """
    Mutable accumulator for one TableDescriptor.

    Args:
        name (str): Table key (lower_snake) the descriptor is registered under.
        title (str): Page title.
        description (str): Page subtitle.
        primary_key (str): Primary key column name (default "id").
        pk_type (FieldType): Primary key type (default int).
    """

    def __init__(
        self,
        name: str,
        *,
        title: str = "",
        description: str = "",
        primary_key: str = DEFAULT_PRIMARY_KEY,
        pk_type: FieldType = FieldType.INT,
    ) -> None:
        self._name = name
        self._title = title
        self._description = description
        self._pk = PrimaryKey(name=primary_key, type=pk_type)
        self._columns: list[ColumnSpec] = []
        self._form_fields: list[FormFieldSpec] = []
        self._actions: list[ActionSpec] = []
        self._source: DataSource | None = None
        self._detail_source: DataSource | None = None
        self._config = TableConfig()
        self._tabs: tuple[FormTab, ...] = ()
        self._post_hook: Callable[[Mapping[str, Scalar]], None] | None = None
        self._built = False

    def _check_open(self) -> None:
        if self._built:
            raise BuilderLocked(f"builder for {self._name!r} was already built")

    # ------------------------------------------------------------------
    # List view
    # ------------------------------------------------------------------

    def add_column(
        self,
        label: str,
        field: str,
        type: FieldType = FieldType.VARCHAR,
        *,
        sortable: bool = False,
        filter: FilterSpec | FilterOperator | str | bool | None = None,
        edit: EditType | None = None,
        edit_options: Sequence[OptionLike] | None = None,
        hidden: bool = False,
        join: JoinSpec | None = None,
        virtual: bool = False,
        display: Callable[[FieldModel], Scalar] | None = None,
        display_kind: DisplayKind = DisplayKind.TEXT,
        display_options: Mapping[str, Any] | None = None,
    ) -> TableBuilder:
        """Append a list-view column. `filter` accepts True, an operator or a FilterSpec."""
        self._check_open()
        self._columns.append(
            ColumnSpec(
                label=label,
                field=field,
                type=type,
                sortable=sortable,
                filter=_as_filter(filter),
                edit=edit,
                edit_options=_as_options(edit_options),
                hidden=hidden,
                join=join,
                virtual=virtual,
                display=display,
                display_kind=display_kind,
                display_options=dict(display_options or {}),
            )
        )
        return self

    def add_virtual_column(
        self,
        label: str,
        field: str,
        display: Callable[[FieldModel], Scalar],
        *,
        display_kind: DisplayKind = DisplayKind.TEXT,
    ) -> TableBuilder:
        """Append a computed column with no storage counterpart."""
        return self.add_column(
            label, field, virtual=True, display=display, display_kind=display_kind
        )

    # ------------------------------------------------------------------
    # Forms
    # ------------------------------------------------------------------

    def add_form_field(
        self,
        label: str,
        field: str,
        type: FieldType = FieldType.VARCHAR,
        widget: WidgetKind = WidgetKind.TEXT,
        *,
        default: Scalar = None,
        help: str = "",
        options: Sequence[OptionLike] | None = None,
        allow_add: bool = True,
        allow_edit: bool = True,
        hidden: bool = False,
        post_filter: Callable[[PostedField], Any] | None = None,
        depends_on: str | None = None,
        options_fn: Callable[[str], Sequence[FieldOption]] | None = None,
        file_upload: bool = False,
        divider: str = "",
    ) -> TableBuilder:
        self._check_open()
        self._form_fields.append(
            FormFieldSpec(
                label=label,
                field=field,
                type=type,
                widget=widget,
                default=default,
                help=help,
                options=_as_options(options),
                allow_add=allow_add,
                allow_edit=allow_edit,
                hidden=hidden,
                post_filter=post_filter,
                depends_on=depends_on,
                options_fn=options_fn,
                file_upload=file_upload,
                divider=divider,
            )
        )
        return self

    def set_tabs(self, headers: Sequence[str], *groups: Sequence[str]) -> TableBuilder:
        """Group form fields into tabs; one header per group."""
        self._check_open()
        if len(headers) != len(groups):
            raise MalformedDescriptor(
                f"table {self._name!r}: {len(headers)} tab headers for {len(groups)} groups"
            )
        self._tabs = tuple(
            FormTab(header=h, fields=tuple(g)) for h, g in zip(headers, groups, strict=True)
        )
        return self

    def set_post_hook(self, hook: Callable[[Mapping[str, Scalar]], None]) -> TableBuilder:
        self._check_open()
        self._post_hook = hook
        return self

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def add_action(
        self,
        id: str,
        label: str,
        kind: ActionKind,
        *,
        scope: ActionScope = ActionScope.ROW,
        url: str = "",
        handler: Callable[[RequestContext], ActionResult] | None = None,
        icon: str = "",
        title: str = "",
        iframe_src: str = "",
        width: str = "",
        height: str = "",
        field: str = "",
        options: Sequence[OptionLike] | None = None,
    ) -> TableBuilder:
        self._check_open()
        self._actions.append(
            ActionSpec(
                id=id,
                label=label,
                kind=kind,
                scope=scope,
                url=url,
                handler=handler,
                icon=icon,
                title=title,
                iframe_src=iframe_src,
                width=width,
                height=height,
                field=field,
                options=_as_options(options),
            )
        )
        return self

    # ------------------------------------------------------------------
    # Sources and capabilities
    # ------------------------------------------------------------------

    def set_table(self, table: str, *, connection: str = "default") -> TableBuilder:
        """Back the list view by a table of the embedded database."""
        self._check_open()
        self._source = RelationalSource(table=table, connection=connection)
        return self

    def set_data_fn(self, fetch: Callable[[PageRequest], FetchResult]) -> TableBuilder:
        """Back the list view by a function PageRequest -> (rows, total)."""
        self._check_open()
        self._source = CustomSource(fetch=fetch)
        return self

    def set_detail_fn(self, fetch: Callable[[PageRequest], FetchResult]) -> TableBuilder:
        """Serve the detail view from a separate function (filtered by primary key)."""
        self._check_open()
        self._detail_source = CustomSource(fetch=fetch)
        return self

    def configure(self, **flags: bool) -> TableBuilder:
        """Override TableConfig flags (can_add, editable, deletable, exportable, ...)."""
        self._check_open()
        try:
            self._config = replace(self._config, **flags)
        except TypeError as exc:
            raise MalformedDescriptor(f"table {self._name!r}: {exc}") from exc
        return self

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(self) -> TableDescriptor:
        """
        Freeze the accumulated configuration.

        Returns:
            TableDescriptor: Validated, immutable descriptor.

        Raises:
            MalformedDescriptor: If no data source was declared or a structural rule fails.
            BuilderLocked: If called twice.
        """
        self._check_open()
        if self._source is None:
            raise MalformedDescriptor(f"table {self._name!r}: no data source declared")
        desc = TableDescriptor(
            name=self._name,
            primary_key=self._pk,
            columns=tuple(self._columns),
            form_fields=tuple(self._form_fields),
            source=self._source,
            actions=tuple(self._actions),
            title=self._title,
            description=self._description,
            detail_source=self._detail_source,
            config=self._config,
            tabs=self._tabs,
            post_hook=self._post_hook,
        )
        validate_descriptor(desc)
        self._built = True
        return desc
