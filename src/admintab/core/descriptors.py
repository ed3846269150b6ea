"""
Frozen descriptor types for admin tables.

Notes:
    - A TableDescriptor fully specifies one admin table: columns shown by the list
      view, fields shown by add/edit forms, the data source rows come from, and the
      actions offered on rows and on the table.
    - Descriptors are values. Builders (admintab.core.builder) accumulate into a local
      builder and freeze the result; nothing mutates a descriptor after build().
    - Structural rules (one primary key, unique names, read-only join columns) are
      checked by admintab.core.validate at build time.
    - Core is zero-IO; admintab.io interprets RelationalSource against SQLite.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .constants import DEFAULT_PRIMARY_KEY, JOIN_ALIAS_SEPARATOR
from .context import RequestContext
from .grammar import (
    ActionKind,
    ActionScope,
    DataSourceKind,
    DisplayKind,
    EditType,
    FieldType,
    FilterOperator,
    FormMode,
    WidgetKind,
)
from .query import PageRequest
from .typing import FetchResult, Row, Scalar

__all__ = [
    "PrimaryKey",
    "JoinSpec",
    "FieldOption",
    "FilterSpec",
    "FieldModel",
    "ColumnSpec",
    "PostedField",
    "FormFieldSpec",
    "FormTab",
    "ActionResult",
    "ActionSpec",
    "RelationalSource",
    "CustomSource",
    "DataSource",
    "TableConfig",
    "TableDescriptor",
]


@dataclass(frozen=True)
class PrimaryKey:
    """Row-identifying column of a table."""

    name: str = DEFAULT_PRIMARY_KEY
    type: FieldType = FieldType.INT


@dataclass(frozen=True)
class JoinSpec:
    """
    Foreign-key relationship used to project a column from a related table.

    Attributes:
        field (str): Local column holding the foreign key (e.g., "author_id").
        join_field (str): Key column in the related table (e.g., "id").
        table (str): Related table name (e.g., "authors").

    Examples:
        >>> JoinSpec(field="author_id", join_field="id", table="authors").alias("first_name")
        'authors_joined_first_name'
    """

    field: str
    join_field: str
    table: str

    def alias(self, column: str) -> str:
        return f"{self.table}{JOIN_ALIAS_SEPARATOR}{column}"


@dataclass(frozen=True)
class FieldOption:
    """Choice offered by select/radio/checkbox widgets and filter selectors."""

    value: str
    text: str = ""
    selected: bool = False

    @property
    def label(self) -> str:
        return self.text or self.value


@dataclass(frozen=True)
class FilterSpec:
    """Makes a column filterable: operator applied and widget used in the filter area."""

    operator: FilterOperator = FilterOperator.EQ
    widget: WidgetKind = WidgetKind.TEXT
    options: tuple[FieldOption, ...] = ()


@dataclass(frozen=True)
class FieldModel:
    """
    What a display callback sees for one cell.

    Attributes:
        value (str): Cell value as text ("" for nulls and missing joined rows).
        row (Row): The whole normalized row.
        pk (str): Primary key value of the row as text.
    """

    value: str
    row: Row
    pk: str = ""


@dataclass(frozen=True)
class ColumnSpec:
    """
    One list-view column.

    Attributes:
        label (str): Header text.
        field (str): Storage column (or, for joined columns, the column in the related
            table; for virtual columns, a free lower_snake key).
        type (FieldType): Declared type.
        sortable (bool): Offer sorting on this column.
        filter (FilterSpec | None): Filterable when set.
        edit (EditType | None): Inline-editable in the list view when set.
        edit_options (tuple[FieldOption, ...]): Options for switch/select editors.
        hidden (bool): Fetched but not shown (display callbacks may still read it).
        join (JoinSpec | None): Joined column when set; read-only.
        virtual (bool): No storage column; the value comes from `display`.
        display (Callable[[FieldModel], Scalar] | None): Value projection for display.
        display_kind (DisplayKind): Formatting hint for the rendering layer.
        display_options (Mapping[str, Any]): Extra hints (dot colors, URL prefixes, ...).
    """

    label: str
    field: str
    type: FieldType = FieldType.VARCHAR
    sortable: bool = False
    filter: FilterSpec | None = None
    edit: EditType | None = None
    edit_options: tuple[FieldOption, ...] = ()
    hidden: bool = False
    join: JoinSpec | None = None
    virtual: bool = False
    display: Callable[[FieldModel], Scalar] | None = None
    display_kind: DisplayKind = DisplayKind.TEXT
    display_options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def filterable(self) -> bool:
        return self.filter is not None

    @property
    def editable(self) -> bool:
        return self.edit is not None

    @property
    def joined(self) -> bool:
        return self.join is not None

    @property
    def key(self) -> str:
        """Name of this column in fetched rows (join alias for joined columns)."""
        if self.join is not None:
            return self.join.alias(self.field)
        return self.field

    @property
    def stored(self) -> bool:
        """True for plain columns of the descriptor's own table."""
        return not self.virtual and self.join is None


@dataclass(frozen=True)
class PostedField:
    """What a post-submit transform sees for one submitted field."""

    field: str
    value: Scalar
    values: Mapping[str, Scalar]
    mode: FormMode


@dataclass(frozen=True)
class FormFieldSpec:
    """
    One add/edit form field.

    Attributes:
        label (str): Field label.
        field (str): Storage column written on save.
        type (FieldType): Declared type.
        widget (WidgetKind): Input widget.
        default (Scalar): Initial value on the add form.
        help (str): Help text shown under the widget.
        options (tuple[FieldOption, ...]): Static choices for choice widgets.
        allow_add (bool): Shown (and written) on the add form.
        allow_edit (bool): Shown (and written) on the edit form.
        hidden (bool): Never shown; never written from user input.
        post_filter (Callable[[PostedField], Any] | None): Post-submit transform; a
            return of None, "" or SKIP means the field is not persisted.
        depends_on (str | None): Field whose current value keys `options_fn`.
        options_fn (Callable[[str], Sequence[FieldOption]] | None): Dynamic options.
        file_upload (bool): Rich-text/file widgets accept uploads.
        divider (str): Section title rendered after this field.
    """

    label: str
    field: str
    type: FieldType = FieldType.VARCHAR
    widget: WidgetKind = WidgetKind.TEXT
    default: Scalar = None
    help: str = ""
    options: tuple[FieldOption, ...] = ()
    allow_add: bool = True
    allow_edit: bool = True
    hidden: bool = False
    post_filter: Callable[[PostedField], Any] | None = None
    depends_on: str | None = None
    options_fn: Callable[[str], Sequence[FieldOption]] | None = None
    file_upload: bool = False
    divider: str = ""

    def visible_in(self, mode: FormMode) -> bool:
        if self.hidden:
            return False
        return self.allow_add if mode is FormMode.ADD else self.allow_edit


@dataclass(frozen=True)
class FormTab:
    header: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an ajax/popup action handler."""

    success: bool
    message: str = ""
    data: Any = None


@dataclass(frozen=True)
class ActionSpec:
    """
    Row-level or table-level operation.

    Attributes:
        id (str): Unique lower_snake id within the descriptor.
        label (str): Button text.
        kind (ActionKind): jump | ajax | popup | iframe | field_filter.
        scope (ActionScope): row (per-row button) or table (toolbar button).
        url (str): Target for jump; callback route for ajax/popup.
        handler (Callable[[RequestContext], ActionResult] | None): Callback for ajax/popup.
        icon (str): Icon hint.
        title (str): Modal title for popup/iframe.
        iframe_src (str): Embedded URL for iframe.
        width (str): Modal width hint.
        height (str): Modal height hint.
        field (str): Field filtered by a field_filter select box.
        options (tuple[FieldOption, ...]): Choices for field_filter.
    """

    id: str
    label: str
    kind: ActionKind
    scope: ActionScope = ActionScope.ROW
    url: str = ""
    handler: Callable[[RequestContext], ActionResult] | None = None
    icon: str = ""
    title: str = ""
    iframe_src: str = ""
    width: str = ""
    height: str = ""
    field: str = ""
    options: tuple[FieldOption, ...] = ()


@dataclass(frozen=True)
class RelationalSource:
    """Rows come from a table of the embedded database, queried by admintab.io.relational."""

    table: str
    connection: str = "default"

    @property
    def kind(self) -> DataSourceKind:
        return DataSourceKind.RELATIONAL


@dataclass(frozen=True)
class CustomSource:
    """Rows come from a caller-supplied function: PageRequest -> (rows, total)."""

    fetch: Callable[[PageRequest], FetchResult]

    @property
    def kind(self) -> DataSourceKind:
        return DataSourceKind.CUSTOM


DataSource = RelationalSource | CustomSource


@dataclass(frozen=True)
class TableConfig:
    """Table-level capabilities offered by the list view."""

    can_add: bool = True
    editable: bool = True
    deletable: bool = True
    exportable: bool = False
    hide_filter_area: bool = False


@dataclass(frozen=True)
class TableDescriptor:
    """
    Frozen descriptor for one admin table.

    Attributes:
        name (str): Unique lower_snake key used for routing and permission scoping.
        primary_key (PrimaryKey): Row-identifying column.
        columns (tuple[ColumnSpec, ...]): List-view columns in display order.
        form_fields (tuple[FormFieldSpec, ...]): Add/edit fields in display order.
        source (DataSource): Where list rows come from.
        actions (tuple[ActionSpec, ...]): Row and table operations.
        title (str): Page title.
        description (str): Page subtitle.
        detail_source (DataSource | None): Optional source for the detail view.
        config (TableConfig): Add/edit/delete/export capabilities.
        tabs (tuple[FormTab, ...]): Optional grouping of form fields into tabs.
        post_hook (Callable[[Mapping[str, Scalar]], None] | None): Runs after a
            successful form save with the persisted values.

    Examples:
        >>> from admintab.core.builder import TableBuilder
        >>> desc = (
        ...     TableBuilder("notes", title="Notes")
        ...     .add_column("ID", "id", FieldType.INT, sortable=True)
        ...     .add_column("Body", "body")
        ...     .set_table("notes")
        ...     .build()
        ... )
        >>> [c.field for c in desc.columns]
        ['id', 'body']
    """

    name: str
    primary_key: PrimaryKey
    columns: tuple[ColumnSpec, ...]
    form_fields: tuple[FormFieldSpec, ...]
    source: DataSource
    actions: tuple[ActionSpec, ...] = ()
    title: str = ""
    description: str = ""
    detail_source: DataSource | None = None
    config: TableConfig = field(default_factory=TableConfig)
    tabs: tuple[FormTab, ...] = ()
    post_hook: Callable[[Mapping[str, Scalar]], None] | None = None

    def column(self, key: str) -> ColumnSpec:
        """Look up a column by key (field, or join alias for joined columns)."""
        for c in self.columns:
            if c.key == key:
                return c
        raise KeyError(f"table {self.name!r} has no column {key!r}")

    def form_field(self, name: str) -> FormFieldSpec:
        for f in self.form_fields:
            if f.field == name:
                return f
        raise KeyError(f"table {self.name!r} has no form field {name!r}")

    def action(self, action_id: str) -> ActionSpec:
        for a in self.actions:
            if a.id == action_id:
                return a
        raise KeyError(f"table {self.name!r} has no action {action_id!r}")

    @property
    def visible_columns(self) -> tuple[ColumnSpec, ...]:
        return tuple(c for c in self.columns if not c.hidden)

    @property
    def filterable_columns(self) -> tuple[ColumnSpec, ...]:
        return tuple(c for c in self.columns if c.filterable)

    @property
    def sortable_keys(self) -> tuple[str, ...]:
        return tuple(c.key for c in self.columns if c.sortable)

    def actions_in(self, scope: ActionScope) -> tuple[ActionSpec, ...]:
        return tuple(a for a in self.actions if a.scope is scope)

    def form_fields_for(self, mode: FormMode) -> tuple[FormFieldSpec, ...]:
        return tuple(f for f in self.form_fields if f.visible_in(mode))

    def pk_of(self, row: Row) -> Scalar:
        return row.get(self.primary_key.name)
