"""
Pydantic v2 models for the page-request contract shared by every data source.

Responsibilities
- Define FilterPredicate and PageRequest, the normalized request a list view sends to a
  data source (page number, page size, sort field/direction, filter predicates).
- Define Page, the result a data source returns (a slice of rows plus the total row
  count the source conceptually provides) and the pagination math derived from it.
- Parse URL-style query parameters into a PageRequest.

Contract
- Relational sources interpret predicates against the descriptor's table schema.
- Custom sources receive the PageRequest unmodified; they own the correctness of the
  total count (not just the page length) so that page_count = ceil(total / page_size).

Examples
    >>> from admintab.core.query import Page, PageRequest, page_count
    >>> page_count(10, 3)
    4
    >>> req = PageRequest.from_query({"page": "2", "page_size": "20", "title__like": "go"})
    >>> (req.page, req.page_size, req.filters[0].operator.value, req.filters[0].value)
    (2, 20, 'like', 'go')
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .errors import GrammarError
from .grammar import FilterOperator, SortOrder, filter_operator_from_value, sort_order_from_value
from .typing import Row, Scalar
from .values import coerce_scalar

__all__ = [
    "FilterPredicate",
    "PageRequest",
    "Page",
    "page_count",
    "RESERVED_QUERY_KEYS",
    "OPERATOR_SEPARATOR",
]

# Query-string keys that never denote a filter.
RESERVED_QUERY_KEYS: frozenset[str] = frozenset(
    {"page", "page_size", "sort", "order", "view", "table", "pk", "mode"}
)

# "<field>__<operator>" selects a non-default operator in query strings.
OPERATOR_SEPARATOR = "__"


def page_count(total: int, page_size: int) -> int:
    """
    Number of pages needed to show `total` rows, `page_size` at a time.

    Args:
        total (int): Total rows the source provides (>= 0).
        page_size (int): Rows per page (>= 1).

    Returns:
        int: ceil(total / page_size); 0 when total is 0.

    Raises:
        ValueError: If page_size < 1 or total < 0.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    if total < 0:
        raise ValueError(f"total must be >= 0, got {total}")
    return -(-total // page_size)


class FilterPredicate(BaseModel):
    """
    One filter condition on a field.

    Attributes:
        field (str): Column field name (or join alias for joined columns).
        operator (FilterOperator): Comparison to apply (default eq).
        explicit (bool): False when the operator came from a bare ``field=value`` key;
            relational sources then apply the column's declared operator instead.
        value (Scalar): Operand, passed through unmodified to custom sources.

    Raises:
        GrammarError: If operator is not a known FilterOperator token.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str = Field(..., min_length=1)
    operator: FilterOperator = FilterOperator.EQ
    explicit: bool = True
    value: Scalar = None

    @field_validator("operator", mode="before")
    @classmethod
    def _normalize_operator(cls, v: Any) -> FilterOperator:
        return filter_operator_from_value(v)

    @field_validator("value", mode="before")
    @classmethod
    def _normalize_value(cls, v: Any) -> Scalar:
        return coerce_scalar(v)


class PageRequest(BaseModel):
    """
    Normalized list-view request.

    Attributes:
        page (int): 1-based page number.
        page_size (int): Rows per page in [1, MAX_PAGE_SIZE].
        sort_field (str | None): Requested sort column; None means the primary key.
        sort_order (SortOrder): Sort direction (default desc, newest first).
        filters (tuple[FilterPredicate, ...]): Conjunctive filter predicates.

    Raises:
        pydantic.ValidationError: If page/page_size are out of range or an operator or
            sort order token is unknown.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    sort_field: str | None = None
    sort_order: SortOrder = SortOrder.DESC
    filters: tuple[FilterPredicate, ...] = ()

    @field_validator("sort_order", mode="before")
    @classmethod
    def _normalize_sort_order(cls, v: Any) -> SortOrder:
        return sort_order_from_value(v)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def filters_for(self, field: str) -> tuple[FilterPredicate, ...]:
        return tuple(f for f in self.filters if f.field == field)

    def with_page(self, page: int) -> PageRequest:
        return self.model_copy(update={"page": max(1, int(page))})

    @classmethod
    def from_query(
        cls,
        query: Mapping[str, str],
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> PageRequest:
        """
        Build a PageRequest from URL-style parameters.

        Recognized keys:
            - page, page_size: integers (malformed values fall back to defaults)
            - sort: sort field; order: "asc" | "desc"
            - <field>=<value>: filter with the column's declared operator (eq for custom sources)
            - <field>__<operator>=<value>: filter with an explicit operator

        Empty filter values are ignored; reserved keys never become filters.

        Raises:
            GrammarError: If an explicit operator token is unknown.
        """

        def _int(key: str, fallback: int) -> int:
            try:
                return int(query.get(key, fallback))
            except (TypeError, ValueError):
                return fallback

        filters: list[FilterPredicate] = []
        for key, raw in query.items():
            if key in RESERVED_QUERY_KEYS or raw is None or str(raw) == "":
                continue
            field, sep, op = key.partition(OPERATOR_SEPARATOR)
            if not field:
                continue
            operator = filter_operator_from_value(op) if sep else FilterOperator.EQ
            filters.append(
                FilterPredicate(
                    field=field, operator=operator, explicit=bool(sep), value=str(raw)
                )
            )

        order_raw = query.get("order") or SortOrder.DESC.value
        try:
            order = sort_order_from_value(order_raw)
        except GrammarError:
            order = SortOrder.DESC

        return cls(
            page=max(1, _int("page", 1)),
            page_size=min(max(1, _int("page_size", default_page_size)), MAX_PAGE_SIZE),
            sort_field=query.get("sort") or None,
            sort_order=order,
            filters=tuple(filters),
        )


class Page(BaseModel):
    """
    One page of rows plus the total count the source provides.

    Attributes:
        rows (list[Row]): Normalized rows for this page.
        total (int): Total rows across all pages (>= 0).
        page (int): 1-based page number that was requested.
        page_size (int): Page size that was requested.
    """

    model_config = ConfigDict(extra="forbid")

    rows: list[Row] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)

    @property
    def page_count(self) -> int:
        return page_count(self.total, self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @classmethod
    def empty(cls, request: PageRequest) -> Page:
        return cls(rows=[], total=0, page=request.page, page_size=request.page_size)
