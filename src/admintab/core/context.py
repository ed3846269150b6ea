"""
Request context handed to descriptor builders, action handlers and option callbacks.

A RequestContext is an immutable snapshot of what a builder may vary a descriptor on:
the acting user and roles, the locale, the routed path, the query string and posted
form values. It carries no connection or UI state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

__all__ = ["RequestContext"]


def _frozen(m: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(m or {}))


@dataclass(frozen=True)
class RequestContext:
    """
    Immutable per-request context.

    Attributes:
        user (str): Acting user name.
        roles (frozenset[str]): Role slugs granted to the user.
        locale (str): Language code used for labels.
        path (str): Routed path (e.g., "/admin/info/users").
        query (Mapping[str, str]): Query-string parameters.
        form (Mapping[str, str]): Posted form values (ajax callbacks read "value").

    Examples:
        >>> ctx = RequestContext(user="admin", roles=frozenset({"administrator"}))
        >>> ctx.has_role("administrator")
        True
        >>> ctx.with_form(value="1").form_value("value")
        '1'
    """

    user: str = "anonymous"
    roles: frozenset[str] = frozenset()
    locale: str = "en"
    path: str = ""
    query: Mapping[str, str] = field(default_factory=lambda: _frozen(None))
    form: Mapping[str, str] = field(default_factory=lambda: _frozen(None))

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", frozenset(self.roles))
        object.__setattr__(self, "query", _frozen(self.query))
        object.__setattr__(self, "form", _frozen(self.form))

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def query_value(self, key: str, default: str = "") -> str:
        return self.query.get(key, default)

    def form_value(self, key: str, default: str = "") -> str:
        return self.form.get(key, default)

    def with_form(self, **values: str) -> RequestContext:
        """Return a copy with posted form values merged in."""
        return replace(self, form={**self.form, **values})
