"""
Demo table builders and registry construction.

Every builder is a function ``(RequestContext) -> TableDescriptor`` that builds a
fresh descriptor per call. ``build_registry`` registers them under their table names
and freezes the registry, probing each builder once so a malformed descriptor stops
startup.

Routes follow ``/{url_prefix}/info/{name}`` (e.g., /admin/info/users).
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from admintab.core.context import RequestContext
from admintab.core.registry import Builder, TableRegistry

from .authors import get_authors_table
from .external import get_external_table
from .posts import get_posts_table
from .profile import get_profile_table
from .users import get_users_table

__all__ = ["GENERATORS", "build_registry"]

GENERATORS: Mapping[str, Builder] = MappingProxyType(
    {
        "posts": get_posts_table,
        "users": get_users_table,
        "authors": get_authors_table,
        "profile": get_profile_table,
        "external": get_external_table,
    }
)


def build_registry(
    generators: Mapping[str, Builder] = GENERATORS,
    *,
    probe: RequestContext | None = None,
) -> TableRegistry:
    """
    Register the given builders and freeze the registry.

    Args:
        generators: name -> builder mapping (defaults to the demo tables).
        probe: Context used to build every descriptor once before freezing
            (defaults to an anonymous context).

    Raises:
        DuplicateRegistration, MalformedDescriptor, GrammarError: On invalid builders.
    """
    registry = TableRegistry()
    for name, builder in generators.items():
        registry.register(name, builder)
    registry.freeze(probe=probe or RequestContext())
    return registry
