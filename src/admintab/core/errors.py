"""
Core exception types raised by the descriptor model, the registry, and data sources.

Provides typed exceptions for core-domain failures:
- UnknownDescriptor when a registry lookup names no registered table.
- DuplicateRegistration when a table name is registered twice.
- RegistryFrozen when registration is attempted after startup completed.
- MalformedDescriptor when a builder produces an invalid descriptor.
- BuilderLocked when a builder is mutated after build().
- InvalidSubmission when posted form values cannot be coerced to their field types.
- DataSourceFailure when a data source errors or returns a malformed result.
- GrammarError for naming/normalization violations (lower_snake names, enum values).

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Startup-time errors (DuplicateRegistration, RegistryFrozen, MalformedDescriptor)
      are meant to stop the process before it accepts traffic.
    - DataSourceFailure is recovered by admintab.io.datasource and surfaces to the UI as
      an empty page with a zero total.

Examples:
    Fail closed on an unknown table name.

    >>> from admintab.core.errors import UnknownDescriptor
    >>> try:
    ...     raise UnknownDescriptor("no table registered under 'missing'")
    ... except LookupError as e:
    ...     msg = str(e)
    >>> "missing" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "UnknownDescriptor",
    "DuplicateRegistration",
    "RegistryFrozen",
    "MalformedDescriptor",
    "BuilderLocked",
    "InvalidSubmission",
    "DataSourceFailure",
    "GrammarError",
]


class UnknownDescriptor(LookupError):
    """Registry lookup for a name that was never registered (maps to not-found)."""


class DuplicateRegistration(ValueError):
    """A table name was registered more than once."""


class RegistryFrozen(RuntimeError):
    """Registration attempted after the registry was frozen."""


class MalformedDescriptor(ValueError):
    """Descriptor violates structural rules (primary key, uniqueness, join/edit rules)."""


class DataSourceFailure(RuntimeError):
    """Data source raised or returned rows/total that do not satisfy the page contract."""


class GrammarError(ValueError):
    """Naming/normalization failure (e.g., not lower_snake or invalid enum value)."""


class BuilderLocked(RuntimeError):
    """A TableBuilder was mutated after build() produced its descriptor."""


class InvalidSubmission(ValueError):
    """Posted form value cannot be coerced to the field's declared type."""
