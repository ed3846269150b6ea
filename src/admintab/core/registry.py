"""
Explicit registry mapping table names to descriptor builders.

Lifecycle
- Constructed at process start, populated with ``register`` and then ``freeze``-d
  before any request is served (single writer, then many readers).
- After freeze the mapping is a read-only MappingProxyType; ``resolve`` takes no lock
  unless the builder opted into caching.
- The registry is an object handed to the router, not a module-level singleton.

Examples:
    >>> from admintab.core.builder import TableBuilder
    >>> from admintab.core.context import RequestContext
    >>> from admintab.core.registry import TableRegistry
    >>> def notes(ctx):
    ...     return TableBuilder("notes").add_column("ID", "id").set_table("notes").build()
    >>> reg = TableRegistry()
    >>> reg.register("notes", notes)
    >>> reg.freeze()
    >>> reg.resolve("notes", RequestContext()).name
    'notes'
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType

from .context import RequestContext
from .descriptors import TableDescriptor
from .errors import (
    DuplicateRegistration,
    MalformedDescriptor,
    RegistryFrozen,
    UnknownDescriptor,
)
from .grammar import assert_lower_snake
from .validate import validate_descriptor

__all__ = ["Builder", "TableRegistry"]

logger = logging.getLogger(__name__)

Builder = Callable[[RequestContext], TableDescriptor]


class TableRegistry:
    """
    name -> builder(RequestContext) -> TableDescriptor.

    Duplicate registrations fail fast; lookups of unknown names fail closed with
    UnknownDescriptor. Builders run on every resolve unless registered with
    ``cache=True``, in which case the first descriptor is kept for the process.
    """

    def __init__(self) -> None:
        self._open: dict[str, Builder] = {}
        self._builders: Mapping[str, Builder] = self._open
        self._cached_names: set[str] = set()
        self._cache: dict[str, TableDescriptor] = {}
        self._cache_lock = threading.Lock()
        self._frozen = False

    # -- writes (startup only) --------------------------------------------

    def register(self, name: str, builder: Builder, *, cache: bool = False) -> None:
        """
        Register a builder under `name`.

        Raises:
            GrammarError: If name is not lower_snake.
            DuplicateRegistration: If name is already registered.
            RegistryFrozen: If freeze() was already called.
        """
        if self._frozen:
            raise RegistryFrozen(f"cannot register {name!r}: registry is frozen")
        assert_lower_snake(name, "table name")
        if name in self._builders:
            raise DuplicateRegistration(f"table {name!r} is already registered")
        if not callable(builder):
            raise TypeError(f"builder for {name!r} is not callable")
        self._open[name] = builder
        if cache:
            self._cached_names.add(name)
        logger.debug("registered table %s (cache=%s)", name, cache)

    def freeze(self, probe: RequestContext | None = None) -> None:
        """
        Make the registry read-only.

        Args:
            probe (RequestContext | None): When given, every builder is invoked once
                with it so malformed descriptors stop startup instead of a request.

        Raises:
            MalformedDescriptor: If a probed builder produces an invalid descriptor.
        """
        if self._frozen:
            return
        if probe is not None:
            for name in self._builders:
                self._build(name, probe)
        self._builders = MappingProxyType(dict(self._open))
        self._frozen = True
        logger.debug("registry frozen with %d tables", len(self._builders))

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- reads --------------------------------------------------------------

    def _build(self, name: str, ctx: RequestContext) -> TableDescriptor:
        desc = self._builders[name](ctx)
        if not isinstance(desc, TableDescriptor):
            raise MalformedDescriptor(
                f"builder for {name!r} returned {type(desc).__name__}, not a TableDescriptor"
            )
        if desc.name != name:
            raise MalformedDescriptor(
                f"builder registered as {name!r} produced descriptor named {desc.name!r}"
            )
        return validate_descriptor(desc)

    def resolve(self, name: str, ctx: RequestContext) -> TableDescriptor:
        """
        Build the descriptor registered under `name` for this request.

        Raises:
            UnknownDescriptor: If name was never registered.
            MalformedDescriptor: If the builder returns something other than a valid
                descriptor named `name`.
            Exception: Anything the builder raises propagates unchanged.
        """
        if name not in self._builders:
            raise UnknownDescriptor(f"no table registered under {name!r}")
        if name not in self._cached_names:
            return self._build(name, ctx)
        cached = self._cache.get(name)
        if cached is not None:
            return cached
        with self._cache_lock:
            cached = self._cache.get(name)
            if cached is None:
                cached = self._build(name, ctx)
                self._cache[name] = cached
                logger.debug("cached descriptor for %s", name)
        return cached

    def names(self) -> list[str]:
        """Registered names in registration order."""
        return list(self._builders)

    def __contains__(self, name: object) -> bool:
        return name in self._builders

    def __len__(self) -> int:
        return len(self._builders)

    def __iter__(self) -> Iterator[str]:
        return iter(self._builders)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"TableRegistry({state}, tables={self.names()!r})"
