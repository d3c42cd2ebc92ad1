"""Binding registry (source of truth).

Rebuild this module from the contract below. The registry is an explicit
table keyed by owner type, then by method name, holding the ordered
:class:`BindingDescriptor` sequence of every bindable handler parameter.

Registration
------------
``register(owner, method_name, declared_types)``

- ``declared_types`` lists every declared parameter type of the handler in
  order. The first one is the invocation context and is always dropped; the
  rest become descriptors with 0-based ``position`` among the non-context
  parameters.
- Descriptors are appended to ``table[owner][method_name]``; registering the
  same method twice appends twice. Bootstrap code (``controller.bootstrap``)
  guarantees one registration per method per process.
- ``replace=True`` starts the method's sequence afresh instead of appending.
  Bootstrap uses it for methods a subtype redefines, so an override never
  extends the sequence copied from its ancestor.
- Copy-on-first-write: the first write for an owner without its own table
  snapshots the nearest ancestor table along ``owner.__mro__`` (mapping and
  method lists both copied). From then on the two tables never affect each
  other, in either direction.
- All mutations happen under an ``RLock`` so concurrent initialisers cannot
  snapshot a half-written ancestor. ``freeze()`` closes the registry;
  ``register`` raises ``RuntimeError`` afterwards.
- ``mark_bootstrapped(owner)`` records bootstrap passes; it does not touch
  the tables.

Lookup
------
- ``bindings_for(owner, method_name)`` returns a tuple of descriptors or
  ``None``. Owners that never wrote read through to their nearest ancestor.
- ``table(owner)`` returns a detached ``{method: tuple(descriptors)}`` copy.
- ``describe()`` returns ``{owner_qualname: {method: [kind names]}}`` for
  owners with their own table.
- ``shared_resolver`` holds the resolver returned by
  ``resolver.resolver_for(registry)``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

__all__ = ["BindingDescriptor", "BindingRegistry", "default_registry"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BindingDescriptor:
    """A non-context handler parameter eligible for resource substitution."""

    position: int
    kind: Any
    name: Optional[str] = None

    @property
    def kind_name(self) -> str:
        return getattr(self.kind, "__name__", None) or str(self.kind)


_Table = Dict[str, List[BindingDescriptor]]


class BindingRegistry:
    """Per owner-type table of handler binding descriptors."""

    __slots__ = ("_tables", "_lock", "_frozen", "_bootstrapped", "shared_resolver")

    def __init__(self) -> None:
        self._tables: Dict[type, _Table] = {}
        self._bootstrapped: set[type] = set()
        self._lock = threading.RLock()
        self._frozen = False
        self.shared_resolver: Any = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(
        self,
        owner: type,
        method_name: str,
        declared_types: Iterable[Any],
        *,
        names: Optional[Iterable[Optional[str]]] = None,
        replace: bool = False,
    ) -> Tuple[BindingDescriptor, ...]:
        """Append descriptors for every declared type after the context.

        With ``replace`` the existing sequence for ``method_name`` (own or
        inherited) is discarded first.
        """
        if not isinstance(owner, type):
            raise TypeError(f"owner must be a class, got {owner!r}")
        if not method_name:
            raise ValueError("method_name cannot be empty")
        kinds = list(declared_types)
        labels = list(names) if names is not None else []
        with self._lock:
            if self._frozen:
                raise RuntimeError("BindingRegistry is frozen; register during bootstrap")
            table = self._own_table(owner)
            if replace:
                bucket = table[method_name] = []
            else:
                bucket = table.setdefault(method_name, [])
            for index, kind in enumerate(kinds):
                if index == 0:
                    continue
                label = labels[index] if index < len(labels) else None
                bucket.append(BindingDescriptor(position=index - 1, kind=kind, name=label))
            registered = tuple(bucket)
        logger.debug(
            "bindings registered for %s.%s: %s",
            owner.__qualname__,
            method_name,
            [d.kind_name for d in registered],
        )
        return registered

    def _own_table(self, owner: type) -> _Table:
        table = self._tables.get(owner)
        if table is None:
            inherited = self._nearest_table(owner)
            table = {method: list(items) for method, items in (inherited or {}).items()}
            self._tables[owner] = table
        return table

    def _nearest_table(self, owner: type) -> Optional[_Table]:
        for base in owner.__mro__:
            table = self._tables.get(base)
            if table is not None:
                return table
        return None

    def mark_bootstrapped(self, owner: type) -> bool:
        """Record that ``owner`` went through bootstrap; False if it already had."""
        with self._lock:
            if owner in self._bootstrapped:
                return False
            self._bootstrapped.add(owner)
            return True

    def is_bootstrapped(self, owner: type) -> bool:
        return owner in self._bootstrapped

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def bindings_for(self, owner: type, method_name: str) -> Optional[Tuple[BindingDescriptor, ...]]:
        table = self._nearest_table(owner)
        if not table:
            return None
        items = table.get(method_name)
        if items is None:
            return None
        return tuple(items)

    def table(self, owner: type) -> Dict[str, Tuple[BindingDescriptor, ...]]:
        with self._lock:
            table = self._nearest_table(owner) or {}
            return {method: tuple(items) for method, items in table.items()}

    def has_own_table(self, owner: type) -> bool:
        return owner in self._tables

    def owners(self) -> Tuple[type, ...]:
        with self._lock:
            return tuple(self._tables)

    def describe(self) -> Dict[str, Dict[str, List[str]]]:
        with self._lock:
            return {
                owner.__qualname__: {
                    method: [d.kind_name for d in items] for method, items in table.items()
                }
                for owner, table in self._tables.items()
            }

    def clear(self) -> None:
        """Drop every table and unfreeze (tests and app reloads)."""
        with self._lock:
            self._tables.clear()
            self._bootstrapped.clear()
            self._frozen = False


default_registry = BindingRegistry()
