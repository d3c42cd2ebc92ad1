"""Controller mixin and bootstrap pass (source of truth).

Reconstruct from the following contract.

``bootstrap(owner, registry=None)``

- Walks ``vars(owner)`` only (inherited methods are covered by the registry's
  copy-on-first-write snapshot) and registers every function carrying a
  ``@bind`` marker, in definition order.
- Explicit marker kinds win; otherwise kinds come from
  :func:`declared_parameter_types`. Parameter names are attached to the
  descriptors when their count matches the declared kinds.
- A marked method redefined on a subtype replaces the inherited sequence
  rather than extending it.
- Idempotent per ``(registry, owner)``: a second call is a no-op, so
  registration happens once per method per process even though the registry
  itself never deduplicates.
- Returns ``{method_name: descriptors}`` for what it registered.

``BindableController``

- ``__init_subclass__`` bootstraps each subclass into
  ``__smartbind_registry__`` (class attribute, defaults to
  ``default_registry``).
- ``get_handler_arguments(ctx, matched, resources=None)`` is the per-request
  hook for dispatchers; it delegates to the shared resolver for the class
  registry.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Dict, Optional, Tuple

from smartbind.core.decorators import declared_parameter_types, get_marker, parameter_names
from smartbind.core.registry import BindingDescriptor, BindingRegistry, default_registry

__all__ = ["BindableController", "bootstrap", "is_bootstrapped"]

logger = logging.getLogger(__name__)

REGISTRY_ATTR_NAME = "__smartbind_registry__"


def is_bootstrapped(owner: type, registry: Optional[BindingRegistry] = None) -> bool:
    return (registry or default_registry).is_bootstrapped(owner)


def bootstrap(
    owner: type, registry: Optional[BindingRegistry] = None
) -> Dict[str, Tuple[BindingDescriptor, ...]]:
    """Register all ``@bind``-marked methods defined directly on ``owner``."""
    if not inspect.isclass(owner):
        raise TypeError("bootstrap() requires a class")
    registry = registry or default_registry
    if not registry.mark_bootstrapped(owner):
        return {}
    registered: Dict[str, Tuple[BindingDescriptor, ...]] = {}
    for attr_name, value in vars(owner).items():
        func = value.__func__ if isinstance(value, (staticmethod, classmethod)) else value
        if not inspect.isfunction(func):
            continue
        marker = get_marker(func)
        if marker is None:
            continue
        kinds = marker.get("kinds")
        if kinds is None:
            kinds, names = declared_parameter_types(func)
        else:
            names = parameter_names(func)
        labels = names if len(names) == len(kinds) else None
        registered[attr_name] = registry.register(
            owner, attr_name, kinds, names=labels, replace=True
        )
    if registered:
        logger.debug("bootstrapped %s: %s", owner.__qualname__, sorted(registered))
    return registered


class BindableController:
    """Mixin registering ``@bind`` handlers when a subclass is created."""

    __slots__ = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        bootstrap(cls, getattr(cls, REGISTRY_ATTR_NAME, None))

    async def get_handler_arguments(self, ctx: Any, matched: Any, resources: Any = None):
        from smartbind.core.resolver import resolver_for

        registry = getattr(type(self), REGISTRY_ATTR_NAME, None) or default_registry
        return await resolver_for(registry).resolve_arguments(ctx, matched, resources)
