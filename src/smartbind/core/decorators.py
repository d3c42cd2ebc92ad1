"""Decorator helpers for marking bindable handler methods (source of truth).

Rebuild this module from the behaviours below. It contains only marker
helpers; no registry mutation happens at decoration time.

``bind(*kinds)``

- Returns a decorator storing a payload under ``TARGET_ATTR_NAME`` on the
  function. The payload is ``{"kinds": [...] | None}``; the last marker wins
  when a function is decorated twice.
- ``kinds`` is the explicit, ordered list of declared parameter types with the
  invocation context first (``@bind(HttpContext, Post, Comment)``).
- Without ``kinds`` the types are read from the signature at bootstrap time by
  :func:`declared_parameter_types` (``get_type_hints`` + ``inspect.signature``);
  unannotated parameters declare ``typing.Any``.
- The decorator returns the original function unchanged aside from the marker.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, List, Optional, Tuple, get_type_hints

from smartbind.core.errors import ConfigurationError

__all__ = [
    "TARGET_ATTR_NAME",
    "bind",
    "declared_parameter_types",
    "get_marker",
    "parameter_names",
]

TARGET_ATTR_NAME = "__smartbind_bindings__"


def bind(*kinds: Any) -> Callable:
    """Mark a handler method for resource binding.

    Args:
        kinds: Declared parameter types, invocation context first. Leave empty
            to read them from the method's type hints.
    """

    def decorator(func: Callable) -> Callable:
        payload: Dict[str, Any] = {"kinds": list(kinds) if kinds else None}
        setattr(func, TARGET_ATTR_NAME, payload)
        return func

    return decorator


def get_marker(func: Any) -> Optional[Dict[str, Any]]:
    marker = getattr(func, TARGET_ATTR_NAME, None)
    if not isinstance(marker, dict):
        return None
    return marker


def declared_parameter_types(func: Callable) -> Tuple[List[Any], List[str]]:
    """Return ``(types, names)`` for the parameters of ``func`` after ``self``."""
    try:
        hints = get_type_hints(func)
    except Exception as exc:
        raise ConfigurationError(
            f"Cannot resolve type hints of {func.__qualname__}; pass kinds to @bind()"
        ) from exc
    names = parameter_names(func)
    return [hints.get(name, Any) for name in names], names


def parameter_names(func: Callable) -> List[str]:
    """Names of the positional/keyword parameters of ``func`` after ``self``."""
    names: List[str] = []
    for index, param in enumerate(inspect.signature(func).parameters.values()):
        if index == 0 and param.name in ("self", "cls"):
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        names.append(param.name)
    return names
