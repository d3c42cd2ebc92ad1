"""Handler references and their lazy resolution.

A route handler is either an inline callable (never bound) or a reference
to a method on an owner type. References may be lazy strings, resolved with
``importlib`` only when a request first needs them:

- ``"package.module:Owner.method"`` (explicit module separator)
- ``"package.module.Owner.method"`` (longest importable module prefix wins)
- ``(Owner, "method")`` tuples or :class:`HandlerReference` instances

Resolution failures raise :class:`HandlerResolutionError`; callers must not
turn them into a context-only fallback.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from importlib import import_module
from typing import Any, Optional, Tuple, Union

from smartbind.core.errors import HandlerResolutionError

__all__ = [
    "HandlerReference",
    "ResolvedHandler",
    "is_inline_handler",
    "resolve_route_handler",
]


@dataclass(frozen=True)
class ResolvedHandler:
    """Concrete ``(owner, method)`` pair for a handler reference."""

    owner: type
    method: str

    @property
    def qualname(self) -> str:
        return f"{self.owner.__name__}.{self.method}"

    def get(self) -> Any:
        return getattr(self.owner, self.method)


@dataclass(frozen=True)
class HandlerReference:
    """Lazy reference to ``owner.method``; ``owner`` may be a dotted path."""

    owner: Union[type, str]
    method: str

    @classmethod
    def parse(cls, value: Union[str, Tuple[Any, str], "HandlerReference"]) -> "HandlerReference":
        if isinstance(value, HandlerReference):
            return value
        if isinstance(value, tuple):
            if len(value) != 2 or not isinstance(value[1], str):
                raise TypeError("Handler tuples must be (owner, method_name)")
            return cls(value[0], value[1])
        if not isinstance(value, str):
            raise TypeError(f"Unsupported handler reference: {value!r}")
        text = value.strip()
        owner_path, _, method = text.rpartition(".")
        if not owner_path or not method:
            raise HandlerResolutionError(f"Malformed handler reference {value!r}")
        return cls(owner_path, method)

    def __str__(self) -> str:
        owner = self.owner if isinstance(self.owner, str) else self.owner.__qualname__
        return f"{owner}.{self.method}"


def is_inline_handler(handler: Any) -> bool:
    """Return True for plain callables (functions, lambdas, bound methods)."""
    if handler is None:
        return True
    if isinstance(handler, (str, tuple, HandlerReference)):
        return False
    return callable(handler)


async def resolve_route_handler(reference: Any) -> ResolvedHandler:
    """Resolve a handler reference to its owner type and method name."""
    ref = HandlerReference.parse(reference)
    owner = ref.owner
    if isinstance(owner, str):
        owner = _import_owner(owner)
    if not inspect.isclass(owner):
        raise HandlerResolutionError(f"Handler owner for {str(ref)!r} is not a class")
    if not callable(getattr(owner, ref.method, None)):
        raise HandlerResolutionError(
            f"{owner.__name__} has no callable method {ref.method!r}"
        )
    return ResolvedHandler(owner, ref.method)


def _import_owner(path: str) -> type:
    if ":" in path:
        module_name, _, attr_path = path.partition(":")
        return _walk(_load_module(module_name, path), attr_path, path)
    parts = path.split(".")
    # Longest importable module prefix; the rest is an attribute path.
    last_error: Optional[ImportError] = None
    for cut in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:cut])
        try:
            module = import_module(module_name)
        except ModuleNotFoundError as exc:
            if not _is_missing_prefix(exc, module_name):
                raise HandlerResolutionError(
                    f"Cannot import handler owner {path!r}: {exc}"
                ) from exc
            last_error = exc
            continue
        except ImportError as exc:
            raise HandlerResolutionError(f"Cannot import handler owner {path!r}: {exc}") from exc
        return _walk(module, ".".join(parts[cut:]), path)
    raise HandlerResolutionError(f"Cannot import handler owner {path!r}") from last_error


def _is_missing_prefix(exc: ModuleNotFoundError, module_name: str) -> bool:
    """True when ``module_name`` itself (or a parent package) does not exist."""
    missing = exc.name or ""
    return missing == module_name or module_name.startswith(missing + ".")


def _load_module(module_name: str, path: str) -> Any:
    try:
        return import_module(module_name)
    except ImportError as exc:
        raise HandlerResolutionError(f"Cannot import handler owner {path!r}: {exc}") from exc


def _walk(node: Any, attr_path: str, path: str) -> Any:
    target: Optional[Any] = node
    for segment in attr_path.split("."):
        target = getattr(target, segment, None)
        if target is None:
            raise HandlerResolutionError(f"Cannot resolve {segment!r} in {path!r}")
    return target
