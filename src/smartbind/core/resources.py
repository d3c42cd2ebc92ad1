"""Per-request resource map.

Holds the domain objects loaded for one request, keyed by route parameter
name. Each value is stored as a :class:`Resource` tagged with its kind:

- the loader inserts through ``set(name, instance, kind=None)``; when ``kind``
  is a class the instance must be an instance of it (``ResourceKindError``
  otherwise). Without an explicit kind the instance's own type is the tag.
- the argument resolver reads through ``get_checked(name, kind)``, which
  verifies the stored tag against the kind a handler declared.

As a ``Mapping`` the map exposes plain instances and is read-only; it lives
and dies with its request.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Optional

from smartbind.core.errors import ResourceKindError

__all__ = ["Resource", "ResourceMap"]


@dataclass(frozen=True)
class Resource:
    """A loaded instance tagged with its kind."""

    kind: Any
    instance: Any

    def matches(self, kind: Any) -> bool:
        if not _is_checkable(kind):
            return True
        return isinstance(self.instance, kind)


class ResourceMap(Mapping[str, Any]):
    """Name-keyed collection of loaded resources for a single request."""

    __slots__ = ("_items",)

    def __init__(self, resources: Optional[Mapping[str, Any]] = None) -> None:
        self._items: Dict[str, Resource] = {}
        for name, value in (resources or {}).items():
            if isinstance(value, Resource):
                self.set(name, value.instance, kind=value.kind)
            else:
                self.set(name, value)

    def set(self, name: str, instance: Any, kind: Any = None) -> Resource:
        if not name:
            raise ValueError("Resource name cannot be empty")
        if kind is None:
            kind = type(instance)
        elif _is_checkable(kind) and not isinstance(instance, kind):
            raise ResourceKindError(
                f"Resource {name!r} expected {_kind_name(kind)}, "
                f"got {type(instance).__name__}"
            )
        resource = Resource(kind, instance)
        self._items[name] = resource
        return resource

    def resource(self, name: str) -> Optional[Resource]:
        return self._items.get(name)

    def get_checked(self, name: str, kind: Any = None) -> Any:
        """Return the instance for ``name`` after checking it against ``kind``."""
        resource = self._items[name]
        if kind is not None and not resource.matches(kind):
            raise ResourceKindError(
                f"Resource {name!r} is {_kind_name(resource.kind)}, "
                f"handler expects {_kind_name(kind)}"
            )
        return resource.instance

    def __getitem__(self, name: str) -> Any:
        return self._items[name].instance

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={_kind_name(v.kind)}" for k, v in self._items.items())
        return f"ResourceMap({inner})"


def _is_checkable(kind: Any) -> bool:
    return inspect.isclass(kind) and kind is not object


def _kind_name(kind: Any) -> str:
    return getattr(kind, "__name__", None) or repr(kind)
