"""Route objects consumed by the binding pipeline.

Matching URLs is somebody else's job; these classes only carry what binding
needs:

``Route(pattern, handler, *, params=None, name=None)``

- ``tokens``: raw ordered parameter tokens, taken from ``params`` when given,
  otherwise extracted from ``pattern`` (``/posts/:post(slug)/:>comment``).
- ``params``: cache slot for the parsed graph. Computed on first access via
  :class:`ParamsParser`, then reused for every request. ``prepare()`` forces
  the computation so bad declarations fail while routes are being set up.
- ``handler``: inline callable or handler reference (see ``handlers``).

``MatchedRoute(route, values=None, resolved_params=None)``

- One per matched request. ``values`` holds the raw path values by name.
- ``resolved_params`` is the per-match metadata slot, positionally aligned
  with ``route.params``; it defaults to the route's cached graph.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from smartbind.core.params import Param, ParamsParser, extract_tokens

__all__ = ["Route", "MatchedRoute"]

_UNSET = object()


class Route:
    """A route declaration plus its cached parameter graph."""

    __slots__ = ("pattern", "handler", "name", "_parser", "_params")

    def __init__(
        self,
        pattern: str,
        handler: Any,
        *,
        params: Optional[Iterable[str]] = None,
        name: Optional[str] = None,
    ) -> None:
        self.pattern = pattern
        self.handler = handler
        self.name = name
        tokens = list(params) if params is not None else extract_tokens(pattern)
        self._parser = ParamsParser(tokens, pattern)
        self._params: Any = _UNSET

    @property
    def tokens(self) -> Tuple[str, ...]:
        return self._parser.tokens

    @property
    def params(self) -> Tuple[Param, ...]:
        if self._params is _UNSET:
            self._params = self._parser.parse()
        return self._params

    def prepare(self) -> "Route":
        """Parse the params now; raises ``ConfigurationError`` on bad routes."""
        self.params
        return self

    def match(self, values: Optional[Mapping[str, str]] = None) -> "MatchedRoute":
        return MatchedRoute(self, values)

    def __repr__(self) -> str:
        return f"Route({self.pattern!r})"


class MatchedRoute:
    """Per-request view of a route match."""

    __slots__ = ("route", "values", "_resolved_params")

    def __init__(
        self,
        route: Route,
        values: Optional[Mapping[str, str]] = None,
        resolved_params: Optional[Sequence[Optional[Param]]] = None,
    ) -> None:
        self.route = route
        self.values: Dict[str, str] = dict(values or {})
        self._resolved_params = tuple(resolved_params) if resolved_params is not None else None

    @property
    def handler(self) -> Any:
        return self.route.handler

    @property
    def resolved_params(self) -> Tuple[Optional[Param], ...]:
        if self._resolved_params is None:
            return self.route.params
        return self._resolved_params

    @resolved_params.setter
    def resolved_params(self, value: Sequence[Optional[Param]]) -> None:
        self._resolved_params = tuple(value)

    def param_at(self, index: int) -> Optional[Param]:
        params = self.resolved_params
        if 0 <= index < len(params):
            return params[index]
        return None
