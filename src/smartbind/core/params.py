"""Route parameter parsing (source of truth).

Rebuild this module from the contract below. It turns the raw parameter
tokens of a route into :class:`Param` descriptors and links scoped
parameters to their parent. Nothing here depends on request values: the
output is cached on the route and shared by every request matching it.

Token grammar
-------------
``[">"] name ["(" lookup_key ")"]``::

    post             -> name="post", lookup_key=PRIMARY_KEY
    post(slug)       -> name="post", lookup_key="slug"
    >comment         -> name="comment", scoped
    >comment(slug)   -> name="comment", lookup_key="slug", scoped

``parse_param(token)``

- Splits on the first ``(``: left side is the name candidate, right side the
  lookup key candidate. A present lookup key loses its last character (the
  closing ``)``); an absent one defaults to ``PRIMARY_KEY``.
- A leading ``>`` marks the parameter as scoped and is stripped from the name.
- ``raw`` keeps the untouched token for diagnostics; ``parent`` is ``None``.

``build_graph(tokens, pattern=None)``

- Parses each token in order, then assigns parents: for every index ``i > 0``
  whose param is scoped, ``parent`` is the name at ``i - 1`` regardless of
  whether that predecessor is scoped itself. Deeper chains are expressed by
  scoping every link (``post``, ``>comment``, ``>reply``).
- A scoped param at index 0 raises ``ConfigurationError`` naming the route
  pattern; it is never downgraded to unscoped.
- Returns a tuple; ``Param`` is frozen, so the graph is immutable config.

``extract_tokens(pattern)``

- Returns the parameter tokens of a route pattern: every ``/``-separated
  segment starting with ``:``, without the colon and without a trailing
  optional marker ``?``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple

from smartbind.core.errors import ConfigurationError

__all__ = [
    "PRIMARY_KEY",
    "SCOPE_MARKER",
    "Param",
    "ParamsParser",
    "build_graph",
    "extract_tokens",
    "parse_param",
]

PRIMARY_KEY = "$primaryKey"
SCOPE_MARKER = ">"


@dataclass(frozen=True)
class Param:
    """One parsed route parameter."""

    name: str
    lookup_key: str = PRIMARY_KEY
    scoped: bool = False
    parent: Optional[str] = None
    raw: str = ""

    @property
    def uses_primary_key(self) -> bool:
        return self.lookup_key == PRIMARY_KEY


def parse_param(token: str) -> Param:
    """Parse a single parameter token into a :class:`Param`."""
    name, sep, lookup_key = token.partition("(")
    if sep and lookup_key:
        lookup_key = lookup_key[:-1]
    else:
        lookup_key = PRIMARY_KEY

    scoped = False
    if name.startswith(SCOPE_MARKER):
        scoped = True
        name = name[len(SCOPE_MARKER) :]

    return Param(name=name, lookup_key=lookup_key, scoped=scoped, parent=None, raw=token)


def build_graph(tokens: Iterable[str], pattern: Optional[str] = None) -> Tuple[Param, ...]:
    """Parse ``tokens`` in order and link scoped params to their predecessor."""
    params: List[Param] = [parse_param(token) for token in tokens]
    for index, param in enumerate(params):
        if not param.scoped:
            continue
        if index == 0:
            where = f"route {pattern!r}" if pattern else "route"
            raise ConfigurationError(f"The first parameter in {where} cannot be scoped")
        params[index] = replace(param, parent=params[index - 1].name)
    return tuple(params)


def extract_tokens(pattern: str) -> List[str]:
    """Return the ``:param`` tokens of a route pattern, in order."""
    tokens: List[str] = []
    for segment in pattern.split("/"):
        segment = segment.strip()
        if not segment.startswith(":"):
            continue
        token = segment[1:]
        if token.endswith("?"):
            token = token[:-1]
        if token:
            tokens.append(token)
    return tokens


class ParamsParser:
    """Parses the params of one route pattern.

    Kept as a class so routes can hold on to the parser and its pattern for
    error messages; ``parse()`` is idempotent.
    """

    __slots__ = ("_tokens", "_pattern")

    def __init__(self, tokens: Iterable[str], pattern: Optional[str] = None) -> None:
        self._tokens = tuple(tokens)
        self._pattern = pattern

    @property
    def tokens(self) -> Tuple[str, ...]:
        return self._tokens

    def parse(self) -> Tuple[Param, ...]:
        return build_graph(self._tokens, self._pattern)
