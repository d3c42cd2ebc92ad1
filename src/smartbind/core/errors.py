"""Exception hierarchy for SmartBind.

Every error raised by the binding pipeline derives from :class:`BindingError`
and also from the builtin that best describes it, so callers catching
``ValueError``/``LookupError``/``TypeError`` keep working.

- ``ConfigurationError``: a route or bootstrap declaration is invalid
  (e.g. a scoped parameter at position 0). Fatal, raised at build time.
- ``HandlerResolutionError``: a lazy handler reference cannot be turned into
  an ``(owner, method)`` pair.
- ``MissingResourceError``: strict resolution found a bindable slot with no
  resource loaded for it.
- ``ResourceNotFoundError``: the loader's finder returned nothing for a value.
- ``ResourceKindError``: a resource does not match its declared kind.
"""

from __future__ import annotations

__all__ = [
    "BindingError",
    "ConfigurationError",
    "HandlerResolutionError",
    "MissingResourceError",
    "ResourceNotFoundError",
    "ResourceKindError",
]


class BindingError(Exception):
    """Base class for all SmartBind errors."""


class ConfigurationError(BindingError, ValueError):
    """Invalid route parameter or binding declaration."""


class HandlerResolutionError(BindingError, LookupError):
    """A handler reference could not be resolved."""


class MissingResourceError(BindingError, KeyError):
    """A bindable slot has no loaded resource (strict mode only)."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep messages readable.
        return str(self.args[0]) if self.args else ""


class ResourceNotFoundError(BindingError, LookupError):
    """No resource matches the lookup value of a route parameter."""


class ResourceKindError(BindingError, TypeError):
    """A resource instance does not match the kind it is tagged with."""
