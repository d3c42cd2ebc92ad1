"""Strict binding plugin.

Promotes silently omitted argument slots to :class:`MissingResourceError`.
Without this plugin (and without the ``strict`` resolver option) a handler
whose resource was not loaded simply receives fewer arguments.

- ``configure(disabled=False)``: resolver-level or per ``"Owner.method"``
  target, e.g. ``resolver.strict.configure(_target="Legacy.show", disabled=True)``
  keeps lenient behaviour for one handler.
- Registers itself globally as ``"strict"`` at import time.
"""

from __future__ import annotations

from typing import Callable

from smartbind.core.errors import MissingResourceError
from smartbind.core.resolver import ArgumentResolver, Resolution
from smartbind.plugins._base_plugin import BasePlugin

__all__ = ["StrictPlugin"]


class StrictPlugin(BasePlugin):
    """Reject resolutions that skipped a bindable slot."""

    plugin_code = "strict"
    plugin_description = "Raises when a bindable handler parameter has no loaded resource"

    def configure(self, disabled: bool = False):
        """Configure strict plugin options.

        The wrapper added by __init_subclass__ handles writing to store.
        """
        pass

    def wrap_resolve(self, resolver, call_next: Callable):
        async def strict(resolution: Resolution) -> Resolution:
            result = await call_next(resolution)
            if self.configuration(result.target).get("disabled") or not result.skipped:
                return result
            names = ", ".join(
                d.name or f"#{d.position}" for d in result.skipped
            )
            raise MissingResourceError(f"{result.target}: no resource loaded for {names}")

        return strict


ArgumentResolver.register_plugin(StrictPlugin)
