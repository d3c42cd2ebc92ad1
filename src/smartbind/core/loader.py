"""Resource loading driver.

The actual data-store query is supplied by the application as
``find(param, value, parent)``, sync or async:

- ``param`` is the :class:`Param` being loaded (``lookup_key`` tells which
  field to match, ``PRIMARY_KEY`` meaning the primary identifier);
- ``value`` is the raw path value for ``param.name``;
- ``parent`` is the already-loaded resource of ``param.parent`` for scoped
  params, ``None`` otherwise.

``ResourceLoader.load(matched, resources=None)`` walks
``matched.resolved_params`` in order, so parents are always loaded before
the params scoped to them, and stores each result in the request's
:class:`ResourceMap`. A finder may return a :class:`Resource` to tag the
instance with an explicit kind.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Optional

from smartbind.core.errors import ConfigurationError, ResourceNotFoundError
from smartbind.core.params import Param
from smartbind.core.resources import Resource, ResourceMap

__all__ = ["ResourceLoader"]

logger = logging.getLogger(__name__)


class ResourceLoader:
    """Populates a :class:`ResourceMap` for a matched route."""

    __slots__ = ("_find",)

    def __init__(self, find: Callable[[Param, str, Any], Any]) -> None:
        if not callable(find):
            raise TypeError("find must be callable")
        self._find = find

    async def load(self, matched: Any, resources: Optional[ResourceMap] = None) -> ResourceMap:
        resources = resources if resources is not None else ResourceMap()
        values = getattr(matched, "values", {}) or {}
        for param in matched.resolved_params:
            if param is None or param.name not in values:
                continue
            parent = None
            if param.scoped:
                if param.parent not in resources:
                    raise ConfigurationError(
                        f"Scoped parameter {param.name!r} needs {param.parent!r} loaded first"
                    )
                parent = resources[param.parent]
            found = self._find(param, values[param.name], parent)
            if inspect.isawaitable(found):
                found = await found
            if found is None:
                raise ResourceNotFoundError(
                    f"No {param.name!r} found for {param.lookup_key}={values[param.name]!r}"
                )
            if isinstance(found, Resource):
                resources.set(param.name, found.instance, kind=found.kind)
            else:
                resources.set(param.name, found)
            logger.debug("loaded %s=%r", param.name, values[param.name])
        return resources
