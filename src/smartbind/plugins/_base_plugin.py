"""Plugin contract definitions used by the ArgumentResolver runtime.

Source of truth
---------------
If this module were wiped except for this docstring, the implementation must be
reconstructed exactly as described below.

``BasePlugin``
    Base class every resolver plugin *must* subclass. Responsibilities:

    - offer config helpers that delegate to the owning resolver's
      ``_plugin_info`` store (no hidden per-plugin globals)
    - provide the optional hook ``wrap_resolve(resolver, call_next)`` used by
      the resolver pipeline

    Required class attributes:

    - ``plugin_code`` – unique identifier used for registration (e.g. "logging")
    - ``plugin_description`` – human-readable description of the plugin

    Constructor signature:

    ``BasePlugin(resolver, **config)``

    - ``resolver`` is required – the ArgumentResolver owning this plugin
    - ``**config`` is passed to ``configure()`` which is validated by Pydantic

    ``configure(**config)``
        Define accepted configuration parameters via method signature.
        The method is automatically wrapped by ``__init_subclass__`` to:
        - Extract and parse ``flags`` (e.g. "enabled,before:off") into booleans
        - Extract ``_target`` to determine where to write config:
          - ``"--base--"`` (default): resolver-level config
          - ``"Owner.method"``: per-handler config
          - ``"A.x,B.y"``: multiple handlers (calls recursively)
        - Apply Pydantic's ``validate_call`` for parameter validation
        - Write validated config to the store

    ``configuration(target=None)``
        returns merged configuration dict from the resolver's store
        (resolver-level + optional per-handler override).

    ``wrap_resolve`` (default identity function)
        receives the resolver and the next async callable
        (``Resolution -> Resolution``) and must return an async callable with
        the same signature.

Design constraints
~~~~~~~~~~~~~~~~~~
* The resolver only imports this module (not the concrete plugins) to avoid
  circular dependencies.
* Configuration storage stays internal to BasePlugin so all plugins behave
  consistently.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from pydantic import validate_call

__all__ = ["BasePlugin", "BASE_TARGET"]

BASE_TARGET = "--base--"


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() method to handle flags, _target, validation, and storage."""
    validated = validate_call(original_configure)

    def wrapper(
        self: "BasePlugin", *, _target: str = BASE_TARGET, flags: Optional[str] = None, **kwargs: Any
    ) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        if "," in _target:
            targets = [t.strip() for t in _target.split(",") if t.strip()]
            for t in targets:
                wrapper(self, _target=t, **kwargs)
            return

        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    return wrapper


class BasePlugin:
    """Hook interface + configuration helpers for resolver plugins."""

    __slots__ = ("name", "_resolver")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])

    def __init__(self, resolver: Any, **config: Any):
        self.name = self.plugin_code
        self._resolver = resolver
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            BASE_TARGET, {"config": {"enabled": True}, "locals": {}}
        )

    def configure(self, *, _target: str = BASE_TARGET, flags: Optional[str] = None) -> None:
        """Override in subclasses to define accepted configuration parameters.

        Args:
            _target: Where to write config. "--base--" for resolver-level,
                     "Owner.method" for per-handler, or "A.x,B.y" for multiple.
            flags: String like "enabled,before:off" parsed into booleans.
        """
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def _write_config(self, target: str, config: Dict[str, Any]) -> None:
        if not config:
            return
        store = self._get_store()
        plugin_bucket = store.setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, target: Optional[str] = None) -> Dict[str, Any]:
        """Read merged configuration (base + optional per-handler override)."""
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get(BASE_TARGET, {}).get("config", {}))
        if target:
            merged.update(plugin_bucket.get(target, {}).get("config", {}))
        return merged

    def _parse_flags(self, flags: str) -> Dict[str, bool]:
        mapping: Dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def wrap_resolve(self, resolver: Any, call_next: Callable) -> Callable:
        """Wrap argument resolution; default passthrough."""
        return call_next

    def _get_store(self) -> Dict[str, Any]:
        return getattr(self._resolver, "_plugin_info")
