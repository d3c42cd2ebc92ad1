"""Handler argument resolver with plugin pipeline (source of truth).

If this module disappeared, rebuild it exactly as described.
``ArgumentResolver`` turns a matched route, the binding registry and the
request's resource map into the ordered argument list of a handler call.

Resolution steps
----------------
``await resolve_arguments(context, matched, resources=None, **options)``

1. Inline handlers (plain callables) return ``[context]``; binding never
   applies to them, whatever the registry holds.
2. Handler references are resolved to ``(owner, method)``. This is the only
   suspension point: the injected ``handler_resolver`` (sync or async) or
   :func:`resolve_route_handler` is awaited directly, so cancelling the
   request cancels it. Failures propagate unchanged.
3. No descriptors registered for ``(owner, method)`` → ``[context]``.
4. Starting from ``[context]``, for each descriptor at index ``i`` the
   resolved param at ``matched.resolved_params[i]`` is looked up in the
   resource map and its instance appended (kind checked via
   ``ResourceMap.get_checked``). Missing param or missing resource → the slot
   is skipped: no placeholder, no shift. Skipped descriptors are recorded on
   the :class:`Resolution`.

``resources`` defaults to ``context.resources``; plain mappings are wrapped
into a :class:`ResourceMap`.

Options
-------
Per-call ``options`` merge over constructor defaults through ``SmartOptions``.

- ``strict`` (default False): skipped slots raise ``MissingResourceError``
  instead of being silently omitted.
- ``use_smartasync``: ``get_resolve()`` wraps ``resolve_arguments`` with
  ``smartasync.smartasync`` so sync dispatchers can call it.

Plugins
-------
``ArgumentResolver.register_plugin(plugin_class, name=None)`` keeps a global
registry keyed by ``plugin_code``; re-registering a different class under the
same code raises ``ValueError`` unless ``name`` is passed explicitly.
``plug(name, **config)`` instantiates a registered plugin for this resolver
and rebuilds the pipeline. Plugins wrap step 4 (``Resolution -> Resolution``)
in reverse attachment order, so the first attached plugin is the outermost
layer. Each layer is skipped when ``is_plugin_enabled(target, plugin)`` is
False for the handler target ``"Owner.method"``. Plugin state lives in
``_plugin_info`` with a ``"--base--"`` bucket and one bucket per target.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type

from smartseeds import SmartOptions

from smartbind.core.errors import HandlerResolutionError, MissingResourceError
from smartbind.core.handlers import ResolvedHandler, is_inline_handler, resolve_route_handler
from smartbind.core.registry import BindingDescriptor, BindingRegistry, default_registry
from smartbind.core.resources import ResourceMap
from smartbind.plugins._base_plugin import BASE_TARGET, BasePlugin

__all__ = ["ArgumentResolver", "Resolution", "default_resolver", "resolver_for"]

logger = logging.getLogger(__name__)

_PLUGIN_REGISTRY: Dict[str, Type[BasePlugin]] = {}


@dataclass
class Resolution:
    """State of one argument resolution, shared with plugins."""

    context: Any
    matched: Any
    handler: ResolvedHandler
    descriptors: Tuple[BindingDescriptor, ...]
    resources: ResourceMap
    strict: bool = False
    args: List[Any] = field(default_factory=list)
    skipped: List[BindingDescriptor] = field(default_factory=list)

    @property
    def target(self) -> str:
        return self.handler.qualname


@dataclass
class _PluginSpec:
    factory: Type[BasePlugin]
    kwargs: Dict[str, Any]

    def instantiate(self, resolver: "ArgumentResolver") -> BasePlugin:
        return self.factory(resolver, **self.kwargs)


class ArgumentResolver:
    """Builds handler argument lists from loaded resources."""

    __slots__ = (
        "registry",
        "_handler_resolver",
        "_defaults",
        "_plugin_specs",
        "_plugins",
        "_plugins_by_name",
        "_plugin_info",
        "_pipeline",
    )

    def __init__(
        self,
        registry: Optional[BindingRegistry] = None,
        *,
        handler_resolver: Optional[Callable[[Any], Any]] = None,
        strict: bool = False,
        use_smartasync: Optional[bool] = None,
        **defaults: Any,
    ) -> None:
        self.registry = registry if registry is not None else default_registry
        self._handler_resolver = handler_resolver
        merged: Dict[str, Any] = dict(defaults)
        merged.setdefault("strict", bool(strict))
        if use_smartasync is not None:
            merged.setdefault("use_smartasync", use_smartasync)
        self._defaults: Dict[str, Any] = merged
        self._plugin_specs: List[_PluginSpec] = []
        self._plugins: List[BasePlugin] = []
        self._plugins_by_name: Dict[str, BasePlugin] = {}
        self._plugin_info: Dict[str, Dict[str, Any]] = {}
        self._pipeline: Callable = self._bind

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: Type[BasePlugin], name: Optional[str] = None) -> None:
        """Register a plugin class globally under ``name`` or its ``plugin_code``."""
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> Dict[str, Type[BasePlugin]]:
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> "ArgumentResolver":
        """Attach a plugin by name (previously registered globally)."""
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        spec = _PluginSpec(plugin_class, dict(config))
        self._plugin_specs.append(spec)
        instance = spec.instantiate(self)
        self._plugins.append(instance)
        self._plugins_by_name[instance.name] = instance
        self._rebuild_pipeline()
        return self

    def iter_plugins(self) -> List[BasePlugin]:
        return list(self._plugins)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        plugin = self._plugins_by_name.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to resolver")
        return plugin

    # ------------------------------------------------------------------
    # Runtime helpers (state stored on plugin_info)
    # ------------------------------------------------------------------
    def set_plugin_enabled(self, target: str, plugin_name: str, enabled: bool = True) -> None:
        bucket = self._plugin_bucket(plugin_name)
        entry = bucket.setdefault(target, {"config": {}, "locals": {}})
        entry.setdefault("locals", {})["enabled"] = bool(enabled)

    def is_plugin_enabled(self, target: str, plugin_name: str) -> bool:
        bucket = self._plugin_bucket(plugin_name)
        entry_locals = bucket.get(target, {}).get("locals", {})
        if "enabled" in entry_locals:
            return bool(entry_locals["enabled"])
        base_locals = bucket.get(BASE_TARGET, {}).get("locals", {})
        return bool(base_locals.get("enabled", True))

    def _plugin_bucket(self, plugin_name: str) -> Dict[str, Any]:
        bucket = self._plugin_info.get(plugin_name)
        if bucket is None:
            raise AttributeError(f"No plugin named '{plugin_name}' attached to resolver")
        return bucket

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def _rebuild_pipeline(self) -> None:
        wrapped: Callable = self._bind
        for plugin in reversed(self._plugins):
            plugin_call = plugin.wrap_resolve(self, wrapped)
            wrapped = self._create_wrapper(plugin, plugin_call, wrapped)
        self._pipeline = wrapped

    def _create_wrapper(
        self, plugin: BasePlugin, plugin_call: Callable, next_call: Callable
    ) -> Callable:
        @wraps(next_call)
        async def wrapper(resolution: Resolution) -> Resolution:
            if not self.is_plugin_enabled(resolution.target, plugin.name):
                return await next_call(resolution)
            return await plugin_call(resolution)

        return wrapper

    async def _bind(self, resolution: Resolution) -> Resolution:
        resources = resolution.resources
        args: List[Any] = [resolution.context]
        skipped: List[BindingDescriptor] = []
        for index, descriptor in enumerate(resolution.descriptors):
            param = _param_at(resolution.matched, index)
            if param is None or param.name not in resources:
                skipped.append(descriptor)
                continue
            args.append(resources.get_checked(param.name, descriptor.kind))
        resolution.args = args
        resolution.skipped = skipped
        if skipped and resolution.strict:
            missing = ", ".join(_describe_slot(d) for d in skipped)
            raise MissingResourceError(f"{resolution.target}: no resource loaded for {missing}")
        return resolution

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def resolve_arguments(
        self,
        context: Any,
        matched: Any,
        resources: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> List[Any]:
        """Return ``[context, *bound_resources]`` for the matched handler."""
        resolution = await self.resolve(context, matched, resources, **options)
        if resolution is None:
            return [context]
        return list(resolution.args)

    async def resolve(
        self,
        context: Any,
        matched: Any,
        resources: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> Optional[Resolution]:
        """Like ``resolve_arguments`` but returns the full :class:`Resolution`.

        Returns ``None`` when binding does not apply (inline handler or no
        registered descriptors).
        """
        opts = SmartOptions(options, defaults=self._defaults)
        handler = matched.handler
        if is_inline_handler(handler):
            return None

        resolved = await self.resolve_handler(handler)
        descriptors = self.registry.bindings_for(resolved.owner, resolved.method)
        if descriptors is None:
            logger.debug("no bindings for %s, passing context only", resolved.qualname)
            return None

        resolution = Resolution(
            context=context,
            matched=matched,
            handler=resolved,
            descriptors=descriptors,
            resources=_as_resource_map(resources, context),
            strict=bool(getattr(opts, "strict", False)),
        )
        return await self._pipeline(resolution)

    async def resolve_handler(self, handler: Any) -> ResolvedHandler:
        if self._handler_resolver is None:
            return await resolve_route_handler(handler)
        result = self._handler_resolver(handler)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, ResolvedHandler):
            return result
        if isinstance(result, tuple) and len(result) == 2:
            return ResolvedHandler(result[0], result[1])
        raise HandlerResolutionError(f"Handler resolver returned {result!r} for {handler!r}")

    def get_resolve(self, **options: Any) -> Callable:
        """Return ``resolve_arguments`` bound to ``options``.

        When ``use_smartasync`` is true the callable is wrapped with
        ``smartasync`` so it can be called from synchronous code.
        """
        opts = SmartOptions(options, defaults=self._defaults)
        use_smartasync = getattr(opts, "use_smartasync", False)

        async def resolve(context: Any, matched: Any, resources: Any = None) -> List[Any]:
            return await self.resolve_arguments(context, matched, resources, **options)

        if use_smartasync:
            from smartasync import smartasync  # type: ignore

            return smartasync(resolve)
        return resolve


def _as_resource_map(resources: Optional[Mapping[str, Any]], context: Any) -> ResourceMap:
    if resources is None:
        resources = getattr(context, "resources", None)
    if resources is None:
        return ResourceMap()
    if isinstance(resources, ResourceMap):
        return resources
    return ResourceMap(resources)


def _param_at(matched: Any, index: int) -> Any:
    params = getattr(matched, "resolved_params", None) or ()
    if 0 <= index < len(params):
        return params[index]
    return None


def _describe_slot(descriptor: BindingDescriptor) -> str:
    label = descriptor.name or f"#{descriptor.position}"
    return f"{label} ({descriptor.kind_name})"


def resolver_for(registry: Optional[BindingRegistry] = None) -> ArgumentResolver:
    """Return the shared resolver for ``registry`` (created on first use).

    The resolver is kept on the registry itself, so both are released
    together.
    """
    registry = registry if registry is not None else default_registry
    resolver = registry.shared_resolver
    if resolver is None:
        resolver = ArgumentResolver(registry)
        registry.shared_resolver = resolver
    return resolver


def default_resolver() -> ArgumentResolver:
    return resolver_for(default_registry)
