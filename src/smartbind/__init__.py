"""SmartBind public API surface (source of truth).

Recreate the module with these rules:
- Public exports: route params (``Param``, ``parse_param``, ``build_graph``,
  ``PRIMARY_KEY``), route objects (``Route``, ``MatchedRoute``), registration
  (``bind``, ``bootstrap``, ``BindableController``, ``BindingRegistry``,
  ``default_registry``), per-request pieces (``ResourceMap``, ``Resource``,
  ``ResourceLoader``, ``ArgumentResolver``) and the error classes.
- Plugin registration: import built-in plugins (``logging``, ``strict``) for
  their side effect of calling ``ArgumentResolver.register_plugin``.
  Imports are done lazily via ``import_module`` to avoid cycles.

Constraints
-----------
- Import must stay lightweight: no resolver instantiation beyond plugin
  registration.
- Version string lives here as ``__version__``.
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import (
    PRIMARY_KEY,
    ArgumentResolver,
    BindableController,
    BindingDescriptor,
    BindingError,
    BindingRegistry,
    ConfigurationError,
    HandlerReference,
    HandlerResolutionError,
    MatchedRoute,
    MissingResourceError,
    Param,
    Resource,
    ResourceKindError,
    ResourceLoader,
    ResourceMap,
    ResourceNotFoundError,
    Route,
    bind,
    bootstrap,
    build_graph,
    default_registry,
    parse_param,
)

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging", "strict"):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "PRIMARY_KEY",
    "ArgumentResolver",
    "BindableController",
    "BindingDescriptor",
    "BindingError",
    "BindingRegistry",
    "ConfigurationError",
    "HandlerReference",
    "HandlerResolutionError",
    "MatchedRoute",
    "MissingResourceError",
    "Param",
    "Resource",
    "ResourceKindError",
    "ResourceLoader",
    "ResourceMap",
    "ResourceNotFoundError",
    "Route",
    "bind",
    "bootstrap",
    "build_graph",
    "default_registry",
    "parse_param",
]
