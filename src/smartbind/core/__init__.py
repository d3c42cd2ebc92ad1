"""Core runtime aggregator (source of truth).

Purpose: expose the binding building blocks from a single module. No extra
logic beyond imports/exports.

Guarantees
----------
- Importing this module performs only imports; it does not register plugins
  or bootstrap controllers.
- Public API mirrors underlying modules 1:1:
  * ``params`` → token parser and graph builder
  * ``route`` → ``Route``/``MatchedRoute`` collaborators
  * ``handlers`` → lazy handler references
  * ``registry`` → ``BindingRegistry`` and ``default_registry``
  * ``decorators``/``controller`` → ``bind``, ``bootstrap``, ``BindableController``
  * ``resources``/``loader`` → per-request ``ResourceMap`` and its loader
  * ``resolver`` → ``ArgumentResolver``
"""

from .controller import BindableController, bootstrap
from .decorators import bind
from .errors import (
    BindingError,
    ConfigurationError,
    HandlerResolutionError,
    MissingResourceError,
    ResourceKindError,
    ResourceNotFoundError,
)
from .handlers import HandlerReference, ResolvedHandler, resolve_route_handler
from .loader import ResourceLoader
from .params import PRIMARY_KEY, Param, ParamsParser, build_graph, extract_tokens, parse_param
from .registry import BindingDescriptor, BindingRegistry, default_registry
from .resolver import ArgumentResolver, Resolution, default_resolver, resolver_for
from .resources import Resource, ResourceMap
from .route import MatchedRoute, Route

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
    "ParamsParser",
    "Resolution",
    "ResolvedHandler",
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
    "default_resolver",
    "extract_tokens",
    "parse_param",
    "resolve_route_handler",
    "resolver_for",
]
