"""Tests for handler argument resolution."""

import asyncio

import pytest

from smartbind import (
    ArgumentResolver,
    BindableController,
    BindingRegistry,
    HandlerResolutionError,
    MissingResourceError,
    ResourceKindError,
    ResourceMap,
    Route,
    bind,
)
from smartbind.core.resolver import resolver_for


class HttpContext:
    def __init__(self, resources=None):
        self.resources = resources if resources is not None else ResourceMap()


class Post:
    def __init__(self, slug):
        self.slug = slug


class Comment:
    def __init__(self, ident):
        self.ident = ident


registry = BindingRegistry()


class CommentsController(BindableController):
    __smartbind_registry__ = registry

    @bind(HttpContext, Post, Comment)
    def show(self, ctx, post, comment=None):
        return post, comment

    @bind(HttpContext, Post)
    def edit(self, ctx, post):
        return post

    def index(self, ctx):
        return []


def run(coro):
    return asyncio.run(coro)


def make_route(handler):
    return Route("/posts/:post(slug)/comments/:>comment", handler)


def test_inline_handler_gets_context_only():
    resolver = ArgumentResolver(registry)
    ctx = HttpContext(ResourceMap({"post": Post("hello")}))
    matched = make_route(lambda c: c).match({"post": "hello", "comment": "1"})
    assert run(resolver.resolve_arguments(ctx, matched)) == [ctx]


def test_all_resources_bound_in_order():
    resolver = ArgumentResolver(registry)
    post, comment = Post("hello"), Comment(1)
    ctx = HttpContext(ResourceMap({"post": post, "comment": comment}))
    matched = make_route((CommentsController, "show")).match({"post": "hello", "comment": "1"})
    assert run(resolver.resolve_arguments(ctx, matched)) == [ctx, post, comment]


def test_missing_resource_is_skipped_without_placeholder():
    resolver = ArgumentResolver(registry)
    post = Post("hello")
    ctx = HttpContext(ResourceMap({"post": post}))
    matched = make_route((CommentsController, "show")).match({"post": "hello"})
    args = run(resolver.resolve_arguments(ctx, matched))
    assert args == [ctx, post]
    assert len(args) == 2


def test_skipped_slots_are_reported_on_resolution():
    resolver = ArgumentResolver(registry)
    ctx = HttpContext(ResourceMap({"post": Post("hello")}))
    matched = make_route((CommentsController, "show")).match({"post": "hello"})
    resolution = run(resolver.resolve(ctx, matched))
    assert resolution.target == "CommentsController.show"
    assert [d.kind for d in resolution.skipped] == [Comment]


def test_missing_resolved_param_position_is_skipped():
    resolver = ArgumentResolver(registry)
    post = Post("hello")
    ctx = HttpContext(ResourceMap({"post": post, "comment": Comment(1)}))
    matched = Route("/posts/:post", (CommentsController, "show")).match({"post": "hello"})
    assert run(resolver.resolve_arguments(ctx, matched)) == [ctx, post]


def test_method_without_bindings_gets_context_only():
    resolver = ArgumentResolver(registry)
    ctx = HttpContext(ResourceMap({"post": Post("hello")}))
    matched = make_route((CommentsController, "index")).match({"post": "hello"})
    assert run(resolver.resolve_arguments(ctx, matched)) == [ctx]


def test_explicit_resources_and_plain_mapping():
    resolver = ArgumentResolver(registry)
    post = Post("hello")
    matched = make_route((CommentsController, "edit")).match({"post": "hello"})
    assert run(resolver.resolve_arguments("ctx", matched, {"post": post})) == ["ctx", post]


def test_context_without_resources_binds_nothing():
    resolver = ArgumentResolver(registry)
    matched = make_route((CommentsController, "edit")).match({"post": "hello"})
    ctx = object()
    assert run(resolver.resolve_arguments(ctx, matched)) == [ctx]


def test_strict_option_raises_on_skipped_slot():
    resolver = ArgumentResolver(registry, strict=True)
    ctx = HttpContext(ResourceMap({"post": Post("hello")}))
    matched = make_route((CommentsController, "show")).match({"post": "hello"})
    with pytest.raises(MissingResourceError) as excinfo:
        run(resolver.resolve_arguments(ctx, matched))
    assert "comment" in str(excinfo.value)


def test_strict_can_be_turned_on_per_call():
    resolver = ArgumentResolver(registry)
    ctx = HttpContext(ResourceMap({"post": Post("hello")}))
    matched = make_route((CommentsController, "show")).match({"post": "hello"})
    with pytest.raises(MissingResourceError):
        run(resolver.resolve_arguments(ctx, matched, strict=True))


def test_kind_mismatch_is_rejected_at_consumption():
    resolver = ArgumentResolver(registry)
    ctx = HttpContext(ResourceMap({"post": Comment(1)}))
    matched = make_route((CommentsController, "edit")).match({"post": "1"})
    with pytest.raises(ResourceKindError):
        run(resolver.resolve_arguments(ctx, matched))


def test_unresolvable_reference_propagates():
    resolver = ArgumentResolver(registry)
    matched = make_route("no_such_module_for_smartbind:Nope.show").match({})
    with pytest.raises(HandlerResolutionError):
        run(resolver.resolve_arguments(HttpContext(), matched))


def test_custom_async_handler_resolver():
    calls = []

    async def lookup(handler):
        calls.append(handler)
        await asyncio.sleep(0)
        return CommentsController, "edit"

    resolver = ArgumentResolver(registry, handler_resolver=lookup)
    post = Post("hello")
    ctx = HttpContext(ResourceMap({"post": post}))
    matched = make_route("PostsController.edit").match({"post": "hello"})
    assert run(resolver.resolve_arguments(ctx, matched)) == [ctx, post]
    assert calls == ["PostsController.edit"]


def test_custom_resolver_errors_are_not_swallowed():
    def lookup(handler):
        raise LookupError("lazy import failed")

    resolver = ArgumentResolver(registry, handler_resolver=lookup)
    matched = make_route("Lazy.show").match({})
    with pytest.raises(LookupError, match="lazy import failed"):
        run(resolver.resolve_arguments(HttpContext(), matched))


def test_bad_custom_resolver_result():
    resolver = ArgumentResolver(registry, handler_resolver=lambda handler: None)
    matched = make_route("Lazy.show").match({})
    with pytest.raises(HandlerResolutionError):
        run(resolver.resolve_arguments(HttpContext(), matched))


def test_cancellation_aborts_handler_resolution():
    finished = []

    async def slow_lookup(handler):
        await asyncio.sleep(10)
        finished.append(handler)
        return CommentsController, "edit"

    resolver = ArgumentResolver(registry, handler_resolver=slow_lookup)
    matched = make_route("Slow.edit").match({})

    async def scenario():
        task = asyncio.create_task(resolver.resolve_arguments(HttpContext(), matched))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    run(scenario())
    assert finished == []


def test_controller_hook_uses_class_registry():
    post, comment = Post("hello"), Comment(2)
    ctx = HttpContext(ResourceMap({"post": post, "comment": comment}))
    matched = make_route((CommentsController, "show")).match({"post": "hello", "comment": "2"})
    args = run(CommentsController().get_handler_arguments(ctx, matched))
    assert args == [ctx, post, comment]
    assert resolver_for(registry) is resolver_for(registry)
    assert registry.shared_resolver is resolver_for(registry)
    assert resolver_for(BindingRegistry()) is not resolver_for(registry)
    assert CommentsController().show(*args) == (post, comment)


def test_get_resolve_returns_bound_coroutine_function():
    resolver = ArgumentResolver(registry)
    post = Post("hello")
    ctx = HttpContext(ResourceMap({"post": post}))
    matched = make_route((CommentsController, "show")).match({"post": "hello"})
    resolve = resolver.get_resolve(strict=False)
    assert run(resolve(ctx, matched)) == [ctx, post]
