"""Tests for the binding registry tables."""

import threading

import pytest

from smartbind import BindingDescriptor, BindingRegistry


class Context:
    pass


class Post:
    pass


class Comment:
    pass


class BaseController:
    pass


class ChildController(BaseController):
    pass


class GrandChildController(ChildController):
    pass


def test_register_skips_context_parameter():
    registry = BindingRegistry()
    registry.register(BaseController, "show", [Context, Post])
    assert registry.bindings_for(BaseController, "show") == (BindingDescriptor(0, Post),)


def test_register_keeps_declaration_order_and_names():
    registry = BindingRegistry()
    registry.register(BaseController, "show", [Context, Post, Comment], names=["ctx", "post", "comment"])
    descriptors = registry.bindings_for(BaseController, "show")
    assert [d.kind for d in descriptors] == [Post, Comment]
    assert [d.position for d in descriptors] == [0, 1]
    assert [d.name for d in descriptors] == ["post", "comment"]
    assert descriptors[1].kind_name == "Comment"


def test_context_only_method_registers_empty_sequence():
    registry = BindingRegistry()
    registry.register(BaseController, "index", [Context])
    assert registry.bindings_for(BaseController, "index") == ()
    assert registry.bindings_for(BaseController, "missing") is None
    assert registry.bindings_for(Post, "show") is None


def test_duplicate_registration_appends():
    registry = BindingRegistry()
    registry.register(BaseController, "show", [Context, Post])
    registry.register(BaseController, "show", [Context, Post])
    assert len(registry.bindings_for(BaseController, "show")) == 2


def test_subtype_reads_through_until_first_write():
    registry = BindingRegistry()
    registry.register(BaseController, "show", [Context, Post])
    assert not registry.has_own_table(ChildController)
    assert registry.bindings_for(ChildController, "show") == (BindingDescriptor(0, Post),)
    # Later base registrations are visible while the child has no table.
    registry.register(BaseController, "edit", [Context, Post])
    assert registry.bindings_for(ChildController, "edit") is not None


def test_subtype_registration_does_not_touch_base():
    registry = BindingRegistry()
    registry.register(BaseController, "show", [Context, Post])
    registry.register(ChildController, "reply", [Context, Post, Comment])
    registry.register(ChildController, "show", [Context, Comment])

    assert registry.table(BaseController) == {"show": (BindingDescriptor(0, Post),)}
    child = registry.table(ChildController)
    assert child["show"] == (BindingDescriptor(0, Post), BindingDescriptor(0, Comment))
    assert [d.kind for d in child["reply"]] == [Post, Comment]


def test_base_registration_does_not_leak_into_diverged_subtype():
    registry = BindingRegistry()
    registry.register(BaseController, "show", [Context, Post])
    registry.register(ChildController, "reply", [Context, Comment])
    registry.register(BaseController, "destroy", [Context, Post])
    registry.register(BaseController, "show", [Context, Comment])

    assert registry.bindings_for(ChildController, "destroy") is None
    assert registry.bindings_for(ChildController, "show") == (BindingDescriptor(0, Post),)
    assert len(registry.bindings_for(BaseController, "show")) == 2


def test_grandchild_snapshots_nearest_ancestor():
    registry = BindingRegistry()
    registry.register(BaseController, "show", [Context, Post])
    registry.register(ChildController, "reply", [Context, Comment])
    registry.register(GrandChildController, "extra", [Context])
    table = registry.table(GrandChildController)
    assert set(table) == {"show", "reply", "extra"}
    assert set(registry.table(ChildController)) == {"show", "reply"}


def test_table_returns_detached_copy():
    registry = BindingRegistry()
    registry.register(BaseController, "show", [Context, Post])
    table = registry.table(BaseController)
    table["show"] = ()
    assert registry.bindings_for(BaseController, "show") == (BindingDescriptor(0, Post),)


def test_describe_lists_own_tables():
    registry = BindingRegistry()
    registry.register(BaseController, "show", [Context, Post, Comment])
    assert registry.describe() == {"BaseController": {"show": ["Post", "Comment"]}}
    assert registry.owners() == (BaseController,)


def test_freeze_blocks_registration():
    registry = BindingRegistry()
    registry.freeze()
    assert registry.frozen
    with pytest.raises(RuntimeError):
        registry.register(BaseController, "show", [Context, Post])
    registry.clear()
    registry.register(BaseController, "show", [Context, Post])


def test_register_validates_arguments():
    registry = BindingRegistry()
    with pytest.raises(TypeError):
        registry.register(BaseController(), "show", [Context])  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        registry.register(BaseController, "", [Context])


def test_concurrent_subtype_registration_is_isolated():
    registry = BindingRegistry()
    registry.register(BaseController, "show", [Context, Post])
    subclasses = [type(f"Sub{i}", (BaseController,), {}) for i in range(8)]
    barrier = threading.Barrier(len(subclasses))

    def worker(cls):
        barrier.wait()
        registry.register(cls, "own", [Context, Comment])

    threads = [threading.Thread(target=worker, args=(cls,)) for cls in subclasses]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert set(registry.table(BaseController)) == {"show"}
    for cls in subclasses:
        assert set(registry.table(cls)) == {"show", "own"}


def test_introspection_during_concurrent_registration():
    registry = BindingRegistry()
    subclasses = [type(f"Busy{i}", (BaseController,), {}) for i in range(200)]
    done = threading.Event()
    errors = []

    def writer():
        for cls in subclasses:
            registry.register(cls, "show", [Context, Post])
        done.set()

    def reader():
        try:
            while not done.is_set():
                registry.describe()
                registry.owners()
        except RuntimeError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(registry.owners()) == len(subclasses)


def test_redefined_method_can_replace_inherited_sequence():
    registry = BindingRegistry()
    registry.register(BaseController, "show", [Context, Post])
    registry.register(ChildController, "show", [Context, Comment], replace=True)
    assert registry.bindings_for(ChildController, "show") == (BindingDescriptor(0, Comment),)
    assert registry.bindings_for(BaseController, "show") == (BindingDescriptor(0, Post),)
