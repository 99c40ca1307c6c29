"""Unit tests for HandlerRegistry — binding, scopes, activation, atomicity."""

from __future__ import annotations

import logging
import threading

import pytest

from sigilforge.core.registry import HandlerRegistry
from sigilforge.handlers import default_registry
from sigilforge.models.values import HandlerEntry


def _const(value):
    return lambda text, modifiers: value


class TestRegistration:
    def test_register_and_get(self):
        registry = HandlerRegistry()
        registry.register("i", lambda text, mods: int(text), description="integer")
        entry = registry.get("i")
        assert entry is not None
        assert entry.description == "integer"
        assert entry.handler("13", frozenset()) == 13
        assert "i" in registry

    def test_entry_defaults(self):
        registry = HandlerRegistry(name="mod")
        registry.register("x", _const(1))
        entry = registry.lookup("x")
        assert entry.modifiers is None
        assert entry.dedent_blocks is True
        assert entry.preserve_backslashes is False
        assert entry.source == "mod"

    def test_modifiers_stored_as_frozenset(self):
        registry = HandlerRegistry()
        registry.register("x", _const(1), modifiers=["a", "b"])
        assert registry.lookup("x").modifiers == frozenset("ab")

    def test_last_registration_wins(self, caplog):
        registry = HandlerRegistry()
        registry.register("x", _const("first"), source="one")
        with caplog.at_level(logging.WARNING, logger="sigilforge.core.registry"):
            registry.register("x", _const("second"), source="two")
        assert registry.lookup("x").handler("", frozenset()) == "second"
        assert "rebound" in caplog.text

    def test_case_is_significant(self):
        registry = HandlerRegistry()
        registry.register("x", _const("lower"))
        assert "X" not in registry
        assert registry.get("X") is None

    @pytest.mark.parametrize("tag", ["", "ab", "1", "~", "é"])
    def test_invalid_tag(self, tag):
        with pytest.raises(ValueError):
            HandlerRegistry().register(tag, _const(1))

    def test_handler_must_be_callable(self):
        with pytest.raises(TypeError):
            HandlerRegistry().register("x", "not callable")  # type: ignore[arg-type]

    def test_register_entry(self):
        registry = HandlerRegistry()
        registry.register_entry(HandlerEntry(tag="q", handler=_const(1), source="prebuilt"))
        assert registry.lookup("q").source == "prebuilt"

    def test_decorator(self):
        registry = HandlerRegistry()

        @registry.sigil("i", description="integer", modifiers="")
        def integer(text, modifiers):
            return int(text)

        entry = registry.lookup("i")
        assert entry.handler is integer
        assert entry.modifiers == frozenset()
        assert entry.source == __name__

    def test_unregister(self):
        registry = HandlerRegistry()
        registry.register("x", _const(1))
        assert registry.unregister("x") is True
        assert registry.unregister("x") is False
        assert "x" not in registry

    def test_lookup_missing_raises_key_error(self):
        with pytest.raises(KeyError):
            HandlerRegistry().lookup("z")


class TestScopes:
    def test_child_shadows_parent(self):
        parent = HandlerRegistry(name="outer")
        parent.register("x", _const("outer"))
        child = parent.child("inner")
        child.register("x", _const("inner"))
        assert child.lookup("x").handler("", frozenset()) == "inner"
        assert parent.lookup("x").handler("", frozenset()) == "outer"

    def test_child_sees_parent_bindings(self):
        parent = HandlerRegistry()
        parent.register("x", _const(1))
        child = parent.child()
        assert "x" in child
        assert child.parent is parent

    def test_parent_does_not_see_child_bindings(self):
        parent = HandlerRegistry()
        parent.child().register("y", _const(1))
        assert "y" not in parent

    def test_unregister_in_child_leaves_parent(self):
        parent = HandlerRegistry()
        parent.register("x", _const(1))
        child = parent.child()
        assert child.unregister("x") is False
        assert "x" in child

    def test_tags_and_entries_merge_scopes(self):
        parent = HandlerRegistry()
        parent.register("b", _const(1))
        parent.register("a", _const(1))
        child = parent.child("inner")
        child.register("a", _const(2))
        child.register("c", _const(3))
        assert child.tags() == ["a", "b", "c"]
        assert [e.source for e in child.entries()] == ["inner", "root", "inner"]


class TestActivation:
    def test_activate_sigils_mapping(self, make_handler_module):
        name = make_handler_module(
            "sf_mapping_sigils",
            "SIGILS = {'i': lambda text, mods: int(text)}\n",
        )
        registry = HandlerRegistry()
        assert registry.activate(name) == ["i"]
        assert registry.lookup("i").source == name

    def test_activate_register_function(self, make_handler_module):
        name = make_handler_module(
            "sf_register_sigils",
            "def register_sigils(registry):\n"
            "    registry.register('h', lambda text, mods: int(text, 16), description='hex')\n"
            "    registry.register('b', lambda text, mods: int(text, 2))\n",
        )
        registry = HandlerRegistry()
        assert registry.activate(name) == ["b", "h"]
        assert registry.lookup("h").handler("ff", frozenset()) == 255

    def test_activate_attribute(self, make_handler_module):
        name = make_handler_module(
            "sf_attr_sigils",
            "def install(registry):\n"
            "    registry.register('z', lambda text, mods: text[::-1])\n",
        )
        registry = HandlerRegistry()
        assert registry.activate(f"{name}:install") == ["z"]

    def test_activate_reports_rebound_tags(self, make_handler_module):
        name = make_handler_module("sf_rebind_sigils", "SIGILS = {'s': lambda text, mods: text.upper()}\n")
        registry = default_registry()
        assert registry.activate(name) == ["s"]
        assert registry.lookup("s").handler("abc", frozenset()) == "ABC"

    def test_failed_hook_publishes_nothing(self, make_handler_module):
        name = make_handler_module(
            "sf_broken_sigils",
            "def register_sigils(registry):\n"
            "    registry.register('k', lambda text, mods: text)\n"
            "    raise RuntimeError('half loaded')\n",
        )
        registry = default_registry()
        before = registry.tags()
        with pytest.raises(RuntimeError, match="half loaded"):
            registry.activate(name)
        assert "k" not in registry
        assert registry.tags() == before

    def test_hook_can_see_enclosing_scope(self, make_handler_module):
        name = make_handler_module(
            "sf_wrapping_sigils",
            "def register_sigils(registry):\n"
            "    base = registry.lookup('s').handler\n"
            "    registry.register('s', lambda text, mods: base(text, mods) + '!')\n",
        )
        registry = default_registry()
        registry.activate(name)
        assert registry.lookup("s").handler("hi", frozenset()) == "hi!"

    def test_activate_without_hooks(self, make_handler_module):
        name = make_handler_module("sf_empty_sigils", "VALUE = 1\n")
        with pytest.raises(TypeError, match="neither"):
            HandlerRegistry().activate(name)

    def test_activate_missing_module(self):
        with pytest.raises(ImportError):
            HandlerRegistry().activate("sf_definitely_missing_module")

    def test_activate_missing_attribute(self, make_handler_module):
        name = make_handler_module("sf_noattr_sigils", "SIGILS = {}\n")
        with pytest.raises(AttributeError):
            HandlerRegistry().activate(f"{name}:nope")


class TestAtomicity:
    def test_lookups_never_observe_partial_entries(self):
        registry = HandlerRegistry()
        stop = threading.Event()
        failures: list[str] = []

        def writer(n: int) -> None:
            for i in range(300):
                registry.register("x", _const((n, i)), description=f"w{n}")
                registry.register(chr(ord("a") + n), _const(i))

        def reader() -> None:
            while not stop.is_set():
                entry = registry.get("x")
                if entry is not None and (entry.tag != "x" or not callable(entry.handler)):
                    failures.append(repr(entry))

        readers = [threading.Thread(target=reader) for _ in range(3)]
        writers = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in readers + writers:
            t.start()
        for t in writers:
            t.join()
        stop.set()
        for t in readers:
            t.join()

        assert failures == []
        assert set(registry.tags()) == {"a", "b", "c", "d", "x"}


class TestDefaultRegistry:
    def test_builtin_tags(self):
        assert default_registry().tags() == [
            "C", "D", "N", "R", "S", "T", "U", "W", "c", "r", "s", "w",
        ]

    def test_fresh_instance_each_call(self):
        first = default_registry()
        first.unregister("s")
        assert "s" in default_registry()
