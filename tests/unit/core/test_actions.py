# tests/unit/core/test_actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import logging

import pytest

from modechart.core.actions import ActionRegistry, assign, assign_from_event, increment, log_message
from modechart.core.errors import UnknownActionError, UnknownGuardError, ValidationError
from modechart.core.guards import GuardRegistry, context_equals, event_has


def test_register_direct_and_get():
    registry = ActionRegistry()

    def noop(ctx, data):
        pass

    registry.register("noop", noop)
    assert registry.get("noop") is noop
    assert "noop" in registry
    assert len(registry) == 1


def test_register_as_decorator_with_and_without_name():
    registry = ActionRegistry()

    @registry.register("named")
    def first(ctx, data):
        pass

    @registry.register
    def second(ctx, data):
        pass

    assert registry.names() == ["named", "second"]
    assert registry.get("named") is first


def test_register_same_function_twice_is_allowed():
    registry = ActionRegistry()

    def fn(ctx, data):
        pass

    registry.register("fn", fn)
    registry.register("fn", fn)
    assert len(registry) == 1


def test_register_conflicting_function_raises():
    registry = ActionRegistry({"fn": lambda ctx, data: None})
    with pytest.raises(ValidationError, match="already registered"):
        registry.register("fn", lambda ctx, data: None)


def test_register_non_callable_raises():
    with pytest.raises(ValidationError, match="must be callable"):
        ActionRegistry().register("bad", 42)


def test_unknown_action_and_guard_errors():
    with pytest.raises(UnknownActionError):
        ActionRegistry().get("missing")
    with pytest.raises(UnknownGuardError):
        GuardRegistry().get("missing")


def test_merged_registry_contains_both():
    a = ActionRegistry({"a": assign("x", 1)})
    b = ActionRegistry({"b": assign("y", 2)})
    merged = a.merged(b)
    assert isinstance(merged, ActionRegistry)
    assert set(merged) == {"a", "b"}
    assert "b" not in a


def test_assign_and_increment():
    ctx = {}
    assign("debugMode", True)(ctx, {})
    increment("count")(ctx, {})
    increment("count", step=5)(ctx, {})
    assert ctx == {"debugMode": True, "count": 6}


def test_assign_from_event():
    ctx = {}
    assign_from_event("activeLayer")(ctx, {"activeLayer": "ui"})
    assign_from_event("layer", field="activeLayer")(ctx, {"activeLayer": "main"})
    assign_from_event("missing")(ctx, {})
    assert ctx == {"activeLayer": "ui", "layer": "main", "missing": None}


def test_log_message_formats_with_context(caplog):
    with caplog.at_level(logging.INFO, logger="modechart.core.actions"):
        log_message("layer: {activeLayer}")({"activeLayer": "ui"}, {})
        log_message("missing: {nope}")({}, {})
        log_message("layer name: {activeLayer.name}")({"activeLayer": "ui"}, {})
        log_message("count: {n:d}")({"n": "three"}, {})
    assert "layer: ui" in caplog.text
    assert "missing: {nope}" in caplog.text
    assert "layer name: {activeLayer.name}" in caplog.text
    assert "count: {n:d}" in caplog.text


def test_builtin_guards():
    assert context_equals("mode", "run")({"mode": "run"}, {}) is True
    assert context_equals("mode", "run")({}, {}) is False
    assert event_has("activeLayer")({}, {"activeLayer": "ui"}) is True
    assert event_has("activeLayer")({}, {"activeLayer": None}) is False
