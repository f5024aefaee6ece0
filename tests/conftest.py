# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def action_registry():
    """Registry with a couple of context-mutating actions."""
    from modechart.core.actions import ActionRegistry, assign_from_event, increment

    registry = ActionRegistry()
    registry.register("setActiveLayer", assign_from_event("activeLayer"))
    registry.register("countOperation", increment("operationCount"))
    return registry


@pytest.fixture
def guard_registry():
    from modechart.core.guards import GuardRegistry

    guards = GuardRegistry()
    guards.register("hasLayer", lambda ctx, data: data.get("activeLayer") is not None)
    return guards


@pytest.fixture
def runtime_chart():
    """The idle/active/paused chart as plain data."""
    return {
        "initial": "idle",
        "context": {"operationCount": 0, "activeLayer": None, "tags": []},
        "states": {
            "idle": {"on": {"ACTIVATE": {"target": "active", "actions": ["setActiveLayer"], "guard": "hasLayer"}}},
            "active": {
                "entry": ["countOperation"],
                "on": {"PAUSE": "paused", "IDLE": "idle"},
            },
            "paused": {"on": {"RESUME": "active"}},
        },
    }


@pytest.fixture
def runtime_table(runtime_chart, action_registry, guard_registry):
    from modechart.core.table import TransitionTable

    return TransitionTable.from_dict(runtime_chart, action_registry, guard_registry)


@pytest.fixture
def machine(runtime_table):
    from modechart.core.chart import StateMachine

    return StateMachine(runtime_table, name="runtime")


@pytest.fixture
def manual_timers():
    """A deterministic timer service driven by advance()."""
    from modechart.runtime.timers import ManualTimerService

    return ManualTimerService()


@pytest.fixture
def mock_editor():
    """A consumer implementing every vim editor action as a mock."""
    from modechart.plugins.vim import ACTION_METHODS

    editor = MagicMock(spec=sorted(set(ACTION_METHODS.values())))
    return editor


@pytest.fixture
def vim_dispatcher(mock_editor, manual_timers):
    from modechart.plugins.vim import create_dispatcher

    return create_dispatcher(mock_editor, timers=manual_timers)


@pytest.fixture
def dummy_hooks():
    """A list of hook mocks for testing HookManager."""
    hook = MagicMock()
    hook.on_enter = MagicMock()
    hook.on_exit = MagicMock()
    hook.on_transition = MagicMock()
    hook.on_error = MagicMock()
    return [hook]


@pytest.fixture
def error_classes():
    """Provides a tuple of error classes for quick reference."""
    from modechart.core.errors import (
        ActionError,
        ModeChartError,
        UnknownActionError,
        UnknownChartError,
        UnknownGuardError,
        UnknownStateError,
        ValidationError,
    )

    return (
        ModeChartError,
        UnknownStateError,
        UnknownChartError,
        UnknownActionError,
        UnknownGuardError,
        ValidationError,
        ActionError,
    )


@pytest.fixture(autouse=True)
def cleanup_threads():
    yield
    # Cleanup any remaining threads after each test
    for thread in threading.enumerate():
        if thread != threading.current_thread() and thread.is_alive() and not thread.daemon:
            thread.join(timeout=1.0)
