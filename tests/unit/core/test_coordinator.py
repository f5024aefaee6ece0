# tests/unit/core/test_coordinator.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import copy

import pytest

from modechart.core.chart import StateMachine, TransitionResult
from modechart.core.coordinator import ChartCoordinator
from modechart.core.errors import UnknownChartError, ValidationError
from modechart.core.table import StateDefinition, TransitionTable


@pytest.fixture
def coordinator(runtime_table):
    other = TransitionTable(
        "normal",
        [StateDefinition("normal", on={"ENTER_DEBUG": "debug"}), StateDefinition("debug", on={"EXIT_DEBUG": "normal"})],
    )
    return ChartCoordinator({"runtime": StateMachine(runtime_table), "environment": StateMachine(other)})


def test_get_state_and_send(coordinator):
    assert coordinator.get_state("runtime") == "idle"
    result = coordinator.send("runtime", "ACTIVATE", {"activeLayer": "ui"})
    assert result is TransitionResult.TAKEN
    assert coordinator.get_state("runtime") == "active"
    assert coordinator.get_context("runtime")["activeLayer"] == "ui"


def test_send_propagates_no_op_outcomes(coordinator):
    assert coordinator.send("runtime", "PAUSE") is TransitionResult.NO_TRANSITION
    assert coordinator.send("runtime", "ACTIVATE") is TransitionResult.GUARD_REJECTED


def test_unknown_chart(coordinator):
    with pytest.raises(UnknownChartError) as exc_info:
        coordinator.get_state("phase")
    assert exc_info.value.chart_name == "phase"
    with pytest.raises(UnknownChartError):
        coordinator.send("phase", "LOAD")
    with pytest.raises(UnknownChartError):
        coordinator["phase"]
    with pytest.raises(UnknownChartError):
        coordinator.unregister("phase")


def test_send_leaves_other_charts_alone(coordinator):
    env_before = copy.deepcopy(coordinator.get_context("environment"))
    coordinator.send("runtime", "ACTIVATE", {"activeLayer": "ui"})
    assert coordinator.get_state("environment") == "normal"
    assert coordinator.get_context("environment") == env_before


def test_register_duplicate_rejected(coordinator, runtime_table):
    with pytest.raises(ValidationError):
        coordinator.register("runtime", StateMachine(runtime_table))


def test_register_and_unregister(coordinator, runtime_table):
    extra = StateMachine(runtime_table)
    coordinator.register("extra", extra)
    assert "extra" in coordinator
    assert coordinator.machine("extra") is extra
    assert coordinator.unregister("extra") is extra
    assert "extra" not in coordinator


def test_snapshot_names_and_in_states(coordinator):
    coordinator.send("environment", "ENTER_DEBUG")
    assert coordinator.snapshot() == {"runtime": "idle", "environment": "debug"}
    assert coordinator.names() == ["runtime", "environment"]
    assert list(coordinator) == ["runtime", "environment"]
    assert len(coordinator) == 2
    assert coordinator.in_states(runtime="idle", environment="debug") is True
    assert coordinator.in_states(runtime="active", environment="debug") is False
    with pytest.raises(UnknownChartError):
        coordinator.in_states(phase="run")
