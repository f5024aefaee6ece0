# modechart/plugins/app_charts.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Application lifecycle charts: phase, runtime and environment, coordinated
through a ChartCoordinator.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from modechart.core.actions import ActionRegistry, assign, assign_from_event, log_message
from modechart.core.chart import StateMachine, TransitionResult
from modechart.core.coordinator import ChartCoordinator
from modechart.core.guards import GuardRegistry
from modechart.core.table import TransitionTable

logger = logging.getLogger(__name__)


class PhaseStates:
    INITIALIZE = "initialize"
    LOAD = "load"
    RUN = "run"
    CLEANUP = "cleanup"


class RuntimeStates:
    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"


class EnvironmentStates:
    NORMAL = "normal"
    DEBUG = "debug"
    MOBILE = "mobile"


PHASE_CHART: Dict[str, Any] = {
    "initial": PhaseStates.INITIALIZE,
    "context": {"progress": 0},
    "states": {
        PhaseStates.INITIALIZE: {
            "entry": ["logEnterInitialize"],
            "on": {"LOAD": {"target": PhaseStates.LOAD, "actions": ["logToLoad"]}},
        },
        PhaseStates.LOAD: {
            "entry": ["logEnterLoad"],
            "on": {"RUN": {"target": PhaseStates.RUN, "actions": ["logToRun"]}},
        },
        PhaseStates.RUN: {
            "entry": ["logEnterRun"],
            "on": {"CLEANUP": {"target": PhaseStates.CLEANUP, "actions": ["logToCleanup"]}},
        },
        PhaseStates.CLEANUP: {
            "entry": ["logEnterCleanup"],
            "on": {"INITIALIZE": {"target": PhaseStates.INITIALIZE, "actions": ["logRestart"]}},
        },
    },
}

RUNTIME_CHART: Dict[str, Any] = {
    "initial": RuntimeStates.IDLE,
    "context": {"operationCount": 0, "activeLayer": None},
    "states": {
        RuntimeStates.IDLE: {
            "on": {
                "ACTIVATE": {
                    "target": RuntimeStates.ACTIVE,
                    "actions": ["setActiveLayer", "logActivated"],
                    "guard": "hasActiveLayer",
                },
            },
        },
        RuntimeStates.ACTIVE: {
            "entry": ["logRuntimeActive"],
            "on": {
                "PAUSE": {"target": RuntimeStates.PAUSED, "actions": ["logPausing"]},
                "IDLE": {"target": RuntimeStates.IDLE, "actions": ["logRuntimeIdle"]},
            },
        },
        RuntimeStates.PAUSED: {
            "on": {"RESUME": {"target": RuntimeStates.ACTIVE, "actions": ["logResuming"]}},
        },
    },
}

ENVIRONMENT_CHART: Dict[str, Any] = {
    "initial": EnvironmentStates.NORMAL,
    "context": {"screenSize": "large", "debugMode": False},
    "states": {
        EnvironmentStates.NORMAL: {
            "on": {
                "ENTER_DEBUG": {"target": EnvironmentStates.DEBUG, "actions": ["enableDebug", "logEnterDebug"]},
                "ENTER_MOBILE": {"target": EnvironmentStates.MOBILE, "actions": ["smallScreen", "logEnterMobile"]},
            },
        },
        EnvironmentStates.DEBUG: {
            "on": {"EXIT_DEBUG": {"target": EnvironmentStates.NORMAL, "actions": ["disableDebug", "logExitDebug"]}},
        },
        EnvironmentStates.MOBILE: {
            "on": {"EXIT_MOBILE": {"target": EnvironmentStates.NORMAL, "actions": ["largeScreen", "logExitMobile"]}},
        },
    },
}


def default_registry() -> ActionRegistry:
    """Actions referenced by the phase, runtime and environment charts."""
    registry = ActionRegistry()
    registry.register("logEnterInitialize", log_message("Entering INITIALIZE"))
    registry.register("logEnterLoad", log_message("Entering LOAD"))
    registry.register("logEnterRun", log_message("Entering RUN"))
    registry.register("logEnterCleanup", log_message("Entering CLEANUP"))
    registry.register("logToLoad", log_message("Transitioning to LOAD"))
    registry.register("logToRun", log_message("Transitioning to RUN"))
    registry.register("logToCleanup", log_message("Transitioning to CLEANUP"))
    registry.register("logRestart", log_message("Restarting"))

    registry.register("setActiveLayer", assign_from_event("activeLayer"))
    registry.register("logActivated", log_message("Activated runtime with layer: {activeLayer}"))
    registry.register("logRuntimeActive", log_message("Runtime is now ACTIVE"))
    registry.register("logPausing", log_message("Pausing runtime"))
    registry.register("logRuntimeIdle", log_message("Runtime is now IDLE"))
    registry.register("logResuming", log_message("Resuming runtime"))

    registry.register("enableDebug", assign("debugMode", True))
    registry.register("disableDebug", assign("debugMode", False))
    registry.register("smallScreen", assign("screenSize", "small"))
    registry.register("largeScreen", assign("screenSize", "large"))
    registry.register("logEnterDebug", log_message("Entering DEBUG mode"))
    registry.register("logExitDebug", log_message("Exiting DEBUG mode"))
    registry.register("logEnterMobile", log_message("Entering MOBILE mode"))
    registry.register("logExitMobile", log_message("Exiting MOBILE mode"))
    return registry


def default_guards() -> GuardRegistry:
    guards = GuardRegistry()

    @guards.register("hasActiveLayer")
    def has_active_layer(context: Dict[str, Any], event_data: Dict[str, Any]) -> bool:
        return "activeLayer" in event_data

    return guards


def build_tables(
    actions: Optional[ActionRegistry] = None, guards: Optional[GuardRegistry] = None
) -> Dict[str, TransitionTable]:
    actions = actions or default_registry()
    guards = guards or default_guards()
    return {
        "phase": TransitionTable.from_dict(PHASE_CHART, actions, guards),
        "runtime": TransitionTable.from_dict(RUNTIME_CHART, actions, guards),
        "environment": TransitionTable.from_dict(ENVIRONMENT_CHART, actions, guards),
    }


def create_coordinator(tables: Optional[Dict[str, TransitionTable]] = None) -> ChartCoordinator:
    """
    Build a coordinator with fresh phase, runtime and environment machines.
    Tables may be shared between coordinators; machines never are.
    """
    tables = tables or build_tables()
    return ChartCoordinator({name: StateMachine(table, name=name) for name, table in tables.items()})


def orchestrate(coordinator: ChartCoordinator, active_layer: str) -> Optional[TransitionResult]:
    """
    Cross-chart rule: once the phase chart is running, activate the runtime on
    ``active_layer``, noting when the environment is in debug mode.

    :return: The runtime chart's result, or None when the phase is not RUN.
    """
    if not coordinator.in_states(phase=PhaseStates.RUN):
        return None
    if coordinator.in_states(environment=EnvironmentStates.DEBUG):
        logger.info("Running in debug mode")
    return coordinator.send("runtime", "ACTIVATE", {"activeLayer": active_layer})
