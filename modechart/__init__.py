# modechart/__init__.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""modechart: flat state charts and a modal key dispatcher.

Two engines live here:

- ``StateMachine`` interprets a ``TransitionTable`` with guards, ordered
  entry/exit/transition actions and a per-instance context. A
  ``ChartCoordinator`` holds several named machines.
- ``KeyDispatcher`` maps key presses through a ``Keymap`` to mode switches or
  consumer actions, resetting to the base mode after a single-shot action or
  after a period of inactivity.
"""

import logging

from modechart.core.chart import StateMachine, TransitionResult
from modechart.core.coordinator import ChartCoordinator
from modechart.core.dispatcher import DispatcherConfig, DispatchResult, KeyDispatcher, Keymap
from modechart.core.errors import (
    ActionError,
    ModeChartError,
    UnknownActionError,
    UnknownChartError,
    UnknownGuardError,
    UnknownStateError,
    ValidationError,
)
from modechart.core.events import ChartEvent, KeyEvent
from modechart.core.table import WILDCARD, StateDefinition, Transition, TransitionTable

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ActionError",
    "ChartCoordinator",
    "ChartEvent",
    "DispatchResult",
    "DispatcherConfig",
    "KeyDispatcher",
    "KeyEvent",
    "Keymap",
    "ModeChartError",
    "StateDefinition",
    "StateMachine",
    "Transition",
    "TransitionResult",
    "TransitionTable",
    "UnknownActionError",
    "UnknownChartError",
    "UnknownGuardError",
    "UnknownStateError",
    "ValidationError",
    "WILDCARD",
]
