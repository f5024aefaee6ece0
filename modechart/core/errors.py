# modechart/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Optional


class ModeChartError(Exception):
    """
    Base exception class for errors within the modechart library.
    """


class UnknownStateError(ModeChartError):
    """
    Raised when a state identifier is not present in a transition table or keymap.
    """

    def __init__(self, state: Any, message: Optional[str] = None) -> None:
        super().__init__(message or f"Unknown state: {state!r}")
        self.state = state


class UnknownChartError(ModeChartError):
    """
    Raised when a coordinator is asked for a chart name it does not hold.
    """

    def __init__(self, chart_name: str) -> None:
        super().__init__(f"Unknown chart: {chart_name!r}")
        self.chart_name = chart_name


class UnknownActionError(ModeChartError):
    """
    Raised when an action name cannot be resolved through an action registry.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown action: {name!r}")
        self.name = name


class UnknownGuardError(ModeChartError):
    """
    Raised when a guard name cannot be resolved through a guard registry.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown guard: {name!r}")
        self.name = name


class ValidationError(ModeChartError):
    """
    Raised when table, keymap or registry data violates construction rules.
    """


class ActionError(ModeChartError):
    """
    Raised when an entry, exit or transition action fails. The underlying
    exception is available as ``__cause__``.

    :param action: Name of the failing action.
    :param phase: ``"exit"``, ``"transition"`` or ``"entry"`` for charts, ``"action"`` for the key dispatcher.
    :param state: The machine's current state when the action failed.
    :param event: The event being processed.
    """

    def __init__(self, action: str, phase: str, state: Any, event: Any) -> None:
        super().__init__(f"Action {action!r} failed during {phase} (state={state!r}, event={event!r})")
        self.action = action
        self.phase = phase
        self.state = state
        self.event = event
