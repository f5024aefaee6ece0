# modechart/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Iterable, List, Optional

from modechart.interfaces.protocols import ChartHook
from modechart.interfaces.types import EventID, StateID


class HookManager:
    """
    Manages the registration and execution of hooks that listen to state machine
    lifecycle events (on_enter, on_exit, on_transition, on_error). Users can attach
    logging, monitoring, or custom side effects without altering core logic.

    Hooks are plain objects; any lifecycle method a hook does not define is skipped.
    """

    def __init__(self, hooks: Optional[Iterable[ChartHook]] = None) -> None:
        """
        Initialize with an optional list of hook objects.
        """
        self._hooks: List[ChartHook] = list(hooks or [])

    @property
    def hooks(self) -> List[ChartHook]:
        return list(self._hooks)

    def register_hook(self, hook: ChartHook) -> None:
        """
        Add a new hook to the manager's list of hooks.

        :param hook: An object implementing some of the ChartHook methods.
        """
        self._hooks.append(hook)

    def execute_on_enter(self, machine: Any, state: StateID) -> None:
        """
        Run all hooks' on_enter logic when entering a state.
        """
        self._invoke("on_enter", machine, state)

    def execute_on_exit(self, machine: Any, state: StateID) -> None:
        """
        Run all hooks' on_exit logic when exiting a state.
        """
        self._invoke("on_exit", machine, state)

    def execute_on_transition(self, machine: Any, source: StateID, target: StateID, event: EventID) -> None:
        self._invoke("on_transition", machine, source, target, event)

    def execute_on_error(self, machine: Any, error: Exception) -> None:
        """
        Run all hooks' on_error logic when an action fails.
        """
        self._invoke("on_error", machine, error)

    def _invoke(self, method: str, *args: Any) -> None:
        for hook in self._hooks:
            fn = getattr(hook, method, None)
            if callable(fn):
                fn(*args)
