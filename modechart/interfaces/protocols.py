# modechart/interfaces/protocols.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Hashable, Protocol, runtime_checkable

from modechart.interfaces.types import EventID, StateID, TimerCallback


@runtime_checkable
class TimerService(Protocol):
    """
    Timer service protocol used by the key dispatcher for its inactivity reset.

    Methods:
        schedule_once(delay_ms, callback): Arrange for callback to run once after
            delay_ms milliseconds. Returns a handle usable with cancel().
        cancel(handle): Cancel a scheduled callback. Cancelling a handle that
            already fired or was already cancelled is a no-op.

    Runtime Invariants:
    - Callbacks run at most once.
    - A cancelled callback never runs.
    """

    def schedule_once(self, delay_ms: float, callback: TimerCallback) -> Hashable: ...

    def cancel(self, handle: Hashable) -> None: ...


@runtime_checkable
class ChartHook(Protocol):
    """
    Hook protocol for observing state machine lifecycle events. All methods are
    optional in practice; HookManager skips the ones a hook does not define.
    """

    def on_enter(self, machine: Any, state: StateID) -> None: ...

    def on_exit(self, machine: Any, state: StateID) -> None: ...

    def on_transition(self, machine: Any, source: StateID, target: StateID, event: EventID) -> None: ...

    def on_error(self, machine: Any, error: Exception) -> None: ...
