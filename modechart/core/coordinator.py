# modechart/core/coordinator.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Dict, Iterator, List, Mapping, Optional

from modechart.core.chart import StateMachine, TransitionResult
from modechart.core.errors import UnknownChartError, ValidationError
from modechart.interfaces.types import StateID


class ChartCoordinator:
    """
    Holds named StateMachine instances and dispatches to them by name.

    The coordinator has no business logic and no cross-chart atomicity: each
    send() commits independently, and charts share nothing except what calling
    code threads through explicitly.
    """

    def __init__(self, machines: Optional[Mapping[str, StateMachine]] = None) -> None:
        self._machines: Dict[str, StateMachine] = {}
        for name, machine in (machines or {}).items():
            self.register(name, machine)

    def register(self, name: str, machine: StateMachine) -> None:
        """
        Add a chart under ``name``.

        :raises ValidationError: If the name is already taken.
        """
        if name in self._machines:
            raise ValidationError(f"Chart {name!r} is already registered")
        self._machines[name] = machine

    def unregister(self, name: str) -> StateMachine:
        try:
            return self._machines.pop(name)
        except KeyError:
            raise UnknownChartError(name) from None

    def machine(self, name: str) -> StateMachine:
        try:
            return self._machines[name]
        except KeyError:
            raise UnknownChartError(name) from None

    def get_state(self, name: str) -> StateID:
        """
        Return the current state of chart ``name``.

        :raises UnknownChartError: If no chart is registered under ``name``.
        """
        return self.machine(name).current_state

    def get_context(self, name: str) -> Dict[str, Any]:
        return self.machine(name).context

    def send(self, name: str, event: str, data: Optional[Mapping[str, Any]] = None) -> TransitionResult:
        """
        Deliver ``event`` to chart ``name`` and return its outcome unchanged.

        :raises UnknownChartError: If no chart is registered under ``name``.
        """
        return self.machine(name).transition(event, data)

    def in_states(self, **expected: StateID) -> bool:
        """
        True when every named chart is in the given state, e.g.
        ``in_states(phase="run", environment="debug")``.
        """
        return all(self.get_state(name) == state for name, state in expected.items())

    def snapshot(self) -> Dict[str, StateID]:
        return {name: machine.current_state for name, machine in self._machines.items()}

    def names(self) -> List[str]:
        return list(self._machines)

    def __getitem__(self, name: str) -> StateMachine:
        return self.machine(name)

    def __contains__(self, name: object) -> bool:
        return name in self._machines

    def __iter__(self) -> Iterator[str]:
        return iter(self._machines)

    def __len__(self) -> int:
        return len(self._machines)
