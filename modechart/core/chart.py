# modechart/core/chart.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from modechart.core.errors import ActionError, UnknownStateError
from modechart.core.events import ChartEvent
from modechart.core.hooks import HookManager
from modechart.core.table import ActionRef, StateDefinition, Transition, TransitionTable
from modechart.interfaces.protocols import ChartHook
from modechart.interfaces.types import EventID, StateID

logger = logging.getLogger(__name__)


class TransitionResult(Enum):
    """
    Outcome of StateMachine.transition(). Only TAKEN changes anything; the other
    two outcomes are non-fatal and leave state and context untouched.
    """

    TAKEN = "taken"
    NO_TRANSITION = "no_transition"
    GUARD_REJECTED = "guard_rejected"

    def __bool__(self) -> bool:
        return self is TransitionResult.TAKEN


class StateMachine:
    """
    Interprets a TransitionTable for one chart instance. The table is shared and
    read-only; the current state and the context belong to this instance alone.

    Processing an event runs, strictly in order: guard, exit actions of the
    current state, transition actions, state assignment, entry actions of the
    target. An action failure raises ActionError and stops the sequence where it
    failed; the state is only updated if the failure happened in entry actions.
    """

    def __init__(
        self,
        table: TransitionTable,
        context: Optional[Mapping[str, Any]] = None,
        hooks: Optional[Iterable[ChartHook]] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        :param table: Shared transition table.
        :param context: Optional overrides applied on top of a copy of the table's initial context.
        :param hooks: Optional hook objects implementing on_enter, on_exit, on_transition, on_error.
        :param name: Optional chart name used in log messages.
        """
        self._table = table
        self._name = name
        self._hook_manager = HookManager(hooks)
        self._current_state: StateID = table.initial
        self._context: Dict[str, Any] = table.initial_context
        if context:
            self._context.update(context)

    @property
    def table(self) -> TransitionTable:
        return self._table

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def current_state(self) -> StateID:
        """Get the current active state."""
        return self._current_state

    @property
    def context(self) -> Dict[str, Any]:
        """The context owned by this instance. Actions mutate it in place."""
        return self._context

    @property
    def hooks(self) -> HookManager:
        return self._hook_manager

    def get_state(self) -> StateID:
        return self._current_state

    def matches(self, state: StateID) -> bool:
        return self._current_state == state

    def can_transition(self, event: EventID, event_data: Optional[Mapping[str, Any]] = None) -> bool:
        """
        Report whether ``event`` would currently be taken, evaluating the guard
        but running no actions.
        """
        transition = self._definition().lookup(event)
        if transition is None:
            return False
        return transition.check_guard(self._context, dict(event_data or {}))

    def transition(
        self, event: Union[EventID, ChartEvent], event_data: Optional[Mapping[str, Any]] = None
    ) -> TransitionResult:
        """
        Process ``event`` from the current state.

        :param event: Event label looked up in the current state's event map, or a ChartEvent
            whose data is used when ``event_data`` is not given.
        :param event_data: Data passed to the guard and every action. Defaults to ``{}``.
        :return: TransitionResult describing what happened.
        :raises UnknownStateError: If the current state is missing from the table.
        :raises ActionError: If an action raises.
        """
        if isinstance(event, ChartEvent):
            event, event_data = event.name, event.data if event_data is None else event_data
        data = dict(event_data or {})
        source = self._current_state
        definition = self._definition()

        transition = definition.lookup(event)
        if transition is None:
            logger.warning("%sNo transition defined for event '%s' in state '%s'", self._prefix(), event, source)
            return TransitionResult.NO_TRANSITION

        if not transition.check_guard(self._context, data):
            logger.warning(
                "%sGuard condition failed for transition on event '%s' in state '%s'", self._prefix(), event, source
            )
            return TransitionResult.GUARD_REJECTED

        target_definition = self._table[transition.target]
        self._execute(transition, definition, target_definition, event, data)
        return TransitionResult.TAKEN

    def send(self, event: Union[EventID, ChartEvent], event_data: Optional[Mapping[str, Any]] = None) -> TransitionResult:
        return self.transition(event, event_data)

    def reset(self) -> None:
        """
        Return to the initial state with a fresh copy of the initial context.
        No actions run.
        """
        self._current_state = self._table.initial
        self._context = self._table.initial_context

    def _definition(self) -> StateDefinition:
        if self._current_state not in self._table:
            raise UnknownStateError(self._current_state)
        return self._table[self._current_state]

    def _execute(
        self,
        transition: Transition,
        source: StateDefinition,
        target: StateDefinition,
        event: EventID,
        data: Dict[str, Any],
    ) -> None:
        self._run_actions(source.exit, "exit", event, data)
        self._hook_manager.execute_on_exit(self, source.name)

        self._run_actions(transition.actions, "transition", event, data)

        self._current_state = target.name
        logger.debug("%sTransitioned %s --%s--> %s", self._prefix(), source.name, event, target.name)
        self._hook_manager.execute_on_transition(self, source.name, target.name, event)

        self._run_actions(target.entry, "entry", event, data)
        self._hook_manager.execute_on_enter(self, target.name)

    def _run_actions(self, actions: Iterable[ActionRef], phase: str, event: EventID, data: Dict[str, Any]) -> None:
        for action in actions:
            try:
                action(self._context, data)
            except Exception as e:
                error = ActionError(action.name, phase, self._current_state, event)
                self._hook_manager.execute_on_error(self, error)
                raise error from e

    def _prefix(self) -> str:
        return f"[{self._name}] " if self._name else ""

    def __repr__(self) -> str:
        return f"StateMachine(name={self._name!r}, state={self._current_state!r})"
