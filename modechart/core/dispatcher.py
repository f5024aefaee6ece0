# modechart/core/dispatcher.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Mapping, Optional

from modechart.core.errors import ActionError
from modechart.core.keymap import KeyBinding, Keymap, KeymapState, load_keymap
from modechart.interfaces.protocols import TimerService
from modechart.interfaces.types import ActionID, StateID
from modechart.runtime.timers import DEFAULT_DELAY_MS, ThreadingTimerService

logger = logging.getLogger(__name__)

__all__ = [
    "DispatchResult",
    "DispatcherConfig",
    "KeyBinding",
    "KeyDispatcher",
    "Keymap",
    "KeymapState",
    "load_keymap",
]


@dataclass(frozen=True)
class DispatcherConfig:
    """
    Tunables for KeyDispatcher.

    :param reset_delay_ms: Inactivity delay before a non-sticky mode reverts to the initial state.
    :param wildcard: Key label of the catch-all binding.
    :param append_action: Action that appends the key to the command buffer.
    :param execute_action: Action that hands the command buffer to the consumer and clears it.
    """

    reset_delay_ms: float = DEFAULT_DELAY_MS
    wildcard: str = "*"
    append_action: ActionID = "appendCommandChar"
    execute_action: ActionID = "executeCommand"

    def __post_init__(self) -> None:
        if self.reset_delay_ms <= 0:
            raise ValueError("reset_delay_ms must be positive")


@dataclass(frozen=True)
class DispatchResult:
    """What one handle_event() call did."""

    key: str
    source: StateID
    state: StateID
    action: Optional[ActionID] = None
    matched: bool = True
    wildcard: bool = False

    @property
    def state_changed(self) -> bool:
        return self.source != self.state


def key_name(event: Any) -> str:
    """
    Derive the key label used for binding lookup: the event's key identity,
    passed through unchanged.
    """
    if isinstance(event, str):
        return event
    if isinstance(event, Mapping):
        return str(event["key"])
    return str(event.key)


class KeyDispatcher:
    """
    Modal key dispatcher. Each key press is looked up in the current mode's
    bindings (exact key first, then the wildcard) and either switches mode or
    invokes an action on the bound consumer.

    Actions are single-shot: after one fires the dispatcher returns to the
    initial mode unless the current mode is sticky. Every non-sticky mode is
    also bounded by an inactivity timer, so a half-typed prefix chord cannot
    linger. At most one reset timer is pending at any time.

    Key events and timer callbacks are serialized through a re-entrant lock.
    """

    def __init__(
        self,
        keymap: Keymap,
        consumer: Any = None,
        timers: Optional[TimerService] = None,
        config: Optional[DispatcherConfig] = None,
        action_methods: Optional[Mapping[ActionID, str]] = None,
    ) -> None:
        """
        :param keymap: Shared key binding table.
        :param consumer: Object implementing the actions; may be None.
        :param timers: Timer service for the inactivity reset. Defaults to ThreadingTimerService.
        :param config: Dispatcher tunables.
        :param action_methods: Static mapping from action identifier to consumer method name.
            Defaults to using the identifier itself as the method name.
        """
        self._keymap = keymap
        self._config = config or DispatcherConfig()
        self._timers = timers if timers is not None else ThreadingTimerService()
        if action_methods is None:
            action_methods = {action: action for action in keymap.actions}
        self._action_methods: Dict[ActionID, str] = dict(action_methods)
        self._handlers: Dict[ActionID, Callable[[Any], None]] = {}
        self._lock = threading.RLock()
        self._current_state: StateID = keymap.initial
        self._command_buffer = ""
        self._reset_handle: Optional[Hashable] = None
        self._reset_token: Optional[object] = None
        self.bind_consumer(consumer)

    @property
    def keymap(self) -> Keymap:
        return self._keymap

    @property
    def config(self) -> DispatcherConfig:
        return self._config

    @property
    def current_state(self) -> StateID:
        return self._current_state

    @property
    def command_buffer(self) -> str:
        return self._command_buffer

    @property
    def pending_reset(self) -> bool:
        return self._reset_handle is not None

    def bind_consumer(self, consumer: Any) -> None:
        """
        Resolve every known action to a bound method of ``consumer`` once. Actions
        the consumer does not implement are left unbound and become no-ops.
        """
        handlers: Dict[ActionID, Callable[[Any], None]] = {}
        if consumer is not None:
            for action, method in self._action_methods.items():
                fn = getattr(consumer, method, None)
                if callable(fn):
                    handlers[action] = fn
        with self._lock:
            self._consumer = consumer
            self._handlers = handlers

    def is_bound(self, action: ActionID) -> bool:
        return action in self._handlers

    def handle_event(self, event: Any) -> DispatchResult:
        """
        Process one key press.

        :param event: KeyEvent, a mapping with a ``key`` entry, or anything with a ``key`` attribute.
        :raises ActionError: If the consumer's action raises. The dispatcher has
            already fallen back to the initial mode unless the mode is sticky.
        """
        with self._lock:
            self.cancel_pending_reset()

            key = key_name(event)
            source = self._current_state
            bindings = self._keymap[source].on
            binding = bindings.get(key)
            wildcard = False
            if binding is None:
                binding = bindings.get(self._config.wildcard)
                wildcard = binding is not None

            if binding is None:
                logger.warning("No action for key %s in state %s", key, source)
                self._enter(self._keymap.initial)
                result = DispatchResult(key, source, self._current_state, matched=False)
            elif not binding.is_action:
                # a prefix mode falling through to its catch-all did not complete a chord
                chord_missed = wildcard and self._keymap.is_transient(source)
                if chord_missed:
                    logger.warning("No action for key %s in state %s", key, source)
                self._enter(binding.target)
                logger.debug("Transitioned to state: %s", self._current_state)
                result = DispatchResult(key, source, self._current_state, matched=not chord_missed, wildcard=wildcard)
            else:
                try:
                    self._perform(binding.target, key, event)
                finally:
                    if not self._keymap.is_sticky(self._current_state):
                        self._enter(self._keymap.initial)
                result = DispatchResult(key, source, self._current_state, action=binding.target, wildcard=wildcard)

            if not self._keymap.is_sticky(self._current_state):
                self.schedule_reset()
            return result

    def schedule_reset(self) -> None:
        """
        Replace any pending reset timer with a fresh one. Sticky modes are exempt
        from the inactivity reset, so in a sticky mode this only drops the pending timer.
        """
        with self._lock:
            self.cancel_pending_reset()
            if self._keymap.is_sticky(self._current_state):
                return
            token = object()
            self._reset_token = token
            self._reset_handle = self._timers.schedule_once(self._config.reset_delay_ms, lambda: self._on_timeout(token))

    def cancel_pending_reset(self) -> None:
        with self._lock:
            if self._reset_handle is not None:
                self._timers.cancel(self._reset_handle)
                self._reset_handle = None
            self._reset_token = None

    def reset(self) -> None:
        """Return to the initial mode immediately and drop any pending timer."""
        with self._lock:
            self.cancel_pending_reset()
            self._enter(self._keymap.initial)

    def _on_timeout(self, token: object) -> None:
        with self._lock:
            if token is not self._reset_token:
                return
            self._reset_handle = None
            self._reset_token = None
            if self._keymap.is_sticky(self._current_state):
                return
            if self._current_state != self._keymap.initial:
                self._enter(self._keymap.initial)
                logger.info("State reset to: %s due to timeout", self._current_state)

    def _enter(self, state: StateID) -> None:
        if state != self._current_state:
            self._command_buffer = ""
        self._current_state = state

    def _perform(self, action: ActionID, key: str, event: Any) -> None:
        logger.debug("Performing action: %s", action)
        payload = event
        if action == self._config.append_action:
            self._command_buffer += key
        elif action == self._config.execute_action:
            payload, self._command_buffer = self._command_buffer, ""

        handler = self._handlers.get(action)
        if handler is None:
            logger.debug("No handler bound for action %s", action)
            return
        try:
            handler(payload)
        except Exception as e:
            raise ActionError(action, "action", self._current_state, key) from e
