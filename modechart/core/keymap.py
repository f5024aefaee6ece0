# modechart/core/keymap.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Union

from modechart.core.errors import UnknownStateError, ValidationError
from modechart.interfaces.types import ActionID, StateID


@dataclass(frozen=True)
class KeyBinding:
    """
    The simplified transition used by the key dispatcher: a key resolves either
    to a state (mode switch) or to an action identifier, never both.
    """

    target: str
    is_action: bool = False

    @classmethod
    def state(cls, name: StateID) -> "KeyBinding":
        return cls(name, is_action=False)

    @classmethod
    def action(cls, name: ActionID) -> "KeyBinding":
        return cls(name, is_action=True)


@dataclass(frozen=True)
class KeymapState:
    """
    One dispatcher mode.

    :param sticky: Mode survives until an explicit binding leaves it; no inactivity reset.
    :param transient: Prefix mode (``g``, ``d`` ...) resolved by the next key or the reset timer.
    """

    name: StateID
    on: Mapping[str, KeyBinding] = field(default_factory=dict)
    sticky: bool = False
    transient: bool = False

    def __post_init__(self) -> None:
        if self.sticky and self.transient:
            raise ValidationError(f"State {self.name!r} cannot be both sticky and transient")
        for key, binding in self.on.items():
            if not isinstance(binding, KeyBinding):
                raise ValidationError(
                    f"Key {key!r} in state {self.name!r} must map to a KeyBinding, got {type(binding).__name__}"
                )
        object.__setattr__(self, "on", MappingProxyType(dict(self.on)))


class Keymap:
    """
    Immutable per-mode key binding table for KeyDispatcher. Shared freely
    between dispatchers.
    """

    def __init__(self, initial: StateID, states: Iterable[KeymapState]) -> None:
        by_name: Dict[StateID, KeymapState] = {}
        for state in states:
            if state.name in by_name:
                raise ValidationError(f"Duplicate state {state.name!r}")
            by_name[state.name] = state
        if initial not in by_name:
            raise ValidationError(f"Initial state {initial!r} is not defined")
        if by_name[initial].transient:
            raise ValidationError(f"Initial state {initial!r} cannot be transient")

        actions = set()
        for state in by_name.values():
            for key, binding in state.on.items():
                if binding.is_action:
                    actions.add(binding.target)
                elif binding.target not in by_name:
                    raise ValidationError(f"Key {key!r} in state {state.name!r} targets unknown state {binding.target!r}")
        clash = actions & set(by_name)
        if clash:
            raise ValidationError(f"Identifiers used as both state and action: {sorted(clash)}")

        self._initial = initial
        self._states = MappingProxyType(by_name)
        self._actions = frozenset(actions)

    @property
    def initial(self) -> StateID:
        return self._initial

    @property
    def states(self) -> Mapping[StateID, KeymapState]:
        return self._states

    @property
    def actions(self) -> FrozenSet[ActionID]:
        """Every action identifier referenced by some binding."""
        return self._actions

    def is_sticky(self, state: StateID) -> bool:
        return self[state].sticky

    def is_transient(self, state: StateID) -> bool:
        return self[state].transient

    def __getitem__(self, state: StateID) -> KeymapState:
        try:
            return self._states[state]
        except KeyError:
            raise UnknownStateError(state) from None

    def __contains__(self, state: object) -> bool:
        return state in self._states

    def __iter__(self) -> Iterator[StateID]:
        return iter(self._states)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], actions: Optional[Iterable[ActionID]] = None) -> "Keymap":
        """
        Build a keymap from plain data::

            {
                "initial": "normal",
                "states": {
                    "normal": {"on": {"h": "moveLeft", "i": "insert", "g": "g_pressed"}},
                    "insert": {"sticky": True, "on": {"Escape": "normal", "*": "insertChar"}},
                    "g_pressed": {"transient": True, "on": {"g": "startOfDocument", "*": "normal"}},
                },
            }

        A bare string value names a state when a state of that name exists,
        otherwise it must be one of ``actions``. ``{"state": ...}`` and
        ``{"action": ...}`` spell the kind out explicitly.

        :raises ValidationError: If a bare value is neither a state nor a known action.
        """
        if "initial" not in data or "states" not in data:
            raise ValidationError("Keymap data requires 'initial' and 'states'")
        state_names = set(data["states"])
        known_actions = None if actions is None else set(actions)

        def binding(state: str, key: str, value: Union[str, Mapping[str, str]]) -> KeyBinding:
            if isinstance(value, Mapping):
                if "state" in value:
                    return KeyBinding.state(value["state"])
                if "action" in value:
                    return KeyBinding.action(value["action"])
                raise ValidationError(f"Binding for {key!r} in {state!r} needs 'state' or 'action'")
            if value in state_names:
                return KeyBinding.state(value)
            if known_actions is None or value in known_actions:
                return KeyBinding.action(value)
            raise ValidationError(f"Binding for {key!r} in {state!r} is neither a state nor a known action: {value!r}")

        states = []
        for name, spec in data["states"].items():
            spec = spec or {}
            unknown = set(spec) - {"on", "sticky", "transient"}
            if unknown:
                raise ValidationError(f"State {name!r} has unknown keys: {sorted(unknown)}")
            states.append(
                KeymapState(
                    name=name,
                    on={key: binding(name, key, value) for key, value in (spec.get("on") or {}).items()},
                    sticky=bool(spec.get("sticky", False)),
                    transient=bool(spec.get("transient", False)),
                )
            )
        return cls(data["initial"], states)

    def to_dict(self) -> Dict[str, Any]:
        states: Dict[str, Any] = {}
        for name, state in self._states.items():
            spec: Dict[str, Any] = {}
            if state.sticky:
                spec["sticky"] = True
            if state.transient:
                spec["transient"] = True
            spec["on"] = {key: binding.target for key, binding in state.on.items()}
            states[name] = spec
        return {"initial": self._initial, "states": states}


def load_keymap(path: Union[str, Path], actions: Optional[Iterable[ActionID]] = None) -> Keymap:
    """Read a JSON keymap definition from ``path``."""
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    return Keymap.from_dict(data, actions=actions)
