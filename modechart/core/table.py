# modechart/core/table.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

from modechart.core.actions import ActionRegistry
from modechart.core.errors import UnknownStateError, ValidationError
from modechart.core.guards import GuardRegistry
from modechart.interfaces.types import ActionFunc, StateID

WILDCARD = "*"


@dataclass(frozen=True)
class ActionRef:
    """
    A named reference to an action or guard function. Tables carry these so that
    they can be reported and serialized by name.
    """

    name: str
    fn: Callable[..., Any] = field(compare=False)

    def __call__(self, *args: Any) -> Any:
        return self.fn(*args)

    @classmethod
    def of(cls, value: Union["ActionRef", Callable[..., Any]]) -> "ActionRef":
        if isinstance(value, ActionRef):
            return value
        if not callable(value):
            raise ValidationError(f"Expected a callable or ActionRef, got {value!r}")
        return cls(getattr(value, "__name__", repr(value)), value)


def _refs(values: Iterable[Union[ActionRef, ActionFunc]]) -> Tuple[ActionRef, ...]:
    return tuple(ActionRef.of(v) for v in values)


@dataclass(frozen=True)
class Transition:
    """
    Defines a path to ``target`` taken when an event matches, optionally gated by
    a guard and running ``actions`` in order between the source's exit actions
    and the target's entry actions.
    """

    target: StateID
    actions: Tuple[ActionRef, ...] = ()
    guard: Optional[ActionRef] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "actions", _refs(self.actions))
        if self.guard is not None:
            object.__setattr__(self, "guard", ActionRef.of(self.guard))

    def check_guard(self, context: Mapping[str, Any], event_data: Mapping[str, Any]) -> bool:
        """
        Evaluate the guard. A transition without a guard always passes.
        """
        if self.guard is None:
            return True
        return bool(self.guard(context, event_data))

    def to_dict(self) -> Union[str, Dict[str, Any]]:
        if not self.actions and self.guard is None:
            return self.target
        data: Dict[str, Any] = {"target": self.target}
        if self.actions:
            data["actions"] = [a.name for a in self.actions]
        if self.guard is not None:
            data["guard"] = self.guard.name
        return data


@dataclass(frozen=True)
class StateDefinition:
    """
    A single state: ordered entry and exit actions plus the event map.

    ``sticky`` and ``transient`` are used by the key dispatcher: a sticky state is
    exempt from the inactivity reset, a transient one is a prefix state expected
    to resolve on the next key. The chart engine ignores both flags.
    """

    name: StateID
    entry: Tuple[ActionRef, ...] = ()
    exit: Tuple[ActionRef, ...] = ()
    on: Mapping[str, Transition] = field(default_factory=dict)
    sticky: bool = False
    transient: bool = False

    def __post_init__(self) -> None:
        if self.sticky and self.transient:
            raise ValidationError(f"State {self.name!r} cannot be both sticky and transient")
        object.__setattr__(self, "entry", _refs(self.entry))
        object.__setattr__(self, "exit", _refs(self.exit))
        on = {}
        for event, transition in dict(self.on).items():
            if isinstance(transition, str):
                transition = Transition(transition)
            if not isinstance(transition, Transition):
                raise ValidationError(f"Transition for {event!r} in state {self.name!r} must be a Transition")
            on[event] = transition
        object.__setattr__(self, "on", MappingProxyType(on))

    def lookup(self, event: str) -> Optional[Transition]:
        return self.on.get(event)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.entry:
            data["entry"] = [a.name for a in self.entry]
        if self.exit:
            data["exit"] = [a.name for a in self.exit]
        if self.sticky:
            data["sticky"] = True
        if self.transient:
            data["transient"] = True
        data["on"] = {event: t.to_dict() for event, t in self.on.items()}
        return data


class TransitionTable:
    """
    Immutable mapping from state identifier to StateDefinition, plus the initial
    state and the declared initial context. One table may back any number of
    StateMachine instances.
    """

    def __init__(
        self,
        initial: StateID,
        states: Union[Mapping[StateID, StateDefinition], Iterable[StateDefinition]],
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        :param initial: The state every machine built from this table starts in.
        :param states: StateDefinitions, either as a mapping keyed by name or a sequence.
        :param context: Declared initial context; machines receive deep copies.
        :raises ValidationError: If the initial state or any transition target is missing.
        """
        if isinstance(states, Mapping):
            by_name = dict(states)
            for key, definition in by_name.items():
                if key != definition.name:
                    raise ValidationError(f"State key {key!r} does not match definition name {definition.name!r}")
        else:
            by_name = {}
            for definition in states:
                if definition.name in by_name:
                    raise ValidationError(f"Duplicate state {definition.name!r}")
                by_name[definition.name] = definition

        if not by_name:
            raise ValidationError("A transition table needs at least one state")
        if initial not in by_name:
            raise ValidationError(f"Initial state {initial!r} is not defined")
        for definition in by_name.values():
            for event, transition in definition.on.items():
                if transition.target not in by_name:
                    raise ValidationError(
                        f"Transition {definition.name!r} --{event}--> {transition.target!r} targets an unknown state"
                    )

        self._initial = initial
        self._states = MappingProxyType(by_name)
        self._context = copy.deepcopy(dict(context or {}))

    @property
    def initial(self) -> StateID:
        return self._initial

    @property
    def states(self) -> Mapping[StateID, StateDefinition]:
        return self._states

    @property
    def initial_context(self) -> Dict[str, Any]:
        """A fresh deep copy of the declared initial context."""
        return copy.deepcopy(self._context)

    def __getitem__(self, state: StateID) -> StateDefinition:
        try:
            return self._states[state]
        except KeyError:
            raise UnknownStateError(state) from None

    def __contains__(self, state: object) -> bool:
        return state in self._states

    def __iter__(self) -> Iterator[StateID]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __repr__(self) -> str:
        return f"TransitionTable(initial={self._initial!r}, states={list(self._states)!r})"

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        actions: Optional[ActionRegistry] = None,
        guards: Optional[GuardRegistry] = None,
    ) -> "TransitionTable":
        """
        Build a table from plain data::

            {
                "initial": "idle",
                "context": {"activeLayer": None},
                "states": {
                    "idle": {"on": {"ACTIVATE": {"target": "active", "actions": ["setLayer"]}}},
                    "active": {"entry": ["logActive"], "on": {"PAUSE": "paused"}},
                    "paused": {"on": {"RESUME": "active"}},
                },
            }

        Action and guard names are resolved through the given registries. Inline
        callables are accepted too, for tables written directly in Python.

        :raises ValidationError: If the data is malformed.
        :raises UnknownActionError: If an action name is not registered.
        :raises UnknownGuardError: If a guard name is not registered.
        """
        if "initial" not in data or "states" not in data:
            raise ValidationError("Table data requires 'initial' and 'states'")
        resolver = _Resolver(actions or ActionRegistry(), guards or GuardRegistry())
        definitions = []
        for name, spec in data["states"].items():
            spec = spec or {}
            unknown = set(spec) - {"entry", "exit", "on", "sticky", "transient"}
            if unknown:
                raise ValidationError(f"State {name!r} has unknown keys: {sorted(unknown)}")
            definitions.append(
                StateDefinition(
                    name=name,
                    entry=resolver.actions(spec.get("entry", ())),
                    exit=resolver.actions(spec.get("exit", ())),
                    on={event: resolver.transition(value) for event, value in (spec.get("on") or {}).items()},
                    sticky=bool(spec.get("sticky", False)),
                    transient=bool(spec.get("transient", False)),
                )
            )
        return cls(data["initial"], definitions, data.get("context"))

    def to_dict(self) -> Dict[str, Any]:
        """Return the serializable (names only) form of this table."""
        data: Dict[str, Any] = {"initial": self._initial}
        if self._context:
            data["context"] = copy.deepcopy(self._context)
        data["states"] = {name: definition.to_dict() for name, definition in self._states.items()}
        return data


class _Resolver:
    """
    Internal helper turning names from plain table data into ActionRefs.
    """

    def __init__(self, actions: ActionRegistry, guards: GuardRegistry) -> None:
        self._actions = actions
        self._guards = guards

    def action(self, value: Union[str, Callable[..., Any]]) -> ActionRef:
        if isinstance(value, str):
            return ActionRef(value, self._actions.get(value))
        return ActionRef.of(value)

    def actions(self, values: Iterable[Union[str, Callable[..., Any]]]) -> Tuple[ActionRef, ...]:
        if isinstance(values, str) or callable(values):
            values = [values]
        return tuple(self.action(v) for v in values)

    def guard(self, value: Union[str, Callable[..., Any]]) -> ActionRef:
        if isinstance(value, str):
            return ActionRef(value, self._guards.get(value))
        return ActionRef.of(value)

    def transition(self, value: Union[str, Mapping[str, Any]]) -> Transition:
        if isinstance(value, str):
            return Transition(value)
        if not isinstance(value, Mapping) or "target" not in value:
            raise ValidationError(f"Transition must be a state name or a mapping with 'target': {value!r}")
        guard = value.get("guard", value.get("cond"))
        return Transition(
            target=value["target"],
            actions=self.actions(value.get("actions", ())),
            guard=self.guard(guard) if guard is not None else None,
        )


def load_table(
    path: Union[str, Path],
    actions: Optional[ActionRegistry] = None,
    guards: Optional[GuardRegistry] = None,
) -> TransitionTable:
    """
    Read a JSON table definition from ``path`` and build a TransitionTable.
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    return TransitionTable.from_dict(data, actions=actions, guards=guards)
