# modechart/core/actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Type

from modechart.core.errors import ModeChartError, UnknownActionError, ValidationError
from modechart.interfaces.types import ActionFunc, Context, EventData

logger = logging.getLogger(__name__)


class _NamedRegistry:
    """
    Internal name -> callable lookup shared by the action and guard registries.
    Transition tables store names only; the registry turns them into callables
    once, when a table is built.
    """

    _kind = "callable"
    _missing: Type[ModeChartError] = UnknownActionError

    def __init__(self, entries: Optional[Dict[str, Callable[..., Any]]] = None) -> None:
        self._entries: Dict[str, Callable[..., Any]] = {}
        for name, fn in (entries or {}).items():
            self.register(name, fn)

    def register(self, name: Optional[str] = None, fn: Optional[Callable[..., Any]] = None):
        """
        Register ``fn`` under ``name``. Without ``fn`` this returns a decorator,
        so both ``registry.register("x", f)`` and ``@registry.register()`` work.
        When ``name`` is omitted the function's ``__name__`` is used.

        :raises ValidationError: If a different callable is already registered under the name.
        """
        if fn is None and callable(name):
            return self.register(None, name)
        if fn is None:

            def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
                self.register(name, func)
                return func

            return decorator

        if not callable(fn):
            raise ValidationError(f"{self._kind.capitalize()} {name!r} must be callable")
        key = name or fn.__name__
        existing = self._entries.get(key)
        if existing is not None and existing is not fn:
            raise ValidationError(f"{self._kind.capitalize()} {key!r} is already registered")
        self._entries[key] = fn
        return fn

    def get(self, name: str) -> Callable[..., Any]:
        try:
            return self._entries[name]
        except KeyError:
            raise self._missing(name) from None

    def names(self) -> List[str]:
        return sorted(self._entries)

    def merged(self, other: "_NamedRegistry") -> "_NamedRegistry":
        """Return a new registry holding this registry's entries plus ``other``'s."""
        combined = type(self)(dict(self._entries))
        for name in other:
            combined.register(name, other.get(name))
        return combined

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class ActionRegistry(_NamedRegistry):
    """
    Registry of named actions. An action is a function ``(context, event_data)``
    that may mutate ``context`` in place and returns nothing.
    """

    _kind = "action"
    _missing = UnknownActionError


def assign(key: str, value: Any) -> ActionFunc:
    """
    Build an action storing a constant ``value`` under ``key`` in the context.
    """

    def _assign(context: Context, event_data: EventData) -> None:
        context[key] = value

    _assign.__name__ = f"assign_{key}"
    return _assign


def assign_from_event(key: str, field: Optional[str] = None) -> ActionFunc:
    """
    Build an action copying ``event_data[field]`` (default: ``key``) into the
    context. A missing field stores ``None``.
    """
    source = field or key

    def _assign_from_event(context: Context, event_data: EventData) -> None:
        context[key] = event_data.get(source)

    _assign_from_event.__name__ = f"assign_{key}_from_event"
    return _assign_from_event


def increment(key: str, step: int = 1) -> ActionFunc:
    """
    Build an action adding ``step`` to a numeric context entry (missing counts as 0).
    """

    def _increment(context: Context, event_data: EventData) -> None:
        context[key] = context.get(key, 0) + step

    _increment.__name__ = f"increment_{key}"
    return _increment


def log_message(message: str, level: int = logging.INFO) -> ActionFunc:
    """
    Build an action that logs ``message``. The message is formatted with the
    context, so ``"layer: {activeLayer}"`` picks up the current value.
    """

    def _log_message(context: Context, event_data: EventData) -> None:
        try:
            text = message.format(**context)
        except (KeyError, IndexError, AttributeError, ValueError):
            text = message
        logger.log(level, text)

    _log_message.__name__ = "log_message"
    return _log_message
