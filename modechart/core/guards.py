# modechart/core/guards.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any

from modechart.core.actions import _NamedRegistry
from modechart.core.errors import UnknownGuardError
from modechart.interfaces.types import Context, EventData, GuardFunc


class GuardRegistry(_NamedRegistry):
    """
    Registry of named guards. A guard is a predicate ``(context, event_data) -> bool``
    evaluated before any action of its transition runs.
    """

    _kind = "guard"
    _missing = UnknownGuardError


def context_equals(key: str, value: Any) -> GuardFunc:
    """Guard passing when ``context[key] == value``."""

    def _context_equals(context: Context, event_data: EventData) -> bool:
        return context.get(key) == value

    return _context_equals


def event_has(field: str) -> GuardFunc:
    """Guard passing when the event data carries a non-None ``field``."""

    def _event_has(context: Context, event_data: EventData) -> bool:
        return event_data.get(field) is not None

    return _event_has
