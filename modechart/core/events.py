# modechart/core/events.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class KeyEvent:
    """
    A single logical key press delivered by the input source. Only the key
    identity is used to select a binding; modifier flags are carried through to
    consumer actions unchanged.
    """

    key: str
    shift: bool = False
    ctrl: bool = False
    alt: bool = False
    meta: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "KeyEvent":
        """
        Build a key event from a browser-style mapping such as
        ``{"key": "g", "shiftKey": False}``. Snake-case flag names are accepted too.

        :param data: Mapping holding at least a ``key`` entry.
        """
        if "key" not in data:
            raise ValueError("Key event data must contain a 'key' entry")
        return cls(
            key=str(data["key"]),
            shift=bool(data.get("shiftKey", data.get("shift", False))),
            ctrl=bool(data.get("ctrlKey", data.get("ctrl", False))),
            alt=bool(data.get("altKey", data.get("alt", False))),
            meta=bool(data.get("metaKey", data.get("meta", False))),
        )


@dataclass(frozen=True)
class ChartEvent:
    """An application-level event addressed to a chart, with optional data."""

    name: str
    data: Dict[str, Any] = field(default_factory=dict)
