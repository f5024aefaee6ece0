# modechart/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Callable, Dict, MutableMapping

StateID = str
EventID = str
ActionID = str

Context = MutableMapping[str, Any]
EventData = Dict[str, Any]

# Callback Types
ActionFunc = Callable[[Context, EventData], None]
GuardFunc = Callable[[Context, EventData], bool]
TimerCallback = Callable[[], None]
