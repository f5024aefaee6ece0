# modechart/plugins/vim.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Vim-style modal key bindings for KeyDispatcher, and the editor action surface
they drive.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from modechart.core.dispatcher import DispatcherConfig, KeyDispatcher, Keymap, key_name
from modechart.interfaces.protocols import TimerService

logger = logging.getLogger(__name__)


class States:
    NORMAL = "normal"
    INSERT = "insert"
    VISUAL = "visual"
    COMMAND = "command"
    G_PRESSED = "g_pressed"
    D_PRESSED = "d_pressed"
    Y_PRESSED = "y_pressed"


class Actions:
    MOVE_UP = "moveUp"
    MOVE_DOWN = "moveDown"
    MOVE_LEFT = "moveLeft"
    MOVE_RIGHT = "moveRight"
    START_OF_LINE = "startOfLine"
    END_OF_LINE = "endOfLine"
    START_OF_DOCUMENT = "startOfDocument"
    END_OF_DOCUMENT = "endOfDocument"
    DELETE_LINE = "deleteLine"
    DELETE_WORD = "deleteWord"
    YANK_LINE = "yankLine"
    YANK_WORD = "yankWord"
    MOVE_WORD_FORWARD = "moveWordForward"
    MOVE_WORD_BACKWARD = "moveWordBackward"
    INSERT_CHAR = "insertChar"
    SELECT_LEFT = "selectLeft"
    SELECT_RIGHT = "selectRight"
    SELECT_UP = "selectUp"
    SELECT_DOWN = "selectDown"
    EXECUTE_COMMAND = "executeCommand"
    APPEND_COMMAND_CHAR = "appendCommandChar"


ESCAPE = "Escape"
ENTER = "Enter"

VIM_KEYMAP: Dict[str, Any] = {
    "initial": States.NORMAL,
    "states": {
        States.NORMAL: {
            "on": {
                "h": Actions.MOVE_LEFT,
                "j": Actions.MOVE_DOWN,
                "k": Actions.MOVE_UP,
                "l": Actions.MOVE_RIGHT,
                "w": Actions.MOVE_WORD_FORWARD,
                "b": Actions.MOVE_WORD_BACKWARD,
                "0": Actions.START_OF_LINE,
                "$": Actions.END_OF_LINE,
                "G": Actions.END_OF_DOCUMENT,
                "i": States.INSERT,
                "v": States.VISUAL,
                ":": States.COMMAND,
                "g": States.G_PRESSED,
                "d": States.D_PRESSED,
                "y": States.Y_PRESSED,
            },
        },
        States.INSERT: {
            "sticky": True,
            "on": {
                ESCAPE: States.NORMAL,
                "*": Actions.INSERT_CHAR,
            },
        },
        States.VISUAL: {
            "on": {
                "h": Actions.SELECT_LEFT,
                "j": Actions.SELECT_DOWN,
                "k": Actions.SELECT_UP,
                "l": Actions.SELECT_RIGHT,
                ESCAPE: States.NORMAL,
            },
        },
        States.G_PRESSED: {
            "transient": True,
            "on": {
                "g": Actions.START_OF_DOCUMENT,
                "*": States.NORMAL,
            },
        },
        States.D_PRESSED: {
            "transient": True,
            "on": {
                "d": Actions.DELETE_LINE,
                "w": Actions.DELETE_WORD,
                "*": States.NORMAL,
            },
        },
        States.Y_PRESSED: {
            "transient": True,
            "on": {
                "y": Actions.YANK_LINE,
                "w": Actions.YANK_WORD,
                "*": States.NORMAL,
            },
        },
        States.COMMAND: {
            "sticky": True,
            "on": {
                ENTER: Actions.EXECUTE_COMMAND,
                ESCAPE: States.NORMAL,
                "*": Actions.APPEND_COMMAND_CHAR,
            },
        },
    },
}


@runtime_checkable
class EditorActions(Protocol):
    """
    Every action the vim keymap may invoke. Consumers may implement a subset;
    unimplemented actions are silently skipped by the dispatcher.

    Actions receive the originating key event, except execute_command which
    receives the accumulated command string.
    """

    def move_up(self, event: Any) -> None: ...
    def move_down(self, event: Any) -> None: ...
    def move_left(self, event: Any) -> None: ...
    def move_right(self, event: Any) -> None: ...
    def move_word_forward(self, event: Any) -> None: ...
    def move_word_backward(self, event: Any) -> None: ...
    def start_of_line(self, event: Any) -> None: ...
    def end_of_line(self, event: Any) -> None: ...
    def start_of_document(self, event: Any) -> None: ...
    def end_of_document(self, event: Any) -> None: ...
    def delete_line(self, event: Any) -> None: ...
    def delete_word(self, event: Any) -> None: ...
    def yank_line(self, event: Any) -> None: ...
    def yank_word(self, event: Any) -> None: ...
    def insert_char(self, event: Any) -> None: ...
    def select_left(self, event: Any) -> None: ...
    def select_right(self, event: Any) -> None: ...
    def select_up(self, event: Any) -> None: ...
    def select_down(self, event: Any) -> None: ...
    def append_command_char(self, event: Any) -> None: ...
    def execute_command(self, command: str) -> None: ...


ACTION_METHODS: Dict[str, str] = {
    Actions.MOVE_UP: "move_up",
    Actions.MOVE_DOWN: "move_down",
    Actions.MOVE_LEFT: "move_left",
    Actions.MOVE_RIGHT: "move_right",
    Actions.MOVE_WORD_FORWARD: "move_word_forward",
    Actions.MOVE_WORD_BACKWARD: "move_word_backward",
    Actions.START_OF_LINE: "start_of_line",
    Actions.END_OF_LINE: "end_of_line",
    Actions.START_OF_DOCUMENT: "start_of_document",
    Actions.END_OF_DOCUMENT: "end_of_document",
    Actions.DELETE_LINE: "delete_line",
    Actions.DELETE_WORD: "delete_word",
    Actions.YANK_LINE: "yank_line",
    Actions.YANK_WORD: "yank_word",
    Actions.INSERT_CHAR: "insert_char",
    Actions.SELECT_LEFT: "select_left",
    Actions.SELECT_RIGHT: "select_right",
    Actions.SELECT_UP: "select_up",
    Actions.SELECT_DOWN: "select_down",
    Actions.APPEND_COMMAND_CHAR: "append_command_char",
    Actions.EXECUTE_COMMAND: "execute_command",
}


def build_vim_keymap() -> Keymap:
    return Keymap.from_dict(VIM_KEYMAP, actions=ACTION_METHODS)


class LoggingEditor:
    """
    Reference consumer: logs every action and records it in ``history`` as
    ``(action_method, argument)`` pairs. Executed commands are also kept in
    ``commands``.
    """

    def __init__(self) -> None:
        self.history: List[Tuple[str, Any]] = []
        self.commands: List[str] = []
        self.text: List[str] = []

    def _record(self, name: str, arg: Any = None) -> None:
        logger.info("%s %s", name, "" if arg is None else arg)
        self.history.append((name, arg))

    def move_up(self, event: Any) -> None:
        self._record("move_up")

    def move_down(self, event: Any) -> None:
        self._record("move_down")

    def move_left(self, event: Any) -> None:
        self._record("move_left")

    def move_right(self, event: Any) -> None:
        self._record("move_right")

    def move_word_forward(self, event: Any) -> None:
        self._record("move_word_forward")

    def move_word_backward(self, event: Any) -> None:
        self._record("move_word_backward")

    def start_of_line(self, event: Any) -> None:
        self._record("start_of_line")

    def end_of_line(self, event: Any) -> None:
        self._record("end_of_line")

    def start_of_document(self, event: Any) -> None:
        self._record("start_of_document")

    def end_of_document(self, event: Any) -> None:
        self._record("end_of_document")

    def delete_line(self, event: Any) -> None:
        self._record("delete_line")

    def delete_word(self, event: Any) -> None:
        self._record("delete_word")

    def yank_line(self, event: Any) -> None:
        self._record("yank_line")

    def yank_word(self, event: Any) -> None:
        self._record("yank_word")

    def insert_char(self, event: Any) -> None:
        self.text.append(key_name(event))
        self._record("insert_char", key_name(event))

    def select_left(self, event: Any) -> None:
        self._record("select_left")

    def select_right(self, event: Any) -> None:
        self._record("select_right")

    def select_up(self, event: Any) -> None:
        self._record("select_up")

    def select_down(self, event: Any) -> None:
        self._record("select_down")

    def append_command_char(self, event: Any) -> None:
        self._record("append_command_char", key_name(event))

    def execute_command(self, command: str) -> None:
        self.commands.append(command)
        self._record("execute_command", command)


def create_dispatcher(
    editor: Optional[Any] = None,
    timers: Optional[TimerService] = None,
    config: Optional[DispatcherConfig] = None,
) -> KeyDispatcher:
    """
    Build a KeyDispatcher using the vim keymap. Without an editor a fresh
    LoggingEditor is bound.
    """
    return KeyDispatcher(
        build_vim_keymap(),
        consumer=editor if editor is not None else LoggingEditor(),
        timers=timers,
        config=config,
        action_methods=ACTION_METHODS,
    )
