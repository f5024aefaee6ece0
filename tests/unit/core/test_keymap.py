# tests/unit/core/test_keymap.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import json

import pytest

from modechart.core.errors import UnknownStateError, ValidationError
from modechart.core.keymap import KeyBinding, Keymap, KeymapState, load_keymap

SMALL = {
    "initial": "base",
    "states": {
        "base": {"on": {"x": "cut", "p": "prefix", "i": "typing"}},
        "prefix": {"transient": True, "on": {"p": "paste", "*": "base"}},
        "typing": {"sticky": True, "on": {"Escape": "base", "*": "type"}},
    },
}


def test_from_dict_classifies_bindings():
    keymap = Keymap.from_dict(SMALL, actions={"cut", "paste", "type"})
    base = keymap["base"]
    assert base.on["x"] == KeyBinding.action("cut")
    assert base.on["p"] == KeyBinding.state("prefix")
    assert keymap.actions == {"cut", "paste", "type"}
    assert keymap.is_sticky("typing")
    assert keymap.is_transient("prefix")
    assert not keymap.is_sticky("base")


def test_from_dict_without_action_list_treats_non_states_as_actions():
    keymap = Keymap.from_dict(SMALL)
    assert keymap["prefix"].on["p"].is_action


def test_from_dict_rejects_unknown_action():
    with pytest.raises(ValidationError, match="neither a state nor a known action"):
        Keymap.from_dict(SMALL, actions={"cut"})


def test_explicit_binding_kinds():
    keymap = Keymap.from_dict(
        {"initial": "a", "states": {"a": {"on": {"1": {"state": "a"}, "2": {"action": "go"}}}}}
    )
    assert keymap["a"].on["1"] == KeyBinding.state("a")
    assert keymap["a"].on["2"] == KeyBinding.action("go")
    with pytest.raises(ValidationError):
        Keymap.from_dict({"initial": "a", "states": {"a": {"on": {"1": {"bogus": "a"}}}}})


def test_state_and_action_names_must_not_clash():
    with pytest.raises(ValidationError, match="both state and action"):
        Keymap("a", [KeymapState("a", on={"1": KeyBinding.action("a")})])


def test_unknown_target_state_rejected():
    with pytest.raises(ValidationError, match="unknown state"):
        Keymap("a", [KeymapState("a", on={"1": KeyBinding.state("b")})])


def test_initial_state_rules():
    with pytest.raises(ValidationError, match="Initial state"):
        Keymap("missing", [KeymapState("a")])
    with pytest.raises(ValidationError, match="transient"):
        Keymap("a", [KeymapState("a", transient=True)])
    with pytest.raises(ValidationError):
        KeymapState("a", sticky=True, transient=True)


def test_duplicate_state_rejected():
    with pytest.raises(ValidationError, match="Duplicate"):
        Keymap("a", [KeymapState("a"), KeymapState("a")])


def test_unknown_state_lookup():
    keymap = Keymap.from_dict(SMALL)
    with pytest.raises(UnknownStateError):
        keymap["nowhere"]


def test_bindings_are_read_only():
    keymap = Keymap.from_dict(SMALL)
    with pytest.raises(TypeError):
        keymap["base"].on["z"] = KeyBinding.action("cut")


def test_to_dict_round_trip(tmp_path):
    keymap = Keymap.from_dict(SMALL, actions={"cut", "paste", "type"})
    assert keymap.to_dict() == SMALL
    path = tmp_path / "keys.json"
    path.write_text(json.dumps(keymap.to_dict()), encoding="utf-8")
    loaded = load_keymap(path, actions={"cut", "paste", "type"})
    assert loaded.to_dict() == SMALL


def test_bindings_must_be_key_bindings():
    with pytest.raises(ValidationError, match="KeyBinding"):
        KeymapState("a", on={"x": "b"})
    with pytest.raises(ValidationError):
        Keymap("a", [KeymapState("a", on={"x": {"state": "b"}}), KeymapState("b")])
