"""Tests for the option key convention and section binding."""

import pytest

from zexp.exceptions import MissingBindingSourceError
from zexp.types import LoaderSection, ReservedKey, is_visible, option_key, reserved_key
from zexp.variables import bind_section


def test_option_key_strips_one_dollar():
    assert option_key("$tacle_exec") == "tacle_exec"
    assert option_key("TASK_NAME") == "TASK_NAME"
    assert option_key("$$odd") == "$odd"
    assert option_key("plain") == "plain"


def test_is_visible():
    assert is_visible("$otawa_app")
    assert not is_visible("TASK_NAME")


def test_reserved_key_exact_match():
    assert reserved_key("CMD") is ReservedKey.CMD
    assert reserved_key("PROVIDED_VARS") is ReservedKey.PROVIDED_VARS
    assert reserved_key("TASK_NAME") is ReservedKey.TASK_NAME
    assert reserved_key("cmd") is None
    assert reserved_key("OTAWA") is None


class TestBindSection:
    """Test bind_section."""

    def test_scalar_and_list_bindings_in_declaration_order(self):
        section = LoaderSection.from_table("S", {
            "PROVIDED_VARS": ["$b", "TASK_NAME", "$a"],
            "a": "x",
            "b": [1, 2, 3],
            "TASK_NAME": "task",
            "unused": True,
        })

        bindings = bind_section(section)

        assert [b.name for b in bindings] == ["$b", "TASK_NAME", "$a"]
        assert bindings[0].is_list
        assert bindings[0].values == (1, 2, 3)
        assert not bindings[1].is_list
        assert bindings[1].value == "task"
        assert not bindings[1].visible
        assert bindings[2].value == "x"
        assert all(b.section == "S" for b in bindings)
        assert all(b.group is None for b in bindings)

    def test_missing_option(self):
        section = LoaderSection.from_table("OTAWA", {"PROVIDED_VARS": ["$otawa_app"]})

        with pytest.raises(MissingBindingSourceError) as exc_info:
            bind_section(section)

        error = exc_info.value
        assert error.variable == "$otawa_app"
        assert error.section == "OTAWA"
        assert error.option_key == "otawa_app"
        assert error.sections == ("OTAWA",)

    def test_hidden_variable_needs_a_source_too(self):
        section = LoaderSection.from_table("TACLE", {"PROVIDED_VARS": ["TASK_NAME"]})

        with pytest.raises(MissingBindingSourceError):
            bind_section(section)

    def test_table_option_cannot_back_a_variable(self):
        section = LoaderSection.from_table("S", {"PROVIDED_VARS": ["$a"], "a": {"nested": 1}})

        with pytest.raises(MissingBindingSourceError) as exc_info:
            bind_section(section)

        assert "table" in str(exc_info.value)

    def test_linked_keys_share_group(self):
        section = LoaderSection.from_table("T", {
            "PROVIDED_VARS": ["$x", "$y", "$z"],
            "x": [1, 2],
            "y": ["a", "b"],
            "z": [True],
        })

        bindings = bind_section(section, linked=[("x", "y")])

        assert bindings[0].group == "T:0"
        assert bindings[1].group == "T:0"
        assert bindings[2].group is None

    def test_section_is_immutable(self):
        section = LoaderSection.from_table("S", {"PROVIDED_VARS": ["$a"], "a": 1})

        with pytest.raises(TypeError):
            section.options["a"] = 2
        assert "PROVIDED_VARS" not in section.options
