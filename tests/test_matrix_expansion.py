"""Tests for cross-product expansion of bindings into runs."""

import pytest

from zexp.exceptions import BindingGroupError
from zexp.types import VariableBinding
from zexp.variables import MatrixExpander


def scalar(name, value, section="S"):
    return VariableBinding.scalar(name, section, value)


def listed(name, values, section="S", group=None):
    return VariableBinding.listed(name, section, values, group=group)


class TestMatrixExpander:
    """Test MatrixExpander.expand."""

    def setup_method(self):
        self.expander = MatrixExpander()

    def test_scalars_only_give_one_run(self):
        runs = list(self.expander.expand([scalar("$a", 1), scalar("$b", "x")]))

        assert len(runs) == 1
        assert runs[0].index == 0
        assert dict(runs[0].values) == {"a": 1, "b": "x"}

    def test_cross_product_between_sections(self):
        bindings = [
            listed("$a", [1, 2, 3], section="A"),
            scalar("$s", "fixed", section="C"),
            listed("$b", ["x", "y"], section="B"),
        ]

        matrix = self.expander.expand(bindings)
        runs = list(matrix)

        assert len(matrix) == 6
        assert len(runs) == 6
        assert [(r.values["a"], r.values["b"]) for r in runs] == [
            (1, "x"), (1, "y"), (2, "x"), (2, "y"), (3, "x"), (3, "y"),
        ]
        assert all(r.values["s"] == "fixed" for r in runs)
        assert [r.index for r in runs] == list(range(6))

    def test_lists_within_one_section_are_crossed(self):
        matrix = self.expander.expand([listed("$a", [1, 2]), listed("$b", [3, 4])])

        assert len(matrix) == 4

    def test_empty_list_gives_zero_runs(self):
        matrix = self.expander.expand([listed("$a", [1, 2]), listed("$b", [])])

        assert len(matrix) == 0
        assert matrix.is_empty
        assert list(matrix) == []
        assert matrix.empty_variables == ["$b"]

    def test_matrix_is_restartable_and_deterministic(self):
        matrix = self.expander.expand([listed("$a", [1, 2]), listed("$b", ["x", "y"])])

        first = [dict(r.values) for r in matrix]
        second = [dict(r.values) for r in matrix]

        assert first == second
        assert len(first) == 4

    def test_hidden_values_are_marked(self):
        runs = list(self.expander.expand([scalar("TASK_NAME", "t"), scalar("$a", 1)]))

        assert runs[0].hidden == frozenset({"TASK_NAME"})
        assert runs[0].metadata == {"TASK_NAME": "t"}
        assert runs[0].visible_values == {"a": 1}
        assert runs[0].task_name == "t"

    def test_grouped_lists_advance_together(self):
        bindings = [
            listed("TASK_NAME", ["b1", "b2"], group="T:0"),
            listed("$exec", ["/b1", "/b2"], group="T:0"),
            listed("$opt", ["-O0", "-O2"], section="O"),
        ]

        runs = list(self.expander.expand(bindings))

        assert [(r.task_name, r.values["exec"], r.values["opt"]) for r in runs] == [
            ("b1", "/b1", "-O0"),
            ("b1", "/b1", "-O2"),
            ("b2", "/b2", "-O0"),
            ("b2", "/b2", "-O2"),
        ]

    def test_grouped_lists_must_have_equal_lengths(self):
        bindings = [
            listed("$exec", ["/b1", "/b2"], section="T", group="T:0"),
            listed("$entry", ["main"], section="T", group="T:0"),
        ]

        with pytest.raises(BindingGroupError) as exc_info:
            self.expander.expand(bindings)

        assert exc_info.value.sections == ("T",)
        assert exc_info.value.lengths == {"$exec": 2, "$entry": 1}
