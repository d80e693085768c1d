"""
Matrix expansion of variable bindings into concrete runs.

Scalar bindings are replicated into every run; list-valued bindings are
combined by cross product, in declaration order, with the last axis
varying fastest.
"""

import itertools
import logging
from typing import Dict, Iterator, List, Sequence

from ..exceptions import BindingGroupError
from ..types import ConcreteRun, VariableBinding


logger = logging.getLogger(__name__)


class RunMatrix:
    """
    Lazy, restartable sequence of concrete runs.

    Every call to ``iter()`` starts over and yields the same runs in the
    same order.
    """

    def __init__(self, bindings: Sequence[VariableBinding], axes: List[List[VariableBinding]]):
        self.bindings = list(bindings)
        self.axes = axes
        self.hidden = frozenset(b.key for b in self.bindings if not b.visible)

        # binding name -> axis position, for list-valued bindings
        self._axis_of: Dict[str, int] = {}
        for position, axis in enumerate(axes):
            for binding in axis:
                self._axis_of[binding.name] = position

    def __len__(self) -> int:
        total = 1
        for axis in self.axes:
            total *= len(axis[0].values)
        return total

    def __iter__(self) -> Iterator[ConcreteRun]:
        ranges = [range(len(axis[0].values)) for axis in self.axes]
        for index, combination in enumerate(itertools.product(*ranges)):
            values = {}
            for binding in self.bindings:
                if binding.is_list:
                    values[binding.key] = binding.values[combination[self._axis_of[binding.name]]]
                else:
                    values[binding.key] = binding.value
            yield ConcreteRun(index=index, values=values, hidden=self.hidden)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def empty_variables(self) -> List[str]:
        """Names of list-valued bindings with no elements."""
        return [b.name for axis in self.axes for b in axis if not b.values]


class MatrixExpander:
    """Computes the run matrix for a set of bindings."""

    def expand(self, bindings: Sequence[VariableBinding]) -> RunMatrix:
        """
        Expand bindings into a lazy sequence of concrete runs.

        Each ungrouped list binding is its own axis. List bindings sharing a
        group form one axis and advance together.

        Args:
            bindings: Bindings in declaration order (sections, then variables)

        Returns:
            RunMatrix; empty when any list binding is empty

        Raises:
            BindingGroupError: If grouped bindings have different lengths
        """
        axes: List[List[VariableBinding]] = []
        grouped: Dict[str, List[VariableBinding]] = {}

        for binding in bindings:
            if not binding.is_list:
                continue
            if binding.group is None:
                axes.append([binding])
            elif binding.group in grouped:
                grouped[binding.group].append(binding)
            else:
                grouped[binding.group] = [binding]
                axes.append(grouped[binding.group])

        for group, members in grouped.items():
            lengths = {b.name: len(b.values) for b in members}
            if len(set(lengths.values())) > 1:
                raise BindingGroupError(group, members[0].section, lengths)

        matrix = RunMatrix(bindings, axes)
        logger.debug(f"Expanded {len(bindings)} bindings over {len(axes)} axes into {len(matrix)} runs")
        return matrix
