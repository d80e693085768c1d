"""
Core type definitions for experiment scripts.

Defines the reserved keywords, loader sections, variable bindings and the
concrete runs produced by matrix expansion.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple


class ReservedKey(str, Enum):
    """Keywords with a fixed meaning in an experiment script."""
    CMD = "CMD"
    PROVIDED_VARS = "PROVIDED_VARS"
    TASK_NAME = "TASK_NAME"


VISIBLE_PREFIX = "$"


def option_key(variable_name: str) -> str:
    """
    Map a declared variable name to the option key that supplies its value.

    Strips a single leading ``$`` and returns the rest verbatim, so
    ``$tacle_exec`` is read from option ``tacle_exec`` and ``TASK_NAME``
    from option ``TASK_NAME``.
    """
    if variable_name.startswith(VISIBLE_PREFIX):
        return variable_name[len(VISIBLE_PREFIX):]
    return variable_name


def is_visible(variable_name: str) -> bool:
    """True if the variable is substituted into the command (``$`` prefix)."""
    return variable_name.startswith(VISIBLE_PREFIX)


def reserved_key(key: str) -> Optional[ReservedKey]:
    """Return the ReservedKey spelled exactly as ``key``, or None."""
    for member in ReservedKey:
        if member.value == key:
            return member
    return None


@dataclass(frozen=True)
class LoaderSection:
    """
    One named configuration section of a script.

    Attributes:
        name: Section name (e.g. 'TACLE', 'OTAWA')
        provided_vars: Declared variable names, in declaration order
        options: Option key to raw value mapping (PROVIDED_VARS excluded)
    """
    name: str
    provided_vars: Tuple[str, ...]
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "provided_vars", tuple(self.provided_vars))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @classmethod
    def from_table(cls, name: str, table: Mapping[str, Any]) -> "LoaderSection":
        """Build a section from its raw key/value table."""
        provided = table.get(ReservedKey.PROVIDED_VARS.value, [])
        options = {
            key: value for key, value in table.items()
            if reserved_key(key) is not ReservedKey.PROVIDED_VARS
        }
        return cls(name=name, provided_vars=tuple(provided), options=options)

    def with_options(self, options: Mapping[str, Any]) -> "LoaderSection":
        """Return a copy of this section carrying ``options`` instead."""
        return LoaderSection(self.name, self.provided_vars, options)


@dataclass(frozen=True)
class VariableBinding:
    """
    A declared variable paired with its value or list of values.

    A list-valued binding means the section runs once per element.

    Attributes:
        name: Declared name ('$tacle_exec', 'TASK_NAME')
        section: Owning section name
        value: Scalar value (when not list-valued)
        values: Element tuple (when list-valued)
        is_list: Whether the binding is list-valued
        group: Link id shared by index-aligned list bindings, if any
    """
    name: str
    section: str
    value: Any = None
    values: Tuple[Any, ...] = ()
    is_list: bool = False
    group: Optional[str] = None

    @classmethod
    def scalar(cls, name: str, section: str, value: Any) -> "VariableBinding":
        return cls(name=name, section=section, value=value)

    @classmethod
    def listed(cls, name: str, section: str, values, group: Optional[str] = None) -> "VariableBinding":
        return cls(name=name, section=section, values=tuple(values), is_list=True, group=group)

    @property
    def key(self) -> str:
        """Bare variable name used inside runs and templates."""
        return option_key(self.name)

    @property
    def visible(self) -> bool:
        return is_visible(self.name)


@dataclass(frozen=True)
class ConcreteRun:
    """
    One fully resolved, scalar-only binding set.

    Attributes:
        index: Position of the run in the expanded matrix
        values: Bare variable name to scalar value
        hidden: Bare names of metadata variables (never substituted)
    """
    index: int
    values: Mapping[str, Any]
    hidden: FrozenSet[str] = frozenset()

    @property
    def visible_values(self) -> Dict[str, Any]:
        return {k: v for k, v in self.values.items() if k not in self.hidden}

    @property
    def metadata(self) -> Dict[str, Any]:
        return {k: v for k, v in self.values.items() if k in self.hidden}

    @property
    def task_name(self) -> Optional[str]:
        """Value of TASK_NAME in this run, or None when no section provides it."""
        value = self.values.get(ReservedKey.TASK_NAME.value)
        return None if value is None else str(value)


@dataclass
class ResolvedCommand:
    """
    Final command for one run, ready for an execution collaborator.

    Attributes:
        index: Run index
        task_name: TASK_NAME of the run (None if undeclared)
        command: Fully substituted command string (unquoted)
        run: The concrete run the command was built from
    """
    index: int
    task_name: Optional[str]
    command: str
    run: ConcreteRun

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "task_name": self.task_name,
            "command": self.command,
        }
