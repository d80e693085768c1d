"""
Command template parsing and substitution.
Handles $name and ${name} placeholders; every other '$' is literal text.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, List, Tuple, Union

from ..exceptions import UnboundPlaceholderError, UnknownVariableError
from ..types import ConcreteRun
from .registry import VariableRegistry


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Literal:
    """Verbatim template text."""
    text: str


@dataclass(frozen=True)
class Placeholder:
    """A $name reference."""
    name: str
    token: str


Fragment = Union[Literal, Placeholder]


class CommandTemplate:
    """
    Parsed command template: literal fragments and placeholder references.
    """

    # ${name} or $name; a '$' not followed by an identifier stays literal
    PLACEHOLDER_PATTERN = re.compile(r'\$(?:\{([A-Za-z_][A-Za-z0-9_]*)\}|([A-Za-z_][A-Za-z0-9_]*))')

    def __init__(self, text: str, fragments: Tuple[Fragment, ...]):
        self.text = text
        self.fragments = fragments

    @classmethod
    def parse(cls, text: str) -> "CommandTemplate":
        fragments: List[Fragment] = []
        position = 0
        for match in cls.PLACEHOLDER_PATTERN.finditer(text):
            if match.start() > position:
                fragments.append(Literal(text[position:match.start()]))
            name = match.group(1) or match.group(2)
            fragments.append(Placeholder(name=name, token=match.group(0)))
            position = match.end()
        if position < len(text):
            fragments.append(Literal(text[position:]))
        return cls(text, tuple(fragments))

    @property
    def placeholders(self) -> List[str]:
        """Referenced names, first occurrence order, without duplicates."""
        names: List[str] = []
        for fragment in self.fragments:
            if isinstance(fragment, Placeholder) and fragment.name not in names:
                names.append(fragment.name)
        return names

    def __repr__(self) -> str:
        return f"CommandTemplate({self.text!r})"


class TemplateSubstitutor:
    """
    Substitutes concrete run values into a command template.

    Placeholders must name a declared, visible variable. The output is a
    flat string; no shell quoting is applied.
    """

    def validate(self, template: CommandTemplate, registry: VariableRegistry) -> None:
        """
        Check every placeholder against the registry.

        Raises:
            UnboundPlaceholderError: If a placeholder is undeclared or hidden
        """
        for name in template.placeholders:
            self._check_provider(name, registry)

    def substitute(
        self,
        template: CommandTemplate,
        run: ConcreteRun,
        registry: VariableRegistry
    ) -> str:
        """
        Build the command string for one run.

        Args:
            template: Parsed command template
            run: Concrete scalar binding set
            registry: Provider registry of the resolution pass

        Returns:
            Command string with every placeholder replaced

        Raises:
            UnboundPlaceholderError: If a placeholder has no visible binding
        """
        parts = []
        for fragment in template.fragments:
            if isinstance(fragment, Literal):
                parts.append(fragment.text)
                continue

            section = self._check_provider(fragment.name, registry)
            if fragment.name not in run.values or fragment.name in run.hidden:
                raise UnboundPlaceholderError(fragment.name, "no value in this run", section)

            value = run.values[fragment.name]
            if value is None:
                raise UnboundPlaceholderError(fragment.name, "value is null", section)
            parts.append(self._render(value))

        return "".join(parts)

    def _check_provider(self, name: str, registry: VariableRegistry) -> str:
        """Return the provider section of a visible variable."""
        try:
            entry = registry.entry(name)
        except UnknownVariableError as e:
            raise UnboundPlaceholderError(name, "no section provides it") from e

        if not entry.visible:
            raise UnboundPlaceholderError(
                name,
                f"'{entry.name}' is a hidden variable, declare it as '${entry.name}' to substitute it",
                entry.section
            )
        return entry.section

    def _render(self, value: Any) -> str:
        if isinstance(value, bool):
            return 'true' if value else 'false'
        elif isinstance(value, (int, float)):
            return str(value)
        elif isinstance(value, str):
            return value
        else:
            # Nested lists and other complex values
            return json.dumps(value, default=str)
