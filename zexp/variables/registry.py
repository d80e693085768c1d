"""
Variable registry for provider bookkeeping.

Records which section provides each declared variable and rejects
variables declared by more than one section.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..exceptions import DuplicateProviderError, UnknownVariableError
from ..types import ReservedKey, is_visible, option_key


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderEntry:
    """Owner of one declared variable."""
    name: str
    section: str
    visible: bool


class VariableRegistry:
    """
    Registry of variable providers for one resolution pass.

    Variables are keyed by bare name, so '$x' declared in one section and
    'x' declared in another are the same variable and conflict.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._entries: Dict[str, ProviderEntry] = {}

    def register(self, section_name: str, provided_vars: Iterable[str]) -> None:
        """
        Record the variables a section provides.

        Args:
            section_name: Name of the declaring section
            provided_vars: Declared variable names, in declaration order

        Raises:
            DuplicateProviderError: If a variable already has a provider
        """
        for name in provided_vars:
            key = option_key(name)
            existing = self._entries.get(key)
            if existing is not None:
                raise DuplicateProviderError(name, existing.section, section_name)

            self._entries[key] = ProviderEntry(name=name, section=section_name, visible=is_visible(name))
            logger.debug(f"Registered variable '{name}' provided by section '{section_name}'")

    def resolve_provider(self, name: str) -> str:
        """
        Return the section that provides a variable.

        Args:
            name: Variable name, with or without the '$' prefix

        Raises:
            UnknownVariableError: If no section declares it
        """
        return self.entry(name).section

    def entry(self, name: str) -> ProviderEntry:
        entry = self._entries.get(option_key(name))
        if entry is None:
            raise UnknownVariableError(name)
        return entry

    def provides(self, name: str) -> bool:
        return option_key(name) in self._entries

    def is_hidden(self, name: str) -> bool:
        """True if the variable is declared without the '$' prefix."""
        return not self.entry(name).visible

    @property
    def task_name_provider(self) -> Optional[str]:
        """Section providing TASK_NAME, or None when no section declares it."""
        entry = self._entries.get(ReservedKey.TASK_NAME.value)
        return entry.section if entry else None

    def variables(self) -> List[str]:
        """Declared variable names in registration order."""
        return [entry.name for entry in self._entries.values()]

    def __len__(self) -> int:
        return len(self._entries)
