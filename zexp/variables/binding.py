"""
Loader binding: turns a section's declared variables into bindings.

Each declared variable reads its value from the option named by
``option_key`` (the variable name without its '$' prefix).
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from ..exceptions import MissingBindingSourceError
from ..types import LoaderSection, VariableBinding, option_key


logger = logging.getLogger(__name__)


def bind_section(
    section: LoaderSection,
    linked: Sequence[Iterable[str]] = ()
) -> List[VariableBinding]:
    """
    Produce one binding per declared variable of a section.

    Args:
        section: Parsed loader section
        linked: Groups of option keys whose list values are index-aligned

    Returns:
        Bindings in declaration order

    Raises:
        MissingBindingSourceError: If a declared variable has no option or
            its option is a mapping
    """
    groups = _group_ids(section.name, linked)
    bindings = []

    for name in section.provided_vars:
        key = option_key(name)
        if key not in section.options:
            raise MissingBindingSourceError(name, section.name, key)

        value = section.options[key]
        if isinstance(value, dict):
            raise MissingBindingSourceError(name, section.name, key, reason="is a table, not a scalar or list")

        if isinstance(value, (list, tuple)):
            binding = VariableBinding.listed(name, section.name, value, group=groups.get(key))
        else:
            binding = VariableBinding.scalar(name, section.name, value)

        logger.debug(
            f"Bound '{name}' in section '{section.name}' "
            f"({'list of ' + str(len(binding.values)) if binding.is_list else 'scalar'})"
        )
        bindings.append(binding)

    return bindings


def _group_ids(section_name: str, linked: Sequence[Iterable[str]]) -> Dict[str, Optional[str]]:
    """Assign a '<section>:<n>' link id to every option key in ``linked``."""
    groups: Dict[str, Optional[str]] = {}
    for n, keys in enumerate(linked):
        for key in keys:
            groups[key] = f"{section_name}:{n}"
    return groups
