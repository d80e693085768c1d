"""
Variable resolution module.
Provider registry, loader binding, matrix expansion and template substitution.
"""

from .registry import VariableRegistry, ProviderEntry
from .binding import bind_section
from .matrix import MatrixExpander, RunMatrix
from .substitution import CommandTemplate, TemplateSubstitutor, Literal, Placeholder

__all__ = [
    'VariableRegistry',
    'ProviderEntry',
    'bind_section',
    'MatrixExpander',
    'RunMatrix',
    'CommandTemplate',
    'TemplateSubstitutor',
    'Literal',
    'Placeholder',
]
