"""
Script resolution pass.

Turns a parsed experiment script into the ordered sequence of
(task name, command) pairs: registers providers, binds every section,
validates the command template and expands the run matrix.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .exceptions import EmptyRunSetWarning
from .loader import ScriptLoader
from .sections import SectionLoaderRegistry
from .types import LoaderSection, ReservedKey, ResolvedCommand, VariableBinding, reserved_key
from .variables import (
    CommandTemplate,
    MatrixExpander,
    RunMatrix,
    TemplateSubstitutor,
    VariableRegistry,
    bind_section,
)


logger = logging.getLogger(__name__)


class Resolution:
    """
    Result of one resolution pass.

    Iterating ``commands()`` more than once yields identical output.
    """

    def __init__(
        self,
        template: CommandTemplate,
        registry: VariableRegistry,
        sections: List[LoaderSection],
        bindings: List[VariableBinding],
        runs: RunMatrix,
        substitutor: TemplateSubstitutor,
        warnings: Optional[List[Warning]] = None
    ):
        self.template = template
        self.registry = registry
        self.sections = sections
        self.bindings = bindings
        self.runs = runs
        self.substitutor = substitutor
        self.warnings = warnings or []

    @property
    def is_empty(self) -> bool:
        """True when an empty list binding left nothing to execute."""
        return self.runs.is_empty

    @property
    def task_name_provider(self) -> Optional[str]:
        return self.registry.task_name_provider

    def __len__(self) -> int:
        return len(self.runs)

    def commands(self) -> Iterator[ResolvedCommand]:
        """Lazily build one command per concrete run, in matrix order."""
        for run in self.runs:
            command = self.substitutor.substitute(self.template, run, self.registry)
            yield ResolvedCommand(index=run.index, task_name=run.task_name, command=command, run=run)


class ScriptResolver:
    """Resolves experiment scripts into concrete commands."""

    def __init__(
        self,
        section_loaders: Optional[SectionLoaderRegistry] = None,
        base_dir: Optional[Path] = None
    ):
        """
        Initialize resolver.

        Args:
            section_loaders: Section loader registry (default: built-ins)
            base_dir: Directory relative paths in options resolve against
        """
        self.section_loaders = section_loaders or SectionLoaderRegistry()
        self.base_dir = base_dir
        self.expander = MatrixExpander()
        self.substitutor = TemplateSubstitutor()

    def resolve(self, document: Dict[str, Any], validate: bool = True) -> Resolution:
        """
        Run a full resolution pass over a parsed script.

        Args:
            document: Parsed script (CMD plus section tables)
            validate: Run structural validation first

        Returns:
            Resolution holding the lazy run matrix

        Raises:
            ScriptValidationError: If the document is structurally invalid
            ResolutionError: On duplicate/missing providers, unbound
                placeholders or section loader failures
        """
        if validate:
            ScriptLoader().validate(document)

        template = CommandTemplate.parse(document[ReservedKey.CMD.value])
        sections = self.parse_sections(document)

        registry = VariableRegistry()
        for section in sections:
            registry.register(section.name, section.provided_vars)

        bindings: List[VariableBinding] = []
        for section in sections:
            prepared, linked = self.section_loaders.prepare(section, self.base_dir)
            bindings.extend(bind_section(prepared, linked))

        self.substitutor.validate(template, registry)

        referenced = set(template.placeholders)
        for binding in bindings:
            if binding.visible and binding.key not in referenced:
                logger.debug(f"Variable '{binding.name}' from section '{binding.section}' is not used by CMD")

        runs = self.expander.expand(bindings)

        warnings: List[Warning] = []
        if runs.is_empty:
            warning = EmptyRunSetWarning(runs.empty_variables)
            logger.warning(str(warning))
            warnings.append(warning)
        else:
            logger.info(f"Resolved {len(runs)} run(s) from {len(sections)} section(s)")

        return Resolution(
            template=template,
            registry=registry,
            sections=sections,
            bindings=bindings,
            runs=runs,
            substitutor=self.substitutor,
            warnings=warnings,
        )

    def parse_sections(self, document: Dict[str, Any]) -> List[LoaderSection]:
        """Sections of the document, in document order."""
        return [
            LoaderSection.from_table(name, table)
            for name, table in document.items()
            if reserved_key(name) is None and isinstance(table, dict)
        ]


def resolve_document(
    document: Dict[str, Any],
    base_dir: Optional[Path] = None,
    section_loaders: Optional[SectionLoaderRegistry] = None
) -> Resolution:
    """Resolve a parsed script with a fresh resolver."""
    return ScriptResolver(section_loaders=section_loaders, base_dir=base_dir).resolve(document)


def resolve_file(script_path: Path, section_loaders: Optional[SectionLoaderRegistry] = None) -> Resolution:
    """
    Load, validate and resolve a script file.

    Relative paths inside the script resolve against the script's directory.
    """
    script_path = Path(script_path).resolve()
    document = ScriptLoader().load(script_path)
    resolver = ScriptResolver(section_loaders=section_loaders, base_dir=script_path.parent)
    return resolver.resolve(document, validate=False)
