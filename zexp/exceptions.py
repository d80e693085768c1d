"""zexp exceptions."""

from typing import Iterable, List, Optional, Sequence
from dataclasses import dataclass


@dataclass
class ValidationError:
    """Single validation error."""
    message: str
    path: str = ""
    exit_code: int = 2


class ScriptValidationError(Exception):
    """Raised when an experiment script fails structural validation.

    The loader accumulates every problem it finds before raising, so the
    CLI can report all of them at once and map to the validation exit code.
    """

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors
        self.exit_code = 2

        messages = []
        for error in errors:
            if error.path:
                messages.append(f"Validation error at {error.path}: {error.message}")
            else:
                messages.append(f"Validation error: {error.message}")

        super().__init__("\n".join(messages))


class ResolutionError(Exception):
    """Base class for fatal errors of a resolution pass.

    Attributes:
        variable: Offending variable name (as declared or as referenced)
        sections: Section names involved, in the order they were met
        exit_code: CLI exit code for configuration errors
    """

    exit_code = 2

    def __init__(self, message: str, variable: Optional[str] = None, sections: Sequence[str] = ()):
        self.variable = variable
        self.sections = tuple(sections)
        super().__init__(message)


class DuplicateProviderError(ResolutionError):
    """Two sections declare the same variable in PROVIDED_VARS."""

    def __init__(self, variable: str, first_section: str, second_section: str):
        self.first_section = first_section
        self.second_section = second_section
        super().__init__(
            f"Variable '{variable}' is provided by both section '{first_section}' "
            f"and section '{second_section}'",
            variable=variable,
            sections=(first_section, second_section),
        )


class MissingBindingSourceError(ResolutionError):
    """A declared variable has no usable option value in its section."""

    def __init__(self, variable: str, section: str, option_key: str, reason: Optional[str] = None):
        self.section = section
        self.option_key = option_key
        message = f"Section '{section}' declares '{variable}' but has no option '{option_key}'"
        if reason:
            message = f"Section '{section}' declares '{variable}' but option '{option_key}' {reason}"
        super().__init__(message, variable=variable, sections=(section,))


class UnknownVariableError(ResolutionError):
    """No section declares the requested variable."""

    def __init__(self, variable: str):
        super().__init__(f"No section provides variable '{variable}'", variable=variable)


class UnboundPlaceholderError(ResolutionError):
    """The command template references a variable with no visible binding."""

    def __init__(self, name: str, reason: str, section: Optional[str] = None):
        self.name = name
        self.reason = reason
        self.section = section
        message = f"Placeholder '${name}' cannot be bound: {reason}"
        if section:
            message += f" (section '{section}')"
        super().__init__(message, variable=name, sections=(section,) if section else ())


class BindingGroupError(ResolutionError):
    """Index-aligned list bindings of one section have different lengths."""

    def __init__(self, group: str, section: str, lengths: dict):
        self.group = group
        self.lengths = dict(lengths)
        detail = ", ".join(f"{name}={length}" for name, length in self.lengths.items())
        super().__init__(
            f"Linked variables in section '{section}' must have equal lengths: {detail}",
            sections=(section,),
        )


class SectionLoaderError(ResolutionError):
    """A built-in section loader could not derive its options."""

    def __init__(self, section: str, message: str, variable: Optional[str] = None):
        self.section = section
        super().__init__(f"Section '{section}': {message}", variable=variable, sections=(section,))


class EmptyRunSetWarning(UserWarning):
    """A list-valued binding was empty, so the matrix holds no runs.

    Never raised by the engine; recorded on the resolution result so the
    caller can decide whether nothing-to-run is itself an error.
    """

    def __init__(self, variables: Iterable[str]):
        self.variables = tuple(variables)
        super().__init__(
            f"Empty list bound to {', '.join(self.variables)}: no runs to execute"
        )
