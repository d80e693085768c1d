"""Experiment script loader with strict structural validation."""

import tomllib
from pathlib import Path
from typing import Any, Dict, List
import yaml

from zexp.exceptions import ValidationError, ScriptValidationError
from zexp.types import ReservedKey, VISIBLE_PREFIX, reserved_key


class PreservingLoader(yaml.SafeLoader):
    """Custom YAML loader that preserves string values like 'on' instead of converting to bool."""
    pass


# Drop the implicit bool resolvers for 'on'/'off' so option values stay literal
PreservingLoader.yaml_implicit_resolvers = dict(PreservingLoader.yaml_implicit_resolvers)
for _first in ('o', 'O'):
    if _first in PreservingLoader.yaml_implicit_resolvers:
        PreservingLoader.yaml_implicit_resolvers[_first] = [
            (tag, regexp) for tag, regexp in PreservingLoader.yaml_implicit_resolvers[_first]
            if tag != 'tag:yaml.org,2002:bool'
        ]


TOML_SUFFIXES = {'.toml'}


def read_document(path: Path) -> Any:
    """
    Parse a TOML or YAML file into plain Python data.

    Files ending in .toml are parsed as TOML, everything else as YAML.

    Raises:
        FileNotFoundError: If the file does not exist
        tomllib.TOMLDecodeError, yaml.YAMLError: On syntax errors
    """
    path = Path(path)
    if path.suffix.lower() in TOML_SUFFIXES:
        with open(path, 'rb') as f:
            return tomllib.load(f)

    with open(path, 'r') as f:
        return yaml.load(f, Loader=PreservingLoader)


class ScriptLoader:
    """Loads and validates experiment scripts."""

    def __init__(self):
        """Initialize loader."""
        self.errors: List[ValidationError] = []

    def load(self, script_path: Path) -> Dict[str, Any]:
        """Load and validate an experiment script file."""
        self.errors = []
        try:
            document = read_document(script_path)
        except FileNotFoundError:
            raise
        except Exception as e:
            self._add_error(f"Failed to load script: {e}")
            self._raise_validation_errors()

        return self.validate(document)

    def validate(self, document: Any) -> Dict[str, Any]:
        """
        Validate an already parsed script document.

        Returns:
            The document, unchanged

        Raises:
            ScriptValidationError: With every problem found
        """
        self.errors = []

        if document is None or not isinstance(document, dict):
            self._add_error("Script must be a table/dictionary")
            self._raise_validation_errors()

        self._validate_command(document)

        for key, value in document.items():
            keyword = reserved_key(key)
            if keyword is ReservedKey.CMD:
                continue
            if keyword is not None:
                self._add_error(f"Reserved key '{key}' is only allowed inside a section", path=key)
            elif not isinstance(value, dict):
                self._add_error(
                    f"Unknown top-level field '{key}': only 'CMD' and sections (tables) are allowed",
                    path=key
                )
            else:
                self._validate_section(key, value)

        if self.errors:
            self._raise_validation_errors()

        return document

    def _validate_command(self, document: Dict[str, Any]):
        """Validate the CMD template field."""
        command = document.get(ReservedKey.CMD.value)
        if command is None:
            self._add_error("'CMD' field is required", path=ReservedKey.CMD.value)
        elif not isinstance(command, str):
            self._add_error(
                f"'CMD' must be a string, got {type(command).__name__}",
                path=ReservedKey.CMD.value
            )
        elif not command.strip():
            self._add_error("'CMD' must not be empty", path=ReservedKey.CMD.value)

    def _validate_section(self, name: str, section: Dict[str, Any]):
        """Validate one loader section."""
        provided = section.get(ReservedKey.PROVIDED_VARS.value)
        if provided is None:
            self._add_error(f"Section '{name}' missing required 'PROVIDED_VARS' field", path=name)
        elif not isinstance(provided, list):
            self._add_error(f"Section '{name}': 'PROVIDED_VARS' must be a list", path=name)
        else:
            seen = set()
            for i, variable in enumerate(provided):
                where = f"{name}.PROVIDED_VARS[{i}]"
                if not isinstance(variable, str):
                    self._add_error(f"Section '{name}': variable names must be strings", path=where)
                elif not variable or variable == VISIBLE_PREFIX:
                    self._add_error(f"Section '{name}': empty variable name", path=where)
                elif variable in seen:
                    self._add_error(f"Section '{name}': variable '{variable}' declared twice", path=where)
                else:
                    seen.add(variable)

        if ReservedKey.CMD.value in section:
            self._add_error(f"Section '{name}': 'CMD' is only allowed at the top level", path=f"{name}.CMD")

    def _add_error(self, message: str, path: str = "", exit_code: int = 2):
        """Add validation error."""
        self.errors.append(ValidationError(message, path, exit_code))

    def _raise_validation_errors(self):
        """Raise ScriptValidationError with accumulated errors."""
        raise ScriptValidationError(self.errors)
