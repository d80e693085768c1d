"""
Base class for section loaders.

A section loader knows how one sub-tool is configured and derives the
options its provided variables read from higher level options.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from ..exceptions import MissingBindingSourceError, SectionLoaderError


class SectionLoader:
    """
    Derives options for one named section.

    Attributes:
        name: Section name this loader handles
        linked: Groups of derived option keys whose list values are index-aligned
    """

    name: str = ""
    linked: Tuple[Tuple[str, ...], ...] = ()

    def derive(
        self,
        options: Mapping[str, Any],
        wanted: Mapping[str, str],
        base_dir: Optional[Path] = None
    ) -> Dict[str, Any]:
        """
        Compute derived options.

        Args:
            options: Raw section options
            wanted: Option keys the section lacks, mapped to the declared
                variable that reads each one
            base_dir: Directory relative paths are resolved against

        Returns:
            Mapping of derived option keys (a subset of or equal to ``wanted``
            where this loader can produce them)

        Raises:
            MissingBindingSourceError: If an input needed for a wanted key is absent
            SectionLoaderError: If an input needed for a wanted key is invalid
        """
        return {}

    def require(self, options: Mapping[str, Any], key: str, kind: type = str, variable: Optional[str] = None) -> Any:
        """
        Fetch a required input option, checking its type.

        ``variable`` is the declared variable the input is needed for; a
        missing input is reported against it.
        """
        if key not in options:
            raise MissingBindingSourceError(variable or key, self.name, key)
        value = options[key]
        if not isinstance(value, kind):
            raise SectionLoaderError(
                self.name,
                f"option '{key}' must be a {kind.__name__}, got {type(value).__name__}",
                variable=variable
            )
        return value

    def resolve_path(self, value: str, base_dir: Optional[Path]) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path
        return path
