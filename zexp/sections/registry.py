"""
Section loader registry.

Maps section names to the loaders that derive their options. Sections
without a loader use their raw options unchanged.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..types import LoaderSection, option_key
from .base import SectionLoader
from .otawa import OtawaLoader
from .tacle import TacleLoader


logger = logging.getLogger(__name__)


class SectionLoaderRegistry:
    """
    Registry of section loaders.

    Loaders registered at runtime take precedence over the built-in ones.
    """

    def __init__(self):
        """Initialize registry with the built-in loaders."""
        self._loaders: Dict[str, SectionLoader] = {}
        self._builtin_loaders = self._load_builtin_loaders()

    def _load_builtin_loaders(self) -> Dict[str, SectionLoader]:
        """
        Load built-in section loaders.

        Returns:
            Dictionary of built-in loaders keyed by section name
        """
        return {
            "TACLE": TacleLoader(),
            "OTAWA": OtawaLoader(),
        }

    def register(self, loader: SectionLoader) -> None:
        """
        Register a section loader.

        Raises:
            ValueError: If the loader has no section name
        """
        if not loader.name:
            raise ValueError("Invalid section loader: name cannot be empty")

        self._loaders[loader.name] = loader
        logger.debug(f"Registered section loader: {loader.name}")

    def get(self, name: str) -> Optional[SectionLoader]:
        return self._loaders.get(name) or self._builtin_loaders.get(name)

    def exists(self, name: str) -> bool:
        return name in self._loaders or name in self._builtin_loaders

    def list_loaders(self) -> List[str]:
        return sorted(set(self._loaders.keys()) | set(self._builtin_loaders.keys()))

    def prepare(
        self,
        section: LoaderSection,
        base_dir: Optional[Path] = None
    ) -> Tuple[LoaderSection, Tuple[Tuple[str, ...], ...]]:
        """
        Fill in the options a section's variables need.

        Derived options only fill keys the raw options lack; explicit
        options always win.

        Args:
            section: Parsed section
            base_dir: Directory relative paths in options resolve against

        Returns:
            Tuple of (section with merged options, linked option groups
            restricted to derived keys)

        Raises:
            MissingBindingSourceError: If an input a needed option derives from is absent
            SectionLoaderError: If the loader cannot derive a needed option
        """
        loader = self.get(section.name)
        if loader is None:
            return section, ()

        wanted = {
            option_key(name): name
            for name in section.provided_vars
            if option_key(name) not in section.options
        }
        if not wanted:
            return section, ()

        derived = loader.derive(section.options, wanted, base_dir)
        logger.debug(f"Section loader {loader.name} derived options {sorted(derived)}")

        merged = dict(derived)
        merged.update(section.options)

        linked = tuple(
            tuple(key for key in group if key in derived)
            for group in loader.linked
        )
        return section.with_options(merged), tuple(group for group in linked if len(group) > 1)
