"""OTAWA section loader: application path and analysis options."""

import shlex
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..exceptions import MissingBindingSourceError, SectionLoaderError
from .base import SectionLoader


class OtawaLoader(SectionLoader):
    """
    Derives otawa_app from app_path and otawa_opts from props/log_level.

    otawa_opts is one string: '--add-prop <prop>' per property followed by
    '--log <level>' when log_level is set. At least one of the two must be
    present.
    """

    name = "OTAWA"

    def derive(
        self,
        options: Mapping[str, Any],
        wanted: Mapping[str, str],
        base_dir: Optional[Path] = None
    ) -> Dict[str, Any]:
        derived: Dict[str, Any] = {}

        if 'otawa_app' in wanted:
            derived['otawa_app'] = self.require(options, 'app_path', variable=wanted['otawa_app'])

        if 'otawa_opts' in wanted:
            variable = wanted['otawa_opts']
            if 'props' not in options and 'log_level' not in options:
                raise MissingBindingSourceError(
                    variable, self.name, 'otawa_opts',
                    reason="cannot be built without 'props' or 'log_level'"
                )
            derived['otawa_opts'] = shlex.join(self.build_opts(options, variable))

        return derived

    def build_opts(self, options: Mapping[str, Any], variable: str = '$otawa_opts') -> List[str]:
        """Argument list for the OTAWA properties and log level."""
        props = options.get('props', [])
        if not isinstance(props, list):
            raise SectionLoaderError(self.name, "option 'props' must be a list", variable=variable)

        args = []
        for prop in props:
            if not isinstance(prop, str):
                raise SectionLoaderError(
                    self.name,
                    f"each element of 'props' must be a string, got {type(prop).__name__}",
                    variable=variable
                )
            args.extend(['--add-prop', prop])

        log_level = options.get('log_level')
        if log_level is not None:
            if not isinstance(log_level, str):
                raise SectionLoaderError(self.name, "option 'log_level' must be a string", variable=variable)
            args.extend(['--log', log_level])

        return args
