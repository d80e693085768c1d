"""
TACLeBench section loader.

Reads a benchmark description file and turns the selected benchsets into
index-aligned lists of executables, entry points and task names.

Description file layout (TOML or YAML)::

    tacle_root_path = "/opt/tacle-bench"

    [TACLE_BENCHSET_LIST.kernel]
    benchset_path = "bench/kernel"
    benchs = [
        { name = "binarysearch", exec = "binarysearch/binarysearch.elf", entry_point = "main" },
    ]
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..exceptions import MissingBindingSourceError, SectionLoaderError
from ..loader import read_document
from ..types import ReservedKey
from .base import SectionLoader


logger = logging.getLogger(__name__)


@dataclass
class Bench:
    """One benchmark program."""
    name: str
    path: Path
    entry_point: str


@dataclass
class BenchSet:
    """A named group of benchmarks sharing a directory."""
    name: str
    path: Path
    benchs: List[Bench] = field(default_factory=list)


@dataclass
class TacleSuite:
    """
    Parsed benchmark description.

    Attributes:
        root_path: Root of the TACLeBench checkout
        benchsets: Benchsets in description order
    """
    root_path: Path
    benchsets: List[BenchSet] = field(default_factory=list)

    @classmethod
    def from_file(cls, path: Path) -> "TacleSuite":
        """
        Load a description file.

        Raises:
            SectionLoaderError: If the file is missing, unreadable or malformed
        """
        path = Path(path)
        try:
            document = read_document(path)
        except FileNotFoundError:
            raise SectionLoaderError("TACLE", f"benchmark description not found: {path}")
        except Exception as e:
            raise SectionLoaderError("TACLE", f"failed to read benchmark description {path}: {e}")

        return cls.from_document(document, base_dir=path.parent)

    @classmethod
    def from_document(cls, document: Any, base_dir: Optional[Path] = None) -> "TacleSuite":
        """Build a suite from a parsed description."""
        if not isinstance(document, dict):
            raise SectionLoaderError("TACLE", "benchmark description must be a table")

        root = document.get('tacle_root_path')
        if not isinstance(root, str):
            raise SectionLoaderError("TACLE", "'tacle_root_path' must be a string")
        root_path = Path(root).expanduser()
        if not root_path.is_absolute() and base_dir is not None:
            root_path = base_dir / root_path

        benchset_list = document.get('TACLE_BENCHSET_LIST')
        if not isinstance(benchset_list, dict):
            raise SectionLoaderError("TACLE", "'TACLE_BENCHSET_LIST' must be a table of benchsets")

        benchsets = []
        for set_name, entry in benchset_list.items():
            if not isinstance(entry, dict):
                raise SectionLoaderError("TACLE", f"benchset '{set_name}' must be a table")
            set_path = entry.get('benchset_path')
            if not isinstance(set_path, str):
                raise SectionLoaderError("TACLE", f"benchset '{set_name}': 'benchset_path' must be a string")
            benchs_entry = entry.get('benchs')
            if not isinstance(benchs_entry, list):
                raise SectionLoaderError("TACLE", f"benchset '{set_name}': 'benchs' must be a list of benchs")

            benchs = []
            for i, bench in enumerate(benchs_entry):
                if not isinstance(bench, dict):
                    raise SectionLoaderError("TACLE", f"benchset '{set_name}': bench {i} must be a table")
                for key in ('name', 'exec', 'entry_point'):
                    if not isinstance(bench.get(key), str):
                        raise SectionLoaderError(
                            "TACLE", f"benchset '{set_name}': bench {i} '{key}' must be a string"
                        )
                benchs.append(Bench(
                    name=bench['name'],
                    path=Path(bench['exec']),
                    entry_point=bench['entry_point'],
                ))

            benchsets.append(BenchSet(name=set_name, path=Path(set_path), benchs=benchs))

        return cls(root_path=root_path, benchsets=benchsets)

    def get(self, benchset_name: str) -> Optional[BenchSet]:
        for benchset in self.benchsets:
            if benchset.name == benchset_name:
                return benchset
        return None

    def exec_entry_pairs(self, benchset_name: str) -> List[tuple]:
        """
        List (bench name, full executable path, entry point) for a benchset.

        Raises:
            SectionLoaderError: If the benchset is not described
        """
        benchset = self.get(benchset_name)
        if benchset is None:
            known = ", ".join(b.name for b in self.benchsets) or "none"
            raise SectionLoaderError("TACLE", f"unknown benchset '{benchset_name}' (known: {known})")

        return [
            (bench.name, str(self.root_path / benchset.path / bench.path), bench.entry_point)
            for bench in benchset.benchs
        ]


class TacleLoader(SectionLoader):
    """
    Derives tacle_exec, tacle_entry_point and TASK_NAME from selected benchsets.

    The three derived lists are linked: they advance together, one run per
    bench, instead of being crossed with each other like other list options
    of a section. Explicitly written options are never linked.
    """

    name = "TACLE"
    linked = ((ReservedKey.TASK_NAME.value, 'tacle_exec', 'tacle_entry_point'),)

    DERIVED_KEYS = {ReservedKey.TASK_NAME.value, 'tacle_exec', 'tacle_entry_point'}

    def derive(
        self,
        options: Mapping[str, Any],
        wanted: Mapping[str, str],
        base_dir: Optional[Path] = None
    ) -> Dict[str, Any]:
        needed = [name for key, name in wanted.items() if key in self.DERIVED_KEYS]
        if not needed:
            return {}
        variable = needed[0]

        desc_path = self.resolve_path(self.require(options, 'tacle_desc_path', variable=variable), base_dir)
        if 'tacle_run_benchset' not in options:
            raise MissingBindingSourceError(variable, self.name, 'tacle_run_benchset')
        selected = options['tacle_run_benchset']
        if isinstance(selected, str):
            selected = [selected]
        if not isinstance(selected, list) or not all(isinstance(s, str) for s in selected):
            raise SectionLoaderError(
                self.name, "'tacle_run_benchset' must be a string or a list of strings", variable=variable
            )

        suite = TacleSuite.from_file(desc_path)

        names, execs, entries = [], [], []
        for benchset_name in selected:
            for bench_name, exec_path, entry_point in suite.exec_entry_pairs(benchset_name):
                names.append(bench_name)
                execs.append(exec_path)
                entries.append(entry_point)

        logger.debug(f"TACLE selected {len(execs)} benchs from benchsets {selected}")

        derived = {
            ReservedKey.TASK_NAME.value: names,
            'tacle_exec': execs,
            'tacle_entry_point': entries,
        }
        return {key: value for key, value in derived.items() if key in wanted}
