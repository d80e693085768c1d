"""
Section loader module.

Provides the registry and the built-in loaders for the TACLE and OTAWA
sections.
"""

from .base import SectionLoader
from .registry import SectionLoaderRegistry
from .tacle import TacleLoader, TacleSuite, BenchSet, Bench
from .otawa import OtawaLoader


__all__ = [
    "SectionLoader",
    "SectionLoaderRegistry",
    "TacleLoader",
    "TacleSuite",
    "BenchSet",
    "Bench",
    "OtawaLoader",
]
