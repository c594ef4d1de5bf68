"""Gradle manifest model and parser."""

from gradlescan.manifest.catalog import VersionCatalog
from gradlescan.manifest.models import Coordinate, Dependency, Manifest
from gradlescan.manifest.parser import parse, parse_file

__all__ = [
    "Coordinate",
    "Dependency",
    "Manifest",
    "VersionCatalog",
    "parse",
    "parse_file",
]
