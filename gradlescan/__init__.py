"""gradlescan — parse Gradle build manifests into a queryable dependency model."""

from gradlescan.exceptions import (
    DuplicateDependencyError,
    GradleScanError,
    MalformedManifestError,
    ManifestError,
    UnsupportedDeclarationFormError,
)
from gradlescan.manifest import (
    Coordinate,
    Dependency,
    Manifest,
    VersionCatalog,
    parse,
    parse_file,
)

__all__ = [
    "Coordinate",
    "Dependency",
    "DuplicateDependencyError",
    "GradleScanError",
    "MalformedManifestError",
    "Manifest",
    "ManifestError",
    "UnsupportedDeclarationFormError",
    "VersionCatalog",
    "parse",
    "parse_file",
]
