"""Custom exceptions for gradlescan."""

from __future__ import annotations


class GradleScanError(Exception):
    """Base exception for all gradlescan errors."""


class ManifestError(GradleScanError):
    """Raised when a manifest cannot be turned into a Manifest model.

    ``line`` is the 1-based line of the offending declaration, or None when
    the problem concerns the file as a whole (e.g. a missing block).
    """

    def __init__(self, message: str, line: int | None = None, declaration: str | None = None):
        self.line = line
        self.declaration = declaration
        if line is not None:
            message = f"line {line}: {message}"
        if declaration:
            message = f"{message}: {declaration!r}"
        super().__init__(message)


class MalformedManifestError(ManifestError):
    """Raised on a structural parse failure (missing block, bad coordinate)."""


class UnsupportedDeclarationFormError(ManifestError):
    """Raised when a dependency is neither a coordinate string nor named arguments."""


class DuplicateDependencyError(ManifestError):
    """Raised in strict mode when a group:artifact is declared twice in one configuration."""

    def __init__(self, coordinate: str, configuration: str, line: int, first_line: int):
        self.coordinate = coordinate
        self.configuration = configuration
        self.first_line = first_line
        super().__init__(
            f"duplicate {configuration} dependency {coordinate} "
            f"(first declared on line {first_line})",
            line=line,
        )


class MissingDependenciesBlockError(MalformedManifestError):
    """Raised when a build file has no top-level ``dependencies`` block.

    Common for the root script of a multi-project build, so directory scans
    skip such files instead of failing.
    """

    def __init__(self) -> None:
        super().__init__("missing 'dependencies' block")
