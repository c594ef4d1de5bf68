"""Data models for parsed Gradle manifests."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from packageurl import PackageURL

from gradlescan.core.config import ignore_marker

# How a dependency was written in the build file.
FORM_STRING = "string"  # implementation("g:a:v")
FORM_NAMED = "named"  # implementation(group: "g", name: "a", version: "v")
FORM_CATALOG = "catalog"  # implementation(libs.foo.bar)


@dataclass(frozen=True)
class Coordinate:
    """The (group, artifact, version) triple identifying a Maven artifact."""

    group: str
    artifact: str
    version: str

    @property
    def notation(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"

    @property
    def purl(self) -> str:
        """Package URL coordinates, ``pkg:maven/<group>/<artifact>@<version>``, percent-encoded."""
        return PackageURL(
            type="maven", namespace=self.group, name=self.artifact, version=self.version
        ).to_string()

    def as_tuple(self) -> tuple[str, str, str]:
        return (self.group, self.artifact, self.version)


@dataclass(frozen=True)
class Dependency:
    """A single dependency declaration from the ``dependencies`` block."""

    configuration: str
    coordinate: Coordinate
    form: str = FORM_STRING
    annotations: frozenset[str] = field(default_factory=frozenset)
    line: int | None = None

    def has_annotation(self, marker: str) -> bool:
        """True if *marker* is one of the line's tokens or a ``-`` separated part of one.

        So ``exhortignore`` matches ``// exhortignore-cve``, but ``ignore``
        does not match ``exhortignore``.
        """
        wanted = marker.strip().lower()
        return wanted in self.annotations or any(
            wanted in token.split("-") for token in self.annotations
        )


@dataclass(frozen=True)
class Manifest:
    """Parsed, read-only view of a Gradle build file.

    Built once by :func:`gradlescan.manifest.parser.parse`; every collection
    is immutable, so instances can be shared freely between threads.
    """

    group: str | None
    version: str | None
    plugins: tuple[str, ...] = ()
    repositories: frozenset[str] = field(default_factory=frozenset)
    dependencies: tuple[Dependency, ...] = ()
    source: str | None = None

    def dependencies_with_annotation(self, marker: str) -> Iterator[Dependency]:
        """Yield dependencies whose declaration line carries *marker*.

        Matching is case-insensitive, see :meth:`Dependency.has_annotation`.
        Each call returns a fresh iterator in declaration order.
        """
        return (dep for dep in self.dependencies if dep.has_annotation(marker))

    def ignored_dependencies(self, marker: str | None = None) -> Iterator[Dependency]:
        """Dependencies flagged with the ignore marker (see ``GRADLESCAN_IGNORE_MARKER``)."""
        return self.dependencies_with_annotation(marker or ignore_marker())

    def all_coordinates(self) -> Iterator[tuple[str, str, str]]:
        """Yield ``(group, artifact, version)`` for every dependency, in order."""
        return (dep.coordinate.as_tuple() for dep in self.dependencies)

    def find(self, group: str, artifact: str) -> list[Dependency]:
        return [
            dep
            for dep in self.dependencies
            if dep.coordinate.group == group and dep.coordinate.artifact == artifact
        ]
