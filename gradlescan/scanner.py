"""Scanner — find Gradle manifests under a directory and report ignored dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog

from gradlescan.exceptions import MissingDependenciesBlockError
from gradlescan.manifest.catalog import VersionCatalog
from gradlescan.manifest.models import Manifest
from gradlescan.manifest.parser import parse_file

log = structlog.get_logger("gradlescan.scanner")

MANIFEST_PATTERNS = ("**/build.gradle.kts", "**/build.gradle")


@dataclass
class ScanReport:
    """Result of parsing one manifest found during a scan."""

    manifest_path: str
    manifest: Manifest
    ignored: list[str] = field(default_factory=list)


def discover_manifests(repo_path: Path) -> list[tuple[Path, VersionCatalog | None]]:
    """Find Gradle build files under *repo_path*, each paired with its version catalog.

    Returns (build_file, catalog) pairs sorted by path; the catalog is the
    ``gradle/libs.versions.toml`` next to the build file, or None.
    """
    hits = {hit for pattern in MANIFEST_PATTERNS for hit in repo_path.glob(pattern)}
    return [(hit, VersionCatalog.for_manifest(hit)) for hit in sorted(hits) if hit.is_file()]


def ignored_coordinates(manifest: Manifest, marker: str | None = None) -> list[str]:
    """Package-URL coordinates of every dependency flagged with the ignore marker."""
    return [dep.coordinate.purl for dep in manifest.ignored_dependencies(marker)]


def scan(repo_path: Path, marker: str | None = None) -> list[ScanReport]:
    """Parse every Gradle manifest under *repo_path*.

    Build files without a ``dependencies`` block (the root script of a
    multi-project build, typically) are skipped. Any other parse error
    propagates, so a scan either covers every manifest or fails.
    """
    reports: list[ScanReport] = []
    skipped = 0
    for file_path, catalog in discover_manifests(repo_path):
        rel = file_path.relative_to(repo_path).as_posix()
        log.debug("scanner.manifest_found", path=rel, catalog=catalog is not None)
        try:
            manifest = parse_file(file_path, catalog=catalog)
        except MissingDependenciesBlockError:
            log.info("scanner.manifest_skipped", path=rel, reason="no dependencies block")
            skipped += 1
            continue
        reports.append(
            ScanReport(
                manifest_path=rel,
                manifest=manifest,
                ignored=ignored_coordinates(manifest, marker),
            )
        )
    log.info(
        "scanner.scan_complete",
        root=str(repo_path),
        manifests=len(reports),
        skipped=skipped,
        dependencies=sum(len(r.manifest.dependencies) for r in reports),
    )
    return reports
