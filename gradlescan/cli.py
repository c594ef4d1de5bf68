"""CLI entry point: gradlescan.

Subcommands:
    gradlescan parse build.gradle.kts [--json] [--strict]   # Dump the parsed manifest
    gradlescan ignored build.gradle.kts [--marker M]       # List ignored coordinates
    gradlescan scan /path/to/repo [--json]                 # Parse every manifest in a tree
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from gradlescan.core.logging import setup_logging
from gradlescan.exceptions import GradleScanError
from gradlescan.manifest.models import Manifest
from gradlescan.manifest.parser import parse_file
from gradlescan.scanner import ignored_coordinates, scan


def _manifest_to_dict(manifest: Manifest) -> dict:
    return {
        "source": manifest.source,
        "group": manifest.group,
        "version": manifest.version,
        "plugins": list(manifest.plugins),
        "repositories": sorted(manifest.repositories),
        "dependencies": [
            {
                "configuration": d.configuration,
                "group": d.coordinate.group,
                "artifact": d.coordinate.artifact,
                "version": d.coordinate.version,
                "form": d.form,
                "annotations": sorted(d.annotations),
                "line": d.line,
            }
            for d in manifest.dependencies
        ],
    }


def _print_manifest(manifest: Manifest) -> None:
    label = ":".join(p for p in (manifest.group, manifest.version) if p) or "(unnamed)"
    click.echo(f"{manifest.source or '<text>'}  {label}")
    if manifest.plugins:
        click.echo(f"  plugins: {', '.join(manifest.plugins)}")
    if manifest.repositories:
        click.echo(f"  repositories: {', '.join(sorted(manifest.repositories))}")
    click.echo(f"  {len(manifest.dependencies)} dependencies")
    for d in manifest.dependencies:
        marks = f"  [{', '.join(sorted(d.annotations))}]" if d.annotations else ""
        click.echo(f"    {d.configuration:<24} {d.coordinate.notation}{marks}")


def _fail(exc: GradleScanError) -> None:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """gradlescan: Gradle build manifest parser."""
    setup_logging("DEBUG" if verbose else None)


@main.command("parse")
@click.argument("manifest_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--strict", is_flag=True, help="Reject duplicate dependencies")
def parse_cmd(manifest_file: str, as_json: bool, strict: bool) -> None:
    """Parse a build.gradle(.kts) file and print its dependencies."""
    try:
        manifest = parse_file(manifest_file, allow_duplicates=not strict)
    except GradleScanError as e:
        _fail(e)
        return

    if as_json:
        click.echo(json.dumps(_manifest_to_dict(manifest), indent=2))
    else:
        _print_manifest(manifest)


@main.command("ignored")
@click.argument("manifest_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--marker", default=None, help="Ignore marker (default: $GRADLESCAN_IGNORE_MARKER)")
def ignored_cmd(manifest_file: str, marker: str | None) -> None:
    """Print the package URLs of dependencies flagged with the ignore marker."""
    try:
        manifest = parse_file(manifest_file)
    except GradleScanError as e:
        _fail(e)
        return

    for purl in ignored_coordinates(manifest, marker):
        click.echo(purl)


@main.command("scan")
@click.argument("repo", type=click.Path(exists=True, file_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--marker", default=None, help="Ignore marker (default: $GRADLESCAN_IGNORE_MARKER)")
def scan_cmd(repo: str, as_json: bool, marker: str | None) -> None:
    """Parse every Gradle manifest under REPO."""
    try:
        reports = scan(Path(repo).resolve(), marker)
    except GradleScanError as e:
        _fail(e)
        return

    if as_json:
        rows = [
            {
                "manifest_path": r.manifest_path,
                "ignored": r.ignored,
                "manifest": _manifest_to_dict(r.manifest),
            }
            for r in reports
        ]
        click.echo(json.dumps(rows, indent=2))
        return

    if not reports:
        click.echo("No Gradle manifests found.")
        return

    click.echo(f"Found {len(reports)} manifest(s)\n")
    for r in reports:
        _print_manifest(r.manifest)
        if r.ignored:
            click.echo(f"  ignored: {', '.join(r.ignored)}")
        click.echo()


if __name__ == "__main__":
    main()
