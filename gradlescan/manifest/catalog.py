"""Gradle version catalog (``gradle/libs.versions.toml``) lookups.

Lets the parser turn ``implementation(libs.foo.bar)`` into a coordinate.
Supported library entry shapes::

    foo-bar = { module = "g:a", version.ref = "foo" }
    foo-bar = { module = "g:a", version = "1.0" }
    foo-bar = { group = "g", name = "a", version = { ref = "foo" } }
    foo-bar = "g:a:1.0"
"""

from __future__ import annotations

import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from gradlescan.exceptions import MalformedManifestError
from gradlescan.manifest.models import Coordinate

CATALOG_RELPATH = Path("gradle") / "libs.versions.toml"


def _normalize_alias(alias: str) -> str:
    # Gradle treats '-', '_' and '.' in aliases as equivalent separators.
    return alias.strip().replace(".", "-").replace("_", "-").lower()


class VersionCatalog:
    def __init__(self, versions: dict[str, str], libraries: dict[str, object]):
        self._versions = versions
        self._libraries = {_normalize_alias(k): v for k, v in libraries.items()}

    @classmethod
    def from_toml(cls, content: str) -> VersionCatalog:
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as exc:
            raise MalformedManifestError(f"invalid version catalog: {exc}") from exc

        versions = {}
        for key, value in data.get("versions", {}).items():
            # Rich versions ({ strictly = "1.0" }) collapse to their preferred value.
            if isinstance(value, dict):
                value = value.get("strictly") or value.get("require") or value.get("prefer")
            if isinstance(value, str):
                versions[key] = value
        return cls(versions, data.get("libraries", {}))

    @classmethod
    def load(cls, path: Path) -> VersionCatalog:
        return cls.from_toml(path.read_text(encoding="utf-8"))

    @classmethod
    def for_manifest(cls, manifest_path: Path) -> VersionCatalog | None:
        """Load the catalog that sits next to *manifest_path*, if there is one."""
        candidate = manifest_path.parent / CATALOG_RELPATH
        if not candidate.is_file():
            return None
        return cls.load(candidate)

    def __contains__(self, alias: str) -> bool:
        return _normalize_alias(alias) in self._libraries

    def resolve(self, alias: str) -> Coordinate:
        """Resolve a library alias (``foo.bar`` or ``foo-bar``) to a coordinate."""
        entry = self._libraries.get(_normalize_alias(alias))
        if entry is None:
            raise MalformedManifestError(f"unknown version catalog alias 'libs.{alias}'")

        if isinstance(entry, str):
            parts = entry.split(":")
            if len(parts) != 3 or not all(parts):
                raise MalformedManifestError(
                    f"catalog entry '{alias}' is not group:artifact:version", declaration=entry
                )
            return Coordinate(*parts)

        if not isinstance(entry, dict):
            raise MalformedManifestError(f"catalog entry '{alias}' has an unsupported shape")

        if "module" in entry:
            group, _, artifact = str(entry["module"]).partition(":")
        else:
            group, artifact = entry.get("group", ""), entry.get("name", "")

        version = self._entry_version(entry)
        if not (group and artifact and version):
            raise MalformedManifestError(
                f"catalog entry '{alias}' does not resolve to group, artifact and version"
            )
        return Coordinate(group, artifact, version)

    def _entry_version(self, entry: dict) -> str | None:
        version = entry.get("version")
        if isinstance(version, str):
            return version
        if isinstance(version, dict):
            # version.ref = "x" parses as {"version": {"ref": "x"}}
            ref = version.get("ref")
            if ref is not None:
                return self._versions.get(ref)
            return version.get("strictly") or version.get("require") or version.get("prefer")
        return None
