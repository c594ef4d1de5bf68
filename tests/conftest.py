"""Shared pytest fixtures for gradlescan tests."""

from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"

SAMPLE_KTS = """\
plugins {
    id("java")
}

group = "org.acme"
version = "1.0.0"

repositories {
    mavenCentral()
}

dependencies {
    implementation("a:b:1.0")
    implementation("c:d:2.0") // ignore
    implementation(group: "e", name: "f", version: "3.0")
}
tasks.test {
    useJUnitPlatform()
}
"""


@pytest.fixture
def sample_kts() -> str:
    return SAMPLE_KTS


@pytest.fixture
def ignore_fixture() -> Path:
    return FIXTURES / "deps_with_ignore_named_params" / "build.gradle.kts"


@pytest.fixture
def write_manifest(tmp_path):
    """Write a build file (and optionally a version catalog) under tmp_path."""

    def _write(content: str, name: str = "build.gradle.kts", catalog: str | None = None) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        if catalog is not None:
            toml = path.parent / "gradle" / "libs.versions.toml"
            toml.parent.mkdir(parents=True, exist_ok=True)
            toml.write_text(catalog)
        return path

    return _write
