"""Tests for CLI commands."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from gradlescan.cli import main

BROKEN = 'dependencies {\n    implementation("a:b")\n}\n'


class TestParseCommand:
    def test_text_output(self, ignore_fixture: Path):
        result = CliRunner().invoke(main, ["parse", str(ignore_fixture)])
        assert result.exit_code == 0
        assert "13 dependencies" in result.output
        assert "log4j:log4j:1.2.17  [exhortignore]" in result.output

    def test_json_output(self, ignore_fixture: Path):
        result = CliRunner().invoke(main, ["parse", str(ignore_fixture), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["group"] == "org.acme.dbaas"
        assert len(data["dependencies"]) == 13
        log4j = data["dependencies"][11]
        assert log4j["artifact"] == "log4j"
        assert log4j["form"] == "named"
        assert log4j["annotations"] == ["exhortignore"]

    def test_malformed_manifest(self, write_manifest):
        path = write_manifest(BROKEN)
        result = CliRunner().invoke(main, ["parse", str(path)])
        assert result.exit_code == 1
        assert "Error: line 2" in result.output

    def test_strict_rejects_duplicates(self, write_manifest):
        path = write_manifest(
            'dependencies {\n    implementation("a:b:1")\n    implementation("a:b:2")\n}\n'
        )
        assert CliRunner().invoke(main, ["parse", str(path)]).exit_code == 0
        result = CliRunner().invoke(main, ["parse", str(path), "--strict"])
        assert result.exit_code == 1
        assert "duplicate" in result.output

    def test_missing_file(self, tmp_path: Path):
        result = CliRunner().invoke(main, ["parse", str(tmp_path / "nope.gradle.kts")])
        assert result.exit_code != 0


class TestIgnoredCommand:
    def test_default_marker(self, ignore_fixture: Path):
        result = CliRunner().invoke(main, ["ignored", str(ignore_fixture)])
        assert result.exit_code == 0
        assert result.output.strip().splitlines() == ["pkg:maven/log4j/log4j@1.2.17"]

    def test_marker_option(self, sample_kts, write_manifest):
        path = write_manifest(sample_kts)
        result = CliRunner().invoke(main, ["ignored", str(path), "--marker", "IGNORE"])
        assert result.exit_code == 0
        assert result.output.strip().splitlines() == ["pkg:maven/c/d@2.0"]


class TestScanCommand:
    def test_empty_directory(self, tmp_path: Path):
        result = CliRunner().invoke(main, ["scan", str(tmp_path)])
        assert result.exit_code == 0
        assert "No Gradle manifests found." in result.output

    def test_json_output(self, tmp_path: Path, sample_kts):
        (tmp_path / "build.gradle.kts").write_text(sample_kts)
        with patch.dict(os.environ, {"GRADLESCAN_LOG_LEVEL": "WARNING"}):
            result = CliRunner().invoke(
                main, ["scan", str(tmp_path), "--json", "--marker", "ignore"]
            )
        assert result.exit_code == 0
        rows = json.loads(result.output)
        assert len(rows) == 1
        assert rows[0]["manifest_path"] == "build.gradle.kts"
        assert rows[0]["ignored"] == ["pkg:maven/c/d@2.0"]

    def test_scan_error(self, tmp_path: Path):
        (tmp_path / "build.gradle").write_text(BROKEN)
        result = CliRunner().invoke(main, ["scan", str(tmp_path)])
        assert result.exit_code == 1
        assert "Error:" in result.output
