"""Tests for the structlog/stdlib logging setup."""

from __future__ import annotations

import json
import logging
import os
from unittest.mock import patch

import structlog

from gradlescan.core.logging import setup_logging


class TestSetupLogging:
    def test_level_argument_overrides_env(self):
        with patch.dict(os.environ, {"GRADLESCAN_LOG_LEVEL": "WARNING"}):
            setup_logging("DEBUG")
        logger = logging.getLogger("gradlescan")
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_env_level(self):
        with patch.dict(os.environ, {"GRADLESCAN_LOG_LEVEL": "warning"}):
            setup_logging()
        assert logging.getLogger("gradlescan").level == logging.WARNING

    def test_json_events_go_to_stderr(self, capsys):
        with patch.dict(os.environ, {"GRADLESCAN_LOG_FORMAT": "json"}):
            setup_logging("INFO")
        structlog.get_logger("gradlescan.tests").info("scanner.manifest_found", path="build.gradle")
        captured = capsys.readouterr()
        assert captured.out == ""
        event = json.loads(captured.err.strip().splitlines()[-1])
        assert event["event"] == "scanner.manifest_found"
        assert event["path"] == "build.gradle"
        assert event["level"] == "info"
        assert event["logger"] == "gradlescan.tests"
