"""Environment-driven settings."""

from __future__ import annotations

import os

DEFAULT_IGNORE_MARKER = "exhortignore"


def ignore_marker() -> str:
    """Marker that flags a dependency line as excluded from analysis.

    Overridable via ``GRADLESCAN_IGNORE_MARKER``.
    """
    return os.environ.get("GRADLESCAN_IGNORE_MARKER", DEFAULT_IGNORE_MARKER).strip().lower()
