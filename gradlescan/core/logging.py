"""Logging setup for the gradlescan CLI: structlog events rendered through stdlib logging."""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

# Processors applied to both structlog events and plain stdlib records.
_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.format_exc_info,
]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(level: str | None = None) -> None:
    """Route gradlescan log events to stderr.

    *level* (the CLI's ``-v`` passes DEBUG) overrides ``GRADLESCAN_LOG_LEVEL``;
    ``GRADLESCAN_LOG_FORMAT=json`` switches to one JSON object per line.
    stdout stays reserved for command output.
    """
    log_level = (level or os.environ.get("GRADLESCAN_LOG_LEVEL", "INFO")).upper()
    log_format = os.environ.get("GRADLESCAN_LOG_FORMAT", "console").lower()

    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "gradlescan": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": _PRE_CHAIN,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(log_format),
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "gradlescan",
                },
            },
            "loggers": {
                "gradlescan": {
                    "handlers": ["stderr"],
                    "level": log_level,
                    "propagate": False,
                },
            },
        }
    )
