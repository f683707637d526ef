"""Structured logging configuration: structlog + stdlib logging."""

from __future__ import annotations

import logging
import logging.config
import os
import sys

import structlog

from z_entry_finder.exceptions import ConfigurationError

LOG_LEVEL_ENV = "ZEF_LOG_LEVEL"
LOG_FORMAT_ENV = "ZEF_LOG_FORMAT"
LOG_FORMATS = ("console", "json")


def setup_logging(verbose: bool = False) -> None:
    """Configure structlog and stdlib logging for the command line.

    Reads from environment variables:
        ZEF_LOG_LEVEL  : level of the ``z_entry_finder`` loggers
                         (default: INFO, DEBUG when *verbose*)
        ZEF_LOG_FORMAT : console | json (default: console)

    Other libraries stay at WARNING. Logs go to stderr so command output on
    stdout stays machine-readable.

    Raises:
        ConfigurationError: unknown level or format in the environment.
    """
    log_level = _log_level(verbose)
    renderer = _renderer(os.environ.get(LOG_FORMAT_ENV, "console").lower())

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {"handlers": ["stderr"], "level": "WARNING"},
            "loggers": {"z_entry_finder": {"level": log_level}},
        }
    )


def _log_level(verbose: bool) -> str:
    name = os.environ.get(LOG_LEVEL_ENV, "DEBUG" if verbose else "INFO").upper()
    if not isinstance(logging.getLevelName(name), int):
        raise ConfigurationError(f"Unknown log level in {LOG_LEVEL_ENV}: {name!r}")
    return name


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    raise ConfigurationError(
        f"Unknown log format in {LOG_FORMAT_ENV}: {log_format!r} (expected one of {', '.join(LOG_FORMATS)})"
    )
