"""Structured logging for the cargo-uber CLI.

Events go through structlog into a single stderr handler, so stdout only
carries command results. ``CARGO_UBER_LOG_FORMAT=json`` switches the
renderer for machine consumption.
"""

from __future__ import annotations

import logging.config

import structlog

from cargo_uber.core.config import Settings

_PACKAGE_LOGGER = "cargo_uber"


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(settings: Settings | None = None, verbose: bool = False) -> None:
    """Route structlog and stdlib logging to stderr.

    ``verbose`` forces DEBUG regardless of ``CARGO_UBER_LOG_LEVEL``.
    """
    settings = settings or Settings.from_env()
    level = "DEBUG" if verbose else settings.log_level
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "cli": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(settings.log_format),
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "cli",
                },
            },
            # Third-party loggers stay at WARNING even under -v.
            "root": {"handlers": ["stderr"], "level": "WARNING"},
            "loggers": {_PACKAGE_LOGGER: {"level": level}},
        }
    )
