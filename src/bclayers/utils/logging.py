"""
Structured logging for ingestion runs.

Events are written to stderr so that rich tables printed by the CLI on
stdout can be piped or captured on their own.
"""

import logging
import sys
from typing import Any

import structlog

# Standard-library loggers of the I/O stack, silenced below DEBUG
NOISY_LOGGERS = ("pyogrio", "fiona", "urllib3", "requests")


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Set up structlog for bclayers.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Emit one JSON object per event, e.g. for batch jobs
            whose logs are collected centrally.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(format="%(name)s: %(message)s", stream=sys.stderr, level=log_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Module logger; pass `__name__`."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """
    Bind values to every event logged inside a `with` block.

    The ingestor binds the layer kind so that reader, catalogue and
    geometry events of concurrent ingestions can be told apart:

        with log_context(layer="vri"):
            log.info("Loaded raw features", rows=1200)
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
