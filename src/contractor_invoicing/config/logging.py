"""Structured logging for contractor invoicing.

Events go through stdlib logging on stderr so command output on stdout
stays clean. Context bound with :func:`log_context` (the CLI command, the
contractor and period being invoiced) is merged into every event logged
inside the block, including debug events from the pure core functions.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Literal

import structlog

from contractor_invoicing.config.settings import get_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
]


def _renderer(log_format: LogFormat) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(level: LogLevel | None = None, format: LogFormat | None = None) -> None:
    """Configure structlog, falling back to LOG_LEVEL and LOG_FORMAT."""
    settings = get_settings()
    numeric_level = getattr(logging, level or settings.log_level)

    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(numeric_level)

    structlog.configure(
        processors=[*_PROCESSORS, _renderer(format or settings.log_format)],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind ``values`` to every event logged inside the block.

    Keys whose value is None are skipped.
    """
    bound = {key: value for key, value in values.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


def get_logger(name: str, **initial_values: Any) -> Any:
    """Get a logger for ``name`` with optional initial context."""
    return structlog.get_logger(name, **initial_values)
