"""Structured logging setup using structlog.

Two entry points share one processor chain (context vars, log level,
timestamps, stack info):

- :func:`configure_logging` for the web server.  Coloured console output in
  development, JSON lines when ``APP_ENV=production`` so the walk events
  (``page_fetched``, ``cache_overlap_found``, ``team_walk_complete``) can be
  shipped to a log collector.
- :func:`configure_cli_logging` for ``python -m ironwatch.cli``.  Plain text
  on stderr at WARNING and above, so stdout carries only the status message
  and can be piped or posted elsewhere.

structlog events are handed to the standard-library root logger and
rendered by its single handler, together with records from httpx, uvicorn
and aiosqlite.  Loggers cached on first use therefore follow a later
reconfiguration: the stream and the level are looked up per call.
"""

import logging
import os
import sys
from typing import TextIO

import structlog

# Libraries that log every request or query at INFO/DEBUG.
_CHATTY_LOGGERS = ("httpx", "httpcore", "aiosqlite")

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _install(renderer: structlog.types.Processor, level: int, stream: TextIO) -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """Configure structlog for the web server.

    Args:
        log_level: Logging level string (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON output.  When False, JSON is still used if
                     ``APP_ENV`` is ``production``.
        stream: Output stream; stdout when omitted.

    Returns:
        A configured structlog BoundLogger.
    """
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer(colors=True)
    )
    _install(renderer, logging.getLevelName(log_level.upper()), stream or sys.stdout)
    return structlog.get_logger()


def configure_cli_logging(log_level: str = "WARNING") -> None:
    """Send all log output to stderr as plain text, WARNING and above by default."""
    level = logging.getLevelName(log_level.upper())
    _install(structlog.dev.ConsoleRenderer(colors=False), level, sys.stderr)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound to *name*, configuring defaults on first call."""
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
