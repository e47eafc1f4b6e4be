"""Logging configuration and structured logging helpers.

Stdout is reserved for the credential helper protocol, so log records go to a
per-day file under the log directory, or to stderr when that file cannot be
opened.
"""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import IO, Any

import structlog

DEFAULT_LOG_DIR = "~/.docker-credential-vault-login/logs"


def log_file_path(log_dir: str | None = None, now: datetime | None = None) -> Path:
    """Return the log file used for records written on the given day."""
    base = Path(log_dir or DEFAULT_LOG_DIR).expanduser()
    day = (now or datetime.now(tz=UTC)).strftime("%Y-%m-%d")
    return base / f"vault-login_{day}.log"


def open_log_file(log_dir: str | None = None) -> IO[str]:
    """Open today's log file for appending, creating the directory if needed.

    Raises:
        OSError: When the directory or file cannot be created.
    """
    path = log_file_path(log_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path.open("a", encoding="utf-8")


def configure_logging(
    log_level: str = "ERROR",
    dev_mode: bool = False,
    output: IO[str] | None = None,
) -> None:
    """Configure structlog for the process.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        dev_mode: Render human-readable lines instead of JSON.
        output: Stream records are written to. Defaults to stderr.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")  # noqa: TRY003

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if dev_mode:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        processors.extend(
            [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.WriteLoggerFactory(file=output or sys.stderr),
        cache_logger_on_first_use=False,
    )


@contextmanager
def log_bind(**context: Any) -> Iterator[None]:
    """Bind context variables to every record logged inside the block."""
    with structlog.contextvars.bound_contextvars(**context):
        yield


@contextmanager
def observe_around(logger: Any, operation: str, **context: Any) -> Iterator[None]:
    """Log the start, end and duration of an operation.

    Failures are logged with ``{operation}_FAILED`` and re-raised.
    """
    started = time.monotonic()
    logger.debug(f"{operation}_STARTED", **context)
    try:
        yield
    except Exception as e:
        logger.warning(
            f"{operation}_FAILED",
            duration_ms=round((time.monotonic() - started) * 1000, 1),
            error=str(e),
            error_type=type(e).__name__,
            **context,
        )
        raise
    logger.debug(
        f"{operation}_COMPLETED",
        duration_ms=round((time.monotonic() - started) * 1000, 1),
        **context,
    )
