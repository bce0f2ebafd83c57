"""
Logging for dslgen.

Events are structlog key-value pairs written to stderr, so they never mix with
the Rich tables the CLI prints on stdout. Generation usually runs inside a
build, where stderr is not a terminal; ``log_format="auto"`` then switches to
one JSON object per line. Each run binds the module name with
``bind_context`` so the events of several modules built in one process stay
apart.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from typing import IO, TYPE_CHECKING, Any, Iterator

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from .config import Config


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Resolved per event: test runners and build tools swap sys.stderr
    return structlog.PrintLogger(sys.stderr)


def _renderer(log_format: str, stream: IO[str]) -> list[structlog.types.Processor]:
    if log_format == "auto":
        log_format = "console" if stream.isatty() else "json"
    if log_format == "console":
        return [structlog.dev.ConsoleRenderer(colors=stream.isatty())]
    return [
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(sort_keys=True),
    ]


def setup_logging(config: Config | None = None, stream: IO[str] | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        config: Supplies ``log_level`` and ``log_format``; INFO and auto when None.
        stream: Destination of all log output, stderr when None.
    """
    log_level = config.log_level if config else "INFO"
    log_format = config.log_format if config else "auto"
    level = getattr(logging, log_level, logging.INFO)

    # Third-party stdlib logging goes through Rich on the same stream
    console = Console(file=stream) if stream is not None else Console(stderr=True)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                show_path=False,
                rich_tracebacks=True,
                tracebacks_show_locals=log_level == "DEBUG",
            )
        ],
        force=True,
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        *_renderer(log_format, stream if stream is not None else sys.stderr),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(stream) if stream is not None else _stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)


@contextmanager
def log_stage(logger: structlog.stdlib.BoundLogger, stage: str, **fields: Any) -> Iterator[None]:
    """Log how long one pipeline stage took, at debug level.

    Nothing is logged when the stage raises; the caller reports the failure.
    """
    start = time.perf_counter()
    yield
    duration_ms = round((time.perf_counter() - start) * 1000, 2)
    logger.debug("Stage finished", stage=stage, duration_ms=duration_ms, **fields)


def bind_context(**kwargs: object) -> None:
    """Tag every following event of this run, e.g. ``bind_context(module="Sdk")``."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
