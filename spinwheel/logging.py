"""Structured logging for SpinWheel.

The terminal front end owns stdout for wheel narration and result tables,
so in CLI mode log lines go to stderr through the console renderer. When
the engine is embedded in another service, each event is one JSON object
on stdout.

Context bound with ``structlog.contextvars`` (the knockout binds the
tournament size, for example) is merged into every event.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import (
    JSONRenderer,
    StackInfoRenderer,
    TimeStamper,
    add_log_level,
    format_exc_info,
)
from structlog.typing import Processor

from spinwheel.config import LOG_LEVEL


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Looked up per logger so a redirected sys.stderr is honored
    return structlog.PrintLogger(file=sys.stderr)


def _stdout_logger(*args: Any) -> structlog.PrintLogger:
    return structlog.PrintLogger(file=sys.stdout)


def build_processors(cli_mode: bool) -> list[Processor]:
    """Processor chain for the given run mode.

    Terminal output skips timestamps; JSON output carries ISO UTC ones.
    """
    processors: list[Processor] = [merge_contextvars, add_log_level]
    if cli_mode:
        processors += [StackInfoRenderer(), format_exc_info]
        processors.append(ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors += [TimeStamper(fmt="iso", utc=True), StackInfoRenderer(), format_exc_info]
        processors.append(JSONRenderer())
    return processors


def configure_logging(cli_mode: bool = False, log_level: str = LOG_LEVEL) -> None:
    """Configure structlog for the terminal or for embedding.

    Safe to call more than once; the last call wins.

    Args:
        cli_mode: Render for humans on stderr instead of JSON on stdout
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            unknown names fall back to WARNING
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING

    structlog.configure(
        processors=build_processors(cli_mode),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=_stderr_logger if cli_mode else _stdout_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Return a logger, named after the calling module when ``name`` is given."""
    return structlog.get_logger(name) if name else structlog.get_logger()
