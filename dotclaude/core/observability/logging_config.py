"""
Logging configuration — diagnostics for the installer itself.

``setup_logging`` runs once, from the CLI group callback. Modules only
do ``logger = logging.getLogger(__name__)``.

Level precedence:
    --debug / --verbose / --quiet  >  DOTCLAUDE_LOG_LEVEL  >  WARNING

A second, usually more detailed, copy can go to DOTCLAUDE_LOG_FILE at
DOTCLAUDE_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys

LEVEL_ENV_VAR = "DOTCLAUDE_LOG_LEVEL"
FILE_ENV_VAR = "DOTCLAUDE_LOG_FILE"
FILE_LEVEL_ENV_VAR = "DOTCLAUDE_LOG_FILE_LEVEL"

_DETAILED = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

# (threshold, format, datefmt): first row whose threshold >= level wins
_STDERR_FORMATS: list[tuple[int, str, str | None]] = [
    (logging.DEBUG, _DETAILED, "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(message)s", None),
]


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Level name from CLI flags, falling back to the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LEVEL_ENV_VAR, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Install the stderr handler (and optional file handler) on the root logger.

    Calling it again replaces the previous handlers.
    """
    stderr_level = _parse_level(level)
    fmt, datefmt = next(
        (f, d) for threshold, f, d in _STDERR_FORMATS if stderr_level <= threshold
    )

    handlers: list[logging.Handler] = [
        _handler(logging.StreamHandler(sys.stderr), stderr_level, fmt, datefmt),
    ]
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else stderr_level
        handlers.append(_handler(
            logging.FileHandler(log_file, encoding="utf-8"),
            file_level,
            _DETAILED,
            "%Y-%m-%d %H:%M:%S",
        ))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(min(h.level for h in handlers))

    logging.raiseExceptions = False


def setup_from_env(debug: bool = False, verbose: bool = False, quiet: bool = False) -> None:
    """``setup_logging`` with levels and file taken from flags and environment."""
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(FILE_ENV_VAR),
        log_file_level=os.environ.get(FILE_LEVEL_ENV_VAR),
    )


def _handler(handler: logging.Handler, level: int, fmt: str, datefmt: str | None) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    numeric = getattr(logging, level.upper(), None) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
