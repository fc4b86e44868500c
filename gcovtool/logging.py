"""Logging utilities for gcovtool commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "gcovtool"
_DIAGNOSTICS_NAME = f"{_LOGGER_NAME}.diagnostics"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the gcovtool hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def get_diagnostics() -> logging.Logger:
    """Return the logger for user-facing diagnostics (bare messages on stderr)."""
    return logging.getLogger(_DIAGNOSTICS_NAME)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the gcovtool loggers with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[gcovtool] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    diagnostics = get_diagnostics()
    diagnostics.setLevel(logging.INFO)
    diagnostics.propagate = False
    for handler in list(diagnostics.handlers):
        diagnostics.removeHandler(handler)
    diag_handler = logging.StreamHandler()
    diag_handler.setFormatter(logging.Formatter("%(message)s"))
    diagnostics.addHandler(diag_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)
        diagnostics.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_diagnostics", "get_logger"]
