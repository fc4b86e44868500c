from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.gcov_builder import write_sample_project


def _reset_loggers() -> None:
    for name in ("gcovtool", "gcovtool.diagnostics"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True


@pytest.fixture(autouse=True)
def isolated_logging(caplog: pytest.LogCaptureFixture) -> Iterator[None]:
    """Undo CLI logging setup so diagnostics reach caplog in every test."""
    _reset_loggers()
    caplog.set_level(logging.DEBUG, logger="gcovtool")
    yield
    _reset_loggers()


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Source file with matching notes and data files; returns the source path."""
    return write_sample_project(tmp_path / "project")
