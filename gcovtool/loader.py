"""Loading of notes and data files into memory."""

from __future__ import annotations

import errno as errno_codes
import os
import sys
from dataclasses import dataclass
from typing import BinaryIO

from .logging import get_logger
from .paths import STDIN_TOKEN

_LOGGER = get_logger("loader")


class ArtifactLoadError(OSError):
    """Raised when a coverage file cannot be read."""

    def __init__(self, filename: str, code: int | None, message: str) -> None:
        super().__init__(code, message, filename)

    @property
    def is_missing(self) -> bool:
        return self.errno == errno_codes.ENOENT

    def describe(self) -> str:
        """Return the ``<file>: <message>`` line reported to users."""
        return f"{self.filename}: {self.strerror}"


@dataclass(frozen=True)
class ArtifactBuffer:
    """Bytes of a coverage file as they were when it was read."""

    name: str
    data: bytes

    def __len__(self) -> int:
        return len(self.data)


def load_artifact(name: str, *, stdin: BinaryIO | None = None) -> ArtifactBuffer:
    """Read *name* (or standard input for ``-``) into an :class:`ArtifactBuffer`.

    The file is read in full as it exists at that moment. Notes and data files
    can be rewritten by a running program while we hold them, so no trailing
    terminator or expected size is checked here; format problems are left to
    the format readers.
    """
    if name == STDIN_TOKEN:
        stream = stdin if stdin is not None else sys.stdin.buffer
        try:
            data = stream.read()
        except OSError as exc:
            raise ArtifactLoadError(name, exc.errno, exc.strerror or str(exc)) from exc
        _LOGGER.debug("Read %d bytes from standard input", len(data))
        return ArtifactBuffer(name=name, data=data)

    try:
        with open(name, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        message = exc.strerror or os.strerror(exc.errno or 0)
        raise ArtifactLoadError(name, exc.errno, message) from exc
    _LOGGER.debug("Read %d bytes from %s", len(data), name)
    return ArtifactBuffer(name=name, data=data)


__all__ = ["ArtifactBuffer", "ArtifactLoadError", "load_artifact"]
