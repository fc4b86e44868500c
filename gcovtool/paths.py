"""Companion file name resolution for notes (.gcno) and data (.gcda) files."""

from __future__ import annotations

import os
from enum import Enum

NOTES_SUFFIX = "no"
DATA_SUFFIX = "da"
STDIN_TOKEN = "-"


class ObjectPathKind(Enum):
    """How an ``-o`` value is interpreted when locating coverage files."""

    NEXT_TO_SOURCE = "next-to-source"
    DIRECTORY = "directory"
    FILE = "file"


def classify_object_path(object_path: str) -> ObjectPathKind:
    """Return the interpretation of *object_path*.

    The directory check hits the filesystem and only happens for a non-empty
    value; anything that is not an existing directory is treated as a file.
    """
    if not object_path:
        return ObjectPathKind.NEXT_TO_SOURCE
    if os.path.isdir(object_path):
        return ObjectPathKind.DIRECTORY
    return ObjectPathKind.FILE


def derive_stem(source_path: str, object_path: str = "") -> str:
    """Return the extension-less path shared by the coverage files of *source_path*."""
    kind = classify_object_path(object_path)
    if kind is ObjectPathKind.NEXT_TO_SOURCE:
        return os.path.join(os.path.dirname(source_path), _stem(source_path))
    if kind is ObjectPathKind.DIRECTORY:
        return os.path.join(object_path, _stem(source_path))
    # A file was given: ignore the source name and look next to that file.
    return os.path.splitext(object_path)[0]


def derive_artifact_name(stem: str, override: str | None, suffix: str) -> str:
    """Return *override* when given, otherwise ``<stem>.gc<suffix>``."""
    if override:
        return override
    return f"{stem}.gc{suffix}"


def _stem(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[0]


__all__ = [
    "DATA_SUFFIX",
    "NOTES_SUFFIX",
    "STDIN_TOKEN",
    "ObjectPathKind",
    "classify_object_path",
    "derive_artifact_name",
    "derive_stem",
]
