"""Output file naming compatible with gcov's -l, -p, -s and -x switches."""

from __future__ import annotations

import hashlib
import os

from ..models import GCOVOptions


def elide_prefix(path: str, prefix: str) -> str:
    """Drop *prefix* (and the separator after it) from the start of *path*."""
    if not prefix or not path.startswith(prefix):
        return path
    rest = path[len(prefix) :]
    return rest.lstrip("/") or path


def mangle_path(path: str, preserve_paths: bool) -> str:
    """Flatten *path* into a single file name component.

    Without ``preserve_paths`` only the base name is kept. With it, ``/``
    becomes ``#``, ``..`` becomes ``^`` and ``.`` components are dropped.
    """
    if not preserve_paths:
        return os.path.basename(path)
    parts = []
    for component in path.split("/"):
        if component == ".":
            continue
        parts.append("^" if component == ".." else component)
    return "#".join(parts)


def output_name(source: str, main_source: str, options: GCOVOptions) -> str:
    """Return the ``.gcov`` file name for *source* reached from *main_source*."""
    name = elide_prefix(source, options.source_prefix)
    stem = mangle_path(name, options.preserve_paths)
    if options.long_file_names and source != main_source:
        main = mangle_path(elide_prefix(main_source, options.source_prefix), options.preserve_paths)
        stem = f"{main}##{stem}"
    if options.hash_filenames and (options.preserve_paths or options.long_file_names):
        digest = hashlib.md5(stem.encode("utf-8", "surrogateescape")).hexdigest()
        stem = f"{os.path.basename(name)}##{digest}"
    return f"{stem}.gcov"


def is_reportable(source: str, options: GCOVOptions) -> bool:
    """Apply ``-r``: keep relative paths and those under the ``-s`` prefix."""
    if not options.relative_only:
        return True
    if not os.path.isabs(source):
        return True
    return bool(options.source_prefix) and source.startswith(options.source_prefix)


__all__ = ["elide_prefix", "is_reportable", "mangle_path", "output_name"]
