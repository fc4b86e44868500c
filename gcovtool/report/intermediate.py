"""Intermediate text format (``-i``), one record per line."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional, TextIO

from ..gcov.file import GCOVFile
from ..logging import get_diagnostics
from ..models import GCOVOptions
from .lines import branch_arcs, collect_lines
from .naming import is_reportable, output_name


class IntermediateRenderer:
    """Writes ``file:``, ``function:``, ``lcount:`` and ``branch:`` records.

    All sources reached from one notes file go into a single output named
    after the main source file.
    """

    def __init__(self, stdout: Optional[TextIO] = None, *, output_dir: Path | None = None) -> None:
        self._stdout = stdout
        self.output_dir = output_dir
        self.diagnostics = get_diagnostics()

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def render(
        self,
        options: GCOVOptions,
        source_file: str,
        gcno_file: str,
        gcda_file: str,
        graph: GCOVFile,
    ) -> None:
        records: List[str] = []
        for filename in graph.source_files() or [source_file]:
            if not is_reportable(filename, options):
                continue
            records.append(f"file:{filename}")
            for function in graph.functions_in(filename):
                records.append(
                    f"function:{function.start_line},{function.entry_count},{function.name}"
                )
            for number, info in collect_lines(graph, filename).items():
                records.append(f"lcount:{number},{info.count}")
                for block in info.exits:
                    arcs = branch_arcs(block)
                    if len(arcs) < 2:
                        continue
                    for arc in arcs:
                        if block.count == 0:
                            state = "notexec"
                        elif arc.count > 0:
                            state = "taken"
                        else:
                            state = "nottaken"
                        records.append(f"branch:{number},{state}")
        body = "".join(f"{record}\n" for record in records)

        if options.no_output:
            return
        if options.use_stdout:
            self.stdout.write(body)
            return
        name = output_name(source_file, source_file, options)
        path = self.output_dir / name if self.output_dir is not None else Path(name)
        try:
            path.write_text(body, encoding="utf-8", errors="surrogateescape")
        except (OSError, UnicodeError) as exc:
            self.diagnostics.error("%s: %s", name, getattr(exc, "strerror", None) or exc)
            return
        self.stdout.write(f"Creating '{name}'\n")


__all__ = ["IntermediateRenderer"]
