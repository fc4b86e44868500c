"""gcov-style annotated source reports."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO

from ..gcov.file import GCOVFile, GCOVFunction
from ..logging import get_diagnostics, get_logger
from ..models import GCOVOptions
from .lines import LineInfo, branch_arcs, branch_totals, collect_lines, line_totals, percent
from .naming import is_reportable, output_name

_EOF_TEXT = "/*EOF*/"


class TextRenderer:
    """Writes one ``.gcov`` file per source referenced by the graph.

    Summaries (``File '...'``, ``Lines executed:...``) always go to *stdout*;
    the annotated listing goes to a ``.gcov`` file, to *stdout* with ``-t``,
    or nowhere with ``-n``.
    """

    def __init__(
        self,
        stdout: Optional[TextIO] = None,
        *,
        output_dir: Path | None = None,
        source_reader: Callable[[str], Optional[List[str]]] | None = None,
    ) -> None:
        self._stdout = stdout
        self.output_dir = output_dir
        self._read_source = source_reader or _read_source_lines
        self.logger = get_logger("report")
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
        out = self.stdout
        if options.func_coverage:
            for function in graph.functions:
                self._write_function_summary(out, graph, function)

        for filename in graph.source_files() or [source_file]:
            if not is_reportable(filename, options):
                self.logger.debug("Skipping %s (relative-only)", filename)
                continue
            lines = collect_lines(graph, filename)
            out.write(f"File '{filename}'\n")
            self._write_totals(out, options, lines)
            if options.no_output:
                out.write("\n")
                continue
            body = self._format_file(options, filename, gcno_file, gcda_file, graph, lines)
            if options.use_stdout:
                out.write(body)
            else:
                name = output_name(filename, source_file, options)
                if self._write_output(name, body):
                    out.write(f"Creating '{name}'\n")
            out.write("\n")

    def _write_function_summary(self, out: TextIO, graph: GCOVFile, function: GCOVFunction) -> None:
        lines: Dict[int, LineInfo] = {}
        for number, info in collect_lines(graph, function.filename).items():
            owned = [(fn, block) for fn, block in info.blocks if fn is function]
            if owned:
                lines[number] = LineInfo(filename=info.filename, number=number, blocks=owned)
        executed, total = line_totals(lines)
        out.write(f"Function '{function.name}'\n")
        if total:
            out.write(f"Lines executed:{percent(executed, total)} of {total}\n")
        else:
            out.write("No executable lines\n")
        out.write("\n")

    def _write_totals(self, out: TextIO, options: GCOVOptions, lines: Dict[int, LineInfo]) -> None:
        executed, total = line_totals(lines)
        if total:
            out.write(f"Lines executed:{percent(executed, total)} of {total}\n")
        else:
            out.write("No executable lines\n")
        if not options.branch_info:
            return
        branches, branches_executed, taken = branch_totals(lines)
        if branches:
            out.write(f"Branches executed:{percent(branches_executed, branches)} of {branches}\n")
            out.write(f"Taken at least once:{percent(taken, branches)} of {branches}\n")
        else:
            out.write("No branches\n")

    def _format_file(
        self,
        options: GCOVOptions,
        filename: str,
        gcno_file: str,
        gcda_file: str,
        graph: GCOVFile,
        lines: Dict[int, LineInfo],
    ) -> str:
        rows = [
            _row("-", 0, f"Source:{filename}"),
            _row("-", 0, f"Graph:{gcno_file}"),
            _row("-", 0, f"Data:{gcda_file}"),
            _row("-", 0, f"Runs:{graph.run_count}"),
        ]
        text = self._read_source(filename)
        if text is None:
            self.diagnostics.error("%s:cannot open source file", filename)
            text = []
        last_line = max([len(text), *lines.keys()], default=0)
        starts = {}
        for function in graph.functions_in(filename):
            starts.setdefault(function.start_line, []).append(function)

        for number in range(1, last_line + 1):
            source = text[number - 1] if number <= len(text) else _EOF_TEXT
            if options.branch_info:
                for function in starts.get(number, []):
                    rows.append(_function_header(function))
            info = lines.get(number)
            rows.append(_row(_count_column(info), number, source))
            if info is None:
                continue
            if options.all_blocks:
                for _function, block in info.blocks:
                    label = str(block.count) if block.count else "$$$$$"
                    rows.append(f"{label:>9}-block {block.number:>2}\n")
            if options.branch_info:
                rows.extend(_branch_rows(options, info))
        return "".join(rows)

    def _write_output(self, name: str, body: str) -> bool:
        path = self.output_dir / name if self.output_dir is not None else Path(name)
        try:
            path.write_text(body, encoding="utf-8", errors="surrogateescape")
        except (OSError, UnicodeError) as exc:
            self.diagnostics.error("%s: %s", name, getattr(exc, "strerror", None) or exc)
            return False
        return True


def _row(count: str, number: int, text: str) -> str:
    return f"{count:>9}:{number:>5}:{text}\n"


def _count_column(info: LineInfo | None) -> str:
    if info is None:
        return "-"
    count = info.count
    return str(count) if count else "#####"


def _function_header(function: GCOVFunction) -> str:
    blocks = len(function.blocks)
    executed = percent(function.executed_blocks, blocks)
    return f"function {function.name} called {function.entry_count} blocks executed {executed}\n"


def _branch_rows(options: GCOVOptions, info: LineInfo) -> List[str]:
    rows: List[str] = []
    index = 0
    for block in info.exits:
        arcs = branch_arcs(block)
        if len(arcs) > 1:
            for arc in arcs:
                rows.append(f"branch {index:>2} {_taken(options, block.count, arc.count)}\n")
                index += 1
        elif arcs and options.uncond_branch:
            rows.append(f"unconditional {index:>2} {_taken(options, block.count, arcs[0].count)}\n")
            index += 1
    return rows


def _taken(options: GCOVOptions, block_count: int, arc_count: int) -> str:
    if block_count == 0:
        return "never executed"
    if options.branch_count:
        return f"taken {arc_count}"
    return f"taken {arc_count * 100 // block_count}%"


def _read_source_lines(filename: str) -> Optional[List[str]]:
    try:
        text = Path(filename).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    return text.splitlines()


__all__ = ["TextRenderer"]
