"""In-memory coverage graph built from notes and data files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, TextIO, Tuple

from ..logging import get_logger
from .buffer import (
    GCOVBuffer,
    GCOVFormatError,
    TAG_ARCS,
    TAG_BLOCKS,
    TAG_COUNTER_ARCS,
    TAG_FUNCTION,
    TAG_LINES,
    TAG_OBJECT_SUMMARY,
    TAG_PROGRAM_SUMMARY,
    version_number,
)

_LOGGER = get_logger("gcov")

# Layout changes, as major * 10 + minor.
V407 = 47
V800 = 80
V900 = 90
V1200 = 120

ARC_ON_TREE = 0x1
ARC_FAKE = 0x2
ARC_FALLTHROUGH = 0x4


@dataclass
class GCOVArc:
    """Control-flow edge between two blocks of a function."""

    src: int
    dst: int
    flags: int
    count: int = 0
    solved: bool = False

    @property
    def on_tree(self) -> bool:
        return bool(self.flags & ARC_ON_TREE)

    @property
    def fake(self) -> bool:
        return bool(self.flags & ARC_FAKE)


@dataclass
class GCOVBlock:
    """Basic block with the source lines it covers."""

    number: int
    lines: List[Tuple[str, int]] = field(default_factory=list)
    preds: List[GCOVArc] = field(default_factory=list)
    succs: List[GCOVArc] = field(default_factory=list)
    count: int = 0
    solved: bool = False


@dataclass
class GCOVFunction:
    """Function record from a notes file plus the counts applied to it."""

    ident: int
    lineno_checksum: int
    cfg_checksum: int
    name: str
    filename: str = ""
    start_line: int = 0
    start_column: int = 0
    end_line: int = 0
    artificial: bool = False
    blocks: List[GCOVBlock] = field(default_factory=list)
    arcs: List[GCOVArc] = field(default_factory=list)

    @property
    def instrumented_arcs(self) -> List[GCOVArc]:
        return [arc for arc in self.arcs if not arc.on_tree]

    @property
    def entry_count(self) -> int:
        if not self.blocks:
            return 0
        return self.blocks[0].count

    @property
    def executed_blocks(self) -> int:
        return sum(1 for block in self.blocks if block.count > 0)

    def block(self, number: int) -> GCOVBlock:
        if number < 0 or number >= len(self.blocks):
            raise GCOVFormatError(
                f"function {self.name}: block {number} out of range ({len(self.blocks)} blocks)"
            )
        return self.blocks[number]


class GCOVFile:
    """Coverage graph for one object file.

    ``read_gcno`` must succeed before ``read_gcda``. A data file is applied
    all-or-nothing: if any part of it is rejected the graph keeps the counts
    it had before the call.
    """

    def __init__(self) -> None:
        self.version = ""
        self.checksum = 0
        self.cwd = ""
        self.functions: List[GCOVFunction] = []
        self.run_count = 0
        self.program_count = 0
        self.gcno_loaded = False
        self.gcda_loaded = False
        self._by_ident: Dict[int, GCOVFunction] = {}

    # -- notes -----------------------------------------------------------

    def read_gcno(self, buffer: GCOVBuffer) -> bool:
        """Populate the graph from a notes file; return False if it is invalid."""
        if not buffer.read_gcno_format():
            _LOGGER.debug("Missing gcno magic")
            return False
        try:
            self._parse_gcno(buffer)
        except GCOVFormatError as exc:
            _LOGGER.debug("Rejected notes file: %s", exc)
            self.functions = []
            self._by_ident = {}
            return False
        self.gcno_loaded = True
        return True

    def _parse_gcno(self, buffer: GCOVBuffer) -> None:
        self.version = buffer.read_version()
        number = version_number(self.version)
        if number == 0:
            raise GCOVFormatError(f"unrecognised version {self.version!r}")
        if number >= V1200:
            raise GCOVFormatError(f"unsupported version {self.version!r}")
        self.checksum = buffer.read_word()
        if number >= V900:
            self.cwd = buffer.read_string()
        if number >= V800:
            buffer.read_word()  # has_unexecuted_blocks

        current: Optional[GCOVFunction] = None
        for tag, length, _end in buffer.records():
            if tag == TAG_FUNCTION:
                current = self._read_function(buffer, number)
                self.functions.append(current)
                self._by_ident[current.ident] = current
            elif current is None:
                raise GCOVFormatError(f"record 0x{tag:08x} before any function")
            elif tag == TAG_BLOCKS:
                count = buffer.read_word() if number >= V800 else length
                current.blocks = [GCOVBlock(number=index) for index in range(count)]
            elif tag == TAG_ARCS:
                src = current.block(buffer.read_word())
                for _ in range((length - 1) // 2):
                    dst = current.block(buffer.read_word())
                    arc = GCOVArc(src=src.number, dst=dst.number, flags=buffer.read_word())
                    src.succs.append(arc)
                    dst.preds.append(arc)
                    current.arcs.append(arc)
            elif tag == TAG_LINES:
                block = current.block(buffer.read_word())
                filename = current.filename
                while True:
                    line = buffer.read_word()
                    if line != 0:
                        block.lines.append((filename, line))
                        continue
                    name = buffer.read_string()
                    if not name:
                        break
                    filename = name

    def _read_function(self, buffer: GCOVBuffer, number: int) -> GCOVFunction:
        ident = buffer.read_word()
        lineno_checksum = buffer.read_word()
        cfg_checksum = buffer.read_word() if number >= V407 else 0
        name = buffer.read_string()
        function = GCOVFunction(
            ident=ident,
            lineno_checksum=lineno_checksum,
            cfg_checksum=cfg_checksum,
            name=name,
        )
        if number < V800:
            function.filename = buffer.read_string()
            function.start_line = buffer.read_word()
        else:
            function.artificial = bool(buffer.read_word())
            function.filename = buffer.read_string()
            function.start_line = buffer.read_word()
            function.start_column = buffer.read_word()
            function.end_line = buffer.read_word()
            if number >= V900:
                buffer.read_word()  # end column
        return function

    # -- data ------------------------------------------------------------

    def read_gcda(self, buffer: GCOVBuffer) -> bool:
        """Apply counts from a data file; return False and change nothing if invalid."""
        if not self.gcno_loaded:
            _LOGGER.debug("Data file read before notes file")
            return False
        if not buffer.read_gcda_format():
            _LOGGER.debug("Missing gcda magic")
            return False
        try:
            counts, runs, programs = self._parse_gcda(buffer)
        except GCOVFormatError as exc:
            _LOGGER.debug("Rejected data file: %s", exc)
            return False

        for function in self.functions:
            values = counts.get(function.ident)
            for arc, value in zip(function.instrumented_arcs, values or ()):
                arc.count += value
        self.run_count += runs
        self.program_count += programs
        self.gcda_loaded = True
        for function in self.functions:
            _solve_function(function)
        return True

    def _parse_gcda(self, buffer: GCOVBuffer) -> Tuple[Dict[int, List[int]], int, int]:
        version = buffer.read_version()
        if version != self.version:
            raise GCOVFormatError(f"version {version!r} does not match notes {self.version!r}")
        stamp = buffer.read_word()
        if stamp != self.checksum:
            raise GCOVFormatError("file checksums do not match")

        number = version_number(version)
        counts: Dict[int, List[int]] = {}
        runs = 0
        programs = 0
        current: Optional[GCOVFunction] = None
        for tag, length, _end in buffer.records():
            if tag == TAG_OBJECT_SUMMARY:
                if number >= V900:
                    runs += buffer.read_word()
                else:
                    buffer.read_word()  # checksum
                    buffer.read_word()  # counter count
                    runs += buffer.read_word()
            elif tag == TAG_PROGRAM_SUMMARY:
                programs += 1
            elif tag == TAG_FUNCTION:
                if length == 0:
                    current = None
                    continue
                ident = buffer.read_word()
                current = self._by_ident.get(ident)
                if current is None:
                    raise GCOVFormatError(f"unknown function ident {ident}")
                if buffer.read_word() != current.lineno_checksum:
                    raise GCOVFormatError(f"function {current.name}: line checksum mismatch")
                if number >= V407 and buffer.read_word() != current.cfg_checksum:
                    raise GCOVFormatError(f"function {current.name}: cfg checksum mismatch")
            elif tag == TAG_COUNTER_ARCS:
                if current is None:
                    raise GCOVFormatError("arc counters outside of a function")
                expected = len(current.instrumented_arcs)
                if length != expected * 2:
                    raise GCOVFormatError(
                        f"function {current.name}: {length // 2} counters for {expected} arcs"
                    )
                counts[current.ident] = [buffer.read_counter() for _ in range(expected)]
        return counts, runs, programs

    # -- queries ---------------------------------------------------------

    def source_files(self) -> List[str]:
        """Return the source files referenced by line records, in first-seen order."""
        seen: Dict[str, None] = {}
        for function in self.functions:
            for block in function.blocks:
                for filename, _line in block.lines:
                    seen.setdefault(filename, None)
        return list(seen)

    def line_blocks(self, filename: str) -> Dict[int, List[Tuple[GCOVFunction, GCOVBlock]]]:
        """Map each line of *filename* to the blocks that cover it."""
        result: Dict[int, List[Tuple[GCOVFunction, GCOVBlock]]] = {}
        for function in self.functions:
            for block in function.blocks:
                for name, line in block.lines:
                    if name == filename:
                        result.setdefault(line, []).append((function, block))
        return result

    def functions_in(self, filename: str) -> Iterator[GCOVFunction]:
        for function in self.functions:
            if function.filename == filename:
                yield function

    def dump(self, stream: TextIO) -> None:
        """Write a readable listing of the graph, for debugging."""
        stream.write(f"version: {self.version} checksum: 0x{self.checksum:08x}\n")
        if self.cwd:
            stream.write(f"cwd: {self.cwd}\n")
        stream.write(f"runs: {self.run_count} programs: {self.program_count}\n")
        for function in self.functions:
            stream.write(
                f"===== {function.name} ({function.ident}) @ "
                f"{function.filename}:{function.start_line}\n"
            )
            for block in function.blocks:
                stream.write(f"Block : {block.number} Counter : {block.count}\n")
                if block.preds:
                    stream.write(f"\tSource Edges : {_format_edges(block.preds, 'src')}\n")
                if block.succs:
                    stream.write(f"\tDestination Edges : {_format_edges(block.succs, 'dst')}\n")
                if block.lines:
                    lines = ",".join(str(line) for _name, line in block.lines)
                    stream.write(f"\tLines : {lines}\n")


def _format_edges(arcs: List[GCOVArc], end: str) -> str:
    return ", ".join(f"{getattr(arc, end)} ({arc.count})" for arc in arcs)


def _solve_function(function: GCOVFunction) -> None:
    """Derive block and tree-arc counts by flow conservation.

    Instrumented arcs carry measured counts; every other count follows from
    in-flow equalling out-flow at each block.
    """
    for block in function.blocks:
        block.solved = False
        block.count = 0
    for arc in function.arcs:
        arc.solved = not arc.on_tree
        if arc.on_tree:
            arc.count = 0

    changed = True
    while changed:
        changed = False
        for block in function.blocks:
            if not block.solved:
                for arcs in (block.succs, block.preds):
                    if arcs and all(arc.solved for arc in arcs):
                        block.count = sum(arc.count for arc in arcs)
                        block.solved = True
                        changed = True
                        break
            if not block.solved:
                continue
            for arcs in (block.succs, block.preds):
                pending = [arc for arc in arcs if not arc.solved]
                if len(pending) == 1:
                    known = sum(arc.count for arc in arcs if arc.solved)
                    pending[0].count = max(block.count - known, 0)
                    pending[0].solved = True
                    changed = True

    unsolved = [block.number for block in function.blocks if not block.solved]
    if unsolved:
        _LOGGER.debug("Function %s: could not solve blocks %s", function.name, unsolved)


__all__ = ["GCOVArc", "GCOVBlock", "GCOVFile", "GCOVFunction"]
