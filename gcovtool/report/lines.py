"""Per-line and per-branch views over a populated coverage graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..gcov.file import GCOVArc, GCOVBlock, GCOVFile, GCOVFunction


@dataclass
class LineInfo:
    """Blocks on one source line and the count reported for it."""

    filename: str
    number: int
    blocks: List[Tuple[GCOVFunction, GCOVBlock]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return max((block.count for _function, block in self.blocks), default=0)

    @property
    def exits(self) -> List[GCOVBlock]:
        """Blocks whose last line in this file is this line; branches print here."""
        result = []
        for _function, block in self.blocks:
            numbers = [line for name, line in block.lines if name == self.filename]
            if numbers and numbers[-1] == self.number:
                result.append(block)
        return result


def collect_lines(graph: GCOVFile, filename: str) -> Dict[int, LineInfo]:
    """Return the instrumented lines of *filename* keyed by line number."""
    lines: Dict[int, LineInfo] = {}
    for number, blocks in sorted(graph.line_blocks(filename).items()):
        info = LineInfo(filename=filename, number=number)
        seen = set()
        for function, block in blocks:
            key = (function.ident, block.number)
            if key in seen:
                continue
            seen.add(key)
            info.blocks.append((function, block))
        lines[number] = info
    return lines


def branch_arcs(block: GCOVBlock) -> List[GCOVArc]:
    """Return the non-fake arcs leaving *block*."""
    return [arc for arc in block.succs if not arc.fake]


def line_totals(lines: Dict[int, LineInfo]) -> Tuple[int, int]:
    """Return ``(executed, instrumented)`` line counts."""
    executed = sum(1 for info in lines.values() if info.count > 0)
    return executed, len(lines)


def branch_totals(lines: Dict[int, LineInfo]) -> Tuple[int, int, int]:
    """Return ``(branches, executed, taken)`` over conditional branches."""
    total = executed = taken = 0
    for info in lines.values():
        for block in info.exits:
            arcs = branch_arcs(block)
            if len(arcs) < 2:
                continue
            total += len(arcs)
            if block.count > 0:
                executed += len(arcs)
                taken += sum(1 for arc in arcs if arc.count > 0)
    return total, executed, taken


def percent(part: int, whole: int) -> str:
    """Format a percentage the way gcov summaries do."""
    if whole == 0:
        return "0.00%"
    return f"{100.0 * part / whole:.2f}%"


__all__ = [
    "LineInfo",
    "branch_arcs",
    "branch_totals",
    "collect_lines",
    "line_totals",
    "percent",
]
