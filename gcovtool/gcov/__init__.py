"""Reader for gcov notes (.gcno) and data (.gcda) files."""

from .buffer import GCOVBuffer, GCOVFormatError
from .file import GCOVArc, GCOVBlock, GCOVFile, GCOVFunction
from .protocols import CoverageBuffer, CoverageGraph, ReportRenderer

__all__ = [
    "CoverageBuffer",
    "CoverageGraph",
    "GCOVArc",
    "GCOVBlock",
    "GCOVBuffer",
    "GCOVFile",
    "GCOVFormatError",
    "GCOVFunction",
    "ReportRenderer",
]
