"""Interfaces the reporting pipeline expects from coverage backends."""

from __future__ import annotations

from typing import Protocol, TextIO, runtime_checkable

from ..models import GCOVOptions


@runtime_checkable
class CoverageBuffer(Protocol):
    """Bytes of a notes or data file that can be sniffed for a data header."""

    def has_gcda_header(self) -> bool:
        """Return True when the bytes start with a data-file magic."""


@runtime_checkable
class CoverageGraph(Protocol):
    """Aggregate built from one notes file and optionally one data file."""

    def read_gcno(self, buffer: CoverageBuffer) -> bool:
        """Populate from notes bytes; False means the format is invalid."""

    def read_gcda(self, buffer: CoverageBuffer) -> bool:
        """Apply data bytes; False means the content was rejected."""

    def dump(self, stream: TextIO) -> None:
        """Write a debugging listing to *stream*."""


@runtime_checkable
class ReportRenderer(Protocol):
    """Turns a populated graph into user-facing output."""

    def render(
        self,
        options: GCOVOptions,
        source_file: str,
        gcno_file: str,
        gcda_file: str,
        graph: CoverageGraph,
    ) -> None:
        """Write the report for *source_file*."""
