"""Per-source resolution, validation and reporting of coverage files."""

from __future__ import annotations

import io
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from .gcov import CoverageGraph, GCOVBuffer, GCOVFile, ReportRenderer
from .loader import ArtifactBuffer, ArtifactLoadError, load_artifact
from .logging import get_diagnostics, get_logger
from .models import GCOVOptions
from .paths import DATA_SUFFIX, NOTES_SUFFIX, STDIN_TOKEN, derive_artifact_name, derive_stem
from .report import renderer_for


class PipelineState(Enum):
    """Stages a source file moves through; DONE and FAILED are terminal."""

    RESOLVING_PATHS = "resolving-paths"
    LOADING_NOTES = "loading-notes"
    VALIDATING_NOTES = "validating-notes"
    LOADING_DATA = "loading-data"
    VALIDATING_DATA = "validating-data"
    REPORTING = "reporting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ReportOutcome:
    """Where processing of one source file ended up."""

    source_file: str
    state: PipelineState
    gcno_file: str = ""
    gcda_file: str = ""
    failed_at: Optional[PipelineState] = None

    @property
    def reported(self) -> bool:
        return self.state is PipelineState.DONE


class CoverageReporter:
    """Locates, validates and reports the coverage files of source files.

    Every failure is written to the diagnostics logger and ends processing of
    that one source file; nothing is raised to the caller.
    """

    def __init__(
        self,
        options: GCOVOptions | None = None,
        *,
        object_directory: str = "",
        gcno_override: str = "",
        gcda_override: str = "",
        dump: bool = False,
        renderer: ReportRenderer | None = None,
        graph_factory: Callable[[], CoverageGraph] = GCOVFile,
        buffer_factory: Callable[[bytes], GCOVBuffer] = GCOVBuffer,
        loader: Callable[[str], ArtifactBuffer] = load_artifact,
    ) -> None:
        self.options = options or GCOVOptions()
        self.object_directory = object_directory
        self.gcno_override = gcno_override
        self.gcda_override = gcda_override
        self.dump = dump
        self.renderer = renderer or renderer_for(self.options)
        self._graph_factory = graph_factory
        self._buffer_factory = buffer_factory
        self._load = loader
        self.logger = get_logger("pipeline")
        self.diagnostics = get_diagnostics()

    def run(self, source_files: Iterable[str]) -> int:
        """Report every source file in order and return the process exit status."""
        for source_file in source_files:
            outcome = self.report(source_file)
            self.logger.debug("%s finished in state %s", source_file, outcome.state.value)
        return 0

    def report(self, source_file: str) -> ReportOutcome:
        """Run the full pipeline for one source file."""
        outcome = ReportOutcome(source_file=source_file, state=PipelineState.RESOLVING_PATHS)
        # A fresh graph per source keeps counts from leaking between files.
        graph = self._graph_factory()

        stem = derive_stem(source_file, self.object_directory)
        outcome.gcno_file = derive_artifact_name(stem, self.gcno_override, NOTES_SUFFIX)
        outcome.gcda_file = derive_artifact_name(stem, self.gcda_override, DATA_SUFFIX)
        self.logger.debug(
            "Resolved %s -> notes %s, data %s", source_file, outcome.gcno_file, outcome.gcda_file
        )

        outcome.state = PipelineState.LOADING_NOTES
        try:
            notes = self._load(outcome.gcno_file)
        except ArtifactLoadError as exc:
            self.diagnostics.error(exc.describe())
            return self._fail(outcome)

        outcome.state = PipelineState.VALIDATING_NOTES
        if not graph.read_gcno(self._buffer_factory(notes.data)):
            self.diagnostics.error("Invalid .gcno File!")
            return self._fail(outcome)

        outcome.state = PipelineState.LOADING_DATA
        try:
            data: Optional[ArtifactBuffer] = self._load(outcome.gcda_file)
        except ArtifactLoadError as exc:
            if not exc.is_missing:
                self.diagnostics.error(exc.describe())
                return self._fail(outcome)
            # Not run yet: report with zero counts and say nothing was read.
            self.logger.debug("No data file %s; reporting notes only", outcome.gcda_file)
            outcome.gcda_file = STDIN_TOKEN
            data = None

        if data is not None:
            outcome.state = PipelineState.VALIDATING_DATA
            self._validate_data(graph, outcome.gcda_file, data)

        outcome.state = PipelineState.REPORTING
        if self.dump:
            stream = io.StringIO()
            graph.dump(stream)
            self.diagnostics.info(stream.getvalue().rstrip("\n"))
        self.renderer.render(
            self.options, source_file, outcome.gcno_file, outcome.gcda_file, graph
        )
        outcome.state = PipelineState.DONE
        return outcome

    def _validate_data(self, graph: CoverageGraph, gcda_file: str, data: ArtifactBuffer) -> None:
        buffer = self._buffer_factory(data.data)
        if not buffer.has_gcda_header():
            self.diagnostics.error("%s:not a gcov data file", gcda_file)
        elif not graph.read_gcda(buffer):
            self.diagnostics.error("Invalid .gcda File!")

    def _fail(self, outcome: ReportOutcome) -> ReportOutcome:
        outcome.failed_at = outcome.state
        outcome.state = PipelineState.FAILED
        return outcome


__all__ = ["CoverageReporter", "PipelineState", "ReportOutcome"]
