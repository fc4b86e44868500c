"""Report renderers for populated coverage graphs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, TextIO

from ..gcov.protocols import ReportRenderer
from ..models import GCOVOptions
from .intermediate import IntermediateRenderer
from .naming import is_reportable, output_name
from .text import TextRenderer


def renderer_for(
    options: GCOVOptions,
    *,
    stdout: Optional[TextIO] = None,
    output_dir: Path | None = None,
) -> ReportRenderer:
    """Return the renderer matching the selected output format."""
    if options.intermediate:
        return IntermediateRenderer(stdout, output_dir=output_dir)
    return TextRenderer(stdout, output_dir=output_dir)


__all__ = [
    "IntermediateRenderer",
    "TextRenderer",
    "is_reportable",
    "output_name",
    "renderer_for",
]
