"""gcov compatible coverage reporting."""

from .models import GCOVOptions
from .pipeline import CoverageReporter, PipelineState, ReportOutcome

__version__ = "0.1.0"

__all__ = ["CoverageReporter", "GCOVOptions", "PipelineState", "ReportOutcome", "__version__"]
