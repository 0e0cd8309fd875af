"""Datglot - DAT archive text export and translation patching CLI tool."""

__version__ = "0.1.0"

from datglot.logger import (  # noqa: E402
    ConsoleProgressDisplay,
    DatglotLogger,
    LogConfig,
    ProgressDisplay,
    VerboseLevel,
)
from datglot.pipeline import (  # noqa: E402
    ExportPipeline,
    ExportSummary,
    Operation,
    OperationProgress,
    PatchPipeline,
    PatchSummary,
    ProgressCallback,
)

__all__ = [
    "ConsoleProgressDisplay",
    "DatglotLogger",
    "ExportPipeline",
    "ExportSummary",
    "LogConfig",
    "Operation",
    "OperationProgress",
    "PatchPipeline",
    "PatchSummary",
    "ProgressCallback",
    "ProgressDisplay",
    "VerboseLevel",
]
