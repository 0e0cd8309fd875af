"""エクスポート・パッチパイプライン"""

from datglot.pipeline.export import ExportPipeline, ExportSummary, format_fragment_line
from datglot.pipeline.patch import PatchPipeline, PatchSummary
from datglot.pipeline.progress import Operation, OperationProgress, ProgressCallback

__all__ = [
    "ExportPipeline",
    "ExportSummary",
    "Operation",
    "OperationProgress",
    "PatchPipeline",
    "PatchSummary",
    "ProgressCallback",
    "format_fragment_line",
]
