"""Report orchestration."""

from .report_pipeline import (
    ReportPipeline,
    ReportPipelineConfig,
    ReportPipelineResult,
    create_entry_source,
    create_report_pipeline,
)

__all__ = [
    "ReportPipeline",
    "ReportPipelineConfig",
    "ReportPipelineResult",
    "create_entry_source",
    "create_report_pipeline",
]
