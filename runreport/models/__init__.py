from .common import Grade, Tone
from .render import CategoryView, RenderModel
from .report import (
    UNKNOWN_VERSION,
    ExecutorInfo,
    Report,
    ReportHandle,
    ReportSummary,
    ResultCounts,
)

__all__ = [
    "CategoryView",
    "ExecutorInfo",
    "Grade",
    "RenderModel",
    "Report",
    "ReportHandle",
    "ReportSummary",
    "ResultCounts",
    "Tone",
    "UNKNOWN_VERSION",
]
