from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from runreport.models import Grade, ReportSummary

Number = Union[int, float]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    error: str
    code: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    reports: int


class ReportSummarySchema(_CamelModel):
    id: str
    executor: str
    success_rate: Number
    grade: Grade
    total: Number
    passed: Number
    failed: Number
    duration: Number
    created_at: datetime
    source_address: str

    @classmethod
    def from_summary(cls, summary: ReportSummary) -> "ReportSummarySchema":
        return cls(
            id=summary.id,
            executor=summary.executor,
            success_rate=summary.success_rate,
            grade=summary.grade,
            total=summary.total,
            passed=summary.passed,
            failed=summary.failed,
            duration=summary.duration,
            created_at=summary.created_at,
            source_address=summary.source_address,
        )


class ExecutorSchema(_CamelModel):
    name: str
    version: str
    type: Optional[str] = None


class ResultsSchema(_CamelModel):
    total: Number
    passed: Number
    failed: Number
    success_rate: Number


class ReportSchema(_CamelModel):
    id: str
    executor: ExecutorSchema
    system: dict[str, Any]
    player: dict[str, Any]
    results: ResultsSchema
    categories: list[Any]
    grade: Grade
    duration: Number
    created_at: datetime
    timestamp: Optional[datetime] = None
    source_address: str
    raw_payload: dict[str, Any]
