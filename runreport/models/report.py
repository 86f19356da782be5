from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Self

from .common import Grade, as_number, format_datetime, parse_datetime

UNKNOWN_VERSION = "unknown"


@dataclass(frozen=True)
class ExecutorInfo:
    name: str
    version: str = UNKNOWN_VERSION
    type: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("executor.name is required")
        version = data.get("version")
        executor_type = data.get("type")
        return cls(
            name=name,
            version=str(version) if version not in (None, "") else UNKNOWN_VERSION,
            type=str(executor_type) if executor_type not in (None, "") else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "version": self.version, "type": self.type}


@dataclass(frozen=True)
class ResultCounts:
    total: int | float = 0
    passed: int | float = 0
    failed: int | float = 0
    success_rate: int | float = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            total=as_number(data.get("total")),
            passed=as_number(data.get("passed")),
            failed=as_number(data.get("failed")),
            success_rate=as_number(data.get("successRate")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "successRate": self.success_rate,
        }


@dataclass(frozen=True)
class ReportSummary:
    id: str
    executor: str
    success_rate: int | float
    grade: Grade
    total: int | float
    passed: int | float
    failed: int | float
    duration: int | float
    created_at: datetime
    source_address: str


@dataclass(frozen=True)
class ReportHandle:
    id: str
    created_at: datetime


@dataclass(frozen=True)
class Report:
    """One ingested test run. Never mutated once stored."""

    id: str
    executor: ExecutorInfo
    system: Mapping[str, Any]
    results: ResultCounts
    created_at: datetime
    source_address: str
    player: Mapping[str, Any] = field(default_factory=dict)
    categories: tuple[Any, ...] = ()
    grade: Grade = Grade.F
    duration: int | float = 0
    timestamp: datetime | None = None
    raw_payload: Mapping[str, Any] = field(default_factory=dict)

    @property
    def summary(self) -> ReportSummary:
        return ReportSummary(
            id=self.id,
            executor=self.executor.name,
            success_rate=self.results.success_rate,
            grade=self.grade,
            total=self.results.total,
            passed=self.results.passed,
            failed=self.results.failed,
            duration=self.duration,
            created_at=self.created_at,
            source_address=self.source_address,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "executor": self.executor.to_dict(),
            "system": dict(self.system),
            "player": dict(self.player),
            "results": self.results.to_dict(),
            "categories": list(self.categories),
            "grade": self.grade.value,
            "duration": self.duration,
            "createdAt": format_datetime(self.created_at),
            "timestamp": format_datetime(self.timestamp),
            "sourceAddress": self.source_address,
            "rawPayload": dict(self.raw_payload),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        report_id = data.get("id")
        if not isinstance(report_id, str) or not report_id:
            raise ValueError("report id is required")
        created_at = parse_datetime(data.get("createdAt"))
        if created_at is None:
            raise ValueError(f"report {report_id} has no createdAt")
        executor = data.get("executor")
        if not isinstance(executor, Mapping):
            raise ValueError(f"report {report_id} has no executor")
        results = data.get("results") or {}
        if not isinstance(results, Mapping):
            raise ValueError(f"report {report_id} has invalid results")
        return cls(
            id=report_id,
            executor=ExecutorInfo.from_dict(executor),
            system=dict(data.get("system") or {}),
            player=dict(data.get("player") or {}),
            results=ResultCounts.from_dict(results),
            categories=tuple(data.get("categories") or ()),
            grade=Grade.from_raw(data.get("grade")),
            duration=as_number(data.get("duration")),
            created_at=created_at,
            timestamp=parse_datetime(data.get("timestamp")),
            source_address=str(data.get("sourceAddress") or "unknown"),
            raw_payload=dict(data.get("rawPayload") or {}),
        )
