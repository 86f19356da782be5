from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .common import Grade, Tone


@dataclass(frozen=True)
class CategoryView:
    name: str
    passed: int | float | None
    failed: int | float | None
    tone: Tone
    details: str | None = None


@dataclass(frozen=True)
class RenderModel:
    """Presentation-ready projection of a report for the HTML views."""

    id: str
    executor_name: str
    executor_version: str
    executor_type: str | None
    grade: Grade
    grade_tone: Tone
    success_rate: int | float
    success_tone: Tone
    total: int | float
    passed: int | float
    failed: int | float
    pass_ratio_pct: float
    duration_ms: int | float
    created_at: datetime
    timestamp: datetime | None
    source_address: str
    categories: tuple[CategoryView, ...]
    system: tuple[tuple[str, str], ...]
    player: tuple[tuple[str, str], ...]
    raw_payload_json: str
