from __future__ import annotations

import json
from typing import Any, Mapping

from runreport.models import CategoryView, Grade, RenderModel, Report, ReportSummary, Tone
from runreport.models.common import as_number, is_number

from .report_store import ReportStore

GOOD_SUCCESS_RATE = 90
WARN_SUCCESS_RATE = 70

_GRADE_TONES = {
    Grade.S: Tone.GOOD,
    Grade.A: Tone.GOOD,
    Grade.B: Tone.GOOD,
    Grade.C: Tone.WARN,
    Grade.D: Tone.WARN,
    Grade.F: Tone.BAD,
}


class QueryService:
    def __init__(self, store: ReportStore) -> None:
        self._store = store

    def get_summary_list(self) -> tuple[ReportSummary, ...]:
        return self._store.list()

    def get_full(self, report_id: str) -> Report | None:
        return self._store.get(report_id)

    def get_render_model(self, report_id: str) -> RenderModel | None:
        report = self._store.get(report_id)
        if report is None:
            return None
        return build_render_model(report)

    def count(self) -> int:
        return len(self._store)


def success_tone(rate: int | float) -> Tone:
    if rate >= GOOD_SUCCESS_RATE:
        return Tone.GOOD
    if rate >= WARN_SUCCESS_RATE:
        return Tone.WARN
    return Tone.BAD


def grade_tone(grade: Grade) -> Tone:
    return _GRADE_TONES[grade]


def build_render_model(report: Report) -> RenderModel:
    results = report.results
    executed = results.passed + results.failed
    pass_ratio = round(results.passed / executed * 100, 1) if executed > 0 else 0.0
    return RenderModel(
        id=report.id,
        executor_name=report.executor.name,
        executor_version=report.executor.version,
        executor_type=report.executor.type,
        grade=report.grade,
        grade_tone=grade_tone(report.grade),
        success_rate=results.success_rate,
        success_tone=success_tone(results.success_rate),
        total=results.total,
        passed=results.passed,
        failed=results.failed,
        pass_ratio_pct=pass_ratio,
        duration_ms=report.duration,
        created_at=report.created_at,
        timestamp=report.timestamp,
        source_address=report.source_address,
        categories=tuple(
            _category_view(index, category) for index, category in enumerate(report.categories, start=1)
        ),
        system=_pairs(report.system),
        player=_pairs(report.player),
        raw_payload_json=json.dumps(report.raw_payload, ensure_ascii=False, indent=2, default=str),
    )


def _category_view(index: int, category: Any) -> CategoryView:
    if not isinstance(category, Mapping):
        return CategoryView(
            name=f"Category {index}",
            passed=None,
            failed=None,
            tone=Tone.WARN,
            details=_display(category),
        )
    name = category.get("name") or category.get("title") or f"Category {index}"
    passed = category.get("passes", category.get("passed"))
    failed = category.get("fails", category.get("failed"))
    passed = as_number(passed) if is_number(passed) else None
    failed = as_number(failed) if is_number(failed) else None
    if failed:
        tone = Tone.BAD
    elif passed is None and failed is None:
        tone = Tone.WARN
    else:
        tone = Tone.GOOD
    extra = {
        key: value
        for key, value in category.items()
        if key not in {"name", "title", "passes", "passed", "fails", "failed"}
    }
    return CategoryView(
        name=str(name),
        passed=passed,
        failed=failed,
        tone=tone,
        details=_display(extra) if extra else None,
    )


def _pairs(data: Mapping[str, Any]) -> tuple[tuple[str, str], ...]:
    return tuple((str(key), _display(value)) for key, value in data.items())


def _display(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)
