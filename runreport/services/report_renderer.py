from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from runreport.models import RenderModel, ReportSummary

from .query import grade_tone, success_tone


class ReportRenderer:
    """HTML views over render models and summaries."""

    def __init__(self, templates_path: str | Path | None = None) -> None:
        if templates_path is None:
            templates_path = Path(__file__).resolve().parent.parent / "templates"
        self._jinja = Environment(
            loader=FileSystemLoader(templates_path),
            autoescape=select_autoescape(["html"]),
        )
        self._jinja.filters["datetime"] = _format_datetime
        self._report_template = self._jinja.get_template("report.html")
        self._index_template = self._jinja.get_template("index.html")

    def render_report(self, model: RenderModel) -> str:
        return self._report_template.render(report=model)

    def render_index(self, summaries: Sequence[ReportSummary]) -> str:
        rows = [
            {
                "summary": summary,
                "grade_tone": grade_tone(summary.grade).value,
                "success_tone": success_tone(summary.success_rate).value,
            }
            for summary in summaries
        ]
        return self._index_template.render(rows=rows, count=len(rows))


def _format_datetime(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M:%S UTC")
