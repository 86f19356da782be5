from __future__ import annotations

import json
import os
import tempfile
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from runreport.core.errors import PersistError
from runreport.core.logging import get_logger
from runreport.models import Report, ReportSummary

logger = get_logger(__name__)


@dataclass(frozen=True)
class _Snapshot:
    reports: tuple[Report, ...] = ()
    by_id: Mapping[str, Report] = field(default_factory=lambda: MappingProxyType({}))


class ReportStore:
    """Append-only report collection mirrored to a single JSON file.

    Every successful append rewrites the whole file, so persistence cost grows
    with the number of stored reports. Readers work on immutable snapshots and
    never take the lock.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._snapshot = _Snapshot()
        self.set_aside_path: Path | None = None

    def load(self) -> tuple[Report, ...]:
        with self._lock:
            reports = self._read_file()
            self._snapshot = _build_snapshot(reports)
        logger.info("Loaded %d reports from %s", len(reports), self.path)
        return reports

    def append(self, report: Report) -> None:
        with self._lock:
            current = self._snapshot
            if report.id in current.by_id:
                raise ValueError(f"report id {report.id} already stored")
            updated = _build_snapshot(current.reports + (report,))
            self._snapshot = updated
            # memory is already ahead of disk if this fails; the next
            # successful write carries the report
            self._write_file(updated.reports)

    def get(self, report_id: str) -> Report | None:
        return self._snapshot.by_id.get(report_id)

    def list(self) -> tuple[ReportSummary, ...]:
        reports = self._snapshot.reports
        ordered = sorted(reports, key=lambda report: report.created_at, reverse=True)
        return tuple(report.summary for report in ordered)

    def ids(self) -> frozenset[str]:
        return frozenset(self._snapshot.by_id)

    @property
    def latest_created_at(self) -> datetime | None:
        reports = self._snapshot.reports
        return reports[-1].created_at if reports else None

    def __len__(self) -> int:
        return len(self._snapshot.reports)

    def _read_file(self) -> tuple[Report, ...]:
        if not self.path.exists():
            return ()
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                raw_reports = json.load(handle)
            if not isinstance(raw_reports, list):
                raise ValueError("reports file must contain a JSON array")
            reports = tuple(Report.from_dict(item) for item in raw_reports)
            if len({report.id for report in reports}) != len(reports):
                raise ValueError("reports file contains duplicate ids")
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            self._set_aside(exc)
            return ()
        return reports

    def _set_aside(self, reason: Exception) -> None:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        target = self.path.with_name(f"{self.path.name}.unreadable-{stamp}")
        try:
            os.replace(self.path, target)
        except OSError as exc:
            # starting empty would overwrite the file on the next append
            raise PersistError(f"could not move unreadable {self.path} aside: {exc}") from exc
        self.set_aside_path = target
        logger.warning(
            "Ignoring unreadable reports file %s (%s), moved it to %s", self.path, reason, target
        )

    def _write_file(self, reports: tuple[Report, ...]) -> None:
        document = [report.to_dict() for report in reports]
        tmp_name: str | None = None
        try:
            directory = self.path.parent
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                json.dump(document, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistError(f"could not write {self.path}: {exc}") from exc


def _build_snapshot(reports: tuple[Report, ...]) -> _Snapshot:
    return _Snapshot(
        reports=reports,
        by_id=MappingProxyType({report.id: report for report in reports}),
    )
