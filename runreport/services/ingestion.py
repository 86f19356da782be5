from __future__ import annotations

import copy
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from runreport.core.errors import PersistenceFailedError, PersistError
from runreport.core.logging import get_logger
from runreport.models import ExecutorInfo, Grade, Report, ReportHandle, ResultCounts
from runreport.models.common import as_number

from .identifiers import IdentifierGenerator
from .notifier import NotificationDispatcher
from .report_store import ReportStore
from .validator import ReportValidator, parse_client_timestamp

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IngestionService:
    def __init__(
        self,
        store: ReportStore,
        validator: ReportValidator,
        id_generator: IdentifierGenerator,
        dispatcher: NotificationDispatcher,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._validator = validator
        self._id_generator = id_generator
        self._dispatcher = dispatcher
        self._clock = clock
        self._lock = threading.Lock()

    def ingest(self, raw_payload: Any, source_address: str) -> ReportHandle:
        error = self._validator.validate(raw_payload, now=self._clock())
        if error is not None:
            logger.info("Rejected report from %s: %s (%s)", source_address, error.code, error.message)
            raise error

        with self._lock:
            report_id = self._id_generator.generate(self._store.ids())
            created_at = self._clock()
            latest = self._store.latest_created_at
            if latest is not None and latest > created_at:
                created_at = latest
            report = self._build_report(report_id, raw_payload, source_address, created_at)
            try:
                self._store.append(report)
            except PersistError as exc:
                logger.exception("Report %s kept in memory but not persisted", report_id)
                raise PersistenceFailedError() from exc

        logger.info(
            "Stored report %s from %s (executor=%s)", report.id, source_address, report.executor.name
        )
        self._dispatcher.dispatch(report)
        return ReportHandle(id=report.id, created_at=report.created_at)

    @staticmethod
    def _build_report(
        report_id: str,
        payload: Mapping[str, Any],
        source_address: str,
        created_at: datetime,
    ) -> Report:
        raw_payload = copy.deepcopy(dict(payload))
        player = payload.get("player")
        duration = as_number(payload.get("duration"))
        return Report(
            id=report_id,
            executor=ExecutorInfo.from_dict(payload["executor"]),
            system=copy.deepcopy(dict(payload["system"])),
            player=copy.deepcopy(dict(player)) if isinstance(player, Mapping) else {},
            results=ResultCounts(
                total=as_number(payload.get("total")),
                passed=as_number(payload.get("passes")),
                failed=as_number(payload.get("fails")),
                success_rate=as_number(payload.get("successRate")),
            ),
            categories=tuple(copy.deepcopy(payload["categories"])),
            grade=Grade.from_raw(payload.get("grade")),
            duration=duration if duration > 0 else 0,
            created_at=created_at,
            timestamp=parse_client_timestamp(payload.get("timestamp")),
            source_address=source_address,
            raw_payload=raw_payload,
        )
