from __future__ import annotations

from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Protocol

import httpx

from runreport.core.errors import NotificationError
from runreport.core.logging import get_logger
from runreport.models import Report

logger = get_logger(__name__)


class NotificationSink(Protocol):
    def notify(self, report: Report) -> None:
        ...


class NullNotifier(NotificationSink):
    def notify(self, report: Report) -> None:
        logger.debug("No notification sink configured, skipping report %s", report.id)


class WebhookNotifier(NotificationSink):
    """Posts a chat message for each new report to an incoming webhook."""

    def __init__(
        self,
        webhook_url: str,
        *,
        public_base_url: str | None = None,
        timeout: float = 10.0,
        username: str = "Run Reports",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not webhook_url:
            raise ValueError("webhook_url is required")
        self._webhook_url = webhook_url
        self._base_url = public_base_url.rstrip("/") if public_base_url else None
        self._timeout = timeout
        self._username = username
        self._transport = transport

    def notify(self, report: Report) -> None:
        payload = self.build_payload(report)
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self._webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationError(f"webhook delivery for {report.id} failed: {exc}") from exc

    def build_payload(self, report: Report) -> dict[str, Any]:
        results = report.results
        embed: dict[str, Any] = {
            "title": f"Report {report.id}",
            "description": f"Submitted by {report.executor.name} ({report.executor.version})",
            "fields": [
                {"name": "Grade", "value": report.grade.value, "inline": True},
                {"name": "Success rate", "value": f"{results.success_rate}%", "inline": True},
                {"name": "Passed", "value": str(results.passed), "inline": True},
                {"name": "Failed", "value": str(results.failed), "inline": True},
                {"name": "Duration", "value": f"{report.duration} ms", "inline": True},
            ],
            "timestamp": report.created_at.isoformat(),
        }
        if self._base_url:
            embed["url"] = f"{self._base_url}/report/{report.id}"
        return {
            "username": self._username,
            "content": f"New test report from {report.executor.name}",
            "embeds": [embed],
        }


class NotificationDispatcher:
    """Hands reports to a sink on a background worker, fire-and-forget.

    There is no delivery guarantee: failures are logged and dropped, and
    nothing is retried.
    """

    def __init__(self, sink: NotificationSink, executor: Executor | None = None) -> None:
        self._sink = sink
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="report-notify"
        )

    def dispatch(self, report: Report) -> Future[None] | None:
        try:
            return self._executor.submit(self._deliver, report)
        except RuntimeError:
            # executor already shut down during process exit
            logger.warning("Notification for report %s dropped: dispatcher closed", report.id)
            return None

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _deliver(self, report: Report) -> None:
        try:
            self._sink.notify(report)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Notification for report %s failed: %s", report.id, exc)
