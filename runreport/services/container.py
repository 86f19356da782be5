from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from runreport.core.config import Settings
from runreport.core.logging import get_logger

from .identifiers import IdentifierGenerator
from .ingestion import IngestionService
from .notifier import NotificationDispatcher, NotificationSink, NullNotifier, WebhookNotifier
from .query import QueryService
from .report_renderer import ReportRenderer
from .report_store import ReportStore
from .validator import ReportValidator

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    """Everything the HTTP layer needs, owned by the application lifespan."""

    store: ReportStore
    ingestion: IngestionService
    query: QueryService
    renderer: ReportRenderer
    dispatcher: NotificationDispatcher

    def close(self) -> None:
        self.dispatcher.shutdown(wait=True)


def build_notification_sink(settings: Settings) -> NotificationSink:
    if not settings.notification_webhook_url:
        logger.info("NOTIFICATION_WEBHOOK_URL not set, report notifications disabled")
        return NullNotifier()
    return WebhookNotifier(
        settings.notification_webhook_url,
        public_base_url=settings.public_base_url,
        timeout=settings.notification_timeout_seconds,
    )


def build_container(
    settings: Settings,
    *,
    sink: NotificationSink | None = None,
) -> ServiceContainer:
    store = ReportStore(settings.reports_file)
    dispatcher = NotificationDispatcher(sink or build_notification_sink(settings))
    ingestion = IngestionService(
        store=store,
        validator=ReportValidator(max_skew=timedelta(seconds=settings.timestamp_skew_seconds)),
        id_generator=IdentifierGenerator(),
        dispatcher=dispatcher,
    )
    return ServiceContainer(
        store=store,
        ingestion=ingestion,
        query=QueryService(store),
        renderer=ReportRenderer(),
        dispatcher=dispatcher,
    )
