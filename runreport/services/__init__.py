from .container import ServiceContainer, build_container
from .identifiers import IdentifierGenerator
from .ingestion import IngestionService
from .notifier import NotificationDispatcher, NotificationSink, NullNotifier, WebhookNotifier
from .query import QueryService
from .report_renderer import ReportRenderer
from .report_store import ReportStore
from .validator import ReportValidator

__all__ = [
    "IdentifierGenerator",
    "IngestionService",
    "NotificationDispatcher",
    "NotificationSink",
    "NullNotifier",
    "QueryService",
    "ReportRenderer",
    "ReportStore",
    "ReportValidator",
    "ServiceContainer",
    "WebhookNotifier",
    "build_container",
]
