from __future__ import annotations


class ReportServiceError(Exception):
    """Base for every error the service turns into a structured response."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ReportValidationError(ReportServiceError):
    """Client-caused rejection of a submitted payload."""

    status_code = 400
    code = "ValidationError"
    default_message = "Invalid report"


class MalformedPayloadError(ReportValidationError):
    code = "MalformedPayload"
    default_message = "Report payload must be a JSON object"


class MissingExecutorError(ReportValidationError):
    code = "MissingExecutor"
    default_message = "executor.name is required"


class MissingSystemInfoError(ReportValidationError):
    code = "MissingSystemInfo"
    default_message = "system information is required"


class MissingCategoriesError(ReportValidationError):
    code = "MissingCategories"
    default_message = "categories must be a list"


class MissingResultsError(ReportValidationError):
    code = "MissingResults"
    default_message = "passes and fails must be numeric"


class ImplausibleResultsError(ReportValidationError):
    code = "ImplausibleResults"
    default_message = "Implausible results: too many passes without a single failure"


class TimestampOutOfBoundsError(ReportValidationError):
    code = "TimestampOutOfBounds"
    default_message = "timestamp is too far from server time"


class PersistError(ReportServiceError):
    """Writing the durable mirror failed; memory is ahead of disk."""

    default_message = "Failed to persist reports"


class PersistenceFailedError(ReportServiceError):
    default_message = "Failed to save report"


class IdGenerationExhaustedError(ReportServiceError):
    default_message = "Could not allocate a report identifier"


class ReportNotFoundError(ReportServiceError):
    status_code = 404
    default_message = "Report not found"


class NotificationError(ReportServiceError):
    """Best-effort notification failed. Never surfaced to submitters."""

    default_message = "Notification delivery failed"
