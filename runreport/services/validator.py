from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from runreport.core.errors import (
    ImplausibleResultsError,
    MalformedPayloadError,
    MissingCategoriesError,
    MissingExecutorError,
    MissingResultsError,
    MissingSystemInfoError,
    ReportValidationError,
    TimestampOutOfBoundsError,
)
from runreport.models.common import ensure_utc, is_number

DEFAULT_SKEW = timedelta(hours=1)
IMPLAUSIBLE_PASS_THRESHOLD = 1000


class ReportValidator:
    """Structural and plausibility checks for submitted report payloads.

    ``validate`` never raises for bad input: it returns the first matching
    :class:`ReportValidationError`, or ``None`` when the payload is accepted.
    """

    def __init__(self, *, max_skew: timedelta = DEFAULT_SKEW) -> None:
        self.max_skew = max_skew

    def validate(self, payload: Any, *, now: datetime) -> ReportValidationError | None:
        if not isinstance(payload, Mapping):
            return MalformedPayloadError()

        executor = payload.get("executor")
        if not isinstance(executor, Mapping) or not _non_blank(executor.get("name")):
            return MissingExecutorError()

        if not isinstance(payload.get("system"), Mapping):
            return MissingSystemInfoError()

        if not isinstance(payload.get("categories"), list):
            return MissingCategoriesError()

        passes = payload.get("passes")
        fails = payload.get("fails")
        if not is_number(passes) or not is_number(fails):
            return MissingResultsError()
        if passes > IMPLAUSIBLE_PASS_THRESHOLD and fails == 0:
            return ImplausibleResultsError()

        if payload.get("timestamp") is not None:
            asserted = parse_client_timestamp(payload["timestamp"])
            if asserted is None:
                return TimestampOutOfBoundsError("timestamp could not be parsed")
            if abs(asserted - ensure_utc(now)) > self.max_skew:
                return TimestampOutOfBoundsError()

        return None


def parse_client_timestamp(value: object) -> datetime | None:
    """Read an ISO-8601 string or epoch milliseconds. Naive values are UTC."""

    if is_number(value):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)  # type: ignore[operator]
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            return ensure_utc(datetime.fromisoformat(value.strip()))
        except (ValueError, OverflowError):
            return None
    return None


def _non_blank(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())
