from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import StrEnum


class Grade(StrEnum):
    """Letter grades an executor may attach to a run, best first."""

    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

    @classmethod
    def worst(cls) -> "Grade":
        return cls.F

    @classmethod
    def from_raw(cls, raw: object) -> "Grade":
        if not isinstance(raw, str):
            return cls.worst()
        value = raw.strip().upper()
        for member in cls:
            if value == member.value:
                return member
        return cls.worst()


class Tone(StrEnum):
    GOOD = "good"
    WARN = "warn"
    BAD = "bad"


def is_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, int)


def as_number(value: object, default: int | float = 0) -> int | float:
    return value if is_number(value) else default  # type: ignore[return-value]


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    return ensure_utc(value).isoformat()


def parse_datetime(value: str | None) -> datetime | None:
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(value))
