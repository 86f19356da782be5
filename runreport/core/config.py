from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

load_dotenv()


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    reports_file: str = "reports.json"
    notification_webhook_url: str | None = None
    notification_timeout_seconds: float = 10.0
    public_base_url: str | None = None
    timestamp_skew_seconds: int = 3600
    trust_proxy_headers: bool = False
    log_level: str = "INFO"
    access_log: bool = True
    host: str = "0.0.0.0"
    port: int = 3000


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@lru_cache
def get_settings() -> Settings:
    return Settings(
        reports_file=os.getenv("REPORTS_FILE", "reports.json"),
        notification_webhook_url=os.getenv("NOTIFICATION_WEBHOOK_URL") or None,
        notification_timeout_seconds=float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "10")),
        public_base_url=os.getenv("PUBLIC_BASE_URL") or None,
        timestamp_skew_seconds=int(os.getenv("TIMESTAMP_SKEW_SECONDS", "3600")),
        trust_proxy_headers=_env_bool("TRUST_PROXY_HEADERS"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        access_log=_env_bool("ACCESS_LOG", default=True),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )
