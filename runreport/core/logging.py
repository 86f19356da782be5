from __future__ import annotations

import logging
from logging.config import dictConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
SERVICE_LOGGER = "runreport"

# chatty third-party loggers: webhook calls and the notification worker pool
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO", *, access_log: bool = True) -> None:
    """Route service, uvicorn and webhook client logs through one stream handler.

    ``level`` applies to the service and uvicorn; unknown level names fall back
    to INFO. With ``access_log`` disabled, per-request uvicorn lines are
    limited to warnings.
    """

    level = _normalize_level(level)
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": {"format": LOG_FORMAT}},
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                }
            },
            "loggers": {
                "": {"handlers": ["default"], "level": level},
                SERVICE_LOGGER: {"level": level},
                **{name: {"level": "WARNING"} for name in _QUIET_LOGGERS},
                "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
                "uvicorn.access": {
                    "handlers": ["default"],
                    "level": level if access_log else "WARNING",
                    "propagate": False,
                },
            },
        }
    )


def _normalize_level(level: str) -> str:
    name = (level or "").strip().upper()
    if isinstance(logging.getLevelName(name), int):
        return name
    return "INFO"


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
