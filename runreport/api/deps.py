from __future__ import annotations

from fastapi import Depends, Request

from runreport.core.config import Settings, get_settings
from runreport.services import IngestionService, QueryService, ReportRenderer, ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_ingestion_service(container: ServiceContainer = Depends(get_container)) -> IngestionService:
    return container.ingestion


def get_query_service(container: ServiceContainer = Depends(get_container)) -> QueryService:
    return container.query


def get_renderer(container: ServiceContainer = Depends(get_container)) -> ReportRenderer:
    return container.renderer


def get_source_address(request: Request, settings: Settings = Depends(get_app_settings)) -> str:
    if settings.trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"
