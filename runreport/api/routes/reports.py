from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse

from runreport.api.deps import (
    get_app_settings,
    get_ingestion_service,
    get_query_service,
    get_renderer,
    get_source_address,
)
from runreport.core.config import Settings
from runreport.core.errors import ReportNotFoundError
from runreport.schemas.report_response import ReportCreatedResponse
from runreport.schemas.response import ErrorResponse, ReportSchema, ReportSummarySchema
from runreport.services import IngestionService, QueryService, ReportRenderer

router = APIRouter(tags=["reports"])

_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}


@router.post(
    "/report",
    response_model=ReportCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
    summary="Submit a test-run report",
)
async def create_report(
    request: Request,
    ingestion: IngestionService = Depends(get_ingestion_service),
    source_address: str = Depends(get_source_address),
    settings: Settings = Depends(get_app_settings),
) -> ReportCreatedResponse:
    payload = await _read_json(request)
    handle = await run_in_threadpool(ingestion.ingest, payload, source_address)
    return ReportCreatedResponse(
        id=handle.id,
        link=_absolute_url(request, settings, "get_report_json", handle.id),
        view_link=_absolute_url(request, settings, "view_report", handle.id),
        created_at=handle.created_at,
    )


@router.get("/reports", response_model=list[ReportSummarySchema], summary="List reports, newest first")
def list_reports(query: QueryService = Depends(get_query_service)) -> list[ReportSummarySchema]:
    return [ReportSummarySchema.from_summary(summary) for summary in query.get_summary_list()]


@router.get("/report/{report_id}/json", response_model=ReportSchema, responses=_NOT_FOUND)
def get_report_json(report_id: str, query: QueryService = Depends(get_query_service)) -> dict[str, Any]:
    report = query.get_full(report_id)
    if report is None:
        raise ReportNotFoundError()
    return report.to_dict()


@router.get("/report/{report_id}", response_class=HTMLResponse, responses=_NOT_FOUND)
def view_report(
    report_id: str,
    query: QueryService = Depends(get_query_service),
    renderer: ReportRenderer = Depends(get_renderer),
) -> HTMLResponse:
    model = query.get_render_model(report_id)
    if model is None:
        raise ReportNotFoundError()
    return HTMLResponse(renderer.render_report(model))


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def index(
    query: QueryService = Depends(get_query_service),
    renderer: ReportRenderer = Depends(get_renderer),
) -> HTMLResponse:
    return HTMLResponse(renderer.render_index(query.get_summary_list()))


async def _read_json(request: Request) -> Any:
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except (UnicodeDecodeError, ValueError):
        # the validator reports anything that is not a mapping as malformed
        return None


def _absolute_url(request: Request, settings: Settings, route_name: str, report_id: str) -> str:
    if settings.public_base_url:
        path = request.app.url_path_for(route_name, report_id=report_id)
        return f"{settings.public_base_url.rstrip('/')}{path}"
    return str(request.url_for(route_name, report_id=report_id))
