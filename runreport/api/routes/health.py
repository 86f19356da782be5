from __future__ import annotations

from fastapi import APIRouter, Depends

from runreport.api.deps import get_query_service
from runreport.schemas.response import HealthResponse
from runreport.services import QueryService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse, summary="Service healthcheck")
def healthcheck(query: QueryService = Depends(get_query_service)) -> HealthResponse:
    return HealthResponse(status="ok", reports=query.count())
