from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from runreport.api import api_router
from runreport.core.config import Settings, get_settings
from runreport.core.errors import ReportServiceError, ReportValidationError
from runreport.core.logging import configure_logging, get_logger
from runreport.services import NotificationSink, build_container

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, *, sink: NotificationSink | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        container = build_container(settings, sink=sink)
        container.store.load()
        app.state.services = container
        logger.info("Report service started, mirror at %s", settings.reports_file)
        try:
            yield
        finally:
            container.close()
            logger.info("Report service stopped")

    app = FastAPI(title="Run Report Service", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ReportServiceError)
    async def handle_service_error(request: Request, exc: ReportServiceError) -> JSONResponse:
        content: dict[str, str] = {"error": exc.message}
        if isinstance(exc, ReportValidationError):
            content["code"] = exc.code
        elif exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(content, status_code=exc.status_code)

    app.include_router(api_router)
    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


configure_logging(get_settings().log_level, access_log=get_settings().access_log)
app = create_app()


if __name__ == "__main__":
    run()
