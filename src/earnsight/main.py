"""FastAPI application entry point for the API gateway."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from earnsight import __version__
from earnsight.api import api_router
from earnsight.config import get_settings
from earnsight.core.dependencies import close_dependencies
from earnsight.core.exceptions import (
    ReportContentError,
    ReportError,
    ReportNotFoundError,
    UnsupportedDocumentError,
    UpstreamError,
)
from earnsight.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: configure logging, close upstream clients on shutdown."""
    settings = get_settings()
    setup_logging(settings)
    logger.info("Earnsight gateway ready", env=settings.env, provider=settings.data_provider)
    yield
    await close_dependencies()


app = FastAPI(
    title="Earnsight",
    description="Earnings calendar, quote and report-analysis gateway",
    version=__version__,
    lifespan=lifespan,
)


# ─────────────────────────────────────────────────────────────
# Error mapping
# ─────────────────────────────────────────────────────────────

_REPORT_ERROR_STATUS: dict[type[ReportError], int] = {
    ReportNotFoundError: 404,
    UnsupportedDocumentError: 415,
    ReportContentError: 422,
}


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("Upstream request failed", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"error": "Upstream request failed", "message": str(exc)},
    )


@app.exception_handler(ReportError)
async def report_error_handler(request: Request, exc: ReportError) -> JSONResponse:
    status = _REPORT_ERROR_STATUS.get(type(exc), 500)
    logger.warning("Report analysis rejected", path=request.url.path, status=status, error=str(exc))
    return JSONResponse(
        status_code=status,
        content={"error": "Report analysis failed", "message": str(exc)},
    )


# Infrastructure (no prefix)


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness check, always ok if process is running."""
    return {"status": "ok"}


# Domain API
app.include_router(api_router, prefix="/api")
