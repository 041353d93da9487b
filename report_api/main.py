"""
FastAPI application for the Compliance Report Server.

Backs the report designer/viewer front end: saves and lists report
definitions, hands out the designer license key, serves the compliance
datasets as one JSON document, and serves the static front-end assets.
OpenAPI documentation is generated at /docs.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import List, Optional
from urllib.parse import parse_qsl

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from .config import Settings
from .data_access import ComplianceDataProvider
from .log import setup_logging
from .models import (
    ErrorResponse,
    HealthResponse,
    LicenseResponse,
    SaveReportRequest,
    SaveReportResponse,
)
from .report_store import InvalidRequest, ReportStore

logger = logging.getLogger(__name__)


async def _read_body(request: Request, limit: int) -> dict:
    """Decode a JSON or URL-encoded request body into a dict."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise HTTPException(status_code=413, detail="Request body too large")

    raw = await request.body()
    if len(raw) > limit:
        raise HTTPException(status_code=413, detail="Request body too large")
    if not raw:
        return {}

    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/x-www-form-urlencoded"):
            return dict(parse_qsl(raw.decode("utf-8"), keep_blank_values=True))
        decoded = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise HTTPException(status_code=400, detail="Malformed request body")

    return decoded if isinstance(decoded, dict) else {}


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[ComplianceDataProvider] = None,
    store: Optional[ReportStore] = None,
) -> FastAPI:
    """
    Build the report server application.

    Args:
        settings: Configuration (defaults to ``Settings.from_env()``)
        provider: Data provider; built from settings at startup when omitted
        store: Report store; defaults to one rooted at ``settings.reports_dir``
    """
    settings = settings or Settings.from_env()
    store = store or ReportStore(settings.reports_dir, settings.report_extension)

    setup_logging(level=settings.log_level, log_file=settings.log_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.ensure_root()

        data = app.state.provider
        try:
            if data is None:
                data = ComplianceDataProvider.from_settings(settings)
            await run_in_threadpool(data.ping)
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            raise
        logger.info(f"Connected to database: {data.url}")
        app.state.provider = data

        yield

        data.close()
        logger.info("Database connection closed")

    app = FastAPI(
        title=settings.api_title,
        description="Backend for the report designer and viewer",
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.provider = provider
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ----------------------------------------------------------------
    # Reports
    # ----------------------------------------------------------------

    @app.post(
        "/api/save-report",
        response_model=SaveReportResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
        tags=["Reports"],
    )
    async def save_report(request: Request):
        """
        Save a report definition from the designer.

        Accepts ``fileName`` and ``reportContent`` as JSON or as a form
        body. The ``.mrt`` extension is appended when missing and any
        existing report with the same name is overwritten.
        """
        body = await _read_body(request, settings.max_body_bytes)
        try:
            payload = SaveReportRequest.model_validate(body)
        except ValidationError as e:
            missing = any(
                err["type"] in ("missing", "string_too_short") or err.get("input") is None
                for err in e.errors()
            )
            detail = "Missing fileName or reportContent" if missing else "Invalid fileName or reportContent"
            raise HTTPException(status_code=400, detail=detail)

        try:
            saved = await run_in_threadpool(store.save, payload.fileName, payload.reportContent)
        except InvalidRequest as e:
            raise HTTPException(status_code=400, detail=str(e))
        except OSError as e:
            logger.error(f"Failed to save report: {e}")
            raise HTTPException(status_code=500, detail="Failed to save report")

        return SaveReportResponse(fileName=saved)

    @app.get("/api/reports", response_model=List[str], tags=["Reports"])
    def list_reports():
        """List saved report file names."""
        try:
            return store.list()
        except OSError as e:
            logger.error(f"Failed to list reports: {e}")
            raise HTTPException(status_code=500, detail="Failed to list reports")

    @app.get("/api/license", response_model=LicenseResponse, tags=["Designer"])
    def get_license():
        """Return the designer/viewer license key, empty when unset."""
        return {"key": settings.license_key or ""}

    # ----------------------------------------------------------------
    # Datasets
    # ----------------------------------------------------------------

    @app.get(
        "/api/data",
        responses={500: {"model": ErrorResponse}},
        tags=["Data"],
    )
    def get_data(request: Request):
        """
        Get every dataset the report designer binds to.

        Returns one object keyed by dataset name: the unified
        ``Compliances`` view plus one entry per source table. Rows are
        passed through as the database returns them.
        """
        try:
            return request.app.state.provider.get_dataset()
        except Exception as e:
            logger.error(f"SQL Query Failed: {e}")
            raise HTTPException(status_code=500, detail="Internal Server Error")

    @app.get("/api/health", response_model=HealthResponse, tags=["Health"])
    def health(request: Request):
        """API health check, including database reachability."""
        status = "up"
        try:
            request.app.state.provider.ping()
        except Exception as e:
            logger.warning(f"Health check: database unreachable: {e}")
            status = "down"
        return {
            "service": settings.api_title,
            "version": settings.api_version,
            "status": "healthy" if status == "up" else "degraded",
            "database": status,
        }

    # ----------------------------------------------------------------
    # Front end
    # ----------------------------------------------------------------

    def _page(name: str) -> FileResponse:
        path = settings.public_dir / name
        if not path.is_file():
            raise HTTPException(status_code=404, detail=f"{name} not found")
        return FileResponse(path, media_type="text/html")

    @app.get("/designer", include_in_schema=False)
    def designer():
        return _page("designer.html")

    @app.get("/viewer", include_in_schema=False)
    def viewer():
        return _page("viewer.html")

    # Mounted last: "/" would otherwise shadow the routes above
    if settings.stimulsoft_dir.is_dir():
        app.mount("/stimulsoft", StaticFiles(directory=settings.stimulsoft_dir), name="stimulsoft")
    else:
        logger.warning(f"Front-end library not found, /stimulsoft not mounted: {settings.stimulsoft_dir}")
    if settings.public_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.public_dir, html=True), name="public")

    return app


app = create_app()
