"""
FastAPI application for the survey analytics service.

Routes delegate business logic to the services layer.
"""
from __future__ import annotations

import datetime as dt
import logging
import os
import time
import traceback
from typing import Any

from fastapi import Depends, FastAPI, File, Header, Request, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .config import get_settings
from .domain.ownership import Requester
from .domain.types import ErrorCode, PlotKind
from .errors import ServiceError, UnauthorizedError
from .repositories import Analysis, AnalysisRepository, StoredFile, UploadRepository
from .services import AnalysisService, HealthService, PlotService, UploadService
from .uploads import run_migrations

logger = logging.getLogger(__name__)

app = FastAPI(title="Survey Analytics Service", version=__version__, docs_url="/docs", redoc_url="/redoc", openapi_url="/openapi.json")
app.add_middleware(CORSMiddleware, allow_origins=list(get_settings().cors_origins), allow_credentials=True,
                   allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"], allow_headers=["*"])


# ============================================================================
# Pydantic Models
# ============================================================================

class UploadResponse(BaseModel):
    id: str
    columns: list[str]


class StoredFileResponse(BaseModel):
    id: str
    file_name: str
    columns: list[str]
    created_at: str


class PlotDataRequest(BaseModel):
    plot_type: PlotKind | None = None
    x_axis: str | None = None
    y_axes: list[str] | None = None
    csv_upload_id: str | None = None


class PlotDataResponse(BaseModel):
    data: list[dict[str, Any]]
    layout: dict[str, Any]


class GroupByRequest(BaseModel):
    columns: list[str] | None = None
    csv_upload_id: str | None = None


class AnalysisRequest(BaseModel):
    title: str | None = None
    author_name: str | None = None
    description: str | None = None
    plots: Any = None


class PublishRequest(BaseModel):
    analysis_id: str | None = Field(None, alias="analysisId")


class AnalysisResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user: str
    title: str
    author_name: str = Field(alias="authorName")
    description: str
    plots: list[dict[str, Any]]
    is_public: bool = Field(alias="isPublic")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


class PublishResponse(BaseModel):
    message: str
    analysis: AnalysisResponse


class HealthStatus(BaseModel):
    status: str
    message: str | None = None
    latency_ms: int | None = None


class HealthResponse(BaseModel):
    backend: HealthStatus
    database: HealthStatus
    storage: HealthStatus


# ============================================================================
# Service Factories
# ============================================================================

def _upload_repo() -> UploadRepository:
    s = get_settings()
    return UploadRepository(s.db_path, s.upload_dir)


def _upload_service() -> UploadService:
    return UploadService(_upload_repo(), get_settings().max_upload_mb)


def _plot_service() -> PlotService:
    s = get_settings()
    return PlotService(_upload_service(), s.csv_chunk_rows, s.plot_color_seed)


def _analysis_service() -> AnalysisService:
    return AnalysisService(AnalysisRepository(get_settings().db_path))


def _health_service() -> HealthService:
    s = get_settings()
    return HealthService(s.db_path, s.upload_dir)


def get_requester(x_user_id: str | None = Header(None), x_user_name: str | None = Header(None)) -> Requester:
    if not x_user_id:
        raise UnauthorizedError("Missing X-User-Id header")
    return Requester(user_id=x_user_id, username=x_user_name)


def _stored_file_to_response(f: StoredFile) -> StoredFileResponse:
    return StoredFileResponse(id=f.upload_id, file_name=f.file_name, columns=f.columns, created_at=f.created_at)


def _analysis_to_response(a: Analysis) -> AnalysisResponse:
    return AnalysisResponse(id=a.analysis_id, user=a.user_id, title=a.title, author_name=a.author_name, description=a.description,
                            plots=a.plots, is_public=a.is_public, created_at=a.created_at, updated_at=a.updated_at)


# ============================================================================
# Startup, Middleware + Error Handlers
# ============================================================================

@app.on_event("startup")
async def startup() -> None:
    s = get_settings()
    os.makedirs(s.upload_dir, exist_ok=True)
    run_migrations(s.db_path)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.info("%s %s -> %d (%d ms)", request.method, request.url.path, response.status_code,
                int((time.perf_counter() - start) * 1000))
    return response


def _error_body(message: str, error: str, code: str, exc: Exception) -> dict[str, Any]:
    body: dict[str, Any] = {"message": message, "error": error, "code": code}
    if not get_settings().is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.detail, exc.code, exc))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_error_body("Internal server error", str(exc), ErrorCode.INTERNAL_ERROR, exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    detail = "; ".join(f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg', '')}" for e in exc.errors())
    return JSONResponse(status_code=400, content=_error_body("Validation error", detail, ErrorCode.VALIDATION_ERROR, exc))


# ============================================================================
# CSV Upload Routes
# ============================================================================

@app.post("/api/data-analysis/csv-uploads", response_model=UploadResponse, status_code=201)
async def upload_csv(file: UploadFile = File(...), requester: Requester = Depends(get_requester)) -> UploadResponse:
    stored = await _upload_service().upload(requester, file)
    return UploadResponse(id=stored.upload_id, columns=stored.columns)


@app.get("/api/data-analysis/csv-uploads", response_model=list[StoredFileResponse])
async def list_csv_uploads(requester: Requester = Depends(get_requester)) -> list[StoredFileResponse]:
    return [_stored_file_to_response(f) for f in await _upload_service().list_uploads(requester)]


@app.delete("/api/data-analysis/csv-uploads/{upload_id}", status_code=204)
async def delete_csv_upload(upload_id: str, requester: Requester = Depends(get_requester)) -> Response:
    await _upload_service().delete_upload(requester, upload_id)
    return Response(status_code=204)


# ============================================================================
# Plot Data + Group-by Routes
# ============================================================================

@app.post("/api/data-analysis/plot-data", response_model=PlotDataResponse)
async def generate_plot_data(payload: PlotDataRequest, requester: Requester = Depends(get_requester)) -> PlotDataResponse:
    result = await _plot_service().plot_data(requester, payload.csv_upload_id, payload.plot_type, payload.x_axis, payload.y_axes)
    return PlotDataResponse(data=result.data, layout=result.layout)


@app.post("/api/data-analysis/groupby")
async def group_by_columns(payload: GroupByRequest, requester: Requester = Depends(get_requester)) -> dict:
    groups = await _plot_service().group_by(requester, payload.csv_upload_id, payload.columns)
    return {col: [{col: value, "count": count} for value, count in pairs] for col, pairs in groups.items()}


# ============================================================================
# Analysis Routes
# ============================================================================

@app.post("/api/data-analysis/analyses", response_model=AnalysisResponse, status_code=201)
async def save_analysis(payload: AnalysisRequest, requester: Requester = Depends(get_requester)) -> AnalysisResponse:
    analysis = await _analysis_service().save(requester, payload.plots, payload.title, payload.author_name, payload.description)
    return _analysis_to_response(analysis)


@app.get("/api/data-analysis/analyses", response_model=list[AnalysisResponse])
async def get_analyses(requester: Requester = Depends(get_requester)) -> list[AnalysisResponse]:
    return [_analysis_to_response(a) for a in await _analysis_service().list_analyses(requester)]


@app.get("/api/data-analysis/analyses/{analysis_id}", response_model=AnalysisResponse)
async def get_analysis(analysis_id: str, requester: Requester = Depends(get_requester)) -> AnalysisResponse:
    return _analysis_to_response(await _analysis_service().get(requester, analysis_id))


@app.put("/api/data-analysis/analyses/{analysis_id}", response_model=AnalysisResponse)
async def update_analysis(analysis_id: str, payload: AnalysisRequest, requester: Requester = Depends(get_requester)) -> AnalysisResponse:
    analysis = await _analysis_service().update(requester, analysis_id, payload.title, payload.author_name,
                                                payload.description, payload.plots)
    return _analysis_to_response(analysis)


@app.delete("/api/data-analysis/analyses/{analysis_id}", status_code=204)
async def delete_analysis(analysis_id: str, requester: Requester = Depends(get_requester)) -> Response:
    await _analysis_service().delete(requester, analysis_id)
    return Response(status_code=204)


@app.post("/api/data-analysis/publish-analysis", response_model=PublishResponse)
async def publish_analysis(payload: PublishRequest, requester: Requester = Depends(get_requester)) -> PublishResponse:
    analysis = await _analysis_service().publish(requester, payload.analysis_id)
    return PublishResponse(message="Analysis published successfully", analysis=_analysis_to_response(analysis))


# ============================================================================
# Health Routes
# ============================================================================

@app.get("/api/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    r = await _health_service().check_all()
    return HealthResponse(backend=HealthStatus(status=r.backend.status, message=r.backend.message, latency_ms=r.backend.latency_ms),
                          database=HealthStatus(status=r.database.status, message=r.database.message, latency_ms=r.database.latency_ms),
                          storage=HealthStatus(status=r.storage.status, message=r.storage.message, latency_ms=r.storage.latency_ms))


@app.get("/")
async def root() -> dict:
    s = get_settings()
    return {"service": "survey-analytics", "status": "ok", "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(), "environment": s.app_env}
