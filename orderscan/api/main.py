"""FastAPI application for purchase order extraction.

Single-user HTTP surface over the order workflow:
- Health and readiness checks
- File selection with validation
- Extraction through a multimodal model (demo data without an API key)
- Results view in compact or detailed layout
- Excel download of the extracted order
- Prometheus metrics for monitoring

Based on FastAPI best practices:
https://fastapi.tiangolo.com/
"""

import logging
import time
from collections import deque
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import quote

from fastapi import FastAPI, File, HTTPException, Query, Request, Response, UploadFile, status
from pydantic import BaseModel

from orderscan.api import metrics
from orderscan.api.views import Layout, ResultsView, build_results_view
from orderscan.export.service import XLSX_CONTENT_TYPE, SpreadsheetExporter
from orderscan.extraction.factory import create_extraction_service
from orderscan.extraction.schema import OrderData, UploadedFile
from orderscan.shared.config import get_settings
from orderscan.workflow.controller import (
    Notification,
    OrderWorkflow,
    WorkflowState,
    WorkflowStatus,
    log_notification,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

recent_notifications: deque[Notification] = deque(maxlen=20)


def record_notification(notification: Notification) -> None:
    """Log a notification and keep it for the notifications endpoint."""
    log_notification(notification)
    recent_notifications.append(notification)


extraction_service = create_extraction_service(settings)
exporter = SpreadsheetExporter(settings)
workflow = OrderWorkflow(extraction_service, exporter, notify=record_notification)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    workflow.close()


app = FastAPI(
    title="Purchase Order OCR",
    description="Extract purchase order fields from images and PDFs and export them to Excel",
    version=settings.service_version,
    lifespan=lifespan,
)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Middleware to collect request metrics.

    Tracks:
    - Request count by method, endpoint, and status
    - Request duration by method and endpoint
    """
    if request.url.path == "/metrics":
        return await call_next(request)

    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    metrics.http_requests_total.labels(
        method=request.method,
        endpoint=request.url.path,
        status=response.status_code,
    ).inc()

    metrics.http_request_duration_seconds.labels(
        method=request.method,
        endpoint=request.url.path,
    ).observe(duration)

    return response


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    service: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool


class SelectionResponse(BaseModel):
    """File selection response."""

    accepted: bool
    filename: str
    content_type: str | None
    size: int
    state: WorkflowState


class ExtractionResponse(BaseModel):
    """Extraction response."""

    order_data: OrderData
    provider: str
    is_fallback: bool
    notification: Notification | None = None


@app.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check() -> HealthResponse:
    """Health check endpoint for liveness probe."""
    return HealthResponse(
        status="healthy", version=settings.service_version, service=settings.service_name
    )


@app.get("/ready", response_model=ReadinessResponse, tags=["Health"])
def readiness_check() -> ReadinessResponse:
    """Readiness check endpoint."""
    return ReadinessResponse(ready=True)


@app.get("/metrics", tags=["Monitoring"])
def get_metrics() -> Response:
    """Prometheus metrics endpoint.

    Returns:
        Prometheus metrics in text format
    """
    metrics_data, content_type = metrics.get_metrics()
    return Response(content=metrics_data, media_type=content_type)


@app.get("/api/v1/status", response_model=WorkflowStatus, tags=["Workflow"])
def get_status() -> WorkflowStatus:
    """Current workflow state, selected file and demo-mode flag."""
    return workflow.status()


@app.get("/api/v1/notifications", response_model=list[Notification], tags=["Workflow"])
def get_notifications() -> list[Notification]:
    """Recent user-facing notifications, newest last."""
    return list(recent_notifications)


@app.post("/api/v1/orders/file", response_model=SelectionResponse, tags=["Orders"])
async def select_file(
    file: UploadFile = File(..., description="Purchase order image or PDF"),  # noqa: B008
) -> SelectionResponse:
    """Select the purchase order document to extract.

    ## Requirements

    - **File Types**: JPEG, PNG, WebP, HEIC, HEIF, PDF, TIFF
    - **Max Size**: 20MB

    A rejected file leaves the previous selection untouched.

    Raises:
        HTTPException: 400 if the file type is unsupported or the file is too large
    """
    content = await file.read()
    upload = UploadedFile(
        filename=file.filename or "upload",
        content_type=file.content_type,
        content=content,
    )
    metrics.document_upload_size_bytes.observe(upload.size)

    validation = workflow.select_file(upload)
    if not validation.accepted:
        reason = validation.reason.value if validation.reason else "invalid"
        metrics.documents_uploaded_total.labels(status=reason).inc()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"reason": reason, "message": validation.message},
        )

    metrics.documents_uploaded_total.labels(status="accepted").inc()
    return SelectionResponse(
        accepted=True,
        filename=upload.filename,
        content_type=upload.content_type,
        size=upload.size,
        state=workflow.state,
    )


@app.delete("/api/v1/orders/file", response_model=WorkflowStatus, tags=["Orders"])
def clear_file() -> WorkflowStatus:
    """Clear the selected file and any extraction result."""
    workflow.clear()
    return workflow.status()


@app.post("/api/v1/orders/extract", response_model=ExtractionResponse, tags=["Orders"])
async def extract_order() -> ExtractionResponse:
    """Extract purchase order fields from the selected file.

    Without an API key the service runs in demo mode and returns sample data.
    If the model reply cannot be parsed, sample data is returned as well;
    only a failed service call is reported as an error.

    Raises:
        HTTPException: 409 if no file is selected or an extraction is running,
            502 if the extraction service call failed
    """
    if workflow.state is WorkflowState.EXTRACTING:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Extraction already in progress"
        )
    if workflow.selected_file is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No file selected")

    extraction_start = time.time()
    result = await workflow.submit()
    metrics.extraction_processing_duration_seconds.observe(time.time() - extraction_start)

    if result is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A new file was selected during extraction; submit again",
        )

    provider = result.provider
    if not result.success or result.order_data is None:
        metrics.extraction_requests_total.labels(provider=provider, status="failed").inc()
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to extract information: {result.error}",
        )

    outcome = "fallback" if result.is_fallback else "success"
    metrics.extraction_requests_total.labels(provider=provider, status=outcome).inc()

    return ExtractionResponse(
        order_data=result.order_data,
        provider=provider,
        is_fallback=result.is_fallback,
        notification=recent_notifications[-1] if recent_notifications else None,
    )


@app.get("/api/v1/orders/result", response_model=ResultsView, tags=["Orders"])
def get_result(
    layout: Layout = Query("detailed", description="Results layout: compact or detailed"),
) -> ResultsView:
    """Extracted order formatted for display.

    Raises:
        HTTPException: 404 if nothing has been extracted yet
    """
    if workflow.result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No extraction result")
    return build_results_view(workflow.result, layout)


@app.get("/api/v1/orders/export", tags=["Orders"])
def export_order() -> Response:
    """Download the extracted order as an Excel workbook.

    Raises:
        HTTPException: 409 if nothing has been extracted yet,
            500 if the workbook could not be generated
    """
    if workflow.result is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="No extraction result to export"
        )

    export = workflow.export()
    if not export.success or export.content is None or export.filename is None:
        metrics.exports_total.labels(status="failed").inc()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=export.error or "Export failed",
        )

    metrics.exports_total.labels(status="success").inc()
    return Response(
        content=export.content,
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": _attachment_header(export.filename)},
    )


@app.get("/api/v1/orders/preview", tags=["Orders"])
def get_preview() -> Response:
    """PNG thumbnail of the selected image.

    Raises:
        HTTPException: 404 if no image is selected (PDFs have no preview)
    """
    png = workflow.preview_png(settings.preview_max_size)
    if png is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No preview available")
    return Response(content=png, media_type="image/png")


def _attachment_header(filename: str) -> str:
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
