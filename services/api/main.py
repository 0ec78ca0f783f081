"""FastAPI application for invoice document generation.

Production-ready API with:
- Health and readiness checks for Kubernetes
- Invoice validation with field-identifying errors
- ML-optimized layout with graceful fallback to defaults
- Layout model hot reload
- Prometheus metrics for monitoring

Based on FastAPI best practices:
https://fastapi.tiangolo.com/
"""

import re
import time
from urllib.parse import quote

from fastapi import FastAPI, HTTPException, Query, Request, Response, status
from pydantic import BaseModel

from services.api import metrics
from services.generation.errors import InvoiceValidationError, RenderingError
from services.generation.factory import create_generation_pipeline, create_layout_model
from services.invoice.schema import Invoice
from services.shared.config import get_settings

settings = get_settings()
app = FastAPI(
    title="Invoice Layout Generator",
    description="Invoice document generation with ML-optimized layouts",
    version=settings.service_version,
)

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def content_disposition(invoice_number: str) -> str:
    """Build an inline Content-Disposition header for an invoice PDF.

    Headers are Latin-1 encoded, so the plain ``filename`` is reduced to
    ASCII and the exact name is sent as an RFC 5987 ``filename*``.
    """
    filename = f"invoice-{invoice_number}.pdf"
    fallback = UNSAFE_FILENAME_CHARS.sub("_", filename)
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


layout_model = create_layout_model(settings)
generation_pipeline = create_generation_pipeline(settings, layout_model)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Middleware to collect request metrics.

    Tracks:
    - Request count by method, endpoint, and status
    - Request duration by method and endpoint
    """
    # Skip metrics for /metrics endpoint itself
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
    layout_model_trained: bool


class ReloadResponse(BaseModel):
    """Layout model reload response."""

    loaded: bool
    model_path: str


@app.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check() -> HealthResponse:
    """Health check endpoint for liveness probe.

    Returns:
        Health status information
    """
    return HealthResponse(
        status="healthy", version=settings.service_version, service=settings.service_name
    )


@app.get("/ready", response_model=ReadinessResponse, tags=["Health"])
def readiness_check() -> ReadinessResponse:
    """Readiness check endpoint for Kubernetes readiness probe.

    The service is ready without a trained layout model; invoices are then
    rendered with default layout options.

    Returns:
        Readiness status
    """
    return ReadinessResponse(ready=True, layout_model_trained=layout_model.is_trained)


@app.get("/metrics", tags=["Monitoring"])
def get_metrics() -> Response:
    """Prometheus metrics endpoint.

    Returns:
        Prometheus metrics in text format
    """
    metrics_data, content_type = metrics.get_metrics()
    return Response(content=metrics_data, media_type=content_type)


@app.post("/api/v1/invoices/generate", tags=["Invoices"])
async def generate_invoice(
    invoice: Invoice,
    smart_layout: bool = Query(
        True,
        description="Let the layout model choose font size, spacing and template",
    ),
) -> Response:
    """Generate a PDF document for an invoice.

    ## Usage Example

    ```bash
    curl -X POST "http://localhost:8000/api/v1/invoices/generate?smart_layout=true" \\
      -H "Content-Type: application/json" -d @invoice.json -o invoice.pdf
    ```

    ## Error Handling

    - Returns 422 if the invoice breaks a business rule (`rule` names which)
    - Returns 500 if template or PDF rendering fails
    - Smart layout problems never fail the request; default layout is used

    Args:
        invoice: Invoice data
        smart_layout: Enable ML layout optimization (optional, default: true)

    Returns:
        PDF document

    Raises:
        HTTPException: If the invoice is invalid or rendering fails
    """
    try:
        document = await generation_pipeline.generate_async(invoice, smart_layout)
    except InvoiceValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": e.message, "rule": e.rule},
        ) from e
    except RenderingError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        ) from e

    return Response(
        content=document,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(invoice.number)},
    )


@app.post("/api/v1/layout/reload", response_model=ReloadResponse, tags=["Layout"])
def reload_layout_model() -> ReloadResponse:
    """Reload the layout model from the configured model path.

    In-flight requests keep using the model they started with.

    Returns:
        Whether a model was loaded
    """
    loaded = layout_model.load(settings.layout_model_path)
    metrics.layout_model_reloads_total.labels(status="success" if loaded else "failed").inc()
    return ReloadResponse(loaded=loaded, model_path=settings.layout_model_path)
