"""FastAPI application entrypoint for TechScout API."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import structlog
from fastapi import Body, Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from pydantic import ValidationError as PydanticValidationError

from techscout_api import __version__
from techscout_api.analysis_service import AnalysisService
from techscout_api.config import get_settings
from techscout_api.errors import (
    NotFoundError,
    TechScoutError,
    UpstreamError,
    ValidationError,
)
from techscout_api.groq_client import GroqError, close_groq_client, get_groq_client
from techscout_api.models import (
    AnalysisRecord,
    HealthResponse,
    RefineRequest,
    RefineResponse,
    ShareLinkResponse,
    TopicRequest,
    UrlRequest,
)
from techscout_api.observability import generate_trace_id, set_trace_id
from techscout_api.share_store import ShareStore, get_share_store

settings = get_settings()

logging.basicConfig(level=settings.log_level, format="%(message)s")

# Configure structlog
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting TechScout API", version=__version__)

    try:
        await get_groq_client()
        logger.info("Groq client initialized")
    except Exception as e:
        logger.warning("Failed to initialize Groq client", error=str(e))

    yield

    logger.info("Shutting down TechScout API")
    await close_groq_client()


app = FastAPI(
    title="TechScout API",
    description="Technology analysis reports from topics, documents and web pages",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def trace_id_middleware(request: Request, call_next):
    """Add trace ID to every request for log correlation."""
    trace_id = request.headers.get("X-Trace-ID", generate_trace_id())
    set_trace_id(trace_id)

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(trace_id=trace_id)

    response = await call_next(request)
    response.headers["X-Trace-ID"] = trace_id
    return response


Instrumentator().instrument(app).expose(app)


# =============================================================================
# Error Handling
# =============================================================================


@app.exception_handler(TechScoutError)
async def techscout_error_handler(request: Request, exc: TechScoutError) -> JSONResponse:
    """Convert service errors into {"error": message} bodies."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("Request failed", path=request.url.path, status=exc.status_code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Answer malformed request bodies with 400 instead of 422."""
    logger.warning("Malformed request body", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


# =============================================================================
# Dependencies
# =============================================================================


async def get_analysis_service() -> AnalysisService:
    """Build the analysis service around the shared completion client."""
    return AnalysisService(groq_client=await get_groq_client())


# =============================================================================
# Health Endpoints
# =============================================================================


@app.get("/health", response_model=HealthResponse)
@app.get("/api/health", response_model=HealthResponse)
async def health_check(store: ShareStore = Depends(get_share_store)) -> HealthResponse:
    """Report whether completions can be served and how many reports are shared."""
    current = get_settings()
    configured = current.has_groq_key or current.mock_groq
    return HealthResponse(
        status="healthy" if configured else "degraded",
        completion_configured=configured,
        shared_reports=store.count(),
        version=__version__,
    )


# =============================================================================
# Analysis Endpoints
# =============================================================================

_RECORD_RESPONSE: dict[str, Any] = {
    "response_model": AnalysisRecord,
    "response_model_exclude_none": True,
}


@app.post("/analyze-topic", **_RECORD_RESPONSE)
@app.post("/api/analyze-topic", **_RECORD_RESPONSE)
async def analyze_topic(
    topic_request: TopicRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisRecord:
    """Analyze a free-text technology topic."""
    try:
        return await service.analyze_topic(topic_request.topic)
    except GroqError as e:
        raise UpstreamError("Failed to analyze topic") from e


@app.post("/analyze-file", **_RECORD_RESPONSE)
@app.post("/api/analyze-file", **_RECORD_RESPONSE)
async def analyze_file(
    file: UploadFile | None = File(default=None),
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisRecord:
    """Analyze an uploaded PDF, TXT, DOC or DOCX document."""
    if file is None or not file.filename:
        raise ValidationError("No file provided")

    reader = service.document_reader
    if file.size is not None:
        reader.validate(file.filename, file.size)
    # One byte past the limit is enough for the size check to reject it.
    data = await file.read(reader.max_bytes + 1)
    try:
        return await service.analyze_document(file.filename, data)
    except GroqError as e:
        raise UpstreamError("Failed to analyze file") from e


@app.post("/analyze-url", **_RECORD_RESPONSE)
@app.post("/api/analyze-url", **_RECORD_RESPONSE)
async def analyze_url(
    url_request: UrlRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisRecord:
    """Fetch a web page and analyze its text."""
    try:
        return await service.analyze_url(url_request.url)
    except GroqError as e:
        raise UpstreamError("Failed to analyze URL") from e


@app.post("/refine-content", response_model=RefineResponse)
@app.post("/api/refine-content", response_model=RefineResponse)
async def refine_content(
    refine_request: RefineRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> RefineResponse:
    """Rewrite one report section (refine, simplify or expand)."""
    try:
        refined = await service.refine_content(
            refine_request.content,
            refine_request.action,
            refine_request.context,
        )
    except GroqError as e:
        raise UpstreamError("Failed to refine content") from e
    return RefineResponse(refined_content=refined)


# =============================================================================
# Share Link Endpoints
# =============================================================================


def _share_base_url(request: Request) -> str:
    configured = get_settings().public_base_url.rstrip("/")
    if configured:
        return configured
    host = request.headers.get("host")
    if not host:
        return "http://localhost:3000"
    scheme = request.headers.get("x-forwarded-proto", "http")
    return f"{scheme}://{host}"


@app.post("/create-share-link", response_model=ShareLinkResponse)
@app.post("/api/create-share-link", response_model=ShareLinkResponse)
async def create_share_link(
    request: Request,
    payload: dict[str, Any] | None = Body(default=None),
    store: ShareStore = Depends(get_share_store),
) -> ShareLinkResponse:
    """Store a report under its content digest and return a shareable URL."""
    if not payload or not payload.get("topic"):
        raise ValidationError("Analysis data is required")

    try:
        record = AnalysisRecord.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError("Analysis data is incomplete") from e

    share_id, _ = store.share(record)
    logger.info("Share link created", share_id=share_id, topic=record.topic)

    return ShareLinkResponse(
        shareable_url=f"{_share_base_url(request)}/share/{share_id}",
        share_id=share_id,
    )


@app.get("/create-share-link/{share_id}", **_RECORD_RESPONSE)
@app.get("/api/create-share-link/{share_id}", **_RECORD_RESPONSE)
@app.get("/share/{share_id}", **_RECORD_RESPONSE)
@app.get("/api/share/{share_id}", **_RECORD_RESPONSE)
async def get_shared_report(
    share_id: str,
    store: ShareStore = Depends(get_share_store),
) -> AnalysisRecord:
    """Return a previously shared report."""
    record = store.get(share_id)
    if record is None:
        raise NotFoundError("Share link not found or expired")
    return record


# =============================================================================
# Entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "techscout_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )
