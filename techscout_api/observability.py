"""Observability utilities: trace IDs, LLM metrics, and payload logging.

This module provides:
- Trace ID generation and propagation via context vars
- Prometheus metrics for completion calls (tokens, latency, errors)
- A counter of which section-extraction strategy produced each report
"""

import secrets
import time
from contextvars import ContextVar
from dataclasses import dataclass

import structlog
from prometheus_client import Counter, Gauge, Histogram

logger = structlog.get_logger()

# =============================================================================
# Trace ID Context
# =============================================================================

trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="")


def generate_trace_id() -> str:
    """Generate cryptographically secure trace ID for request tracking."""
    return secrets.token_hex(16)


def get_trace_id() -> str:
    """Get current trace ID from context, or empty string if not set."""
    return trace_id_ctx.get()


def set_trace_id(trace_id: str) -> None:
    """Set trace ID in context."""
    trace_id_ctx.set(trace_id)


# =============================================================================
# Prometheus Metrics
# =============================================================================

llm_requests_total = Counter(
    "techscout_llm_requests_total",
    "Total completion API requests",
    ["model", "purpose", "status"],
)

llm_tokens_total = Counter(
    "techscout_llm_tokens_total",
    "Total tokens reported by the completion API",
    ["model"],
)

llm_latency_seconds = Histogram(
    "techscout_llm_latency_seconds",
    "Completion response latency in seconds",
    ["model", "purpose"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

llm_active_requests = Gauge(
    "techscout_llm_active_requests",
    "Currently active completion requests",
    ["model"],
)

section_extractions_total = Counter(
    "techscout_section_extractions_total",
    "Reports parsed, by input source and extraction strategy",
    ["source", "strategy"],
)


# =============================================================================
# LLM Payload Logging
# =============================================================================


@dataclass
class LLMRequestLog:
    """Structured log data for completion requests."""

    trace_id: str
    model: str
    purpose: str  # "topic", "document", "url" or "refine"
    prompt_chars: int
    prompt_preview: str  # First 100 chars
    timestamp: float = 0.0

    def __post_init__(self) -> None:
        if self.timestamp == 0.0:
            self.timestamp = time.time()


def log_llm_request(model: str, purpose: str, prompt: str) -> LLMRequestLog:
    """Log a completion request and mark it active.

    Returns LLMRequestLog for correlation with the response.
    """
    preview = prompt.strip()[:100]
    log_data = LLMRequestLog(
        trace_id=get_trace_id(),
        model=model,
        purpose=purpose,
        prompt_chars=len(prompt),
        prompt_preview=preview + ("..." if len(prompt.strip()) > 100 else ""),
    )

    logger.info(
        "llm_request",
        trace_id=log_data.trace_id,
        model=log_data.model,
        purpose=log_data.purpose,
        prompt_chars=log_data.prompt_chars,
        prompt_preview=log_data.prompt_preview,
    )

    llm_active_requests.labels(model=model).inc()
    return log_data


def log_llm_response(
    request_log: LLMRequestLog,
    tokens_total: int = 0,
    finish_reason: str = "unknown",
    error: str | None = None,
) -> int:
    """Log a completion response and update metrics.

    Returns the measured latency in milliseconds.
    """
    latency_ms = int((time.time() - request_log.timestamp) * 1000)

    if error:
        logger.error(
            "llm_response",
            trace_id=request_log.trace_id,
            model=request_log.model,
            purpose=request_log.purpose,
            latency_ms=latency_ms,
            error=error,
        )
        status = "error"
    else:
        logger.info(
            "llm_response",
            trace_id=request_log.trace_id,
            model=request_log.model,
            purpose=request_log.purpose,
            tokens_total=tokens_total,
            latency_ms=latency_ms,
            finish_reason=finish_reason,
        )
        status = "success"

    llm_active_requests.labels(model=request_log.model).dec()
    llm_requests_total.labels(
        model=request_log.model,
        purpose=request_log.purpose,
        status=status,
    ).inc()
    if tokens_total > 0:
        llm_tokens_total.labels(model=request_log.model).inc(tokens_total)
    llm_latency_seconds.labels(
        model=request_log.model,
        purpose=request_log.purpose,
    ).observe(latency_ms / 1000.0)

    return latency_ms


def record_extraction(source: str, strategy: str) -> None:
    """Count one parsed report and log when the positional fallback was needed."""
    section_extractions_total.labels(source=source, strategy=strategy).inc()
    if strategy == "positional":
        logger.warning("No section markers found in reply, using positional fallback", source=source)
