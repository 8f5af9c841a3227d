"""Tests for trace IDs and completion metrics."""

from prometheus_client import REGISTRY

from techscout_api.observability import (
    generate_trace_id,
    get_trace_id,
    log_llm_request,
    log_llm_response,
    record_extraction,
    set_trace_id,
)


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestTraceId:
    def test_generate_is_unique_hex(self):
        first, second = generate_trace_id(), generate_trace_id()
        assert first != second
        assert len(first) == 32
        int(first, 16)

    def test_set_and_get(self):
        set_trace_id("trace-1")
        assert get_trace_id() == "trace-1"


class TestLlmLogging:
    """Tests for request/response logging and counters."""

    def test_success_updates_counters(self):
        labels = {"model": "test-model", "purpose": "topic", "status": "success"}
        before = _sample("techscout_llm_requests_total", labels)
        tokens_before = _sample("techscout_llm_tokens_total", {"model": "test-model"})

        request_log = log_llm_request("test-model", "topic", "x" * 150)
        assert request_log.prompt_chars == 150
        assert request_log.prompt_preview.endswith("...")
        assert _sample("techscout_llm_active_requests", {"model": "test-model"}) == 1.0

        latency_ms = log_llm_response(request_log, tokens_total=12, finish_reason="stop")

        assert latency_ms >= 0
        assert _sample("techscout_llm_requests_total", labels) == before + 1
        assert _sample("techscout_llm_tokens_total", {"model": "test-model"}) == tokens_before + 12
        assert _sample("techscout_llm_active_requests", {"model": "test-model"}) == 0.0

    def test_error_counted_separately(self):
        labels = {"model": "test-model", "purpose": "refine", "status": "error"}
        before = _sample("techscout_llm_requests_total", labels)

        request_log = log_llm_request("test-model", "refine", "short")
        assert request_log.prompt_preview == "short"
        log_llm_response(request_log, error="Rate limit exceeded")

        assert _sample("techscout_llm_requests_total", labels) == before + 1


def test_record_extraction():
    labels = {"source": "url", "strategy": "positional"}
    before = _sample("techscout_section_extractions_total", labels)
    record_extraction("url", "positional")
    assert _sample("techscout_section_extractions_total", labels) == before + 1
