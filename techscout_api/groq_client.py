"""Groq chat-completions client (OpenAI-compatible API)."""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from techscout_api.config import get_settings
from techscout_api.errors import UpstreamError
from techscout_api.prompts import SECTION_HEADERS

logger = structlog.get_logger()


class GroqError(UpstreamError):
    """Base exception for completion client errors."""

    pass


class GroqAuthError(GroqError):
    """Raised when authentication fails or no API key is configured."""

    pass


class GroqRateLimitError(GroqError):
    """Raised when rate limit is exceeded."""

    pass


@dataclass
class CompletionResponse:
    """Response from the completion API."""

    content: str
    tokens_used: int
    finish_reason: str | None = None


MOCK_REPORT = """**Technology Overview:**
This is a mock analysis (MOCK_GROQ=true). Set GROQ_API_KEY to enable real completions.

**Market Trends:**
Mock market trends for local development.

**Key Players:**
Mock key players for local development.

**Use Cases:**
Mock use cases for local development.

**Challenges:**
Mock challenges for local development.
"""


class GroqClient:
    """Async client for the Groq chat-completions endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout_seconds: float | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Groq API key. Defaults to config value.
            base_url: API base URL. Defaults to config value.
            model: Model ID to use. Defaults to config value.
            timeout_seconds: Read timeout for completions. Defaults to config value.
        """
        settings = get_settings()
        self._api_key = api_key if api_key is not None else settings.groq_api_key
        self._base_url = base_url or settings.groq_base_url
        self._model = model or settings.llm_model
        self._timeout = (
            timeout_seconds if timeout_seconds is not None else settings.completion_timeout_seconds
        )
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GroqClient":
        await self.connect()
        return self

    async def __aexit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.close()

    @property
    def model(self) -> str:
        return self._model

    @property
    def is_configured(self) -> bool:
        """Check if the client has an API key."""
        return bool(self._api_key and self._api_key.strip())

    async def connect(self) -> None:
        """Create the HTTP client.

        Skipped when no API key is set and mock mode is on, since every
        request is then answered locally.
        """
        if not self.is_configured and get_settings().mock_groq:
            logger.info("Groq client in mock mode, skipping HTTP client creation", model=self._model)
            return

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(self._timeout, connect=10.0),
        )
        logger.info("Groq client connected", model=self._model)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Groq client closed")

    def _build_messages(self, prompt: str, system_prompt: str | None = None) -> list[dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def complete(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        system_prompt: str | None = None,
    ) -> CompletionResponse:
        """Send a chat completion request and return the first choice's text.

        Args:
            prompt: User message content.
            temperature: Sampling temperature. Defaults to the analysis setting.
            max_tokens: Completion token budget. Defaults to the analysis setting.
            system_prompt: Optional system message placed before the prompt.

        Raises:
            GroqAuthError: On HTTP 401, or when no key is set and mock mode is off.
            GroqRateLimitError: On HTTP 429.
            GroqError: On any other HTTP or transport failure.
        """
        settings = get_settings()

        if not self.is_configured:
            if settings.mock_groq:
                logger.info("MOCK_GROQ=true: Using mock completion")
                return self._mock_complete(prompt)
            error_msg = (
                "Groq API key not configured with MOCK_GROQ=false. "
                "Either set GROQ_API_KEY or set MOCK_GROQ=true for testing."
            )
            logger.error(error_msg)
            raise GroqAuthError(error_msg)

        if not self._client:
            await self.connect()

        payload = {
            "model": self._model,
            "messages": self._build_messages(prompt, system_prompt),
            "temperature": temperature if temperature is not None else settings.analysis_temperature,
            "max_tokens": max_tokens if max_tokens is not None else settings.analysis_max_tokens,
            "stream": False,
        }

        try:
            response = await self._client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()

            choices = data.get("choices") or [{}]
            message = choices[0].get("message") or {}
            content = message.get("content") or ""
            tokens_used = (data.get("usage") or {}).get("total_tokens", 0)
            finish_reason = choices[0].get("finish_reason")
        except httpx.HTTPStatusError as e:
            self._handle_http_error(e)
            raise
        except httpx.HTTPError as e:
            logger.error("Groq request failed", error=str(e))
            raise GroqError(f"Request failed: {e}") from e
        except (ValueError, AttributeError, IndexError, TypeError) as e:
            # Non-JSON body, or JSON that is not a completion object
            logger.error("Malformed Groq response", error=str(e))
            raise GroqError("Malformed completion response") from e

        logger.info("Completion received", tokens=tokens_used, finish_reason=finish_reason)

        return CompletionResponse(
            content=content,
            tokens_used=tokens_used,
            finish_reason=finish_reason,
        )

    def _handle_http_error(self, error: httpx.HTTPStatusError) -> None:
        """Translate an HTTP error from the API into a GroqError."""
        status = error.response.status_code
        try:
            detail = error.response.json().get("error", {}).get("message", str(error))
        except Exception:
            detail = str(error)

        logger.error("Groq API error", status=status, detail=detail)

        if status == 401:
            raise GroqAuthError(f"Authentication failed: {detail}")
        elif status == 429:
            raise GroqRateLimitError(f"Rate limit exceeded: {detail}")
        else:
            raise GroqError(f"API error ({status}): {detail}")

    def _mock_complete(self, prompt: str) -> CompletionResponse:
        """Return a canned completion: a sectioned report for analysis prompts."""
        if all(header in prompt for header in SECTION_HEADERS):
            content = MOCK_REPORT
        else:
            content = (
                "This is a mock completion (MOCK_GROQ=true). "
                "Set GROQ_API_KEY to enable real rewrites."
            )
        return CompletionResponse(content=content, tokens_used=50, finish_reason="stop")


# Global client instance
_groq_client: GroqClient | None = None


async def get_groq_client() -> GroqClient:
    """Get or create the global client instance."""
    global _groq_client
    if _groq_client is None:
        _groq_client = GroqClient()
        await _groq_client.connect()
    return _groq_client


async def close_groq_client() -> None:
    """Close the global client."""
    global _groq_client
    if _groq_client:
        await _groq_client.close()
        _groq_client = None


def reset_groq_client() -> None:
    """Reset the global client (for testing)."""
    global _groq_client
    _groq_client = None
