"""Fetch a web page and reduce it to plain text for analysis."""

import re
from typing import Any
from urllib.parse import urlparse

import httpx
import structlog
from bs4 import BeautifulSoup

from techscout_api.config import get_settings
from techscout_api.errors import FetchError

logger = structlog.get_logger()

FETCH_FAILED_MESSAGE = "Failed to fetch URL content"


def normalize_url(raw: str, default_scheme: str = "https") -> str:
    """Trim raw and add a scheme when none was given.

    >>> normalize_url(" example.com/blog ")
    'https://example.com/blog'
    """
    url = (raw or "").strip()
    if not url:
        return ""
    if re.match(r"^[a-z][a-z0-9+.-]*://", url, flags=re.IGNORECASE):
        return url
    return f"{default_scheme}://{url}"


def html_to_text(html: str) -> str:
    """Drop script and style blocks and markup, then collapse whitespace."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    text = soup.get_text(separator=" ")
    return re.sub(r"\s+", " ", text).strip()


class ContentFetcher:
    """Retrieves page text with a browser-like User-Agent."""

    def __init__(
        self,
        user_agent: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the fetcher.

        Args:
            user_agent: User-Agent header value. Defaults to config value.
            timeout_seconds: Request timeout. Defaults to config value.
            transport: Optional httpx transport, used by tests to stub the network.
        """
        settings = get_settings()
        self._user_agent = user_agent or settings.fetch_user_agent
        self._timeout = (
            timeout_seconds if timeout_seconds is not None else settings.fetch_timeout_seconds
        )
        self._transport = transport

    def _client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "headers": {"User-Agent": self._user_agent},
            "timeout": httpx.Timeout(self._timeout),
            "follow_redirects": True,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs

    async def fetch_text(self, url: str) -> str:
        """Fetch url and return its collapsed visible text.

        Raises:
            FetchError: If the URL is not http(s), or the request fails or
                returns a non-success status.
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            logger.warning("Rejected URL", url=url)
            raise FetchError(FETCH_FAILED_MESSAGE)

        try:
            async with httpx.AsyncClient(**self._client_kwargs()) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("URL fetch returned error status", url=url, status=e.response.status_code)
            raise FetchError(FETCH_FAILED_MESSAGE) from e
        except httpx.HTTPError as e:
            logger.error("URL fetch failed", url=url, error=str(e))
            raise FetchError(FETCH_FAILED_MESSAGE) from e

        text = html_to_text(response.text)
        logger.info("URL content fetched", url=url, chars=len(text))
        return text
