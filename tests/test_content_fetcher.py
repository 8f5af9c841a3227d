"""Tests for web page fetching and HTML cleanup."""

import httpx
import pytest

from techscout_api.content_fetcher import ContentFetcher, html_to_text, normalize_url
from techscout_api.errors import FetchError

PAGE = """<html><head><title>T</title><style>body { color: red; }</style>
<script>var tracking = "ignore me";</script></head>
<body><h1>Edge   AI</h1>
<p>Chips   that
run models locally.</p><script type="text/javascript">alert(1)</script></body></html>"""


class TestNormalizeUrl:
    """Tests for URL normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("https://example.com", "https://example.com"),
            ("  http://example.com/a  ", "http://example.com/a"),
            ("example.com/blog", "https://example.com/blog"),
            ("", ""),
            ("   ", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_url(raw) == expected


class TestHtmlToText:
    """Tests for markup stripping."""

    def test_strips_script_style_and_tags(self):
        text = html_to_text(PAGE)
        assert "tracking" not in text
        assert "color: red" not in text
        assert "alert" not in text
        assert "<" not in text

    def test_collapses_whitespace(self):
        assert html_to_text(PAGE) == "T Edge AI Chips that run models locally."

    def test_plain_text_passthrough(self):
        assert html_to_text("  just\n\ttext  ") == "just text"


class TestContentFetcher:
    """Tests for ContentFetcher.fetch_text with a stubbed transport."""

    def test_explicit_zero_timeout_kept(self):
        assert ContentFetcher(timeout_seconds=0)._timeout == 0

    @pytest.mark.asyncio
    async def test_fetch_sends_browser_user_agent(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["user_agent"] = request.headers["User-Agent"]
            return httpx.Response(200, text=PAGE)

        fetcher = ContentFetcher(transport=httpx.MockTransport(handler))
        text = await fetcher.fetch_text("https://example.com/post")

        assert text == "T Edge AI Chips that run models locally."
        assert seen["user_agent"].startswith("Mozilla/5.0")

    @pytest.mark.asyncio
    async def test_fetch_follows_redirects(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "https://example.com/new"})
            return httpx.Response(200, text="<p>moved</p>")

        fetcher = ContentFetcher(transport=httpx.MockTransport(handler))
        assert await fetcher.fetch_text("https://example.com/old") == "moved"

    @pytest.mark.asyncio
    async def test_fetch_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="missing")

        fetcher = ContentFetcher(transport=httpx.MockTransport(handler))
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch_text("https://example.com/missing")
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Failed to fetch URL content"

    @pytest.mark.asyncio
    async def test_fetch_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        fetcher = ContentFetcher(transport=httpx.MockTransport(handler))
        with pytest.raises(FetchError):
            await fetcher.fetch_text("https://example.com")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["ftp://example.com/file", "https://", "not a url"])
    async def test_rejects_non_http_urls(self, url):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        fetcher = ContentFetcher(transport=httpx.MockTransport(handler))
        with pytest.raises(FetchError):
            await fetcher.fetch_text(url)
