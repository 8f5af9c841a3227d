"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Iterator

import pytest

from techscout_api.config import Settings

# Set test environment variables before importing app modules
os.environ.setdefault("GROQ_API_KEY", "")
os.environ.setdefault("ENVIRONMENT", "development")
# Serve canned completions instead of calling the API
os.environ.setdefault("MOCK_GROQ", "true")


@pytest.fixture(autouse=True)
def reset_caches() -> Iterator[None]:
    """Reset cached settings and global singletons before each test."""
    from techscout_api.config import get_settings
    from techscout_api.groq_client import reset_groq_client
    from techscout_api.share_store import reset_share_store

    get_settings.cache_clear()
    reset_share_store()
    reset_groq_client()
    yield
    get_settings.cache_clear()
    reset_share_store()
    reset_groq_client()


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Callable[..., Settings]:
    """Fixture to set test settings."""

    def _mock_settings(**kwargs: str) -> Settings:
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        from techscout_api.config import get_settings

        get_settings.cache_clear()
        return get_settings()

    return _mock_settings


SECTIONED_REPLY = (
    "**Technology Overview:**\nEdge devices process data locally.\n"
    "**Market Trends:**\nGrowing 20% YoY.\n"
    "**Key Players:**\nAcme Corp.\n"
    "**Use Cases:**\nIoT gateways.\n"
    "**Challenges:**\nLatency.\n"
)


@pytest.fixture
def sectioned_reply() -> str:
    """A model reply carrying all five markers."""
    return SECTIONED_REPLY
