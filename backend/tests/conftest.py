"""Shared fixtures for backend tests."""

from typing import Callable

import httpx
import pytest

from config import ScraperConfig

ARTICLE_SENTENCE = "The quick brown fox jumps over the lazy dog. "


def article_text(length: int) -> str:
    """Plain prose of roughly ``length`` characters without trailing whitespace."""
    repeats = length // len(ARTICLE_SENTENCE) + 1
    return (ARTICLE_SENTENCE * repeats)[:length].strip()


@pytest.fixture
def scraper_config() -> ScraperConfig:
    return ScraperConfig(timeout_ms=5000, max_retries=3, max_text_length=10000, enable_rendering=False)


@pytest.fixture
def mock_client_factory() -> Callable[..., httpx.AsyncClient]:
    """Build an AsyncClient whose every GET returns the given status and body."""

    def factory(status: int = 200, html: str = "", handler=None) -> httpx.AsyncClient:
        def default_handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, text=html, headers={"content-type": "text/html"})

        return httpx.AsyncClient(transport=httpx.MockTransport(handler or default_handler))

    return factory
