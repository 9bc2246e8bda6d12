"""Unit tests for the rendering (Playwright) tier with a mocked browser."""

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from conftest import article_text
from services.fetchers.extraction import is_challenge_page, pick_first_over
from services.fetchers.playwright_fetcher import (
    BODY_TEXT_JS,
    CHALLENGE_DELAY_MS,
    COLLECT_CANDIDATES_JS,
    SETTLE_DELAY_MS,
    PlaywrightFetcher,
    block_heavy_resources,
    build_launch_args,
)
from services.fetchers.types import ScrapeMethod


def make_page(candidates, titles=("Rendered Article",), body_text="Rendered body"):
    page = AsyncMock()
    page.title.side_effect = list(titles) + [titles[-1]] * 5

    async def evaluate(script, arg=None):
        if script == BODY_TEXT_JS:
            return body_text
        if script == COLLECT_CANDIDATES_JS:
            return [list(candidate) for candidate in candidates]
        return None

    page.evaluate.side_effect = evaluate
    return page


def patch_browser(page):
    """Patch async_playwright so that launching Chromium yields the given page."""
    context = AsyncMock()
    context.new_page.return_value = page

    browser = AsyncMock()
    browser.new_context.return_value = context

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)

    factory = MagicMock()
    factory.return_value.__aenter__.return_value = playwright
    factory.return_value.__aexit__.return_value = False

    return patch("services.fetchers.playwright_fetcher.async_playwright", factory), browser, context


@pytest.fixture
def rendering_config(scraper_config):
    return replace(scraper_config, enable_rendering=True)


def test_first_match_over_threshold_wins_over_longer_later_match() -> None:
    main_text = article_text(250)
    body_text = article_text(2000)

    best = pick_first_over([("main", main_text), ("article", "short"), ("body", body_text)])

    assert best == ("main", main_text)


def test_first_match_skips_candidates_at_or_below_threshold() -> None:
    exactly_200 = "x" * 200
    article = article_text(400)

    assert pick_first_over([("main", exactly_200), ("article", article), ("body", article + " more")]) == ("article", article)


def test_first_match_falls_back_to_last_candidate() -> None:
    assert pick_first_over([("main", "tiny"), ("body", "a bit of body text")]) == ("body", "a bit of body text")
    assert pick_first_over([]) is None


def test_challenge_detection() -> None:
    assert is_challenge_page("Just a moment...", "")
    assert is_challenge_page("Example", "Checking your browser before accessing example.com")
    assert not is_challenge_page("Example", "Regular article text")


def test_launch_args_keep_sandbox_by_default() -> None:
    assert "--no-sandbox" not in build_launch_args(sandbox=True)
    assert "--no-sandbox" in build_launch_args(sandbox=False)
    assert "--disable-blink-features=AutomationControlled" in build_launch_args(sandbox=True)


@pytest.mark.asyncio
@pytest.mark.parametrize("resource_type,aborted", [
    ("image", True),
    ("stylesheet", True),
    ("font", True),
    ("media", True),
    ("document", False),
    ("script", False),
    ("xhr", False),
])
async def test_route_handler_blocks_heavy_resources(resource_type, aborted) -> None:
    route = MagicMock()
    route.request.resource_type = resource_type
    route.abort = AsyncMock()
    route.continue_ = AsyncMock()

    await block_heavy_resources(route)

    assert route.abort.await_count == (1 if aborted else 0)
    assert route.continue_.await_count == (0 if aborted else 1)


@pytest.mark.asyncio
async def test_successful_render_uses_first_match_and_closes_browser(rendering_config) -> None:
    main_text = article_text(300)
    page = make_page([("main", main_text), ("body", article_text(3000))])
    patcher, browser, context = patch_browser(page)

    with patcher:
        result = await PlaywrightFetcher(rendering_config).fetch("https://example.com/app")

    assert result is not None
    assert result.method == ScrapeMethod.RENDERED
    assert result.title == "Rendered Article"
    assert result.text == main_text
    page.goto.assert_awaited_once_with("https://example.com/app", wait_until="networkidle", timeout=rendering_config.timeout_ms)
    page.wait_for_timeout.assert_awaited_once_with(SETTLE_DELAY_MS)
    context.add_init_script.assert_awaited_once()
    browser.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_challenge_page_waits_longer_before_extracting(rendering_config) -> None:
    page = make_page(
        [("article", article_text(500))],
        titles=("Just a moment...", "Real Article", "Real Article"),
    )
    patcher, browser, _ = patch_browser(page)

    with patcher:
        result = await PlaywrightFetcher(rendering_config).fetch("https://example.com/protected")

    assert result is not None
    assert result.title == "Real Article"
    page.wait_for_timeout.assert_any_await(CHALLENGE_DELAY_MS)
    browser.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_unresolved_challenge_is_failure(rendering_config) -> None:
    page = make_page([("body", article_text(500))], titles=("Just a moment...",))
    patcher, browser, _ = patch_browser(page)

    with patcher:
        assert await PlaywrightFetcher(rendering_config).fetch("https://example.com/protected") is None

    browser.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_short_rendered_text_is_failure(rendering_config) -> None:
    page = make_page([("body", "Loading...")])
    patcher, browser, _ = patch_browser(page)

    with patcher:
        assert await PlaywrightFetcher(rendering_config).fetch("https://example.com/spa") is None

    browser.close.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    PlaywrightTimeoutError("Timeout 5000ms exceeded."),
    RuntimeError("net::ERR_NAME_NOT_RESOLVED"),
])
async def test_navigation_errors_close_browser_and_return_none(error, rendering_config) -> None:
    page = make_page([])
    page.goto.side_effect = error
    patcher, browser, _ = patch_browser(page)

    with patcher:
        assert await PlaywrightFetcher(rendering_config).fetch("https://example.com/") is None

    browser.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_launch_failure_returns_none(rendering_config) -> None:
    factory = MagicMock()
    factory.return_value.__aenter__.side_effect = RuntimeError("Executable doesn't exist")

    with patch("services.fetchers.playwright_fetcher.async_playwright", factory):
        assert await PlaywrightFetcher(rendering_config).fetch("https://example.com/") is None
