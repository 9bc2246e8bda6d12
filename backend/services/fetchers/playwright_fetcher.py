"""
Playwright Fetcher - Rendering Tier: Headless Chromium mit Anti-Detection
"""

import logging
from typing import Dict, List, Optional, Tuple

from playwright.async_api import Page, Route, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from config import ScraperConfig
from services.errors import ContentTooShort, FetchBlocked, FetchTimeout
from services.text_processor import normalize_extracted_text

from .extraction import (
    MIN_CONTENT_LENGTH,
    RENDERED_CONTENT_SELECTORS,
    RENDERED_NOISE_SELECTORS,
    candidate_lengths,
    has_enough_content,
    is_challenge_page,
    pick_first_over,
)
from .types import ScrapeMethod, ScrapeResult

logger = logging.getLogger(__name__)

SETTLE_DELAY_MS = 3000  # Zeit für deferred Scripts nach networkidle
CHALLENGE_DELAY_MS = 8000  # Zusätzliche Wartezeit bei Bot-Challenge
VIEWPORT = {'width': 1920, 'height': 1080}

BLOCKED_RESOURCE_TYPES = frozenset({'image', 'stylesheet', 'font', 'media'})

STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
window.chrome = { runtime: {} };
"""

REMOVE_NOISE_JS = """
(selectors) => {
    for (const selector of selectors) {
        document.querySelectorAll(selector).forEach((el) => el.remove());
    }
}
"""

COLLECT_CANDIDATES_JS = """
(selectors) => {
    const candidates = [];
    for (const selector of selectors) {
        const el = document.querySelector(selector);
        if (el) {
            candidates.push([selector, el.innerText || '']);
        }
    }
    return candidates;
}
"""

BODY_TEXT_JS = "() => document.body ? document.body.innerText : ''"


def build_launch_args(sandbox: bool) -> List[str]:
    args = ['--disable-blink-features=AutomationControlled', '--disable-dev-shm-usage']
    if not sandbox:
        # Nur für Container ohne User-Namespaces
        args += ['--no-sandbox', '--disable-setuid-sandbox']
    return args


def build_extra_headers() -> Dict[str, str]:
    return {
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9',
        'Referer': 'https://www.google.com/',
    }


async def block_heavy_resources(route: Route) -> None:
    """Bilder, Stylesheets, Fonts und Media abbrechen, Rest durchlassen"""
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


class PlaywrightFetcher:
    """
    Fetcht URLs mit Playwright.

    Browser Lifecycle:
    - Pro Fetch wird ein eigener, isolierter Browser gestartet
    - Browser wird auf jedem Exit-Pfad geschlossen (Erfolg, Fehler, Exception)
    """

    name = "playwright"

    def __init__(self, config: ScraperConfig):
        self.config = config

    async def _wait_for_content(self, page: Page, url: str) -> None:
        """Settle-Delay und ggf. längere Wartezeit bei Challenge-Seiten"""
        await page.wait_for_timeout(SETTLE_DELAY_MS)

        title = await page.title()
        body_text = await page.evaluate(BODY_TEXT_JS)

        if is_challenge_page(title, body_text):
            logger.info(f"Bot challenge detected on {url}, waiting {CHALLENGE_DELAY_MS}ms")
            await page.wait_for_timeout(CHALLENGE_DELAY_MS)

            title = await page.title()
            body_text = await page.evaluate(BODY_TEXT_JS)
            if is_challenge_page(title, body_text):
                raise FetchBlocked("Bot challenge did not resolve")

    async def _extract(self, page: Page) -> Tuple[str, str]:
        title = (await page.title() or '').strip() or 'No Title'

        await page.evaluate(REMOVE_NOISE_JS, RENDERED_NOISE_SELECTORS)

        candidates = [
            (selector, text)
            for selector, text in await page.evaluate(COLLECT_CANDIDATES_JS, RENDERED_CONTENT_SELECTORS)
        ]
        logger.debug(f"Rendered candidates: {candidate_lengths(candidates)}")

        best = pick_first_over(candidates)
        text = best[1] if best else ''

        return title, normalize_extracted_text(text, self.config.max_text_length)

    async def _scrape(self, url: str) -> ScrapeResult:
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(
                headless=True,
                args=build_launch_args(self.config.browser_sandbox),
            )
            try:
                context = await browser.new_context(
                    user_agent=self.config.user_agent,
                    viewport=VIEWPORT,
                    locale='en-US',
                    extra_http_headers=build_extra_headers(),
                )
                await context.add_init_script(STEALTH_SCRIPT)

                page = await context.new_page()
                await page.route("**/*", block_heavy_resources)

                try:
                    await page.goto(url, wait_until="networkidle", timeout=self.config.timeout_ms)
                except PlaywrightTimeoutError as e:
                    raise FetchTimeout(f"Navigation timeout after {self.config.timeout_ms}ms") from e

                await self._wait_for_content(page, url)
                title, text = await self._extract(page)
            finally:
                await browser.close()
                logger.debug("Playwright browser closed")

        if not has_enough_content(text):
            raise ContentTooShort(len(text), MIN_CONTENT_LENGTH)

        return ScrapeResult.ok(title=title, text=text, method=ScrapeMethod.RENDERED)

    async def fetch(self, url: str) -> Optional[ScrapeResult]:
        """
        Rendert eine URL und extrahiert Titel + Main-Content.

        Returns:
            ScrapeResult bei Erfolg, sonst None (Fehler werden nur geloggt)
        """
        logger.info(f"Scraping with playwright: {url}")

        try:
            result = await self._scrape(url)
        except FetchBlocked as e:
            logger.warning(f"Playwright fetch blocked for {url}: {e}")
            return None
        except FetchTimeout as e:
            logger.warning(f"Playwright fetch timed out for {url}: {e}")
            return None
        except ContentTooShort as e:
            logger.info(f"Playwright extraction too short for {url}: {e}")
            return None
        except Exception as e:
            logger.error(f"Playwright fetch failed for {url}: {e}")
            return None

        logger.info(f"Successfully extracted {len(result.text)} characters via playwright")
        return result
