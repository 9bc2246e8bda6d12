"""
Fetch Manager - Orchestriert die Scraping-Tiers (Rendering → Lightweight)
"""

import logging
from enum import Enum
from typing import List, Optional, Sequence

from config import ScraperConfig
from validators import is_valid_url

from .httpx_fetcher import HttpxFetcher
from .playwright_fetcher import PlaywrightFetcher
from .types import Fetcher, ScrapeResult

logger = logging.getLogger(__name__)

INVALID_URL_ERROR = "Invalid URL format. Please include http:// or https://"
ALL_TIERS_FAILED_ERROR = (
    "Could not extract content from this URL. The site may have anti-bot "
    "protection or require authentication."
)


class ScrapeState(str, Enum):
    TRY_RENDERED = "try_rendered"
    TRY_LIGHTWEIGHT = "try_lightweight"
    SUCCESS = "success"
    FAILED = "failed"


_TIER_STATES = {
    PlaywrightFetcher.name: ScrapeState.TRY_RENDERED,
    HttpxFetcher.name: ScrapeState.TRY_LIGHTWEIGHT,
}


def default_fetchers(config: ScraperConfig) -> List[Fetcher]:
    """
    Tier-Reihenfolge für das Deployment.

    Rendering ist langsamer, kommt aber mit JS-lastigen und bot-geschützten
    Seiten zurecht. httpx reicht für statische Seiten und ist in
    eingeschränkten Deployments die einzige Strategie.
    """
    fetchers: List[Fetcher] = []
    if config.enable_rendering:
        fetchers.append(PlaywrightFetcher(config))
    fetchers.append(HttpxFetcher(config))
    return fetchers


class FetchManager:
    """
    Fallback-Kette über die Scraping-Tiers.

    Ablauf:
    1. URL validieren (kein Netzwerk-Request bei ungültiger URL)
    2. Tiers der Reihe nach versuchen, erster Erfolg gewinnt
    3. Alle Tiers fehlgeschlagen → eine einheitliche Fehlermeldung

    Hält keinen veränderlichen Zustand, parallele Requests sind unabhängig.
    """

    def __init__(self, config: ScraperConfig, fetchers: Optional[Sequence[Fetcher]] = None):
        self.config = config
        self.fetchers = list(fetchers) if fetchers is not None else default_fetchers(config)

    @property
    def tier_names(self) -> List[str]:
        return [fetcher.name for fetcher in self.fetchers]

    async def scrape(self, url: str) -> ScrapeResult:
        """
        Scrapt eine URL über die Fallback-Kette.

        Returns:
            ScrapeResult mit success=True oder success=False + error
        """
        if not is_valid_url(url):
            logger.info(f"Rejected invalid URL: {url!r}")
            return ScrapeResult.failure(INVALID_URL_ERROR)

        url = url.strip()
        logger.info(f"Starting scrape for: {url} (tiers: {', '.join(self.tier_names)})")

        for fetcher in self.fetchers:
            state = _TIER_STATES.get(fetcher.name)
            logger.debug(f"Scrape state: {state.value if state else fetcher.name}")

            result = await fetcher.fetch(url)
            if result is not None and result.success:
                logger.info(f"Scrape state: {ScrapeState.SUCCESS.value} via {fetcher.name}")
                return result

            logger.info(f"Tier '{fetcher.name}' yielded no result for {url}")

        logger.warning(f"Scrape state: {ScrapeState.FAILED.value} for {url}")
        return ScrapeResult.failure(ALL_TIERS_FAILED_ERROR)
