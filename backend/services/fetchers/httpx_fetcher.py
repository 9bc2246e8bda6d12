"""
Httpx Fetcher - Lightweight Tier: ein GET-Request + DOM-Parsing mit BeautifulSoup
"""

import logging
from typing import Dict, List, Optional, Tuple

import httpx
from bs4 import BeautifulSoup

from config import ScraperConfig
from services.errors import ContentTooShort, FetchBlocked, FetchTimeout
from services.text_processor import normalize_extracted_text, normalize_whitespace

from .extraction import (
    LIGHTWEIGHT_CONTENT_SELECTORS,
    MIN_CONTENT_LENGTH,
    NOISE_SELECTORS,
    candidate_lengths,
    has_enough_content,
    pick_longest,
)
from .types import ScrapeMethod, ScrapeResult

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 5
BLOCKED_STATUSES = (403, 429)


def build_headers(user_agent: str) -> Dict[str, str]:
    """Realistischer Desktop-Browser Header-Satz"""
    return {
        'User-Agent': user_agent,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9',
        'Accept-Encoding': 'gzip, deflate',
        'Connection': 'keep-alive',
        'Cache-Control': 'max-age=0',
        'Referer': 'https://www.google.com/',
    }


def extract_title(soup: BeautifulSoup) -> str:
    """<title> → erstes <h1> → 'No Title'"""
    title_tag = soup.find('title')
    if title_tag:
        title = title_tag.get_text(strip=True)
        if title:
            return title

    h1 = soup.find('h1')
    if h1:
        title = h1.get_text(' ', strip=True)
        if title:
            return title

    return 'No Title'


def remove_noise(soup: BeautifulSoup, selectors: List[str] = NOISE_SELECTORS) -> None:
    """Entfernt Script/Style/Navigation/Werbung in-place"""
    for tag in soup.select(', '.join(selectors)):
        # extract() statt decompose(): verschachtelte Treffer bleiben gültig
        tag.extract()


def collect_candidates(soup: BeautifulSoup) -> List[Tuple[str, str]]:
    """Text aller vorhandenen Content-Regionen in Selektor-Reihenfolge"""
    candidates = []
    for selector in LIGHTWEIGHT_CONTENT_SELECTORS:
        elements = soup.select(selector)
        if not elements:
            continue
        text = ' '.join(element.get_text(' ') for element in elements)
        candidates.append((selector, normalize_whitespace(text)))
    return candidates


def extract_content(html: str, max_text_length: int) -> Tuple[str, str]:
    """
    Parst HTML und liefert (title, text).

    Main-Content: längster Text über alle Content-Selektoren,
    damit dünne Wrapper-Treffer gegen große Content-Blöcke verlieren.
    """
    soup = BeautifulSoup(html, 'lxml')

    remove_noise(soup)
    title = extract_title(soup)

    candidates = collect_candidates(soup)
    logger.debug(f"Lightweight candidates: {candidate_lengths(candidates)}")

    best = pick_longest(candidates)
    text = best[1] if best else ''

    return title, normalize_extracted_text(text, max_text_length)


class HttpxFetcher:
    """
    Fetcht URLs mit httpx und extrahiert den Main-Content statisch.

    Ohne injizierten Client wird pro Fetch ein eigener AsyncClient erstellt
    und garantiert wieder geschlossen.
    """

    name = "httpx"

    def __init__(self, config: ScraperConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._client = client

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout_ms / 1000),
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
            headers=build_headers(self.config.user_agent),
        )

    async def _get(self, url: str) -> httpx.Response:
        try:
            if self._client is not None:
                return await self._client.get(url, headers=build_headers(self.config.user_agent))
            async with self._new_client() as client:
                return await client.get(url)
        except httpx.TimeoutException as e:
            raise FetchTimeout(f"Timeout after {self.config.timeout_ms}ms: {e}") from e

    async def _scrape(self, url: str) -> ScrapeResult:
        response = await self._get(url)
        status = response.status_code

        if status in BLOCKED_STATUSES:
            raise FetchBlocked(f"Received status {status}", status=status)

        if status >= 400:
            raise FetchBlocked(f"Unusable status {status}", status=status)

        title, text = extract_content(response.text, self.config.max_text_length)

        if not has_enough_content(text):
            raise ContentTooShort(len(text), MIN_CONTENT_LENGTH)

        return ScrapeResult.ok(title=title, text=text, method=ScrapeMethod.LIGHTWEIGHT)

    async def fetch(self, url: str) -> Optional[ScrapeResult]:
        """
        Fetcht eine URL und extrahiert Titel + Main-Content.

        Args:
            url: Bereits validierte http(s)-URL

        Returns:
            ScrapeResult bei Erfolg, sonst None (Fehler werden nur geloggt)
        """
        logger.info(f"Scraping with httpx: {url}")

        try:
            result = await self._scrape(url)
        except FetchBlocked as e:
            logger.warning(f"httpx fetch blocked for {url}: {e}")
            return None
        except FetchTimeout as e:
            logger.warning(f"httpx fetch timed out for {url}: {e}")
            return None
        except ContentTooShort as e:
            logger.info(f"httpx extraction too short for {url}: {e}")
            return None
        except Exception as e:
            logger.error(f"httpx fetch failed for {url}: {e}")
            return None

        logger.info(f"Successfully extracted {len(result.text)} characters via httpx")
        return result
