"""
Shared Types für Fetcher Module
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol


class ScrapeMethod(str, Enum):
    """Scraping-Tier, das den Text geliefert hat"""
    RENDERED = "rendered"
    LIGHTWEIGHT = "lightweight"


@dataclass(frozen=True)
class ScrapeResult:
    """Standardisiertes Ergebnis eines Scrape-Vorgangs"""
    success: bool
    title: str = ""
    text: str = ""
    word_count: int = 0
    method: Optional[ScrapeMethod] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, title: str, text: str, method: ScrapeMethod) -> "ScrapeResult":
        return cls(success=True, title=title, text=text, word_count=len(text.split()), method=method)

    @classmethod
    def failure(cls, error: str) -> "ScrapeResult":
        return cls(success=False, error=error)


class Fetcher(Protocol):
    """Gemeinsame Fähigkeit beider Tiers: URL → ScrapeResult oder None"""

    name: str

    async def fetch(self, url: str) -> Optional[ScrapeResult]:
        ...
