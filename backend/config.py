"""
Konfiguration - Prozessweite, unveränderliche Einstellungen aus Environment-Variablen
"""

import logging
import os
import pathlib
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Lokale Overrides aus .env.local im Projekt-Root, sonst die übliche .env-Suche
LOCAL_ENV_FILE = pathlib.Path(__file__).resolve().parent.parent / ".env.local"
load_dotenv(dotenv_path=LOCAL_ENV_FILE if LOCAL_ENV_FILE.is_file() else None)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"


@dataclass(frozen=True)
class ScraperConfig:
    """Einstellungen für beide Scraping-Tiers"""
    timeout_ms: int = 30000
    max_retries: int = 3
    max_text_length: int = 10000
    user_agent: str = DEFAULT_USER_AGENT
    enable_rendering: bool = True
    browser_sandbox: bool = True


@dataclass(frozen=True)
class SummarizerConfig:
    """Einstellungen für den Summarization Client"""
    api_key: Optional[str] = None
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 2048

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"⚠️  Invalid integer for {name}: {raw!r}, using default {default}")
        return default
    if value <= 0:
        logger.warning(f"⚠️  {name} must be positive, using default {default}")
        return default
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"⚠️  Invalid number for {name}: {raw!r}, using default {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_scraper_config() -> ScraperConfig:
    """
    Baut die ScraperConfig aus dem Environment.

    Variablen:
        SCRAPER_TIMEOUT_MS, SCRAPER_MAX_RETRIES, SCRAPER_MAX_TEXT_LENGTH,
        SCRAPER_USER_AGENT, ENABLE_BROWSER_RENDERING, BROWSER_SANDBOX
    """
    return ScraperConfig(
        timeout_ms=_env_int("SCRAPER_TIMEOUT_MS", 30000),
        max_retries=_env_int("SCRAPER_MAX_RETRIES", 3),
        max_text_length=_env_int("SCRAPER_MAX_TEXT_LENGTH", 10000),
        user_agent=os.getenv("SCRAPER_USER_AGENT") or DEFAULT_USER_AGENT,
        enable_rendering=_env_bool("ENABLE_BROWSER_RENDERING", True),
        browser_sandbox=_env_bool("BROWSER_SANDBOX", True),
    )


def load_summarizer_config() -> SummarizerConfig:
    """Baut die SummarizerConfig aus dem Environment (OPENAI_API_KEY etc.)"""
    return SummarizerConfig(
        api_key=os.getenv("OPENAI_API_KEY") or None,
        model=os.getenv("OPENAI_MODEL") or "gpt-4o-mini",
        temperature=_env_float("SUMMARIZER_TEMPERATURE", 0.7),
        max_tokens=_env_int("SUMMARIZER_MAX_TOKENS", 2048),
    )
