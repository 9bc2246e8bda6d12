from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional, List
from functools import lru_cache
import os
from datetime import datetime, timezone
import time
import uuid
import logging

from config import ScraperConfig, SummarizerConfig, load_scraper_config, load_summarizer_config
from services.fetchers.fetch_manager import FetchManager
from services.summarizer import SummarizerClient
from services.text_processor import clean_text, extract_metadata

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


DEFAULT_CORS_ORIGIN = "http://localhost:3000"


def _get_cors_origins() -> List[str]:
    """Erlaubte Frontend-Origins aus CORS_ORIGINS (kommagetrennt), ohne Wildcard"""
    raw = [part.strip() for part in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGIN).split(",")]
    origins = [part for part in raw if part.startswith(("http://", "https://"))]

    rejected = [part for part in raw if part and part not in origins]
    if rejected:
        logger.warning(f"⚠️  Ignoring CORS origins: {', '.join(rejected)}")

    if not origins:
        logger.warning(f"⚠️  No usable CORS origins, falling back to {DEFAULT_CORS_ORIGIN}")
        return [DEFAULT_CORS_ORIGIN]

    logger.info(f"✅ CORS origins: {', '.join(origins)}")
    return origins


app = FastAPI(title="Web Summarizer Backend", version=APP_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)


# Dependencies - einmal pro Prozess gebaut, danach read-only
@lru_cache
def get_scraper_config() -> ScraperConfig:
    return load_scraper_config()


@lru_cache
def get_summarizer_config() -> SummarizerConfig:
    return load_summarizer_config()


def get_fetch_manager(config: ScraperConfig = Depends(get_scraper_config)) -> FetchManager:
    return FetchManager(config)


def get_summarizer(
    scraper_config: ScraperConfig = Depends(get_scraper_config),
    summarizer_config: SummarizerConfig = Depends(get_summarizer_config),
) -> Optional[SummarizerClient]:
    """Ohne API-Key kein Client, der Endpoint antwortet dann mit MISSING_API_KEY"""
    if not summarizer_config.is_configured:
        return None
    return SummarizerClient(summarizer_config, max_retries=scraper_config.max_retries)


# Pydantic Models
class SummarizeRequest(BaseModel):
    url: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    code: str


class SummaryMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    word_count: int = Field(alias="wordCount")
    sentence_count: int = Field(alias="sentenceCount")
    character_count: int = Field(alias="characterCount")
    reading_time: str = Field(alias="readingTime")
    scraping_method: str = Field(alias="scrapingMethod")
    processing_time: str = Field(alias="processingTime")
    timestamp: str


class SummarizeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    title: str
    summary: str
    key_points: str = Field(alias="keyPoints")
    metadata: SummaryMetadata


def _error(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, code=code).model_dump(),
    )


# Health Check
@app.get("/api/health")
async def health(
    scraper_config: ScraperConfig = Depends(get_scraper_config),
    summarizer_config: SummarizerConfig = Depends(get_summarizer_config),
):
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": os.getenv("APP_ENV", "development"),
        "apiConfigured": summarizer_config.is_configured,
        "renderingEnabled": scraper_config.enable_rendering,
        "version": APP_VERSION,
    }


# API Endpoints
@app.post("/api/summarize", response_model=SummarizeResponse, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def summarize_endpoint(
    request: SummarizeRequest,
    fetch_manager: FetchManager = Depends(get_fetch_manager),
    summarizer: Optional[SummarizerClient] = Depends(get_summarizer),
):
    """
    Scrapt eine URL und erstellt Zusammenfassung + Key Points.

    Ablauf:
    1. Validierung (URL vorhanden, API-Key konfiguriert)
    2. Scraping über die Fallback-Kette
    3. Text bereinigen + Metadaten
    4. Summary (Pflicht) und Key Points (optional)
    """
    request_id = str(uuid.uuid4())[:8]
    start_time = time.time()

    url = (request.url or "").strip()
    if not url:
        logger.info(f"[{request_id}] URL missing from request")
        return _error(400, "URL is required", "MISSING_URL")

    if summarizer is None:
        logger.error(f"[{request_id}] API key not configured")
        return _error(500, "Server configuration error: API key not configured", "MISSING_API_KEY")

    logger.info(f"[{request_id}] Processing request for URL: {url}")

    # 1. Scraping
    scraped = await fetch_manager.scrape(url)
    if not scraped.success:
        logger.info(f"[{request_id}] Scraping failed: {scraped.error}")
        return _error(400, scraped.error, "SCRAPING_FAILED")

    logger.info(f"[{request_id}] Scraped {scraped.word_count} words using {scraped.method.value}")

    # 2. Text bereinigen
    cleaned_text = clean_text(scraped.text)
    metadata = extract_metadata(cleaned_text)
    logger.info(f"[{request_id}] Text processed: {metadata.word_count} words, {metadata.sentence_count} sentences")

    # 3. Summary
    summary = await summarizer.summarize(cleaned_text)
    if not summary.success:
        logger.error(f"[{request_id}] Summarization failed: {summary.error}")
        return _error(500, f"Failed to generate summary: {summary.error}", "SUMMARIZATION_FAILED")

    # 4. Key Points - Fehler hier sind nicht fatal
    key_points = await summarizer.extract_key_points(cleaned_text)
    if not key_points.success:
        logger.warning(f"[{request_id}] Key points extraction failed: {key_points.error}")

    processing_time = int((time.time() - start_time) * 1000)
    logger.info(f"[{request_id}] Request completed successfully in {processing_time}ms")

    return SummarizeResponse(
        title=scraped.title,
        summary=summary.text,
        key_points=key_points.text if key_points.success else "",
        metadata=SummaryMetadata(
            word_count=metadata.word_count,
            sentence_count=metadata.sentence_count,
            character_count=metadata.character_count,
            reading_time=metadata.reading_time,
            scraping_method=scraped.method.value,
            processing_time=f"{processing_time}ms",
            timestamp=metadata.timestamp,
        ),
    )


# Error Handler
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unbekannte Route oder falsche Methode
    if exc.status_code in (404, 405):
        return _error(404, "Endpoint not found", "NOT_FOUND")
    logger.error(f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}")
    return _error(500, "An unexpected error occurred while processing your request", "INTERNAL_ERROR")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Body fehlt oder url ist kein String
    logger.info(f"Invalid request body on {request.url.path}: {exc.errors()}")
    return _error(400, "URL is required", "MISSING_URL")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return _error(500, "An unexpected error occurred while processing your request", "INTERNAL_ERROR")


# Startup Event
@app.on_event("startup")
def startup_event():
    scraper_config = get_scraper_config()
    summarizer_config = get_summarizer_config()
    logger.info("=================================")
    logger.info(f"Environment: {os.getenv('APP_ENV', 'development')}")
    logger.info(f"Rendering tier: {'enabled' if scraper_config.enable_rendering else 'disabled'}")
    logger.info(f"API Key: {'Configured' if summarizer_config.is_configured else 'Missing'}")
    logger.info("=================================")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
