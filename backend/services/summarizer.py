"""
Summarization Client - Zusammenfassung und Key Points über die OpenAI API

Jeder Aufruf läuft durch retry_with_backoff: Rate-Limits (429 /
RESOURCE_EXHAUSTED) werden mit exponentiellem Backoff wiederholt, alle
anderen Fehler sofort als strukturierter Fehler zurückgegeben.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import openai

from config import SummarizerConfig
from services.errors import PipelineError, UpstreamFailure, UpstreamRateLimited
from services.retry import retry_with_backoff

logger = logging.getLogger(__name__)

SUMMARY_MAX_INPUT = 8000
KEY_POINTS_MAX_INPUT = 6000

SYSTEM_MESSAGE = "You are an expert content summarizer."

SUMMARY_PROMPT = """You are an expert content summarizer. Analyze and summarize the following web content in a clear, well-structured format.

CONTENT:
{text}

INSTRUCTIONS:
- Provide a comprehensive summary that captures the main ideas
- Use clear paragraphs and bullet points where appropriate
- Maintain the key information and context
- Write in a professional yet accessible tone
- Keep the summary concise but informative (aim for 200-400 words)

Provide your summary now:"""

KEY_POINTS_PROMPT = """Extract the 5-7 most important key points from this content. Return them as a numbered list.

CONTENT:
{text}

Provide only the key points in this format:
1. [First key point]
2. [Second key point]
..."""


@dataclass(frozen=True)
class SummaryResult:
    """Ergebnis eines einzelnen Summarization-Aufrufs"""
    success: bool
    text: str = ""
    error: Optional[str] = None


def is_rate_limit_error(error: BaseException) -> bool:
    """429 oder RESOURCE_EXHAUSTED, egal ob als SDK-Exception oder nur in der Message"""
    if isinstance(error, openai.RateLimitError):
        return True
    if getattr(error, 'status_code', None) == 429:
        return True
    message = str(error)
    return '429' in message or 'RESOURCE_EXHAUSTED' in message


class SummarizerClient:
    """
    Client für den externen Text-Generierungs-Service.

    Der SDK-Client kann injiziert werden (Tests), sonst wird ein
    openai.AsyncOpenAI mit dem konfigurierten API-Key erstellt.
    """

    def __init__(
        self,
        config: SummarizerConfig,
        max_retries: int = 3,
        client: Optional[openai.AsyncOpenAI] = None,
    ):
        self.config = config
        self.max_retries = max_retries
        # SDK-eigene Retries aus, Backoff läuft über retry_with_backoff
        self._client = client or openai.AsyncOpenAI(api_key=config.api_key, max_retries=0)

    async def generate(self, prompt: str) -> str:
        """Ein einzelner Aufruf: Prompt rein, Text raus"""
        response = await self._client.chat.completions.create(
            model=self.config.model,
            messages=[
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )
        content = response.choices[0].message.content
        if not content:
            raise UpstreamFailure("Empty response from summarization service")
        return content.strip()

    async def _generate_with_retry(self, prompt: str) -> str:
        try:
            return await retry_with_backoff(
                lambda: self.generate(prompt),
                is_retryable=is_rate_limit_error,
                max_attempts=self.max_retries,
            )
        except PipelineError:
            raise
        except Exception as e:
            if is_rate_limit_error(e):
                raise UpstreamRateLimited(str(e)) from e
            raise UpstreamFailure(str(e)) from e

    async def summarize(self, text: str) -> SummaryResult:
        """Zusammenfassung (200-400 Wörter) für bis zu 8.000 Zeichen Input"""
        prompt = SUMMARY_PROMPT.format(text=text[:SUMMARY_MAX_INPUT])

        try:
            summary = await self._generate_with_retry(prompt)
        except PipelineError as e:
            logger.error(f"Summarization API error: {e}")
            return SummaryResult(success=False, error=str(e) or 'Failed to generate summary')

        return SummaryResult(success=True, text=summary)

    async def extract_key_points(self, text: str) -> SummaryResult:
        """5-7 Key Points als nummerierte Liste für bis zu 6.000 Zeichen Input"""
        prompt = KEY_POINTS_PROMPT.format(text=text[:KEY_POINTS_MAX_INPUT])

        try:
            key_points = await self._generate_with_retry(prompt)
        except PipelineError as e:
            logger.error(f"Key points extraction error: {e}")
            return SummaryResult(success=False, error=str(e) or 'Failed to extract key points')

        return SummaryResult(success=True, text=key_points)
