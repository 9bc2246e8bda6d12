"""
Retry mit exponentiellem Backoff für beliebige async Operationen

Die Policy besteht aus zwei Teilen:
- is_retryable(error): entscheidet, ob ein Fehler wiederholt wird
- delay(attempt): Wartezeit in Sekunden vor dem nächsten Versuch

Nicht wiederholbare Fehler werden sofort weitergeworfen. Sind alle Versuche
verbraucht, wird der letzte Fehler weitergeworfen.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

BASE_DELAY = 1.0  # Sekunden
MAX_DELAY = 10.0  # Sekunden


def exponential_backoff(attempt: int, base: float = BASE_DELAY, cap: float = MAX_DELAY) -> float:
    """min(base * 2^attempt, cap), attempt beginnt bei 0"""
    return min(base * (2 ** attempt), cap)


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    is_retryable: Callable[[BaseException], bool],
    max_attempts: int = 3,
    delay: Callable[[int], float] = exponential_backoff,
) -> T:
    """
    Führt func aus und wiederholt bei retryable Fehlern.

    Args:
        func: Async Funktion ohne Argumente
        is_retryable: Prädikat für wiederholbare Fehler
        max_attempts: Maximale Anzahl Aufrufe insgesamt
        delay: Backoff-Funktion attempt → Sekunden

    Returns:
        Ergebnis des ersten erfolgreichen Aufrufs

    Raises:
        Den letzten Fehler, wenn er nicht retryable ist oder keine Versuche übrig sind
    """
    attempts = max(1, max_attempts)

    for attempt in range(attempts):
        try:
            return await func()
        except Exception as e:
            if not is_retryable(e):
                raise

            if attempt == attempts - 1:
                logger.warning(f"Retries exhausted after {attempts} attempts: {e}")
                raise

            wait = delay(attempt)
            logger.info(f"Rate limit hit. Retrying in {int(wait * 1000)}ms... (Attempt {attempt + 1}/{attempts})")
            await asyncio.sleep(wait)

    # Unerreichbar, range(attempts) ist nie leer
    raise RuntimeError("retry_with_backoff exited without result")
