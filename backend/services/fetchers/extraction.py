"""
Content Extraction - Selektor-Listen und Auswahl-Policies für den Main-Content

Beide Tiers nutzen unterschiedliche Policies:
- httpx (lightweight): längster Kandidat über alle Selektoren
- playwright (rendered): erster Kandidat in Prioritätsreihenfolge über 200 Zeichen
"""

from typing import Iterable, List, Optional, Tuple

# Mindestlänge für ein verwertbares Ergebnis (nach Truncation)
MIN_CONTENT_LENGTH = 100

# Mindestlänge für einen Treffer im Rendering-Pfad
RENDERED_CANDIDATE_MIN_LENGTH = 200

NOISE_SELECTORS = [
    'script', 'style', 'nav', 'footer', 'header', 'aside',
    'noscript', 'iframe', '[class*="ad"]', '[id*="ad"]',
]

# Zusätzlich im Rendering-Pfad: Cookie-Banner & Co.
RENDERED_NOISE_SELECTORS = NOISE_SELECTORS + [
    'embed', 'object',
    '[class*="cookie"]', '[id*="cookie"]',
    '[class*="banner"]', '[id*="banner"]',
    '[class*="advert"]', '[id*="advert"]',
]

LIGHTWEIGHT_CONTENT_SELECTORS = [
    'article',
    'main',
    '[role="main"]',
    '.content',
    '.post-content',
    '.article-content',
    '.entry-content',
    '#main-content',
    'body',
]

RENDERED_CONTENT_SELECTORS = [
    'main',
    'article',
    '[role="main"]',
    '.content',
    '.post-content',
    '.article-content',
    '.entry-content',
    '#main-content',
    '#content',
    'body',
]

CHALLENGE_MARKERS = [
    'just a moment',
    'checking your browser',
]


def pick_longest(candidates: Iterable[Tuple[str, str]]) -> Optional[Tuple[str, str]]:
    """
    Wählt den Kandidaten mit dem längsten Text.

    Bei gleicher Länge gewinnt der frühere Selektor, ein späterer
    Kandidat ersetzt den bisherigen nur mit strikt mehr Text.
    """
    best = None
    for selector, text in candidates:
        if best is None or len(text) > len(best[1]):
            best = (selector, text)
    return best


def pick_first_over(
    candidates: Iterable[Tuple[str, str]],
    min_length: int = RENDERED_CANDIDATE_MIN_LENGTH,
) -> Optional[Tuple[str, str]]:
    """
    Wählt den ersten Kandidaten (Prioritätsreihenfolge), dessen Text
    länger als min_length ist. Spätere, längere Kandidaten werden ignoriert.

    Ohne Treffer: der letzte Kandidat (body) als Fallback.
    """
    last = None
    for selector, text in candidates:
        if len(text) > min_length:
            return selector, text
        last = (selector, text)
    return last


def is_challenge_page(title: str, body_text: str) -> bool:
    """Erkennt Bot-Challenge-Seiten (Cloudflare & Co.) an Titel oder Body-Text"""
    haystack = f"{title or ''} {body_text or ''}".lower()
    return any(marker in haystack for marker in CHALLENGE_MARKERS)


def has_enough_content(text: str) -> bool:
    return len(text) > MIN_CONTENT_LENGTH


def candidate_lengths(candidates: List[Tuple[str, str]]) -> str:
    """Kompakte Log-Darstellung: 'main=50, body=500'"""
    return ", ".join(f"{selector}={len(text)}" for selector, text in candidates)
