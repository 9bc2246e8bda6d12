"""
Text Processor - Normalisierung und Metadaten für extrahierten Text

Alle Funktionen sind pure: gleicher Input ergibt gleichen Output
(Ausnahme: der Timestamp in extract_metadata).
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone

WORDS_PER_MINUTE = 200
DEFAULT_MAX_LENGTH = 5000

_WHITESPACE_RE = re.compile(r'\s+')
_SENTENCE_SPLIT_RE = re.compile(r'[.!?]+')
# Erlaubt: Wortzeichen, Whitespace und gängige Satzzeichen
_DISALLOWED_CHARS_RE = re.compile(r'[^\w\s.,!?;:()\-\'"]')


@dataclass(frozen=True)
class NormalizedMetadata:
    """Aus normalisiertem Text abgeleitete Kennzahlen"""
    word_count: int
    sentence_count: int
    character_count: int
    reading_time: str
    timestamp: str


def normalize_whitespace(text: str) -> str:
    """Mehrfach-Whitespace → 1 Space, trimmen"""
    if not text:
        return ''
    return _WHITESPACE_RE.sub(' ', text).strip()


def clean_text(text: str) -> str:
    """
    Entfernt Zeichen außerhalb der Allow-List und normalisiert Whitespace.

    Zeichen werden vor dem Whitespace-Collapse entfernt, damit keine
    doppelten Spaces übrig bleiben ("a © b" → "a b").
    """
    if not text:
        return ''
    cleaned = _DISALLOWED_CHARS_RE.sub('', text)
    return normalize_whitespace(cleaned)


def truncate_text(text: str, max_length: int = DEFAULT_MAX_LENGTH, suffix: str = '') -> str:
    """
    Kürzt Text auf max_length Zeichen.

    Ein optionaler suffix (z.B. '...') zählt zur Länge, das Ergebnis ist
    also nie länger als max_length.
    """
    if len(text) <= max_length:
        return text
    if suffix and len(suffix) < max_length:
        return text[:max_length - len(suffix)] + suffix
    return text[:max_length]


def normalize_extracted_text(text: str, max_length: int) -> str:
    """Whitespace-Collapse, trimmen und auf max_length kürzen (Fetcher-Pfad)"""
    return truncate_text(normalize_whitespace(text), max_length).strip()


def count_words(text: str) -> int:
    return len(text.split())


def count_sentences(text: str) -> int:
    return len([s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()])


def reading_time_minutes(word_count: int) -> int:
    """Lesezeit in Minuten bei 200 Wörtern/Minute, mindestens 1 (kaufmännisch gerundet)"""
    return max(1, math.floor(word_count / WORDS_PER_MINUTE + 0.5))


def extract_metadata(text: str) -> NormalizedMetadata:
    """Berechnet Wort-, Satz- und Zeichenanzahl sowie die Lesezeit"""
    word_count = count_words(text)

    return NormalizedMetadata(
        word_count=word_count,
        sentence_count=count_sentences(text),
        character_count=len(text),
        reading_time=f"{reading_time_minutes(word_count)} min read",
        timestamp=datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
    )
