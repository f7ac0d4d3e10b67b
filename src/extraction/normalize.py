"""Paragraph cleanup, boilerplate filtering, de-duplication and word counts."""

from __future__ import annotations

import math
import re
from typing import Iterable, Sequence

from .models import NormalizedText

_WHITESPACE_RE = re.compile(r"\s+")

PARAGRAPH_SEPARATOR = "\n\n"


def clean_whitespace(text: str) -> str:
    """Trim and collapse every internal whitespace run to one space."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def is_boilerplate(
    text: str,
    prefixes: Sequence[str],
    window: int = 30,
) -> bool:
    """True if the start of *text* looks like navigation or marketing chrome.

    Only the first *window* characters are inspected. A copyright sign in
    that window also counts.
    """
    head = text.strip()[:window].lower()
    if "©" in head:
        return True
    return any(head.startswith(prefix.lower()) for prefix in prefixes)


def word_count(content: str) -> int:
    return len([w for w in content.split() if w])


def estimate_read_time(words: int, words_per_minute: int = 200) -> str:
    minutes = math.ceil(words / words_per_minute)
    return f"{minutes} min read"


def filter_candidates(
    raw: Iterable[str],
    *,
    min_chars: int,
    prefixes: Sequence[str],
    window: int = 30,
) -> list[str]:
    """Clean candidate paragraphs and drop short or boilerplate ones.

    Strategies run their candidates through this before reporting a result
    so "found something" means "found something narratable".
    """
    kept: list[str] = []
    for text in raw:
        cleaned = clean_whitespace(text)
        if len(cleaned) < min_chars:
            continue
        if is_boilerplate(cleaned, prefixes, window):
            continue
        kept.append(cleaned)
    return kept


def dedupe(paragraphs: Iterable[str]) -> list[str]:
    """Drop case-insensitive repeats, keeping the first occurrence in order."""
    seen: set[str] = set()
    unique: list[str] = []
    for p in paragraphs:
        key = p.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(p)
    return unique


def normalize(
    raw_paragraphs: Iterable[str],
    *,
    min_chars: int = 20,
    words_per_minute: int = 200,
) -> NormalizedText:
    """Clean, length-filter and de-duplicate paragraphs, then derive totals.

    The length filter runs after whitespace collapsing so every strategy is
    judged by the same measure.
    """
    cleaned = [clean_whitespace(p) for p in raw_paragraphs]
    cleaned = [p for p in cleaned if len(p) >= min_chars]
    paragraphs = dedupe(cleaned)

    content = PARAGRAPH_SEPARATOR.join(paragraphs)
    words = word_count(content)
    return NormalizedText(
        paragraphs=paragraphs,
        content=content,
        word_count=words,
        estimated_read_time=estimate_read_time(words, words_per_minute),
    )
