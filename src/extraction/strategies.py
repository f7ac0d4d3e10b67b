"""Paragraph extraction strategies, tried in priority order.

Each strategy is a plain function ``(ExtractionContext) -> ExtractionResult
| None``. ``None`` or an empty result means "not applicable here"; the
engine moves on to the next one. Adding a strategy means appending it to
``DEFAULT_STRATEGIES``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Sequence

from bs4 import BeautifulSoup
from readability import Document

from .document import LEAF_TAGS, ContentDocument
from .models import ExtractionResult, Platform
from .normalize import clean_whitespace, filter_candidates
from .platforms import rules_for

logger = logging.getLogger(__name__)

# Platform UI labels are short; real prose that happens to mention
# "share" or "follow" is not.
_LABEL_MAX_CHARS = 60

_BLANK_LINE_RE = re.compile(r"\n\s*\n+")
_READABILITY_SPLIT_RE = re.compile(r"\n\s*\n+|\n(?=[A-Z])")
_SENTENCE_END_RE = re.compile(r"(?<=[.!?])\s+")
_COPYRIGHT_RE = re.compile(r"^\s*(©|\(c\)|copyright\b)", re.IGNORECASE)


@dataclass
class ExtractionContext:
    """Everything a strategy may look at for one page."""

    url: str
    platform: Platform
    document: ContentDocument
    rendered_text: str | None = None
    min_paragraph_chars: int = 20
    boilerplate_prefixes: Sequence[str] = field(default_factory=tuple)
    boilerplate_window: int = 30
    rendered_text_min_chars: int = 200
    readability_min_chars: int = 500
    readability_min_paragraph_chars: int = 30
    legacy_target_chars: int = 500

    def keep(self, candidates: Sequence[str], min_chars: int | None = None) -> list[str]:
        return filter_candidates(
            candidates,
            min_chars=self.min_paragraph_chars if min_chars is None else min_chars,
            prefixes=self.boilerplate_prefixes,
            window=self.boilerplate_window,
        )


Strategy = Callable[[ExtractionContext], ExtractionResult | None]


def platform_rules(ctx: ExtractionContext) -> ExtractionResult | None:
    """Platform-tuned content selectors with the platform's label denylist."""
    rules = rules_for(ctx.platform)
    if rules is None or not rules.content:
        return None

    region = ctx.document.select_region(rules.content)
    if region is None:
        logger.debug("platform content region not found", extra={"url": ctx.url, "platform": ctx.platform.value})
        return None

    paragraphs = []
    for text in ctx.keep(ctx.document.collect_leaf_text_nodes(region)):
        lower = text.lower()
        if len(text) <= _LABEL_MAX_CHARS and any(phrase in lower for phrase in rules.exclude_phrases):
            continue
        paragraphs.append(text)
    return ExtractionResult(strategy="platform_rules", paragraphs=paragraphs)


def rendered_text(ctx: ExtractionContext) -> ExtractionResult | None:
    """Browser-rendered text, already segmented at block boundaries."""
    text = ctx.rendered_text or ""
    if len(text) <= ctx.rendered_text_min_chars:
        return None
    segments = _BLANK_LINE_RE.split(text)
    return ExtractionResult(strategy="rendered_text", paragraphs=ctx.keep(segments))


def readability(ctx: ExtractionContext) -> ExtractionResult | None:
    """Reader-mode extraction via readability-lxml."""
    try:
        summary_html = Document(ctx.document.html, url=ctx.url).summary(html_partial=True)
    except Exception:
        logger.warning("readability failed", extra={"url": ctx.url}, exc_info=True)
        return None

    blob = _summary_to_text(summary_html)
    if len(blob) <= ctx.readability_min_chars:
        return None

    min_chars = ctx.readability_min_paragraph_chars
    paragraphs = ctx.keep(_READABILITY_SPLIT_RE.split(blob), min_chars=min_chars)
    if len(paragraphs) < 3 and len(blob) > 1000:
        paragraphs = ctx.keep(blob.split("\n"), min_chars=min_chars)
    return ExtractionResult(strategy="readability", paragraphs=paragraphs)


def _summary_to_text(summary_html: str) -> str:
    """Flatten readability's summary into blank-line separated blocks."""
    soup = BeautifulSoup(summary_html, "lxml")
    blocks = [
        clean_whitespace(el.get_text())
        for el in soup.find_all(LEAF_TAGS)
        if el.find(LEAF_TAGS) is None
    ]
    blocks = [b for b in blocks if b]
    if blocks:
        return "\n\n".join(blocks)
    return soup.get_text("\n").strip()


def generic_dom(ctx: ExtractionContext) -> ExtractionResult | None:
    """Leaf text from the first plausible main-content container."""
    for region in ctx.document.main_content_regions():
        paragraphs = ctx.keep(ctx.document.collect_leaf_text_nodes(region))
        if paragraphs:
            return ExtractionResult(strategy="generic_dom", paragraphs=paragraphs)
    return None


def legacy_markup(ctx: ExtractionContext) -> ExtractionResult | None:
    """Pseudo-paragraphs from ``<font>``/``<td>`` text in hand-written pages."""
    paragraphs: list[str] = []
    for block in ctx.document.legacy_text_blocks():
        for chunk in _BLANK_LINE_RE.split(block):
            chunk = clean_whitespace(chunk)
            if not chunk or _COPYRIGHT_RE.match(chunk):
                continue
            paragraphs.extend(group_sentences(chunk, ctx.legacy_target_chars))
    return ExtractionResult(strategy="legacy_markup", paragraphs=ctx.keep(paragraphs))


def group_sentences(text: str, target_chars: int = 500) -> list[str]:
    """Greedily pack sentences into chunks of roughly *target_chars*."""
    groups: list[str] = []
    current = ""
    for sentence in _SENTENCE_END_RE.split(text):
        sentence = sentence.strip()
        if not sentence:
            continue
        current = f"{current} {sentence}" if current else sentence
        if len(current) >= target_chars:
            groups.append(current)
            current = ""
    if current:
        groups.append(current)
    return groups


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    platform_rules,
    rendered_text,
    readability,
    generic_dom,
    legacy_markup,
)
