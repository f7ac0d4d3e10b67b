"""Extraction engine: fetch, detect, extract, normalize."""

from __future__ import annotations

import logging
from typing import Sequence
from urllib.parse import urlparse

from src.api.schemas import ScrapedContent
from src.config import Settings

from .document import SoupDocument
from .errors import ExtractionError, InvalidURLError, NoContentError
from .events import EventCallback, ExtractionState, emit_event, emit_state
from .fetch import Fetcher
from .metadata import resolve_metadata
from .models import ExtractionResult, FetchResult
from .normalize import normalize
from .platforms import PlatformDetector, build_default_detector
from .render import build_default_backend
from .strategies import DEFAULT_STRATEGIES, ExtractionContext, Strategy

logger = logging.getLogger(__name__)

_VALID_SCHEMES = {"http", "https"}


def validate_url(url: str) -> str:
    """Reject anything that is not an absolute http(s) URL with a host."""
    candidate = (url or "").strip()
    if not candidate:
        raise InvalidURLError("URL is required")
    parsed = urlparse(candidate)
    if parsed.scheme not in _VALID_SCHEMES or not parsed.hostname:
        raise InvalidURLError(f"Invalid URL format: {url!r}")
    return candidate


def run_strategies(
    ctx: ExtractionContext,
    strategies: Sequence[Strategy],
) -> ExtractionResult | None:
    """Return the first strategy result with at least one paragraph.

    A strategy that raises counts as producing nothing.
    """
    for strategy in strategies:
        name = getattr(strategy, "__name__", repr(strategy))
        try:
            result = strategy(ctx)
        except Exception:
            logger.warning("strategy failed", extra={"url": ctx.url, "strategy": name}, exc_info=True)
            continue
        if result is not None and result.paragraphs:
            return result
        logger.debug("strategy produced nothing", extra={"url": ctx.url, "strategy": name})
    return None


class ExtractionEngine:
    """Turns an article URL into a ``ScrapedContent``.

    Holds no per-request state, so one instance serves concurrent
    extractions.
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: Fetcher | None = None,
        detector: PlatformDetector | None = None,
        strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher or Fetcher(settings, backend=build_default_backend(settings))
        self._detector = detector or build_default_detector()
        self._strategies = tuple(strategies)

    async def run(self, url: str, on_event: EventCallback | None = None) -> ScrapedContent:
        """Execute the full extraction pipeline and return a result."""
        await emit_state(on_event, ExtractionState.IDLE, url=url)
        try:
            target = validate_url(url)
            await emit_state(on_event, ExtractionState.FETCHING)
            fetched = await self._fetcher.fetch(target)
            return await self.extract(fetched, on_event=on_event, requested_url=url)
        except ExtractionError as exc:
            logger.warning(
                "extraction failed",
                extra={"url": url, "kind": exc.kind, "error": exc.message},
            )
            await emit_state(on_event, ExtractionState.FAILED, kind=exc.kind, message=exc.message)
            raise

    async def extract(
        self,
        fetched: FetchResult,
        on_event: EventCallback | None = None,
        requested_url: str | None = None,
    ) -> ScrapedContent:
        """Run detection, strategies and normalization on already-fetched HTML.

        ``requested_url`` is echoed unmodified as the result's ``url``;
        it defaults to the fetched URL.
        """
        settings = self._settings
        url = fetched.url

        await emit_state(on_event, ExtractionState.DETECTING)
        document = SoupDocument(fetched.html, url)
        platform = self._detector.detect(url, document)

        await emit_state(on_event, ExtractionState.EXTRACTING, platform=platform.value)
        ctx = ExtractionContext(
            url=url,
            platform=platform,
            document=document,
            rendered_text=fetched.rendered_text,
            min_paragraph_chars=settings.min_paragraph_chars,
            boilerplate_prefixes=tuple(settings.boilerplate_prefixes),
            boilerplate_window=settings.boilerplate_window,
            rendered_text_min_chars=settings.rendered_text_min_chars,
            readability_min_chars=settings.readability_min_chars,
            readability_min_paragraph_chars=settings.readability_min_paragraph_chars,
            legacy_target_chars=settings.legacy_target_chars,
        )
        result = run_strategies(ctx, self._strategies)
        if result is None:
            raise NoContentError()
        await emit_event(on_event, "strategy", {"strategy": result.strategy, "candidates": len(result.paragraphs)})

        await emit_state(on_event, ExtractionState.NORMALIZING)
        text = normalize(
            result.paragraphs,
            min_chars=settings.min_paragraph_chars,
            words_per_minute=settings.words_per_minute,
        )
        if not text.paragraphs:
            raise NoContentError()

        meta = resolve_metadata(document, platform, fetched.discovered_image)
        content = ScrapedContent(
            title=meta.title,
            author=meta.author,
            publish_date=meta.publish_date,
            featured_image=meta.featured_image,
            images=list(meta.images),
            content=text.content,
            paragraphs=text.paragraphs,
            word_count=text.word_count,
            estimated_read_time=text.estimated_read_time,
            platform=platform.value,
            url=requested_url if requested_url is not None else url,
        )

        logger.info(
            "extraction completed",
            extra={
                "url": url,
                "platform": platform.value,
                "strategy": result.strategy,
                "rendered": fetched.rendered,
                "paragraphs": len(text.paragraphs),
                "word_count": text.word_count,
            },
        )
        await emit_state(on_event, ExtractionState.DONE, strategy=result.strategy)
        return content
