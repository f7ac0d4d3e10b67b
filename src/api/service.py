"""Cache-aware extraction used by the API routes."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncGenerator

from src.api.schemas import ScrapedContent
from src.cache.redis import ScrapeCache
from src.config import Settings
from src.extraction.engine import ExtractionEngine, validate_url
from src.extraction.errors import ExtractionError

logger = logging.getLogger(__name__)

# Strong references to in-flight streaming extractions; a client disconnect
# does not cancel them.
_background_tasks: set[asyncio.Task[None]] = set()


async def scrape_url(
    engine: ExtractionEngine,
    cache: ScrapeCache,
    settings: Settings,
    url: str,
    refresh: bool = False,
) -> ScrapedContent:
    """Return a cached extraction for *url*, or run the pipeline and cache it."""
    validate_url(url)
    if not refresh:
        cached = await cache.get(url)
        if cached is not None:
            logger.info("serving cached extraction", extra={"url": url})
            return cached

    content = await engine.run(url)
    await cache.set(content, ttl=settings.result_ttl_seconds)
    return content


async def stream_scrape(
    engine: ExtractionEngine,
    cache: ScrapeCache,
    settings: Settings,
    url: str,
    refresh: bool = False,
) -> AsyncGenerator[dict[str, str], None]:
    """Yield SSE-formatted pipeline events, then the result or the error.

    If the client disconnects, extraction continues in the background so
    the result still gets cached and any browser session is released by
    the engine's own cleanup.
    """
    logger.info("streaming extraction started", extra={"url": url, "refresh": refresh})

    if not refresh:
        try:
            cached = await cache.get(validate_url(url))
        except ExtractionError:
            cached = None
        if cached is not None:
            yield {"event": "result", "data": cached.model_dump_json(by_alias=True)}
            yield {"event": "done", "data": "{}"}
            return

    queue: asyncio.Queue[tuple[str, dict[str, Any]] | None] = asyncio.Queue()

    async def on_event(event: str, data: dict[str, Any]) -> None:
        await queue.put((event, data))

    async def run_and_signal_done() -> None:
        try:
            content = await engine.run(url, on_event=on_event)
            await cache.set(content, ttl=settings.result_ttl_seconds)
            await queue.put(("result", content.model_dump(by_alias=True)))
        except ExtractionError as exc:
            await queue.put(("error", {"kind": exc.kind, "message": exc.message}))
        except Exception:
            logger.exception("streaming extraction crashed", extra={"url": url})
            await queue.put(("error", {"kind": "internal_error", "message": "Extraction failed"}))
        finally:
            await queue.put(("done", {}))
            await queue.put(None)  # sentinel

    task = asyncio.create_task(run_and_signal_done())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    while True:
        item = await queue.get()
        if item is None:
            break
        event, data = item
        yield {"event": event, "data": json.dumps(data)}
