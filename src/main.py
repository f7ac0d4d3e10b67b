"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.routes import router
from src.cache.redis import ScrapeCache, create_redis_client
from src.config import get_settings
from src.extraction.engine import ExtractionEngine
from src.extraction.fetch import Fetcher
from src.extraction.render import build_default_backend
from src.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level)
    logger.info("starting extraction service")

    redis_client = await create_redis_client(settings.redis_url)
    cache = ScrapeCache(redis_client, default_ttl=settings.result_ttl_seconds)

    fetcher = Fetcher(settings, backend=build_default_backend(settings))
    engine = ExtractionEngine(settings, fetcher=fetcher)

    # Attach to app state for dependency injection
    app.state.settings = settings
    app.state.cache = cache
    app.state.engine = engine

    if not settings.render_backend_configured:
        logger.warning("render backend credentials missing; JavaScript-only pages will fail")

    logger.info(
        "extraction service ready",
        extra={
            "render_backend": settings.render_backend_configured,
            "min_paragraph_chars": settings.min_paragraph_chars,
            "result_ttl_seconds": settings.result_ttl_seconds,
        },
    )

    yield

    logger.info("shutting down extraction service")
    await redis_client.aclose()


app = FastAPI(title="Article Extraction Service", lifespan=lifespan)
app.include_router(router)


@app.get("/health")
async def health():
    return {"status": "ok"}
