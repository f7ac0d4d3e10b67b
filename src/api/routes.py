"""POST /scrape, GET /scrape, POST /scrape/stream endpoint handlers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sse_starlette.sse import EventSourceResponse

from src.api.schemas import ErrorDetail, ScrapeRequest, ScrapeResponse
from src.api.service import scrape_url, stream_scrape
from src.auth.dependencies import require_api_key
from src.cache.redis import ScrapeCache
from src.config import Settings
from src.extraction.engine import ExtractionEngine
from src.extraction.errors import (
    ExtractionError,
    FetchError,
    InvalidURLError,
    NoContentError,
    RenderBackendUnavailableError,
    RenderTimeoutError,
)

router = APIRouter(dependencies=[Depends(require_api_key)])

_STATUS_BY_ERROR: dict[type[ExtractionError], int] = {
    InvalidURLError: 400,
    NoContentError: 422,
    FetchError: 502,
    RenderBackendUnavailableError: 503,
    RenderTimeoutError: 504,
}


def _get_engine(request: Request) -> ExtractionEngine:
    return request.app.state.engine


def _get_cache(request: Request) -> ScrapeCache:
    return request.app.state.cache


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _to_http_error(exc: ExtractionError) -> HTTPException:
    status_code = _STATUS_BY_ERROR.get(type(exc), 500)
    detail = ErrorDetail(error=exc.kind, message=exc.message)
    return HTTPException(status_code=status_code, detail=detail.model_dump())


async def _scrape(
    url: str,
    refresh: bool,
    engine: ExtractionEngine,
    cache: ScrapeCache,
    settings: Settings,
) -> ScrapeResponse:
    try:
        content = await scrape_url(engine, cache, settings, url, refresh=refresh)
    except ExtractionError as exc:
        raise _to_http_error(exc) from exc
    return ScrapeResponse(data=content)


@router.post("/scrape", response_model=ScrapeResponse)
async def create_scrape(
    body: ScrapeRequest,
    engine: ExtractionEngine = Depends(_get_engine),
    cache: ScrapeCache = Depends(_get_cache),
    settings: Settings = Depends(_get_settings),
):
    return await _scrape(body.url, body.refresh, engine, cache, settings)


@router.get("/scrape", response_model=ScrapeResponse)
async def get_scrape(
    url: str = Query(..., description="Article URL, e.g. https://example.com/article"),
    refresh: bool = False,
    engine: ExtractionEngine = Depends(_get_engine),
    cache: ScrapeCache = Depends(_get_cache),
    settings: Settings = Depends(_get_settings),
):
    return await _scrape(url, refresh, engine, cache, settings)


@router.post("/scrape/stream")
async def stream_scrape_events(
    body: ScrapeRequest,
    engine: ExtractionEngine = Depends(_get_engine),
    cache: ScrapeCache = Depends(_get_cache),
    settings: Settings = Depends(_get_settings),
):
    return EventSourceResponse(stream_scrape(engine, cache, settings, body.url, refresh=body.refresh))
