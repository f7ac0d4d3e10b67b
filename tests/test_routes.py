"""HTTP API tests: status mapping, response shape, caching."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.routes import router
from src.config import get_settings
from src.extraction.engine import ExtractionEngine
from src.extraction.errors import FetchError, RenderBackendUnavailableError, RenderTimeoutError
from src.extraction.models import FetchResult
from tests.fakes import make_settings
from tests.pages import EMPTY_PAGE, WORDPRESS_ARTICLE, WORDPRESS_URL

API_KEY = "test-secret-key"
HEADERS = {"X-API-Key": API_KEY}


class StubFetcher:
    def __init__(self, result: FetchResult | None = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls = 0

    async def fetch(self, url: str) -> FetchResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def _make_app(fetcher: StubFetcher, cached=None) -> tuple[FastAPI, MagicMock]:
    settings = make_settings()
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_settings] = lambda: settings

    cache = MagicMock()
    cache.get = AsyncMock(return_value=cached)
    cache.set = AsyncMock(return_value=True)

    app.state.settings = settings
    app.state.cache = cache
    app.state.engine = ExtractionEngine(settings, fetcher=fetcher)
    return app, cache


def _client(html: str = WORDPRESS_ARTICLE, url: str = WORDPRESS_URL, **kwargs) -> tuple[TestClient, MagicMock]:
    app, cache = _make_app(StubFetcher(FetchResult(url=url, html=html)), **kwargs)
    return TestClient(app), cache


def test_post_scrape_success():
    client, cache = _client()

    resp = client.post("/scrape", json={"url": WORDPRESS_URL}, headers=HEADERS)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    data = body["data"]
    assert data["platform"] == "WordPress"
    assert data["title"] == "Council approves budget"
    assert data["wordCount"] > 0
    assert data["estimatedReadTime"] == "1 min read"
    assert data["publishDate"] == "2024-05-07T21:00:00+00:00"
    assert "featuredImage" in data
    assert "word_count" not in data
    cache.set.assert_awaited_once()


def test_get_scrape_success():
    client, _ = _client()
    resp = client.get("/scrape", params={"url": WORDPRESS_URL}, headers=HEADERS)
    assert resp.status_code == 200
    assert len(resp.json()["data"]["paragraphs"]) == 2


def test_requires_api_key():
    client, _ = _client()
    resp = client.post("/scrape", json={"url": WORDPRESS_URL})
    assert resp.status_code == 401


def test_invalid_url_is_400():
    client, _ = _client()
    resp = client.post("/scrape", json={"url": "not a url"}, headers=HEADERS)
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "invalid_input"


def test_no_content_is_422():
    client, cache = _client(html=EMPTY_PAGE)
    resp = client.post("/scrape", json={"url": WORDPRESS_URL}, headers=HEADERS)
    assert resp.status_code == 422
    detail = resp.json()["detail"]
    assert detail["error"] == "no_content"
    assert "Could not extract content" in detail["message"]
    cache.set.assert_not_awaited()


@pytest.mark.parametrize(
    ("error", "status_code", "kind"),
    [
        (FetchError("HTTP 404", status_code=404), 502, "fetch_failure"),
        (RenderBackendUnavailableError("no credentials"), 503, "render_unavailable"),
        (RenderTimeoutError("navigation timed out"), 504, "render_timeout"),
    ],
)
def test_fetch_side_errors_mapped(error, status_code, kind):
    app, _ = _make_app(StubFetcher(error=error))
    resp = TestClient(app).post("/scrape", json={"url": WORDPRESS_URL}, headers=HEADERS)
    assert resp.status_code == status_code
    assert resp.json()["detail"]["error"] == kind


def test_cached_result_skips_extraction():
    fetcher = StubFetcher(FetchResult(url=WORDPRESS_URL, html=WORDPRESS_ARTICLE))
    app, cache = _make_app(fetcher)
    client = TestClient(app)
    first = client.post("/scrape", json={"url": WORDPRESS_URL}, headers=HEADERS).json()["data"]

    stored = cache.set.await_args.args[0]
    cache.get.return_value = stored
    second = client.post("/scrape", json={"url": WORDPRESS_URL}, headers=HEADERS).json()["data"]

    assert first == second
    assert fetcher.calls == 1


def test_refresh_bypasses_cache():
    fetcher = StubFetcher(FetchResult(url=WORDPRESS_URL, html=WORDPRESS_ARTICLE))
    app, cache = _make_app(fetcher)
    client = TestClient(app)
    client.post("/scrape", json={"url": WORDPRESS_URL}, headers=HEADERS)
    cache.get.return_value = cache.set.await_args.args[0]

    client.post("/scrape", json={"url": WORDPRESS_URL, "refresh": True}, headers=HEADERS)

    assert fetcher.calls == 2
