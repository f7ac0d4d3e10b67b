"""Browserbase backend tests with httpx and Playwright patched out."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.extraction.errors import (
    FetchError,
    RenderBackendUnavailableError,
    RenderRateLimitedError,
    RenderTimeoutError,
)
from src.extraction.render import BrowserbaseBackend, PlaywrightSession
from tests.fakes import make_settings

pytestmark = pytest.mark.asyncio

MODULE = "src.extraction.render.browserbase"


def _response(status_code: int, payload: dict | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.is_error = status_code >= 400
    resp.json.return_value = payload or {}
    return resp


def _http(mock_client: MagicMock, *responses: MagicMock) -> AsyncMock:
    ctx = AsyncMock()
    ctx.post.side_effect = list(responses)
    mock_client.return_value.__aenter__ = AsyncMock(return_value=ctx)
    mock_client.return_value.__aexit__ = AsyncMock(return_value=False)
    return ctx


def _playwright(mock_ap: MagicMock, connect: AsyncMock) -> MagicMock:
    pw = MagicMock()
    pw.stop = AsyncMock()
    pw.chromium.connect_over_cdp = connect
    mock_ap.return_value.start = AsyncMock(return_value=pw)
    return pw


def _browser() -> tuple[MagicMock, MagicMock]:
    page = MagicMock()
    context = MagicMock()
    context.pages = [page]
    browser = MagicMock()
    browser.contexts = [context]
    browser.close = AsyncMock()
    return browser, page


async def test_missing_credentials_unavailable():
    backend = BrowserbaseBackend(make_settings(browserbase_api_key="", browserbase_project_id=""))
    with patch(f"{MODULE}.httpx.AsyncClient") as mock_client:
        with pytest.raises(RenderBackendUnavailableError):
            await backend.create_session()
    mock_client.assert_not_called()


async def test_rate_limited_session_create():
    backend = BrowserbaseBackend(make_settings())
    with patch(f"{MODULE}.httpx.AsyncClient") as mock_client:
        _http(mock_client, _response(429))
        with pytest.raises(RenderRateLimitedError):
            await backend.create_session()


async def test_rejected_credentials_unavailable():
    backend = BrowserbaseBackend(make_settings())
    with patch(f"{MODULE}.httpx.AsyncClient") as mock_client:
        _http(mock_client, _response(401))
        with pytest.raises(RenderBackendUnavailableError):
            await backend.create_session()


async def test_server_error_is_fetch_error():
    backend = BrowserbaseBackend(make_settings())
    with patch(f"{MODULE}.httpx.AsyncClient") as mock_client:
        _http(mock_client, _response(500))
        with pytest.raises(FetchError) as exc_info:
            await backend.create_session()
    assert exc_info.value.status_code == 500


async def test_session_created_and_released():
    backend = BrowserbaseBackend(make_settings())
    browser, page = _browser()
    with (
        patch(f"{MODULE}.httpx.AsyncClient") as mock_client,
        patch(f"{MODULE}.async_playwright") as mock_ap,
    ):
        ctx = _http(
            mock_client,
            _response(201, {"id": "sess-1", "connectUrl": "wss://connect.example/sess-1"}),
            _response(200),
        )
        pw = _playwright(mock_ap, AsyncMock(return_value=browser))

        session = await backend.create_session()
        assert isinstance(session, PlaywrightSession)
        assert session.session_id == "sess-1"
        pw.chromium.connect_over_cdp.assert_awaited_once_with("wss://connect.example/sess-1")

        await backend.close_session(session)

    browser.close.assert_awaited_once()
    pw.stop.assert_awaited_once()
    release_call = ctx.post.await_args_list[1]
    assert release_call.args[0].endswith("/v1/sessions/sess-1")
    assert release_call.kwargs["json"]["status"] == "REQUEST_RELEASE"


async def test_connect_timeout_releases_session():
    backend = BrowserbaseBackend(make_settings())
    with (
        patch(f"{MODULE}.httpx.AsyncClient") as mock_client,
        patch(f"{MODULE}.async_playwright") as mock_ap,
    ):
        ctx = _http(mock_client, _response(201, {"id": "sess-2"}), _response(200))
        pw = _playwright(mock_ap, AsyncMock(side_effect=asyncio.TimeoutError()))

        with pytest.raises(RenderTimeoutError):
            await backend.create_session()

    pw.stop.assert_awaited_once()
    assert ctx.post.await_count == 2
    connect_url = pw.chromium.connect_over_cdp.await_args.args[0]
    assert "sessionId=sess-2" in connect_url


async def test_connect_failure_is_fetch_error():
    backend = BrowserbaseBackend(make_settings())
    with (
        patch(f"{MODULE}.httpx.AsyncClient") as mock_client,
        patch(f"{MODULE}.async_playwright") as mock_ap,
    ):
        _http(mock_client, _response(201, {"id": "sess-3"}), _response(200))
        pw = _playwright(mock_ap, AsyncMock(side_effect=PlaywrightError("websocket closed")))

        with pytest.raises(FetchError):
            await backend.create_session()

    pw.stop.assert_awaited_once()


async def test_driver_start_failure_releases_session():
    backend = BrowserbaseBackend(make_settings())
    with (
        patch(f"{MODULE}.httpx.AsyncClient") as mock_client,
        patch(f"{MODULE}.async_playwright") as mock_ap,
    ):
        ctx = _http(mock_client, _response(201, {"id": "sess-6"}), _response(200))
        mock_ap.return_value.start = AsyncMock(side_effect=RuntimeError("driver missing"))

        with pytest.raises(RuntimeError):
            await backend.create_session()

    assert ctx.post.await_count == 2
    assert ctx.post.await_args_list[1].args[0].endswith("/v1/sessions/sess-6")


async def test_cancel_during_driver_start_releases_session():
    backend = BrowserbaseBackend(make_settings())
    with (
        patch(f"{MODULE}.httpx.AsyncClient") as mock_client,
        patch(f"{MODULE}.async_playwright") as mock_ap,
    ):
        ctx = _http(mock_client, _response(201, {"id": "sess-7"}), _response(200))
        mock_ap.return_value.start = AsyncMock(side_effect=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await backend.create_session()

    assert ctx.post.await_args_list[1].kwargs["json"]["status"] == "REQUEST_RELEASE"


async def test_navigation_timeout_mapped():
    page = MagicMock()
    page.goto = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 30000ms exceeded"))
    session = PlaywrightSession("sess-4", MagicMock(), MagicMock(), page)

    with pytest.raises(RenderTimeoutError):
        await session.navigate("https://example.com", timeout_ms=30000)


async def test_wait_for_selector_timeout_returns_false():
    page = MagicMock()
    page.wait_for_selector = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 15000ms exceeded"))
    session = PlaywrightSession("sess-5", MagicMock(), MagicMock(), page)

    assert await session.wait_for_selector("[data-block-id]", timeout_ms=15000) is False
