"""Browserbase-hosted Chromium driven through Playwright over CDP."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.config import Settings

from ..errors import (
    FetchError,
    RenderBackendUnavailableError,
    RenderRateLimitedError,
    RenderTimeoutError,
)

logger = logging.getLogger(__name__)

CONNECT_URL_TEMPLATE = "wss://connect.browserbase.com?apiKey={api_key}&sessionId={session_id}"


class PlaywrightSession:
    """A connected Playwright page plus the handles needed to tear it down."""

    def __init__(self, session_id: str, playwright: Playwright, browser: Browser, page: Page) -> None:
        self.session_id = session_id
        self.playwright = playwright
        self.browser = browser
        self._page = page

    async def navigate(self, url: str, timeout_ms: int) -> None:
        try:
            await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise RenderTimeoutError(f"Navigation to {url} timed out after {timeout_ms} ms") from exc
        except PlaywrightError as exc:
            raise FetchError(f"Navigation to {url} failed: {exc}") from exc

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        try:
            await self._page.wait_for_selector(selector, timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            return False

    async def wait(self, ms: int) -> None:
        await self._page.wait_for_timeout(ms)

    async def content(self) -> str:
        try:
            return await self._page.content()
        except PlaywrightError as exc:
            raise FetchError(f"Could not read rendered page: {exc}") from exc

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            return await self._page.evaluate(script, arg)
        except PlaywrightError as exc:
            raise FetchError(f"In-page evaluation failed: {exc}") from exc


class BrowserbaseBackend:
    """Creates Browserbase sessions over its REST API and attaches Playwright."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.browserbase_api_key
        self._project_id = settings.browserbase_project_id
        self._api_url = settings.browserbase_api_url.rstrip("/")
        self._connect_timeout = settings.render_connect_timeout_seconds

    @property
    def _headers(self) -> dict[str, str]:
        return {"X-BB-API-Key": self._api_key, "Content-Type": "application/json"}

    async def create_session(self) -> PlaywrightSession:
        if not self._api_key or not self._project_id:
            raise RenderBackendUnavailableError(
                "Headless browser required but Browserbase credentials are missing"
            )

        session_id, connect_url = await self._start_remote_session()
        logger.info("browserbase session created", extra={"session_id": session_id})

        playwright: Playwright | None = None
        try:
            playwright = await async_playwright().start()
            browser = await asyncio.wait_for(
                playwright.chromium.connect_over_cdp(connect_url),
                timeout=self._connect_timeout,
            )
            context = browser.contexts[0] if browser.contexts else await browser.new_context()
            page = context.pages[0] if context.pages else await context.new_page()
        except asyncio.TimeoutError as exc:
            await self._abandon(playwright, session_id)
            raise RenderTimeoutError(
                f"Connecting to the headless browser timed out after {self._connect_timeout:.0f}s"
            ) from exc
        except PlaywrightError as exc:
            await self._abandon(playwright, session_id)
            raise FetchError(f"Could not connect to the headless browser: {exc}") from exc
        except asyncio.CancelledError:
            await asyncio.shield(self._abandon(playwright, session_id))
            raise
        except Exception:
            await self._abandon(playwright, session_id)
            raise

        return PlaywrightSession(session_id, playwright, browser, page)

    async def close_session(self, session: PlaywrightSession) -> None:
        try:
            await session.browser.close()
        except Exception:
            logger.warning("failed to close browser", extra={"session_id": session.session_id}, exc_info=True)
        await self._abandon(session.playwright, session.session_id)

    async def _start_remote_session(self) -> tuple[str, str]:
        try:
            async with httpx.AsyncClient(timeout=self._connect_timeout) as client:
                resp = await client.post(
                    f"{self._api_url}/v1/sessions",
                    headers=self._headers,
                    json={"projectId": self._project_id},
                )
        except httpx.TimeoutException as exc:
            raise RenderTimeoutError("Creating a headless browser session timed out") from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Render backend request failed: {exc}") from exc

        if resp.status_code == 429:
            raise RenderRateLimitedError("Render backend rate limited (429)")
        if resp.status_code in (401, 403):
            raise RenderBackendUnavailableError(
                f"Render backend rejected credentials ({resp.status_code})"
            )
        if resp.is_error:
            raise FetchError(
                f"Render backend returned {resp.status_code}", status_code=resp.status_code
            )

        data = resp.json()
        session_id = data["id"]
        connect_url = data.get("connectUrl") or CONNECT_URL_TEMPLATE.format(
            api_key=self._api_key, session_id=session_id
        )
        return session_id, connect_url

    async def _abandon(self, playwright: Playwright | None, session_id: str) -> None:
        """Stop the local driver (if started) and ask Browserbase to release the session."""
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception:
                logger.warning("failed to stop playwright", extra={"session_id": session_id}, exc_info=True)

        try:
            async with httpx.AsyncClient(timeout=self._connect_timeout) as client:
                resp = await client.post(
                    f"{self._api_url}/v1/sessions/{session_id}",
                    headers=self._headers,
                    json={"projectId": self._project_id, "status": "REQUEST_RELEASE"},
                )
            if resp.is_error:
                logger.debug(
                    "browserbase release not acknowledged",
                    extra={"session_id": session_id, "status_code": resp.status_code},
                )
        except httpx.HTTPError:
            logger.warning("browserbase release failed", extra={"session_id": session_id}, exc_info=True)
