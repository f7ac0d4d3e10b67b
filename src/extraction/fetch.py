"""Static HTTP fetch with a headless-browser fallback."""

from __future__ import annotations

import logging

import httpx

from src.config import Settings

from .document import CHROME_SELECTORS
from .errors import FetchError, RenderBackendUnavailableError
from .models import FetchResult
from .render import RenderBackend, RenderSession, render_session
from .render.scripts import BLOCK_EDITOR_CHECK, BLOCK_EDITOR_SELECTOR, HERO_IMAGE, LEAF_TEXT

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

# Client errors that usually mean "bot wall" rather than "no such page".
_RETRY_IN_BROWSER_STATUSES = frozenset({401, 403, 429})

_RENDERED_TEXT_MIN_BLOCK_CHARS = 10
_HERO_IMAGE_MIN_SIZE = 200
_HERO_IMAGE_SKIP_WORDS = ["icon", "avatar", "logo"]


def insufficiency_reason(html: str, settings: Settings) -> str | None:
    """Why static *html* is not worth extracting from, or ``None`` if it is."""
    if len(html) < settings.min_html_chars:
        return "too_short"
    if any(marker in html for marker in settings.js_required_markers):
        return "javascript_required"
    if len(html) < settings.js_shell_max_chars and any(
        marker in html for marker in settings.app_root_markers
    ):
        return "app_shell"
    return None


class Fetcher:
    """Retrieves page HTML, rendering it in a remote browser when needed."""

    def __init__(
        self,
        settings: Settings,
        backend: RenderBackend | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._backend = backend
        self._transport = transport

    async def fetch(self, url: str) -> FetchResult:
        try:
            resp = await self._get(url)
        except httpx.HTTPError as exc:
            logger.info("static fetch failed, trying browser", extra={"url": url, "error": str(exc)})
            return await self._render_or_raise(url, FetchError(f"Request to {url} failed: {exc}"))

        status = resp.status_code
        if resp.is_success:
            html = resp.text
            reason = insufficiency_reason(html, self._settings)
            if reason is None:
                logger.debug("static fetch ok", extra={"url": url, "html_length": len(html)})
                return FetchResult(url=url, html=html)
            logger.info(
                "static html insufficient, rendering in browser",
                extra={"url": url, "reason": reason, "html_length": len(html)},
            )
            return await self._render(url)

        error = FetchError(f"Fetching {url} returned HTTP {status}", status_code=status)
        if 400 <= status < 500 and status not in _RETRY_IN_BROWSER_STATUSES:
            raise error
        logger.info("static fetch not ok, trying browser", extra={"url": url, "status_code": status})
        return await self._render_or_raise(url, error)

    async def _get(self, url: str) -> httpx.Response:
        headers = {"User-Agent": self._settings.user_agent, **BROWSER_HEADERS}
        async with httpx.AsyncClient(
            follow_redirects=True,
            headers=headers,
            timeout=self._settings.fetch_timeout_seconds,
            transport=self._transport,
        ) as client:
            return await client.get(url)

    async def _render_or_raise(self, url: str, cause: FetchError) -> FetchResult:
        """Render *url*; without a usable backend, surface the static failure."""
        try:
            return await self._render(url)
        except RenderBackendUnavailableError as exc:
            logger.warning(
                "browser fallback unavailable",
                extra={"url": url, "reason": exc.message, "status_code": cause.status_code},
            )
            raise cause from exc

    async def _render(self, url: str) -> FetchResult:
        if self._backend is None:
            raise RenderBackendUnavailableError("No headless rendering backend configured")

        settings = self._settings
        async with render_session(
            self._backend,
            rate_limit_retries=settings.render_rate_limit_retries,
            retry_delay=settings.render_retry_delay_seconds,
        ) as session:
            await session.navigate(url, timeout_ms=int(settings.render_navigation_timeout_seconds * 1000))
            await self._settle(session)

            html = await session.content()
            text = await session.evaluate(
                LEAF_TEXT,
                {"chromeSelector": ", ".join(CHROME_SELECTORS), "minChars": _RENDERED_TEXT_MIN_BLOCK_CHARS},
            )
            image = await session.evaluate(
                HERO_IMAGE,
                {"minSize": _HERO_IMAGE_MIN_SIZE, "skipWords": _HERO_IMAGE_SKIP_WORDS},
            )

        logger.info(
            "browser render complete",
            extra={
                "url": url,
                "html_length": len(html),
                "rendered_text_length": len(text or ""),
                "featured_image": bool(image),
            },
        )
        return FetchResult(url=url, html=html, rendered_text=text or "", discovered_image=image or None)

    async def _settle(self, session: RenderSession) -> None:
        """Wait for client-side rendering; block editors get longer."""
        settings = self._settings
        if await session.evaluate(BLOCK_EDITOR_CHECK):
            logger.debug("block editor detected, waiting for blocks", extra={"session_id": session.session_id})
            found = await session.wait_for_selector(
                BLOCK_EDITOR_SELECTOR, settings.render_block_editor_selector_timeout_ms
            )
            await session.wait(
                settings.render_block_editor_settle_ms if found else settings.render_block_editor_fallback_ms
            )
        else:
            await session.wait(settings.render_settle_ms)
