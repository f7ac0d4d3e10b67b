"""Headless rendering backend protocol and the scoped session helper."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Protocol

from ..errors import FetchError, RenderRateLimitedError

logger = logging.getLogger(__name__)


class RenderSession(Protocol):
    """One remote browser page."""

    session_id: str

    async def navigate(self, url: str, timeout_ms: int) -> None: ...

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool: ...

    async def wait(self, ms: int) -> None: ...

    async def content(self) -> str: ...

    async def evaluate(self, script: str, arg: Any = None) -> Any: ...


class RenderBackend(Protocol):
    """Creates and releases remote browser sessions.

    ``close_session`` must be called exactly once for every session
    ``create_session`` returned; use ``render_session`` rather than calling
    the pair directly.
    """

    async def create_session(self) -> RenderSession: ...

    async def close_session(self, session: RenderSession) -> None: ...


@asynccontextmanager
async def render_session(
    backend: RenderBackend,
    *,
    rate_limit_retries: int = 2,
    retry_delay: float = 5.0,
) -> AsyncIterator[RenderSession]:
    """Acquire a session, retrying rate limits, and always release it.

    Rate limiting is retried ``rate_limit_retries`` times with a fixed
    delay, then surfaced as ``FetchError``. Other errors from
    ``create_session`` propagate unchanged.
    """
    session: RenderSession | None = None
    for attempt in range(1 + rate_limit_retries):
        try:
            session = await backend.create_session()
            break
        except RenderRateLimitedError as exc:
            if attempt < rate_limit_retries:
                logger.warning(
                    "render backend rate limited (attempt %d/%d), retrying in %.1fs",
                    attempt + 1, rate_limit_retries + 1, retry_delay,
                )
                await asyncio.sleep(retry_delay)
            else:
                raise FetchError(
                    f"Render backend rate limited after {rate_limit_retries + 1} attempts",
                    status_code=429,
                ) from exc

    assert session is not None
    logger.debug("render session opened", extra={"session_id": session.session_id})
    try:
        yield session
    finally:
        # Shielded so a cancelled request still releases the remote session.
        await asyncio.shield(backend.close_session(session))
        logger.debug("render session closed", extra={"session_id": session.session_id})
