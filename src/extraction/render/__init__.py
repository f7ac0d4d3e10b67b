"""Headless-browser rendering backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .backend import RenderBackend, RenderSession, render_session
from .browserbase import BrowserbaseBackend, PlaywrightSession

if TYPE_CHECKING:
    from src.config import Settings

__all__ = [
    "BrowserbaseBackend",
    "PlaywrightSession",
    "RenderBackend",
    "RenderSession",
    "build_default_backend",
    "render_session",
]


def build_default_backend(settings: Settings) -> RenderBackend:
    """Build the configured render backend.

    Missing credentials are not an error here; the backend raises
    ``RenderBackendUnavailableError`` only when a page actually needs it.
    """
    return BrowserbaseBackend(settings)
