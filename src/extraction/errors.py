"""Error taxonomy for the extraction pipeline.

Every failure that leaves the pipeline is one of these. Lower-level
exceptions (httpx, Playwright, timeouts) are converted at the Fetcher and
render-backend boundary with ``raise ... from exc`` so the cause survives
for diagnostics.
"""

from __future__ import annotations

NO_CONTENT_MESSAGE = (
    "Could not extract content from this URL. "
    "The page may be dynamically loaded or require authentication."
)


class ExtractionError(Exception):
    """Base class. ``kind`` is a stable machine-readable category."""

    kind = "extraction_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidURLError(ExtractionError):
    kind = "invalid_input"


class FetchError(ExtractionError):
    kind = "fetch_failure"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RenderBackendUnavailableError(ExtractionError):
    """Credentials missing or the backend refused us outright. Not retried."""

    kind = "render_unavailable"


class RenderRateLimitedError(ExtractionError):
    kind = "render_rate_limited"


class RenderTimeoutError(ExtractionError):
    """Connecting to the browser or navigating the page took too long."""

    kind = "render_timeout"


class NoContentError(ExtractionError):
    kind = "no_content"

    def __init__(self, message: str = NO_CONTENT_MESSAGE) -> None:
        super().__init__(message)
