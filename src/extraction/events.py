"""Pipeline state and event helpers for the extraction engine."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

# Type alias for the SSE event callback used across the pipeline.
EventCallback = Callable[[str, dict[str, Any]], Coroutine[Any, Any, None]]


class ExtractionState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    DETECTING = "detecting"
    EXTRACTING = "extracting"
    NORMALIZING = "normalizing"
    DONE = "done"
    FAILED = "failed"


async def emit_event(
    on_event: EventCallback | None,
    event: str,
    data: dict[str, Any] | None = None,
) -> None:
    """Emit a pipeline event if a callback is registered."""
    if on_event:
        logger.debug("sse event emitted", extra={"event": event})
        await on_event(event, data or {})


async def emit_state(
    on_event: EventCallback | None,
    state: ExtractionState,
    **data: Any,
) -> None:
    await emit_event(on_event, "state", {"state": state.value, **data})
