"""JSON structured logging configuration."""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

# Third-party loggers that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def setup_logging(log_level: str = "INFO") -> None:
    """Send root, uvicorn and extraction logs to stdout as one JSON object per line."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
        },
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.addHandler(handler)
        uv_logger.propagate = False

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
