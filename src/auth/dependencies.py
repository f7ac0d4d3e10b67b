"""API key validation (FastAPI dependency)."""

import hmac

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from src.config import Settings, get_settings

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def _matches_any(candidate: str, accepted: list[str]) -> bool:
    # Compare against every key so timing does not reveal which one matched.
    matched = False
    for key in accepted:
        if hmac.compare_digest(candidate.encode(), key.encode()):
            matched = True
    return matched


async def require_api_key(
    api_key: str | None = Security(_api_key_header),
    settings: Settings = Depends(get_settings),
) -> str:
    """Validate the X-API-Key header against any of the configured keys."""
    if not api_key or not _matches_any(api_key, settings.api_keys):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
    return api_key
