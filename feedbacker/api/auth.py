"""
API authentication using X-API-KEY header.
"""

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from feedbacker.config.settings import get_settings

# API key header scheme
api_key_header = APIKeyHeader(name="X-API-KEY", auto_error=False)


def _check(api_key: str | None, valid_keys: list[str]) -> str:
    if api_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Provide X-API-KEY header.",
        )
    if api_key not in valid_keys:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
    return api_key


async def verify_api_key(api_key: str | None = Security(api_key_header)) -> str:
    """
    Verify API key from X-API-KEY header.

    Returns:
        The validated API key, or "dev-mode" when no keys are configured.

    Raises:
        HTTPException: If API key is missing or invalid
    """
    settings = get_settings()
    valid_keys = [k.strip() for k in (settings.api_keys or "").split(",") if k.strip()]

    # If no API keys configured, allow all requests (dev mode)
    if not valid_keys:
        return "dev-mode"
    return _check(api_key, valid_keys)


async def verify_admin_key(api_key: str | None = Security(api_key_header)) -> str:
    """Verify an admin key; falls back to the regular keys when unset."""
    valid_keys = get_settings().admin_keys
    if not valid_keys:
        return "dev-mode"
    return _check(api_key, valid_keys)
