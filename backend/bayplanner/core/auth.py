"""API key authentication for the planning endpoints.

Clients send the key in the header named by ``settings.API_KEY_HEADER``.
An empty ``settings.API_KEY`` disables the check, which is how local
development and the test suite run.
"""

import secrets
from typing import Annotated

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from bayplanner.core.config import settings

_api_key_header = APIKeyHeader(name=settings.API_KEY_HEADER, auto_error=False)


async def verify_api_key(
    api_key: Annotated[str | None, Security(_api_key_header)] = None,
) -> str:
    """Return the caller's key, or raise 401 (missing) / 403 (wrong)."""
    expected = settings.API_KEY
    if not expected:
        return "dev-no-auth"

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
        )
    if not secrets.compare_digest(api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )
    return api_key
