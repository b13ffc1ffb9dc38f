import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from . import config

logger = logging.getLogger(__name__)

# auto_error=False so a missing header yields 401 instead of FastAPI's 403
security = HTTPBearer(auto_error=False)


def _check_admin_token(token: Optional[str]) -> str:
    if not config.ADMIN_API_TOKEN:
        return "admin"

    if not token:
        logger.warning("❌ Staff endpoint called without a bearer token")
        raise HTTPException(status_code=401, detail="Not authenticated")

    if not secrets.compare_digest(token, config.ADMIN_API_TOKEN):
        logger.warning("❌ Staff endpoint called with an invalid bearer token")
        raise HTTPException(status_code=401, detail="Invalid token")

    return "admin"


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Guard for staff (dashboard) endpoints.

    Compares the bearer token with ADMIN_API_TOKEN in constant time. When no token
    is configured the check is skipped (development only, warned at startup).
    """
    return _check_admin_token(credentials.credentials if credentials else None)


async def require_admin_stream(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token: Optional[str] = Query(None),
) -> str:
    """Staff guard for the event stream; browsers' EventSource cannot set headers, so ?token= is accepted too"""
    if credentials and credentials.credentials:
        return _check_admin_token(credentials.credentials)
    return _check_admin_token(token)
