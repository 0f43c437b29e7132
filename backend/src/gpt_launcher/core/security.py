from __future__ import annotations

import logging
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from .config import settings


log = logging.getLogger("launcher.core.security")

admin_token_header = APIKeyHeader(name="X-Admin-Token", auto_error=False)


def token_is_admin(token: str | None) -> bool:
    if not token:
        return False
    return secrets.compare_digest(token.encode("utf-8"), settings.admin_token.encode("utf-8"))


def require_admin(token: str | None = Depends(admin_token_header)) -> str:
    """FastAPI dependency guarding the administrator surface."""
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin token required.")
    if not token_is_admin(token):
        log.warning("Rejected admin request with an invalid token")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied.")
    return token
