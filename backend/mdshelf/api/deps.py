"""FastAPI dependency injection — shared-password session cookie."""

from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, Request, status
from jose import JWTError, jwt

from mdshelf.config import settings

logger = logging.getLogger(__name__)

SESSION_SUBJECT = "authenticated"


def check_password(candidate: str) -> bool:
    return hmac.compare_digest(candidate.encode("utf-8"), settings.access_password.encode("utf-8"))


def issue_session_token(now: datetime | None = None) -> str:
    """Sign a session token for the cookie."""
    now = now or datetime.now(timezone.utc)
    return jwt.encode(
        {
            "sub": SESSION_SUBJECT,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(days=settings.cookie_max_age_days)).timestamp()),
        },
        settings.cookie_secret,
        algorithm=settings.token_algorithm,
    )


def verify_session_token(token: Optional[str]) -> bool:
    if not token:
        return False
    try:
        payload = jwt.decode(
            token,
            settings.cookie_secret,
            algorithms=[settings.token_algorithm],
        )
    except JWTError as e:
        logger.debug("Rejected session cookie: %s", e)
        return False
    return payload.get("sub") == SESSION_SUBJECT


async def require_auth(request: Request) -> None:
    """Reject requests without a valid session cookie."""
    if not verify_session_token(request.cookies.get(settings.cookie_name)):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
