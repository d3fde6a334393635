"""Auth routes — shared password exchanged for a signed session cookie."""

import logging

from fastapi import APIRouter, HTTPException, Request, Response, status

from mdshelf.api.deps import check_password, issue_session_token, verify_session_token
from mdshelf.config import settings
from mdshelf.schemas.auth import AuthStatus, LoginRequest, SuccessResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=SuccessResponse)
async def login(body: LoginRequest, response: Response):
    if not check_password(body.password):
        logger.warning("Rejected login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password",
        )

    response.set_cookie(
        settings.cookie_name,
        issue_session_token(),
        max_age=settings.cookie_max_age_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return SuccessResponse()


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response):
    response.delete_cookie(settings.cookie_name, path="/")
    return SuccessResponse()


@router.get("/check", response_model=AuthStatus)
async def check(request: Request):
    """Whether the caller holds a valid session cookie."""
    return AuthStatus(authenticated=verify_session_token(request.cookies.get(settings.cookie_name)))
