"""Auth schemas — one shared password, cookie session."""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    password: str = ""


class AuthStatus(BaseModel):
    authenticated: bool


class SuccessResponse(BaseModel):
    success: bool = True
