"""
Auth API routes: login.

Registration lives with the other user routes (``POST /users``).
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from auth.dependencies import local_strategy, token_issuer
from auth.errors import AuthError
from auth.strategies import LocalStrategy
from auth.tokens import TokenIssuer
from utils.schemas import UserIdentity

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

LOGIN_FAILED_MESSAGE = "Something is not right"


# ── Request / response schemas ─────────────────────────────────────────


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    user: UserIdentity
    token: str


class LoginFailure(BaseModel):
    message: str
    user: Optional[UserIdentity] = None


def _login_failed() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=LoginFailure(message=LOGIN_FAILED_MESSAGE).model_dump(),
    )


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": LoginFailure}},
)
async def login(
    request: Request,
    strategy: LocalStrategy = Depends(local_strategy),
    issuer: TokenIssuer = Depends(token_issuer),
):
    """Login with username + password; returns the user and a bearer token."""
    try:
        req = LoginRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return _login_failed()

    try:
        user = await strategy.authenticate(req.username, req.password)
    except AuthError:
        # Unknown user and wrong password get the same answer.
        return _login_failed()

    token = issuer.issue(user)
    logger.info("Login: %s", user.username)
    return LoginResponse(user=user, token=token)
