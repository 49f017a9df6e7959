"""
FastAPI dependencies for authentication.

Provides the store accessors and the ``get_current_user`` route guard used
across all protected routes.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.errors import AuthError, PermissionDenied
from auth.password import PasswordHasher
from auth.strategies import JWTStrategy, LocalStrategy
from auth.tokens import TokenIssuer
from database.stores import MovieStore, UserStore
from utils.schemas import UserIdentity

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def movie_store(request: Request) -> MovieStore:
    return request.app.state.movie_store


def local_strategy(request: Request) -> LocalStrategy:
    return request.app.state.local_strategy


def token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> UserIdentity:
    """
    Verify the Bearer token and return the authenticated user.

    Any missing, malformed, forged or expired token, or a token whose
    subject no longer exists, is answered with ``401`` before the route
    handler runs.
    """
    if credentials is None:
        raise _unauthorized()

    strategy: JWTStrategy = request.app.state.jwt_strategy
    try:
        identity = await strategy.authenticate(credentials.credentials)
    except AuthError as exc:
        logger.info(
            "Rejected bearer token on %s %s: %s",
            request.method, request.url.path, type(exc).__name__,
        )
        raise _unauthorized() from exc

    request.state.user = identity
    return identity


def ensure_same_user(identity: UserIdentity, username: str) -> None:
    """Raise ``PermissionDenied`` unless ``identity`` owns ``username``."""
    if identity.username != username:
        raise PermissionDenied(f"{identity.username} may not act on {username}")
