"""
Authentication strategies.

Two strategies exist and they are chosen per route when the router is
built: ``LocalStrategy`` (username + password, used only by ``/login``) and
``JWTStrategy`` (bearer token, used by every protected route).  Both return
a ``UserIdentity`` or raise an ``AuthError``; store failures propagate as
``StoreUnavailable``.
"""

from __future__ import annotations

import logging
from typing import Optional

from auth.errors import InvalidCredentials, UserNotFound
from auth.password import PasswordHasher
from auth.tokens import TokenVerifier
from database.stores import UserStore
from utils.schemas import UserIdentity

logger = logging.getLogger(__name__)


class LocalStrategy:
    name = "local"

    def __init__(self, users: UserStore, hasher: Optional[PasswordHasher] = None):
        self._users = users
        self._hasher = hasher or PasswordHasher()

    async def authenticate(self, username: str, password: str) -> UserIdentity:
        record = await self._users.get(username)
        if record is None:
            logger.info("Login rejected: unknown user %s", username)
            raise UserNotFound(username)
        if not self._hasher.verify(password, record.password_hash):
            logger.info("Login rejected: bad password for %s", username)
            raise InvalidCredentials(username)
        return record.to_identity()


class JWTStrategy:
    name = "jwt"

    def __init__(self, verifier: TokenVerifier, users: UserStore):
        self._verifier = verifier
        self._users = users

    async def authenticate(self, token: str) -> UserIdentity:
        claims = self._verifier.verify(token)
        # Re-resolve so a deleted account's live token stops working.
        record = await self._users.get(claims.sub)
        if record is None:
            raise UserNotFound(claims.sub)
        return record.to_identity()
