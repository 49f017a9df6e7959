"""
JWT creation and verification.

Tokens are standard three-segment JWTs signed with HMAC-SHA256.  The secret
is handed to ``TokenIssuer`` / ``TokenVerifier`` when the app is built from
``config.settings`` (env var: ``JWT_SECRET``); nothing here reads ambient
configuration.
"""

from __future__ import annotations

import binascii
import json
import re
import time
from typing import Any, Callable, Dict, Optional

import jwt
from jwt.utils import base64url_decode, base64url_encode
from pydantic import BaseModel

from auth.errors import BadSignature, ConfigurationError, MalformedToken, TokenExpired
from utils.schemas import UserIdentity

DEFAULT_ALGORITHM = "HS256"
DEFAULT_LIFETIME_SECONDS = 7 * 24 * 60 * 60

_RESERVED_CLAIMS = frozenset({"sub", "iat", "exp"})
_BASE64URL = re.compile(r"[A-Za-z0-9_-]+")

Clock = Callable[[], float]


class TokenClaims(BaseModel):
    sub: str
    iat: int
    exp: int


def _require_secret(secret: str) -> str:
    if not secret:
        raise ConfigurationError("JWT secret key cannot be empty")
    return secret


class TokenIssuer:
    """Mint signed bearer tokens for authenticated users."""

    def __init__(
        self,
        secret: str,
        algorithm: str = DEFAULT_ALGORITHM,
        lifetime_seconds: int = DEFAULT_LIFETIME_SECONDS,
        clock: Clock = time.time,
    ):
        self._secret = _require_secret(secret)
        self._algorithm = algorithm
        self._lifetime = lifetime_seconds
        self._clock = clock

    def issue(
        self,
        identity: UserIdentity,
        extra_claims: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Return a token whose subject is ``identity.username``.

        ``extra_claims`` are copied into the payload but can never replace
        ``sub``, ``iat`` or ``exp``.
        """
        now = int(self._clock())
        payload: Dict[str, Any] = {
            k: v for k, v in (extra_claims or {}).items() if k not in _RESERVED_CLAIMS
        }
        payload.update(sub=identity.username, iat=now, exp=now + self._lifetime)
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)


class TokenVerifier:
    """Check signature and expiry of a presented token.

    Expiry is evaluated against the injected clock: a token is live while
    ``now < exp``.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = DEFAULT_ALGORITHM,
        clock: Clock = time.time,
    ):
        self._secret = _require_secret(secret)
        self._algorithm = algorithm
        self._clock = clock

    def verify(self, token: str) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        Raises ``MalformedToken``, ``BadSignature`` or ``TokenExpired``.
        """
        signature_segment = self._check_structure(token)
        if not _BASE64URL.fullmatch(signature_segment):
            raise BadSignature("Signature is not base64url")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
        except jwt.MissingRequiredClaimError as exc:
            raise MalformedToken(str(exc)) from exc
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as exc:
            raise BadSignature(str(exc)) from exc
        except jwt.DecodeError as exc:
            # header and payload already parsed, so only the signature is left
            raise BadSignature(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedToken(str(exc)) from exc

        # base64 ignores trailing pad bits; reject any non-canonical spelling
        if base64url_encode(base64url_decode(signature_segment)).decode() != signature_segment:
            raise BadSignature("Signature is not canonically encoded")

        try:
            claims = TokenClaims.model_validate(payload, strict=True)
        except ValueError as exc:
            raise MalformedToken(f"Malformed token payload: {exc}") from exc

        if self._clock() >= claims.exp:
            raise TokenExpired("Token has expired")
        return claims

    @staticmethod
    def _check_structure(token: str) -> str:
        # Extra dots belong to the signature segment and fail as a bad signature.
        parts = token.split(".", 2)
        if len(parts) != 3 or not all(parts):
            raise MalformedToken("Token must have three non-empty segments")
        for name, segment in zip(("header", "payload"), parts[:2]):
            try:
                decoded = json.loads(base64url_decode(segment))
            except (binascii.Error, ValueError) as exc:
                raise MalformedToken(f"Invalid {name} segment") from exc
            if not isinstance(decoded, dict):
                raise MalformedToken(f"Invalid {name} segment")
        return parts[2]
