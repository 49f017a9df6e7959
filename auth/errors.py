"""
Authentication and authorization errors.

Every failure of the login strategy, the token verifier or the route guard
is one of these.  The HTTP layer collapses them into the few responses a
client is allowed to see (``400`` on login, ``401`` on protected routes,
``403`` for acting on somebody else's account).
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for authentication failures."""


class UserNotFound(AuthError):
    """No user record matches the presented username or token subject."""


class InvalidCredentials(AuthError):
    """The password does not verify against the stored hash."""


class MalformedToken(AuthError):
    """The bearer token cannot be parsed into header, payload and signature."""


class BadSignature(AuthError):
    """The token signature does not verify under the configured secret."""


class TokenExpired(AuthError):
    """The token's ``exp`` claim is in the past."""


class PermissionDenied(AuthError):
    """Authenticated, but acting on another user's resource."""


class ConfigurationError(RuntimeError):
    """Fatal start-up misconfiguration (e.g. missing signing secret)."""
