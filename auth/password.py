"""
bcrypt digests for stored user passwords.

bcrypt only reads the first 72 bytes of its input and bcrypt 5 rejects
anything longer, so the limit is enforced here and by the request schema
rather than surfacing as a library error.
"""

from __future__ import annotations

import logging

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12
MAX_PASSWORD_BYTES = 72


class PasswordTooLong(ValueError):
    """The UTF-8 encoding of a password exceeds ``MAX_PASSWORD_BYTES``."""


def check_password_length(password: str) -> bytes:
    """Return the encoded password, or raise ``PasswordTooLong``."""
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise PasswordTooLong(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
        )
    return encoded


class PasswordHasher:
    """Hashes new passwords at a fixed work factor and checks stored digests."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        encoded = check_password_length(password)
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    def verify(self, password: str, password_hash: str) -> bool:
        # A password that could never have been hashed cannot match.
        try:
            encoded = check_password_length(password)
        except PasswordTooLong:
            return False
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("ascii"))
        except (ValueError, TypeError):
            logger.warning("Stored password digest is not a bcrypt hash")
            return False
