"""
Store-level errors raised by the persistence layer.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for persistence failures."""


class StoreUnavailable(StoreError):
    """The database could not be reached or the call failed in transit.

    Transient: safe for the caller to retry, never retried internally.
    """


class DuplicateUsername(StoreError):
    """A user with this username already exists."""

    def __init__(self, username: str):
        super().__init__(f"{username} already exists")
        self.username = username
