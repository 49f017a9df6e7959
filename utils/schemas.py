"""
Pydantic schemas shared by the stores, the auth core and the HTTP layer.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ═══════════════════════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════════════════════


class UserIdentity(BaseModel):
    """A user as the rest of the system sees it. Never carries the hash."""

    model_config = ConfigDict(populate_by_name=True)

    username: str
    email: str
    birthday: Optional[date] = None
    favorite_movies: List[str] = Field(default_factory=list, alias="favoriteMovies")


class UserRecord(UserIdentity):
    """Store-internal user record, including the bcrypt digest."""

    password_hash: str

    def to_identity(self) -> UserIdentity:
        return UserIdentity.model_validate(self.model_dump(exclude={"password_hash"}))


class UserUpdate(BaseModel):
    """Replacement profile fields for an existing user."""

    username: str
    password_hash: str
    email: str
    birthday: Optional[date] = None


# ═══════════════════════════════════════════════════════════════════════════════
# Movies
# ═══════════════════════════════════════════════════════════════════════════════


class Genre(BaseModel):
    name: str
    description: str = ""


class Director(BaseModel):
    name: str
    bio: str = ""
    birth: Optional[str] = None
    death: Optional[str] = None


class Movie(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str = ""
    genre: Genre
    director: Director
    image_path: Optional[str] = Field(default=None, alias="imagePath")
    featured: bool = False
