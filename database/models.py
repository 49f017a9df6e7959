"""
Beanie document models for the ``users`` and ``movies`` collections.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from beanie import Document, Indexed, before_event, Replace, SaveChanges
from pydantic import BaseModel, Field

from utils.schemas import Director, Genre, Movie, UserRecord


def birthday_to_bson(value: Optional[date]) -> Optional[datetime]:
    """BSON has no date type, so birthdays are stored as midnight datetimes."""
    if value is None:
        return None
    return datetime(value.year, value.month, value.day)


class UserDocument(Document):
    username: Indexed(str, unique=True)
    password_hash: str
    email: str
    birthday: Optional[datetime] = None
    favorite_movies: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "users"
        use_cache = False

    @before_event([Replace, SaveChanges])
    def update_timestamp(self):
        self.updated_at = datetime.now(timezone.utc)

    def to_record(self) -> UserRecord:
        return UserRecord(
            username=self.username,
            password_hash=self.password_hash,
            email=self.email,
            birthday=self.birthday.date() if self.birthday else None,
            favorite_movies=list(self.favorite_movies),
        )


class GenreEmbed(BaseModel):
    name: str
    description: str = ""


class DirectorEmbed(BaseModel):
    name: str
    bio: str = ""
    birth: Optional[str] = None
    death: Optional[str] = None


class MovieDocument(Document):
    title: Indexed(str)
    description: str = ""
    genre: GenreEmbed
    director: DirectorEmbed
    image_path: Optional[str] = None
    featured: bool = False

    class Settings:
        name = "movies"
        use_cache = False

    def to_movie(self) -> Movie:
        return Movie(
            id=str(self.id),
            title=self.title,
            description=self.description,
            genre=Genre(**self.genre.model_dump()),
            director=Director(**self.director.model_dump()),
            image_path=self.image_path,
            featured=self.featured,
        )


DOCUMENT_MODELS = [UserDocument, MovieDocument]
