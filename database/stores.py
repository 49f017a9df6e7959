"""
User and movie stores.

``UserStore`` / ``MovieStore`` are the only persistence contracts the auth
core and the route handlers depend on.  The Beanie implementations below
translate driver failures into ``StoreUnavailable`` so that a dropped
connection is never confused with a missing record.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Protocol

from beanie import PydanticObjectId, UpdateResponse
from beanie.operators import AddToSet, Pull, Set
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError, PyMongoError

from database.errors import DuplicateUsername, StoreUnavailable
from database.models import MovieDocument, UserDocument, birthday_to_bson
from utils.schemas import Director, Genre, Movie, UserRecord, UserUpdate

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    async def get(self, username: str) -> Optional[UserRecord]: ...

    async def list(self) -> List[UserRecord]: ...

    async def insert(self, record: UserRecord) -> UserRecord: ...

    async def update(self, username: str, changes: UserUpdate) -> Optional[UserRecord]: ...

    async def delete(self, username: str) -> bool: ...

    async def add_favorite(self, username: str, movie_id: str) -> Optional[UserRecord]: ...

    async def remove_favorite(self, username: str, movie_id: str) -> Optional[UserRecord]: ...


class MovieStore(Protocol):
    async def list(self) -> List[Movie]: ...

    async def get(self, movie_id: str) -> Optional[Movie]: ...

    async def get_by_title(self, title: str) -> Optional[Movie]: ...

    async def find_genre(self, name: str) -> Optional[Genre]: ...

    async def find_director(self, name: str) -> Optional[Director]: ...


@contextmanager
def _store_call(operation: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        logger.error("Store call %s failed: %s", operation, exc)
        raise StoreUnavailable(f"{operation} failed: {exc}") from exc


class BeanieUserStore:
    """``UserStore`` backed by the ``users`` collection."""

    async def get(self, username: str) -> Optional[UserRecord]:
        with _store_call("users.get"):
            doc = await UserDocument.find_one({"username": username})
        return doc.to_record() if doc else None

    async def list(self) -> List[UserRecord]:
        with _store_call("users.list"):
            docs = await UserDocument.find_all().to_list()
        return [d.to_record() for d in docs]

    async def insert(self, record: UserRecord) -> UserRecord:
        doc = UserDocument(
            username=record.username,
            password_hash=record.password_hash,
            email=record.email,
            birthday=birthday_to_bson(record.birthday),
            favorite_movies=list(record.favorite_movies),
        )
        with _store_call("users.insert"):
            try:
                await doc.insert()
            except DuplicateKeyError as exc:
                raise DuplicateUsername(record.username) from exc
        return doc.to_record()

    async def update(self, username: str, changes: UserUpdate) -> Optional[UserRecord]:
        fields = {
            "username": changes.username,
            "password_hash": changes.password_hash,
            "email": changes.email,
            "birthday": birthday_to_bson(changes.birthday),
            "updated_at": datetime.now(timezone.utc),
        }
        with _store_call("users.update"):
            try:
                doc = await UserDocument.find_one({"username": username}).update(
                    Set(fields),
                    response_type=UpdateResponse.NEW_DOCUMENT,
                )
            except DuplicateKeyError as exc:
                raise DuplicateUsername(changes.username) from exc
        return doc.to_record() if doc else None

    async def delete(self, username: str) -> bool:
        with _store_call("users.delete"):
            result = await UserDocument.find_one({"username": username}).delete()
        return bool(result and result.deleted_count)

    async def add_favorite(self, username: str, movie_id: str) -> Optional[UserRecord]:
        with _store_call("users.add_favorite"):
            doc = await UserDocument.find_one({"username": username}).update(
                AddToSet({"favorite_movies": movie_id}),
                response_type=UpdateResponse.NEW_DOCUMENT,
            )
        return doc.to_record() if doc else None

    async def remove_favorite(self, username: str, movie_id: str) -> Optional[UserRecord]:
        with _store_call("users.remove_favorite"):
            doc = await UserDocument.find_one({"username": username}).update(
                Pull({"favorite_movies": movie_id}),
                response_type=UpdateResponse.NEW_DOCUMENT,
            )
        return doc.to_record() if doc else None


class BeanieMovieStore:
    """``MovieStore`` backed by the ``movies`` collection."""

    async def list(self) -> List[Movie]:
        with _store_call("movies.list"):
            docs = await MovieDocument.find_all().to_list()
        return [d.to_movie() for d in docs]

    async def get(self, movie_id: str) -> Optional[Movie]:
        try:
            oid = PydanticObjectId(movie_id)
        except (InvalidId, TypeError):
            return None
        with _store_call("movies.get"):
            doc = await MovieDocument.get(oid)
        return doc.to_movie() if doc else None

    async def get_by_title(self, title: str) -> Optional[Movie]:
        with _store_call("movies.get_by_title"):
            doc = await MovieDocument.find_one({"title": title})
        return doc.to_movie() if doc else None

    async def find_genre(self, name: str) -> Optional[Genre]:
        with _store_call("movies.find_genre"):
            doc = await MovieDocument.find_one({"genre.name": name})
        if doc is None:
            return None
        return Genre(**doc.genre.model_dump())

    async def find_director(self, name: str) -> Optional[Director]:
        with _store_call("movies.find_director"):
            doc = await MovieDocument.find_one({"director.name": name})
        if doc is None:
            return None
        return Director(**doc.director.model_dump())

