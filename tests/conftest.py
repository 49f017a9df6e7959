"""
Shared fixtures: in-memory stores and a test app wired to them.
"""

from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from auth.password import PasswordHasher
from config.settings import Settings
from database.errors import DuplicateUsername, StoreUnavailable
from utils.schemas import Director, Genre, Movie, UserRecord, UserUpdate

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
TEST_ROUNDS = 4


class InMemoryUserStore:
    def __init__(self):
        self.records: Dict[str, UserRecord] = {}

    async def get(self, username: str) -> Optional[UserRecord]:
        record = self.records.get(username)
        return record.model_copy(deep=True) if record else None

    async def list(self) -> List[UserRecord]:
        return [r.model_copy(deep=True) for r in self.records.values()]

    async def insert(self, record: UserRecord) -> UserRecord:
        if record.username in self.records:
            raise DuplicateUsername(record.username)
        self.records[record.username] = record.model_copy(deep=True)
        return record

    async def update(self, username: str, changes: UserUpdate) -> Optional[UserRecord]:
        current = self.records.get(username)
        if current is None:
            return None
        if changes.username != username and changes.username in self.records:
            raise DuplicateUsername(changes.username)
        updated = current.model_copy(update=changes.model_dump())
        del self.records[username]
        self.records[updated.username] = updated
        return updated.model_copy(deep=True)

    async def delete(self, username: str) -> bool:
        return self.records.pop(username, None) is not None

    async def add_favorite(self, username: str, movie_id: str) -> Optional[UserRecord]:
        record = self.records.get(username)
        if record is None:
            return None
        if movie_id not in record.favorite_movies:
            record.favorite_movies.append(movie_id)
        return record.model_copy(deep=True)

    async def remove_favorite(self, username: str, movie_id: str) -> Optional[UserRecord]:
        record = self.records.get(username)
        if record is None:
            return None
        record.favorite_movies = [m for m in record.favorite_movies if m != movie_id]
        return record.model_copy(deep=True)


class InMemoryMovieStore:
    def __init__(self, movies: List[Movie]):
        self.movies = list(movies)

    async def list(self) -> List[Movie]:
        return list(self.movies)

    async def get(self, movie_id: str) -> Optional[Movie]:
        return next((m for m in self.movies if m.id == movie_id), None)

    async def get_by_title(self, title: str) -> Optional[Movie]:
        return next((m for m in self.movies if m.title == title), None)

    async def find_genre(self, name: str) -> Optional[Genre]:
        return next((m.genre for m in self.movies if m.genre.name == name), None)

    async def find_director(self, name: str) -> Optional[Director]:
        return next((m.director for m in self.movies if m.director.name == name), None)


class UnavailableUserStore(InMemoryUserStore):
    """Every call fails the way a dropped MongoDB connection does."""

    async def get(self, username: str) -> Optional[UserRecord]:
        raise StoreUnavailable("users.get failed: connection closed")

    async def list(self) -> List[UserRecord]:
        raise StoreUnavailable("users.list failed: connection closed")


MOVIES = [
    Movie(
        id="65a1f0c2e4b0a1b2c3d4e5f6",
        title="Inception",
        description="A thief who steals corporate secrets through dream-sharing.",
        genre=Genre(name="Science Fiction", description="Speculative, science-based fiction."),
        director=Director(name="Christopher Nolan", bio="British-American filmmaker.", birth="1970"),
        image_path="inception.png",
        featured=True,
    ),
    Movie(
        id="65a1f0c2e4b0a1b2c3d4e5f7",
        title="Jaws",
        description="A shark terrorises a beach town.",
        genre=Genre(name="Thriller", description="Suspense-driven stories."),
        director=Director(name="Steven Spielberg", bio="American filmmaker.", birth="1946"),
    ),
]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=TEST_ROUNDS,
        static_dir=None,
        _env_file=None,
    )


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def movie_store() -> InMemoryMovieStore:
    return InMemoryMovieStore(MOVIES)


@pytest.fixture
def app(settings, user_store, movie_store):
    return create_app(settings, user_store=user_store, movie_store=movie_store)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


def make_record(username: str, password: str, email: Optional[str] = None) -> UserRecord:
    return UserRecord(
        username=username,
        password_hash=PasswordHasher(rounds=TEST_ROUNDS).hash(password),
        email=email or f"{username}@example.com",
    )


@pytest.fixture
def register(client):
    def _register(username: str, password: str = "Secr3t!", email: Optional[str] = None):
        return client.post(
            "/users",
            json={
                "username": username,
                "password": password,
                "email": email or f"{username}@example.com",
                "birthday": "1990-04-01",
            },
        )

    return _register


@pytest.fixture
def login(client):
    def _login(username: str, password: str = "Secr3t!"):
        return client.post("/login", json={"username": username, "password": password})

    return _login


@pytest.fixture
def auth_headers(register, login):
    def _auth_headers(username: str, password: str = "Secr3t!") -> Dict[str, str]:
        register(username, password)
        token = login(username, password).json()["token"]
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
