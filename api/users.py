"""
User routes: registration, profile management and favorites.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator

from auth.dependencies import (
    ensure_same_user,
    get_current_user,
    movie_store,
    password_hasher,
    user_store,
)
from auth.password import PasswordHasher, check_password_length
from database.stores import MovieStore, UserStore
from utils.schemas import UserIdentity, UserRecord, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


class UserPayload(BaseModel):
    """Body of ``POST /users`` and ``PUT /users/{username}``."""

    username: str = Field(..., min_length=5, max_length=10, pattern=r"^[A-Za-z0-9]+$")
    password: str = Field(..., min_length=1)
    email: EmailStr
    birthday: Optional[date] = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        check_password_length(value)
        return value


# PUT parses its body by hand, so the schema is declared for the docs.
_PAYLOAD_BODY = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": UserPayload.model_json_schema()}},
    }
}


async def require_owner(
    username: str,
    user: UserIdentity = Depends(get_current_user),
) -> UserIdentity:
    """Guard for routes that act on ``/users/{username}`` itself."""
    ensure_same_user(user, username)
    return user


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


@router.post("", response_model=UserIdentity, status_code=status.HTTP_201_CREATED)
async def register(
    req: UserPayload,
    users: UserStore = Depends(user_store),
    hasher: PasswordHasher = Depends(password_hasher),
) -> UserIdentity:
    """Register a new user."""
    if await users.get(req.username) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{req.username} already exists",
        )

    record = await users.insert(
        UserRecord(
            username=req.username,
            password_hash=hasher.hash(req.password),
            email=req.email,
            birthday=req.birthday,
        )
    )
    logger.info("Registered user %s", record.username)
    return record.to_identity()


@router.get("", response_model=List[UserIdentity])
async def list_users(
    _: UserIdentity = Depends(get_current_user),
    users: UserStore = Depends(user_store),
) -> List[UserIdentity]:
    return [r.to_identity() for r in await users.list()]


@router.get("/{username}", response_model=UserIdentity)
async def get_user(
    username: str,
    _: UserIdentity = Depends(get_current_user),
    users: UserStore = Depends(user_store),
) -> UserIdentity:
    record = await users.get(username)
    if record is None:
        raise _not_found("User not found")
    return record.to_identity()


@router.put("/{username}", response_model=UserIdentity, openapi_extra=_PAYLOAD_BODY)
async def update_user(
    username: str,
    request: Request,
    _: UserIdentity = Depends(require_owner),
    users: UserStore = Depends(user_store),
    hasher: PasswordHasher = Depends(password_hasher),
) -> UserIdentity:
    """
    Replace the caller's own profile.

    The body is parsed only after the ownership check, so acting on another
    account is always ``403`` whatever was sent.
    """
    try:
        req = UserPayload.model_validate(await request.json())
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False)
        raise RequestValidationError(
            [{**e, "loc": ("body", *e["loc"])} for e in errors]
        ) from exc
    except ValueError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "Invalid JSON body", "input": None}]
        ) from exc

    record = await users.update(
        username,
        UserUpdate(
            username=req.username,
            password_hash=hasher.hash(req.password),
            email=req.email,
            birthday=req.birthday,
        ),
    )
    if record is None:
        raise _not_found("User not found")
    logger.info("Updated user %s -> %s", username, record.username)
    return record.to_identity()


@router.delete("/{username}", response_class=PlainTextResponse)
async def delete_user(
    username: str,
    _: UserIdentity = Depends(require_owner),
    users: UserStore = Depends(user_store),
) -> str:
    if not await users.delete(username):
        raise _not_found(f"{username} was not found")
    logger.info("Deleted user %s", username)
    return f"{username} was deleted"


@router.post("/{username}/movies/{movie_id}", response_model=UserIdentity)
async def add_favorite(
    username: str,
    movie_id: str,
    _: UserIdentity = Depends(require_owner),
    users: UserStore = Depends(user_store),
    movies: MovieStore = Depends(movie_store),
) -> UserIdentity:
    """Append a movie to the caller's favorites (no duplicates)."""
    if await movies.get(movie_id) is None:
        raise _not_found("Movie not found")
    record = await users.add_favorite(username, movie_id)
    if record is None:
        raise _not_found("User not found")
    return record.to_identity()


@router.delete("/{username}/movies/{movie_id}", response_model=UserIdentity)
async def remove_favorite(
    username: str,
    movie_id: str,
    _: UserIdentity = Depends(require_owner),
    users: UserStore = Depends(user_store),
) -> UserIdentity:
    record = await users.remove_favorite(username, movie_id)
    if record is None:
        raise _not_found("User not found")
    return record.to_identity()
