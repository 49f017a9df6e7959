"""
Application factory.
"""

from __future__ import annotations

import logging
import pathlib
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from api.middleware import register_exception_handlers, register_middleware
from api.movies import router as movies_router
from api.users import router as users_router
from auth.routes import router as auth_router
from auth.password import PasswordHasher
from auth.strategies import JWTStrategy, LocalStrategy
from auth.tokens import TokenIssuer, TokenVerifier
from config.settings import Settings, get_settings
from database.session import close_database, initialize_database
from database.stores import BeanieMovieStore, BeanieUserStore, MovieStore, UserStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    user_store: Optional[UserStore] = None,
    movie_store: Optional[MovieStore] = None,
) -> FastAPI:
    """
    Build the API.

    Without injected stores the Beanie stores are used and MongoDB is
    initialised on start-up.  Building the token services here means a
    missing signing secret stops the process before it serves anything.
    """
    settings = settings or get_settings()
    secret = settings.jwt_secret.get_secret_value()

    issuer = TokenIssuer(
        secret,
        algorithm=settings.jwt_algorithm,
        lifetime_seconds=settings.jwt_expiry_seconds,
    )
    verifier = TokenVerifier(secret, algorithm=settings.jwt_algorithm)
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

    use_mongo = user_store is None or movie_store is None
    users = user_store or BeanieUserStore()
    movies = movie_store or BeanieMovieStore()

    app = FastAPI(
        title="myFlix API",
        version="1.0.0",
        description="Movie catalog with user accounts and favorites.",
    )
    app.state.settings = settings
    app.state.user_store = users
    app.state.movie_store = movies
    app.state.token_issuer = issuer
    app.state.password_hasher = hasher
    app.state.local_strategy = LocalStrategy(users, hasher)
    app.state.jwt_strategy = JWTStrategy(verifier, users)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def index() -> str:
        return "APP loaded :)"

    # Routes
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(movies_router)

    if settings.static_dir:
        static_dir = pathlib.Path(settings.static_dir)
        if static_dir.is_dir():
            app.mount("/", StaticFiles(directory=str(static_dir)), name="static")

    if use_mongo:
        @app.on_event("startup")
        async def on_startup():
            app.state.mongo_client = await initialize_database(settings)
            logger.info("Application ready to accept requests.")

        @app.on_event("shutdown")
        async def on_shutdown():
            close_database(getattr(app.state, "mongo_client", None))

    return app
