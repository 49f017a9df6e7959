"""
Application settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: SecretStr                  # HMAC secret for auth tokens (required)
    jwt_algorithm: str = "HS256"
    jwt_expiry_seconds: int = 604800       # 7 days
    bcrypt_rounds: int = 12

    # ── Database ─────────────────────────────────────────────────────────
    connection_uri: str = "mongodb://localhost:27017"
    database_name: str = "myflix"
    server_selection_timeout_ms: int = 5000

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 8080
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = [
        "http://localhost:8080",
        "http://localhost:1234",
        "https://seaflix.netlify.app",
    ]
    static_dir: Optional[str] = "public"

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process; raises if ``JWT_SECRET`` is unset."""
    return Settings()
