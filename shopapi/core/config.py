# shopapi/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Env vars (.env):
      - DATABASE_URL (PostgreSQL in production, SQLite for local dev)
      - IDENTITY_PROVIDER: "firebase" (default) or "jwt"
      - FIREBASE_SERVICE_ACCOUNT_PATH (required for the firebase provider)
      - JWT_SECRET (required for the jwt provider)
    """

    PROJECT_NAME: str = "Shop API"
    API_PREFIX: str = ""
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./shop.db"
    DB_SSLMODE: str | None = None
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # Identity provider
    IDENTITY_PROVIDER: Literal["firebase", "jwt"] = "firebase"
    FIREBASE_SERVICE_ACCOUNT_PATH: str | None = None
    FIREBASE_CHECK_REVOKED: bool = True

    # Shared-secret tokens (local development only)
    JWT_SECRET: str | None = None
    JWT_ALGORITHM: str = "HS256"

    CORS_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
