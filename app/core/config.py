# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string; sqlite:// is accepted
        for local runs and tests)
      - JWT_SECRET (secret used to verify bearer tokens)

    Optional:
      - JWT_ALGORITHM (defaults to HS256)
      - LOG_LEVEL (defaults to INFO)
      - CORS_ORIGINS (JSON list)
    """

    PROJECT_NAME: str = "Cart Backend"
    API_V1_STR: str = "/api/v1"

    # DB config
    DATABASE_URL: str

    # JWT verification (backend-side)
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"

    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
