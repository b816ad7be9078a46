"""Runtime settings read from the environment (prefix ``QUIZDECK_``) or a ``.env`` file."""

from __future__ import annotations

from pathlib import Path
import secrets

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from quizdeck.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="QUIZDECK_", env_file=".env", extra="ignore")

    HOST: str = DEFAULT_HOST
    PORT: int = DEFAULT_PORT
    LOG_LEVEL: str = "INFO"

    # Tokens
    JWT_SECRET_KEY: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Optional admin account created at startup
    ADMIN_EMAIL: str | None = None
    ADMIN_PASSWORD: str | None = None

    # Directory of *.txt quizzes imported under the admin account at startup
    SEED_QUIZ_DIR: Path | None = None

    def get_cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
