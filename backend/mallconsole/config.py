"""Application configuration via Pydantic Settings."""

from typing import List
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global console settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Document store
    DATABASE_URL: str = "sqlite+aiosqlite:///./supermall.db"

    @model_validator(mode="after")
    def fix_database_url(self) -> "Settings":
        """Hosted providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://"""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            self.DATABASE_URL = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            self.DATABASE_URL = url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Identity provider / JWT id tokens
    JWT_SECRET_KEY: str = "change-me-in-production-use-a-random-secret"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours
    MIN_PASSWORD_LENGTH: int = 6

    # Authorization side records
    DEFAULT_ROLE: str = "user"

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"
    EXTRA_CORS_ORIGINS: str = ""  # Comma-separated list of extra origins

    def get_cors_origins(self) -> List[str]:
        """Build the CORS allow-list from FRONTEND_URL and EXTRA_CORS_ORIGINS.

        Returns:
            List of origin strings, FRONTEND_URL first
        """
        origins = [self.FRONTEND_URL]
        if self.EXTRA_CORS_ORIGINS:
            origins.extend(o.strip() for o in self.EXTRA_CORS_ORIGINS.split(",") if o.strip())
        return origins


settings = Settings()
