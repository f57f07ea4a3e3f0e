"""Configuration management using Pydantic settings."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, PostgresDsn, computed_field
from functools import lru_cache
import os


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # API Settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "ContractLens"
    VERSION: str = "1.0.0"
    PORT: int = Field(default=8080)

    # Security
    SECRET_KEY: str = Field(default="dev-secret-key-change-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS
    CLIENT_URL: str = Field(default="http://localhost:3000")
    BACKEND_CORS_ORIGINS: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

    # Database
    POSTGRES_SERVER: str = Field(default="localhost")
    POSTGRES_USER: str = Field(default="contractlens")
    POSTGRES_PASSWORD: str = Field(default="local_dev_password")
    POSTGRES_DB: str = Field(default="contractlens")
    POSTGRES_PORT: int = Field(default=5432)

    @computed_field
    @property
    def DATABASE_URL(self) -> PostgresDsn | str:
        """Construct database URL from components."""
        # SQLALCHEMY_DATABASE_URI bypasses DSN validation (Unix socket paths)
        sqlalchemy_uri = os.getenv("SQLALCHEMY_DATABASE_URI")
        if sqlalchemy_uri:
            return sqlalchemy_uri

        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    # Redis (staging and record cache)
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_PASSWORD: Optional[str] = Field(default=None)
    REDIS_DB: int = Field(default=0)

    @computed_field
    @property
    def REDIS_URL(self) -> str:
        """Construct Redis URL from components."""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    STAGE_TTL_SECONDS: int = Field(default=3600)  # leak backstop for staged uploads
    RECORD_CACHE_TTL_SECONDS: int = Field(default=3600)

    # Uploads
    MAX_UPLOAD_BYTES: int = Field(default=10 * 1024 * 1024)

    # Gemini
    GEMINI_API_KEY: str = Field(default="")
    GEMINI_MODEL: str = Field(default="gemini-pro")
    GEMINI_BASE_URL: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    LLM_TIMEOUT_SECONDS: float = Field(default=30.0)
    CLASSIFICATION_PROMPT_CHARS: int = Field(default=2000)
    DEFAULT_LANGUAGE: str = Field(default="en")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Environment settings
    ENVIRONMENT: str = Field(default="development")

    # Performance
    MAX_CONNECTIONS_COUNT: int = Field(default=10)

    def get_cors_origins(self) -> list[str]:
        """CORS origins including the configured client URL."""
        origins = list(self.BACKEND_CORS_ORIGINS)
        client = self.CLIENT_URL.rstrip("/")
        if client and client not in origins:
            origins.append(client)
        return origins


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
