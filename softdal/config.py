"""
Configuration settings for softdal.

Uses Pydantic Settings to load environment variables (and an optional .env
file) for the database backend, pool sizing, statement timeout and logging.
`DATABASE_URL`, when set, wins over the individual DB_* connection fields.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Backend
    db_backend: Literal["postgresql", "sqlite"] = Field("postgresql", alias="DB_BACKEND")
    database_url: Optional[str] = Field(None, alias="DATABASE_URL")

    # PostgreSQL connection
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("radio_db", alias="DB_NAME")

    # SQLite
    sqlite_path: str = Field("softdal.db", alias="SQLITE_PATH")

    # Pool
    pool_min_size: int = Field(1, ge=0, alias="DB_POOL_MIN_SIZE")
    pool_max_size: int = Field(10, ge=1, alias="DB_POOL_MAX_SIZE")
    pool_timeout_seconds: float = Field(60.0, gt=0, alias="DB_POOL_TIMEOUT")
    statement_timeout_ms: int = Field(5000, ge=0, alias="DB_STATEMENT_TIMEOUT_MS")
    connect_attempts: int = Field(5, ge=1, alias="DB_CONNECT_ATTEMPTS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
