from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Development accounts. Override with UI_USERS (JSON list) in any shared deployment.
DEFAULT_UI_USERS: list[dict[str, str]] = [
    {"id": "1", "email": "admin@example.com", "name": "Admin User", "role": "admin", "password": "admin123"},
    {"id": "2", "email": "finance@example.com", "name": "Finance Manager", "role": "finance", "password": "finance123"},
    {"id": "3", "email": "product@example.com", "name": "Product Manager", "role": "product", "password": "product123"},
]


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "GLC System"
    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent)
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent.parent / "data")
    TEMPLATES_DIR: Path | None = None
    STATIC_DIR: Path | None = None
    TZ: str = "Europe/Paris"
    LOG_LEVEL: str = "INFO"

    API_KEY: str = Field(default="", validation_alias=AliasChoices("API_KEY", "API_TOKEN"))
    JWT_SECRET: str = "change-me"
    JWT_ACCESS_TTL_MIN: int = 15
    JWT_REFRESH_TTL_DAYS: int = 7

    APP_SECRET: str = "dev-insecure-secret-change-me"
    UI_USERS: list[dict[str, str]] = Field(default_factory=lambda: [dict(u) for u in DEFAULT_UI_USERS])
    SESSION_COOKIE_NAME: str = "glc_session"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 7

    DB_URL: str = Field(default="", validation_alias=AliasChoices("DATABASE_URL", "DB_URL"))

    # "sql" keeps records in DB_URL; "rest" talks to a PostgREST-compatible store.
    STORE_BACKEND: str = "sql"
    STORE_URL: str = ""
    STORE_API_KEY: str = ""
    STORE_TIMEOUT: float = 10.0

    LOW_STOCK_THRESHOLD: int = 10
    EXPIRY_WINDOW_DAYS: int = 30

    HOST: str = "0.0.0.0"
    PORT: int = 8090

    @field_validator("STORE_BACKEND", mode="before")
    @classmethod
    def normalize_backend(cls, value: Any) -> str:
        backend = str(value or "sql").strip().lower()
        if backend not in {"sql", "rest"}:
            raise ValueError("STORE_BACKEND must be 'sql' or 'rest'")
        return backend

    @field_validator("STORE_URL", mode="before")
    @classmethod
    def strip_store_url(cls, value: Any) -> str:
        return str(value or "").strip().rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    if settings.TEMPLATES_DIR is None:
        settings.TEMPLATES_DIR = settings.BASE_DIR / "templates"
    if settings.STATIC_DIR is None:
        settings.STATIC_DIR = settings.BASE_DIR / "static"
    if not settings.DB_URL:
        settings.DB_URL = f"sqlite:///{settings.DATA_DIR / 'landedcost.db'}"
    return settings


settings = get_settings()
