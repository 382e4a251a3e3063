"""
Core configuration module for LiteTask.
Uses pydantic-settings for environment variable management with full validation.
"""
from __future__ import annotations

import json
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────────────────────
    APP_NAME: str = "LiteTask"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"

    # ── Database ──────────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./tasks.db"
    AUTO_CREATE_SCHEMA: bool = True

    # ── Security ──────────────────────────────────────────────────────────────
    AUTH_SECRET: str | None = None
    AUTH_COOKIE_NAME: str = "auth"
    AUTH_COOKIE_SECURE: bool = False
    AUTH_TOKEN_EXPIRE_DAYS: int = 30
    JWT_ALGORITHM: str = "HS256"
    BCRYPT_ROUNDS: int = 12
    PASSWORD_MIN_LENGTH: int = 6
    ALLOW_REGISTRATION: bool = True

    # ── Bootstrap data ────────────────────────────────────────────────────────
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str | None = None
    DEFAULT_PROJECT_NAME: str = "Общий"

    # ── CORS ──────────────────────────────────────────────────────────────────
    ALLOWED_ORIGINS: list[str] = ["*"]

    # ── Rate Limiting ─────────────────────────────────────────────────────────
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_LOGIN: str = "5/minute"

    # ── Telegram bot ──────────────────────────────────────────────────────────
    BOT_TOKEN: str = ""
    BOT_CHAT_ID: str = ""

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v: Any) -> list[str]:
        """Accept JSON array string or Python list."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except (json.JSONDecodeError, ValueError):
                pass
            # Comma-separated fallback
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("BOT_TOKEN", "BOT_CHAT_ID", mode="before")
    @classmethod
    def strip_bot_settings(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @property
    def auth_token_expire_seconds(self) -> int:
        return self.AUTH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    @property
    def bot_enabled(self) -> bool:
        return bool(self.BOT_TOKEN and self.BOT_CHAT_ID)

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()
