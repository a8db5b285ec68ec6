"""
Central configuration for ESM Map Tasks.

All settings are read from environment variables with the ``ESM_`` prefix
(e.g. ``ESM_ENTU_ACCOUNT=esmuuseum``, ``ESM_ENTU_KEY=...``) or from a local
``.env`` file. Pydantic validates and casts values on startup.

Usage::

    from esm.settings import get_settings
    settings = get_settings()
    print(settings.entu_url, settings.entu_account)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from ``ESM_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ESM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Environment ──────────────────────────────────────────────────
    env: Literal["local", "dev", "prod"] = "local"

    # ── Entu CMS ─────────────────────────────────────────────────────
    entu_url: str = "https://entu.app"
    entu_account: str = "esmuuseum"

    # API key (or OAuth token) exchanged for a short-lived JWT at /api/auth.
    entu_key: str = ""

    # Pre-issued JWT. Skips the token exchange when set.
    entu_token: str = ""

    request_timeout: float = 30.0
    search_limit: int = 1000

    # ── Map ──────────────────────────────────────────────────────────
    # Degrees; 0.00001 is roughly one metre.
    coordinate_tolerance: float = 0.00001

    # ── CORS ─────────────────────────────────────────────────────────
    cors_origins: list[str] = ["*"]

    # ── Observability ────────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"

    # ── Startup validation ───────────────────────────────────────────

    @model_validator(mode="after")
    def _validate_config(self) -> Settings:
        """
        Fail fast on misconfiguration.

        All errors are collected before raising so a single startup failure
        lists every problem at once.
        """
        errors: list[str] = []

        if self.coordinate_tolerance <= 0:
            errors.append("ESM_COORDINATE_TOLERANCE must be positive")

        if self.request_timeout <= 0:
            errors.append("ESM_REQUEST_TIMEOUT must be positive")

        if self.search_limit < 1:
            errors.append("ESM_SEARCH_LIMIT must be at least 1")

        if not self.entu_url.startswith(("http://", "https://")):
            errors.append(f"ESM_ENTU_URL must be an http(s) URL, got {self.entu_url!r}")

        # ── Any deployed environment (dev or prod) ──────────────────
        if self.env != "local":
            if not (self.entu_key or self.entu_token):
                errors.append(
                    f"ESM_ENTU_KEY or ESM_ENTU_TOKEN is required in env={self.env!r}"
                )

        # ── Production only ───────────────────────────────────────────
        if self.env == "prod":
            if self.cors_origins == ["*"]:
                errors.append("ESM_CORS_ORIGINS must not be ['*'] in prod")

            if self.debug:
                errors.append("ESM_DEBUG must be false in prod")

        if errors:
            raise ValueError(
                f"[ESM env={self.env!r}] Configuration errors:\n  - " + "\n  - ".join(errors)
            )

        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached application settings singleton."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (for testing)."""
    get_settings.cache_clear()
