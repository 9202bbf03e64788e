"""Centralized configuration loading."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    # AI enrichment (disabled when no key is configured)
    google_api_key: str | None
    ai_model: str
    ai_timeout: float

    # Browser session settings
    chrome_path: str | None
    chrome_flags: tuple[str, ...]
    browser_launch_timeout: int

    # Audit store
    store_ttl_seconds: int

    environment: str

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def ai_enabled(self) -> bool:
        return self.google_api_key is not None


def _get_optional_env(key: str, default: str) -> str:
    """Get optional environment variable with default."""
    value = os.getenv(key)
    return value.strip() if value else default


def _get_nullable_env(key: str) -> str | None:
    """Get environment variable, treating blank values as unset."""
    value = os.getenv(key)
    if not value or not value.strip():
        return None
    return value.strip()


def load_config() -> Config:
    """Load and validate configuration from environment."""
    load_dotenv()

    return Config(
        google_api_key=_get_nullable_env("GOOGLE_API_KEY"),
        ai_model=_get_optional_env("AI_MODEL", "gemini-2.5-flash"),
        ai_timeout=float(_get_optional_env("AI_TIMEOUT", "60")),
        # Browser session settings
        chrome_path=_get_nullable_env("CHROME_PATH"),
        chrome_flags=tuple(_get_optional_env("CHROME_FLAGS", "").split()),
        browser_launch_timeout=int(_get_optional_env("BROWSER_LAUNCH_TIMEOUT", "30")),
        store_ttl_seconds=int(_get_optional_env("AUDIT_STORE_TTL", "86400")),
        environment=_get_optional_env("APP_ENV", "development").lower(),
    )


# Singleton config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the configuration singleton."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset config singleton (useful for testing)."""
    global _config
    _config = None
