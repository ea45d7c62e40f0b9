"""Configuration management for page-digest."""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .constants import NOTIFICATION_DISMISS_SECONDS
from .types import ClassifierMode, Environment


class Settings(BaseModel):
    """Application settings."""

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production/testing)",
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # Classification
    classifier_mode: ClassifierMode = Field(
        default=ClassifierMode.HEURISTIC,
        description="heuristic (raw page) or extractor (readability text)",
    )

    # Summarization
    default_model: str = Field(
        default="gpt-4o-mini", description="Model used when none is selected"
    )
    locale: str = Field(default="en", description="User language for summaries")
    max_tokens: int = Field(default=500, gt=0, description="Output token bound")
    temperature: float = Field(default=0.5, ge=0.0, le=2.0)
    stream: bool = Field(
        default=True, description="Stream responses from providers that support it"
    )
    request_timeout: float = Field(default=60.0, gt=0, description="Seconds")

    # Providers
    openai_base_url: str = Field(default="https://api.openai.com")
    gemini_base_url: str = Field(default="https://generativelanguage.googleapis.com")

    # UI
    shortcut: str = Field(default="S", description="Key or Modifier+Key")
    notification_dismiss_seconds: float = Field(
        default=NOTIFICATION_DISMISS_SECONDS, gt=0
    )

    # Storage
    storage_path: Path | None = Field(
        default=None, description="SQLite file for API keys (memory when unset)"
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        # Tests never touch the real key store
        if self.environment == Environment.TESTING:
            self.storage_path = None

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ["true", "1", "yes", "on"]


def load_settings() -> Settings:
    """Load settings from environment variables."""

    load_dotenv()

    storage_path = os.getenv("DIGEST_STORAGE_PATH")

    return Settings(
        environment=Environment(os.getenv("DIGEST_ENV", "development")),
        log_level=os.getenv("DIGEST_LOG_LEVEL", "INFO").upper(),
        classifier_mode=ClassifierMode(
            os.getenv("DIGEST_CLASSIFIER_MODE", "heuristic").lower()
        ),
        default_model=os.getenv("DIGEST_DEFAULT_MODEL", "gpt-4o-mini"),
        locale=os.getenv("DIGEST_LOCALE") or os.getenv("LANG", "en").split(".")[0],
        max_tokens=int(os.getenv("DIGEST_MAX_TOKENS", "500")),
        temperature=float(os.getenv("DIGEST_TEMPERATURE", "0.5")),
        stream=_parse_bool(os.getenv("DIGEST_STREAM", "true")),
        request_timeout=float(os.getenv("DIGEST_REQUEST_TIMEOUT", "60")),
        openai_base_url=os.getenv("DIGEST_OPENAI_BASE_URL", "https://api.openai.com"),
        gemini_base_url=os.getenv(
            "DIGEST_GEMINI_BASE_URL", "https://generativelanguage.googleapis.com"
        ),
        shortcut=os.getenv("DIGEST_SHORTCUT", "S"),
        notification_dismiss_seconds=float(
            os.getenv("DIGEST_NOTIFICATION_SECONDS", str(NOTIFICATION_DISMISS_SECONDS))
        ),
        storage_path=Path(storage_path) if storage_path else None,
    )


# Global settings instance
settings = load_settings()
