"""
Application settings loaded from environment variables.
One typed model covers the log level and every campaign gateway knob (endpoints, timeouts, snapshot roots).
Every variable has a default, so a bare checkout runs against the public endpoints without a `.env` file.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Final

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_TARGETING_KEY: Final[str] = "b22fd39c053b256222b1"
DEFAULT_TARGETING_URL: Final[str] = f"https://api.npoint.io/{DEFAULT_TARGETING_KEY}"
DEFAULT_CHANNEL_URL_TEMPLATE: Final[str] = "https://api.npoint.io/{external_id}"


class Settings(BaseModel):
    """Typed runtime configuration."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    PROJECT_NAME: str = "campaign-planner"
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    CAMPAIGN_TARGETING_URL: str = DEFAULT_TARGETING_URL
    CAMPAIGN_CHANNEL_URL_TEMPLATE: str = DEFAULT_CHANNEL_URL_TEMPLATE
    CAMPAIGN_REQUEST_TIMEOUT_SECONDS: float = Field(default=3.0, gt=0)
    CAMPAIGN_RESOURCE_TIMEOUT_SECONDS: float = Field(default=6.0, gt=0)
    CAMPAIGN_TARGETING_KEY: str = DEFAULT_TARGETING_KEY
    CAMPAIGN_FALLBACK_ROOTS: tuple[Path, ...] = ()

    @field_validator("CAMPAIGN_FALLBACK_ROOTS", mode="before")
    @classmethod
    def _split_roots(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(Path(item) for item in value.split(os.pathsep) if item.strip())
        return value


def load_settings(*, load_env: bool = True) -> Settings:
    """Load and validate settings from `.env` and the process environment; blank values count as unset."""

    if load_env:
        load_dotenv()

    values = {
        key: value
        for key, value in os.environ.items()
        if key in Settings.model_fields and value.strip()
    }
    try:
        return Settings.model_validate(values)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached accessor for application settings."""

    return load_settings()
