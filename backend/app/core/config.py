"""
Application settings

Values are read from the environment (prefix ``SCANNER_``) or an optional
``.env`` file. The core never reads the environment itself: ``create_app``
and the CLI pass a ``Settings`` instance down explicitly.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Scanner service configuration"""

    model_config = SettingsConfigDict(
        env_prefix="SCANNER_",
        env_file=".env",
        extra="ignore",
    )

    APP_NAME: str = "Site Security Scanner"
    APP_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    FUNCTION_PATH: str = "/functions/v1/security-scanner"
    LOG_LEVEL: str = "INFO"

    # Network
    REQUEST_TIMEOUT: float = Field(default=10.0, gt=0, description="httpx timeout in seconds")
    PROBE_TIMEOUT: float = Field(default=15.0, gt=0, description="Upper bound for a single probe")
    USER_AGENT: str = "SiteSecurityScanner/1.0"

    # Probe data sources
    TLS_SOURCE: Literal["synthetic", "live"] = "synthetic"
    REPUTATION_FLAG_RATE: float = Field(default=0.1, ge=0.0, le=1.0)
    REPUTATION_BLOCKLIST: List[str] = Field(default_factory=list)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("REPUTATION_BLOCKLIST")
    @classmethod
    def normalise_blocklist(cls, v):
        return [host.strip().lower().rstrip(".") for host in v if host.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
