# backend/twr_service/config.py
"""
Service settings, read from the environment by pydantic-settings.

Recognised variables:
- ENVIRONMENT: Runtime mode (development, test, production)
- LOG_LEVEL / LOG_FORMAT: Logging verbosity and output format
- RATE_LIMIT_ENABLED: Toggle slowapi rate limiting
- TRUST_PROXY_HEADERS / TRUSTED_PROXY_IPS: Client IP resolution behind proxies

Per-environment rules:
- test: Rate limiting disabled by default
- production: DEBUG must be off, /docs and /redoc are not served

Settings are built once at import; a bad value fails fast with a
pydantic ValidationError naming the offending field.

Usage:
    from twr_service.config import settings

    if settings.rate_limit_enabled:
        app.state.limiter = limiter
"""
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Optional .env next to pyproject.toml
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Environment-driven service settings (case-insensitive names).

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - APP_NAME: Application name (default: "Time-Weighted Return Service")
        - DEBUG: Enable debug mode (default: False)
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
    """

    # Selects the rules applied in validate_environment()
    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="text",
        description="Log output format: 'text' for humans, 'json' for aggregators"
    )

    # Service identity
    app_name: str = "Time-Weighted Return Service"
    debug: bool = False

    # =========================================================================
    # RATE LIMITING
    # =========================================================================
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable slowapi rate limiting (disabled automatically in test)"
    )
    trust_proxy_headers: bool = Field(
        default=False,
        description="Trust X-Forwarded-For from any client (only behind a trusted load balancer)"
    )
    trusted_proxy_ips: list[str] = Field(
        default_factory=list,
        description="Proxy IPs whose X-Forwarded-For / X-Real-IP headers are trusted"
    )

    # =========================================================================
    # CORS
    # =========================================================================
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        """Normalize and validate the log format."""
        normalized = value.strip().lower()
        if normalized not in ("text", "json"):
            raise ValueError(f"LOG_FORMAT must be 'text' or 'json', got: '{value}'")
        return normalized

    @model_validator(mode="after")
    def validate_environment(self) -> "Settings":
        """
        Apply environment-specific rules.

        Rules:
        - test: rate limiting off unless explicitly configured
        - production: debug mode is not allowed
        """
        if self.is_test:
            if "rate_limit_enabled" not in self.model_fields_set:
                object.__setattr__(self, "rate_limit_enabled", False)
            return self

        if self.is_production and self.debug:
            raise ValueError(
                "DEBUG must be disabled in production environment. "
                "Unset DEBUG or set it to false."
            )

        return self

    @property
    def is_production(self) -> bool:
        """True when ENVIRONMENT=production."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """True when ENVIRONMENT=test."""
        return self.environment == "test"


# Create single instance
settings = Settings()
