"""Centralized configuration using pydantic-settings.

All configuration is loaded from environment variables and .env files.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Keel settings.

    All settings can be overridden via environment variables.
    For nested settings, use double underscore: OBSERVABILITY__LOG_FORMAT=console
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = Field("keel", description="Application name")
    app_version: str = Field("1.0.0", description="Application version")
    environment: Environment = Field(Environment.DEVELOPMENT, description="Deployment environment")

    # ============================================================
    # Observability & Monitoring
    # ============================================================

    class ObservabilitySettings(BaseModel):
        """Observability configuration."""

        # Logging
        log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
        log_format: str = Field("json", description="Log format (json or console)")

        # Metrics
        enable_metrics: bool = Field(True, description="Enable metrics collection")
        metrics_export_interval_millis: int = Field(
            60000, description="Interval between metric exports"
        )
        metrics_export_timeout_millis: int = Field(30000, description="Metric export timeout")

        # OpenTelemetry
        otel_endpoint: str | None = Field(
            None, description="OTLP endpoint, e.g. http://localhost:4318"
        )
        otel_service_name: str = Field("keel", description="Service name")
        otel_resource_attributes: dict[str, str] = Field(
            default_factory=dict, description="Resource attributes"
        )

        @field_validator("log_format")
        @classmethod
        def validate_log_format(cls, v: str) -> str:
            """Accept json or console (text is an alias for console)."""
            v = v.lower()
            if v == "text":
                return "console"
            if v not in ("json", "console"):
                raise ValueError(f"Unsupported log format: {v}")
            return v

    observability: ObservabilitySettings = ObservabilitySettings()  # type: ignore[call-arg]

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: Any) -> Any:
        """Validate environment."""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TEST


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get global settings instance (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore
    return _settings


def reset_settings() -> None:
    """Reset settings (mainly for testing)."""
    global _settings
    _settings = None
