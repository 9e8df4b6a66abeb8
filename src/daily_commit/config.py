"""
Configuration settings for the Daily Commit job.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.

Settings marked "tiered" default to None and are filled in from the
ENVIRONMENT tier (development / production) after loading, so an explicit
environment variable always wins over the tier default.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from daily_commit.retry.policy import RetryPolicy

OperationClass = Literal["scm", "credentials", "file"]

# Tier defaults: (development, production)
_TIER_DEFAULTS: dict[str, tuple] = {
    "CACHE_TTL_SECONDS": (60.0, 300.0),
    "METRICS_BATCH_SIZE": (1, 10),
    "LOG_LEVEL": ("INFO", "ERROR"),
    "GIT_TIMEOUT_SECONDS": (10.0, 30.0),
    "MAX_RETRIES": (2, 3),
    "BASE_DELAY_MS": (1000, 2000),
    "MAX_DELAY_MS": (5000, 10000),
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Daily Commit"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    FUNCTION_NAME: str = "daily-commit"

    # === Tiered (resolved from ENVIRONMENT) ===
    CACHE_TTL_SECONDS: Optional[float] = None
    METRICS_BATCH_SIZE: Optional[int] = None
    LOG_LEVEL: Optional[str] = None
    GIT_TIMEOUT_SECONDS: Optional[float] = None
    MAX_RETRIES: Optional[int] = None
    BASE_DELAY_MS: Optional[int] = None
    MAX_DELAY_MS: Optional[int] = None

    # === Retry policies per operation class ===
    RETRY_BACKOFF_MULTIPLIER: float = 2.0
    RETRY_JITTER: bool = True
    SCM_MAX_ATTEMPTS: int = 3
    SCM_BASE_DELAY_MS: int = 2000
    CREDENTIALS_MAX_ATTEMPTS: int = 2
    CREDENTIALS_BASE_DELAY_MS: int = 1000
    FILE_MAX_ATTEMPTS: int = 1  # File writes are local, no retry

    # === Credential store ===
    SECRET_NAME: str = "daily-commit-secrets"
    CREDENTIAL_STORE_URL: str = "http://localhost:8200"
    CREDENTIAL_STORE_TOKEN: Optional[str] = None
    CREDENTIAL_STORE_TIMEOUT: float = 5.0  # seconds

    # === Metrics sink ===
    PUSHGATEWAY_URL: Optional[str] = None  # Log sink is used when unset
    METRICS_TIMEOUT_SECONDS: float = 5.0
    METRICS_BATCH_TIMEOUT_SECONDS: float = 300.0

    # === Source control ===
    WORKDIR: str = "/tmp/daily-commit"
    GIT_BRANCH: str = "main"
    GIT_BINARY: str = "git"
    DEFAULT_FILE_PATH: str = "daily-commit.txt"

    # === Rate limiting (HTTP trigger only) ===
    RATE_LIMIT_MAX_REQUESTS: int = 10
    RATE_LIMIT_WINDOW_SECONDS: float = 60.0

    # === Scheduling (Celery beat) ===
    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/1"
    CELERY_TASK_TIME_LIMIT: int = 300  # seconds
    SCHEDULE_HOUR: int = 9  # UTC
    SCHEDULE_MINUTE: int = 0

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True

    @model_validator(mode="after")
    def apply_tier_defaults(self) -> "Settings":
        """Fill tiered settings that were not set explicitly."""
        tier = 1 if self.is_production else 0
        for name, defaults in _TIER_DEFAULTS.items():
            if getattr(self, name) is None:
                setattr(self, name, defaults[tier])
        self.LOG_LEVEL = self.LOG_LEVEL.upper()
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def metrics_namespace(self) -> str:
        """Namespace under which aggregated job metrics are published."""
        return f"DailyCommit/{self.FUNCTION_NAME}"

    def retry_policy(self, operation_class: OperationClass) -> RetryPolicy:
        """
        Build the retry policy for an operation class.

        All classes share the tier's MAX_DELAY_MS cap, multiplier and jitter;
        attempts and base delay are class-specific.

        Args:
            operation_class: "scm", "credentials" or "file"

        Returns:
            Immutable RetryPolicy
        """
        attempts_and_base = {
            "scm": (self.SCM_MAX_ATTEMPTS, self.SCM_BASE_DELAY_MS),
            "credentials": (self.CREDENTIALS_MAX_ATTEMPTS, self.CREDENTIALS_BASE_DELAY_MS),
            "file": (self.FILE_MAX_ATTEMPTS, self.BASE_DELAY_MS),
        }
        if operation_class not in attempts_and_base:
            raise ValueError(f"Unknown operation class: {operation_class}")

        max_attempts, base_delay_ms = attempts_and_base[operation_class]
        return RetryPolicy(
            max_attempts=max_attempts,
            base_delay_ms=base_delay_ms,
            max_delay_ms=self.MAX_DELAY_MS,
            backoff_multiplier=self.RETRY_BACKOFF_MULTIPLIER,
            jitter=self.RETRY_JITTER,
        )

    def default_retry_policy(self) -> RetryPolicy:
        """Tier-wide policy (MAX_RETRIES / BASE_DELAY_MS / MAX_DELAY_MS)."""
        return RetryPolicy(
            max_attempts=self.MAX_RETRIES,
            base_delay_ms=self.BASE_DELAY_MS,
            max_delay_ms=self.MAX_DELAY_MS,
            backoff_multiplier=self.RETRY_BACKOFF_MULTIPLIER,
            jitter=self.RETRY_JITTER,
        )


@dataclass
class EnvironmentCheck:
    """Result of validating that required configuration is present."""

    valid: bool
    missing: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_environment(settings: Settings) -> EnvironmentCheck:
    """
    Check that the configuration is complete for the current tier.

    Production requires an explicit secret name and credential store URL.
    Missing optional settings only produce warnings.
    """
    missing: list[str] = []
    warnings: list[str] = []
    explicit = settings.model_fields_set

    if settings.is_production:
        for name in ("SECRET_NAME", "CREDENTIAL_STORE_URL"):
            if name not in explicit or not getattr(settings, name):
                missing.append(name)

    if "FUNCTION_NAME" not in explicit:
        warnings.append("FUNCTION_NAME not set (will use default)")
    if not settings.PUSHGATEWAY_URL:
        warnings.append("PUSHGATEWAY_URL not set (metrics go to the log sink)")

    return EnvironmentCheck(valid=not missing, missing=missing, warnings=warnings)


# Global settings instance
settings = Settings()
