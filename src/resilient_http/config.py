"""Configuration management for resilient_http.

All settings can be supplied through environment variables prefixed with
``RESILIENT_HTTP_`` (e.g. ``RESILIENT_HTTP_MAX_ATTEMPTS=3``) or a ``.env``
file in the working directory.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from resilient_http.client import HttpClientConfig


class Settings(BaseSettings):
    """Environment-driven client settings."""

    # ===== Connection =====
    base_url: str = ""
    follow_redirects: bool = True

    # ===== Timeouts (seconds) =====
    connect_timeout: float = Field(default=10.0, gt=0)
    request_timeout: float = Field(default=10.0, gt=0)

    # ===== Retry =====
    max_attempts: int = Field(default=5, ge=1)
    retry_wait: float = Field(default=1.0, ge=0)

    # ===== Rate limiter =====
    rate_limit_enabled: bool = True
    permits_per_period: int = Field(default=5, ge=1)
    rate_limit_period: float = Field(default=1.0, gt=0)
    acquire_timeout: float = Field(default=1.0, ge=0)

    # ===== Logging =====
    log_level: str = "info"

    class Config:
        env_prefix = "RESILIENT_HTTP_"
        env_file = ".env"
        extra = "ignore"

    def to_client_config(self, **overrides) -> HttpClientConfig:
        """Convert to an HttpClientConfig, applying keyword overrides."""
        values = {
            "base_url": self.base_url,
            "follow_redirects": self.follow_redirects,
            "connect_timeout": self.connect_timeout,
            "request_timeout": self.request_timeout,
            "max_attempts": self.max_attempts,
            "retry_wait": self.retry_wait,
            "rate_limit_enabled": self.rate_limit_enabled,
            "permits_per_period": self.permits_per_period,
            "rate_limit_period": self.rate_limit_period,
            "acquire_timeout": self.acquire_timeout,
        }
        values.update(overrides)
        return HttpClientConfig(**values)


# Global settings instance
settings = Settings()
