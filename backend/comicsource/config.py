"""Application configuration via Pydantic Settings."""

from typing import List
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Proxy collaborator
    # Comma-separated list of HTML proxy endpoints, called as <endpoint>?url=<target>.
    # An empty string disables the proxy stage of every fetch strategy.
    PROXY_URL: str = ""

    # Fetching
    DIRECT_TIMEOUT_SECONDS: float = 10.0
    PROXY_TIMEOUT_SECONDS: float = 20.0
    FETCH_RETRY_ATTEMPTS: int = 3
    FETCH_RETRY_DELAY_SECONDS: float = 1.0
    DETAIL_FETCH_DELAY_SECONDS: float = 0.3  # Between serial per-result fetches
    USER_AGENT: str = ""  # Empty rotates through realistic browser agents

    # Health probing
    HEALTH_PROBE_TIMEOUT_SECONDS: float = 10.0
    HEALTH_CACHE_TTL_SECONDS: int = 5 * 60  # 5 minutes
    HEALTH_SINGLE_FLIGHT: bool = True

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    @model_validator(mode="after")
    def clamp_retry_attempts(self) -> "Settings":
        """A retrying strategy always makes at least one attempt."""
        if self.FETCH_RETRY_ATTEMPTS < 1:
            self.FETCH_RETRY_ATTEMPTS = 1
        return self

    def get_proxy_list(self) -> List[str]:
        """Parse PROXY_URL into a list of proxy endpoints.

        Returns:
            List of proxy endpoint URLs, empty if PROXY_URL is not set
        """
        if not self.PROXY_URL:
            return []
        return [p.strip() for p in self.PROXY_URL.split(",") if p.strip()]


settings = Settings()
