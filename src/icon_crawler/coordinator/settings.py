from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .policy import RetryPolicy


class CoordinatorRuntimeSettings(BaseSettings):
    """Environment-driven knobs for the crawl pipeline.

    COORDINATOR_CAPACITY=100
    COORDINATOR_WORKERS=10
    COORDINATOR_RETRY_INTERVAL_MS=1000
    FETCH_TIMEOUT_SEC=30
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    coordinator_capacity: int = Field(100, gt=0)
    coordinator_workers: int = Field(10, gt=0)
    coordinator_retry_interval_ms: int = Field(1000, ge=0)
    coordinator_retry_multiplier: float = Field(1.0, ge=1.0)
    coordinator_retry_max_ms: int = Field(1000, ge=0)
    coordinator_id: str = "crawl"

    fetch_timeout_sec: float = Field(30.0, gt=0)
    fetch_user_agent: str = "Mozilla/5.0 (compatible; univ-icon-crawler/1.0)"
    fetch_max_connections: int = Field(20, gt=0)

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            initial_backoff_ms=self.coordinator_retry_interval_ms,
            max_backoff_ms=max(self.coordinator_retry_max_ms, self.coordinator_retry_interval_ms),
            backoff_multiplier=self.coordinator_retry_multiplier,
        )
