"""Sync tuning read from environment variables."""

import os
from typing import Mapping, Optional
from pydantic import BaseModel, Field, ValidationError

from src.utils.errors import ConfigurationError


class SyncConfig(BaseModel):
    """Retry, debounce and simulated-service settings."""
    max_retries: int = Field(default=3, ge=0, description="Retries after the first failed fetch attempt")
    retry_base_delay_ms: int = Field(default=1000, ge=0, description="Backoff delay before the first retry")
    debounce_window_ms: int = Field(default=300, ge=0, description="Quiet window for filter-driven fetches")
    simulated_latency_ms: int = Field(default=800, ge=0, description="Simulated fetch/update latency")
    simulated_create_latency_ms: int = Field(default=1000, ge=0, description="Simulated create latency")
    simulated_failure_rate: float = Field(default=0.05, ge=0.0, le=1.0, description="Chance a simulated call fails")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SyncConfig":
        """Build a config from SYNC_* / SIMULATED_* environment variables."""
        env = os.environ if environ is None else environ
        mapping = {
            "max_retries": "SYNC_MAX_RETRIES",
            "retry_base_delay_ms": "SYNC_RETRY_BASE_DELAY_MS",
            "debounce_window_ms": "SYNC_DEBOUNCE_WINDOW_MS",
            "simulated_latency_ms": "SIMULATED_LATENCY_MS",
            "simulated_create_latency_ms": "SIMULATED_CREATE_LATENCY_MS",
            "simulated_failure_rate": "SIMULATED_FAILURE_RATE",
        }
        values = {field: env[var] for field, var in mapping.items() if env.get(var)}

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid sync configuration: {e}")
