"""Remote API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_float_env, require_env_var
from .http_resilience import ResilienceConfig, RetryPolicy

API_BASE_URL_ENV = "REMODEL_API_BASE_URL"
API_TIMEOUT_ENV = "REMODEL_API_TIMEOUT"
API_TIMEOUT_SECONDS = 30.0
DEFAULT_HEADERS = {"Accept": "application/json"}


@dataclass(frozen=True)
class ApiConfig:
    """Holds the remote API connection settings."""

    resilience: ResilienceConfig

    @property
    def base_url(self) -> str | None:
        return self.resilience.base_url


def get_api_config(
    *,
    retry: RetryPolicy | None = None,
    headers: dict[str, str] | None = None,
) -> ApiConfig:
    base_url = require_env_var(API_BASE_URL_ENV)
    timeout = optional_float_env(API_TIMEOUT_ENV, API_TIMEOUT_SECONDS)
    return ApiConfig(
        resilience=ResilienceConfig(
            name="remodel",
            base_url=base_url.rstrip("/") + "/",
            timeout_seconds=timeout,
            retry=retry or RetryPolicy(),
            default_headers={**DEFAULT_HEADERS, **(headers or {})},
        )
    )
