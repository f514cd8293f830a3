"""Application configuration helpers."""

from __future__ import annotations

from .api import ApiConfig, get_api_config
from .env import optional_float_env, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import ResilienceConfig, RetryPolicy

__all__ = [
    "ApiConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "ResilienceConfig",
    "RetryPolicy",
    "get_api_config",
    "optional_float_env",
    "require_env_var",
    "require_env_vars",
]
