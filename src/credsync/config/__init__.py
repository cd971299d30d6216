"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .gateway import GatewayConfig, get_gateway_config, skip_partial_payloads
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import StorageConfig, get_http_cache_path, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "GatewayConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_gateway_config",
    "get_http_cache_path",
    "get_storage_config",
    "optional_env_var",
    "require_env_vars",
    "skip_partial_payloads",
]
