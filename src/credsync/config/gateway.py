"""Gateway API configuration values."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import cast

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import (
    CacheBackend,
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    ShouldCacheHook,
)

GATEWAY_TIMEOUT_SECONDS = 15.0
API_KEY_HEADER = "X-API-Key"
CACHE_BACKENDS: tuple[CacheBackend, ...] = ("memory", "sqlite")


def skip_partial_payloads(payload: object) -> bool:
    """Cache predicate: responses flagged with a partial-data ``warning`` are not cached."""

    if isinstance(payload, Mapping):
        return not cast(Mapping[str, object], payload).get("warning")
    return True


@dataclass(frozen=True, slots=True)
class GatewayConfig:
    """Holds gateway API configuration values."""

    base_url: str
    api_key: str
    resilience: ResilienceConfig
    auth_token: str | None = None


def gateway_headers(api_key: str, auth_token: str | None = None) -> dict[str, str]:
    headers = {API_KEY_HEADER: api_key, "Accept": "application/json"}
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    return headers


def get_gateway_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = skip_partial_payloads,
) -> GatewayConfig:
    values = require_env_vars(("CREDSYNC_GATEWAY_URL", "CREDSYNC_API_KEY"))
    base_url = values["CREDSYNC_GATEWAY_URL"].rstrip("/") + "/"
    if not base_url.startswith(("http://", "https://")):
        raise ConfigurationError(f"CREDSYNC_GATEWAY_URL must be an http(s) URL, got {base_url!r}")
    api_key = values["CREDSYNC_API_KEY"]
    auth_token = optional_env_var("CREDSYNC_AUTH_TOKEN")
    backend = _cache_backend()
    return GatewayConfig(
        base_url=base_url,
        api_key=api_key,
        auth_token=auth_token,
        resilience=resilience
        or ResilienceConfig(
            name="gateway",
            base_url=base_url,
            timeout_seconds=GATEWAY_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            retry=RetryPolicy(total=3),
            cache=CacheConfig(backend=backend, should_cache=cache_predicate),
            default_headers=gateway_headers(api_key, auth_token),
        ),
    )


def _cache_backend() -> CacheBackend:
    """``CREDSYNC_CACHE_BACKEND``: ``memory`` (default) or ``sqlite`` under the data dir."""

    raw = (optional_env_var("CREDSYNC_CACHE_BACKEND") or "memory").lower()
    for backend in CACHE_BACKENDS:
        if raw == backend:
            return backend
    raise ConfigurationError(
        f"CREDSYNC_CACHE_BACKEND must be one of {', '.join(CACHE_BACKENDS)}, got {raw!r}"
    )
