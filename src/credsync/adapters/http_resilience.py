"""Async HTTP client with read retries, client-side rate limiting and a short-lived cache."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from credsync.config.storage import get_http_cache_path

if TYPE_CHECKING:
    from types import TracebackType

    from credsync.config.http_resilience import (
        CacheConfig,
        ResilienceConfig,
        RetryPolicy,
        ShouldCacheHook,
    )

log = logging.getLogger(__name__)


class ResilientClient:
    """Wraps one ``httpx.AsyncClient`` (or hishel ``AsyncCacheClient``) built from a ``ResilienceConfig``.

    Retries happen inside the transport, so a caller sees either the final
    response or the final ``httpx.HTTPError``.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        limit = config.ratelimit
        self._limiter = AsyncLimiter(limit.max_calls, limit.per_seconds) if limit else None

        options = _client_options(config)
        storage, policy = _build_cache_components(config.cache)
        self._client: httpx.AsyncClient
        if storage is None:
            self._client = httpx.AsyncClient(**options)
        else:
            self._client = AsyncCacheClient(**options, storage=storage, policy=policy)
        log.debug(
            "Created HTTP client %r (cache=%s, ratelimit=%s)",
            config.name,
            storage is not None,
            limit,
        )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, url: str, *, json: object = None) -> httpx.Response:
        if self._limiter is None:
            return await self._client.request(method, url, json=json)
        async with self._limiter:
            return await self._client.request(method, url, json=json)


def _client_options(config: ResilienceConfig) -> dict[str, Any]:
    options: dict[str, Any] = {
        "timeout": config.timeout_seconds,
        "transport": RetryTransport(retry=_build_retry(config.retry)),
    }
    if config.base_url is not None:
        options["base_url"] = config.base_url
    if config.default_headers:
        options["headers"] = dict(config.default_headers)
    return options


def _build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


class _ShouldCacheResponseFilter(BaseFilter[HishelCacheResponse]):
    """Lets hishel store a response only when the JSON body passes ``predicate``.

    Bodies that are missing or not JSON are left to hishel's default rules.
    """

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if body is None:
            return True
        try:
            payload = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError):
            return True
        return bool(self._predicate(payload))


def _build_cache_components(
    config: CacheConfig | None,
) -> tuple[AsyncSqliteStorage | None, FilterPolicy | None]:
    if config is None or not config.enabled:
        return None, None
    if config.backend == "memory":
        database_path = ":memory:"
    elif config.backend == "sqlite":
        database_path = config.sqlite_path or str(get_http_cache_path())
    else:
        raise ValueError(f"Unsupported cache backend: {config.backend}")

    storage = AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )
    if config.should_cache is None:
        return storage, None
    return storage, FilterPolicy(response_filters=[_ShouldCacheResponseFilter(config.should_cache)])
