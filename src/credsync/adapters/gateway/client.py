"""HTTP transport for the gateway API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from credsync.adapters.http_resilience import ResilientClient
from credsync.domain.ports import TransportError, TransportResponse

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from credsync.config.gateway import GatewayConfig
    from credsync.config.http_resilience import ResilienceConfig
    from credsync.domain.ports import HttpMethod

log = getLogger(__name__)


def _decode(response: httpx.Response) -> object:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        log.warning(
            "Gateway returned a non-JSON body for %s %s (status %s)",
            response.request.method,
            response.request.url.path,
            response.status_code,
        )
        return None


class GatewayClient:
    """``Transport`` implementation over a ``ResilientClient``.

    Use as an async context manager to share one connection pool across
    requests; outside a context each ``fetch`` opens and closes its own client.
    """

    def __init__(
        self,
        *,
        config: GatewayConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> GatewayClient:
        self._client = self._client_factory(self._config.resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(
        self,
        path: str,
        *,
        method: HttpMethod = "GET",
        json: object = None,
    ) -> TransportResponse:
        client = self._client
        owned = client is None
        if client is None:
            client = self._client_factory(self._config.resilience)
        try:
            response = await client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            log.error(f"Gateway request {method} {path} failed: {exc}")
            raise TransportError(f"{method} {path} failed: {exc}") from exc
        finally:
            if owned:
                await client.aclose()

        log.debug("%s %s -> %s", method, path, response.status_code)
        return TransportResponse(
            status_code=response.status_code,
            payload=_decode(response),
            reason=response.reason_phrase,
        )
