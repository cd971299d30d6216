from __future__ import annotations

import asyncio
import json
from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from credsync.adapters.gateway import GatewayClient
from credsync.adapters.http_resilience import ResilientClient
from credsync.config import GatewayConfig, ResilienceConfig
from credsync.config.gateway import gateway_headers
from credsync.domain.ports import Transport, TransportError

BASE_URL = "https://gateway.test/api/v2/"


def _config() -> GatewayConfig:
    return GatewayConfig(
        base_url=BASE_URL,
        api_key="key-123",
        resilience=ResilienceConfig(
            name="gateway-test",
            base_url=BASE_URL,
            cache=None,
            default_headers=gateway_headers("key-123", "jwt"),
        ),
    )


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
    created: list[ResilientClient] | None = None,
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=resilience.base_url or "",
            headers=dict(resilience.default_headers or {}),
            transport=httpx.MockTransport(async_handler),
        )
        if created is not None:
            created.append(client)
        return client

    return factory


def test_gateway_client_implements_transport() -> None:
    assert isinstance(GatewayClient(config=_config()), Transport)


def test_fetch_get_decodes_json_and_sends_auth_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": [{"course_id": "c1"}]})

    client = GatewayClient(config=_config(), client_factory=_make_client_factory(handler))

    response = asyncio.run(client.fetch("/course/user/modules/c1"))

    assert response.ok
    assert response.payload == {"data": [{"course_id": "c1"}]}
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/v2/course/user/modules/c1"
    assert seen[0].headers["X-API-Key"] == "key-123"
    assert seen[0].headers["Authorization"] == "Bearer jwt"


def test_fetch_post_sends_json_body() -> None:
    bodies: list[object] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=[])

    client = GatewayClient(config=_config(), client_factory=_make_client_factory(handler))

    asyncio.run(
        client.fetch("/project/user/tasks/list", method="POST", json={"project_id": "p1"})
    )

    assert bodies == [{"project_id": "p1"}]


def test_fetch_returns_error_statuses_without_raising() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "not found"})

    client = GatewayClient(config=_config(), client_factory=_make_client_factory(handler))

    response = asyncio.run(client.fetch("/project/user/project/missing"))

    assert response.not_found
    assert not response.ok
    assert response.payload == {"error": "not found"}
    assert response.reason == "Not Found"


def test_fetch_tolerates_empty_and_non_json_bodies() -> None:
    bodies = iter([b"", b"<html>oops</html>"])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, content=next(bodies))

    client = GatewayClient(config=_config(), client_factory=_make_client_factory(handler))

    first = asyncio.run(client.fetch("/course/teacher/courses/list", method="POST", json={}))
    second = asyncio.run(client.fetch("/course/teacher/courses/list", method="POST", json={}))

    assert first.payload is None
    assert second.payload is None
    assert second.status_code == 502


def test_network_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = GatewayClient(config=_config(), client_factory=_make_client_factory(handler))

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(client.fetch("/project/user/projects/list"))

    assert excinfo.value.status_code is None
    assert "connection refused" in str(excinfo.value)


def test_context_manager_shares_one_client() -> None:
    created: list[ResilientClient] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    client = GatewayClient(
        config=_config(), client_factory=_make_client_factory(handler, created)
    )

    async def run() -> None:
        async with client:
            await client.fetch("/project/user/projects/list")
            await client.fetch("/project/user/projects/list")

    asyncio.run(run())

    assert len(created) == 1


def test_fetch_outside_context_uses_a_client_per_call() -> None:
    created: list[ResilientClient] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    client = GatewayClient(
        config=_config(), client_factory=_make_client_factory(handler, created)
    )

    asyncio.run(client.fetch("/project/user/projects/list"))
    asyncio.run(client.fetch("/project/user/projects/list"))

    assert len(created) == 2
