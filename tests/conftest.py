from __future__ import annotations

import pytest

from tests.support.gateway_stub import GatewayStub


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "CREDSYNC_GATEWAY_URL",
        "CREDSYNC_API_KEY",
        "CREDSYNC_AUTH_TOKEN",
        "CREDSYNC_DATA_DIR",
        "CREDSYNC_CACHE_BACKEND",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def gateway_stub() -> GatewayStub:
    return GatewayStub()
