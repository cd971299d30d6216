"""Port for talking to the gateway that fronts both stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

type HttpMethod = Literal["GET", "POST"]


class TransportError(RuntimeError):
    """Network failure or unexpected HTTP status from the gateway."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """Decoded gateway response. ``payload`` is the parsed JSON body or ``None``."""

    status_code: int
    payload: object = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


@runtime_checkable
class Transport(Protocol):
    """Async request port.

    Implementations own timeouts, retries, rate limiting and caching. They
    return non-2xx responses as ``TransportResponse`` and raise
    ``TransportError`` only when no response was received.
    """

    async def fetch(
        self,
        path: str,
        *,
        method: HttpMethod = "GET",
        json: object = None,
    ) -> TransportResponse: ...
