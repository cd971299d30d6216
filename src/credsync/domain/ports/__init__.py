"""Domain port definitions for adapters."""

from __future__ import annotations

from .invalidation import InvalidationKey, InvalidationListener, module_save_keys
from .transport import HttpMethod, Transport, TransportError, TransportResponse

__all__ = [
    "HttpMethod",
    "InvalidationKey",
    "InvalidationListener",
    "Transport",
    "TransportError",
    "TransportResponse",
    "module_save_keys",
]
