"""Environment variable access. Values are stripped; blank counts as unset."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def optional_env_var(name: str) -> str | None:
    value = (os.getenv(name) or "").strip()
    return value or None


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Read every name in ``names``; raise once, listing all that are missing."""

    found = {name: optional_env_var(name) for name in names}
    missing = [name for name, value in found.items() if value is None]
    if missing:
        raise MissingConfigurationError(missing)
    return {name: value for name, value in found.items() if value is not None}
