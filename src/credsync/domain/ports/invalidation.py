"""Cache invalidation signals emitted after successful writes."""

from __future__ import annotations

from collections.abc import Callable
from typing import NamedTuple

from credsync.domain.model import EntityKind


class InvalidationKey(NamedTuple):
    """Identifies a cached view. ``child_id=None`` addresses every list under the parent."""

    kind: EntityKind
    parent_id: str
    child_id: str | None = None


type InvalidationListener = Callable[[tuple[InvalidationKey, ...]], None]


def module_save_keys(course_id: str, module_code: str) -> tuple[InvalidationKey, ...]:
    """Views made stale by saving one module: its detail, the course's module lists and the course."""

    return (
        InvalidationKey(EntityKind.MODULE, course_id, module_code),
        InvalidationKey(EntityKind.MODULE, course_id),
        InvalidationKey(EntityKind.COURSE, course_id),
    )
