"""Pick one representative status from several per-item statuses."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Mapping
from types import MappingProxyType

from credsync.domain.model import CommitmentStatus

type PriorityTable = Mapping[str, int]

COMMITMENT_PRIORITY: PriorityTable = MappingProxyType(
    {
        CommitmentStatus.ASSIGNMENT_REFUSED: 0,
        CommitmentStatus.PENDING_TX_COMMITMENT_MADE: 1,
        CommitmentStatus.PENDING_APPROVAL: 2,
        CommitmentStatus.ASSIGNMENT_ACCEPTED: 3,
    }
)


def resolve(statuses: Iterable[str], priority: PriorityTable = COMMITMENT_PRIORITY) -> str | None:
    """Return the highest-priority status, or ``None`` for no statuses.

    Statuses missing from ``priority`` rank 0. On equal rank the first status
    seen wins.
    """

    best: str | None = None
    best_rank = -1
    for status in statuses:
        rank = priority.get(status, 0)
        if rank > best_rank:
            best, best_rank = status, rank
    return best


def resolve_by_parent[T, K: Hashable](
    items: Iterable[T],
    *,
    key: Callable[[T], K],
    status: Callable[[T], str],
    priority: PriorityTable = COMMITMENT_PRIORITY,
) -> dict[K, str]:
    """Group ``items`` by parent key and resolve one status per group."""

    grouped: dict[K, list[str]] = {}
    for item in items:
        grouped.setdefault(key(item), []).append(status(item))
    resolved: dict[K, str] = {}
    for parent, group in grouped.items():
        winner = resolve(group, priority)
        if winner is not None:
            resolved[parent] = winner
    return resolved
