"""Translate store-native status values into the canonical display vocabulary.

Each ``StatusKind`` owns one table: raw aliases (including legacy values a
store may still emit during migrations) and a fallback keyed by provenance for
records that carry no status at all. Unknown raw values pass through
unchanged so new upstream statuses never break callers.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from credsync.domain.model import (
    AssessmentDecision,
    CommitmentStatus,
    CourseStatus,
    ModuleStatus,
    ProjectStatus,
    ReviewStatus,
    Source,
    StatusKind,
    TaskStatus,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class StatusTable:
    """Lookup rules for one status vocabulary."""

    aliases: Mapping[str, str]
    by_source: Mapping[Source | None, str] = field(default_factory=lambda: MappingProxyType({}))
    case_insensitive: bool = False
    # ordered (prefix, canonical) pairs tried after an exact alias miss
    prefixes: tuple[tuple[str, str], ...] = ()
    upper_unknown: bool = False

    def lookup(self, raw: str) -> str | None:
        key = raw.strip().upper() if self.case_insensitive else raw.strip()
        canonical = self.aliases.get(key)
        if canonical is not None:
            return canonical
        for prefix, value in self.prefixes:
            if key.startswith(prefix):
                return value
        return None

    def fallback(self, source: Source | None) -> str:
        return self.by_source.get(source, "")


def _table(
    aliases: Mapping[str, str],
    by_source: Mapping[Source | None, str] | None = None,
    *,
    case_insensitive: bool = False,
    prefixes: tuple[tuple[str, str], ...] = (),
    upper_unknown: bool = False,
) -> StatusTable:
    return StatusTable(
        aliases=MappingProxyType(dict(aliases)),
        by_source=MappingProxyType(dict(by_source or {})),
        case_insensitive=case_insensitive,
        prefixes=prefixes,
        upper_unknown=upper_unknown,
    )


MODULE_TABLE = _table(
    {
        "DRAFT": ModuleStatus.DRAFT,
        "APPROVED": ModuleStatus.APPROVED,
        "PENDING_TX": ModuleStatus.PENDING_TX,
        "ON_CHAIN": ModuleStatus.ON_CHAIN,
        "ACTIVE": ModuleStatus.ON_CHAIN,
    },
    {
        Source.MERGED: ModuleStatus.ON_CHAIN,
        Source.CHAIN_ONLY: ModuleStatus.ON_CHAIN,
        Source.DB_ONLY: ModuleStatus.DRAFT,
        None: ModuleStatus.DRAFT,
    },
    case_insensitive=True,
)

COMMITMENT_TABLE = _table(
    {
        "SUBMITTED": CommitmentStatus.PENDING_APPROVAL,
        "ACCEPTED": CommitmentStatus.ASSIGNMENT_ACCEPTED,
        "REFUSED": CommitmentStatus.ASSIGNMENT_REFUSED,
        # legacy
        "APPROVED": CommitmentStatus.ASSIGNMENT_ACCEPTED,
        "REJECTED": CommitmentStatus.ASSIGNMENT_REFUSED,
        "COMMITTED": CommitmentStatus.COMMITTED,
        "AWAITING_SUBMISSION": CommitmentStatus.AWAITING_SUBMISSION,
        "CREDENTIAL_CLAIMED": CommitmentStatus.CREDENTIAL_CLAIMED,
        "LEFT": CommitmentStatus.LEFT,
    },
    {
        Source.MERGED: CommitmentStatus.PENDING_APPROVAL,
        Source.CHAIN_ONLY: CommitmentStatus.PENDING_APPROVAL,
        Source.DB_ONLY: CommitmentStatus.DRAFT,
        None: CommitmentStatus.PENDING_APPROVAL,
    },
)

COMMITMENT_REVIEW_TABLE = _table(
    {
        "SUBMITTED": ReviewStatus.PENDING_APPROVAL,
        "ACCEPTED": ReviewStatus.ACCEPTED,
        "REFUSED": ReviewStatus.DENIED,
        "DRAFT": ReviewStatus.DRAFT,
        # legacy
        "APPROVED": ReviewStatus.ACCEPTED,
        "REJECTED": ReviewStatus.DENIED,
        "COMMITTED": ReviewStatus.COMMITTED,
        "AWAITING_SUBMISSION": ReviewStatus.COMMITTED,
        "LEFT": ReviewStatus.LEFT,
    },
    {
        Source.MERGED: ReviewStatus.PENDING_APPROVAL,
        Source.CHAIN_ONLY: ReviewStatus.PENDING_APPROVAL,
        Source.DB_ONLY: ReviewStatus.DRAFT,
        None: ReviewStatus.UNKNOWN,
    },
)

TASK_TABLE = _table(
    {
        "DRAFT": TaskStatus.DRAFT,
        "PENDING_TX": TaskStatus.PENDING_TX,
        "ON_CHAIN": TaskStatus.ON_CHAIN,
    },
    {
        Source.MERGED: TaskStatus.ON_CHAIN,
        Source.CHAIN_ONLY: TaskStatus.ON_CHAIN,
        Source.DB_ONLY: TaskStatus.DRAFT,
        None: TaskStatus.DRAFT,
    },
)

PROJECT_TABLE = _table(
    {status.value: status for status in ProjectStatus},
    {
        Source.MERGED: ProjectStatus.ACTIVE,
        Source.CHAIN_ONLY: ProjectStatus.UNREGISTERED,
        Source.DB_ONLY: ProjectStatus.DRAFT,
        None: ProjectStatus.DRAFT,
    },
)

COURSE_TABLE = _table(
    {status.value: status for status in CourseStatus},
    {
        Source.MERGED: CourseStatus.SYNCED,
        Source.CHAIN_ONLY: CourseStatus.ONCHAIN_ONLY,
        Source.DB_ONLY: CourseStatus.DB_ONLY,
    },
)

ASSESSMENT_TABLE = _table(
    {},
    case_insensitive=True,
    prefixes=(
        ("ACCEPT", AssessmentDecision.ACCEPTED),
        ("REFUSE", AssessmentDecision.REFUSED),
        ("DEN", AssessmentDecision.DENIED),
    ),
    upper_unknown=True,
)

STATUS_TABLES: Mapping[StatusKind, StatusTable] = MappingProxyType(
    {
        StatusKind.MODULE: MODULE_TABLE,
        StatusKind.COMMITMENT: COMMITMENT_TABLE,
        StatusKind.COMMITMENT_REVIEW: COMMITMENT_REVIEW_TABLE,
        StatusKind.TASK: TASK_TABLE,
        StatusKind.PROJECT: PROJECT_TABLE,
        StatusKind.COURSE: COURSE_TABLE,
        StatusKind.ASSESSMENT: ASSESSMENT_TABLE,
    }
)


def normalize(raw_status: str | None, kind: StatusKind, source: Source | None = None) -> str:
    """Map ``raw_status`` to the canonical status for ``kind``.

    An absent (or blank) raw status falls back to the value implied by
    ``source``. Unrecognised values are returned unchanged, upper-cased for
    tables that ask for it.
    """

    table = STATUS_TABLES[kind]
    if raw_status is None or not raw_status.strip():
        return str(table.fallback(source))
    canonical = table.lookup(raw_status)
    if canonical is None:
        log.debug("Passing through unknown %s status %r", kind, raw_status)
        return raw_status.strip().upper() if table.upper_unknown else raw_status
    return str(canonical)
