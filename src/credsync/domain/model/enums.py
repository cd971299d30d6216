"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Source(StrEnum):
    """Provenance of an entity across the ledger and the database store."""

    MERGED = "merged"
    CHAIN_ONLY = "chain_only"
    DB_ONLY = "db_only"


class EntityKind(StrEnum):
    """Discriminator for cached views and invalidation keys."""

    COURSE = "course"
    MODULE = "module"
    COMMITMENT = "commitment"
    PROJECT = "project"
    TASK = "task"


class StatusKind(StrEnum):
    """Selects the status vocabulary a raw value is translated with."""

    MODULE = "module"
    COMMITMENT = "commitment"
    COMMITMENT_REVIEW = "commitment_review"
    TASK = "task"
    PROJECT = "project"
    COURSE = "course"
    ASSESSMENT = "assessment"


class ModuleStatus(StrEnum):
    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    PENDING_TX = "PENDING_TX"
    ON_CHAIN = "ON_CHAIN"


class CommitmentStatus(StrEnum):
    """Learner-facing commitment statuses."""

    DRAFT = "DRAFT"
    COMMITTED = "COMMITTED"
    AWAITING_SUBMISSION = "AWAITING_SUBMISSION"
    PENDING_TX_COMMITMENT_MADE = "PENDING_TX_COMMITMENT_MADE"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ASSIGNMENT_ACCEPTED = "ASSIGNMENT_ACCEPTED"
    ASSIGNMENT_REFUSED = "ASSIGNMENT_REFUSED"
    CREDENTIAL_CLAIMED = "CREDENTIAL_CLAIMED"
    LEFT = "LEFT"


class ReviewStatus(StrEnum):
    """Teacher-facing commitment statuses."""

    DRAFT = "DRAFT"
    COMMITTED = "COMMITTED"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACCEPTED = "ACCEPTED"
    DENIED = "DENIED"
    LEFT = "LEFT"
    UNKNOWN = "UNKNOWN"


class TaskStatus(StrEnum):
    DRAFT = "DRAFT"
    PENDING_TX = "PENDING_TX"
    ON_CHAIN = "ON_CHAIN"


class ProjectStatus(StrEnum):
    DRAFT = "draft"
    ACTIVE = "active"
    UNREGISTERED = "unregistered"


class CourseStatus(StrEnum):
    SYNCED = "synced"
    ONCHAIN_ONLY = "onchain_only"
    DB_ONLY = "db_only"


class AssessmentDecision(StrEnum):
    ACCEPTED = "ACCEPTED"
    REFUSED = "REFUSED"
    DENIED = "DENIED"


LOCKED_MODULE_STATUSES: frozenset[str] = frozenset(
    {ModuleStatus.APPROVED, ModuleStatus.PENDING_TX, ModuleStatus.ON_CHAIN}
)
