from __future__ import annotations

import pytest

from credsync.domain.model import Source, StatusKind
from credsync.domain.reconciliation import normalize


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("DRAFT", "DRAFT"),
        ("APPROVED", "APPROVED"),
        ("PENDING_TX", "PENDING_TX"),
        ("ON_CHAIN", "ON_CHAIN"),
        ("ACTIVE", "ON_CHAIN"),
        ("active", "ON_CHAIN"),
        ("approved", "APPROVED"),
    ],
)
def test_module_statuses(raw: str, expected: str) -> None:
    assert normalize(raw, StatusKind.MODULE, Source.DB_ONLY) == expected


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        (Source.MERGED, "ON_CHAIN"),
        (Source.CHAIN_ONLY, "ON_CHAIN"),
        (Source.DB_ONLY, "DRAFT"),
        (None, "DRAFT"),
    ],
)
def test_module_status_falls_back_to_source(source: Source | None, expected: str) -> None:
    assert normalize(None, StatusKind.MODULE, source) == expected
    assert normalize("  ", StatusKind.MODULE, source) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("SUBMITTED", "PENDING_APPROVAL"),
        ("ACCEPTED", "ASSIGNMENT_ACCEPTED"),
        ("REFUSED", "ASSIGNMENT_REFUSED"),
        ("APPROVED", "ASSIGNMENT_ACCEPTED"),
        ("REJECTED", "ASSIGNMENT_REFUSED"),
        ("COMMITTED", "COMMITTED"),
        ("AWAITING_SUBMISSION", "AWAITING_SUBMISSION"),
        ("CREDENTIAL_CLAIMED", "CREDENTIAL_CLAIMED"),
        ("LEFT", "LEFT"),
    ],
)
def test_learner_commitment_statuses(raw: str, expected: str) -> None:
    assert normalize(raw, StatusKind.COMMITMENT, Source.MERGED) == expected


def test_learner_commitment_without_status() -> None:
    assert normalize(None, StatusKind.COMMITMENT, Source.CHAIN_ONLY) == "PENDING_APPROVAL"
    assert normalize(None, StatusKind.COMMITMENT, Source.DB_ONLY) == "DRAFT"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("SUBMITTED", "PENDING_APPROVAL"),
        ("ACCEPTED", "ACCEPTED"),
        ("REFUSED", "DENIED"),
        ("DRAFT", "DRAFT"),
        ("APPROVED", "ACCEPTED"),
        ("REJECTED", "DENIED"),
        ("AWAITING_SUBMISSION", "COMMITTED"),
        ("LEFT", "LEFT"),
    ],
)
def test_review_commitment_statuses(raw: str, expected: str) -> None:
    assert normalize(raw, StatusKind.COMMITMENT_REVIEW, Source.MERGED) == expected


def test_review_commitment_without_status_or_source() -> None:
    assert normalize(None, StatusKind.COMMITMENT_REVIEW) == "UNKNOWN"


def test_task_and_project_fallbacks() -> None:
    assert normalize(None, StatusKind.TASK, Source.MERGED) == "ON_CHAIN"
    assert normalize(None, StatusKind.TASK, Source.DB_ONLY) == "DRAFT"
    assert normalize(None, StatusKind.PROJECT, Source.MERGED) == "active"
    assert normalize(None, StatusKind.PROJECT, Source.CHAIN_ONLY) == "unregistered"
    assert normalize(None, StatusKind.PROJECT, Source.DB_ONLY) == "draft"


def test_course_status_follows_source() -> None:
    assert normalize(None, StatusKind.COURSE, Source.MERGED) == "synced"
    assert normalize(None, StatusKind.COURSE, Source.CHAIN_ONLY) == "onchain_only"
    assert normalize(None, StatusKind.COURSE, Source.DB_ONLY) == "db_only"
    assert normalize(None, StatusKind.COURSE) == ""


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("accept", "ACCEPTED"),
        ("Accepted", "ACCEPTED"),
        ("refuse", "REFUSED"),
        ("DENY", "DENIED"),
        ("Accepting", "ACCEPTED"),
        ("refused_by_manager", "REFUSED"),
        ("Denial", "DENIED"),
        (" pending ", "PENDING"),
    ],
)
def test_assessment_decisions(raw: str, expected: str) -> None:
    assert normalize(raw, StatusKind.ASSESSMENT) == expected


@pytest.mark.parametrize("kind", list(StatusKind))
def test_unknown_status_passes_through(kind: StatusKind) -> None:
    assert normalize("SOMETHING_NEW", kind, Source.MERGED) == "SOMETHING_NEW"


def test_store_specific_spelling_is_not_guessed() -> None:
    # learner vocabulary matches case-sensitively
    assert normalize("submitted", StatusKind.COMMITMENT, Source.MERGED) == "submitted"
