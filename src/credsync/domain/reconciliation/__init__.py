"""Provenance classification, status normalization and status priority."""

from __future__ import annotations

from .classify import classify, parse_source, resolve_source
from .priority import COMMITMENT_PRIORITY, PriorityTable, resolve, resolve_by_parent
from .status import STATUS_TABLES, StatusTable, normalize

__all__ = [
    "COMMITMENT_PRIORITY",
    "STATUS_TABLES",
    "PriorityTable",
    "StatusTable",
    "classify",
    "normalize",
    "parse_source",
    "resolve",
    "resolve_by_parent",
    "resolve_source",
]
