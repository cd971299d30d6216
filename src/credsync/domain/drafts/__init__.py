"""Module draft editing, diffing and learning-target hashing."""

from __future__ import annotations

from .diff import BlockInput, LessonInput, ModuleUpdateRequest, TargetInput, build_request
from .hashing import compute_slt_hash, encode_targets, is_valid_slt_hash, verify_slt_hash
from .session import DraftSession, SaveOutcome, is_dirty, open_draft

__all__ = [
    "BlockInput",
    "DraftSession",
    "LessonInput",
    "ModuleUpdateRequest",
    "SaveOutcome",
    "TargetInput",
    "build_request",
    "compute_slt_hash",
    "encode_targets",
    "is_dirty",
    "is_valid_slt_hash",
    "open_draft",
    "verify_slt_hash",
]
