"""Public interface for the gateway adapter."""

from __future__ import annotations

from .client import GatewayClient
from .envelope import parse_envelope, unwrap_item, unwrap_list, validate_item, validate_items
from .schema import (
    CommitmentPayload,
    CourseModulePayload,
    CoursePayload,
    ProjectPayload,
    SaveModuleResponse,
    TaskPayload,
)
from .translator import (
    dedupe_tasks,
    translate_commitment,
    translate_course,
    translate_course_module,
    translate_project,
    translate_saved_module,
    translate_task,
)

__all__ = [
    "CommitmentPayload",
    "CourseModulePayload",
    "CoursePayload",
    "GatewayClient",
    "ProjectPayload",
    "SaveModuleResponse",
    "TaskPayload",
    "dedupe_tasks",
    "parse_envelope",
    "translate_commitment",
    "translate_course",
    "translate_course_module",
    "translate_project",
    "translate_saved_module",
    "translate_task",
    "unwrap_item",
    "unwrap_list",
    "validate_item",
    "validate_items",
]
