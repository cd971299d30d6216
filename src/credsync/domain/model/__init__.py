"""Canonical domain model for reconciled entities and module drafts."""

from __future__ import annotations

from .draft import (
    DeletedRecord,
    DraftStateError,
    ExistingRecord,
    LessonRecord,
    ModuleDraft,
    NewRecord,
    SingletonRecord,
    TargetRecord,
)
from .entities import (
    Commitment,
    CommitmentContent,
    CommitmentLedger,
    ContentBlock,
    Course,
    CourseContent,
    CourseLedger,
    CourseModule,
    LearningTarget,
    Lesson,
    ModuleContent,
    ModuleLedger,
    Project,
    ProjectContent,
    ProjectLedger,
    ProjectPrerequisite,
    Task,
    TaskAssessment,
    TaskContent,
    TaskLedger,
    TaskToken,
    decode_hex_text,
    is_locked_status,
)
from .enums import (
    LOCKED_MODULE_STATUSES,
    AssessmentDecision,
    CommitmentStatus,
    CourseStatus,
    EntityKind,
    ModuleStatus,
    ProjectStatus,
    ReviewStatus,
    Source,
    StatusKind,
    TaskStatus,
)
from .provenance import Provenanced

__all__ = [
    "LOCKED_MODULE_STATUSES",
    "AssessmentDecision",
    "Commitment",
    "CommitmentContent",
    "CommitmentLedger",
    "CommitmentStatus",
    "ContentBlock",
    "Course",
    "CourseContent",
    "CourseLedger",
    "CourseModule",
    "CourseStatus",
    "DeletedRecord",
    "DraftStateError",
    "EntityKind",
    "ExistingRecord",
    "LearningTarget",
    "Lesson",
    "LessonRecord",
    "ModuleContent",
    "ModuleDraft",
    "ModuleLedger",
    "ModuleStatus",
    "NewRecord",
    "Project",
    "ProjectContent",
    "ProjectLedger",
    "ProjectPrerequisite",
    "ProjectStatus",
    "Provenanced",
    "ReviewStatus",
    "SingletonRecord",
    "Source",
    "StatusKind",
    "Task",
    "TaskAssessment",
    "TaskContent",
    "TaskLedger",
    "TaskStatus",
    "TaskToken",
    "TargetRecord",
    "decode_hex_text",
    "is_locked_status",
]
