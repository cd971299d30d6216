"""Canonical entities handed to presentation code.

Each entity pairs a ledger-side payload (identity, rewards, completion) with a
database-side payload (rich content). Either side may be missing; ``source``
says which.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import LOCKED_MODULE_STATUSES
from .provenance import Provenanced


def is_locked_status(status: str | None) -> bool:
    """Return whether a module status means learning targets are frozen."""

    if not status:
        return False
    normalized = status.strip().upper()
    if normalized == "ACTIVE":
        return True
    return normalized in LOCKED_MODULE_STATUSES


def decode_hex_text(value: str | None) -> str:
    """Decode hex-encoded on-chain content to text; undecodable input yields ``""``."""

    if not value:
        return ""
    try:
        return bytes.fromhex(value).decode("utf-8")
    except ValueError:
        return ""


# ---------------------------------------------------------------------------
# Shared content pieces
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class ContentBlock:
    """Rich content for a module assignment or introduction."""

    title: str = ""
    description: str | None = None
    content_json: object = None
    image_url: str | None = None
    video_url: str | None = None
    id: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Lesson:
    slt_index: int
    title: str = ""
    description: str | None = None
    content_json: object = None
    image_url: str | None = None
    video_url: str | None = None
    id: int | None = None
    is_live: bool | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class LearningTarget:
    """A student learning target ("I can ..." statement) at a 1-based position."""

    index: int
    text: str
    id: int | None = None
    lesson: Lesson | None = None


# ---------------------------------------------------------------------------
# Course modules
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class ModuleLedger:
    slt_hash: str
    created_by: str | None = None
    prerequisites: tuple[str, ...] = ()
    on_chain_slts: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class ModuleContent:
    module_code: str
    title: str = ""
    description: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    is_live: bool | None = None
    raw_status: str | None = None
    slt_hash: str | None = None
    slts: tuple[LearningTarget, ...] = ()
    assignment: ContentBlock | None = None
    introduction: ContentBlock | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CourseModule(Provenanced[ModuleLedger, ModuleContent]):
    course_id: str
    status: str

    @property
    def slt_hash(self) -> str | None:
        if self.ledger is not None:
            return self.ledger.slt_hash
        if self.content is not None:
            return self.content.slt_hash
        return None

    @property
    def module_code(self) -> str | None:
        return self.content.module_code if self.content is not None else None

    @property
    def title(self) -> str:
        return self.content.title if self.content is not None else ""

    @property
    def slts(self) -> tuple[LearningTarget, ...]:
        return self.content.slts if self.content is not None else ()

    @property
    def slts_locked(self) -> bool:
        return is_locked_status(self.status)


# ---------------------------------------------------------------------------
# Assignment commitments
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class CommitmentLedger:
    on_chain_status: str | None = None
    on_chain_content: str | None = None
    submission_tx: str | None = None
    submission_slot: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CommitmentContent:
    raw_status: str | None = None
    evidence: object = None
    evidence_hash: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Commitment(Provenanced[CommitmentLedger, CommitmentContent]):
    course_id: str
    module_code: str
    status: str
    slt_hash: str | None = None
    student_alias: str | None = None

    @property
    def evidence_hash(self) -> str | None:
        if self.content is not None and self.content.evidence_hash:
            return self.content.evidence_hash
        if self.ledger is not None:
            return self.ledger.on_chain_content
        return None


# ---------------------------------------------------------------------------
# Projects and tasks
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class TaskToken:
    policy_id: str
    asset_name: str
    quantity: int


@dataclass(frozen=True, slots=True, kw_only=True)
class TaskLedger:
    lovelace_amount: int = 0
    expiration_posix: int | None = None
    created_by: str | None = None
    on_chain_content: str | None = None
    contributor_state_id: str | None = None
    tokens: tuple[TaskToken, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class TaskContent:
    title: str = ""
    description: str = ""
    content_json: object = None
    image_url: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Task(Provenanced[TaskLedger, TaskContent]):
    project_id: str
    task_hash: str
    status: str
    lifecycle: str
    index: int | None = None

    @property
    def title(self) -> str:
        if self.content is not None and self.content.title:
            return self.content.title
        if self.ledger is not None:
            return decode_hex_text(self.ledger.on_chain_content)
        return ""


@dataclass(frozen=True, slots=True, kw_only=True)
class ProjectPrerequisite:
    course_id: str
    slt_hashes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class ProjectLedger:
    owner: str | None = None
    managers: tuple[str, ...] = ()
    treasury_address: str | None = None
    contributor_state_id: str | None = None
    prerequisites: tuple[ProjectPrerequisite, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class ProjectContent:
    title: str = ""
    description: str = ""
    image_url: str | None = None
    video_url: str | None = None
    category: str | None = None
    is_public: bool | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class TaskAssessment:
    """A manager decision on a task submission, recorded on the ledger."""

    task_hash: str
    assessed_by: str
    decision: str
    tx: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Project(Provenanced[ProjectLedger, ProjectContent]):
    project_id: str
    status: str
    tasks: tuple[Task, ...] = field(default=())
    assessments: tuple[TaskAssessment, ...] = field(default=())

    @property
    def title(self) -> str:
        return self.content.title if self.content is not None else ""


# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class CourseLedger:
    owner: str | None = None
    teachers: tuple[str, ...] = ()
    course_address: str | None = None
    student_state_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CourseContent:
    title: str = ""
    description: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    is_live: bool | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Course(Provenanced[CourseLedger, CourseContent]):
    course_id: str
    status: str

    @property
    def title(self) -> str:
        return self.content.title if self.content is not None else ""
