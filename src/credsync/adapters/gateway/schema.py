"""Pydantic models describing the gateway's merged ledger/database payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _text_or_none(value: object) -> object:
    if value is None or isinstance(value, str):
        return _blank_to_none(value)
    return str(value)


def _none_to_empty_list(value: object) -> object:
    return [] if value is None else value


def _none_to_empty_str(value: object) -> object:
    return "" if value is None else value


def _none_to_zero(value: object) -> object:
    return 0 if value is None else value


class GatewayBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ---------------------------------------------------------------------------
# Course modules
# ---------------------------------------------------------------------------


class LessonPayload(GatewayBaseModel):
    id: int | None = None
    slt_index: int | None = None
    title: str = ""
    description: str | None = None
    content_json: Any = None
    image_url: str | None = None
    video_url: str | None = None
    is_live: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_lesson_content(cls, value: object) -> object:
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[str, object], value)
            if "content_json" not in mapping_value and "lesson_content" in mapping_value:
                data = dict(mapping_value)
                data["content_json"] = data.pop("lesson_content")
                return data
        return value

    _normalize_title = field_validator("title", mode="before")(_none_to_empty_str)


class SltPayload(GatewayBaseModel):
    id: int | None = None
    slt_text: str = ""
    module_index: int | None = None
    slt_index: int | None = None
    lesson: LessonPayload | None = None

    @property
    def position(self) -> int | None:
        return self.module_index if self.module_index is not None else self.slt_index


class ContentBlockPayload(GatewayBaseModel):
    id: int | None = None
    title: str | None = None
    description: str | None = None
    content_json: Any = None
    image_url: str | None = None
    video_url: str | None = None


class ModuleContentPayload(GatewayBaseModel):
    course_module_code: str | None = None
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    is_live: bool | None = None
    module_status: str | None = None
    slt_hash: str | None = None
    slts: list[SltPayload] = Field(default_factory=list)
    assignment: ContentBlockPayload | None = None
    introduction: ContentBlockPayload | None = None

    _normalize_slts = field_validator("slts", mode="before")(_none_to_empty_list)
    _normalize_code = field_validator("course_module_code", mode="before")(_blank_to_none)


class CourseModulePayload(GatewayBaseModel):
    course_id: str | None = None
    slt_hash: str | None = None
    created_by: str | None = None
    prerequisites: list[str] = Field(default_factory=list)
    on_chain_slts: list[str] = Field(default_factory=list)
    source: str | None = None
    content: ModuleContentPayload | None = None

    _normalize_lists = field_validator("prerequisites", "on_chain_slts", mode="before")(
        _none_to_empty_list
    )
    _normalize_hash = field_validator("slt_hash", mode="before")(_blank_to_none)


# ---------------------------------------------------------------------------
# Module draft save
# ---------------------------------------------------------------------------


class SavedSltPayload(GatewayBaseModel):
    slt_index: int
    slt_text: str
    created_by_alias: str | None = None


class SavedModulePayload(GatewayBaseModel):
    """Module echo returned by the aggregate update endpoint (flat, database-shaped)."""

    course_module_code: str
    course_id: str
    title: str = ""
    description: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    status: str | None = None
    slt_hash: str | None = None
    slts: list[SavedSltPayload] = Field(default_factory=list)
    assignment: ContentBlockPayload | None = None
    introduction: ContentBlockPayload | None = None
    lessons: list[LessonPayload] = Field(default_factory=list)

    _normalize_lists = field_validator("slts", "lessons", mode="before")(_none_to_empty_list)


class ChangesPayload(GatewayBaseModel):
    module_updated: bool = False
    status_changed: bool = False
    slts_created: int = 0
    slts_updated: int = 0
    slts_deleted: int = 0
    slts_reordered: bool = False
    assignment_created: bool = False
    assignment_updated: bool = False
    assignment_deleted: bool = False
    introduction_created: bool = False
    introduction_updated: bool = False
    introduction_deleted: bool = False
    lessons_created: int = 0
    lessons_updated: int = 0
    lessons_deleted: int = 0


class SaveModuleResponse(GatewayBaseModel):
    """Outcome of a module save.

    ``data`` and ``changes`` stay raw and are validated separately, so a
    malformed echo cannot hide ``error`` or ``code``.
    """

    data: object = None
    changes: object = None
    error: str | None = None
    message: str | None = None
    code: str | None = None

    _normalize_error = field_validator("error", "message", "code", mode="before")(_text_or_none)


# ---------------------------------------------------------------------------
# Assignment commitments
# ---------------------------------------------------------------------------


class CommitmentContentPayload(GatewayBaseModel):
    commitment_status: str | None = None
    evidence: Any = None
    assignment_evidence_hash: str | None = None


class CommitmentPayload(GatewayBaseModel):
    """Learner or teacher commitment; database fields may be flat or nested under ``content``."""

    course_id: str | None = None
    course_module_code: str | None = None
    slt_hash: str | None = None
    student_alias: str | None = None
    on_chain_status: str | None = None
    on_chain_content: str | None = None
    submission_tx: str | None = None
    submission_slot: int | None = None
    commitment_status: str | None = None
    evidence: Any = None
    assignment_evidence_hash: str | None = None
    source: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_content(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        data: dict[str, object] = dict(cast(Mapping[str, object], value))
        content = data.pop("content", None)
        if isinstance(content, Mapping):
            nested = CommitmentContentPayload.model_validate(content)
            for key, nested_value in nested.model_dump().items():
                if data.get(key) is None and nested_value is not None:
                    data[key] = nested_value
        return data

    _normalize_blank = field_validator(
        "on_chain_status", "on_chain_content", "commitment_status", mode="before"
    )(_blank_to_none)

    @property
    def has_ledger_payload(self) -> bool:
        return bool(self.on_chain_status or self.on_chain_content)

    @property
    def has_db_payload(self) -> bool:
        return bool(self.commitment_status or self.evidence)


# ---------------------------------------------------------------------------
# Projects and tasks
# ---------------------------------------------------------------------------


class TaskAssetPayload(GatewayBaseModel):
    policy_id: str = ""
    name: str = ""
    amount: int = 0


class TaskContentPayload(GatewayBaseModel):
    title: str | None = None
    description: str | None = None
    content_json: Any = None
    image_url: str | None = None
    task_index: int | None = None


class TaskPayload(GatewayBaseModel):
    task_hash: str | None = None
    project_id: str | None = None
    task_index: int | None = None
    lovelace_amount: int = 0
    expiration_posix: int | None = None
    created_by: str | None = None
    on_chain_content: str | None = None
    contributor_state_id: str | None = None
    assets: list[TaskAssetPayload] = Field(default_factory=list)
    content: TaskContentPayload | None = None
    source: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_task_id(cls, value: object) -> object:
        # merged task lists name the content-addressed hash ``task_id``
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[str, object], value)
            if mapping_value.get("task_hash") is None and mapping_value.get("task_id"):
                data = dict(mapping_value)
                data["task_hash"] = data["task_id"]
                return data
        return value

    _normalize_assets = field_validator("assets", mode="before")(_none_to_empty_list)
    _normalize_lovelace = field_validator("lovelace_amount", mode="before")(_none_to_zero)


class PrerequisitePayload(GatewayBaseModel):
    course_id: str = ""
    slt_hashes: list[str] = Field(default_factory=list)

    _normalize_hashes = field_validator("slt_hashes", mode="before")(_none_to_empty_list)


class ProjectContentPayload(GatewayBaseModel):
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    category: str | None = None
    is_public: bool | None = None


class AssessmentPayload(GatewayBaseModel):
    task_hash: str = ""
    assessed_by: str = ""
    decision: str | None = None
    tx: str | None = None


class ProjectPayload(GatewayBaseModel):
    project_id: str | None = None
    owner: str | None = None
    managers: list[str] = Field(default_factory=list)
    treasury_address: str | None = None
    contributor_state_id: str | None = None
    prerequisites: list[PrerequisitePayload] = Field(default_factory=list)
    content: ProjectContentPayload | None = None
    source: str | None = None
    tasks: list[TaskPayload] = Field(default_factory=list)
    assessments: list[AssessmentPayload] = Field(default_factory=list)

    _normalize_lists = field_validator(
        "managers", "prerequisites", "tasks", "assessments", mode="before"
    )(_none_to_empty_list)


# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------


class CourseContentPayload(GatewayBaseModel):
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    live: bool | None = None


class CoursePayload(GatewayBaseModel):
    course_id: str
    course_address: str | None = None
    owner: str | None = None
    teachers: list[str] = Field(default_factory=list)
    student_state_id: str | None = None
    content: CourseContentPayload | None = None
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    source: str | None = None

    _normalize_teachers = field_validator("teachers", mode="before")(_none_to_empty_list)
