"""Build the aggregate module update request from a locally edited draft.

Server contract for ``POST /course/teacher/course-module/update``:

- an omitted key means "unchanged", never "empty"
- ``slts`` and ``lessons`` are full collections; anything the server knows
  that is missing from them is deleted
- a learning target with ``slt_index`` updates that position, one without is
  created
- ``delete_assignment`` / ``delete_introduction`` remove the singleton
- ``status: "APPROVED"`` must be paired with the learning-target hash

Learning targets are never sent once the module has left drafting status.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from credsync.domain.model import (
    DeletedRecord,
    DraftStateError,
    ExistingRecord,
    ModuleStatus,
    NewRecord,
)

from .hashing import compute_slt_hash

if TYPE_CHECKING:
    from credsync.domain.model import ContentBlock, Lesson, ModuleDraft, SingletonRecord

type JsonObject = dict[str, Any]


def _without_none(values: JsonObject) -> JsonObject:
    return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True, slots=True, kw_only=True)
class TargetInput:
    slt_text: str
    slt_index: int | None = None

    def to_payload(self) -> JsonObject:
        return _without_none({"slt_index": self.slt_index, "slt_text": self.slt_text})


@dataclass(frozen=True, slots=True, kw_only=True)
class BlockInput:
    """Assignment or introduction payload."""

    title: str
    description: str | None = None
    content_json: object = None
    image_url: str | None = None
    video_url: str | None = None

    @classmethod
    def from_block(cls, block: ContentBlock) -> BlockInput:
        return cls(
            title=block.title,
            description=block.description,
            content_json=block.content_json,
            image_url=block.image_url,
            video_url=block.video_url,
        )

    def to_payload(self) -> JsonObject:
        return _without_none(
            {
                "title": self.title,
                "description": self.description,
                "content_json": self.content_json,
                "image_url": self.image_url,
                "video_url": self.video_url,
            }
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class LessonInput:
    slt_index: int
    title: str
    description: str | None = None
    content_json: object = None
    image_url: str | None = None
    video_url: str | None = None

    @classmethod
    def from_lesson(cls, slt_index: int, lesson: Lesson) -> LessonInput:
        return cls(
            slt_index=slt_index,
            title=lesson.title,
            description=lesson.description,
            content_json=lesson.content_json,
            image_url=lesson.image_url,
            video_url=lesson.video_url,
        )

    def to_payload(self) -> JsonObject:
        return _without_none(
            {
                "slt_index": self.slt_index,
                "title": self.title,
                "description": self.description,
                "content_json": self.content_json,
                "image_url": self.image_url,
                "video_url": self.video_url,
            }
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ModuleUpdateRequest:
    """Partial update for one module. ``None`` collections are left out of the wire payload."""

    course_id: str
    course_module_code: str
    title: str
    description: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    slts: tuple[TargetInput, ...] | None = None
    assignment: BlockInput | None = None
    delete_assignment: bool = False
    introduction: BlockInput | None = None
    delete_introduction: bool = False
    lessons: tuple[LessonInput, ...] | None = None
    status: str | None = None
    slt_hash: str | None = None

    def to_payload(self) -> JsonObject:
        payload: JsonObject = {
            "course_id": self.course_id,
            "course_module_code": self.course_module_code,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "video_url": self.video_url,
        }
        if self.slts is not None:
            payload["slts"] = [target.to_payload() for target in self.slts]
        if self.delete_assignment:
            payload["delete_assignment"] = True
        elif self.assignment is not None:
            payload["assignment"] = self.assignment.to_payload()
        if self.delete_introduction:
            payload["delete_introduction"] = True
        elif self.introduction is not None:
            payload["introduction"] = self.introduction.to_payload()
        if self.lessons is not None:
            payload["lessons"] = [lesson.to_payload() for lesson in self.lessons]
        if self.status is not None:
            payload["status"] = self.status
            payload["slt_hash"] = self.slt_hash
        return payload


def _targets(draft: ModuleDraft) -> tuple[TargetInput, ...]:
    inputs: list[TargetInput] = []
    for record in draft.targets:
        if isinstance(record, NewRecord):
            inputs.append(TargetInput(slt_text=record.payload))
        elif isinstance(record, ExistingRecord):
            inputs.append(TargetInput(slt_text=record.payload, slt_index=record.key))
    return tuple(inputs)


def _singleton(record: SingletonRecord | None) -> tuple[BlockInput | None, bool]:
    """Return ``(payload, delete)`` for an assignment or introduction."""

    if isinstance(record, DeletedRecord):
        return None, True
    if isinstance(record, NewRecord) or (isinstance(record, ExistingRecord) and record.modified):
        return BlockInput.from_block(record.payload), False
    return None, False


def _lessons(draft: ModuleDraft) -> tuple[LessonInput, ...] | None:
    if not draft.lessons and not draft.seeded_lessons:
        return None
    return tuple(
        LessonInput.from_lesson(index, draft.lessons[index].payload)
        for index in sorted(draft.lessons)
    )


def build_request(draft: ModuleDraft) -> ModuleUpdateRequest:
    """Compute the partial update for ``draft``.

    Raises ``DraftStateError`` when approval is requested for a module whose
    learning targets are already locked.
    """

    status: str | None = None
    slt_hash: str | None = None
    if draft.request_approval:
        if draft.slts_locked:
            raise DraftStateError(
                f"Module {draft.module_code!r} has left drafting status and cannot be approved again"
            )
        status = ModuleStatus.APPROVED.value
        slt_hash = compute_slt_hash(draft.target_texts())

    assignment, delete_assignment = _singleton(draft.assignment)
    introduction, delete_introduction = _singleton(draft.introduction)

    return ModuleUpdateRequest(
        course_id=draft.course_id,
        course_module_code=draft.module_code,
        title=draft.title,
        description=draft.description,
        image_url=draft.image_url,
        video_url=draft.video_url,
        slts=None if draft.slts_locked else _targets(draft),
        assignment=assignment,
        delete_assignment=delete_assignment,
        introduction=introduction,
        delete_introduction=delete_introduction,
        lessons=_lessons(draft),
        status=status,
        slt_hash=slt_hash,
    )
