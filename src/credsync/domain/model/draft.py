"""Locally buffered module draft and its per-record edit states."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .entities import ContentBlock, Lesson


class DraftStateError(RuntimeError):
    """Raised when a draft operation is invalid for the draft's current state."""


@dataclass(frozen=True, slots=True)
class NewRecord[T]:
    """A child record created in this session; the server assigns its identity."""

    payload: T


@dataclass(frozen=True, slots=True)
class ExistingRecord[T]:
    """A child record already known to the server.

    ``key`` identifies it server-side (1-based position for learning targets,
    database id or ``0`` for singletons).
    """

    key: int
    payload: T
    modified: bool = False


@dataclass(frozen=True, slots=True)
class DeletedRecord:
    """A server-known child record removed in this session."""

    key: int


type TargetRecord = NewRecord[str] | ExistingRecord[str] | DeletedRecord
type SingletonRecord = NewRecord[ContentBlock] | ExistingRecord[ContentBlock] | DeletedRecord
type LessonRecord = NewRecord[Lesson] | ExistingRecord[Lesson]


@dataclass(slots=True, kw_only=True)
class ModuleDraft:
    """Editable aggregate for one course module.

    Learning targets keep their deleted records in place until save so the
    draft can be inspected; lessons are keyed by learning-target position and
    a removed lesson is simply absent from ``lessons``.
    """

    course_id: str
    module_code: str
    title: str = ""
    description: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    targets: list[TargetRecord] = field(default_factory=list)
    assignment: SingletonRecord | None = None
    introduction: SingletonRecord | None = None
    lessons: dict[int, LessonRecord] = field(default_factory=dict)
    seeded_lessons: frozenset[int] = frozenset()
    slts_locked: bool = False
    request_approval: bool = False

    def live_targets(self) -> list[NewRecord[str] | ExistingRecord[str]]:
        """Return non-deleted learning targets in their current order."""

        return [record for record in self.targets if not isinstance(record, DeletedRecord)]

    def target_texts(self) -> list[str]:
        return [record.payload for record in self.live_targets()]
