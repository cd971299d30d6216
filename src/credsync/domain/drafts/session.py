"""Editing session owning one module draft.

The session seeds a ``ModuleDraft`` from the last reconciled module, applies
edits as record state transitions and hands the draft to a save callable.
Learning targets are addressed by their current 1-based position.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Protocol

from credsync.domain.model import (
    DeletedRecord,
    DraftStateError,
    ExistingRecord,
    ModuleDraft,
    NewRecord,
    is_locked_status,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from credsync.domain.model import (
        ContentBlock,
        CourseModule,
        Lesson,
        LessonRecord,
        SingletonRecord,
        TargetRecord,
    )

log = logging.getLogger(__name__)


class SaveOutcome(Protocol):
    """What a save callable reports back to the session."""

    @property
    def success(self) -> bool: ...

    @property
    def error(self) -> str | None: ...

    @property
    def module(self) -> CourseModule | None: ...


def _seed_singleton(block: ContentBlock | None) -> SingletonRecord | None:
    if block is None:
        return None
    return ExistingRecord(key=block.id or 0, payload=block)


def open_draft(course_id: str, module_code: str, module: CourseModule | None = None) -> ModuleDraft:
    """Build a clean draft from server state, or an empty draft for a new module."""

    if module is None or module.content is None:
        return ModuleDraft(
            course_id=course_id,
            module_code=module_code,
            slts_locked=module.slts_locked if module is not None else False,
        )

    content = module.content
    targets: list[TargetRecord] = []
    lessons: dict[int, LessonRecord] = {}
    for position, target in enumerate(sorted(content.slts, key=lambda t: t.index), start=1):
        targets.append(ExistingRecord(key=position, payload=target.text))
        if target.lesson is not None:
            lessons[position] = ExistingRecord(key=position, payload=target.lesson)

    return ModuleDraft(
        course_id=course_id,
        module_code=module_code,
        title=content.title,
        description=content.description,
        image_url=content.image_url,
        video_url=content.video_url,
        targets=targets,
        assignment=_seed_singleton(content.assignment),
        introduction=_seed_singleton(content.introduction),
        lessons=lessons,
        seeded_lessons=frozenset(lessons),
        slts_locked=module.slts_locked,
    )


def _metadata(draft: ModuleDraft) -> tuple[object, ...]:
    return (draft.title, draft.description, draft.image_url, draft.video_url)


def _record_dirty(record: object) -> bool:
    return not isinstance(record, ExistingRecord) or record.modified


def is_dirty(draft: ModuleDraft, baseline: ModuleDraft | None = None) -> bool:
    """Return whether ``draft`` holds edits not yet saved."""

    if draft.request_approval:
        return True
    if baseline is not None and _metadata(draft) != _metadata(baseline):
        return True
    if any(_record_dirty(record) for record in draft.targets):
        return True
    for singleton in (draft.assignment, draft.introduction):
        if singleton is not None and _record_dirty(singleton):
            return True
    if set(draft.lessons) != set(draft.seeded_lessons):
        return True
    return any(_record_dirty(record) for record in draft.lessons.values())


def _settle(draft: ModuleDraft) -> ModuleDraft:
    """Return ``draft`` as it looks after the server accepted it."""

    targets: list[TargetRecord] = [
        ExistingRecord(key=position, payload=text)
        for position, text in enumerate(draft.target_texts(), start=1)
    ]
    lessons: dict[int, LessonRecord] = {
        index: ExistingRecord(key=index, payload=record.payload)
        for index, record in draft.lessons.items()
    }

    def settle_singleton(record: SingletonRecord | None) -> SingletonRecord | None:
        if record is None or isinstance(record, DeletedRecord):
            return None
        return ExistingRecord(
            key=record.key if isinstance(record, ExistingRecord) else 0, payload=record.payload
        )

    return replace(
        draft,
        targets=targets,
        assignment=settle_singleton(draft.assignment),
        introduction=settle_singleton(draft.introduction),
        lessons=lessons,
        seeded_lessons=frozenset(lessons),
        slts_locked=draft.slts_locked or draft.request_approval,
        request_approval=False,
    )


@dataclass(slots=True)
class DraftSession:
    """Owns the draft for one ``(course_id, module_code)`` while it is being edited."""

    course_id: str
    module_code: str
    draft: ModuleDraft | None = None
    last_error: str | None = None
    last_result: SaveOutcome | None = None
    _baseline: ModuleDraft | None = field(default=None, init=False, repr=False)
    _had_assignment: bool = field(default=False, init=False, repr=False)
    _had_introduction: bool = field(default=False, init=False, repr=False)

    # ------------------------------------------------------------------ lifecycle

    def open(self, module: CourseModule | None = None) -> ModuleDraft:
        self.draft = open_draft(self.course_id, self.module_code, module)
        self._rebase(self.draft)
        self.last_error = None
        return self.draft

    def discard(self) -> ModuleDraft:
        """Drop unsaved edits and return to the last known server state."""

        baseline = self._require_baseline()
        self.draft = replace(baseline, targets=list(baseline.targets), lessons=dict(baseline.lessons))
        self.last_error = None
        return self.draft

    @property
    def is_dirty(self) -> bool:
        if self.draft is None:
            return False
        return is_dirty(self.draft, self._baseline)

    async def save[R: SaveOutcome](
        self, save_fn: Callable[[ModuleDraft], Awaitable[R]]
    ) -> R | None:
        """Submit the draft through ``save_fn``; returns ``None`` when there is nothing to save.

        The caller must not run two saves of the same session concurrently.
        """

        draft = self._require_draft()
        if not self.is_dirty:
            log.debug("Skipping save of clean draft %s/%s", self.course_id, self.module_code)
            return None

        outcome = await save_fn(draft)
        self.last_result = outcome
        if not outcome.success:
            self.last_error = outcome.error or "Save failed"
            log.warning(
                "Saving module %s/%s failed: %s", self.course_id, self.module_code, self.last_error
            )
            return outcome

        self.last_error = None
        # the echo may omit collections; only its lock state is trusted
        fresh = _settle(draft)
        if outcome.module is not None and outcome.module.slts_locked:
            fresh.slts_locked = True
        self.draft = fresh
        self._rebase(fresh)
        return outcome

    # ------------------------------------------------------------------ metadata

    def set_metadata(
        self,
        *,
        title: str | None = None,
        description: str | None = None,
        image_url: str | None = None,
        video_url: str | None = None,
    ) -> None:
        """Update the given scalar fields; ``None`` leaves a field unchanged."""

        draft = self._require_draft()
        if title is not None:
            draft.title = title
        if description is not None:
            draft.description = description
        if image_url is not None:
            draft.image_url = image_url
        if video_url is not None:
            draft.video_url = video_url

    # ------------------------------------------------------------------ learning targets

    def add_target(self, text: str) -> int:
        """Append a learning target and return its position."""

        draft = self._require_unlocked()
        draft.targets.append(NewRecord(text))
        return len(draft.live_targets())

    def update_target(self, position: int, text: str) -> None:
        draft = self._require_unlocked()
        offset = self._offset_of(draft, position)
        record = draft.targets[offset]
        if isinstance(record, NewRecord):
            draft.targets[offset] = NewRecord(text)
        elif isinstance(record, ExistingRecord):
            draft.targets[offset] = ExistingRecord(key=record.key, payload=text, modified=True)

    def delete_target(self, position: int) -> None:
        """Remove the target at ``position``; later targets and their lessons move up."""

        draft = self._require_unlocked()
        offset = self._offset_of(draft, position)
        record = draft.targets[offset]
        if isinstance(record, ExistingRecord):
            draft.targets[offset] = DeletedRecord(record.key)
        else:
            del draft.targets[offset]
        self._renumber(draft)

        lessons: dict[int, LessonRecord] = {}
        for index, lesson in draft.lessons.items():
            if index == position:
                continue
            new_index = index - 1 if index > position else index
            lessons[new_index] = lesson if new_index == index else _moved(lesson, new_index)
        draft.lessons = lessons

    def reorder_targets(self, order: Sequence[int]) -> None:
        """Reorder live targets; ``order`` lists current positions in their new order."""

        draft = self._require_unlocked()
        live = draft.live_targets()
        if sorted(order) != list(range(1, len(live) + 1)):
            raise DraftStateError(f"Reorder must be a permutation of 1..{len(live)}, got {list(order)}")

        deleted = [record for record in draft.targets if isinstance(record, DeletedRecord)]
        draft.targets = [live[old - 1] for old in order] + deleted
        self._renumber(draft)

        lessons: dict[int, LessonRecord] = {}
        for new_index, old_index in enumerate(order, start=1):
            lesson = draft.lessons.get(old_index)
            if lesson is not None:
                lessons[new_index] = lesson if new_index == old_index else _moved(lesson, new_index)
        draft.lessons = lessons

    # ------------------------------------------------------------------ singletons and lessons

    def set_assignment(self, block: ContentBlock | None) -> None:
        draft = self._require_draft()
        draft.assignment = _next_singleton(draft.assignment, block, existed=self._had_assignment)

    def set_introduction(self, block: ContentBlock | None) -> None:
        draft = self._require_draft()
        draft.introduction = _next_singleton(
            draft.introduction, block, existed=self._had_introduction
        )

    def set_lesson(self, position: int, lesson: Lesson | None) -> None:
        """Set or remove the lesson attached to the learning target at ``position``."""

        draft = self._require_draft()
        if lesson is None:
            draft.lessons.pop(position, None)
            return
        self._offset_of(draft, position)
        lesson = replace(lesson, slt_index=position)
        if position in draft.seeded_lessons or isinstance(draft.lessons.get(position), ExistingRecord):
            draft.lessons[position] = ExistingRecord(key=position, payload=lesson, modified=True)
        else:
            draft.lessons[position] = NewRecord(lesson)

    # ------------------------------------------------------------------ status

    def request_approval(self) -> None:
        """Ask for the one-way transition to ``APPROVED`` on the next save."""

        draft = self._require_draft()
        if draft.slts_locked:
            raise DraftStateError(f"Module {self.module_code!r} is no longer in drafting status")
        if not draft.live_targets():
            raise DraftStateError("A module needs at least one learning target to be approved")
        draft.request_approval = True

    def update_lock_state(self, status: str | None) -> bool:
        """Sync the lock flag with a freshly observed module status and return it."""

        draft = self._require_draft()
        locked = is_locked_status(status)
        if draft.slts_locked != locked:
            log.debug("Lock state of %s changed to %s (status %r)", self.module_code, locked, status)
            draft.slts_locked = locked
            if self._baseline is not None:
                self._baseline.slts_locked = locked
        return locked

    # ------------------------------------------------------------------ helpers

    def _rebase(self, draft: ModuleDraft) -> None:
        self._baseline = replace(draft, targets=list(draft.targets), lessons=dict(draft.lessons))
        self._had_assignment = draft.assignment is not None
        self._had_introduction = draft.introduction is not None

    def _require_draft(self) -> ModuleDraft:
        if self.draft is None:
            raise DraftStateError(f"No draft is open for {self.course_id}/{self.module_code}")
        return self.draft

    def _require_baseline(self) -> ModuleDraft:
        if self._baseline is None:
            raise DraftStateError(f"No draft is open for {self.course_id}/{self.module_code}")
        return self._baseline

    def _require_unlocked(self) -> ModuleDraft:
        draft = self._require_draft()
        if draft.slts_locked:
            raise DraftStateError(f"Learning targets of {self.module_code!r} are locked")
        return draft

    @staticmethod
    def _offset_of(draft: ModuleDraft, position: int) -> int:
        live_offsets = [
            offset
            for offset, record in enumerate(draft.targets)
            if not isinstance(record, DeletedRecord)
        ]
        if not 1 <= position <= len(live_offsets):
            raise DraftStateError(f"No learning target at position {position}")
        return live_offsets[position - 1]

    @staticmethod
    def _renumber(draft: ModuleDraft) -> None:
        position = 0
        for offset, record in enumerate(draft.targets):
            if isinstance(record, DeletedRecord):
                continue
            position += 1
            if isinstance(record, ExistingRecord) and record.key != position:
                draft.targets[offset] = ExistingRecord(key=position, payload=record.payload, modified=True)


def _moved(lesson: LessonRecord, index: int) -> LessonRecord:
    payload = replace(lesson.payload, slt_index=index)
    if isinstance(lesson, NewRecord):
        return NewRecord(payload)
    return ExistingRecord(key=index, payload=payload, modified=True)


def _next_singleton(
    current: SingletonRecord | None, block: ContentBlock | None, *, existed: bool
) -> SingletonRecord | None:
    key = current.key if isinstance(current, ExistingRecord | DeletedRecord) else 0
    if block is None:
        return DeletedRecord(key) if existed else None
    if existed:
        return ExistingRecord(key=key, payload=block, modified=True)
    return NewRecord(block)
