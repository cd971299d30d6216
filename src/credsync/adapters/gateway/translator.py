"""Translate gateway payloads into canonical domain entities."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from credsync.domain.model import (
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
    ModuleStatus,
    Project,
    ProjectContent,
    ProjectLedger,
    ProjectPrerequisite,
    ProjectStatus,
    Source,
    StatusKind,
    Task,
    TaskAssessment,
    TaskContent,
    TaskLedger,
    TaskToken,
)
from credsync.domain.reconciliation import normalize, resolve_source

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .schema import (
        AssessmentPayload,
        CommitmentPayload,
        ContentBlockPayload,
        CoursePayload,
        CourseModulePayload,
        LessonPayload,
        ProjectPayload,
        SavedModulePayload,
        SltPayload,
        TaskPayload,
    )

log = logging.getLogger(__name__)


def _source_or_none(
    tag: str | None, *, has_ledger_payload: bool, has_db_payload: bool, context: str
) -> Source | None:
    try:
        return resolve_source(
            tag, has_ledger_payload=has_ledger_payload, has_db_payload=has_db_payload
        )
    except ValueError:
        log.debug("Dropping %s with neither ledger nor database data", context)
        return None


def _keeps_ledger(source: Source, present: bool, context: str) -> bool:
    if source is Source.DB_ONLY and present:
        log.debug("Dropping ledger payload of db_only %s", context)
        return False
    return present


def _keeps_content(source: Source, present: bool, context: str) -> bool:
    if source is Source.CHAIN_ONLY and present:
        log.debug("Dropping database payload of chain_only %s", context)
        return False
    return present


# ---------------------------------------------------------------------------
# Course modules
# ---------------------------------------------------------------------------


def _lesson(payload: LessonPayload, default_index: int) -> Lesson:
    return Lesson(
        slt_index=payload.slt_index if payload.slt_index is not None else default_index,
        title=payload.title,
        description=payload.description,
        content_json=payload.content_json,
        image_url=payload.image_url,
        video_url=payload.video_url,
        id=payload.id,
        is_live=payload.is_live,
    )


def _block(payload: ContentBlockPayload | None) -> ContentBlock | None:
    if payload is None:
        return None
    return ContentBlock(
        title=payload.title or "",
        description=payload.description,
        content_json=payload.content_json,
        image_url=payload.image_url,
        video_url=payload.video_url,
        id=payload.id,
    )


def _targets(slts: Iterable[SltPayload]) -> tuple[LearningTarget, ...]:
    targets: list[LearningTarget] = []
    for position, slt in enumerate(slts, start=1):
        index = slt.position if slt.position is not None else position
        targets.append(
            LearningTarget(
                index=index,
                text=slt.slt_text,
                id=slt.id,
                lesson=_lesson(slt.lesson, index) if slt.lesson is not None else None,
            )
        )
    return tuple(sorted(targets, key=lambda target: target.index))


def translate_course_module(payload: CourseModulePayload, *, course_id: str) -> CourseModule | None:
    """Build a ``CourseModule``; returns ``None`` when neither store knows the module."""

    content = payload.content
    has_ledger = bool(payload.slt_hash and (payload.created_by or payload.on_chain_slts))
    has_content = content is not None
    context = f"module {payload.slt_hash or (content.course_module_code if content else None)!r}"
    source = _source_or_none(
        payload.source, has_ledger_payload=has_ledger, has_db_payload=has_content, context=context
    )
    if source is None:
        return None

    ledger: ModuleLedger | None = None
    if _keeps_ledger(source, has_ledger or source is not Source.DB_ONLY, context):
        ledger = ModuleLedger(
            slt_hash=payload.slt_hash or "",
            created_by=payload.created_by,
            prerequisites=tuple(payload.prerequisites),
            on_chain_slts=tuple(payload.on_chain_slts),
        )

    module_content: ModuleContent | None = None
    if content is not None and _keeps_content(source, has_content, context):
        module_content = ModuleContent(
            module_code=content.course_module_code or "",
            title=content.title or "",
            description=content.description,
            image_url=content.image_url,
            video_url=content.video_url,
            is_live=content.is_live,
            raw_status=content.module_status,
            slt_hash=content.slt_hash or payload.slt_hash,
            slts=_targets(content.slts),
            assignment=_block(content.assignment),
            introduction=_block(content.introduction),
        )

    raw_status = module_content.raw_status if module_content is not None else None
    return CourseModule(
        course_id=payload.course_id or course_id,
        source=source,
        status=normalize(raw_status, StatusKind.MODULE, source),
        ledger=ledger,
        content=module_content,
    )


def translate_saved_module(payload: SavedModulePayload) -> CourseModule:
    """Build a ``CourseModule`` from the flat echo of the aggregate update endpoint."""

    lessons = {lesson.slt_index: lesson for lesson in payload.lessons if lesson.slt_index is not None}
    targets = tuple(
        LearningTarget(
            index=slt.slt_index,
            text=slt.slt_text,
            lesson=_lesson(lessons[slt.slt_index], slt.slt_index) if slt.slt_index in lessons else None,
        )
        for slt in sorted(payload.slts, key=lambda slt: slt.slt_index)
    )
    status = normalize(payload.status, StatusKind.MODULE, Source.DB_ONLY)
    on_chain = status == ModuleStatus.ON_CHAIN
    source = resolve_source(None, has_ledger_payload=on_chain, has_db_payload=True)
    return CourseModule(
        course_id=payload.course_id,
        source=source,
        status=status,
        ledger=ModuleLedger(slt_hash=payload.slt_hash or "") if on_chain else None,
        content=ModuleContent(
            module_code=payload.course_module_code,
            title=payload.title,
            description=payload.description,
            image_url=payload.image_url,
            video_url=payload.video_url,
            raw_status=payload.status,
            slt_hash=payload.slt_hash,
            slts=targets,
            assignment=_block(payload.assignment),
            introduction=_block(payload.introduction),
        ),
    )


# ---------------------------------------------------------------------------
# Assignment commitments
# ---------------------------------------------------------------------------


def translate_commitment(
    payload: CommitmentPayload,
    *,
    course_id: str,
    module_code: str = "",
    review: bool = False,
) -> Commitment | None:
    """Build a ``Commitment`` in the learner vocabulary, or the teacher one when ``review``."""

    context = f"commitment {payload.slt_hash or payload.course_module_code or module_code!r}"
    source = _source_or_none(
        payload.source,
        has_ledger_payload=payload.has_ledger_payload,
        has_db_payload=payload.has_db_payload,
        context=context,
    )
    if source is None:
        return None

    if review:
        status = normalize(payload.commitment_status, StatusKind.COMMITMENT_REVIEW, source)
    else:
        raw = payload.commitment_status or payload.on_chain_status
        status = normalize(raw, StatusKind.COMMITMENT, source)

    ledger: CommitmentLedger | None = None
    has_ledger = payload.has_ledger_payload or bool(payload.submission_tx)
    if _keeps_ledger(source, has_ledger, context):
        ledger = CommitmentLedger(
            on_chain_status=payload.on_chain_status,
            on_chain_content=payload.on_chain_content,
            submission_tx=payload.submission_tx,
            submission_slot=payload.submission_slot,
        )

    content: CommitmentContent | None = None
    has_content = payload.has_db_payload or bool(payload.assignment_evidence_hash)
    if _keeps_content(source, has_content, context):
        content = CommitmentContent(
            raw_status=payload.commitment_status,
            evidence=payload.evidence,
            evidence_hash=payload.assignment_evidence_hash,
        )

    return Commitment(
        course_id=payload.course_id or course_id,
        module_code=payload.course_module_code or module_code,
        slt_hash=payload.slt_hash,
        student_alias=payload.student_alias,
        source=source,
        status=status,
        ledger=ledger,
        content=content,
    )


# ---------------------------------------------------------------------------
# Projects and tasks
# ---------------------------------------------------------------------------


def translate_task(payload: TaskPayload, *, project_id: str = "", on_chain: bool = False) -> Task | None:
    """Build a ``Task``. ``on_chain`` marks tasks listed from ledger-only project data."""

    content = payload.content
    has_ledger = bool(
        payload.on_chain_content
        or payload.lovelace_amount
        or payload.expiration_posix
        or payload.contributor_state_id
    )
    context = f"task {payload.task_hash!r}"
    if on_chain:
        source: Source | None = Source.CHAIN_ONLY
    else:
        source = _source_or_none(
            payload.source,
            has_ledger_payload=has_ledger,
            has_db_payload=content is not None,
            context=context,
        )
    if source is None:
        return None

    ledger: TaskLedger | None = None
    if _keeps_ledger(source, has_ledger or source is not Source.DB_ONLY, context):
        ledger = TaskLedger(
            lovelace_amount=payload.lovelace_amount,
            expiration_posix=payload.expiration_posix,
            created_by=payload.created_by,
            on_chain_content=payload.on_chain_content,
            contributor_state_id=payload.contributor_state_id,
            tokens=tuple(
                TaskToken(policy_id=asset.policy_id, asset_name=asset.name, quantity=asset.amount)
                for asset in payload.assets
            ),
        )

    task_content: TaskContent | None = None
    if content is not None and _keeps_content(source, True, context):
        task_content = TaskContent(
            title=content.title or "",
            description=content.description or "",
            content_json=content.content_json,
            image_url=content.image_url,
        )

    index = payload.task_index
    if index is None and content is not None:
        index = content.task_index
    lifecycle = (
        ProjectStatus.ACTIVE.value if on_chain else normalize(None, StatusKind.PROJECT, source)
    )
    return Task(
        project_id=payload.project_id or project_id,
        task_hash=payload.task_hash or "",
        index=index,
        source=source,
        status=normalize(None, StatusKind.TASK, source),
        lifecycle=lifecycle,
        ledger=ledger,
        content=task_content,
    )


def dedupe_tasks(tasks: Iterable[Task]) -> tuple[Task, ...]:
    """Drop repeated task hashes, keeping the first; tasks without a hash are all kept."""

    seen: set[str] = set()
    unique: list[Task] = []
    for task in tasks:
        if task.task_hash:
            if task.task_hash in seen:
                continue
            seen.add(task.task_hash)
        unique.append(task)
    return tuple(unique)


def _assessment(payload: AssessmentPayload) -> TaskAssessment:
    return TaskAssessment(
        task_hash=payload.task_hash,
        assessed_by=payload.assessed_by,
        decision=normalize(payload.decision, StatusKind.ASSESSMENT),
        tx=payload.tx,
    )


def translate_project(payload: ProjectPayload) -> Project | None:
    if not payload.project_id:
        log.debug("Dropping project without an id")
        return None
    context = f"project {payload.project_id!r}"
    has_ledger = bool(
        payload.owner or payload.managers or payload.treasury_address or payload.contributor_state_id
    )
    content = payload.content
    source = _source_or_none(
        payload.source,
        has_ledger_payload=has_ledger,
        has_db_payload=content is not None,
        context=context,
    )
    if source is None:
        return None

    ledger: ProjectLedger | None = None
    if _keeps_ledger(source, has_ledger or source is not Source.DB_ONLY, context):
        ledger = ProjectLedger(
            owner=payload.owner,
            managers=tuple(payload.managers),
            treasury_address=payload.treasury_address,
            contributor_state_id=payload.contributor_state_id,
            prerequisites=tuple(
                ProjectPrerequisite(course_id=item.course_id, slt_hashes=tuple(item.slt_hashes))
                for item in payload.prerequisites
            ),
        )

    project_content: ProjectContent | None = None
    if content is not None and _keeps_content(source, True, context):
        project_content = ProjectContent(
            title=content.title or "",
            description=content.description or "",
            image_url=content.image_url,
            video_url=content.video_url,
            category=content.category,
            is_public=content.is_public,
        )

    tasks = (
        translate_task(task, project_id=payload.project_id, on_chain=True) for task in payload.tasks
    )
    return Project(
        project_id=payload.project_id,
        source=source,
        status=normalize(None, StatusKind.PROJECT, source),
        ledger=ledger,
        content=project_content,
        tasks=dedupe_tasks(task for task in tasks if task is not None),
        assessments=tuple(_assessment(item) for item in payload.assessments),
    )


# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------


def translate_course(payload: CoursePayload) -> Course | None:
    context = f"course {payload.course_id!r}"
    nested = payload.content
    title = (nested.title if nested else None) or payload.title
    has_content = nested is not None or title is not None
    has_ledger = bool(
        payload.course_address or payload.owner or payload.teachers or payload.student_state_id
    )
    source = _source_or_none(
        payload.source, has_ledger_payload=has_ledger, has_db_payload=has_content, context=context
    )
    if source is None:
        return None

    ledger: CourseLedger | None = None
    if _keeps_ledger(source, has_ledger or source is not Source.DB_ONLY, context):
        ledger = CourseLedger(
            owner=payload.owner,
            teachers=tuple(payload.teachers),
            course_address=payload.course_address,
            student_state_id=payload.student_state_id,
        )

    content: CourseContent | None = None
    if _keeps_content(source, has_content, context):
        content = CourseContent(
            title=title or "",
            description=(nested.description if nested else None) or payload.description,
            image_url=(nested.image_url if nested else None) or payload.image_url,
            video_url=(nested.video_url if nested else None) or payload.video_url,
            is_live=nested.live if nested else None,
        )

    return Course(
        course_id=payload.course_id,
        source=source,
        status=normalize(None, StatusKind.COURSE, source),
        ledger=ledger,
        content=content,
    )
