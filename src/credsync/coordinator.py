"""Reconciliation coordinator: merged reads and the module draft save."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from credsync.adapters.gateway.envelope import unwrap_item, unwrap_list, validate_item, validate_items
from credsync.adapters.gateway.schema import (
    ChangesPayload,
    CommitmentPayload,
    CourseModulePayload,
    CoursePayload,
    ProjectPayload,
    SavedModulePayload,
    SaveModuleResponse,
    TaskPayload,
)
from credsync.adapters.gateway.translator import (
    dedupe_tasks,
    translate_commitment,
    translate_course,
    translate_course_module,
    translate_project,
    translate_saved_module,
    translate_task,
)
from credsync.domain.drafts import build_request
from credsync.domain.ports import TransportError, module_save_keys
from credsync.domain.reconciliation import resolve_by_parent

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pydantic import BaseModel

    from credsync.domain.model import Commitment, Course, CourseModule, ModuleDraft, Project, Task
    from credsync.domain.ports import HttpMethod, InvalidationKey, InvalidationListener, Transport

log = getLogger(__name__)

SAVE_MODULE_PATH = "/course/teacher/course-module/update"


class SaveErrorCode(StrEnum):
    SLT_LOCKED = "SLT_LOCKED"
    MODULE_NOT_FOUND = "MODULE_NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    BAD_REQUEST = "BAD_REQUEST"
    TRANSPORT = "TRANSPORT"
    UNKNOWN = "UNKNOWN"


_STATUS_CODES: dict[int, SaveErrorCode] = {
    400: SaveErrorCode.BAD_REQUEST,
    401: SaveErrorCode.UNAUTHORIZED,
    403: SaveErrorCode.UNAUTHORIZED,
    404: SaveErrorCode.MODULE_NOT_FOUND,
    422: SaveErrorCode.BAD_REQUEST,
}


def _error_code(server_code: str | None, status_code: int) -> SaveErrorCode:
    if server_code:
        try:
            return SaveErrorCode(server_code.strip().upper())
        except ValueError:
            log.debug("Unknown save error code %r", server_code)
    return _STATUS_CODES.get(status_code, SaveErrorCode.UNKNOWN)


@dataclass(frozen=True, slots=True)
class ChangeSummary:
    """What the server changed while applying a save, per child kind."""

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

    @classmethod
    def from_payload(cls, payload: ChangesPayload | None) -> ChangeSummary | None:
        if payload is None:
            return None
        return cls(**payload.model_dump())

    @property
    def slts_changed(self) -> int:
        return self.slts_created + self.slts_updated + self.slts_deleted

    @property
    def lessons_changed(self) -> int:
        return self.lessons_created + self.lessons_updated + self.lessons_deleted


@dataclass(frozen=True, slots=True)
class SaveResult:
    success: bool
    error: str | None = None
    code: SaveErrorCode | None = None
    changes: ChangeSummary | None = None
    module: CourseModule | None = None
    invalidations: tuple[InvalidationKey, ...] = ()

    @property
    def requires_refetch(self) -> bool:
        """The server rejected target edits on a locked module; local lock state is stale."""

        return self.code is SaveErrorCode.SLT_LOCKED


class ReconciliationCoordinator:
    """Reads merged entities from the gateway and writes module drafts back.

    Reads treat 404 as "no data" and raise ``TransportError`` on any other
    non-2xx status. ``save_module_draft`` never raises for server or network
    failures; they come back as a failed ``SaveResult``.
    """

    def __init__(
        self,
        transport: Transport,
        on_invalidate: InvalidationListener | None = None,
    ) -> None:
        self._transport = transport
        self._on_invalidate = on_invalidate

    # ------------------------------------------------------------------ plumbing

    async def _read(
        self, path: str, *, method: HttpMethod = "GET", json: object = None
    ) -> object:
        response = await self._transport.fetch(path, method=method, json=json)
        if response.not_found:
            log.debug("%s %s returned 404, treating as empty", method, path)
            return None
        if not response.ok:
            reason = f" {response.reason}" if response.reason else ""
            raise TransportError(
                f"{method} {path} returned {response.status_code}{reason}",
                status_code=response.status_code,
            )
        return response.payload

    async def _read_list[M: BaseModel](
        self,
        model: type[M],
        path: str,
        *,
        context: str,
        method: HttpMethod = "GET",
        json: object = None,
    ) -> list[M]:
        payload = await self._read(path, method=method, json=json)
        if payload is None:
            return []
        return validate_items(model, unwrap_list(payload, context=context), context=context)

    async def _read_item[M: BaseModel](
        self,
        model: type[M],
        path: str,
        *,
        context: str,
        method: HttpMethod = "GET",
        json: object = None,
    ) -> M | None:
        payload = await self._read(path, method=method, json=json)
        if payload is None:
            return None
        return validate_item(model, unwrap_item(payload, context=context), context=context)

    # ------------------------------------------------------------------ modules

    async def list_course_modules(self, course_id: str) -> list[CourseModule]:
        payloads = await self._read_list(
            CourseModulePayload,
            f"/course/user/modules/{course_id}",
            context=f"modules of course {course_id}",
        )
        return _present(translate_course_module(item, course_id=course_id) for item in payloads)

    async def list_teacher_modules(self, course_id: str) -> list[CourseModule]:
        payloads = await self._read_list(
            CourseModulePayload,
            "/course/teacher/course-modules/list",
            context=f"teacher modules of course {course_id}",
            method="POST",
            json={"course_id": course_id},
        )
        return _present(translate_course_module(item, course_id=course_id) for item in payloads)

    async def get_course_module(self, course_id: str, module_code: str) -> CourseModule | None:
        for module in await self.list_course_modules(course_id):
            if module.module_code == module_code:
                return module
        return None

    # ------------------------------------------------------------------ commitments

    async def list_student_commitments(self, course_id: str) -> list[Commitment]:
        payloads = await self._read_list(
            CommitmentPayload,
            "/course/student/assignment-commitments/list",
            context=f"commitments of course {course_id}",
            method="POST",
            json={"course_id": course_id},
        )
        return _present(translate_commitment(item, course_id=course_id) for item in payloads)

    async def get_assignment_commitment(
        self, course_id: str, module_code: str, slt_hash: str
    ) -> Commitment | None:
        payload = await self._read_item(
            CommitmentPayload,
            "/course/student/assignment-commitment/get",
            context=f"commitment for {course_id}/{module_code}",
            method="POST",
            json={"course_id": course_id, "slt_hash": slt_hash, "course_module_code": module_code},
        )
        if payload is None:
            return None
        return translate_commitment(payload, course_id=course_id, module_code=module_code)

    async def module_commitment_statuses(self, course_id: str) -> dict[str, str]:
        """Resolve one learner status per module from all of the learner's commitments."""

        commitments = await self.list_student_commitments(course_id)
        return resolve_by_parent(
            (commitment for commitment in commitments if commitment.module_code),
            key=_module_code_of,
            status=_status_of,
        )

    async def list_teacher_commitments(self, course_id: str) -> list[Commitment]:
        payloads = await self._read_list(
            CommitmentPayload,
            "/course/teacher/assignment-commitments/list",
            context=f"teacher commitments of course {course_id}",
            method="POST",
            json={"course_id": course_id},
        )
        return _present(
            translate_commitment(item, course_id=course_id, review=True) for item in payloads
        )

    # ------------------------------------------------------------------ courses

    async def list_teacher_courses(self) -> list[Course]:
        payloads = await self._read_list(
            CoursePayload,
            "/course/teacher/courses/list",
            context="teacher courses",
            method="POST",
            json={},
        )
        return _present(translate_course(item) for item in payloads)

    # ------------------------------------------------------------------ projects

    async def list_projects(self) -> list[Project]:
        payloads = await self._read_list(
            ProjectPayload, "/project/user/projects/list", context="projects"
        )
        return _present(translate_project(item) for item in payloads)

    async def get_project(self, project_id: str) -> Project | None:
        payload = await self._read_item(
            ProjectPayload,
            f"/project/user/project/{project_id}",
            context=f"project {project_id}",
        )
        if payload is None:
            return None
        return translate_project(payload)

    async def list_project_tasks(self, project_id: str) -> list[Task]:
        payloads = await self._read_list(
            TaskPayload,
            "/project/user/tasks/list",
            context=f"tasks of project {project_id}",
            method="POST",
            json={"project_id": project_id},
        )
        tasks = _present(translate_task(item, project_id=project_id) for item in payloads)
        return list(dedupe_tasks(tasks))

    # ------------------------------------------------------------------ writes

    async def save_module_draft(self, draft: ModuleDraft) -> SaveResult:
        """Send the minimal update for ``draft``.

        Raises ``DraftStateError`` when the draft itself cannot be turned into
        a request. Server rejections and network failures are returned as a
        failed ``SaveResult`` without retrying.
        """

        request = build_request(draft)
        log.info(
            "Saving module %s/%s: targets=%s, lessons=%s, approval=%s",
            draft.course_id,
            draft.module_code,
            "locked" if request.slts is None else len(request.slts),
            "unchanged" if request.lessons is None else len(request.lessons),
            request.status is not None,
        )
        try:
            response = await self._transport.fetch(
                SAVE_MODULE_PATH, method="POST", json=request.to_payload()
            )
        except TransportError as exc:
            log.warning(f"Saving module {draft.course_id}/{draft.module_code} failed: {exc}")
            return SaveResult(success=False, error=str(exc), code=SaveErrorCode.TRANSPORT)

        body = validate_item(SaveModuleResponse, response.payload, context="module save")
        if body is None:
            body = SaveModuleResponse()
        changes = ChangeSummary.from_payload(
            validate_item(ChangesPayload, body.changes, context="module save changes")
        )

        if not response.ok or body.error:
            code = _error_code(body.code, response.status_code)
            error = (
                body.error
                or body.message
                or f"Failed to save module: {response.reason or response.status_code}"
            )
            log.warning(
                "Server rejected module %s/%s (%s): %s",
                draft.course_id,
                draft.module_code,
                code,
                error,
            )
            return SaveResult(success=False, error=error, code=code, changes=changes)

        saved = validate_item(SavedModulePayload, body.data, context="saved module")
        module = translate_saved_module(saved) if saved is not None else None
        keys = module_save_keys(draft.course_id, draft.module_code)
        if self._on_invalidate is not None:
            self._on_invalidate(keys)
        return SaveResult(success=True, changes=changes, module=module, invalidations=keys)


def _present[T](items: Iterable[T | None]) -> list[T]:
    return [item for item in items if item is not None]


def _module_code_of(commitment: Commitment) -> str:
    return commitment.module_code


def _status_of(commitment: Commitment) -> str:
    return commitment.status
