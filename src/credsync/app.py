"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from credsync.adapters.gateway import GatewayClient
from credsync.config import get_gateway_config
from credsync.coordinator import ReconciliationCoordinator, SaveResult
from credsync.domain.drafts import DraftSession

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from credsync.config import GatewayConfig
    from credsync.domain.model import Commitment, CourseModule, Project, Task
    from credsync.domain.ports import InvalidationKey, InvalidationListener, Transport

type Operation[T] = Callable[[ReconciliationCoordinator], Awaitable[T]]

log = getLogger(__name__)


def build_gateway_client(config: GatewayConfig | None = None) -> GatewayClient:
    return GatewayClient(config=config or get_gateway_config())


def build_coordinator(
    *,
    transport: Transport | None = None,
    on_invalidate: InvalidationListener | None = None,
) -> ReconciliationCoordinator:
    """Wire a coordinator to the configured gateway unless a transport is given."""

    return ReconciliationCoordinator(transport or build_gateway_client(), on_invalidate)


def _run[T](operation: Operation[T], *, transport: Transport | None = None) -> T:
    async def runner() -> T:
        if transport is not None:
            coordinator = build_coordinator(transport=transport, on_invalidate=_log_invalidations)
            return await operation(coordinator)
        async with build_gateway_client() as client:
            coordinator = build_coordinator(transport=client, on_invalidate=_log_invalidations)
            return await operation(coordinator)

    return asyncio.run(runner())


def _log_invalidations(keys: tuple[InvalidationKey, ...]) -> None:
    for key in keys:
        log.debug("Invalidated %s", key)


def list_course_modules(course_id: str, *, transport: Transport | None = None) -> list[CourseModule]:
    modules = _run(lambda coordinator: coordinator.list_course_modules(course_id), transport=transport)
    log.info("Fetched %d modules for course %s", len(modules), course_id)
    return modules


def get_course_module(
    course_id: str, module_code: str, *, transport: Transport | None = None
) -> CourseModule | None:
    return _run(
        lambda coordinator: coordinator.get_course_module(course_id, module_code),
        transport=transport,
    )


def list_student_commitments(
    course_id: str, *, transport: Transport | None = None
) -> list[Commitment]:
    return _run(
        lambda coordinator: coordinator.list_student_commitments(course_id), transport=transport
    )


def module_commitment_statuses(
    course_id: str, *, transport: Transport | None = None
) -> dict[str, str]:
    statuses = _run(
        lambda coordinator: coordinator.module_commitment_statuses(course_id), transport=transport
    )
    log.info("Resolved commitment status for %d modules of course %s", len(statuses), course_id)
    return statuses


def list_projects(*, transport: Transport | None = None) -> list[Project]:
    projects = _run(lambda coordinator: coordinator.list_projects(), transport=transport)
    log.info("Fetched %d projects", len(projects))
    return projects


def list_project_tasks(project_id: str, *, transport: Transport | None = None) -> list[Task]:
    tasks = _run(lambda coordinator: coordinator.list_project_tasks(project_id), transport=transport)
    log.info("Fetched %d tasks for project %s", len(tasks), project_id)
    return tasks


def approve_module(
    course_id: str, module_code: str, *, transport: Transport | None = None
) -> SaveResult:
    """Fetch a drafting module and submit it for approval with its current learning targets."""

    async def approve(coordinator: ReconciliationCoordinator) -> SaveResult:
        module = await coordinator.get_course_module(course_id, module_code)
        if module is None:
            raise ValueError(f"Module {module_code!r} not found in course {course_id}")
        session = DraftSession(course_id, module_code)
        session.open(module)
        session.request_approval()
        result = await session.save(coordinator.save_module_draft)
        if result is None:
            raise RuntimeError("Approval request produced no changes to save")
        return result

    result = _run(approve, transport=transport)
    if result.success:
        log.info(f"Submitted module {course_id}/{module_code} for approval")
    else:
        log.warning(
            "Approval of module %s/%s failed (%s): %s",
            course_id,
            module_code,
            result.code,
            result.error,
        )
    return result
