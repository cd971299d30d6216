# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from credsync.app import (
    approve_module,
    get_course_module,
    list_course_modules,
    list_project_tasks,
    list_projects,
    module_commitment_statuses,
)
from credsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from credsync.domain.model import CourseModule, Project, Task

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect and update merged credential data")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    modules = subparsers.add_parser("modules", help="List the modules of a course")
    modules.add_argument("course_id", type=str, help="Course id (policy id)")

    module = subparsers.add_parser("module", help="Show one module with its learning targets")
    module.add_argument("course_id", type=str, help="Course id (policy id)")
    module.add_argument("module_code", type=str, help="Module code")

    commitments = subparsers.add_parser(
        "commitments",
        help="Show the resolved assignment status per module",
    )
    commitments.add_argument("course_id", type=str, help="Course id (policy id)")

    subparsers.add_parser("projects", help="List projects")

    tasks = subparsers.add_parser("tasks", help="List the tasks of a project")
    tasks.add_argument("project_id", type=str, help="Project id")

    approve = subparsers.add_parser(
        "approve",
        help="Submit a drafting module for approval, locking its learning targets",
    )
    approve.add_argument("course_id", type=str, help="Course id (policy id)")
    approve.add_argument("module_code", type=str, help="Module code")

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    for name in ("course_id", "module_code", "project_id"):
        value = getattr(args, name, None)
        if value is not None and not value.strip():
            raise ValueError(f"{name} must not be blank")


def _format_module(module: CourseModule) -> str:
    return "\t".join(
        (module.module_code or "-", module.status or "-", module.source.value, module.title or "")
    )


def _format_project(project: Project) -> str:
    return "\t".join((project.project_id, project.status, project.source.value, project.title))


def _format_task(task: Task) -> str:
    index = "-" if task.index is None else str(task.index)
    return "\t".join((index, task.task_hash or "-", task.lifecycle, task.source.value, task.title))


def _show_module(module: CourseModule) -> None:
    print(_format_module(module))
    if module.slt_hash:
        print(f"slt_hash\t{module.slt_hash}")
    print(f"locked\t{module.slts_locked}")
    for target in module.slts:
        lesson = "\t(lesson)" if target.lesson is not None else ""
        print(f"{target.index}\t{target.text}{lesson}")


def _dispatch(args: argparse.Namespace) -> int:
    if args.command == "modules":
        for module in list_course_modules(args.course_id):
            print(_format_module(module))
    elif args.command == "module":
        module = get_course_module(args.course_id, args.module_code)
        if module is None:
            log.error("Module %s not found in course %s", args.module_code, args.course_id)
            return 1
        _show_module(module)
    elif args.command == "commitments":
        for module_code, status in sorted(module_commitment_statuses(args.course_id).items()):
            print(f"{module_code}\t{status}")
    elif args.command == "projects":
        for project in list_projects():
            print(_format_project(project))
    elif args.command == "tasks":
        for task in list_project_tasks(args.project_id):
            print(_format_task(task))
    elif args.command == "approve":
        result = approve_module(args.course_id, args.module_code)
        if not result.success:
            if result.requires_refetch:
                log.error("Learning targets are already locked on the server; reload the module")
            return 1
        print(f"{args.module_code}\tsubmitted for approval")
    else:
        raise ValueError(f"Unsupported command: {args.command}")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        exit_code = _dispatch(parsed_args)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)
    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
