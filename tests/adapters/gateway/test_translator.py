from __future__ import annotations

from credsync.adapters.gateway.schema import (
    CommitmentPayload,
    CourseModulePayload,
    CoursePayload,
    ProjectPayload,
    SavedModulePayload,
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
from credsync.domain.model import Source

SLT_HASH = "ab" * 32


def _merged_module_payload() -> dict[str, object]:
    return {
        "course_id": "course-1",
        "slt_hash": SLT_HASH,
        "created_by": "teacher",
        "prerequisites": None,
        "on_chain_slts": ["I can read", "I can write"],
        "source": "merged",
        "content": {
            "course_module_code": "101",
            "title": "Basics",
            "module_status": "ACTIVE",
            "slts": [
                {"slt_text": "I can write", "module_index": 2},
                {
                    "slt_text": "I can read",
                    "module_index": 1,
                    "lesson": {"title": "Reading", "lesson_content": {"type": "doc"}},
                },
            ],
            "assignment": {"title": "Essay", "id": 9},
        },
    }


def test_translate_merged_module() -> None:
    payload = CourseModulePayload.model_validate(_merged_module_payload())

    module = translate_course_module(payload, course_id="course-1")

    assert module is not None
    assert module.source is Source.MERGED
    assert module.status == "ON_CHAIN"
    assert module.slts_locked
    assert module.ledger is not None
    assert module.ledger.on_chain_slts == ("I can read", "I can write")
    assert module.ledger.prerequisites == ()
    assert [target.text for target in module.slts] == ["I can read", "I can write"]
    lesson = module.slts[0].lesson
    assert lesson is not None
    assert lesson.content_json == {"type": "doc"}
    assert lesson.slt_index == 1
    assert module.content is not None
    assert module.content.assignment is not None
    assert module.content.assignment.id == 9


def test_untagged_module_with_content_only_is_db_only() -> None:
    payload = CourseModulePayload.model_validate(
        {"content": {"course_module_code": "102", "title": "Draft", "module_status": "DRAFT"}}
    )

    module = translate_course_module(payload, course_id="course-1")

    assert module is not None
    assert module.source is Source.DB_ONLY
    assert module.ledger is None
    assert module.status == "DRAFT"
    assert module.course_id == "course-1"


def test_db_only_module_without_status_is_draft() -> None:
    payload = CourseModulePayload.model_validate(
        {"source": "db_only", "content": {"course_module_code": "102"}}
    )

    module = translate_course_module(payload, course_id="course-1")

    assert module is not None
    assert module.status == "DRAFT"


def test_chain_only_tag_drops_contradicting_content() -> None:
    data = _merged_module_payload()
    data["source"] = "chain_only"
    payload = CourseModulePayload.model_validate(data)

    module = translate_course_module(payload, course_id="course-1")

    assert module is not None
    assert module.source is Source.CHAIN_ONLY
    assert module.content is None
    assert module.ledger is not None
    assert module.status == "ON_CHAIN"


def test_db_only_tag_drops_contradicting_ledger() -> None:
    data = _merged_module_payload()
    data["source"] = "db_only"
    payload = CourseModulePayload.model_validate(data)

    module = translate_course_module(payload, course_id="course-1")

    assert module is not None
    assert module.ledger is None
    assert module.content is not None


def test_merged_tag_with_missing_content_keeps_tag() -> None:
    payload = CourseModulePayload.model_validate(
        {"slt_hash": SLT_HASH, "created_by": "teacher", "source": "merged"}
    )

    module = translate_course_module(payload, course_id="course-1")

    assert module is not None
    assert module.source is Source.MERGED
    assert module.content is None


def test_module_absent_from_both_stores_is_dropped() -> None:
    payload = CourseModulePayload.model_validate({"course_id": "course-1"})

    assert translate_course_module(payload, course_id="course-1") is None


def test_translate_saved_module_echo() -> None:
    payload = SavedModulePayload.model_validate(
        {
            "course_module_code": "101",
            "course_id": "course-1",
            "title": "Basics",
            "status": "DRAFT",
            "slts": [
                {"slt_index": 2, "slt_text": "I can write"},
                {"slt_index": 1, "slt_text": "I can read"},
            ],
            "lessons": [{"slt_index": 2, "title": "Writing"}],
        }
    )

    module = translate_saved_module(payload)

    assert module.source is Source.DB_ONLY
    assert module.status == "DRAFT"
    assert [target.text for target in module.slts] == ["I can read", "I can write"]
    assert module.slts[0].lesson is None
    lesson = module.slts[1].lesson
    assert lesson is not None
    assert lesson.title == "Writing"


def test_translate_saved_on_chain_module_is_merged() -> None:
    payload = SavedModulePayload.model_validate(
        {
            "course_module_code": "101",
            "course_id": "course-1",
            "status": "ON_CHAIN",
            "slt_hash": SLT_HASH,
        }
    )

    module = translate_saved_module(payload)

    assert module.source is Source.MERGED
    assert module.slt_hash == SLT_HASH


def test_translate_learner_commitment_with_nested_content() -> None:
    payload = CommitmentPayload.model_validate(
        {
            "course_id": "course-1",
            "course_module_code": "101",
            "slt_hash": SLT_HASH,
            "on_chain_status": "COMMITTED",
            "content": {
                "commitment_status": "SUBMITTED",
                "evidence": {"url": "https://example.test"},
                "assignment_evidence_hash": "ev-hash",
            },
        }
    )

    commitment = translate_commitment(payload, course_id="course-1")

    assert commitment is not None
    assert commitment.source is Source.MERGED
    assert commitment.status == "PENDING_APPROVAL"
    assert commitment.module_code == "101"
    assert commitment.evidence_hash == "ev-hash"


def test_translate_chain_only_commitment_uses_on_chain_status() -> None:
    payload = CommitmentPayload.model_validate(
        {"course_id": "course-1", "slt_hash": SLT_HASH, "on_chain_status": "ACCEPTED"}
    )

    commitment = translate_commitment(payload, course_id="course-1", module_code="101")

    assert commitment is not None
    assert commitment.source is Source.CHAIN_ONLY
    assert commitment.status == "ASSIGNMENT_ACCEPTED"
    assert commitment.module_code == "101"
    assert commitment.content is None


def test_translate_commitment_without_status_uses_source_fallback() -> None:
    payload = CommitmentPayload.model_validate(
        {"course_id": "course-1", "on_chain_content": "abcd", "source": "chain_only"}
    )

    commitment = translate_commitment(payload, course_id="course-1")

    assert commitment is not None
    assert commitment.status == "PENDING_APPROVAL"


def test_translate_review_commitment() -> None:
    payload = CommitmentPayload.model_validate(
        {
            "course_id": "course-1",
            "course_module_code": "101",
            "student_alias": "alice",
            "commitment_status": "REFUSED",
            "source": "merged",
            "on_chain_status": "PENDING_APPROVAL",
        }
    )

    commitment = translate_commitment(payload, course_id="course-1", review=True)

    assert commitment is not None
    assert commitment.status == "DENIED"
    assert commitment.student_alias == "alice"


def test_commitment_absent_from_both_stores_is_dropped() -> None:
    payload = CommitmentPayload.model_validate({"course_id": "course-1"})

    assert translate_commitment(payload, course_id="course-1") is None


def test_translate_db_only_task() -> None:
    payload = TaskPayload.model_validate(
        {"content": {"title": "Draft task", "task_index": 3}, "source": "db_only"}
    )

    task = translate_task(payload, project_id="project-1")

    assert task is not None
    assert task.source is Source.DB_ONLY
    assert task.status == "DRAFT"
    assert task.lifecycle == "draft"
    assert task.index == 3
    assert task.ledger is None
    assert task.title == "Draft task"


def test_translate_merged_task_accepts_task_id() -> None:
    payload = TaskPayload.model_validate(
        {
            "task_id": "hash-1",
            "project_id": "project-1",
            "lovelace_amount": 5_000_000,
            "assets": [{"policy_id": "p", "name": "token", "amount": 2}],
            "content": {"title": "Write docs"},
        }
    )

    task = translate_task(payload)

    assert task is not None
    assert task.task_hash == "hash-1"
    assert task.source is Source.MERGED
    assert task.status == "ON_CHAIN"
    assert task.lifecycle == "active"
    assert task.ledger is not None
    assert task.ledger.tokens[0].quantity == 2


def test_translate_on_chain_task_drops_content() -> None:
    payload = TaskPayload.model_validate(
        {"task_hash": "hash-1", "content": {"title": "ignored"}, "on_chain_content": "6869"}
    )

    task = translate_task(payload, project_id="project-1", on_chain=True)

    assert task is not None
    assert task.source is Source.CHAIN_ONLY
    assert task.content is None
    assert task.lifecycle == "active"
    assert task.title == "hi"


def test_dedupe_tasks_keeps_first_occurrence() -> None:
    first = translate_task(
        TaskPayload.model_validate({"task_hash": "h1", "lovelace_amount": 1}), project_id="p"
    )
    duplicate = translate_task(
        TaskPayload.model_validate({"task_hash": "h1", "lovelace_amount": 2}), project_id="p"
    )
    unhashed = translate_task(
        TaskPayload.model_validate({"content": {"title": "draft"}}), project_id="p"
    )
    assert first is not None
    assert duplicate is not None
    assert unhashed is not None

    tasks = dedupe_tasks([first, duplicate, unhashed, unhashed])

    assert tasks == (first, unhashed, unhashed)


def test_translate_project() -> None:
    payload = ProjectPayload.model_validate(
        {
            "project_id": "project-1",
            "owner": "owner",
            "managers": ["m1"],
            "prerequisites": [{"course_id": "course-1", "slt_hashes": [SLT_HASH]}],
            "content": {"title": "Docs sprint"},
            "tasks": [
                {"task_hash": "h1", "lovelace_amount": 1},
                {"task_hash": "h1", "lovelace_amount": 1},
            ],
            "assessments": [{"task_hash": "h1", "assessed_by": "m1", "decision": "accept"}],
        }
    )

    project = translate_project(payload)

    assert project is not None
    assert project.source is Source.MERGED
    assert project.status == "active"
    assert project.title == "Docs sprint"
    assert len(project.tasks) == 1
    assert project.tasks[0].source is Source.CHAIN_ONLY
    assert project.assessments[0].decision == "ACCEPTED"
    assert project.ledger is not None
    assert project.ledger.prerequisites[0].slt_hashes == (SLT_HASH,)


def test_project_without_id_is_dropped() -> None:
    payload = ProjectPayload.model_validate({"owner": "owner"})

    assert translate_project(payload) is None


def test_translate_course_flat_and_nested_content() -> None:
    nested = translate_course(
        CoursePayload.model_validate(
            {"course_id": "c1", "owner": "o", "content": {"title": "Nested", "live": True}}
        )
    )
    flat = translate_course(CoursePayload.model_validate({"course_id": "c2", "title": "Flat"}))

    assert nested is not None
    assert nested.source is Source.MERGED
    assert nested.status == "synced"
    assert nested.title == "Nested"
    assert flat is not None
    assert flat.source is Source.DB_ONLY
    assert flat.status == "db_only"
    assert flat.title == "Flat"
