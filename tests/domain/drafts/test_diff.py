from __future__ import annotations

import asyncio

import pytest

from credsync.domain.drafts import DraftSession, build_request, compute_slt_hash
from credsync.domain.model import (
    ContentBlock,
    DeletedRecord,
    DraftStateError,
    ExistingRecord,
    ModuleDraft,
    NewRecord,
    TargetRecord,
)
from tests.support.gateway_stub import GatewayStub, StoredModule
from tests.support.modules import COURSE_ID, MODULE_CODE, make_lesson, make_module


def _scenario_draft(*, locked: bool) -> ModuleDraft:
    return ModuleDraft(
        course_id=COURSE_ID,
        module_code=MODULE_CODE,
        title="Intro to X",
        targets=[
            ExistingRecord(key=1, payload="I can explain X", modified=True),
            NewRecord("I can build X"),
            NewRecord("I can test X"),
        ],
        slts_locked=locked,
    )


def test_unlocked_draft_sends_new_and_existing_targets() -> None:
    payload = build_request(_scenario_draft(locked=False)).to_payload()

    assert payload["title"] == "Intro to X"
    slts = payload["slts"]
    assert len(slts) == 3
    assert [item for item in slts if "slt_index" not in item] == [
        {"slt_text": "I can build X"},
        {"slt_text": "I can test X"},
    ]
    assert [item for item in slts if "slt_index" in item] == [
        {"slt_index": 1, "slt_text": "I can explain X"}
    ]


def test_locked_draft_omits_targets_but_keeps_title() -> None:
    payload = build_request(_scenario_draft(locked=True)).to_payload()

    assert "slts" not in payload
    assert payload["title"] == "Intro to X"


@pytest.mark.parametrize(
    "targets",
    [
        [],
        [NewRecord("new")],
        [ExistingRecord(key=1, payload="same")],
        [ExistingRecord(key=1, payload="changed", modified=True)],
        [DeletedRecord(1), NewRecord("new")],
        [DeletedRecord(1), DeletedRecord(2)],
    ],
)
def test_locked_draft_never_sends_targets(targets: list[TargetRecord]) -> None:
    draft = ModuleDraft(
        course_id=COURSE_ID,
        module_code=MODULE_CODE,
        title="Locked",
        targets=targets,
        slts_locked=True,
    )

    assert "slts" not in build_request(draft).to_payload()


def test_deleted_targets_are_omitted() -> None:
    draft = ModuleDraft(
        course_id=COURSE_ID,
        module_code=MODULE_CODE,
        targets=[DeletedRecord(1), ExistingRecord(key=1, payload="kept", modified=True)],
    )

    payload = build_request(draft).to_payload()

    assert payload["slts"] == [{"slt_index": 1, "slt_text": "kept"}]


def test_scalars_are_always_sent() -> None:
    draft = ModuleDraft(course_id=COURSE_ID, module_code=MODULE_CODE, title="T")

    payload = build_request(draft).to_payload()

    assert payload["course_id"] == COURSE_ID
    assert payload["course_module_code"] == MODULE_CODE
    assert payload["description"] is None
    assert payload["image_url"] is None
    assert payload["video_url"] is None
    assert "assignment" not in payload
    assert "lessons" not in payload
    assert "status" not in payload


def test_singleton_outcomes() -> None:
    block = ContentBlock(title="Assignment", description="Write it")
    draft = ModuleDraft(
        course_id=COURSE_ID,
        module_code=MODULE_CODE,
        assignment=NewRecord(block),
        introduction=DeletedRecord(8),
    )

    payload = build_request(draft).to_payload()

    assert payload["assignment"] == {"title": "Assignment", "description": "Write it"}
    assert payload["delete_introduction"] is True
    assert "introduction" not in payload
    assert "delete_assignment" not in payload


def test_unmodified_singleton_is_omitted() -> None:
    draft = ModuleDraft(
        course_id=COURSE_ID,
        module_code=MODULE_CODE,
        assignment=ExistingRecord(key=7, payload=ContentBlock(title="Same")),
        introduction=ExistingRecord(key=8, payload=ContentBlock(title="Edited"), modified=True),
    )

    payload = build_request(draft).to_payload()

    assert "assignment" not in payload
    assert payload["introduction"] == {"title": "Edited"}


def test_lessons_are_sorted_by_target_position() -> None:
    draft = ModuleDraft(
        course_id=COURSE_ID,
        module_code=MODULE_CODE,
        lessons={2: NewRecord(make_lesson(2, "Second")), 1: NewRecord(make_lesson(1, "First"))},
    )

    payload = build_request(draft).to_payload()

    assert [lesson["slt_index"] for lesson in payload["lessons"]] == [1, 2]
    assert payload["lessons"][0]["title"] == "First"


def test_removing_last_seeded_lesson_sends_empty_collection() -> None:
    draft = ModuleDraft(
        course_id=COURSE_ID,
        module_code=MODULE_CODE,
        seeded_lessons=frozenset({1}),
    )

    assert build_request(draft).to_payload()["lessons"] == []


def test_approval_adds_status_and_hash() -> None:
    draft = ModuleDraft(
        course_id=COURSE_ID,
        module_code=MODULE_CODE,
        targets=[ExistingRecord(key=1, payload="I can read"), NewRecord("I can write")],
        request_approval=True,
    )

    payload = build_request(draft).to_payload()

    assert payload["status"] == "APPROVED"
    assert payload["slt_hash"] == compute_slt_hash(["I can read", "I can write"])
    assert len(payload["slts"]) == 2


def test_approval_of_locked_draft_is_rejected() -> None:
    draft = ModuleDraft(
        course_id=COURSE_ID,
        module_code=MODULE_CODE,
        slts_locked=True,
        request_approval=True,
    )

    with pytest.raises(DraftStateError):
        build_request(draft)


def test_removed_lesson_is_deleted_by_absence_on_the_server() -> None:
    module = make_module(
        targets=("I can read", "I can write", "I can count"),
        lessons={1: "Reading", 2: "Writing", 3: "Counting"},
    )
    session = DraftSession(COURSE_ID, MODULE_CODE)
    session.open(module)
    session.set_lesson(2, None)

    payload = build_request(session.draft).to_payload()  # type: ignore[arg-type]
    assert [lesson["slt_index"] for lesson in payload["lessons"]] == [1, 3]

    stub = GatewayStub()
    stored = stub.add_module(
        StoredModule(
            course_id=COURSE_ID,
            module_code=MODULE_CODE,
            title="Module",
            slts=["I can read", "I can write", "I can count"],
            lessons={
                1: payload["lessons"][0],
                2: {"slt_index": 2, "title": "Writing"},
                3: payload["lessons"][1],
            },
        )
    )

    response = asyncio.run(
        stub.fetch("/course/teacher/course-module/update", method="POST", json=payload)
    )

    assert response.status_code == 200
    assert sorted(stored.lessons) == [1, 3]
    assert response.payload["changes"]["lessons_deleted"] == 1  # type: ignore[index]
    assert response.payload["changes"]["lessons_created"] == 0  # type: ignore[index]
    assert response.payload["changes"]["lessons_updated"] == 0  # type: ignore[index]
    assert stored.slts == ["I can read", "I can write", "I can count"]
