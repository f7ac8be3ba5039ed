import asyncio
import datetime as dt

import pytest

from clinicals import (
    ApprovalWorkflowManager,
    InvalidStateTransition,
    MakeupStatus,
    MissingFeedback,
    ReviewStatus,
    UnknownRecord,
)

from helpers import D, build_store, make_log, make_obligation, make_submission

NOW = dt.datetime(2025, 3, 1, 14, 30, tzinfo=dt.timezone.utc)


def manager_for(store):
    return ApprovalWorkflowManager(store, clock=lambda: NOW)


async def test_approving_submission_counts_its_hours_once():
    store = build_store(logs=[make_log("LOG-1", 16, is_simulation=False)],
                        submissions=[make_submission("SUB-1", 8)])
    manager = manager_for(store)

    await manager.approve("SUB-1", feedback="Nice work", reviewed_by="INS-1")

    record = await store.get_reviewable("SUB-1")
    student = await store.get_student("STU-1")
    assert record.status is ReviewStatus.APPROVED
    assert record.reviewer_feedback == "Nice work"
    assert record.reviewed_by == "INS-1"
    assert record.reviewed_at == NOW
    assert student.clinical_hours_completed == D(24)

    await manager.recompute_student_hours("STU-1")
    assert (await store.get_student("STU-1")).clinical_hours_completed == D(24)


async def test_second_approval_is_rejected_and_changes_nothing():
    store = build_store(submissions=[make_submission("SUB-1", 8)])
    manager = manager_for(store)
    await manager.approve("SUB-1")

    with pytest.raises(InvalidStateTransition) as excinfo:
        await manager.approve("SUB-1")

    assert excinfo.value.current == "approved"
    assert (await store.get_student("STU-1")).clinical_hours_completed == D(8)


async def test_approving_clinical_log_sets_instructor_feedback():
    store = build_store(logs=[make_log("LOG-1", 6, is_simulation=False, status=ReviewStatus.PENDING)])
    await manager_for(store).approve("LOG-1", feedback="Good assessment")

    record = await store.get_reviewable("LOG-1")
    assert record.status is ReviewStatus.APPROVED
    assert record.instructor_feedback == "Good assessment"
    assert (await store.get_student("STU-1")).clinical_hours_completed == D(6)


async def test_reject_requires_feedback():
    store = build_store(submissions=[make_submission("SUB-1", 8)])
    manager = manager_for(store)

    for feedback in (None, "", "   "):
        with pytest.raises(MissingFeedback):
            await manager.reject("SUB-1", feedback)

    assert (await store.get_reviewable("SUB-1")).status is ReviewStatus.PENDING


async def test_reject_stores_feedback_and_leaves_hours_untouched():
    store = build_store(logs=[make_log("LOG-1", 10, is_simulation=False)],
                        submissions=[make_submission("SUB-1", 8)])
    await manager_for(store).reject("SUB-1", "  Missing preceptor signature ")

    record = await store.get_reviewable("SUB-1")
    assert record.status is ReviewStatus.REJECTED
    assert record.reviewer_feedback == "Missing preceptor signature"
    assert (await store.get_student("STU-1")).clinical_hours_completed == D(10)


async def test_rejected_record_cannot_be_approved():
    store = build_store(submissions=[make_submission("SUB-1", 8, status=ReviewStatus.REJECTED)])
    with pytest.raises(InvalidStateTransition):
        await manager_for(store).approve("SUB-1")


async def test_unknown_record():
    with pytest.raises(UnknownRecord):
        await manager_for(build_store()).approve("SUB-404")


async def test_concurrent_approvals_apply_exactly_once():
    store = build_store(submissions=[make_submission("SUB-1", 8)])
    manager = manager_for(store)

    results = await asyncio.gather(
        manager.approve("SUB-1"),
        manager.approve("SUB-1"),
        manager.approve("SUB-1"),
        return_exceptions=True,
    )

    errors = [r for r in results if isinstance(r, Exception)]
    assert len(errors) == 2
    assert all(isinstance(e, InvalidStateTransition) for e in errors)
    assert (await store.get_student("STU-1")).clinical_hours_completed == D(8)


async def test_concurrent_reviews_of_different_records_all_count():
    submissions = [make_submission(f"SUB-{i}", 4) for i in range(5)]
    store = build_store(submissions=submissions)
    manager = manager_for(store)

    await asyncio.gather(*(manager.approve(s.id) for s in submissions))
    assert (await store.get_student("STU-1")).clinical_hours_completed == D(20)


async def test_logging_makeup_to_full_balance_completes_it():
    store = build_store(obligations=[make_obligation("MKP-1", 10)])
    manager = manager_for(store)

    partial = await manager.log_makeup_hours("MKP-1", D(6))
    assert partial.status is MakeupStatus.IN_PROGRESS
    assert partial.balance == D(4)

    done = await manager.log_makeup_hours("MKP-1", D(6))
    assert done.hours_completed == D(10)
    assert done.status is MakeupStatus.COMPLETED
    assert done.completion_date == NOW.date()


async def test_logging_makeup_validates_input_and_state():
    store = build_store(obligations=[
        make_obligation("MKP-1", 10),
        make_obligation("MKP-2", 4, completed=4, status=MakeupStatus.COMPLETED),
    ])
    manager = manager_for(store)

    with pytest.raises(ValueError):
        await manager.log_makeup_hours("MKP-1", D(0))
    with pytest.raises(InvalidStateTransition):
        await manager.log_makeup_hours("MKP-2", D(1))
    with pytest.raises(UnknownRecord):
        await manager.log_makeup_hours("MKP-404", D(1))


async def test_complete_makeup_requires_hours_done():
    store = build_store(obligations=[
        make_obligation("MKP-1", 10, completed=10, status=MakeupStatus.IN_PROGRESS),
        make_obligation("MKP-2", 10, completed=6, status=MakeupStatus.IN_PROGRESS),
    ])
    manager = manager_for(store)

    completed = await manager.complete_makeup("MKP-1")
    assert completed.status is MakeupStatus.COMPLETED
    assert completed.completion_date == NOW.date()

    with pytest.raises(InvalidStateTransition):
        await manager.complete_makeup("MKP-2")
    stored = await store.get_makeup_obligation("MKP-2")
    assert stored.status is MakeupStatus.IN_PROGRESS
    assert stored.balance == D(4)

    with pytest.raises(InvalidStateTransition):
        await manager.complete_makeup("MKP-1")


async def test_reviewer_classification_is_recorded_on_approval():
    store = build_store(submissions=[make_submission("SUB-1", 8, site="Sim Lab B")])
    await manager_for(store).approve("SUB-1", is_simulation=False)

    record = await store.get_reviewable("SUB-1")
    assert record.is_simulation is False
    assert record.status is ReviewStatus.APPROVED
