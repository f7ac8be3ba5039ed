import datetime as dt

import pytest

from clinicals import (
    AttendanceStatus,
    AttendanceType,
    ClinicalHoursTracker,
    ComplianceThresholds,
    FlagType,
    MakeupStatus,
    ReviewStatus,
    StudentStatus,
    UnknownStudent,
)

from helpers import (
    D,
    TODAY,
    build_store,
    make_attendance,
    make_log,
    make_obligation,
    make_scenario,
    make_student,
    make_submission,
    make_vr,
)

NOW = dt.datetime(2025, 3, 1, 9, 0, tzinfo=dt.timezone.utc)


def cohort_store():
    students = [
        make_student("STU-1"),
        make_student("STU-2", status=StudentStatus.AT_RISK),
        make_student("STU-3"),
    ]
    logs = [
        make_log("LOG-1", 300, is_simulation=False),
        make_log("LOG-2", 110, is_simulation=True, site="Sim Center"),
        make_log("LOG-3", 90, is_simulation=False, student_id="STU-2"),
        make_log("LOG-4", 15, is_simulation=True, site="Sim Center", student_id="STU-2"),
        make_log("LOG-5", 8, is_simulation=False, student_id="STU-3",
                 status=ReviewStatus.PENDING, date=dt.date(2025, 2, 1)),
    ]
    return build_store(
        students=students,
        logs=logs,
        vr=[make_vr("VRC-1", 2, student_id="STU-3")],
        submissions=[make_submission("SUB-1", 8, student_id="STU-3", date=dt.date(2025, 1, 5))],
        obligations=[
            make_obligation("MKP-1", 10, completed=6, student_id="STU-2"),
            make_obligation("MKP-2", 4, student_id="STU-3"),
        ],
        attendance=[
            make_attendance(f"ATT-{i}", AttendanceStatus.ABSENT, AttendanceType.CLINICAL,
                            student_id="STU-2")
            for i in range(3)
        ],
        scenarios=[make_scenario("VR-1", name="Sepsis Response", required=True)],
    )


def tracker_for(store, **kwargs):
    return ClinicalHoursTracker(store, clock=lambda: NOW, **kwargs)


async def test_summary_for_student_without_logs():
    store = build_store(students=[make_student("STU-9")])
    summary = await tracker_for(store).compute_compliance_summary("STU-9", TODAY)

    assert summary.total_hours == D(0)
    assert not summary.is_hours_compliant
    assert [f.type for f in summary.flags] == [FlagType.CLINICAL_BEHIND]


async def test_summary_for_sim_cap_violation():
    summary = await tracker_for(cohort_store()).compute_compliance_summary("STU-1", TODAY)

    assert summary.total_hours == D(410)
    assert summary.is_hours_compliant
    assert not summary.is_sim_compliant
    assert [f.type for f in summary.flags] == [FlagType.SIM_CAP_VIOLATION]


async def test_summary_for_struggling_student():
    flags = await tracker_for(cohort_store()).compute_flags("STU-2", TODAY)
    assert [f.type for f in flags] == [
        FlagType.CLINICAL_BEHIND,
        FlagType.ATTENDANCE_CONCERN,
        FlagType.MAKEUP_HOURS_OUTSTANDING,
        FlagType.AT_RISK_STATUS,
    ]


async def test_unknown_student():
    with pytest.raises(UnknownStudent):
        await tracker_for(cohort_store()).compute_compliance_summary("STU-404")


async def test_recompute_is_idempotent():
    tracker = tracker_for(cohort_store())
    first = await tracker.compute_compliance_summary("STU-2", TODAY)
    second = await tracker.compute_compliance_summary("STU-2", TODAY)
    assert first == second


async def test_hours_by_site_sorted_by_total():
    sites = await tracker_for(cohort_store()).hours_by_site("STU-1")
    assert [(s.site_name, s.total_hours) for s in sites] == [
        ("General Hospital", D(300)),
        ("Sim Center", D(110)),
    ]


async def test_vr_summary_uses_store_scenarios():
    summary = await tracker_for(cohort_store()).vr_summary("STU-3")
    assert summary.total_vr_hours == D(2)
    assert summary.required_remaining == []
    assert summary.completed_scenarios == 1


async def test_attendance_summary():
    counts = await tracker_for(cohort_store()).attendance_summary("STU-2", TODAY)
    assert counts.total_absences == 3
    assert counts.clinical_absences == 3


async def test_makeup_overview_largest_balance_first():
    overview = await tracker_for(cohort_store()).makeup_overview()
    # equal balances keep store order
    assert [(r.student_id, r.balance) for r in overview] == [("STU-2", D(4)), ("STU-3", D(4))]


async def test_makeup_overview_orders_unequal_balances():
    store = cohort_store()
    store.add_makeup_obligation(make_obligation("MKP-3", 12, student_id="STU-3"))
    overview = await tracker_for(store).makeup_overview()
    assert [(r.student_id, r.balance) for r in overview] == [("STU-3", D(16)), ("STU-2", D(4))]


async def test_makeup_logging_clears_flag():
    tracker = tracker_for(cohort_store())
    updated = await tracker.log_makeup_hours("MKP-1", D(4))
    assert updated.status is MakeupStatus.COMPLETED

    flags = await tracker.compute_flags("STU-2", TODAY)
    assert FlagType.MAKEUP_HOURS_OUTSTANDING not in [f.type for f in flags]

    reconciliation = await tracker.reconcile_makeup_hours("STU-2")
    assert reconciliation.balance == D(0)
    assert reconciliation.obligations == []


async def test_pending_reviews_oldest_first():
    pending = await tracker_for(cohort_store()).pending_reviews()
    assert [r.id for r in pending] == ["SUB-1", "LOG-5"]


async def test_approval_flows_into_next_summary():
    tracker = tracker_for(cohort_store())
    before = await tracker.compute_compliance_summary("STU-3", TODAY)

    await tracker.approve("LOG-5")
    await tracker.approve("SUB-1")
    after = await tracker.compute_compliance_summary("STU-3", TODAY)

    assert after.total_hours == before.total_hours + D(16)
    assert (await tracker.store.get_student("STU-3")).clinical_hours_completed == D(18)
    assert await tracker.pending_reviews() == []


async def test_reject_through_tracker():
    tracker = tracker_for(cohort_store())
    await tracker.reject("SUB-1", "Hours don't match the preceptor sheet", reviewed_by="INS-2")
    record = await tracker.store.get_reviewable("SUB-1")
    assert record.status is ReviewStatus.REJECTED
    assert record.reviewed_by == "INS-2"


async def test_submissions_can_be_excluded_from_totals():
    store = cohort_store()
    tracker = tracker_for(store, thresholds=ComplianceThresholds(count_hour_submissions=False))
    await tracker.approve("SUB-1")

    summary = await tracker.compute_compliance_summary("STU-3", TODAY)
    assert summary.total_hours == D(2)
    assert await tracker.recompute_student_hours("STU-3") == D(2)


async def test_cohort_aggregation_isolates_failures():
    results = await tracker_for(cohort_store()).aggregate_cohort(
        ["STU-1", "STU-404", "STU-2", "STU-1"], TODAY
    )

    assert list(results) == ["STU-1", "STU-404", "STU-2"]
    assert results["STU-1"].ok
    assert results["STU-2"].ok
    assert not results["STU-404"].ok
    assert results["STU-404"].error.startswith("UnknownStudent")


async def test_cohort_aggregation_single_cancel():
    tracker = tracker_for(cohort_store())
    aggregation = tracker.start_cohort_aggregation(["STU-1", "STU-2", "STU-3"], TODAY)

    assert aggregation.cancel("STU-2") is True
    assert aggregation.cancel("STU-999") is False

    results = await aggregation.results()
    assert results["STU-2"].error == "cancelled"
    assert results["STU-1"].ok
    assert results["STU-3"].ok
    assert aggregation.student_ids == ["STU-1", "STU-2", "STU-3"]


async def test_empty_cohort():
    assert await tracker_for(cohort_store()).aggregate_cohort([]) == {}


async def test_removed_student_records_disappear():
    store = cohort_store()
    store.remove_student("STU-3")
    tracker = tracker_for(store)

    with pytest.raises(UnknownStudent):
        await tracker.compute_compliance_summary("STU-3")
    assert [r.id for r in await tracker.pending_reviews()] == []


async def test_classification_at_approval_clears_review_flag():
    tracker = tracker_for(cohort_store())
    await tracker.approve("SUB-1")
    await tracker.approve("LOG-5")
    flags = await tracker.compute_flags("STU-3", TODAY)
    assert FlagType.CLASSIFICATION_REVIEW in [f.type for f in flags]

    tracker = tracker_for(cohort_store())
    await tracker.approve("SUB-1", is_simulation=False)
    await tracker.approve("LOG-5")
    summary = await tracker.compute_compliance_summary("STU-3", TODAY)
    assert summary.heuristic_record_ids == []
    assert FlagType.CLASSIFICATION_REVIEW not in [f.type for f in summary.flags]
    assert summary.direct_hours == D(16)
