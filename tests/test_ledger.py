from decimal import Decimal

from clinicals import DEFAULT_LOG_HOURS, HourLedgerAggregator, ReviewStatus

from helpers import D, make_log, make_scenario, make_submission, make_vr


def test_totals_are_sum_of_direct_and_sim():
    logs = [
        make_log("LOG-1", "7.25", is_simulation=False),
        make_log("LOG-2", "0.1", is_simulation=False, site="Mercy Hospital"),
        make_log("LOG-3", "0.2", is_simulation=True, site="Skills Center"),
    ]
    ledger = HourLedgerAggregator().aggregate("STU-1", logs, [make_vr("VR-A", "1.3")])

    assert ledger.direct_hours == D("7.35")
    assert ledger.sim_hours == D("1.5")
    assert ledger.total_hours == ledger.direct_hours + ledger.sim_hours == D("8.85")


def test_only_approved_logs_count():
    logs = [
        make_log("LOG-1", 8, is_simulation=False),
        make_log("LOG-2", 8, is_simulation=False, status=ReviewStatus.PENDING),
        make_log("LOG-3", 8, is_simulation=False, status=ReviewStatus.REJECTED),
    ]
    ledger = HourLedgerAggregator().aggregate("STU-1", logs, [])
    assert ledger.total_hours == D(8)
    assert ledger.skipped_count == 0


def test_per_site_breakdown():
    logs = [
        make_log("LOG-1", 8, is_simulation=False, site="General Hospital"),
        make_log("LOG-2", 4, is_simulation=False, site="General Hospital"),
        make_log("LOG-3", 6, is_simulation=True, site="General Hospital"),
    ]
    scenarios = {"VR-1": make_scenario("VR-1", name="Sepsis Response")}
    ledger = HourLedgerAggregator().aggregate("STU-1", logs, [make_vr("VR-A", 2)], scenarios=scenarios)

    hospital = ledger.sites["General Hospital"]
    assert (hospital.direct_hours, hospital.sim_hours, hospital.total_hours) == (D(12), D(6), D(18))
    assert ledger.sites["Sepsis Response"].sim_hours == D(2)


def test_vr_without_known_scenario_uses_fallback_site():
    ledger = HourLedgerAggregator().aggregate("STU-1", [], [make_vr("VR-A", 3, scenario_id="VR-X")])
    assert ledger.sites["VR Simulation"].sim_hours == D(3)


def test_missing_hours_use_documented_default():
    logs = [make_log("LOG-1", None, is_simulation=False)]
    ledger = HourLedgerAggregator().aggregate("STU-1", logs, [])
    assert ledger.direct_hours == DEFAULT_LOG_HOURS == D(4)
    assert ledger.estimated_count == 1


def test_approved_submissions_count_when_enabled():
    submissions = [
        make_submission("SUB-1", 8, status=ReviewStatus.APPROVED),
        make_submission("SUB-2", 8, status=ReviewStatus.PENDING),
    ]
    counted = HourLedgerAggregator().aggregate("STU-1", [], [], submissions)
    ignored = HourLedgerAggregator(count_hour_submissions=False).aggregate("STU-1", [], [], submissions)

    assert counted.total_hours == D(8)
    assert ignored.total_hours == D(0)


def test_malformed_records_are_skipped_and_counted():
    logs = [
        make_log("LOG-1", 8, is_simulation=False),
        make_log("LOG-2", -3, is_simulation=False),
        make_log("LOG-3", 5, is_simulation=False, student_id="STU-2"),
    ]
    bad_vr = make_vr("VR-A", 2)
    object.__setattr__(bad_vr, "hours", "two")

    ledger = HourLedgerAggregator().aggregate("STU-1", logs, [bad_vr])
    assert ledger.total_hours == D(8)
    assert ledger.skipped_count == 3


def test_heuristic_classifications_are_listed():
    logs = [
        make_log("LOG-1", 8, is_simulation=False, site="Sim Lab"),
        make_log("LOG-2", 8, site="Sim Lab"),
        make_log("LOG-3", 8, site="Mercy Hospital"),
    ]
    ledger = HourLedgerAggregator().aggregate("STU-1", logs, [])
    assert ledger.heuristic_record_ids == ["LOG-2", "LOG-3"]
    assert ledger.direct_hours == D(16)
    assert ledger.sim_hours == D(8)


def test_aggregation_is_idempotent():
    logs = [make_log(f"LOG-{i}", i + 1, is_simulation=i % 3 == 0) for i in range(10)]
    vr = [make_vr("VR-A", 2), make_vr("VR-B", "1.5")]
    aggregator = HourLedgerAggregator()

    first = aggregator.aggregate("STU-1", logs, vr)
    second = aggregator.aggregate("STU-1", logs, vr)
    assert first == second


def test_empty_input_gives_zero_totals():
    ledger = HourLedgerAggregator().aggregate("STU-1", [], [])
    assert ledger.total_hours == Decimal("0")
    assert ledger.sites == {}
