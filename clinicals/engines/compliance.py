"""
Compliance Evaluator.

This module compares a student's hour ledger against the regulatory
thresholds and produces a ComplianceSummary.
"""

from decimal import Decimal

from ..config import (
    ComplianceThresholds,
    ON_TRACK_RATIO,
    PROGRESSING_RATIO,
    VR_WARNING_FRACTION,
)
from ..models import (
    AlertLevel,
    ComplianceSummary,
    HourLedger,
    ProgressBand,
    Student,
    VrProgressSummary,
)

HUNDRED = Decimal("100")
ZERO = Decimal("0")
ONE = Decimal("1")


def clamp_percentage(value: Decimal) -> Decimal:
    """Clamp a percentage to [0, 100] for display."""
    return max(ZERO, min(HUNDRED, value))


class ComplianceEvaluator:
    """
    Evaluates hour totals against the hours requirement and simulation cap.

    ═══════════════════════════════════════════════════════════════════════════
    RULES
    ═══════════════════════════════════════════════════════════════════════════

    SIMULATION CAP (hard regulatory limit):
        sim_cap_percentage = sim_hours / max(total_hours, 1) * 100
        compliant  <=>  sim_hours <= sim_cap_hours
                        AND sim_cap_percentage <= sim_cap_percent

    HOURS REQUIREMENT:
        compliant  <=>  total_hours >= hours_required

    PROGRESS BAND (informational, feeds flags):
        total / required >= 0.75  -> ON_TRACK
        total / required >= 0.50  -> PROGRESSING
        otherwise                 -> BEHIND

    hours_required comes from the student record when it carries a positive
    value, otherwise from the thresholds.
    ═══════════════════════════════════════════════════════════════════════════
    """

    def __init__(self, thresholds: ComplianceThresholds = None):
        self.thresholds = thresholds or ComplianceThresholds()

    def hours_required_for(self, student: Student = None) -> Decimal:
        if student is not None and student.clinical_hours_required > 0:
            return student.clinical_hours_required
        return self.thresholds.hours_required

    def evaluate(self, ledger: HourLedger, student: Student = None) -> ComplianceSummary:
        """
        Build the compliance summary for one student.

        Flags are left empty here; RiskFlagAssessor fills them in.
        """
        hours_required = self.hours_required_for(student)
        direct = ledger.direct_hours
        sim = ledger.sim_hours
        total = direct + sim

        sim_ratio = sim / max(total, ONE)
        sim_percentage = sim_ratio * HUNDRED
        progress_ratio = total / hours_required

        return ComplianceSummary(
            student_id=ledger.student_id,
            direct_hours=direct,
            sim_hours=sim,
            total_hours=total,
            hours_required=hours_required,
            sim_cap_percentage=clamp_percentage(sim_percentage),
            sim_ratio=sim_ratio,
            progress_percentage=clamp_percentage(progress_ratio * HUNDRED),
            progress_ratio=progress_ratio,
            progress_band=self.progress_band(progress_ratio),
            is_sim_compliant=self.is_sim_compliant(sim, sim_percentage),
            is_hours_compliant=total >= hours_required,
            skipped_count=ledger.skipped_count,
            heuristic_record_ids=list(ledger.heuristic_record_ids),
        )

    def is_sim_compliant(self, sim_hours: Decimal, sim_percentage: Decimal) -> bool:
        return (sim_hours <= self.thresholds.sim_cap_hours
                and sim_percentage <= self.thresholds.sim_cap_percent)

    @staticmethod
    def progress_band(progress_ratio: Decimal) -> ProgressBand:
        if progress_ratio >= ON_TRACK_RATIO:
            return ProgressBand.ON_TRACK
        if progress_ratio >= PROGRESSING_RATIO:
            return ProgressBand.PROGRESSING
        return ProgressBand.BEHIND

    def vr_summary(self, student_id: str, vr_completions: list, scenarios: list) -> VrProgressSummary:
        """
        Measure VR hours alone against the simulation cap.

        The alert level warns early (80% of the cap) so instructors can steer
        a student back to direct care before the hard limit is crossed.
        """
        cap = self.thresholds.sim_cap_hours
        mine = [c for c in vr_completions if c.student_id == student_id]
        total_vr = sum((c.hours for c in mine), ZERO)

        if total_vr > cap:
            alert_level = AlertLevel.OVER_CAP
        elif total_vr >= cap * VR_WARNING_FRACTION:
            alert_level = AlertLevel.WARNING
        else:
            alert_level = AlertLevel.SAFE

        active = [s for s in scenarios if s.is_active]
        active_ids = {s.id for s in active}
        done_ids = {c.scenario_id for c in mine}
        required_remaining = sorted(
            s.name for s in active if s.is_required and s.id not in done_ids
        )

        return VrProgressSummary(
            student_id=student_id,
            total_vr_hours=total_vr,
            max_allowed_hours=cap,
            percentage_used=(total_vr / cap * HUNDRED) if cap > 0 else ZERO,
            is_compliant=total_vr <= cap,
            alert_level=alert_level,
            completed_scenarios=len(done_ids & active_ids),
            total_scenarios=len(active),
            required_remaining=required_remaining,
        )
