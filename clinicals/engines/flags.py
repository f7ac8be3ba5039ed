"""
Risk/Flag Assessor.

This module derives instructor-facing flags from the compliance summary,
make-up reconciliation, attendance, and student status.
"""

import datetime as dt

from ..config import BEHIND_FLAG_RATIO, ComplianceThresholds
from ..models import (
    AttendanceStatus,
    AttendanceSummary,
    AttendanceType,
    ComplianceSummary,
    Flag,
    FlagSeverity,
    FlagType,
    MakeupReconciliation,
    StudentStatus,
)


class RiskFlagAssessor:
    """
    Produces the ordered flag list for one student.

    ═══════════════════════════════════════════════════════════════════════════
    RULES (one flag per type at most; types may co-occur)
    ═══════════════════════════════════════════════════════════════════════════

    clinical_behind          total < 0.8 * required               WARNING
    sim_cap_violation        sim > cap hours OR sim % > cap %      CRITICAL
    attendance_concern       absences >= 3 OR tardies >= 5         WARNING
    makeup_hours_outstanding make-up balance > 0                   WARNING
    at_risk_status           student status is At Risk             CRITICAL
    classification_review    hours classified by site-name guess   WARNING

    at_risk_status is an instructor override; it surfaces regardless of
    what the numbers say.

    Flags are recomputed from scratch on every call. Nothing is cached, so a
    flag disappears the moment its cause does.
    ═══════════════════════════════════════════════════════════════════════════
    """

    def __init__(self, thresholds: ComplianceThresholds = None):
        self.thresholds = thresholds or ComplianceThresholds()

    def assess(self, summary: ComplianceSummary, makeup: MakeupReconciliation,
               attendance: list, student_status: StudentStatus,
               as_of: dt.date = None) -> list:
        """
        Args:
            summary: ComplianceSummary from ComplianceEvaluator
            makeup: MakeupReconciliation from MakeupHoursReconciler
            attendance: AttendanceRecord list for the student
            student_status: Current StudentStatus
            as_of: Evaluation date for the attendance window (default: today)

        Returns:
            List of Flag, in the rule order above
        """
        flags = []

        behind_line = summary.hours_required * BEHIND_FLAG_RATIO
        if summary.total_hours < behind_line:
            flags.append(Flag(
                type=FlagType.CLINICAL_BEHIND,
                severity=FlagSeverity.WARNING,
                message=(f"Clinical hours behind schedule: {summary.total_hours:.1f}/"
                         f"{summary.hours_required:.1f} hours completed"),
                details={
                    "total_hours": summary.total_hours,
                    "hours_required": summary.hours_required,
                    "progress_band": summary.progress_band.value,
                },
            ))

        sim_pct = summary.sim_ratio * 100
        if (summary.sim_hours > self.thresholds.sim_cap_hours
                or sim_pct > self.thresholds.sim_cap_percent):
            flags.append(Flag(
                type=FlagType.SIM_CAP_VIOLATION,
                severity=FlagSeverity.CRITICAL,
                message=(f"Simulation hours exceed cap: {summary.sim_hours:.1f}h "
                         f"({sim_pct:.1f}% of total)"),
                details={
                    "sim_hours": summary.sim_hours,
                    "sim_percentage": sim_pct,
                    "cap_hours": self.thresholds.sim_cap_hours,
                    "cap_percent": self.thresholds.sim_cap_percent,
                },
            ))

        counts = self.summarize_attendance(summary.student_id, attendance, as_of)
        if (counts.total_absences >= self.thresholds.attendance_absence_threshold
                or counts.total_tardies >= self.thresholds.attendance_tardy_threshold):
            flags.append(Flag(
                type=FlagType.ATTENDANCE_CONCERN,
                severity=FlagSeverity.WARNING,
                message=(f"Attendance concern: {counts.total_absences} absences, "
                         f"{counts.total_tardies} tardies"),
                details={
                    "absences": counts.total_absences,
                    "tardies": counts.total_tardies,
                    "clinical_absences": counts.clinical_absences,
                    "classroom_absences": counts.classroom_absences,
                },
            ))

        if makeup.balance > 0:
            flags.append(Flag(
                type=FlagType.MAKEUP_HOURS_OUTSTANDING,
                severity=FlagSeverity.WARNING,
                message=f"{makeup.balance:.1f} make-up hours outstanding",
                details={
                    "balance": makeup.balance,
                    "open_obligations": [o.id for o in makeup.obligations],
                },
            ))

        if student_status is StudentStatus.AT_RISK:
            flags.append(Flag(
                type=FlagType.AT_RISK_STATUS,
                severity=FlagSeverity.CRITICAL,
                message="Student is marked At Risk",
            ))

        if summary.heuristic_record_ids:
            flags.append(Flag(
                type=FlagType.CLASSIFICATION_REVIEW,
                severity=FlagSeverity.WARNING,
                message=(f"{len(summary.heuristic_record_ids)} record(s) classified by "
                         f"site name; confirm direct vs. simulation"),
                details={"record_ids": list(summary.heuristic_record_ids)},
            ))

        return flags

    def summarize_attendance(self, student_id: str, attendance: list,
                             as_of: dt.date = None) -> AttendanceSummary:
        """Count attendance marks inside the configured window."""
        summary = AttendanceSummary(student_id=student_id)
        window = self.thresholds.attendance_window_days
        as_of = as_of or dt.date.today()
        start = as_of - dt.timedelta(days=window) if window else None

        for record in attendance:
            if record.student_id != student_id:
                continue
            if start is not None and not (start < record.date <= as_of):
                continue

            clinical = record.attendance_type is AttendanceType.CLINICAL
            if record.status is AttendanceStatus.ABSENT:
                summary.total_absences += 1
                if clinical:
                    summary.clinical_absences += 1
                else:
                    summary.classroom_absences += 1
            elif record.status is AttendanceStatus.TARDY:
                summary.total_tardies += 1
                if clinical:
                    summary.clinical_tardies += 1
                else:
                    summary.classroom_tardies += 1
            elif record.status is AttendanceStatus.PRESENT:
                summary.total_present += 1
            elif record.status is AttendanceStatus.EXCUSED:
                summary.total_excused += 1
            elif record.status is AttendanceStatus.PARTIAL:
                summary.total_partial += 1

        return summary
