"""
Derived result data models.

Nothing here is persisted. Each object is rebuilt from source records on
every recompute, which is what keeps them from going stale.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class ProgressBand(Enum):
    """
    How far along the student is relative to the hours requirement.

    Used to shape flags and display; not a compliance failure by itself.
    """
    ON_TRACK = "on_track"        # >= 75% of required hours
    PROGRESSING = "progressing"  # >= 50%
    BEHIND = "behind"            # below 50%


class AlertLevel(Enum):
    """VR cap usage level."""
    SAFE = "safe"
    WARNING = "warning"    # 80% or more of the cap used
    OVER_CAP = "over_cap"  # cap exceeded


@dataclass
class SiteHours:
    """Hours earned at a single clinical site, split by source."""
    site_name: str
    direct_hours: Decimal = Decimal("0")
    sim_hours: Decimal = Decimal("0")

    @property
    def total_hours(self) -> Decimal:
        return self.direct_hours + self.sim_hours


@dataclass
class HourLedger:
    """
    Output of HourLedgerAggregator for one student.

    direct_hours and sim_hours are the sums across `sites`; total_hours is
    derived from them so the two can never disagree.

    Example:
        sites: {"General Hospital": SiteHours(direct=90), "Sim Lab": SiteHours(sim=15)}
        direct_hours: 90
        sim_hours: 15
        total_hours: 105
        skipped_count: 0         # malformed records dropped during the pass
        estimated_count: 1       # entries credited DEFAULT_LOG_HOURS
        heuristic_record_ids: ["LOG-7"]  # classified by site-name heuristic
    """
    student_id: str
    sites: dict = field(default_factory=dict)   # site name -> SiteHours
    direct_hours: Decimal = Decimal("0")
    sim_hours: Decimal = Decimal("0")
    skipped_count: int = 0
    estimated_count: int = 0
    heuristic_record_ids: list = field(default_factory=list)

    @property
    def total_hours(self) -> Decimal:
        return self.direct_hours + self.sim_hours


@dataclass
class ComplianceSummary:
    """
    Compliance view for one student.

    Display percentages are clamped to [0, 100]. Compliance decisions use the
    raw ratios (`sim_ratio`, `progress_ratio`) so clamping never hides an
    overage.
    """
    student_id: str
    direct_hours: Decimal
    sim_hours: Decimal
    total_hours: Decimal
    hours_required: Decimal
    sim_cap_percentage: Decimal   # sim / max(total, 1) * 100, clamped
    sim_ratio: Decimal            # sim / max(total, 1), raw
    progress_percentage: Decimal  # total / required * 100, clamped
    progress_ratio: Decimal       # total / required, raw
    progress_band: ProgressBand
    is_sim_compliant: bool
    is_hours_compliant: bool
    flags: list = field(default_factory=list)   # List of Flag objects
    skipped_count: int = 0
    heuristic_record_ids: list = field(default_factory=list)
    error: Optional[str] = None   # set only when this summary stands in for a failure

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, student_id: str, reason: str) -> "ComplianceSummary":
        """Empty summary for a cohort member whose aggregation didn't finish."""
        zero = Decimal("0")
        return cls(
            student_id=student_id,
            direct_hours=zero,
            sim_hours=zero,
            total_hours=zero,
            hours_required=zero,
            sim_cap_percentage=zero,
            sim_ratio=zero,
            progress_percentage=zero,
            progress_ratio=zero,
            progress_band=ProgressBand.BEHIND,
            is_sim_compliant=False,
            is_hours_compliant=False,
            error=reason,
        )


@dataclass
class VrProgressSummary:
    """VR hours measured against the simulation cap."""
    student_id: str
    total_vr_hours: Decimal
    max_allowed_hours: Decimal
    percentage_used: Decimal
    is_compliant: bool
    alert_level: AlertLevel
    completed_scenarios: int
    total_scenarios: int
    required_remaining: list = field(default_factory=list)  # names of required scenarios not done


@dataclass
class MakeupReconciliation:
    """
    Make-up hours owed vs. completed for one student.

    balance is clamped at zero; `obligations` holds only the open ones,
    earliest due date first, undated last.
    """
    student_id: str
    total_owed: Decimal
    total_completed: Decimal
    balance: Decimal
    obligations: list = field(default_factory=list)   # List of MakeupHoursObligation


@dataclass
class AttendanceSummary:
    """Attendance counts for one student over the evaluated window."""
    student_id: str
    total_absences: int = 0
    total_tardies: int = 0
    total_present: int = 0
    total_excused: int = 0
    total_partial: int = 0
    classroom_absences: int = 0
    classroom_tardies: int = 0
    clinical_absences: int = 0
    clinical_tardies: int = 0
