"""
Flag data models.

Flags are derived warnings shown to instructors. They're rebuilt on every
call and never stored.
"""

from dataclasses import dataclass, field
from enum import Enum


class FlagType(Enum):
    CLINICAL_BEHIND = "clinical_behind"
    SIM_CAP_VIOLATION = "sim_cap_violation"
    ATTENDANCE_CONCERN = "attendance_concern"
    MAKEUP_HOURS_OUTSTANDING = "makeup_hours_outstanding"
    AT_RISK_STATUS = "at_risk_status"
    CLASSIFICATION_REVIEW = "classification_review"


class FlagSeverity(Enum):
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class Flag:
    """
    A single instructor-facing indicator.

    Example:
        type: FlagType.SIM_CAP_VIOLATION
        severity: FlagSeverity.CRITICAL
        message: "Simulation hours exceed cap: 110.0h (26.8% of total)"
        details: {"sim_hours": Decimal("110"), "cap_hours": Decimal("100"), ...}
    """
    type: FlagType
    severity: FlagSeverity
    message: str
    details: dict = field(default_factory=dict)
