"""
Data models for the clinical hours engine.

This package contains all dataclasses and enums used throughout the system.
These serve as "contracts" between different parts of the system.
"""

from .student import Student, StudentStatus
from .records import (
    ReviewStatus,
    HourSource,
    MakeupStatus,
    AttendanceType,
    AttendanceStatus,
    ClinicalLogEntry,
    VrScenario,
    VrCompletion,
    HourSubmission,
    MakeupHoursObligation,
    AttendanceRecord,
)
from .summary import (
    ProgressBand,
    AlertLevel,
    SiteHours,
    HourLedger,
    ComplianceSummary,
    VrProgressSummary,
    MakeupReconciliation,
    AttendanceSummary,
)
from .flags import Flag, FlagType, FlagSeverity

__all__ = [
    # Student
    "Student",
    "StudentStatus",
    # Source records
    "ReviewStatus",
    "HourSource",
    "MakeupStatus",
    "AttendanceType",
    "AttendanceStatus",
    "ClinicalLogEntry",
    "VrScenario",
    "VrCompletion",
    "HourSubmission",
    "MakeupHoursObligation",
    "AttendanceRecord",
    # Derived results
    "ProgressBand",
    "AlertLevel",
    "SiteHours",
    "HourLedger",
    "ComplianceSummary",
    "VrProgressSummary",
    "MakeupReconciliation",
    "AttendanceSummary",
    # Flags
    "Flag",
    "FlagType",
    "FlagSeverity",
]
