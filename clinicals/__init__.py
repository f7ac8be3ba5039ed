"""
Clinical Hours Compliance Package
=================================

Tracks nursing students' progress toward the regulated clinical-hours
requirement, enforces the simulation-hour cap, reconciles make-up hours, and
runs the instructor review workflow.

ARCHITECTURE OVERVIEW
---------------------

┌─────────────────────────────────────────────────────────────────────────┐
│                         ALGORITHM LAYER                                  │
│        (Pure logic - returns data structures, NO UI/printing)           │
│                                                                         │
│  ┌────────────────┐  ┌──────────────────────┐  ┌─────────────────────┐  │
│  │RecordClassifier│─▶│ HourLedgerAggregator │─▶│ ComplianceEvaluator │  │
│  └────────────────┘  └──────────────────────┘  └─────────────────────┘  │
│                                                          │              │
│  ┌───────────────────────┐   ┌──────────────────┐        │              │
│  │ MakeupHoursReconciler │──▶│ RiskFlagAssessor │◀───────┘              │
│  └───────────────────────┘   └──────────────────┘                       │
│                                                                         │
│  ┌─────────────────────────────────────────────────────────────────┐   │
│  │ ApprovalWorkflowManager (the only writer: reviews, make-up,     │   │
│  │ Student.clinical_hours_completed)                               │   │
│  └─────────────────────────────────────────────────────────────────┘   │
└─────────────────────────────────────────────────────────────────────────┘
                                   │
                                   │ Returns dataclasses
                                   ▼
┌─────────────────────────────────────────────────────────────────────────┐
│                     ClinicalHoursTracker                                 │
│        (Orchestrator - connects a RecordStore to the engines)           │
└─────────────────────────────────────────────────────────────────────────┘

PACKAGE STRUCTURE
-----------------

clinicals/
├── __init__.py          # This file - main exports
├── config.py            # Thresholds and constants
├── errors.py            # Error hierarchy
├── tracker.py           # ClinicalHoursTracker orchestrator
├── cli.py               # Command-line interface
│
├── models/              # Data classes and enums
├── data/                # Intake schemas, parser, store, loader
├── engines/             # Classifier, ledger, compliance, make-up, flags, workflow
└── ui/                  # TerminalDisplay

USAGE
-----

    from clinicals import ClinicalHoursTracker, DataLoader

    store = DataLoader().load("cohort.json")
    tracker = ClinicalHoursTracker(store)

    summary = await tracker.compute_compliance_summary("STU-001")
    await tracker.approve("SUB-17", feedback="Approved")

Running from command line:

    python -m clinicals cohort.json

"""

# Version
__version__ = "1.0.0"

# Main exports
from .tracker import ClinicalHoursTracker, CohortAggregation
from .cli import main

# Model exports (for programmatic use)
from .models import (
    Student,
    StudentStatus,
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
    ProgressBand,
    AlertLevel,
    SiteHours,
    HourLedger,
    ComplianceSummary,
    VrProgressSummary,
    MakeupReconciliation,
    AttendanceSummary,
    Flag,
    FlagType,
    FlagSeverity,
)

# Engine exports (for advanced use)
from .engines import (
    RecordClassifier,
    HourLedgerAggregator,
    ComplianceEvaluator,
    MakeupHoursReconciler,
    RiskFlagAssessor,
    ApprovalWorkflowManager,
)

# Data exports
from .data import DataLoader, RecordParser, RecordStore, InMemoryRecordStore

# UI exports
from .ui import TerminalDisplay

# Configuration and errors
from .config import ComplianceThresholds, DEFAULT_LOG_HOURS
from .errors import (
    ClinicalsError,
    InvalidRecord,
    InvalidStateTransition,
    MissingFeedback,
    UnknownStudent,
    UnknownRecord,
    ThresholdMisconfiguration,
)

__all__ = [
    # Version
    "__version__",
    # Main entry points
    "ClinicalHoursTracker",
    "CohortAggregation",
    "main",
    # Models
    "Student",
    "StudentStatus",
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
    "ProgressBand",
    "AlertLevel",
    "SiteHours",
    "HourLedger",
    "ComplianceSummary",
    "VrProgressSummary",
    "MakeupReconciliation",
    "AttendanceSummary",
    "Flag",
    "FlagType",
    "FlagSeverity",
    # Engines
    "RecordClassifier",
    "HourLedgerAggregator",
    "ComplianceEvaluator",
    "MakeupHoursReconciler",
    "RiskFlagAssessor",
    "ApprovalWorkflowManager",
    # Data
    "DataLoader",
    "RecordParser",
    "RecordStore",
    "InMemoryRecordStore",
    # UI
    "TerminalDisplay",
    # Config
    "ComplianceThresholds",
    "DEFAULT_LOG_HOURS",
    # Errors
    "ClinicalsError",
    "InvalidRecord",
    "InvalidStateTransition",
    "MissingFeedback",
    "UnknownStudent",
    "UnknownRecord",
    "ThresholdMisconfiguration",
]
