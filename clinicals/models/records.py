"""
Source record data models.

These are the plain records the engine consumes from the persistence
collaborator. They are frozen: a review produces a new record via
dataclasses.replace() instead of mutating the one other readers hold.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class ReviewStatus(Enum):
    """
    Review state shared by clinical logs and hour submissions.

    PENDING -> APPROVED and PENDING -> REJECTED are the only transitions.
    Both end states are terminal; resubmitting means creating a new record.
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ReviewStatus.PENDING


class HourSource(Enum):
    """Where a block of hours was earned."""
    DIRECT = "direct"
    SIMULATION = "simulation"


class MakeupStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class AttendanceType(Enum):
    CLASSROOM = "classroom"
    CLINICAL = "clinical"


class AttendanceStatus(Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    TARDY = "Tardy"
    EXCUSED = "Excused"
    PARTIAL = "Partial"


@dataclass(frozen=True)
class ClinicalLogEntry:
    """
    One clinical shift logged for a student.

    `hours` is None when the log didn't record a length; the aggregator then
    credits DEFAULT_LOG_HOURS. `is_simulation` is None when the source never
    set the flag, in which case the classifier falls back to the site-name
    heuristic.
    """
    id: str
    student_id: str
    date: date
    site_name: str
    hours: Optional[Decimal] = None
    is_simulation: Optional[bool] = None
    patient_diagnosis: str = ""
    status: ReviewStatus = ReviewStatus.PENDING
    instructor_feedback: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None

    @property
    def feedback(self) -> Optional[str]:
        return self.instructor_feedback


@dataclass(frozen=True)
class VrScenario:
    """A VR simulation scenario students can complete."""
    id: str
    name: str
    category: str = ""
    is_required: bool = False
    default_hours: Decimal = Decimal("1")
    is_active: bool = True


@dataclass(frozen=True)
class VrCompletion:
    """A completed VR scenario. Always simulation; counted without review."""
    id: str
    student_id: str
    scenario_id: str
    completion_date: date
    hours: Decimal
    score: Optional[Decimal] = None
    attempts: int = 1


@dataclass(frozen=True)
class HourSubmission:
    """
    A self-reported block of clinical time awaiting instructor review.

    is_simulation is usually unknown at submission; the reviewer can settle
    it when approving.
    """
    id: str
    student_id: str
    date: date
    site_name: str
    hours: Decimal
    start_time: Optional[str] = None   # "HH:MM"
    end_time: Optional[str] = None     # "HH:MM"
    activities: str = ""
    skills_practiced: str = ""
    reflection: str = ""
    is_simulation: Optional[bool] = None
    status: ReviewStatus = ReviewStatus.PENDING
    reviewer_feedback: Optional[str] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None

    @property
    def feedback(self) -> Optional[str]:
        return self.reviewer_feedback


@dataclass(frozen=True)
class MakeupHoursObligation:
    """
    Hours a student owes because of an absence or shortfall.

    balance = hours_owed - hours_completed. Status may be COMPLETED only
    once the balance reaches zero; ApprovalWorkflowManager enforces that.
    """
    id: str
    student_id: str
    hours_owed: Decimal
    hours_completed: Decimal = Decimal("0")
    status: MakeupStatus = MakeupStatus.PENDING
    due_date: Optional[date] = None
    reason: Optional[str] = None
    original_absence_id: Optional[str] = None
    completion_date: Optional[date] = None

    @property
    def balance(self) -> Decimal:
        return self.hours_owed - self.hours_completed


@dataclass(frozen=True)
class AttendanceRecord:
    """One attendance mark. hours_* are meaningful for PARTIAL and ABSENT marks."""
    id: str
    student_id: str
    date: date
    attendance_type: AttendanceType
    status: AttendanceStatus
    hours_attended: Optional[Decimal] = None
    hours_required: Optional[Decimal] = None
