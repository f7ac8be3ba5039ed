"""
Student data models.

Contains the Student dataclass and StudentStatus enum that represent a
student's enrollment record.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ..config import DEFAULT_HOURS_REQUIRED


class StudentStatus(Enum):
    """
    Enrollment status, as set by program staff.

    ACTIVE: Enrolled and progressing normally
    AT_RISK: Instructor has flagged the student; always surfaces as a critical flag
    GRADUATED: Finished the program
    WITHDRAWN: Left the program
    """
    ACTIVE = "Active"
    AT_RISK = "At Risk"
    GRADUATED = "Graduated"
    WITHDRAWN = "Withdrawn"


@dataclass(frozen=True)
class Student:
    """
    A nursing student tracked by the engine.

    Attributes:
        id: Stable student identifier (e.g., "STU-001")
        first_name / last_name: Display name parts
        cohort: Cohort label (e.g., "Fall 2025")
        status: StudentStatus enum value
        clinical_hours_required: Regulatory total for this student
        clinical_hours_completed: Cached total of approved hours. Written
            only by the ApprovalWorkflowManager; everything else reads it.
    """
    id: str
    first_name: str
    last_name: str
    cohort: str
    status: StudentStatus = StudentStatus.ACTIVE
    clinical_hours_required: Decimal = DEFAULT_HOURS_REQUIRED
    clinical_hours_completed: Decimal = Decimal("0")

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
