"""
Intake schemas.

Pydantic models that validate raw records at the ingestion boundary. They
accept both snake_case and the camelCase keys the desktop app writes
(e.g. "siteName", "isSimulation"). RecordParser turns a failed validation into
InvalidRecord, so malformed hours never reach the aggregator.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..config import DEFAULT_HOURS_REQUIRED
from ..models import (
    AttendanceStatus,
    AttendanceType,
    MakeupStatus,
    ReviewStatus,
    StudentStatus,
)

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
MINUTES_PER_DAY = 24 * 60


def _match_enum(enum_cls, value):
    """Case-insensitive lookup by enum value; leaves anything else for pydantic to reject."""
    if isinstance(value, str):
        wanted = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == wanted:
                return member
    return value


def _minutes(clock: str) -> int:
    hours, minutes = clock.split(":")
    return int(hours) * 60 + int(minutes)


class IntakeModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    id: str = Field(min_length=1)


class StudentIn(IntakeModel):
    first_name: str = ""
    last_name: str = ""
    cohort: str = ""
    status: StudentStatus = StudentStatus.ACTIVE
    clinical_hours_required: Decimal = Field(default=DEFAULT_HOURS_REQUIRED, gt=0)
    clinical_hours_completed: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value):
        return _match_enum(StudentStatus, value)


class ClinicalLogIn(IntakeModel):
    student_id: str = Field(min_length=1)
    date: dt.date
    site_name: str = Field(min_length=1)
    hours: Optional[Decimal] = Field(default=None, gt=0)
    is_simulation: Optional[bool] = None
    patient_diagnosis: str = ""
    status: ReviewStatus = ReviewStatus.PENDING
    instructor_feedback: Optional[str] = None
    reviewed_at: Optional[dt.datetime] = None
    reviewed_by: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value):
        return _match_enum(ReviewStatus, value)

    @field_validator("patient_diagnosis", mode="before")
    @classmethod
    def _diagnosis(cls, value):
        return value or ""


class VrScenarioIn(IntakeModel):
    name: str = Field(min_length=1)
    category: str = ""
    is_required: bool = False
    default_hours: Decimal = Field(default=Decimal("1"), gt=0)
    is_active: bool = True


class VrCompletionIn(IntakeModel):
    student_id: str = Field(min_length=1)
    scenario_id: str = Field(min_length=1)
    completion_date: dt.date
    hours: Optional[Decimal] = Field(default=None, gt=0)
    score: Optional[Decimal] = Field(default=None, ge=0)
    attempts: int = Field(default=1, ge=1)


class HourSubmissionIn(IntakeModel):
    student_id: str = Field(min_length=1)
    date: dt.date
    site_name: str = Field(min_length=1)
    start_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    hours: Optional[Decimal] = Field(default=None, gt=0)
    activities: str = ""
    skills_practiced: str = ""
    reflection: str = ""
    is_simulation: Optional[bool] = None
    status: ReviewStatus = ReviewStatus.PENDING
    reviewer_feedback: Optional[str] = None
    submitted_at: Optional[dt.datetime] = None
    reviewed_at: Optional[dt.datetime] = None
    reviewed_by: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value):
        return _match_enum(ReviewStatus, value)

    @model_validator(mode="after")
    def _compute_hours(self):
        # Explicit hours win; otherwise derive them from the shift clock times.
        if self.hours is not None:
            return self
        if not (self.start_time and self.end_time):
            raise ValueError("hours or both start_time and end_time are required")
        if self.start_time == self.end_time:
            raise ValueError("start_time and end_time must differ")
        span = _minutes(self.end_time) - _minutes(self.start_time)
        if span < 0:
            # Night shift: ends the next morning
            span += MINUTES_PER_DAY
        self.hours = (Decimal(span) / Decimal(60)).quantize(Decimal("0.01"))
        return self


class MakeupHoursIn(IntakeModel):
    student_id: str = Field(min_length=1)
    hours_owed: Decimal = Field(gt=0)
    hours_completed: Decimal = Field(default=Decimal("0"), ge=0)
    status: MakeupStatus = MakeupStatus.PENDING
    due_date: Optional[dt.date] = None
    reason: Optional[str] = None
    original_absence_id: Optional[str] = None
    completion_date: Optional[dt.date] = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value):
        return _match_enum(MakeupStatus, value)

    @model_validator(mode="after")
    def _completed_needs_zero_balance(self):
        if self.status is MakeupStatus.COMPLETED and self.hours_completed < self.hours_owed:
            raise ValueError("status 'completed' requires hours_completed >= hours_owed")
        return self


class AttendanceIn(IntakeModel):
    student_id: str = Field(min_length=1)
    date: dt.date
    attendance_type: AttendanceType = AttendanceType.CLASSROOM
    status: AttendanceStatus
    hours_attended: Optional[Decimal] = Field(default=None, ge=0)
    hours_required: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value):
        return _match_enum(AttendanceStatus, value)

    @field_validator("attendance_type", mode="before")
    @classmethod
    def _type(cls, value):
        if value is None:
            return AttendanceType.CLASSROOM
        return _match_enum(AttendanceType, value)
