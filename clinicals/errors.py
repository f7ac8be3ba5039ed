"""
Error types for the clinical hours engine.

Every error raised by the package derives from ClinicalsError so callers can
catch the whole family in one place.
"""

from typing import Optional


class ClinicalsError(Exception):
    """Base class for all engine errors."""


class InvalidRecord(ClinicalsError):
    """
    A raw record failed validation at ingestion.

    Raised by RecordParser before a record can reach the aggregator.
    `reasons` keeps every individual problem so the caller can show them all.
    """

    def __init__(self, kind: str, record_id: Optional[str], reasons: list):
        self.kind = kind
        self.record_id = record_id
        self.reasons = list(reasons)
        label = f"{kind} {record_id}" if record_id else kind
        super().__init__(f"Invalid {label}: {'; '.join(self.reasons)}")


class InvalidStateTransition(ClinicalsError):
    """A review or make-up transition was requested from a state that forbids it."""

    def __init__(self, record_id: str, current: str, requested: str):
        self.record_id = record_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move {record_id} from '{current}' to '{requested}'"
        )


class MissingFeedback(ClinicalsError):
    """A rejection was attempted without reviewer feedback."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Rejecting {record_id} requires feedback")


class UnknownStudent(ClinicalsError):
    """A record or request references a student id that isn't on file."""

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__(f"Unknown student: {student_id}")


class UnknownRecord(ClinicalsError):
    """A workflow request references a record id that isn't on file."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Unknown record: {record_id}")


class ThresholdMisconfiguration(ClinicalsError):
    """Configured compliance thresholds are out of range."""
