"""
Record store contract and in-memory implementation.

The engine doesn't own storage. RecordStore is the seam to whatever does:
a database adapter, an API client, or InMemoryRecordStore for tests and the
CLI. Fetches are the only operations that may await.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from decimal import Decimal
from typing import Union

from ..errors import InvalidStateTransition, UnknownRecord, UnknownStudent
from ..models import (
    AttendanceRecord,
    ClinicalLogEntry,
    HourSubmission,
    MakeupHoursObligation,
    ReviewStatus,
    Student,
    VrCompletion,
    VrScenario,
)

logger = logging.getLogger(__name__)

Reviewable = Union[ClinicalLogEntry, HourSubmission]


class RecordStore(ABC):
    """
    What the engine needs from the persistence collaborator.

    ═══════════════════════════════════════════════════════════════════════════
    WRITE RULES
    ═══════════════════════════════════════════════════════════════════════════

    commit_review() is a compare-and-set. It must write the reviewed record
    AND the student's clinical_hours_completed cache as one unit, and only if
    the stored record still has `expected` status. A SQL adapter would run
    "UPDATE ... WHERE id = ? AND status = 'pending'" plus the student update
    inside one transaction and raise InvalidStateTransition on zero rows.

    update_student_hours() and save_makeup_obligation() are called only by
    ApprovalWorkflowManager.
    ═══════════════════════════════════════════════════════════════════════════
    """

    @abstractmethod
    async def get_student(self, student_id: str) -> Student:
        """Return the student or raise UnknownStudent."""

    @abstractmethod
    async def list_students(self) -> list:
        ...

    @abstractmethod
    async def get_scenarios(self) -> list:
        ...

    @abstractmethod
    async def fetch_clinical_logs(self, student_id: str) -> list:
        ...

    @abstractmethod
    async def fetch_vr_completions(self, student_id: str) -> list:
        ...

    @abstractmethod
    async def fetch_hour_submissions(self, student_id: str) -> list:
        ...

    @abstractmethod
    async def fetch_makeup_obligations(self, student_id: str) -> list:
        ...

    @abstractmethod
    async def fetch_attendance(self, student_id: str) -> list:
        ...

    @abstractmethod
    async def get_reviewable(self, record_id: str) -> Reviewable:
        """Return the clinical log or hour submission with this id, or raise UnknownRecord."""

    @abstractmethod
    async def fetch_pending_reviewables(self) -> list:
        ...

    @abstractmethod
    async def get_makeup_obligation(self, obligation_id: str) -> MakeupHoursObligation:
        ...

    @abstractmethod
    async def commit_review(self, record: Reviewable, expected: ReviewStatus,
                            hours_completed: Decimal) -> None:
        ...

    @abstractmethod
    async def update_student_hours(self, student_id: str, hours_completed: Decimal) -> None:
        ...

    @abstractmethod
    async def save_makeup_obligation(self, obligation: MakeupHoursObligation) -> None:
        ...


class InMemoryRecordStore(RecordStore):
    """
    Dict-backed RecordStore.

    Every mutating method finishes without awaiting anything, so on a single
    event loop each one is atomic: no reader can run between the record
    swap and the cache swap in commit_review().

    Usage:
        store = InMemoryRecordStore()
        store.add_student(student)
        store.add_clinical_log(log)
    """

    def __init__(self):
        self._students = {}
        self._scenarios = {}
        self._clinical_logs = {}
        self._vr_completions = {}
        self._hour_submissions = {}
        self._makeup = {}
        self._attendance = {}

    @classmethod
    def from_dataset(cls, dataset) -> "InMemoryRecordStore":
        """Build a store from a ParsedDataset."""
        store = cls()
        for student in dataset.students:
            store.add_student(student)
        for scenario in dataset.scenarios:
            store.add_scenario(scenario)
        for log in dataset.clinical_logs:
            store.add_clinical_log(log)
        for completion in dataset.vr_completions:
            store.add_vr_completion(completion)
        for submission in dataset.hour_submissions:
            store.add_hour_submission(submission)
        for obligation in dataset.makeup_obligations:
            store.add_makeup_obligation(obligation)
        for record in dataset.attendance:
            store.add_attendance(record)
        return store

    # =========================================================================
    # INTAKE
    # =========================================================================

    def add_student(self, student: Student):
        self._require_new(student.id, self._students)
        self._students[student.id] = student

    def add_scenario(self, scenario: VrScenario):
        self._require_new(scenario.id, self._scenarios)
        self._scenarios[scenario.id] = scenario

    def add_clinical_log(self, log: ClinicalLogEntry):
        self._require_student(log.student_id)
        self._require_new(log.id, self._clinical_logs)
        self._require_unique_reviewable(log.id, self._hour_submissions)
        self._clinical_logs[log.id] = log

    def add_vr_completion(self, completion: VrCompletion):
        self._require_student(completion.student_id)
        self._require_new(completion.id, self._vr_completions)
        self._vr_completions[completion.id] = completion

    def add_hour_submission(self, submission: HourSubmission):
        self._require_student(submission.student_id)
        self._require_new(submission.id, self._hour_submissions)
        self._require_unique_reviewable(submission.id, self._clinical_logs)
        self._hour_submissions[submission.id] = submission

    def add_makeup_obligation(self, obligation: MakeupHoursObligation):
        self._require_student(obligation.student_id)
        self._require_new(obligation.id, self._makeup)
        self._makeup[obligation.id] = obligation

    def add_attendance(self, record: AttendanceRecord):
        self._require_student(record.student_id)
        self._require_new(record.id, self._attendance)
        self._attendance[record.id] = record

    def remove_student(self, student_id: str):
        """Delete a student and every record that references them."""
        self._require_student(student_id)
        del self._students[student_id]
        for table in (self._clinical_logs, self._vr_completions, self._hour_submissions,
                      self._makeup, self._attendance):
            for record_id in [k for k, v in table.items() if v.student_id == student_id]:
                del table[record_id]

    def _require_student(self, student_id: str):
        if student_id not in self._students:
            raise UnknownStudent(student_id)

    @staticmethod
    def _require_new(record_id: str, table: dict):
        if record_id in table:
            raise ValueError(f"Duplicate id {record_id!r}")

    @staticmethod
    def _require_unique_reviewable(record_id: str, other_table: dict):
        # approve()/reject() look reviewables up by id alone
        if record_id in other_table:
            raise ValueError(f"Reviewable id {record_id!r} is already used by another record kind")

    # =========================================================================
    # READS
    # =========================================================================

    async def get_student(self, student_id: str) -> Student:
        self._require_student(student_id)
        return self._students[student_id]

    async def list_students(self) -> list:
        return list(self._students.values())

    async def get_scenarios(self) -> list:
        return list(self._scenarios.values())

    async def fetch_clinical_logs(self, student_id: str) -> list:
        return self._for_student(self._clinical_logs, student_id)

    async def fetch_vr_completions(self, student_id: str) -> list:
        return self._for_student(self._vr_completions, student_id)

    async def fetch_hour_submissions(self, student_id: str) -> list:
        return self._for_student(self._hour_submissions, student_id)

    async def fetch_makeup_obligations(self, student_id: str) -> list:
        return self._for_student(self._makeup, student_id)

    async def fetch_attendance(self, student_id: str) -> list:
        return self._for_student(self._attendance, student_id)

    async def get_reviewable(self, record_id: str) -> Reviewable:
        record = self._clinical_logs.get(record_id) or self._hour_submissions.get(record_id)
        if record is None:
            raise UnknownRecord(record_id)
        return record

    async def fetch_pending_reviewables(self) -> list:
        records = list(self._clinical_logs.values()) + list(self._hour_submissions.values())
        return [r for r in records if r.status is ReviewStatus.PENDING]

    async def get_makeup_obligation(self, obligation_id: str) -> MakeupHoursObligation:
        obligation = self._makeup.get(obligation_id)
        if obligation is None:
            raise UnknownRecord(obligation_id)
        return obligation

    @staticmethod
    def _for_student(table: dict, student_id: str) -> list:
        return [r for r in table.values() if r.student_id == student_id]

    # =========================================================================
    # WRITES
    # =========================================================================

    async def commit_review(self, record: Reviewable, expected: ReviewStatus,
                            hours_completed: Decimal) -> None:
        table = self._clinical_logs if isinstance(record, ClinicalLogEntry) else self._hour_submissions
        current = table.get(record.id)
        if current is None:
            raise UnknownRecord(record.id)
        if current.status is not expected:
            raise InvalidStateTransition(record.id, current.status.value, record.status.value)
        student = self._students[record.student_id]

        # Both swaps happen with no await in between
        table[record.id] = record
        self._students[student.id] = replace(student, clinical_hours_completed=hours_completed)
        logger.debug("Committed %s as %s; %s now has %s hours",
                     record.id, record.status.value, student.id, hours_completed)

    async def update_student_hours(self, student_id: str, hours_completed: Decimal) -> None:
        self._require_student(student_id)
        student = self._students[student_id]
        self._students[student_id] = replace(student, clinical_hours_completed=hours_completed)

    async def save_makeup_obligation(self, obligation: MakeupHoursObligation) -> None:
        self._require_student(obligation.student_id)
        self._makeup[obligation.id] = obligation
