"""
Record parsing.

This module turns raw record dicts (as handed over by the persistence
collaborator) into validated, frozen record objects.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from pydantic import ValidationError

from ..errors import InvalidRecord, UnknownStudent
from ..models import (
    AttendanceRecord,
    ClinicalLogEntry,
    HourSubmission,
    MakeupHoursObligation,
    Student,
    VrCompletion,
    VrScenario,
)
from .schemas import (
    AttendanceIn,
    ClinicalLogIn,
    HourSubmissionIn,
    MakeupHoursIn,
    StudentIn,
    VrCompletionIn,
    VrScenarioIn,
)

logger = logging.getLogger(__name__)


@dataclass
class RejectedRecord:
    """A raw record that failed ingestion, with the reason kept for the caller."""
    kind: str
    record_id: Optional[str]
    error: Exception


@dataclass
class ParsedDataset:
    """
    Everything RecordParser.parse_dataset() accepted, plus what it refused.
    """
    students: list = field(default_factory=list)
    scenarios: list = field(default_factory=list)
    clinical_logs: list = field(default_factory=list)
    vr_completions: list = field(default_factory=list)
    hour_submissions: list = field(default_factory=list)
    makeup_obligations: list = field(default_factory=list)
    attendance: list = field(default_factory=list)
    rejected: list = field(default_factory=list)   # List of RejectedRecord


class RecordParser:
    """
    Validates raw records at the ingestion boundary.

    KEY RESPONSIBILITY: Nothing malformed gets past this class. Negative or
    non-numeric hours, missing dates and missing site names all raise
    InvalidRecord here, so the aggregator only ever sees clean values.

    SINGLE RECORDS vs. DATASETS:
    - parse_clinical_log() and friends raise on the first bad record. Use them
      for interactive intake where the user can fix and resubmit.
    - parse_dataset() never raises for a bad record. It skips it, logs it,
      and collects it in ParsedDataset.rejected so one bad row can't abort a
      whole cohort import.

    Usage:
        parser = RecordParser()
        log = parser.parse_clinical_log({"id": "LOG-1", "studentId": "STU-1", ...})
    """

    def __init__(self, scenarios: Optional[dict] = None):
        # Keyed by scenario id; used to fill in default VR hours
        self.scenarios = dict(scenarios or {})

    # =========================================================================
    # SINGLE RECORDS
    # =========================================================================

    def parse_student(self, raw: dict) -> Student:
        data = self._validate(StudentIn, "student", raw)
        return Student(**data.model_dump())

    def parse_scenario(self, raw: dict) -> VrScenario:
        data = self._validate(VrScenarioIn, "vr_scenario", raw)
        scenario = VrScenario(**data.model_dump())
        self.scenarios[scenario.id] = scenario
        return scenario

    def parse_clinical_log(self, raw: dict) -> ClinicalLogEntry:
        data = self._validate(ClinicalLogIn, "clinical_log", raw)
        return ClinicalLogEntry(**data.model_dump())

    def parse_vr_completion(self, raw: dict) -> VrCompletion:
        data = self._validate(VrCompletionIn, "vr_completion", raw)
        values = data.model_dump()
        if values["hours"] is None:
            # Completions logged without hours earn the scenario's default
            scenario = self.scenarios.get(data.scenario_id)
            if scenario is None:
                raise InvalidRecord(
                    "vr_completion", data.id,
                    [f"hours missing and scenario {data.scenario_id!r} is unknown"],
                )
            values["hours"] = scenario.default_hours
        return VrCompletion(**values)

    def parse_hour_submission(self, raw: dict) -> HourSubmission:
        data = self._validate(HourSubmissionIn, "hour_submission", raw)
        return HourSubmission(**data.model_dump())

    def parse_makeup_obligation(self, raw: dict) -> MakeupHoursObligation:
        data = self._validate(MakeupHoursIn, "makeup_obligation", raw)
        return MakeupHoursObligation(**data.model_dump())

    def parse_attendance(self, raw: dict) -> AttendanceRecord:
        data = self._validate(AttendanceIn, "attendance", raw)
        return AttendanceRecord(**data.model_dump())

    # =========================================================================
    # WHOLE DATASETS
    # =========================================================================

    def parse_dataset(self, raw: dict) -> ParsedDataset:
        """
        Parse a full dataset, skipping and collecting bad records.

        Args:
            raw: {
                "students": [...],
                "vrScenarios": [...],
                "clinicalLogs": [...],
                "vrCompletions": [...],
                "hourSubmissions": [...],
                "makeupHours": [...],
                "attendance": [...],
            }
            snake_case keys ("clinical_logs", ...) are accepted too.

        Returns:
            ParsedDataset. Records that reference a student missing from
            "students" are rejected with UnknownStudent. A repeated id is
            rejected with InvalidRecord and the first record kept; clinical
            logs and hour submissions share one id space. A stream that
            isn't a list is rejected as a whole.

        Raises:
            InvalidRecord: raw is not a mapping
        """
        if not isinstance(raw, dict):
            raise InvalidRecord("dataset", None, [f"expected a mapping of record streams, got {type(raw).__name__}"])
        result = ParsedDataset()

        # Students and scenarios first: every other stream refers to them
        result.students = self._parse_many(raw, "student", "students", "students",
                                           self.parse_student, result, set())
        result.scenarios = self._parse_many(raw, "vr_scenario", "vrScenarios", "vr_scenarios",
                                            self.parse_scenario, result, set())
        known = {s.id for s in result.students}

        # approve()/reject() look reviewables up by id alone, so logs and
        # submissions share one id space
        reviewable_ids = set()
        streams = [
            ("clinical_logs", "clinical_log", "clinicalLogs", "clinical_logs",
             self.parse_clinical_log, reviewable_ids),
            ("vr_completions", "vr_completion", "vrCompletions", "vr_completions",
             self.parse_vr_completion, set()),
            ("hour_submissions", "hour_submission", "hourSubmissions", "hour_submissions",
             self.parse_hour_submission, reviewable_ids),
            ("makeup_obligations", "makeup_obligation", "makeupHours", "makeup_hours",
             self.parse_makeup_obligation, set()),
            ("attendance", "attendance", "attendance", "attendance",
             self.parse_attendance, set()),
        ]
        for attr, kind, camel_key, snake_key, parse, seen in streams:
            records = self._parse_many(raw, kind, camel_key, snake_key, parse, result, seen)
            accepted = []
            for record in records:
                if record.student_id not in known:
                    self._reject(result, kind, record.id, UnknownStudent(record.student_id))
                    continue
                accepted.append(record)
            setattr(result, attr, accepted)

        if result.rejected:
            logger.warning("Dataset parsed with %d rejected record(s)", len(result.rejected))
        return result

    def _parse_many(self, raw: dict, kind: str, camel_key: str, snake_key: str, parse,
                    result: ParsedDataset, seen: set) -> list:
        items = raw.get(camel_key)
        if items is None:
            items = raw.get(snake_key, [])
        if not isinstance(items, list):
            self._reject(result, kind, None, InvalidRecord(
                kind, None, [f"{camel_key} must be a list, got {type(items).__name__}"]))
            return []

        parsed = []
        for item in items:
            try:
                record = parse(item)
            except InvalidRecord as e:
                self._reject(result, e.kind, e.record_id, e)
                continue
            if record.id in seen:
                # First occurrence wins; a later row never replaces it
                self._reject(result, kind, record.id, InvalidRecord(
                    kind, record.id, [f"duplicate id {record.id!r}"]))
                continue
            seen.add(record.id)
            parsed.append(record)
        return parsed

    def _reject(self, result: ParsedDataset, kind: str, record_id: Optional[str], error: Exception):
        logger.warning("Rejected %s %s: %s", kind, record_id or "<no id>", error)
        result.rejected.append(RejectedRecord(kind=kind, record_id=record_id, error=error))

    @staticmethod
    def _validate(schema, kind: str, raw: dict):
        if not isinstance(raw, dict):
            raise InvalidRecord(kind, None, [f"expected a mapping, got {type(raw).__name__}"])
        try:
            return schema.model_validate(raw)
        except ValidationError as e:
            record_id = raw.get("id")
            reasons = []
            for err in e.errors():
                loc = ".".join(str(part) for part in err["loc"])
                reasons.append(f"{loc}: {err['msg']}" if loc else err["msg"])
            raise InvalidRecord(kind, str(record_id) if record_id is not None else None, reasons)
