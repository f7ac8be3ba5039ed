"""
Hour Ledger Aggregator.

This module sums a student's countable hours per site and in total.
"""

import logging
from decimal import Decimal

from ..config import DEFAULT_LOG_HOURS, VR_SITE_FALLBACK
from ..models import (
    HourLedger,
    HourSource,
    ReviewStatus,
    SiteHours,
)
from .classifier import RecordClassifier

logger = logging.getLogger(__name__)


class HourLedgerAggregator:
    """
    Builds an HourLedger from a student's source records.

    WHAT COUNTS:
    ------------
    - Clinical logs with status APPROVED, classified by RecordClassifier.
    - Every VR completion, always as simulation (no review step).
    - Hour submissions with status APPROVED, when count_hour_submissions is
      on. Unless the reviewer set is_simulation at approval, the classifier's
      site-name heuristic decides.

    Pending and rejected records are filtered out, not skipped: they aren't
    errors.

    DEFAULT HOURS:
    --------------
    An approved clinical log with hours=None is credited DEFAULT_LOG_HOURS
    (4h) and counted in estimated_count. Such entries are never dropped.

    DEFENSIVE SKIPPING:
    -------------------
    RecordParser rejects malformed hours at ingestion, but a store adapter
    could still hand over something odd. A record belonging to another student
    or carrying non-Decimal / non-positive hours is skipped, logged, and
    counted in skipped_count. One bad record never aborts the pass.

    Aggregation is a pure function of its inputs: same records in, same
    ledger out.
    """

    def __init__(self, classifier: RecordClassifier = None, count_hour_submissions: bool = True):
        self.classifier = classifier or RecordClassifier()
        self.count_hour_submissions = count_hour_submissions

    def aggregate(self, student_id: str, clinical_logs: list, vr_completions: list,
                  hour_submissions: list = (), scenarios: dict = None) -> HourLedger:
        """
        Aggregate one student's hours.

        Args:
            student_id: Student the records must belong to
            clinical_logs: ClinicalLogEntry records (any status)
            vr_completions: VrCompletion records
            hour_submissions: HourSubmission records (any status)
            scenarios: Optional {scenario_id: VrScenario}; names VR "sites"

        Returns:
            HourLedger with per-site breakdown and totals
        """
        ledger = HourLedger(student_id=student_id)
        scenarios = scenarios or {}

        for log in clinical_logs:
            if getattr(log, "status", None) is not ReviewStatus.APPROVED:
                continue
            hours = log.hours
            if hours is None:
                hours = DEFAULT_LOG_HOURS
                ledger.estimated_count += 1
            self._add_classified(ledger, log, hours)

        for completion in vr_completions:
            if not self._belongs(ledger, completion) or not self._valid_hours(ledger, completion, completion.hours):
                continue
            scenario = scenarios.get(completion.scenario_id)
            site = scenario.name if scenario is not None else VR_SITE_FALLBACK
            self._site(ledger, site).sim_hours += completion.hours

        if self.count_hour_submissions:
            for submission in hour_submissions:
                if getattr(submission, "status", None) is not ReviewStatus.APPROVED:
                    continue
                self._add_classified(ledger, submission, submission.hours)

        # Student totals are the sums across sites, so they always reconcile
        ledger.direct_hours = sum((s.direct_hours for s in ledger.sites.values()), Decimal("0"))
        ledger.sim_hours = sum((s.sim_hours for s in ledger.sites.values()), Decimal("0"))

        if ledger.skipped_count:
            logger.warning("Skipped %d malformed record(s) for %s", ledger.skipped_count, student_id)
        return ledger

    def _add_classified(self, ledger: HourLedger, record, hours):
        if not self._belongs(ledger, record) or not self._valid_hours(ledger, record, hours):
            return
        source, used_heuristic = self.classifier.classify_with_basis(record)
        if used_heuristic:
            ledger.heuristic_record_ids.append(record.id)
        site = self._site(ledger, record.site_name or "Unspecified site")
        if source is HourSource.SIMULATION:
            site.sim_hours += hours
        else:
            site.direct_hours += hours

    @staticmethod
    def _site(ledger: HourLedger, name: str) -> SiteHours:
        if name not in ledger.sites:
            ledger.sites[name] = SiteHours(site_name=name)
        return ledger.sites[name]

    @staticmethod
    def _belongs(ledger: HourLedger, record) -> bool:
        if getattr(record, "student_id", None) == ledger.student_id:
            return True
        logger.warning("Record %s does not belong to %s; skipped",
                       getattr(record, "id", "<no id>"), ledger.student_id)
        ledger.skipped_count += 1
        return False

    @staticmethod
    def _valid_hours(ledger: HourLedger, record, hours) -> bool:
        if isinstance(hours, Decimal) and hours.is_finite() and hours > 0:
            return True
        logger.warning("Record %s has invalid hours %r; skipped",
                       getattr(record, "id", "<no id>"), hours)
        ledger.skipped_count += 1
        return False
