"""
Approval Workflow Manager.

This module validates and applies review transitions for clinical logs and
hour submissions, and status changes for make-up obligations.
"""

import asyncio
import datetime as dt
import logging
from collections import defaultdict
from dataclasses import replace
from decimal import Decimal

from ..errors import InvalidStateTransition, MissingFeedback
from ..models import (
    ClinicalLogEntry,
    MakeupHoursObligation,
    MakeupStatus,
    ReviewStatus,
)
from .ledger import HourLedgerAggregator

logger = logging.getLogger(__name__)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ApprovalWorkflowManager:
    """
    Owns every write the engine makes.

    ═══════════════════════════════════════════════════════════════════════════
    REVIEW STATE MACHINE (clinical logs and hour submissions)
    ═══════════════════════════════════════════════════════════════════════════

        pending ──approve──▶ approved   (terminal)
           │
           └────reject───▶ rejected    (terminal)

    Anything else raises InvalidStateTransition and changes nothing.
    reject() also requires non-blank feedback (MissingFeedback).

    ═══════════════════════════════════════════════════════════════════════════
    CACHE OWNERSHIP
    ═══════════════════════════════════════════════════════════════════════════

    Student.clinical_hours_completed is written only here:
      - by approve()/reject(), committed together with the reviewed record
      - by recompute_student_hours(), an explicit command

    LINEARIZATION:
    Reviews for one student run under that student's asyncio.Lock, and the
    store's commit_review() re-checks the stored status (compare-and-set).
    Of two racing approvals of one record, the second raises
    InvalidStateTransition.
    ═══════════════════════════════════════════════════════════════════════════
    """

    def __init__(self, store, aggregator: HourLedgerAggregator = None, clock=_utcnow):
        self.store = store
        self.aggregator = aggregator or HourLedgerAggregator()
        self.clock = clock
        self._locks = defaultdict(asyncio.Lock)

    # =========================================================================
    # REVIEWS
    # =========================================================================

    async def approve(self, record_id: str, feedback: str = None, reviewed_by: str = None,
                      is_simulation: bool = None):
        """
        Approve a pending clinical log or hour submission.

        Passing is_simulation records the reviewer's direct/simulation call on
        the record, so it no longer depends on the site-name heuristic.

        Raises:
            UnknownRecord: no reviewable record has this id
            InvalidStateTransition: the record is not pending
        """
        await self._review(record_id, ReviewStatus.APPROVED, feedback, reviewed_by, is_simulation)

    async def reject(self, record_id: str, feedback: str, reviewed_by: str = None):
        """
        Reject a pending clinical log or hour submission.

        Raises:
            MissingFeedback: feedback is empty or whitespace
            UnknownRecord: no reviewable record has this id
            InvalidStateTransition: the record is not pending
        """
        if feedback is None or not feedback.strip():
            raise MissingFeedback(record_id)
        await self._review(record_id, ReviewStatus.REJECTED, feedback.strip(), reviewed_by)

    async def _review(self, record_id: str, new_status: ReviewStatus, feedback, reviewed_by,
                      is_simulation=None):
        # Look up the owner first so we know which lock to take
        record = await self.store.get_reviewable(record_id)

        async with self._locks[record.student_id]:
            record = await self.store.get_reviewable(record_id)
            if record.status is not ReviewStatus.PENDING:
                raise InvalidStateTransition(record_id, record.status.value, new_status.value)
            if is_simulation is not None:
                record = replace(record, is_simulation=is_simulation)

            if isinstance(record, ClinicalLogEntry):
                reviewed = replace(record, status=new_status, instructor_feedback=feedback,
                                   reviewed_at=self.clock(), reviewed_by=reviewed_by)
            else:
                reviewed = replace(record, status=new_status, reviewer_feedback=feedback,
                                   reviewed_at=self.clock(), reviewed_by=reviewed_by)

            hours = await self._total_with(reviewed)
            await self.store.commit_review(reviewed, ReviewStatus.PENDING, hours)

        logger.info("%s %s for %s; cached hours now %s",
                    new_status.value.capitalize(), record_id, record.student_id, hours)

    async def _total_with(self, reviewed) -> Decimal:
        """Total countable hours for the owner, as if `reviewed` were already stored."""
        student_id = reviewed.student_id
        logs = await self.store.fetch_clinical_logs(student_id)
        completions = await self.store.fetch_vr_completions(student_id)
        submissions = await self.store.fetch_hour_submissions(student_id)

        if isinstance(reviewed, ClinicalLogEntry):
            logs = [reviewed if r.id == reviewed.id else r for r in logs]
        else:
            submissions = [reviewed if r.id == reviewed.id else r for r in submissions]

        ledger = self.aggregator.aggregate(student_id, logs, completions, submissions)
        return ledger.total_hours

    async def recompute_student_hours(self, student_id: str) -> Decimal:
        """Refresh one student's cached clinical_hours_completed from source records."""
        async with self._locks[student_id]:
            await self.store.get_student(student_id)
            logs = await self.store.fetch_clinical_logs(student_id)
            completions = await self.store.fetch_vr_completions(student_id)
            submissions = await self.store.fetch_hour_submissions(student_id)
            hours = self.aggregator.aggregate(student_id, logs, completions, submissions).total_hours
            await self.store.update_student_hours(student_id, hours)
        logger.info("Recomputed cached hours for %s: %s", student_id, hours)
        return hours

    # =========================================================================
    # MAKE-UP OBLIGATIONS
    # =========================================================================

    async def log_makeup_hours(self, obligation_id: str, hours: Decimal) -> MakeupHoursObligation:
        """
        Credit completed make-up hours to an obligation.

        Completed hours are capped at hours_owed. The obligation moves to
        IN_PROGRESS, or to COMPLETED (with today's completion date) once the
        balance reaches zero.

        Raises:
            ValueError: hours is not positive
            InvalidStateTransition: the obligation is already completed
        """
        hours = Decimal(hours)
        if not hours.is_finite() or hours <= 0:
            raise ValueError(f"Make-up hours must be positive, got {hours}")

        obligation = await self.store.get_makeup_obligation(obligation_id)
        async with self._locks[obligation.student_id]:
            obligation = await self.store.get_makeup_obligation(obligation_id)
            if obligation.status is MakeupStatus.COMPLETED:
                raise InvalidStateTransition(obligation_id, obligation.status.value,
                                             MakeupStatus.IN_PROGRESS.value)

            completed = min(obligation.hours_completed + hours, obligation.hours_owed)
            if completed >= obligation.hours_owed:
                updated = replace(obligation, hours_completed=completed,
                                  status=MakeupStatus.COMPLETED,
                                  completion_date=self.clock().date())
            else:
                updated = replace(obligation, hours_completed=completed,
                                  status=MakeupStatus.IN_PROGRESS)
            await self.store.save_makeup_obligation(updated)

        logger.info("Logged %s make-up hours on %s (%s remaining)",
                    hours, obligation_id, updated.balance)
        return updated

    async def complete_makeup(self, obligation_id: str) -> MakeupHoursObligation:
        """
        Mark an obligation COMPLETED.

        Raises:
            InvalidStateTransition: hours_completed < hours_owed, or already completed
        """
        obligation = await self.store.get_makeup_obligation(obligation_id)
        async with self._locks[obligation.student_id]:
            obligation = await self.store.get_makeup_obligation(obligation_id)
            if (obligation.status is MakeupStatus.COMPLETED
                    or obligation.hours_completed < obligation.hours_owed):
                raise InvalidStateTransition(obligation_id, obligation.status.value,
                                             MakeupStatus.COMPLETED.value)
            updated = replace(obligation, status=MakeupStatus.COMPLETED,
                              completion_date=obligation.completion_date or self.clock().date())
            await self.store.save_makeup_obligation(updated)

        logger.info("Make-up obligation %s completed", obligation_id)
        return updated
