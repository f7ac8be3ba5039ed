"""
Clinical Hours Tracker - Main Orchestrator.

This module contains the ClinicalHoursTracker class that wires the engines
to a record store and exposes the operations callers use.
"""

import asyncio
import datetime as dt
import logging
from decimal import Decimal

from .config import ComplianceThresholds
from .engines import (
    ApprovalWorkflowManager,
    ComplianceEvaluator,
    HourLedgerAggregator,
    MakeupHoursReconciler,
    RecordClassifier,
    RiskFlagAssessor,
)
from .models import ComplianceSummary

logger = logging.getLogger(__name__)


class ClinicalHoursTracker:
    """
    Main interface for the clinical hours engine.

    ═══════════════════════════════════════════════════════════════════════════
    ROLE: ORCHESTRATOR
    ═══════════════════════════════════════════════════════════════════════════

    One recompute runs in a single direction:

        store fetch ─▶ HourLedgerAggregator ─▶ ComplianceEvaluator ─┐
                      (RecordClassifier)                           ├─▶ RiskFlagAssessor
        store fetch ─▶ MakeupHoursReconciler ──────────────────────┘

    Nothing is recomputed implicitly. Callers ask, and get a fresh value.
    Writes go through ApprovalWorkflowManager only.

    ═══════════════════════════════════════════════════════════════════════════

    USAGE:
        tracker = ClinicalHoursTracker(store)

        summary = await tracker.compute_compliance_summary("STU-001")
        flags = await tracker.compute_flags("STU-001")

        await tracker.approve("SUB-17", feedback="Nice reflection")
        cohort = await tracker.aggregate_cohort(["STU-001", "STU-002"])
    """

    def __init__(self, store, thresholds: ComplianceThresholds = None, clock=None):
        self.store = store
        self.thresholds = thresholds or ComplianceThresholds()

        # Initialize all engines with shared thresholds
        self.classifier = RecordClassifier()
        self.aggregator = HourLedgerAggregator(
            self.classifier, count_hour_submissions=self.thresholds.count_hour_submissions
        )
        self.evaluator = ComplianceEvaluator(self.thresholds)
        self.reconciler = MakeupHoursReconciler()
        self.assessor = RiskFlagAssessor(self.thresholds)

        workflow_kwargs = {"clock": clock} if clock is not None else {}
        self.workflow = ApprovalWorkflowManager(store, self.aggregator, **workflow_kwargs)

    # =========================================================================
    # COMPLIANCE VIEW
    # =========================================================================

    async def compute_compliance_summary(self, student_id: str, as_of: dt.date = None) -> ComplianceSummary:
        """
        Compute the full compliance summary, flags included, for one student.

        Raises:
            UnknownStudent: student_id is not in the store
        """
        student = await self.store.get_student(student_id)
        logs, completions, submissions, obligations, attendance, scenarios = await asyncio.gather(
            self.store.fetch_clinical_logs(student_id),
            self.store.fetch_vr_completions(student_id),
            self.store.fetch_hour_submissions(student_id),
            self.store.fetch_makeup_obligations(student_id),
            self.store.fetch_attendance(student_id),
            self.store.get_scenarios(),
        )

        ledger = self.aggregator.aggregate(
            student_id, logs, completions, submissions,
            scenarios={s.id: s for s in scenarios},
        )
        summary = self.evaluator.evaluate(ledger, student)
        makeup = self.reconciler.reconcile(student_id, obligations)
        summary.flags = self.assessor.assess(summary, makeup, attendance, student.status, as_of)
        return summary

    async def compute_flags(self, student_id: str, as_of: dt.date = None) -> list:
        summary = await self.compute_compliance_summary(student_id, as_of)
        return summary.flags

    async def hours_by_site(self, student_id: str) -> list:
        """Per-site breakdown, largest total first."""
        await self.store.get_student(student_id)
        logs, completions, submissions, scenarios = await asyncio.gather(
            self.store.fetch_clinical_logs(student_id),
            self.store.fetch_vr_completions(student_id),
            self.store.fetch_hour_submissions(student_id),
            self.store.get_scenarios(),
        )
        ledger = self.aggregator.aggregate(
            student_id, logs, completions, submissions,
            scenarios={s.id: s for s in scenarios},
        )
        return sorted(ledger.sites.values(), key=lambda s: (-s.total_hours, s.site_name))

    async def vr_summary(self, student_id: str):
        await self.store.get_student(student_id)
        completions, scenarios = await asyncio.gather(
            self.store.fetch_vr_completions(student_id),
            self.store.get_scenarios(),
        )
        return self.evaluator.vr_summary(student_id, completions, scenarios)

    async def attendance_summary(self, student_id: str, as_of: dt.date = None):
        await self.store.get_student(student_id)
        attendance = await self.store.fetch_attendance(student_id)
        return self.assessor.summarize_attendance(student_id, attendance, as_of)

    # =========================================================================
    # MAKE-UP HOURS
    # =========================================================================

    async def reconcile_makeup_hours(self, student_id: str):
        await self.store.get_student(student_id)
        obligations = await self.store.fetch_makeup_obligations(student_id)
        return self.reconciler.reconcile(student_id, obligations)

    async def makeup_overview(self) -> list:
        """Every student with make-up history, largest balance first."""
        students = await self.store.list_students()
        reconciliations = await asyncio.gather(
            *(self.reconcile_makeup_hours(s.id) for s in students)
        )
        return self.reconciler.overview(list(reconciliations))

    async def log_makeup_hours(self, obligation_id: str, hours: Decimal):
        return await self.workflow.log_makeup_hours(obligation_id, hours)

    async def complete_makeup(self, obligation_id: str):
        return await self.workflow.complete_makeup(obligation_id)

    # =========================================================================
    # REVIEW WORKFLOW
    # =========================================================================

    async def approve(self, record_id: str, feedback: str = None, reviewed_by: str = None,
                      is_simulation: bool = None):
        await self.workflow.approve(record_id, feedback, reviewed_by, is_simulation)

    async def reject(self, record_id: str, feedback: str, reviewed_by: str = None):
        await self.workflow.reject(record_id, feedback, reviewed_by)

    async def pending_reviews(self) -> list:
        """Pending clinical logs and hour submissions, oldest first."""
        records = await self.store.fetch_pending_reviewables()
        return sorted(records, key=lambda r: (r.date, r.id))

    async def recompute_student_hours(self, student_id: str) -> Decimal:
        return await self.workflow.recompute_student_hours(student_id)

    # =========================================================================
    # COHORT
    # =========================================================================

    def start_cohort_aggregation(self, student_ids: list, as_of: dt.date = None) -> "CohortAggregation":
        """Start one task per student; must be called with a running event loop."""
        return CohortAggregation(self, student_ids, as_of)

    async def aggregate_cohort(self, student_ids: list, as_of: dt.date = None) -> dict:
        """
        Compute summaries for many students in parallel.

        Returns:
            {student_id: ComplianceSummary}. A student whose aggregation
            failed gets ComplianceSummary.failed() with the reason; the rest
            are unaffected.
        """
        return await self.start_cohort_aggregation(student_ids, as_of).results()


class CohortAggregation:
    """
    Fan-out/fan-in over a cohort.

    Each student runs in its own task and writes only its own result slot.
    cancel() stops one student without touching the others. Aggregation only
    reads, so a cancelled task leaves nothing half-written.
    """

    def __init__(self, tracker: ClinicalHoursTracker, student_ids: list, as_of: dt.date = None):
        self._tasks = {
            student_id: asyncio.create_task(
                tracker.compute_compliance_summary(student_id, as_of),
                name=f"compliance:{student_id}",
            )
            for student_id in dict.fromkeys(student_ids)
        }

    @property
    def student_ids(self) -> list:
        return list(self._tasks)

    def cancel(self, student_id: str) -> bool:
        """Cancel one student's aggregation. Returns False if it already finished."""
        task = self._tasks.get(student_id)
        if task is None:
            return False
        return task.cancel()

    async def results(self) -> dict:
        if not self._tasks:
            return {}
        try:
            await asyncio.wait(self._tasks.values())
        except asyncio.CancelledError:
            for task in self._tasks.values():
                task.cancel()
            raise

        results = {}
        for student_id, task in self._tasks.items():
            if task.cancelled():
                results[student_id] = ComplianceSummary.failed(student_id, "cancelled")
            elif task.exception() is not None:
                error = task.exception()
                logger.warning("Aggregation failed for %s: %s", student_id, error)
                results[student_id] = ComplianceSummary.failed(
                    student_id, f"{type(error).__name__}: {error}"
                )
            else:
                results[student_id] = task.result()
        return results
