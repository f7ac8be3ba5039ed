"""
Make-up Hours Reconciler.

This module reports hours owed vs. hours completed across a student's
make-up obligations.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from ..config import DEFAULT_SHIFT_HOURS, MAKEUP_DUE_DAYS
from ..models import (
    AttendanceRecord,
    AttendanceStatus,
    AttendanceType,
    MakeupHoursObligation,
    MakeupReconciliation,
    MakeupStatus,
)

ZERO = Decimal("0")


class MakeupHoursReconciler:
    """
    Reconciles make-up obligations. Read-only: it reports, never changes status.

    Only ApprovalWorkflowManager may move an obligation to COMPLETED, and
    only once hours_completed >= hours_owed.
    """

    def reconcile(self, student_id: str, obligations: list) -> MakeupReconciliation:
        """
        Args:
            student_id: Student being reconciled
            obligations: That student's MakeupHoursObligation records

        Returns:
            MakeupReconciliation where balance = max(total_owed - total_completed, 0)
            and obligations lists open items by due date (undated last).
        """
        mine = [o for o in obligations if o.student_id == student_id]
        total_owed = sum((o.hours_owed for o in mine), ZERO)
        total_completed = sum((o.hours_completed for o in mine), ZERO)

        open_items = [o for o in mine if o.status is not MakeupStatus.COMPLETED]
        # (has no due date, due date): undated sort after every dated item
        open_items.sort(key=lambda o: (o.due_date is None, o.due_date or dt.date.min))

        return MakeupReconciliation(
            student_id=student_id,
            total_owed=total_owed,
            total_completed=total_completed,
            balance=max(total_owed - total_completed, ZERO),
            obligations=open_items,
        )

    def overview(self, reconciliations: list) -> list:
        """Students with any make-up history, largest outstanding balance first."""
        with_history = [r for r in reconciliations if r.total_owed > 0]
        return sorted(with_history, key=lambda r: r.balance, reverse=True)

    @staticmethod
    def obligation_for_absence(record: AttendanceRecord, today: dt.date = None,
                               obligation_id: str = None) -> Optional[MakeupHoursObligation]:
        """
        Build (but don't store) the make-up obligation a clinical absence creates.

        HOURS OWED:
        - ABSENT: the scheduled hours_required, or DEFAULT_SHIFT_HOURS if unknown
        - PARTIAL: hours_required - hours_attended

        Classroom marks, other statuses, and partials with nothing missing
        return None. The obligation is due MAKEUP_DUE_DAYS after `today`.
        """
        if record.attendance_type is not AttendanceType.CLINICAL:
            return None

        if record.status is AttendanceStatus.ABSENT:
            owed = record.hours_required or DEFAULT_SHIFT_HOURS
        elif record.status is AttendanceStatus.PARTIAL:
            if record.hours_required is None:
                return None
            owed = record.hours_required - (record.hours_attended or ZERO)
        else:
            return None

        if owed <= 0:
            return None

        today = today or dt.date.today()
        return MakeupHoursObligation(
            id=obligation_id or f"MKP-{record.id}",
            student_id=record.student_id,
            hours_owed=owed,
            hours_completed=ZERO,
            status=MakeupStatus.PENDING,
            due_date=today + dt.timedelta(days=MAKEUP_DUE_DAYS),
            reason=f"{record.status.value} on {record.date.isoformat()}",
            original_absence_id=record.id,
        )
