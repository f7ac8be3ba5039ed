"""
Compliance engines.

This package contains the engines that perform the core business logic:
classification, aggregation, evaluation, reconciliation, flagging, and the
review workflow.
"""

from .classifier import RecordClassifier
from .ledger import HourLedgerAggregator
from .compliance import ComplianceEvaluator
from .makeup import MakeupHoursReconciler
from .flags import RiskFlagAssessor
from .workflow import ApprovalWorkflowManager

__all__ = [
    "RecordClassifier",
    "HourLedgerAggregator",
    "ComplianceEvaluator",
    "MakeupHoursReconciler",
    "RiskFlagAssessor",
    "ApprovalWorkflowManager",
]
