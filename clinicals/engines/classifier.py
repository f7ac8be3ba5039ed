"""
Record Classifier.

This module labels a clinical record as direct-care or simulation hours.
"""

import logging

from ..config import SIMULATION_TOKENS
from ..models import HourSource

logger = logging.getLogger(__name__)


class RecordClassifier:
    """
    Decides whether a record's hours are direct patient care or simulation.

    DECISION ORDER:
    ---------------
    1. Explicit flag: if the record carries is_simulation (True/False), that
       decides. It is authoritative even when the site name says otherwise.
    2. Heuristic: with no flag, the record is simulation when its site name
       or diagnosis text contains any of SIMULATION_TOKENS ("sim", "lab",
       "simulation"), case-insensitively. Otherwise direct.

    The two paths can disagree ("Simulation Lab" logged with
    is_simulation=False counts as direct), so classify_with_basis() reports
    which path decided. The aggregator lists heuristic decisions for review.

    Works with anything that has site_name; is_simulation and
    patient_diagnosis are optional (hour submissions carry no diagnosis).
    """

    def __init__(self, tokens=SIMULATION_TOKENS):
        self.tokens = tuple(t.lower() for t in tokens)

    def classify(self, record) -> HourSource:
        source, _ = self.classify_with_basis(record)
        return source

    def classify_with_basis(self, record) -> tuple:
        """
        Returns:
            (HourSource, used_heuristic) where used_heuristic is True when no
            explicit flag was present.
        """
        explicit = getattr(record, "is_simulation", None)
        if explicit is not None:
            return (HourSource.SIMULATION if explicit else HourSource.DIRECT), False

        text = " ".join(
            part for part in (
                getattr(record, "site_name", None),
                getattr(record, "patient_diagnosis", None),
            )
            if isinstance(part, str)
        ).lower()

        if text and any(token in text for token in self.tokens):
            logger.info("Record %s classified as simulation by site-name heuristic",
                        getattr(record, "id", "<no id>"))
            return HourSource.SIMULATION, True
        return HourSource.DIRECT, True
