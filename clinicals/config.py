"""
Configuration constants for the clinical hours engine.

This module contains all configuration values and constants used throughout
the compliance engine. Centralizing these makes it easy to adjust behavior
as board-of-nursing policies change.
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from .errors import ThresholdMisconfiguration


# =============================================================================
# REGULATORY DEFAULTS
# =============================================================================

# Total clinical hours a student must log before graduation.
DEFAULT_HOURS_REQUIRED = Decimal("400")

# Simulation/VR cap. A student is out of compliance when EITHER limit is
# exceeded: more than 100 simulated hours, or simulation making up more than
# 25% of all logged hours.
DEFAULT_SIM_CAP_HOURS = Decimal("100")
DEFAULT_SIM_CAP_PERCENT = Decimal("25")

# VR alert level turns to "warning" once this share of the cap is used.
VR_WARNING_FRACTION = Decimal("0.8")


# =============================================================================
# LEDGER ASSUMPTIONS
# =============================================================================

# Hours credited for a clinical log entry that carries no hours value.
# Applied in live aggregation, not only in exports, and always counted in
# HourLedger.estimated_count so the assumption stays visible.
DEFAULT_LOG_HOURS = Decimal("4")

# Substrings that mark a site name or diagnosis as simulation when the entry
# has no explicit is_simulation flag.
SIMULATION_TOKENS = ("sim", "lab", "simulation")

# Site label for VR completions whose scenario is unknown.
VR_SITE_FALLBACK = "VR Simulation"


# =============================================================================
# PROGRESS BANDS & FLAGS
# =============================================================================

# total / required ratios for the progress bands
ON_TRACK_RATIO = Decimal("0.75")
PROGRESSING_RATIO = Decimal("0.50")

# clinical_behind fires below this share of the requirement
BEHIND_FLAG_RATIO = Decimal("0.8")

DEFAULT_ABSENCE_THRESHOLD = 3
DEFAULT_TARDY_THRESHOLD = 5


# =============================================================================
# MAKE-UP HOURS
# =============================================================================

# Auto-created make-up obligations are due this many days after the absence.
MAKEUP_DUE_DAYS = 30

# Hours owed for a clinical absence that doesn't record its scheduled length.
DEFAULT_SHIFT_HOURS = Decimal("8")


@dataclass(frozen=True)
class ComplianceThresholds:
    """
    Tunable thresholds the engine accepts.

    Validated on construction so a misconfigured deployment fails loudly
    instead of producing quietly wrong compliance results.
    """
    hours_required: Decimal = DEFAULT_HOURS_REQUIRED
    sim_cap_hours: Decimal = DEFAULT_SIM_CAP_HOURS
    sim_cap_percent: Decimal = DEFAULT_SIM_CAP_PERCENT
    attendance_absence_threshold: int = DEFAULT_ABSENCE_THRESHOLD
    attendance_tardy_threshold: int = DEFAULT_TARDY_THRESHOLD
    attendance_window_days: Optional[int] = None  # None = every record on file
    count_hour_submissions: bool = True

    def __post_init__(self):
        if self.hours_required <= 0:
            raise ThresholdMisconfiguration(
                f"hours_required must be positive, got {self.hours_required}"
            )
        if not (0 <= self.sim_cap_percent <= 100):
            raise ThresholdMisconfiguration(
                f"sim_cap_percent must be within [0, 100], got {self.sim_cap_percent}"
            )
        if self.sim_cap_hours < 0:
            raise ThresholdMisconfiguration(
                f"sim_cap_hours cannot be negative, got {self.sim_cap_hours}"
            )
        if self.attendance_absence_threshold < 1 or self.attendance_tardy_threshold < 1:
            raise ThresholdMisconfiguration("attendance thresholds must be at least 1")
        if self.attendance_window_days is not None and self.attendance_window_days < 1:
            raise ThresholdMisconfiguration(
                f"attendance_window_days must be positive, got {self.attendance_window_days}"
            )

    @classmethod
    def from_env(cls) -> "ComplianceThresholds":
        """Build thresholds from CLINICALS_* environment variables."""
        return cls(
            hours_required=_env_decimal("CLINICALS_HOURS_REQUIRED", DEFAULT_HOURS_REQUIRED),
            sim_cap_hours=_env_decimal("CLINICALS_SIM_CAP_HOURS", DEFAULT_SIM_CAP_HOURS),
            sim_cap_percent=_env_decimal("CLINICALS_SIM_CAP_PERCENT", DEFAULT_SIM_CAP_PERCENT),
            attendance_absence_threshold=_env_int("CLINICALS_ABSENCE_THRESHOLD", DEFAULT_ABSENCE_THRESHOLD),
            attendance_tardy_threshold=_env_int("CLINICALS_TARDY_THRESHOLD", DEFAULT_TARDY_THRESHOLD),
            attendance_window_days=_env_int("CLINICALS_ATTENDANCE_WINDOW_DAYS", None),
            count_hour_submissions=os.getenv("CLINICALS_COUNT_SUBMISSIONS", "1") == "1",
        )


def _env_decimal(name: str, default: Decimal) -> Decimal:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise ThresholdMisconfiguration(f"{name} is not a number: {raw!r}")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ThresholdMisconfiguration(f"{name} is not an integer: {raw!r}")
