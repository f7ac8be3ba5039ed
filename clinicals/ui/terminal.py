"""
Terminal Display Implementation.

This module handles all console/terminal output formatting.
It's the ONLY place where printing happens in the clinicals package.

To create a different UI (web, PDF, etc.), create a new class with
the same method signatures but different output handling.
"""

from ..models import (
    AlertLevel,
    ComplianceSummary,
    FlagSeverity,
    MakeupReconciliation,
    ProgressBand,
    VrProgressSummary,
)


class TerminalDisplay:
    """
    Pretty terminal output for compliance results.

    The engine returns dataclasses; this class only formats them. Swap it for
    an exporter or an API formatter without touching the engines.
    """

    # ANSI color codes for terminal styling
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"

    BG_GREEN = "\033[42m"
    BG_YELLOW = "\033[43m"
    BG_RED = "\033[41m"

    @classmethod
    def print_header(cls, title: str):
        """Print a major section header with decorative borders."""
        width = 70
        print()
        print(f"{cls.BOLD}{cls.CYAN}{'═' * width}{cls.RESET}")
        print(f"{cls.BOLD}{cls.CYAN}  {title}{cls.RESET}")
        print(f"{cls.BOLD}{cls.CYAN}{'═' * width}{cls.RESET}")

    @classmethod
    def print_subheader(cls, title: str):
        """Print a subsection header."""
        print()
        print(f"{cls.BOLD}{cls.WHITE}  ── {title} ──{cls.RESET}")

    @classmethod
    def status_badge(cls, ok: bool, label_ok: str = "COMPLIANT", label_bad: str = "NOT MET") -> str:
        if ok:
            return f"{cls.BG_GREEN}{cls.WHITE} ✓ {label_ok} {cls.RESET}"
        return f"{cls.BG_RED}{cls.WHITE} ✗ {label_bad} {cls.RESET}"

    @classmethod
    def band_str(cls, band: ProgressBand) -> str:
        colors = {
            ProgressBand.ON_TRACK: cls.GREEN,
            ProgressBand.PROGRESSING: cls.YELLOW,
            ProgressBand.BEHIND: cls.RED,
        }
        return f"{colors[band]}{band.value.replace('_', ' ')}{cls.RESET}"

    @classmethod
    def print_student_summary(cls, name: str, summary: ComplianceSummary):
        """Print one student's compliance summary and flags."""
        cls.print_header(f"CLINICAL HOURS: {name.upper()}")

        if not summary.ok:
            print(f"  {cls.RED}Could not compute summary: {summary.error}{cls.RESET}")
            return

        print(f"  {cls.BOLD}Total Hours:{cls.RESET} {summary.total_hours:.1f} / "
              f"{summary.hours_required:.1f} ({summary.progress_percentage:.1f}%, "
              f"{cls.band_str(summary.progress_band)})")
        print(f"  {cls.BOLD}Direct Care:{cls.RESET} {summary.direct_hours:.1f}h")
        print(f"  {cls.BOLD}Simulation:{cls.RESET}  {summary.sim_hours:.1f}h "
              f"({summary.sim_cap_percentage:.1f}% of total)")
        print(f"  {cls.BOLD}Sim Cap:{cls.RESET}     {cls.status_badge(summary.is_sim_compliant)}")
        print(f"  {cls.BOLD}Hours:{cls.RESET}       {cls.status_badge(summary.is_hours_compliant)}")
        if summary.skipped_count:
            print(f"  {cls.DIM}{summary.skipped_count} malformed record(s) skipped{cls.RESET}")

        cls.print_flags(summary.flags)

    @classmethod
    def print_flags(cls, flags: list):
        cls.print_subheader("Flags")
        if not flags:
            print(f"  {cls.GREEN}No concerns{cls.RESET}")
            return
        for flag in flags:
            color = cls.RED if flag.severity is FlagSeverity.CRITICAL else cls.YELLOW
            print(f"  {color}[{flag.severity.value.upper():<8}]{cls.RESET} {flag.message}")

    @classmethod
    def print_sites(cls, sites: list):
        cls.print_subheader("Hours by Site")
        print(f"  {cls.BOLD}{'SITE':<36} {'DIRECT':>8} {'SIM':>8} {'TOTAL':>8}{cls.RESET}")
        print(f"  {cls.DIM}{'-' * 62}{cls.RESET}")
        for site in sites:
            print(f"  {site.site_name[:36]:<36} {site.direct_hours:>8.1f} "
                  f"{site.sim_hours:>8.1f} {site.total_hours:>8.1f}")

    @classmethod
    def print_vr_summary(cls, vr: VrProgressSummary):
        colors = {
            AlertLevel.SAFE: cls.GREEN,
            AlertLevel.WARNING: cls.YELLOW,
            AlertLevel.OVER_CAP: cls.RED,
        }
        cls.print_subheader("VR Simulation")
        print(f"  {vr.total_vr_hours:.1f} / {vr.max_allowed_hours:.1f}h used "
              f"({colors[vr.alert_level]}{vr.alert_level.value}{cls.RESET}), "
              f"{vr.completed_scenarios}/{vr.total_scenarios} scenarios")
        if vr.required_remaining:
            print(f"  {cls.DIM}Required remaining: {', '.join(vr.required_remaining)}{cls.RESET}")

    @classmethod
    def print_makeup(cls, makeup: MakeupReconciliation):
        cls.print_subheader("Make-up Hours")
        print(f"  Owed {makeup.total_owed:.1f}h, completed {makeup.total_completed:.1f}h, "
              f"balance {makeup.balance:.1f}h")
        for obligation in makeup.obligations:
            due = obligation.due_date.isoformat() if obligation.due_date else "no due date"
            print(f"  {cls.DIM}└─ {obligation.id}: {obligation.balance:.1f}h left, "
                  f"{obligation.status.value}, {due}{cls.RESET}")

    @classmethod
    def print_cohort_table(cls, students: dict, summaries: dict):
        """
        Args:
            students: {student_id: Student}
            summaries: {student_id: ComplianceSummary}
        """
        cls.print_header("COHORT OVERVIEW")
        print(f"\n  {cls.BOLD}{'STUDENT':<26} {'TOTAL':>8} {'SIM %':>7} {'SIM CAP':<9} {'FLAGS'}{cls.RESET}")
        print(f"  {cls.DIM}{'-' * 66}{cls.RESET}")
        for student_id, summary in summaries.items():
            student = students.get(student_id)
            name = student.name if student is not None else student_id
            if not summary.ok:
                print(f"  {name[:26]:<26} {cls.RED}error: {summary.error}{cls.RESET}")
                continue
            cap = f"{cls.GREEN}ok{cls.RESET}" if summary.is_sim_compliant else f"{cls.RED}OVER{cls.RESET}"
            flag_names = ", ".join(f.type.value for f in summary.flags) or "-"
            print(f"  {name[:26]:<26} {summary.total_hours:>8.1f} "
                  f"{summary.sim_cap_percentage:>6.1f}% {cap:<18} {flag_names}")

    @classmethod
    def print_rejected(cls, rejected: list):
        if not rejected:
            return
        cls.print_subheader("Rejected Records")
        for item in rejected:
            print(f"  {cls.YELLOW}{item.kind} {item.record_id or '<no id>'}:{cls.RESET} {item.error}")
