"""
Command-Line Interface for the clinical hours engine.

Loads a JSON dataset and prints compliance results.

MODES:
------
1. COHORT REPORT (default): one line per student
2. STUDENT REPORT (--student ID): full breakdown for one student

Run:
    python -m clinicals cohort.json
    python -m clinicals cohort.json --student STU-001
"""

import argparse
import asyncio
import logging
import sys

from .config import ComplianceThresholds
from .data import DataLoader
from .errors import ClinicalsError
from .tracker import ClinicalHoursTracker
from .ui import TerminalDisplay


async def _run_cohort_report(tracker: ClinicalHoursTracker):
    students = {s.id: s for s in await tracker.store.list_students()}
    summaries = await tracker.aggregate_cohort(list(students))
    TerminalDisplay.print_cohort_table(students, summaries)


async def _run_student_report(tracker: ClinicalHoursTracker, student_id: str):
    student = await tracker.store.get_student(student_id)
    summary = await tracker.compute_compliance_summary(student_id)
    TerminalDisplay.print_student_summary(student.name, summary)
    TerminalDisplay.print_sites(await tracker.hours_by_site(student_id))
    TerminalDisplay.print_vr_summary(await tracker.vr_summary(student_id))
    TerminalDisplay.print_makeup(await tracker.reconcile_makeup_hours(student_id))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clinicals",
        description="Clinical hours compliance report",
    )
    parser.add_argument("dataset", help="Path to a JSON dataset file")
    parser.add_argument("--student", help="Show the full report for one student id")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine decisions")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        thresholds = ComplianceThresholds.from_env()
        loader = DataLoader()
        store = loader.load(args.dataset)
    except (OSError, ValueError, ClinicalsError) as e:
        print(f"{TerminalDisplay.RED}Error:{TerminalDisplay.RESET} {e}", file=sys.stderr)
        return 1

    TerminalDisplay.print_rejected(loader.last_dataset.rejected)
    tracker = ClinicalHoursTracker(store, thresholds)

    try:
        if args.student:
            asyncio.run(_run_student_report(tracker, args.student))
        else:
            asyncio.run(_run_cohort_report(tracker))
    except ClinicalsError as e:
        print(f"{TerminalDisplay.RED}Error:{TerminalDisplay.RESET} {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
