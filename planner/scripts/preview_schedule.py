#!/usr/bin/env python3
"""
Command-line script to preview a delivery schedule.

Usage:
    python -m planner.scripts.preview_schedule INPUT.json [--reference-date YYYY-MM-DD] [--summary-only]

Options:
    --reference-date YYYY-MM-DD  Date the priority chain starts from (defaults to today)
    --summary-only               Show only the slip summary, not the per-project table
"""

import argparse
import sys

from planner.logging_config import configure_logging
from planner.scheduling.errors import SchedulingError
from planner.scheduling.preview import run_preview_script


def main():
    parser = argparse.ArgumentParser(
        description='Preview the priority-chained delivery schedule for a JSON input file'
    )
    parser.add_argument(
        'input',
        help='Path to a JSON file with people, projects, assignments and optional calendar'
    )
    parser.add_argument(
        '--reference-date',
        type=str,
        help='Reference date for calculations (YYYY-MM-DD format, defaults to today)'
    )
    parser.add_argument(
        '--summary-only',
        action='store_true',
        help='Show only summary statistics, not the per-project table'
    )
    parser.add_argument(
        '--log-level',
        default='WARNING',
        help='Logging level (default: WARNING)'
    )

    args = parser.parse_args()
    configure_logging(log_level=args.log_level)

    try:
        run_preview_script(
            args.input,
            reference_date_str=args.reference_date,
            detailed=not args.summary_only,
        )
    except (SchedulingError, OSError, ValueError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
