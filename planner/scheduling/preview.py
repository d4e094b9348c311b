"""
Preview of a priority schedule computed from a JSON input file.

Prints the chained schedule as a table plus the slip summary, without
persisting anything.
"""

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from planner.datetime_utils import parse_iso_date
from planner.logging_config import get_logger
from planner.scheduling.models import WorkCalendarConfig
from planner.scheduling.service import SchedulingService

logger = get_logger(__name__)

PREVIEW_COLUMNS = [
    'project_name',
    'start_date',
    'end_date',
    'requested_delivery_date',
    'diff_workdays',
    'lost_workdays_to_vacation',
    'blocking_project_name',
    'warnings',
]


def load_request(path: str) -> Dict[str, Any]:
    """Read a scheduling request from a JSON file."""
    with Path(path).open(encoding='utf-8') as handle:
        return json.load(handle)


def build_preview_frame(schedule: Dict[str, Any]) -> pd.DataFrame:
    """One row per scheduled project, in chain order."""
    rows = []
    for entry in schedule.get('projects', []):
        rows.append({
            **{column: entry.get(column) for column in PREVIEW_COLUMNS},
            'warnings': '; '.join(warning['message'] for warning in entry.get('warnings', [])),
        })
    frame = pd.DataFrame(rows, columns=PREVIEW_COLUMNS)
    frame.index = range(1, len(frame) + 1)
    return frame


def preview_schedule(
    request_data: Dict[str, Any],
    reference_date: Optional[date] = None,
    default_config: Optional[WorkCalendarConfig] = None,
) -> Dict[str, Any]:
    """
    Compute the priority schedule for a request and return it with a preview table.

    Returns:
        dict: the service result plus a 'frame' DataFrame
    """
    schedule = SchedulingService.run_priority_schedule(request_data, default_config, reference_date)
    return {**schedule, 'frame': build_preview_frame(schedule)}


def print_preview(preview: Dict[str, Any], detailed: bool = True) -> None:
    """Print a preview produced by preview_schedule."""
    summary = preview['summary']
    print("\n" + "=" * 80)
    print("DELIVERY SCHEDULE PREVIEW")
    print("=" * 80)
    print(f"Reference date: {preview['reference_date']}")
    calendar = preview['calendar']
    if calendar['include_holidays']:
        region = calendar['country_code']
        if calendar['subdivision_code']:
            region += f":{calendar['subdivision_code']}"
        print(f"Holidays: {region}")
    else:
        print("Holidays: not counted (weekends only)")

    if detailed:
        frame = preview['frame']
        if frame.empty:
            print("\nNo active projects to schedule.")
        else:
            print()
            print(frame.to_string())

    print("\nSummary")
    print("-" * 80)
    print(f"  Projects:        {summary['total_projects']}")
    print(f"  Average slip:    {summary['average_slip']} working days")
    print(f"  Delayed:         {summary['delayed_projects']}")
    print(f"  On time:         {summary['on_time_projects']}")
    print(f"  Ahead:           {summary['ahead_projects']}")
    print("=" * 80 + "\n")


def run_preview_script(
    input_path: str,
    reference_date_str: Optional[str] = None,
    detailed: bool = True,
) -> Dict[str, Any]:
    """
    Load a request file, compute its schedule and print the preview.

    Args:
        input_path: Path to a JSON scheduling request
        reference_date_str: Optional YYYY-MM-DD reference date (defaults to today)
        detailed: Print the per-project table, not only the summary
    """
    reference_date = parse_iso_date(reference_date_str) if reference_date_str else None
    logger.info("Previewing schedule", input_path=input_path, reference_date=reference_date_str)

    preview = preview_schedule(load_request(input_path), reference_date)
    print_preview(preview, detailed=detailed)
    return preview
