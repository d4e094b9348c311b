"""
Priority chaining across projects.

Active projects are ordered by priority, then status, then creation time, and
scheduled one after another on a single timeline as if the whole team worked
on one project at a time. Whether two chained projects actually share people
is not checked.
"""
from collections import OrderedDict
from datetime import date
from typing import Dict, List, Optional

from planner.logging_config import get_logger
from planner.scheduling.calendar import WorkCalendar
from planner.scheduling.models import Project, ScheduleResult, SchedulingInput
from planner.scheduling.roles import CycleFallbackStrategy, schedule_project_roles
from planner.scheduling.workdays import next_working_day

logger = get_logger(__name__)


def active_projects_in_order(projects) -> List[Project]:
    """Active projects sorted by (priority, status rank, created_at)."""
    active = [project for project in projects if project.status.is_active]
    return sorted(
        active,
        key=lambda project: (project.priority, project.status.rank, project.created_at),
    )


def schedule_priority_chain(
    scheduling_input: SchedulingInput,
    calendar: WorkCalendar,
    reference_date: Optional[date] = None,
    fallback: Optional[CycleFallbackStrategy] = None,
) -> Dict[str, ScheduleResult]:
    """
    Schedule all active projects one after another in priority order.

    Each project starts at its explicit start date if it has one, otherwise at
    the chain cursor. After each project the cursor moves to the first working
    day after the later of the cursor and that project's end, so an early
    explicit start never rewinds the chain.

    Args:
        scheduling_input: Validated projects, people and assignments
        calendar: Work calendar deciding which days count
        reference_date: Date the chain starts from (defaults to today)
        fallback: Cycle fallback strategy passed to the role scheduler

    Returns:
        OrderedDict: project id -> ScheduleResult, in scheduling order.
        Inactive projects are absent.

    Raises:
        SchedulingDivergence: if any project cannot be estimated (the chain
            depends on every earlier project, so the whole pass fails)
    """
    if reference_date is None:
        reference_date = date.today()

    ordered = active_projects_in_order(scheduling_input.projects)
    results: Dict[str, ScheduleResult] = OrderedDict()
    chain_cursor = reference_date
    previous: Optional[Project] = None

    for project in ordered:
        if project.explicit_start_date is not None:
            start = project.explicit_start_date
            blocking_project_name = None
        else:
            start = chain_cursor
            blocking_project_name = previous.name if previous is not None else None

        schedule = schedule_project_roles(project, start, scheduling_input, calendar, fallback)

        results[project.id] = ScheduleResult(
            project_id=project.id,
            project_name=project.name,
            start_date=start,
            end_date=schedule.end_date,
            blocking_project_name=blocking_project_name,
            lost_workdays_to_vacation=schedule.lost_workdays_to_vacation,
            role_windows=schedule.role_windows,
            warnings=schedule.warnings,
        )

        chain_cursor = next_working_day(calendar, max(chain_cursor, schedule.end_date))
        previous = project

    logger.info(
        "Priority chain scheduled",
        projects=len(results),
        skipped_inactive=len(scheduling_input.projects) - len(ordered),
        reference_date=reference_date.isoformat(),
        chain_end=chain_cursor.isoformat(),
    )
    return results
