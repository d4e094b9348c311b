"""
Day-by-day completion simulation that accounts for time off.

Each working day after the start date contributes the allocation of every
assignee who is not on vacation that day. The simulation ends on the working
day at which the accumulated capacity covers the remaining effort.
"""
from datetime import date, timedelta
from typing import Optional, Sequence, Tuple

from planner.logging_config import get_logger
from planner.scheduling.calendar import WorkCalendar
from planner.scheduling.config import SchedulingConfig
from planner.scheduling.errors import SchedulingDivergence
from planner.scheduling.models import Person

logger = get_logger(__name__)

Assignee = Tuple[Person, float]


def daily_capacity(assignees: Sequence[Assignee], day: date, ignore_vacations: bool = False) -> float:
    """Sum of allocation_fte over assignees available on `day`."""
    return sum(
        allocation_fte
        for person, allocation_fte in assignees
        if ignore_vacations or not person.is_on_vacation(day)
    )


def _simulate(
    calendar: WorkCalendar,
    start: date,
    remaining: float,
    assignees: Sequence[Assignee],
    ignore_vacations: bool,
    max_days: Optional[int],
) -> date:
    if max_days is None:
        max_days = SchedulingConfig.MAX_SIMULATION_DAYS
    epsilon = SchedulingConfig.EFFORT_EPSILON

    if remaining <= epsilon:
        return start

    cursor = start
    for _ in range(max_days):
        cursor += timedelta(days=1)
        if not calendar.is_working_day(cursor):
            continue
        remaining -= daily_capacity(assignees, cursor, ignore_vacations)
        if remaining <= epsilon:
            return cursor

    logger.warning(
        "Simulation exceeded iteration ceiling",
        start=start.isoformat(),
        remaining_effort=remaining,
        max_days=max_days,
        assignees=[person.id for person, _ in assignees],
    )
    raise SchedulingDivergence(start, remaining, max_days)


def simulate_completion(
    calendar: WorkCalendar,
    start: date,
    remaining: float,
    assignees: Sequence[Assignee],
    max_days: Optional[int] = None,
) -> date:
    """
    Simulate when `remaining` effort-days are done, skipping vacation days.

    Args:
        calendar: Work calendar deciding which days count
        start: Date work is scheduled from (not itself consumed)
        remaining: Remaining effort in effort-days
        assignees: (Person, allocation_fte) pairs working on the effort
        max_days: Calendar-day ceiling (defaults to SchedulingConfig.MAX_SIMULATION_DAYS)

    Returns:
        date: Completion date

    Raises:
        SchedulingDivergence: if the effort is not done within the ceiling
    """
    return _simulate(calendar, start, remaining, assignees, False, max_days)


def simulate_completion_ignoring_vacations(
    calendar: WorkCalendar,
    start: date,
    remaining: float,
    assignees: Sequence[Assignee],
    max_days: Optional[int] = None,
) -> date:
    """Same as simulate_completion with every assignee always available."""
    return _simulate(calendar, start, remaining, assignees, True, max_days)
