"""
Delivery dates and slip/reserve.

Positive diff_workdays means reserve (the computed completion is ahead of the
requested date); negative means slip.
"""
from datetime import date
from typing import Dict, Iterable, Optional

from planner.scheduling.calendar import WorkCalendar
from planner.scheduling.chain import schedule_priority_chain
from planner.scheduling.models import DeliveryInfo, Project, ScheduleResult, SchedulingInput
from planner.scheduling.roles import CycleFallbackStrategy, schedule_project_roles
from planner.scheduling.workdays import signed_workday_diff


def delivery_diff(
    calendar: WorkCalendar,
    calculated: date,
    requested: Optional[date],
    today: date,
) -> int:
    """Signed working days between the computed date and the requested one (or today)."""
    if requested is not None:
        return signed_workday_diff(calendar, calculated, requested)
    return signed_workday_diff(calendar, today, calculated)


def _delivery_from_schedule(
    schedule: ScheduleResult,
    project: Project,
    calendar: WorkCalendar,
    today: date,
) -> DeliveryInfo:
    return DeliveryInfo(
        schedule=schedule,
        requested_delivery_date=project.requested_delivery_date,
        diff_workdays=delivery_diff(
            calendar, schedule.end_date, project.requested_delivery_date, today
        ),
    )


def calculate_delivery_info(
    project: Project,
    scheduling_input: SchedulingInput,
    calendar: WorkCalendar,
    today: Optional[date] = None,
    fallback: Optional[CycleFallbackStrategy] = None,
) -> DeliveryInfo:
    """
    Delivery info for a single project scheduled on its own.

    The project starts at its explicit start date or today, ignoring every
    other project.
    """
    if today is None:
        today = date.today()
    start = project.explicit_start_date or today
    schedule = schedule_project_roles(project, start, scheduling_input, calendar, fallback)
    result = ScheduleResult(
        project_id=project.id,
        project_name=project.name,
        start_date=start,
        end_date=schedule.end_date,
        lost_workdays_to_vacation=schedule.lost_workdays_to_vacation,
        role_windows=schedule.role_windows,
        warnings=schedule.warnings,
    )
    return _delivery_from_schedule(result, project, calendar, today)


def calculate_priority_deliveries(
    scheduling_input: SchedulingInput,
    calendar: WorkCalendar,
    today: Optional[date] = None,
    fallback: Optional[CycleFallbackStrategy] = None,
) -> Dict[str, DeliveryInfo]:
    """Delivery info for every active project, chained in priority order."""
    if today is None:
        today = date.today()
    schedules = schedule_priority_chain(scheduling_input, calendar, today, fallback)
    return {
        project_id: _delivery_from_schedule(
            schedule, scheduling_input.project(project_id), calendar, today
        )
        for project_id, schedule in schedules.items()
    }


def summarize_slip(deliveries: Iterable[DeliveryInfo]) -> Dict[str, int]:
    """
    Aggregate slip across projects.

    Returns:
        dict: average_slip (rounded mean diff_workdays), total_projects,
        delayed_projects (diff < 0), on_time_projects (diff == 0),
        ahead_projects (diff > 0)
    """
    diffs = [delivery.diff_workdays for delivery in deliveries]
    if not diffs:
        return {
            'average_slip': 0,
            'total_projects': 0,
            'delayed_projects': 0,
            'on_time_projects': 0,
            'ahead_projects': 0,
        }
    return {
        'average_slip': round(sum(diffs) / len(diffs)),
        'total_projects': len(diffs),
        'delayed_projects': sum(1 for diff in diffs if diff < 0),
        'on_time_projects': sum(1 for diff in diffs if diff == 0),
        'ahead_projects': sum(1 for diff in diffs if diff > 0),
    }
