"""
Delivery-date scheduling engine.

Given projects, a roster of people with fractional availability and vacations,
and optional per-project role dependency graphs, computes each project's start
date, end date and slip/reserve against its requested deadline.
"""

from planner.scheduling.config import SchedulingConfig
from planner.scheduling.calendar import WorkCalendar, holiday_dates
from planner.scheduling.workdays import (
    add_working_days,
    next_working_day,
    signed_workday_diff,
    working_days_between,
)
from planner.scheduling.estimator import (
    effective_capacity,
    flat_day_estimate,
    remaining_effort,
    role_capacity,
)
from planner.scheduling.simulator import (
    simulate_completion,
    simulate_completion_ignoring_vacations,
)
from planner.scheduling.roles import (
    CycleFallbackStrategy,
    ParallelFallback,
    schedule_project_roles,
)
from planner.scheduling.chain import schedule_priority_chain
from planner.scheduling.delivery import (
    calculate_delivery_info,
    calculate_priority_deliveries,
    summarize_slip,
)
from planner.scheduling.errors import (
    CyclicDependency,
    InvalidInput,
    SchedulingDivergence,
    SchedulingError,
)

__all__ = [
    'SchedulingConfig',
    'WorkCalendar',
    'holiday_dates',
    'add_working_days',
    'next_working_day',
    'signed_workday_diff',
    'working_days_between',
    'effective_capacity',
    'flat_day_estimate',
    'remaining_effort',
    'role_capacity',
    'simulate_completion',
    'simulate_completion_ignoring_vacations',
    'CycleFallbackStrategy',
    'ParallelFallback',
    'schedule_project_roles',
    'schedule_priority_chain',
    'calculate_delivery_info',
    'calculate_priority_deliveries',
    'summarize_slip',
    'CyclicDependency',
    'InvalidInput',
    'SchedulingDivergence',
    'SchedulingError',
]
