"""
Closed-form effort estimation.

Converts a role's remaining effort and assigned capacity into a whole number
of working days. This is the fast path used whenever day-by-day simulation
has nothing to add (no dependency graph, nobody assigned, or no vacations).
"""

import math
from typing import Iterable, Optional

from planner.scheduling.config import SchedulingConfig
from planner.scheduling.models import Assignment, RoleEffort


def remaining_effort(role_effort: Optional[RoleEffort]) -> float:
    """
    Calculate remaining effort for a role.

    Formula: remaining = total_effort_days × (1 - percent_done / 100)

    Returns:
        float: Remaining effort-days (never negative, 0.0 for a missing role)
    """
    if role_effort is None:
        return 0.0
    return role_effort.remaining_effort


def role_capacity(assignments: Iterable[Assignment]) -> float:
    """Sum of allocation_fte over the assignments of one role."""
    return sum(assignment.allocation_fte for assignment in assignments)


def effective_capacity(capacity: float) -> float:
    """Capacity to divide by: the fallback capacity when nobody is assigned."""
    if capacity <= 0:
        return SchedulingConfig.FALLBACK_CAPACITY
    return capacity


def flat_day_estimate(remaining: float, capacity: float) -> int:
    """
    Convert remaining effort to working days.

    Formula: ceil(remaining / effective_capacity)

    Float noise (e.g. 10 × 0.3 = 3.0000000000000004) is rounded away before the
    ceiling so it never adds a spurious day.
    """
    if remaining <= SchedulingConfig.EFFORT_EPSILON:
        return 0
    days = remaining / effective_capacity(capacity)
    return max(0, math.ceil(round(days, 9)))
