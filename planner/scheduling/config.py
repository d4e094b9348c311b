"""
Scheduling configuration module.

This module defines the fixed parameters of the delivery-date engine:
fallback capacity, status penalties, project ordering and iteration bounds.
"""

from typing import Dict


class SchedulingConfig:
    """
    Configuration for scheduling calculations.

    Values are class attributes so they can be read without instantiation and
    patched in tests.
    """

    # Capacity used for a role nobody is assigned to (FTE)
    FALLBACK_CAPACITY: float = 1.0

    # Working days added to a project's end for each role in the given worker status
    BLOCKED_PENALTY_DAYS: int = 30
    WAITING_PENALTY_DAYS: int = 10

    # Statuses that take part in priority chaining, in scheduling order
    STATUS_RANK: Dict[str, int] = {
        'in_progress': 1,
        'not_started': 2,
        'paused': 3,
    }

    # Hard ceiling on simulated calendar days (25 years)
    MAX_SIMULATION_DAYS: int = 365 * 25

    # Remaining effort at or below this is treated as finished
    EFFORT_EPSILON: float = 1e-9

    # Public holiday region used when none is configured
    DEFAULT_COUNTRY_CODE: str = 'CZ'

    @classmethod
    def get_status_rank(cls, status: str) -> int:
        """
        Get the ordering rank of an active project status.

        Returns:
            int: Rank (lower is scheduled earlier); unknown statuses sort last.
        """
        return cls.STATUS_RANK.get(status, len(cls.STATUS_RANK) + 1)

    @classmethod
    def is_active_status(cls, status: str) -> bool:
        """Return True if projects in this status take part in chaining."""
        return status in cls.STATUS_RANK
