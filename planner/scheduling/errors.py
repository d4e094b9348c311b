"""
Error taxonomy of the delivery-date engine.

InvalidInput and SchedulingDivergence are raised and abort the pass.
CyclicDependency is never raised: it is attached to the ScheduleResult it
affects and the caller decides how to surface it.
"""
from datetime import date
from typing import Iterable, Optional


class SchedulingError(Exception):
    """Base class for errors raised by the scheduling engine."""


class InvalidInput(SchedulingError, ValueError):
    """Malformed or inconsistent input data."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        return {"error": str(self), "field": self.field, "status": "invalid_input"}


class SchedulingDivergence(SchedulingError):
    """The day-by-day simulation exceeded its iteration ceiling."""

    def __init__(self, start: date, remaining_effort: float, max_days: int,
                 project_id: Optional[str] = None, role: Optional[str] = None):
        self.start = start
        self.remaining_effort = remaining_effort
        self.max_days = max_days
        self.project_id = project_id
        self.role = role
        super().__init__(
            f"Cannot estimate completion: {remaining_effort:.2f} effort-days still remaining "
            f"{max_days} days after {start.isoformat()}"
        )

    def with_context(self, project_id: Optional[str] = None, role: Optional[str] = None):
        """Return a copy tagged with the project and role being scheduled."""
        return SchedulingDivergence(
            self.start,
            self.remaining_effort,
            self.max_days,
            project_id=project_id or self.project_id,
            role=role or self.role,
        )

    def to_dict(self) -> dict:
        return {
            "error": str(self),
            "project_id": self.project_id,
            "role": self.role,
            "status": "unable_to_compute",
        }


class CyclicDependency(UserWarning):
    """A role dependency graph that could not be fully topologically resolved."""

    def __init__(self, project_id: Optional[str], roles: Iterable[str]):
        self.project_id = project_id
        self.roles = tuple(sorted(roles))
        super().__init__(
            f"Cyclic or unresolvable role dependencies in project {project_id}: "
            f"{', '.join(self.roles)}"
        )

    def to_dict(self) -> dict:
        return {"type": "cyclic_dependency", "message": str(self), "roles": list(self.roles)}
