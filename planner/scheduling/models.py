"""
Value objects consumed and produced by the scheduling engine.

Inputs are frozen: a scheduling pass reads them and never mutates them.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from planner.scheduling.config import SchedulingConfig


def normalize_role_key(role: str) -> str:
    """Normalize a role label so 'BE', 'be' and ' Be ' name the same role."""
    return str(role).strip().lower()


class ProjectStatus(str, Enum):
    NOT_STARTED = 'not_started'
    IN_PROGRESS = 'in_progress'
    PAUSED = 'paused'
    DONE = 'done'
    CANCELLED = 'cancelled'

    @property
    def is_active(self) -> bool:
        return SchedulingConfig.is_active_status(self.value)

    @property
    def rank(self) -> int:
        return SchedulingConfig.get_status_rank(self.value)


class DependencyKind(str, Enum):
    BLOCKING = 'blocking'
    WAITING = 'waiting'
    PARALLEL = 'parallel'

    @property
    def is_dependency(self) -> bool:
        """Blocking and waiting edges order roles; parallel edges do not."""
        return self is not DependencyKind.PARALLEL


class WorkerStatus(str, Enum):
    ACTIVE = 'active'
    WAITING = 'waiting'
    BLOCKED = 'blocked'


@dataclass(frozen=True)
class WorkCalendarConfig:
    """Which days count as working days. The default is weekends-only."""
    include_holidays: bool = False
    country_code: str = SchedulingConfig.DEFAULT_COUNTRY_CODE
    subdivision_code: Optional[str] = None


@dataclass(frozen=True)
class VacationRange:
    start: date
    end: date
    note: Optional[str] = None

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class Person:
    id: str
    name: str
    role: str
    fte: float
    vacations: Tuple[VacationRange, ...] = ()

    def is_on_vacation(self, day: date) -> bool:
        # Overlapping ranges simply union
        return any(vacation.contains(day) for vacation in self.vacations)

    @property
    def has_vacations(self) -> bool:
        return bool(self.vacations)


@dataclass(frozen=True)
class Assignment:
    person_id: str
    project_id: str
    role: str
    allocation_fte: float


@dataclass(frozen=True)
class RoleEffort:
    total_effort_days: float
    percent_done: float = 0.0

    @property
    def remaining_effort(self) -> float:
        return max(0.0, self.total_effort_days * (1 - self.percent_done / 100))


@dataclass(frozen=True)
class DependencyEdge:
    from_role: str
    to_role: str
    kind: DependencyKind = DependencyKind.BLOCKING


@dataclass(frozen=True)
class RoleDependencyGraph:
    edges: Tuple[DependencyEdge, ...] = ()
    worker_statuses: Mapping[str, WorkerStatus] = field(default_factory=dict)

    def dependencies_of(self, role: str) -> Tuple[str, ...]:
        """Roles that must finish before `role` can start."""
        seen = []
        for edge in self.edges:
            if edge.to_role == role and edge.kind.is_dependency and edge.from_role not in seen:
                seen.append(edge.from_role)
        return tuple(seen)

    def status_of(self, role: str) -> WorkerStatus:
        return self.worker_statuses.get(role, WorkerStatus.ACTIVE)

    def roles(self) -> Tuple[str, ...]:
        referenced = []
        for edge in self.edges:
            for role in (edge.from_role, edge.to_role):
                if role not in referenced:
                    referenced.append(role)
        for role in self.worker_statuses:
            if role not in referenced:
                referenced.append(role)
        return tuple(referenced)


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    priority: int
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    created_at: datetime = datetime(1970, 1, 1)
    explicit_start_date: Optional[date] = None
    requested_delivery_date: Optional[date] = None
    role_efforts: Mapping[str, RoleEffort] = field(default_factory=dict)
    dependency_graph: Optional[RoleDependencyGraph] = None


@dataclass
class RoleWindow:
    """Computed working window of one role within a project."""
    role: str
    start: date
    end: date
    baseline_end: date
    simulated: bool = False

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "baseline_end": self.baseline_end.isoformat(),
            "simulated": self.simulated,
        }


@dataclass
class ScheduleResult:
    project_id: str
    project_name: str
    start_date: date
    end_date: date
    blocking_project_name: Optional[str] = None
    lost_workdays_to_vacation: int = 0
    role_windows: List[RoleWindow] = field(default_factory=list)
    warnings: list = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize for JSON response"""
        return {
            "project_id": self.project_id,
            "project_name": self.project_name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "blocking_project_name": self.blocking_project_name,
            "lost_workdays_to_vacation": self.lost_workdays_to_vacation,
            "role_windows": [window.to_dict() for window in self.role_windows],
            "warnings": [warning.to_dict() for warning in self.warnings],
        }


@dataclass
class DeliveryInfo:
    schedule: ScheduleResult
    requested_delivery_date: Optional[date]
    diff_workdays: int

    @property
    def calculated_delivery_date(self) -> date:
        return self.schedule.end_date

    @property
    def is_slipping(self) -> bool:
        return self.diff_workdays < 0

    def to_dict(self) -> dict:
        """Serialize for JSON response"""
        return {
            **self.schedule.to_dict(),
            "calculated_delivery_date": self.calculated_delivery_date.isoformat(),
            "requested_delivery_date": (
                self.requested_delivery_date.isoformat() if self.requested_delivery_date else None
            ),
            "diff_workdays": self.diff_workdays,
        }


@dataclass(frozen=True)
class SchedulingInput:
    """
    A validated bundle of everything one scheduling pass reads.

    Build it with planner.scheduling.payloads.build_scheduling_input (or
    validate_scheduling_input) so that role keys, person references and
    numeric ranges are checked before any scheduling happens.
    """
    projects: Tuple[Project, ...] = ()
    people: Tuple[Person, ...] = ()
    assignments: Tuple[Assignment, ...] = ()

    def person(self, person_id: str) -> Person:
        for person in self.people:
            if person.id == person_id:
                return person
        raise KeyError(person_id)

    def project(self, project_id: str) -> Project:
        for project in self.projects:
            if project.id == project_id:
                return project
        raise KeyError(project_id)

    def assignments_for(self, project_id: str, role: Optional[str] = None) -> List[Assignment]:
        return [
            assignment for assignment in self.assignments
            if assignment.project_id == project_id and (role is None or assignment.role == role)
        ]

    def assignees_for(self, project_id: str, role: str) -> List[Tuple[Person, float]]:
        """(Person, allocation_fte) pairs working on a role of a project."""
        return [
            (self.person(assignment.person_id), assignment.allocation_fte)
            for assignment in self.assignments_for(project_id, role)
        ]

    def assignments_by_person(self) -> Dict[str, List[Assignment]]:
        grouped: Dict[str, List[Assignment]] = {}
        for assignment in self.assignments:
            grouped.setdefault(assignment.person_id, []).append(assignment)
        return grouped
