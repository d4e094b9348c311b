"""
Per-project role scheduling.

Without a dependency graph every role runs in parallel from the project start
and the slowest one sets the project length. With a graph, roles are scheduled
in dependency order (a role starts when the last role it depends on ends), each
role's end is simulated against its assignees' vacations, and worker-status
penalties are applied on top.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence

from planner.logging_config import get_logger
from planner.scheduling.calendar import WorkCalendar
from planner.scheduling.config import SchedulingConfig
from planner.scheduling.errors import CyclicDependency, SchedulingDivergence
from planner.scheduling.estimator import flat_day_estimate, remaining_effort, role_capacity
from planner.scheduling.models import (
    Project,
    RoleDependencyGraph,
    RoleWindow,
    SchedulingInput,
    WorkerStatus,
)
from planner.scheduling.simulator import (
    simulate_completion,
    simulate_completion_ignoring_vacations,
)
from planner.scheduling.workdays import add_working_days, signed_workday_diff

logger = get_logger(__name__)


@dataclass
class ProjectRoleSchedule:
    """Outcome of scheduling one project's roles from a given start date."""
    start_date: date
    end_date: date
    baseline_end_date: date
    lost_workdays_to_vacation: int = 0
    penalty_days: int = 0
    role_windows: List[RoleWindow] = field(default_factory=list)
    warnings: list = field(default_factory=list)


def role_flat_days(project: Project, role: str, scheduling_input: SchedulingInput) -> int:
    """Closed-form working days for one role of a project."""
    capacity = role_capacity(scheduling_input.assignments_for(project.id, role))
    return flat_day_estimate(remaining_effort(project.role_efforts.get(role)), capacity)


def flat_end(calendar: WorkCalendar, start: date, days: int, project: Project, role: str) -> date:
    """
    End of a closed-form window of `days` working days from `start`.

    Held to the same calendar-day ceiling as the simulator, so the fast path
    and the simulation fail on the same inputs.

    Raises:
        SchedulingDivergence: if the window spans more than MAX_SIMULATION_DAYS calendar days
    """
    max_days = SchedulingConfig.MAX_SIMULATION_DAYS
    # Working days never outnumber calendar days
    if days <= max_days:
        end = add_working_days(calendar, start, days)
        if (end - start).days <= max_days:
            return end

    logger.warning(
        "Flat estimate exceeded iteration ceiling",
        project_id=project.id,
        role=role,
        start=start.isoformat(),
        working_days=days,
        max_days=max_days,
    )
    raise SchedulingDivergence(
        start,
        remaining_effort(project.role_efforts.get(role)),
        max_days,
        project_id=project.id,
        role=role,
    )


class CycleFallbackStrategy:
    """Schedules the roles a dependency graph could not order."""

    name = "abstract"

    def resolve(
        self,
        project: Project,
        roles: Sequence[str],
        start: date,
        scheduling_input: SchedulingInput,
        calendar: WorkCalendar,
    ) -> Dict[str, RoleWindow]:
        raise NotImplementedError


class ParallelFallback(CycleFallbackStrategy):
    """Run every unresolved role in parallel from the project start for the longest flat estimate."""

    name = "parallel"

    def resolve(self, project, roles, start, scheduling_input, calendar):
        days, longest_role = max(
            ((role_flat_days(project, role, scheduling_input), role) for role in roles),
            default=(0, None),
        )
        end = flat_end(calendar, start, days, project, longest_role) if longest_role is not None else start
        return {
            role: RoleWindow(role=role, start=start, end=end, baseline_end=end, simulated=False)
            for role in roles
        }


DEFAULT_FALLBACK = ParallelFallback()


def status_penalty_days(graph: RoleDependencyGraph) -> int:
    """Working days added for blocked and waiting roles; penalties accumulate."""
    penalty = 0
    for status in graph.worker_statuses.values():
        if status is WorkerStatus.BLOCKED:
            penalty += SchedulingConfig.BLOCKED_PENALTY_DAYS
        elif status is WorkerStatus.WAITING:
            penalty += SchedulingConfig.WAITING_PENALTY_DAYS
    return penalty


def _schedule_role(
    project: Project,
    role: str,
    start: date,
    baseline_start: date,
    scheduling_input: SchedulingInput,
    calendar: WorkCalendar,
) -> RoleWindow:
    remaining = remaining_effort(project.role_efforts.get(role))
    assignees = scheduling_input.assignees_for(project.id, role)

    if not assignees:
        # Nothing to simulate: flat estimate at fallback capacity
        days = flat_day_estimate(remaining, 0.0)
        return RoleWindow(
            role=role,
            start=start,
            end=flat_end(calendar, start, days, project, role),
            baseline_end=flat_end(calendar, baseline_start, days, project, role),
        )

    if not any(person.has_vacations for person, _ in assignees):
        days = flat_day_estimate(remaining, sum(fte for _, fte in assignees))
        return RoleWindow(
            role=role,
            start=start,
            end=flat_end(calendar, start, days, project, role),
            baseline_end=flat_end(calendar, baseline_start, days, project, role),
        )

    try:
        end = simulate_completion(calendar, start, remaining, assignees)
        baseline_end = simulate_completion_ignoring_vacations(calendar, baseline_start, remaining, assignees)
    except SchedulingDivergence as exc:
        raise exc.with_context(project_id=project.id, role=role) from exc
    return RoleWindow(role=role, start=start, end=end, baseline_end=baseline_end, simulated=True)


def _schedule_without_graph(project, start, scheduling_input, calendar) -> ProjectRoleSchedule:
    windows = []
    for role in project.role_efforts:
        end = flat_end(calendar, start, role_flat_days(project, role, scheduling_input), project, role)
        windows.append(RoleWindow(role=role, start=start, end=end, baseline_end=end))

    end_date = max((window.end for window in windows), default=start)
    return ProjectRoleSchedule(
        start_date=start,
        end_date=end_date,
        baseline_end_date=end_date,
        role_windows=windows,
    )


def _schedule_with_graph(project, start, scheduling_input, calendar, fallback) -> ProjectRoleSchedule:
    graph = project.dependency_graph
    roles = list(project.role_efforts)
    scheduled: Dict[str, RoleWindow] = {}
    warnings = []

    pending = list(roles)
    for _ in range(len(roles) + 1):
        if not pending:
            break
        progressed = False
        for role in list(pending):
            dependencies = graph.dependencies_of(role)
            if any(dependency not in scheduled for dependency in dependencies):
                continue
            role_start = max((scheduled[d].end for d in dependencies), default=start)
            baseline_start = max((scheduled[d].baseline_end for d in dependencies), default=start)
            scheduled[role] = _schedule_role(
                project, role, role_start, baseline_start, scheduling_input, calendar
            )
            pending.remove(role)
            progressed = True
        if not progressed:
            break

    if pending:
        warning = CyclicDependency(project.id, pending)
        logger.warning(
            "Unresolvable role dependencies, using fallback",
            project_id=project.id,
            roles=list(warning.roles),
            strategy=fallback.name,
        )
        scheduled.update(fallback.resolve(project, pending, start, scheduling_input, calendar))
        warnings.append(warning)

    windows = [scheduled[role] for role in roles]
    end_date = max((window.end for window in windows), default=start)
    baseline_end_date = max((window.baseline_end for window in windows), default=start)
    lost = max(0, signed_workday_diff(calendar, baseline_end_date, end_date))

    penalty = status_penalty_days(graph)
    if penalty:
        end_date = add_working_days(calendar, end_date, penalty)
        baseline_end_date = add_working_days(calendar, baseline_end_date, penalty)

    return ProjectRoleSchedule(
        start_date=start,
        end_date=end_date,
        baseline_end_date=baseline_end_date,
        lost_workdays_to_vacation=lost,
        penalty_days=penalty,
        role_windows=windows,
        warnings=warnings,
    )


def schedule_project_roles(
    project: Project,
    start: date,
    scheduling_input: SchedulingInput,
    calendar: WorkCalendar,
    fallback: Optional[CycleFallbackStrategy] = None,
) -> ProjectRoleSchedule:
    """
    Schedule every role of a project from `start`.

    Args:
        project: Project whose role efforts are scheduled
        start: Project start date
        scheduling_input: Validated input providing assignments and people
        calendar: Work calendar deciding which days count
        fallback: Strategy for roles a cyclic graph cannot order (ParallelFallback by default)

    Returns:
        ProjectRoleSchedule

    Raises:
        SchedulingDivergence: if a simulated role never completes
    """
    if project.dependency_graph is None:
        schedule = _schedule_without_graph(project, start, scheduling_input, calendar)
    else:
        schedule = _schedule_with_graph(
            project, start, scheduling_input, calendar, fallback or DEFAULT_FALLBACK
        )

    logger.debug(
        "Scheduled project roles",
        project_id=project.id,
        start=start.isoformat(),
        end=schedule.end_date.isoformat(),
        lost_workdays=schedule.lost_workdays_to_vacation,
        penalty_days=schedule.penalty_days,
    )
    return schedule
