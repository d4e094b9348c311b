"""
Request payloads for the scheduling engine and their validation.

Everything the engine reads is checked here, once, before a pass starts:
dates, numeric ranges, enum values, id uniqueness and role-key consistency
across projects, assignments and dependency graphs. Scheduling code can then
assume well-formed input.
"""
import math
from typing import Any, Dict, List, Optional, TypedDict

from planner.datetime_utils import parse_iso_date, parse_iso_datetime
from planner.scheduling.errors import InvalidInput
from planner.scheduling.models import (
    Assignment,
    DependencyEdge,
    DependencyKind,
    Person,
    Project,
    ProjectStatus,
    RoleDependencyGraph,
    RoleEffort,
    SchedulingInput,
    VacationRange,
    WorkCalendarConfig,
    WorkerStatus,
    normalize_role_key,
)


class CalendarPayload(TypedDict, total=False):
    include_holidays: bool
    country_code: str
    subdivision_code: Optional[str]


class VacationPayload(TypedDict, total=False):
    start: str
    end: str
    note: Optional[str]


class PersonPayload(TypedDict, total=False):
    id: str
    name: str
    role: str
    fte: float
    vacations: List[VacationPayload]


class RoleEffortPayload(TypedDict, total=False):
    total_effort_days: float
    percent_done: float


class ProjectPayload(TypedDict, total=False):
    id: str
    name: str
    priority: int
    status: str
    created_at: str
    explicit_start_date: Optional[str]
    requested_delivery_date: Optional[str]
    roles: Dict[str, RoleEffortPayload]
    dependency_graph: Optional[Dict[str, Any]]


class AssignmentPayload(TypedDict, total=False):
    person_id: str
    project_id: str
    role: str
    allocation_fte: float


class SchedulingRequest(TypedDict, total=False):
    calendar: CalendarPayload
    reference_date: Optional[str]
    people: List[PersonPayload]
    projects: List[ProjectPayload]
    assignments: List[AssignmentPayload]


def _require(data: Dict[str, Any], key: str, field: str) -> Any:
    value = data.get(key)
    if value is None or value == '':
        raise InvalidInput(f"{field} is required", field=field)
    return value


def _object(value: Any, field: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidInput(f"{field} must be an object", field=field)
    return value


def _number(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number", field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be a number", field=field) from None
    if not math.isfinite(number):
        raise InvalidInput(f"{field} must be a finite number", field=field)
    return number


def _date(value: Any, field: str):
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be an ISO date (YYYY-MM-DD)", field=field) from None


def _datetime(value: Any, field: str):
    try:
        return parse_iso_datetime(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be an ISO datetime", field=field) from None


def _enum(enum_cls, value: Any, field: str):
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        valid = ', '.join(member.value for member in enum_cls)
        raise InvalidInput(f"{field} must be one of: {valid}", field=field) from None


def parse_calendar_config(
    data: Optional[CalendarPayload],
    default: Optional[WorkCalendarConfig] = None,
) -> WorkCalendarConfig:
    """Build a WorkCalendarConfig, falling back to `default` for missing keys."""
    default = default or WorkCalendarConfig()
    if not data:
        return default
    if not isinstance(data, dict):
        raise InvalidInput("calendar must be an object", field="calendar")
    country = data.get('country_code') or default.country_code
    subdivision = data.get('subdivision_code', default.subdivision_code) or None
    return WorkCalendarConfig(
        include_holidays=bool(data.get('include_holidays', default.include_holidays)),
        country_code=str(country).strip().upper(),
        subdivision_code=str(subdivision).strip() if subdivision else None,
    )


def parse_person(data: PersonPayload, index: int) -> Person:
    field = f"people[{index}]"
    data = _object(data, field)
    person_id = str(_require(data, 'id', f"{field}.id"))
    fte = _number(data.get('fte', 1.0), f"{field}.fte")
    if fte <= 0:
        raise InvalidInput(f"{field}.fte must be greater than 0", field=f"{field}.fte")

    vacations = []
    for v_index, vacation in enumerate(data.get('vacations') or []):
        v_field = f"{field}.vacations[{v_index}]"
        vacation = _object(vacation, v_field)
        start = _date(_require(vacation, 'start', f"{v_field}.start"), f"{v_field}.start")
        end = _date(_require(vacation, 'end', f"{v_field}.end"), f"{v_field}.end")
        if start > end:
            raise InvalidInput(f"{v_field} starts after it ends", field=v_field)
        vacations.append(VacationRange(start=start, end=end, note=vacation.get('note')))

    return Person(
        id=person_id,
        name=str(data.get('name') or person_id),
        role=normalize_role_key(data.get('role') or ''),
        fte=fte,
        vacations=tuple(vacations),
    )


def parse_role_efforts(data: Dict[str, RoleEffortPayload], field: str) -> Dict[str, RoleEffort]:
    if not isinstance(data, dict):
        raise InvalidInput(f"{field} must be an object keyed by role", field=field)
    efforts: Dict[str, RoleEffort] = {}
    for raw_role, effort in data.items():
        role = normalize_role_key(raw_role)
        r_field = f"{field}.{raw_role}"
        if not role:
            raise InvalidInput(f"{field} contains an empty role key", field=field)
        if role in efforts:
            raise InvalidInput(f"{r_field} duplicates role '{role}'", field=r_field)
        effort = _object(effort or {}, r_field)
        total = _number(effort.get('total_effort_days', 0), f"{r_field}.total_effort_days")
        done = _number(effort.get('percent_done', 0), f"{r_field}.percent_done")
        if total < 0:
            raise InvalidInput(f"{r_field}.total_effort_days must not be negative",
                               field=f"{r_field}.total_effort_days")
        if not 0 <= done <= 100:
            raise InvalidInput(f"{r_field}.percent_done must be between 0 and 100",
                               field=f"{r_field}.percent_done")
        efforts[role] = RoleEffort(total_effort_days=total, percent_done=done)
    return efforts


def parse_dependency_graph(data: Optional[Dict[str, Any]], roles, field: str) -> Optional[RoleDependencyGraph]:
    """
    Parse a role dependency graph; every role it names must be a project role.

    worker_statuses may be a {role: status} object or a list of
    {"role": ..., "status": ...} entries.
    """
    if data is None:
        return None
    if not isinstance(data, dict):
        raise InvalidInput(f"{field} must be an object", field=field)

    def known_role(raw_role, r_field):
        role = normalize_role_key(_require({'role': raw_role}, 'role', r_field))
        if role not in roles:
            raise InvalidInput(f"{r_field} references unknown role '{role}'", field=r_field)
        return role

    edges = []
    for e_index, edge in enumerate(data.get('edges') or data.get('dependencies') or []):
        e_field = f"{field}.edges[{e_index}]"
        edge = _object(edge, e_field)
        edges.append(DependencyEdge(
            from_role=known_role(edge.get('from', edge.get('from_role')), f"{e_field}.from"),
            to_role=known_role(edge.get('to', edge.get('to_role')), f"{e_field}.to"),
            kind=_enum(DependencyKind, edge.get('kind', edge.get('type', 'blocking')), f"{e_field}.kind"),
        ))

    raw_statuses = data.get('worker_statuses') or {}
    if isinstance(raw_statuses, list):
        entries = [
            _object(entry, f"{field}.worker_statuses[{s_index}]")
            for s_index, entry in enumerate(raw_statuses)
        ]
        raw_statuses = {entry.get('role'): entry.get('status') for entry in entries}
    raw_statuses = _object(raw_statuses, f"{field}.worker_statuses")
    statuses = {}
    for raw_role, status in raw_statuses.items():
        s_field = f"{field}.worker_statuses.{raw_role}"
        statuses[known_role(raw_role, s_field)] = _enum(WorkerStatus, status, s_field)

    return RoleDependencyGraph(edges=tuple(edges), worker_statuses=statuses)


def parse_project(data: ProjectPayload, index: int) -> Project:
    field = f"projects[{index}]"
    data = _object(data, field)
    project_id = str(_require(data, 'id', f"{field}.id"))
    priority = _number(data.get('priority', 0), f"{field}.priority")
    if priority != int(priority):
        raise InvalidInput(f"{field}.priority must be an integer", field=f"{field}.priority")

    role_efforts = parse_role_efforts(data.get('roles') or {}, f"{field}.roles")
    created_at = _datetime(data.get('created_at'), f"{field}.created_at")

    project_kwargs = {}
    if created_at is not None:
        project_kwargs['created_at'] = created_at

    return Project(
        id=project_id,
        name=str(data.get('name') or project_id),
        priority=int(priority),
        status=_enum(ProjectStatus, data.get('status') or 'not_started', f"{field}.status"),
        explicit_start_date=_date(data.get('explicit_start_date'), f"{field}.explicit_start_date"),
        requested_delivery_date=_date(data.get('requested_delivery_date'), f"{field}.requested_delivery_date"),
        role_efforts=role_efforts,
        dependency_graph=parse_dependency_graph(
            data.get('dependency_graph'), role_efforts, f"{field}.dependency_graph"
        ),
        **project_kwargs,
    )


def validate_scheduling_input(scheduling_input: SchedulingInput) -> SchedulingInput:
    """
    Check cross-references of an already-built SchedulingInput.

    Raises:
        InvalidInput: on duplicate ids, unknown person/project references,
            assignments to roles the project does not estimate, or FTE <= 0
    """
    person_ids = [person.id for person in scheduling_input.people]
    project_ids = [project.id for project in scheduling_input.projects]
    for label, field, ids in (('person', 'people', person_ids), ('project', 'projects', project_ids)):
        duplicates = sorted({item for item in ids if ids.count(item) > 1})
        if duplicates:
            raise InvalidInput(f"Duplicate {label} id(s): {', '.join(duplicates)}", field=field)

    projects = {project.id: project for project in scheduling_input.projects}
    for index, assignment in enumerate(scheduling_input.assignments):
        field = f"assignments[{index}]"
        if assignment.person_id not in person_ids:
            raise InvalidInput(f"{field} references unknown person '{assignment.person_id}'",
                               field=f"{field}.person_id")
        project = projects.get(assignment.project_id)
        if project is None:
            raise InvalidInput(f"{field} references unknown project '{assignment.project_id}'",
                               field=f"{field}.project_id")
        if assignment.role not in project.role_efforts:
            raise InvalidInput(
                f"{field} assigns role '{assignment.role}' which project '{project.id}' does not estimate",
                field=f"{field}.role",
            )
        if assignment.allocation_fte <= 0:
            raise InvalidInput(f"{field}.allocation_fte must be greater than 0",
                               field=f"{field}.allocation_fte")
    return scheduling_input


def build_scheduling_input(data: SchedulingRequest) -> SchedulingInput:
    """
    Build and validate a SchedulingInput from a JSON-like request.

    Raises:
        InvalidInput: describing the first problem found
    """
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object")

    people = [parse_person(person, index) for index, person in enumerate(data.get('people') or [])]
    projects = [parse_project(project, index) for index, project in enumerate(data.get('projects') or [])]
    fte_by_person = {person.id: person.fte for person in people}

    assignments = []
    for index, assignment in enumerate(data.get('assignments') or []):
        field = f"assignments[{index}]"
        assignment = _object(assignment, field)
        person_id = str(_require(assignment, 'person_id', f"{field}.person_id"))
        allocation = assignment.get('allocation_fte')
        if allocation is None:
            allocation = fte_by_person.get(person_id, 1.0)
        assignments.append(Assignment(
            person_id=person_id,
            project_id=str(_require(assignment, 'project_id', f"{field}.project_id")),
            role=normalize_role_key(_require(assignment, 'role', f"{field}.role")),
            allocation_fte=_number(allocation, f"{field}.allocation_fte"),
        ))

    return validate_scheduling_input(SchedulingInput(
        projects=tuple(projects),
        people=tuple(people),
        assignments=tuple(assignments),
    ))


def parse_reference_date(data: SchedulingRequest):
    """The request's reference date ("today"), or None to use the real today."""
    return _date(data.get('reference_date'), 'reference_date')
