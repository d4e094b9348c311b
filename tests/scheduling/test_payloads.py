"""
Tests for request parsing and validation.
"""
import copy
import pytest
from datetime import date, datetime

from planner.scheduling.errors import InvalidInput
from planner.scheduling.models import (
    DependencyKind,
    ProjectStatus,
    WorkCalendarConfig,
    WorkerStatus,
)
from planner.scheduling.payloads import (
    build_scheduling_input,
    parse_calendar_config,
    parse_reference_date,
)


BASE_REQUEST = {
    'people': [
        {'id': 'ann', 'name': 'Ann', 'role': 'BE', 'fte': 1.0,
         'vacations': [{'start': '2025-03-10', 'end': '2025-03-14'}]},
        {'id': 'bob', 'name': 'Bob', 'role': 'FE', 'fte': 0.5},
    ],
    'projects': [
        {'id': 'p1', 'name': 'Portal', 'priority': 1, 'status': 'in_progress',
         'created_at': '2025-01-06T09:00:00Z',
         'requested_delivery_date': '2025-04-30',
         'roles': {' BE ': {'total_effort_days': 10, 'percent_done': 20},
                   'fe': {'total_effort_days': 4}},
         'dependency_graph': {
             'edges': [{'from': 'be', 'to': 'FE', 'kind': 'blocking'}],
             'worker_statuses': {'fe': 'waiting'}}},
    ],
    'assignments': [
        {'person_id': 'ann', 'project_id': 'p1', 'role': 'be', 'allocation_fte': 1.0},
        {'person_id': 'bob', 'project_id': 'p1', 'role': 'Fe'},
    ],
}


@pytest.fixture
def request_data():
    return copy.deepcopy(BASE_REQUEST)


def assert_invalid(request_data, field):
    with pytest.raises(InvalidInput) as exc_info:
        build_scheduling_input(request_data)
    assert exc_info.value.field == field
    return exc_info.value


# ==============================================================================
# VALID INPUT
# ==============================================================================

class TestBuildSchedulingInput:
    """Tests for build_scheduling_input on well-formed requests."""

    def test_parses_people(self, request_data):
        scheduling_input = build_scheduling_input(request_data)
        ann = scheduling_input.person('ann')
        assert ann.role == 'be'
        assert ann.vacations[0].start == date(2025, 3, 10)
        assert ann.is_on_vacation(date(2025, 3, 12))

    def test_parses_project(self, request_data):
        project = build_scheduling_input(request_data).project('p1')
        assert project.status is ProjectStatus.IN_PROGRESS
        assert project.created_at == datetime(2025, 1, 6, 9, 0)
        assert project.requested_delivery_date == date(2025, 4, 30)
        assert set(project.role_efforts) == {'be', 'fe'}
        assert project.role_efforts['be'].remaining_effort == pytest.approx(8.0)

    def test_normalizes_role_keys_across_graph_and_assignments(self, request_data):
        scheduling_input = build_scheduling_input(request_data)
        graph = scheduling_input.project('p1').dependency_graph
        assert graph.edges[0].from_role == 'be'
        assert graph.edges[0].to_role == 'fe'
        assert graph.edges[0].kind is DependencyKind.BLOCKING
        assert graph.status_of('fe') is WorkerStatus.WAITING
        assert graph.status_of('be') is WorkerStatus.ACTIVE
        assert [a.role for a in scheduling_input.assignments] == ['be', 'fe']

    def test_missing_allocation_defaults_to_person_fte(self, request_data):
        scheduling_input = build_scheduling_input(request_data)
        assert scheduling_input.assignments_for('p1', 'fe')[0].allocation_fte == 0.5

    def test_worker_statuses_as_list(self, request_data):
        request_data['projects'][0]['dependency_graph']['worker_statuses'] = [
            {'role': 'BE', 'status': 'Blocked'},
        ]
        graph = build_scheduling_input(request_data).project('p1').dependency_graph
        assert graph.status_of('be') is WorkerStatus.BLOCKED

    def test_defaults(self):
        scheduling_input = build_scheduling_input({
            'projects': [{'id': 'p1', 'roles': {'dev': {'total_effort_days': 3}}}],
        })
        project = scheduling_input.project('p1')
        assert project.name == 'p1'
        assert project.priority == 0
        assert project.status is ProjectStatus.NOT_STARTED
        assert project.dependency_graph is None
        assert project.explicit_start_date is None

    def test_empty_request(self):
        scheduling_input = build_scheduling_input({})
        assert scheduling_input.projects == ()
        assert scheduling_input.people == ()


# ==============================================================================
# INVALID INPUT
# ==============================================================================

class TestInvalidInput:
    """Every problem is reported as InvalidInput naming the offending field."""

    def test_body_must_be_object(self):
        with pytest.raises(InvalidInput):
            build_scheduling_input([])

    def test_entries_must_be_objects(self, request_data):
        request_data['people'].append('cid')
        assert_invalid(request_data, 'people[2]')

    @pytest.mark.parametrize("value", [float('nan'), float('inf'), float('-inf'), 'NaN', 'Infinity'])
    def test_non_finite_fte_rejected(self, request_data, value):
        request_data['people'][1]['fte'] = value
        assert_invalid(request_data, 'people[1].fte')

    def test_non_finite_priority_rejected(self, request_data):
        request_data['projects'][0]['priority'] = float('nan')
        assert_invalid(request_data, 'projects[0].priority')

    def test_infinite_effort_rejected(self, request_data):
        request_data['projects'][0]['roles']['fe']['total_effort_days'] = float('inf')
        assert_invalid(request_data, 'projects[0].roles.fe.total_effort_days')

    def test_non_finite_allocation_rejected(self, request_data):
        request_data['assignments'][0]['allocation_fte'] = float('nan')
        assert_invalid(request_data, 'assignments[0].allocation_fte')

    def test_worker_status_entries_must_be_objects(self, request_data):
        request_data['projects'][0]['dependency_graph']['worker_statuses'] = ['fe']
        assert_invalid(request_data, 'projects[0].dependency_graph.worker_statuses[0]')

    def test_worker_statuses_must_be_object_or_list(self, request_data):
        request_data['projects'][0]['dependency_graph']['worker_statuses'] = 'blocked'
        assert_invalid(request_data, 'projects[0].dependency_graph.worker_statuses')

    def test_person_id_required(self, request_data):
        del request_data['people'][0]['id']
        assert_invalid(request_data, 'people[0].id')

    def test_fte_must_be_positive(self, request_data):
        request_data['people'][1]['fte'] = 0
        assert_invalid(request_data, 'people[1].fte')

    def test_fte_must_be_number(self, request_data):
        request_data['people'][1]['fte'] = True
        assert_invalid(request_data, 'people[1].fte')

    def test_vacation_must_not_end_before_start(self, request_data):
        request_data['people'][0]['vacations'][0]['end'] = '2025-03-01'
        assert_invalid(request_data, 'people[0].vacations[0]')

    def test_vacation_dates_must_be_iso(self, request_data):
        request_data['people'][0]['vacations'][0]['start'] = '10/03/2025'
        assert_invalid(request_data, 'people[0].vacations[0].start')

    def test_effort_must_not_be_negative(self, request_data):
        request_data['projects'][0]['roles']['fe']['total_effort_days'] = -1
        assert_invalid(request_data, 'projects[0].roles.fe.total_effort_days')

    def test_percent_done_range(self, request_data):
        request_data['projects'][0]['roles']['fe']['percent_done'] = 120
        assert_invalid(request_data, 'projects[0].roles.fe.percent_done')

    def test_duplicate_role_keys_after_normalization(self, request_data):
        request_data['projects'][0]['roles']['be'] = {'total_effort_days': 1}
        assert_invalid(request_data, 'projects[0].roles.be')

    def test_priority_must_be_integer(self, request_data):
        request_data['projects'][0]['priority'] = 1.5
        assert_invalid(request_data, 'projects[0].priority')

    def test_unknown_status(self, request_data):
        request_data['projects'][0]['status'] = 'archived'
        error = assert_invalid(request_data, 'projects[0].status')
        assert 'not_started' in str(error)

    def test_bad_requested_date(self, request_data):
        request_data['projects'][0]['requested_delivery_date'] = '2025-02-30'
        assert_invalid(request_data, 'projects[0].requested_delivery_date')

    def test_graph_edge_to_unknown_role(self, request_data):
        request_data['projects'][0]['dependency_graph']['edges'][0]['to'] = 'qa'
        assert_invalid(request_data, 'projects[0].dependency_graph.edges[0].to')

    def test_unknown_edge_kind(self, request_data):
        request_data['projects'][0]['dependency_graph']['edges'][0]['kind'] = 'soft'
        assert_invalid(request_data, 'projects[0].dependency_graph.edges[0].kind')

    def test_unknown_worker_status(self, request_data):
        request_data['projects'][0]['dependency_graph']['worker_statuses'] = {'fe': 'sleeping'}
        assert_invalid(request_data, 'projects[0].dependency_graph.worker_statuses.fe')

    def test_worker_status_for_unknown_role(self, request_data):
        request_data['projects'][0]['dependency_graph']['worker_statuses'] = {'qa': 'active'}
        assert_invalid(request_data, 'projects[0].dependency_graph.worker_statuses.qa')

    def test_duplicate_project_id(self, request_data):
        request_data['projects'].append(copy.deepcopy(request_data['projects'][0]))
        assert_invalid(request_data, 'projects')

    def test_duplicate_person_id(self, request_data):
        request_data['people'][1]['id'] = 'ann'
        assert_invalid(request_data, 'people')

    def test_assignment_to_unknown_person(self, request_data):
        request_data['assignments'][0]['person_id'] = 'zed'
        assert_invalid(request_data, 'assignments[0].person_id')

    def test_assignment_to_unknown_project(self, request_data):
        request_data['assignments'][0]['project_id'] = 'p9'
        assert_invalid(request_data, 'assignments[0].project_id')

    def test_assignment_to_unestimated_role(self, request_data):
        request_data['assignments'][0]['role'] = 'qa'
        assert_invalid(request_data, 'assignments[0].role')

    def test_allocation_must_be_positive(self, request_data):
        request_data['assignments'][0]['allocation_fte'] = 0
        assert_invalid(request_data, 'assignments[0].allocation_fte')


# ==============================================================================
# CALENDAR AND REFERENCE DATE
# ==============================================================================

class TestCalendarConfig:
    """Tests for parse_calendar_config and parse_reference_date."""

    def test_missing_calendar_uses_default(self):
        default = WorkCalendarConfig(include_holidays=True, country_code='DE', subdivision_code='BY')
        assert parse_calendar_config(None, default) == default

    def test_request_overrides_default(self):
        default = WorkCalendarConfig(include_holidays=False, country_code='CZ')
        config = parse_calendar_config({'include_holidays': True, 'country_code': 'sk'}, default)
        assert config == WorkCalendarConfig(include_holidays=True, country_code='SK', subdivision_code=None)

    def test_calendar_must_be_object(self):
        with pytest.raises(InvalidInput):
            parse_calendar_config(['CZ'])

    def test_reference_date(self):
        assert parse_reference_date({'reference_date': '2025-03-03'}) == date(2025, 3, 3)
        assert parse_reference_date({}) is None
        with pytest.raises(InvalidInput):
            parse_reference_date({'reference_date': 'tomorrow'})
