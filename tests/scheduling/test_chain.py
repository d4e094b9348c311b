"""
Tests for priority chaining across projects and delivery slip/reserve.
"""
import pytest
from datetime import date, datetime

from planner.scheduling.calendar import WorkCalendar
from planner.scheduling.chain import active_projects_in_order, schedule_priority_chain
from planner.scheduling.delivery import (
    calculate_delivery_info,
    calculate_priority_deliveries,
    delivery_diff,
    summarize_slip,
)
from planner.scheduling.models import (
    DeliveryInfo,
    Project,
    ProjectStatus,
    RoleEffort,
    ScheduleResult,
    SchedulingInput,
)
from planner.scheduling.workdays import next_working_day, signed_workday_diff

MONDAY = date(2025, 3, 3)


@pytest.fixture
def calendar():
    return WorkCalendar.default()


def make_project(project_id, priority, effort=4, status='not_started', created_at=None,
                 explicit_start=None, requested=None):
    """Unstaffed project with a single 'dev' role (fallback capacity of 1 FTE)."""
    return Project(
        id=project_id,
        name=project_id.upper(),
        priority=priority,
        status=ProjectStatus(status),
        created_at=created_at or datetime(2025, 1, 1),
        explicit_start_date=explicit_start,
        requested_delivery_date=requested,
        role_efforts={'dev': RoleEffort(effort)},
    )


def make_input(*projects):
    return SchedulingInput(projects=tuple(projects))


# ==============================================================================
# ORDERING
# ==============================================================================

class TestActiveProjectOrder:
    """Tests for active_projects_in_order."""

    def test_orders_by_priority(self):
        projects = [make_project('p3', 3), make_project('p1', 1), make_project('p2', 2)]
        assert [p.id for p in active_projects_in_order(projects)] == ['p1', 'p2', 'p3']

    def test_status_breaks_priority_ties(self):
        projects = [
            make_project('paused', 1, status='paused', created_at=datetime(2024, 1, 1)),
            make_project('new', 1, status='not_started', created_at=datetime(2024, 2, 1)),
            make_project('running', 1, status='in_progress', created_at=datetime(2024, 3, 1)),
        ]
        assert [p.id for p in active_projects_in_order(projects)] == ['running', 'new', 'paused']

    def test_created_at_breaks_remaining_ties(self):
        projects = [
            make_project('late', 1, created_at=datetime(2025, 2, 1, 12)),
            make_project('early', 1, created_at=datetime(2025, 2, 1, 9)),
        ]
        assert [p.id for p in active_projects_in_order(projects)] == ['early', 'late']

    def test_done_and_cancelled_are_excluded(self):
        projects = [
            make_project('done', 1, status='done'),
            make_project('cancelled', 2, status='cancelled'),
            make_project('live', 3),
        ]
        assert [p.id for p in active_projects_in_order(projects)] == ['live']


# ==============================================================================
# PRIORITY CHAIN
# ==============================================================================

class TestPriorityChain:
    """Tests for schedule_priority_chain."""

    def test_three_projects_back_to_back(self, calendar):
        """Three 4-day projects run one after another, each starting the day after the previous ends."""
        results = schedule_priority_chain(
            make_input(make_project('p1', 1), make_project('p2', 2), make_project('p3', 3)),
            calendar,
            MONDAY,
        )
        p1, p2, p3 = results['p1'], results['p2'], results['p3']

        assert p1.start_date == MONDAY
        assert p1.end_date == date(2025, 3, 7)
        assert p2.start_date == next_working_day(calendar, p1.end_date) == date(2025, 3, 10)
        assert p3.start_date == next_working_day(calendar, p2.end_date) == date(2025, 3, 17)
        assert p3.end_date == date(2025, 3, 21)
        for result in (p1, p2, p3):
            assert signed_workday_diff(calendar, result.start_date, result.end_date) == 4

    def test_blocking_project_name(self, calendar):
        results = schedule_priority_chain(
            make_input(make_project('p1', 1), make_project('p2', 2), make_project('p3', 3)),
            calendar,
            MONDAY,
        )
        assert results['p1'].blocking_project_name is None
        assert results['p2'].blocking_project_name == 'P1'
        assert results['p3'].blocking_project_name == 'P2'

    def test_results_in_chain_order_without_inactive(self, calendar):
        results = schedule_priority_chain(
            make_input(
                make_project('p3', 3),
                make_project('old', 0, status='done'),
                make_project('p1', 1),
            ),
            calendar,
            MONDAY,
        )
        assert list(results) == ['p1', 'p3']
        assert results['p1'].start_date == MONDAY

    def test_early_explicit_start_does_not_rewind_chain(self, calendar):
        results = schedule_priority_chain(
            make_input(
                make_project('p1', 1),
                make_project('p2', 2, effort=2, explicit_start=date(2025, 2, 3)),
                make_project('p3', 3),
            ),
            calendar,
            MONDAY,
        )
        assert results['p2'].start_date == date(2025, 2, 3)
        assert results['p2'].end_date == date(2025, 2, 5)
        assert results['p2'].blocking_project_name is None
        assert results['p3'].start_date == date(2025, 3, 11)
        assert results['p3'].start_date > results['p1'].end_date
        assert results['p3'].blocking_project_name == 'P2'

    def test_late_explicit_start_moves_chain(self, calendar):
        results = schedule_priority_chain(
            make_input(
                make_project('p1', 1),
                make_project('p2', 2, effort=2, explicit_start=date(2025, 4, 1)),
                make_project('p3', 3),
            ),
            calendar,
            MONDAY,
        )
        assert results['p2'].end_date == date(2025, 4, 3)
        assert results['p3'].start_date == date(2025, 4, 4)

    def test_later_projects_never_start_before_earlier_end(self, calendar):
        projects = [make_project(f"p{index}", index, effort=index + 1) for index in range(1, 7)]
        results = list(schedule_priority_chain(make_input(*projects), calendar, MONDAY).values())
        for earlier, later in zip(results, results[1:]):
            assert later.start_date > earlier.end_date

    def test_weekend_reference_date(self, calendar):
        results = schedule_priority_chain(make_input(make_project('p1', 1, effort=1)), calendar, date(2025, 3, 8))
        assert results['p1'].start_date == date(2025, 3, 8)
        assert results['p1'].end_date == date(2025, 3, 10)

    def test_empty_input(self, calendar):
        assert list(schedule_priority_chain(make_input(), calendar, MONDAY)) == []


# ==============================================================================
# DELIVERY AND SLIP
# ==============================================================================

class TestDelivery:
    """Tests for delivery diff and slip summary."""

    def test_diff_sign(self, calendar):
        calculated = date(2025, 3, 7)
        assert delivery_diff(calendar, calculated, date(2025, 3, 14), MONDAY) == 5
        assert delivery_diff(calendar, calculated, date(2025, 3, 5), MONDAY) == -2
        assert delivery_diff(calendar, calculated, calculated, MONDAY) == 0

    def test_diff_without_requested_date_counts_from_today(self, calendar):
        assert delivery_diff(calendar, date(2025, 3, 7), None, MONDAY) == 4

    def test_priority_deliveries(self, calendar):
        deliveries = calculate_priority_deliveries(
            make_input(
                make_project('p1', 1, requested=date(2025, 3, 14)),
                make_project('p2', 2, requested=date(2025, 3, 12)),
                make_project('p3', 3, requested=date(2025, 3, 21)),
            ),
            calendar,
            MONDAY,
        )
        assert deliveries['p1'].diff_workdays == 5
        assert deliveries['p2'].diff_workdays == -2
        assert deliveries['p2'].is_slipping is True
        assert deliveries['p3'].diff_workdays == 0
        assert deliveries['p3'].calculated_delivery_date == date(2025, 3, 21)

    def test_single_project_ignores_chain(self, calendar):
        scheduling_input = make_input(make_project('p1', 1), make_project('p2', 2, requested=date(2025, 3, 14)))
        delivery = calculate_delivery_info(scheduling_input.project('p2'), scheduling_input, calendar, MONDAY)
        assert delivery.schedule.start_date == MONDAY
        assert delivery.calculated_delivery_date == date(2025, 3, 7)
        assert delivery.diff_workdays == 5
        assert delivery.schedule.blocking_project_name is None

    def test_single_project_explicit_start(self, calendar):
        scheduling_input = make_input(make_project('p1', 1, explicit_start=date(2025, 3, 10)))
        delivery = calculate_delivery_info(scheduling_input.project('p1'), scheduling_input, calendar, MONDAY)
        assert delivery.schedule.start_date == date(2025, 3, 10)
        assert delivery.calculated_delivery_date == date(2025, 3, 14)
        assert delivery.diff_workdays == 9

    def test_delivery_to_dict(self, calendar):
        scheduling_input = make_input(make_project('p1', 1, requested=date(2025, 3, 14)))
        payload = calculate_priority_deliveries(scheduling_input, calendar, MONDAY)['p1'].to_dict()
        assert payload['project_id'] == 'p1'
        assert payload['start_date'] == '2025-03-03'
        assert payload['calculated_delivery_date'] == '2025-03-07'
        assert payload['requested_delivery_date'] == '2025-03-14'
        assert payload['diff_workdays'] == 5
        assert payload['warnings'] == []


class TestSlipSummary:
    """Tests for summarize_slip."""

    @staticmethod
    def delivery(diff):
        schedule = ScheduleResult('p', 'P', MONDAY, MONDAY)
        return DeliveryInfo(schedule=schedule, requested_delivery_date=None, diff_workdays=diff)

    def test_counts_and_average(self):
        summary = summarize_slip([self.delivery(5), self.delivery(-2), self.delivery(0)])
        assert summary == {
            'average_slip': 1,
            'total_projects': 3,
            'delayed_projects': 1,
            'on_time_projects': 1,
            'ahead_projects': 1,
        }

    def test_average_is_rounded(self):
        assert summarize_slip([self.delivery(-3), self.delivery(-4), self.delivery(-4)])['average_slip'] == -4

    def test_empty(self):
        assert summarize_slip([])['total_projects'] == 0
        assert summarize_slip([])['average_slip'] == 0
