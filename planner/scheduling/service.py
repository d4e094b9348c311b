"""
Scheduling service: runs scheduling passes for JSON requests.

Parses and validates the request, binds the work calendar for the pass, runs
the engine and serializes the results. Engine errors propagate to the caller
(routes turn them into HTTP responses).
"""
from datetime import date
from typing import Any, Dict, Optional

from planner.datetime_utils import parse_iso_date
from planner.logging_config import SchedulingContext, get_logger
from planner.scheduling.availability import month_grid, team_availability
from planner.scheduling.calendar import WorkCalendar
from planner.scheduling.delivery import (
    calculate_delivery_info,
    calculate_priority_deliveries,
    summarize_slip,
)
from planner.scheduling.errors import InvalidInput
from planner.scheduling.models import WorkCalendarConfig
from planner.scheduling.payloads import (
    SchedulingRequest,
    build_scheduling_input,
    parse_calendar_config,
    parse_reference_date,
)
from planner.scheduling.workdays import working_days_between

logger = get_logger(__name__)


def calendar_config_from_settings(settings: Dict[str, Any]) -> WorkCalendarConfig:
    """Default work calendar from application config (WORK_CALENDAR_* keys)."""
    return WorkCalendarConfig(
        include_holidays=bool(settings.get('WORK_CALENDAR_INCLUDE_HOLIDAYS', False)),
        country_code=settings.get('WORK_CALENDAR_COUNTRY') or WorkCalendarConfig().country_code,
        subdivision_code=settings.get('WORK_CALENDAR_SUBDIVISION') or None,
    )


class SchedulingService:
    """Entry points used by the HTTP routes and the preview script."""

    @staticmethod
    def bind_calendar(
        request_data: SchedulingRequest,
        default_config: Optional[WorkCalendarConfig] = None,
    ) -> WorkCalendar:
        """Build the calendar for one pass: request settings over application defaults."""
        return WorkCalendar(parse_calendar_config(request_data.get('calendar'), default_config))

    @staticmethod
    def _today(request_data: SchedulingRequest, reference_date: Optional[date]) -> date:
        return reference_date or parse_reference_date(request_data) or date.today()

    @staticmethod
    def run_priority_schedule(
        request_data: SchedulingRequest,
        default_config: Optional[WorkCalendarConfig] = None,
        reference_date: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Schedule every active project in priority order.

        Returns:
            dict: {"reference_date", "calendar", "projects": [...], "summary": {...}}
        """
        scheduling_input = build_scheduling_input(request_data)
        calendar = SchedulingService.bind_calendar(request_data, default_config)
        today = SchedulingService._today(request_data, reference_date)

        with SchedulingContext("priority_chain", projects=len(scheduling_input.projects)):
            deliveries = calculate_priority_deliveries(scheduling_input, calendar, today)

        flagged = [pid for pid, delivery in deliveries.items() if delivery.schedule.warnings]
        if flagged:
            logger.warning("Schedule contains cyclic dependency fallbacks", project_ids=flagged)

        return {
            "reference_date": today.isoformat(),
            "calendar": {
                "include_holidays": calendar.config.include_holidays,
                "country_code": calendar.config.country_code,
                "subdivision_code": calendar.config.subdivision_code,
            },
            "projects": [delivery.to_dict() for delivery in deliveries.values()],
            "summary": summarize_slip(deliveries.values()),
        }

    @staticmethod
    def run_project_delivery(
        project_id: str,
        request_data: SchedulingRequest,
        default_config: Optional[WorkCalendarConfig] = None,
        reference_date: Optional[date] = None,
    ) -> Dict[str, Any]:
        """Delivery info for one project scheduled on its own."""
        scheduling_input = build_scheduling_input(request_data)
        try:
            project = scheduling_input.project(project_id)
        except KeyError:
            raise InvalidInput(f"Unknown project '{project_id}'", field="project_id") from None
        calendar = SchedulingService.bind_calendar(request_data, default_config)
        today = SchedulingService._today(request_data, reference_date)

        with SchedulingContext("single_project", project_id=project_id):
            delivery = calculate_delivery_info(project, scheduling_input, calendar, today)
        return delivery.to_dict()

    @staticmethod
    def run_availability(
        request_data: Dict[str, Any],
        default_config: Optional[WorkCalendarConfig] = None,
    ) -> Dict[str, Any]:
        """
        Team availability for a date range ("from"/"to") or a month ("YYYY-MM").
        """
        scheduling_input = build_scheduling_input(request_data)
        calendar = SchedulingService.bind_calendar(request_data, default_config)

        if request_data.get('month'):
            try:
                anchor = parse_iso_date(f"{request_data['month']}-01")
            except ValueError:
                raise InvalidInput("month must be in YYYY-MM format", field="month") from None
            start, end = month_grid(anchor)
        else:
            start, end = SchedulingService.parse_range(request_data.get('from'), request_data.get('to'))

        cells = team_availability(calendar, scheduling_input, start, end)
        return {
            "from": start.isoformat(),
            "to": end.isoformat(),
            "cells": [cell.to_dict() for cell in cells],
        }

    @staticmethod
    def list_working_days(
        start_value: Optional[str],
        end_value: Optional[str],
        config: Optional[WorkCalendarConfig] = None,
    ) -> Dict[str, Any]:
        """Working days in [from, to] under the given calendar."""
        start, end = SchedulingService.parse_range(start_value, end_value)
        calendar = WorkCalendar(config)
        days = working_days_between(calendar, start, end)
        return {
            "from": start.isoformat(),
            "to": end.isoformat(),
            "count": len(days),
            "working_days": [day.isoformat() for day in days],
        }

    @staticmethod
    def parse_range(start_value, end_value):
        """Parse a required from/to pair of ISO dates."""
        try:
            start = parse_iso_date(start_value)
            end = parse_iso_date(end_value)
        except ValueError:
            raise InvalidInput("from and to must be ISO dates (YYYY-MM-DD)", field="from") from None
        if start is None or end is None:
            raise InvalidInput("from and to are required", field="from")
        if start > end:
            raise InvalidInput("from must not be after to", field="from")
        return start, end
