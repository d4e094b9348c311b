"""
Team availability overview: what each person can still take on, per day.
"""
import calendar as month_calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import List, Tuple

from planner.scheduling.calendar import WorkCalendar
from planner.scheduling.errors import InvalidInput
from planner.scheduling.models import SchedulingInput


class AvailabilityStatus(str, Enum):
    NON_WORKING = 'non_working'
    HOLIDAY = 'holiday'
    VACATION = 'vacation'
    AVAILABLE = 'available'
    PARTIALLY_AVAILABLE = 'partially_available'
    FULLY_ALLOCATED = 'fully_allocated'
    OVER_ALLOCATED = 'over_allocated'


@dataclass
class AvailabilityCell:
    person_id: str
    day: date
    status: AvailabilityStatus
    available_fte: float

    def to_dict(self) -> dict:
        return {
            "person_id": self.person_id,
            "date": self.day.isoformat(),
            "status": self.status.value,
            "available_fte": round(self.available_fte, 3),
        }


def month_grid(anchor: date) -> Tuple[date, date]:
    """Monday..Sunday range covering the whole month of `anchor`."""
    first = anchor.replace(day=1)
    last = anchor.replace(day=month_calendar.monthrange(anchor.year, anchor.month)[1])
    return first - timedelta(days=first.weekday()), last + timedelta(days=6 - last.weekday())


def classify_available_fte(available_fte: float) -> AvailabilityStatus:
    if available_fte >= 1:
        return AvailabilityStatus.AVAILABLE
    if available_fte > 0:
        return AvailabilityStatus.PARTIALLY_AVAILABLE
    if available_fte == 0:
        return AvailabilityStatus.FULLY_ALLOCATED
    return AvailabilityStatus.OVER_ALLOCATED


def team_availability(
    calendar: WorkCalendar,
    scheduling_input: SchedulingInput,
    start: date,
    end: date,
) -> List[AvailabilityCell]:
    """
    Availability of every person for every day in [start, end].

    Weekends and holidays are reported before vacations. On other days the
    available FTE is the person's FTE minus their allocations over all projects.
    """
    if start > end:
        raise InvalidInput("Availability range start is after its end", field="from")

    allocated = {
        person_id: sum(assignment.allocation_fte for assignment in assignments)
        for person_id, assignments in scheduling_input.assignments_by_person().items()
    }

    cells = []
    for person in scheduling_input.people:
        free = round(person.fte - allocated.get(person.id, 0.0), 9)
        day = start
        while day <= end:
            if calendar.is_holiday(day):
                cells.append(AvailabilityCell(person.id, day, AvailabilityStatus.HOLIDAY, 0.0))
            elif not calendar.is_working_day(day):
                cells.append(AvailabilityCell(person.id, day, AvailabilityStatus.NON_WORKING, 0.0))
            elif person.is_on_vacation(day):
                cells.append(AvailabilityCell(person.id, day, AvailabilityStatus.VACATION, 0.0))
            else:
                cells.append(AvailabilityCell(person.id, day, classify_available_fte(free), free))
            day += timedelta(days=1)
    return cells
