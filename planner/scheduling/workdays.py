"""
Working-day arithmetic on top of a WorkCalendar.
"""
from datetime import date, timedelta
from typing import List

from planner.scheduling.calendar import WorkCalendar
from planner.scheduling.errors import InvalidInput

ONE_DAY = timedelta(days=1)


def add_working_days(calendar: WorkCalendar, start_date: date, working_days: int) -> date:
    """
    Calculate the date that is a specified number of working days after the start date.

    The start date itself is never counted. Adding zero returns the start date
    unchanged, even when it is not a working day.

    Args:
        calendar: Work calendar deciding which days count
        start_date: The start date
        working_days: Number of working days to add (>= 0)

    Returns:
        date: The calculated working day
    """
    if working_days < 0:
        raise InvalidInput(f"Cannot add a negative number of working days ({working_days})")

    current_date = start_date
    counted = 0
    while counted < working_days:
        try:
            current_date += ONE_DAY
        except OverflowError:
            raise InvalidInput(
                f"{working_days} working days after {start_date.isoformat()} is past the last representable date"
            ) from None
        if calendar.is_working_day(current_date):
            counted += 1
    return current_date


def next_working_day(calendar: WorkCalendar, day: date) -> date:
    """First working day strictly after `day`."""
    return add_working_days(calendar, day, 1)


def signed_workday_diff(calendar: WorkCalendar, a: date, b: date) -> int:
    """
    Signed number of working days from `a` to `b`.

    Counts working days after the earlier date up to and including the later
    one, so "deadline minus today" does not count today twice. Positive when
    `b` is after `a`.
    """
    if a == b:
        return 0
    earlier, later = (a, b) if a < b else (b, a)
    count = sum(
        1 for offset in range(1, (later - earlier).days + 1)
        if calendar.is_working_day(earlier + timedelta(days=offset))
    )
    return count if b > a else -count


def working_days_between(calendar: WorkCalendar, start: date, end: date) -> List[date]:
    """All working days in [start, end], ascending. Empty when start > end."""
    if start > end:
        return []
    candidates = (start + timedelta(days=offset) for offset in range((end - start).days + 1))
    return [day for day in candidates if calendar.is_working_day(day)]
