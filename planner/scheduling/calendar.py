"""
Work calendar: decides whether a calendar date is a working day.

Weekends are never working days. When holidays are enabled, public holidays
of the configured country/subdivision (from the `holidays` package) are not
working days either.
"""
from datetime import date
from functools import lru_cache
from typing import FrozenSet, Optional

import holidays

from planner.logging_config import get_logger
from planner.scheduling.errors import InvalidInput
from planner.scheduling.models import WorkCalendarConfig

logger = get_logger(__name__)


@lru_cache(maxsize=256)
def holiday_dates(country_code: str, subdivision_code: Optional[str], year: int) -> FrozenSet[date]:
    """
    Return the (cached) public holidays of one year for a country/subdivision.

    The holidays table is built for that single year and frozen, so cached
    values are never modified after they are handed out.

    Raises:
        InvalidInput: if the country or subdivision is not supported
    """
    country = country_code.strip().upper()
    subdivision = subdivision_code.strip() if subdivision_code else None
    try:
        table = holidays.country_holidays(country, subdiv=subdivision or None, years=year)
    except NotImplementedError as exc:
        raise InvalidInput(
            f"Unsupported holiday region {country}{':' + subdivision if subdivision else ''}",
            field="calendar",
        ) from exc
    logger.debug("Loaded holiday calendar", country=country, subdivision=subdivision, year=year)
    return frozenset(table.keys())


class WorkCalendar:
    """Working-day oracle bound to one immutable WorkCalendarConfig."""

    def __init__(self, config: Optional[WorkCalendarConfig] = None):
        self._config = config or WorkCalendarConfig()
        if self._config.include_holidays:
            # Rejects an unsupported region before any scheduling starts
            holiday_dates(self._config.country_code, self._config.subdivision_code, date.today().year)

    @classmethod
    def default(cls) -> "WorkCalendar":
        """Weekends-only calendar."""
        return cls(WorkCalendarConfig())

    @property
    def config(self) -> WorkCalendarConfig:
        return self._config

    def is_holiday(self, day: date) -> bool:
        if not self._config.include_holidays:
            return False
        return day in holiday_dates(self._config.country_code, self._config.subdivision_code, day.year)

    def is_working_day(self, day: date) -> bool:
        if day.weekday() >= 5:  # Saturday, Sunday
            return False
        return not self.is_holiday(day)

    def __repr__(self) -> str:
        return f"WorkCalendar({self._config!r})"
