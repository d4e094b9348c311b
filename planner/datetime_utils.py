"""
Date utility functions shared by the payload parser, routes and preview script.
"""
from datetime import date, datetime
from typing import Optional, Union


def parse_iso_date(value: Union[str, date, None]) -> Optional[date]:
    """
    Parse an ISO calendar date (YYYY-MM-DD).

    Accepts date and datetime objects as-is (datetimes are truncated to their date),
    full ISO datetime strings, and None/empty strings (returned as None).

    Raises:
        ValueError: if the string is not a valid ISO date
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if 'T' in text or ' ' in text:
        return parse_iso_datetime(text).date()
    return date.fromisoformat(text)


def parse_iso_datetime(value: Union[str, datetime, date, None]) -> Optional[datetime]:
    """
    Parse an ISO datetime string, accepting a trailing 'Z' for UTC.

    Plain dates become midnight datetimes. Timezone info is dropped so that
    values from different sources order consistently.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    parsed = datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
    return parsed.replace(tzinfo=None)


def format_date(d: Optional[date]) -> Optional[str]:
    """Format a date as YYYY-MM-DD, or None if None."""
    if d is None:
        return None
    return d.isoformat()
