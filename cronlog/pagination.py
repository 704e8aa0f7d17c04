"""
Pagination and date helpers for the read-facing API.

Consumes ResultStore output; performs no storage access itself.

Date filters arrive as calendar days (YYYY-MM-DD). They are widened to
the day's boundaries here, before they reach the store, which treats
bounds as exact timestamps.
"""

from datetime import date, datetime, time, timezone
from typing import Optional, Tuple

DATE_FORMAT = "%Y-%m-%d"

# Day boundaries used when widening a date filter
DAY_START = time(0, 0, 1)
DAY_END = time(23, 23, 59)


def pagination_info(total_count: int, page_size: int, skip: int) -> Tuple[int, int]:
    """
    Derive page count and current page index.

    The current page lags the raw index by one whenever the raw index is
    positive. Clients pass the skip of the *next* page, which the lag
    turns back into the index of the page being shown.

    Args:
        total_count: Size of the filtered result set
        page_size: Items per page
        skip: Skip value the client will request next

    Returns:
        (total_pages, current_page); (0, 0) when page_size is 0
    """
    if page_size <= 0:
        return 0, 0

    total_pages = -(-total_count // page_size)
    current_page = skip // page_size
    if current_page > 0:
        current_page -= 1
    return total_pages, current_page


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse YYYY-MM-DD; empty or invalid input yields None."""
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None


def start_of_day(day: Optional[date]) -> Optional[datetime]:
    if day is None:
        return None
    return datetime.combine(day, DAY_START, tzinfo=timezone.utc)


def end_of_day(day: Optional[date]) -> Optional[datetime]:
    if day is None:
        return None
    return datetime.combine(day, DAY_END, tzinfo=timezone.utc)


def format_date(day: Optional[date]) -> str:
    """Format a date as YYYY-MM-DD, or "" for None."""
    if day is None:
        return ""
    return day.strftime(DATE_FORMAT)
