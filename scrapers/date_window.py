"""
Reporting window for the weekly Atlas export.

The export always covers the most recently completed Monday–Sunday week.
Run on a Sunday, that Sunday closes the window:

    >>> previous_week(date(2024, 3, 13))
    DateWindow(start_date='2024-03-04', end_date='2024-03-10')
    >>> previous_week(date(2024, 3, 10))
    DateWindow(start_date='2024-03-04', end_date='2024-03-10')
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

STORAGE_PREFIX = "atlas_exports"


@dataclass(frozen=True)
class DateWindow:
    start_date: str  # YYYY-MM-DD, a Monday
    end_date: str    # YYYY-MM-DD, the Sunday six days later

    @property
    def filter_range(self) -> str:
        """Value typed into the portal's transaction date-range input."""
        return f"{self.start_date} 12:00 AM - {self.end_date} 11:59 PM"

    @property
    def storage_key(self) -> str:
        return f"{STORAGE_PREFIX}/{self.start_date}_to_{self.end_date}_transactions.csv"


def previous_week(today: Optional[Union[date, datetime]] = None) -> DateWindow:
    """Return the last full Monday–Sunday week on or before ``today``."""
    if today is None:
        today = date.today()
    if isinstance(today, datetime):
        today = today.date()

    # Python weekdays run Monday=0..Sunday=6; shift so Sunday=0
    days_since_sunday = (today.weekday() + 1) % 7
    end = today - timedelta(days=days_since_sunday)
    start = end - timedelta(days=6)
    return DateWindow(start_date=start.isoformat(), end_date=end.isoformat())
