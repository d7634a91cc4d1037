"""Visit date generation for recurring maintenance orders"""

from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

DAY_INTERVALS = {"weekly": 7, "bi_weekly": 14}
MONTH_INTERVALS = {"monthly": 1, "bi_monthly": 2, "quarterly": 3}


def sunday_based_weekday(day: date) -> int:
    """0=Sunday ... 6=Saturday"""
    return (day.weekday() + 1) % 7


def generate_recurring_dates(
    start: date, end: date, frequency: str, day_of_week: Optional[int] = None
) -> list[date]:
    """
    Visit dates from start through end (inclusive).

    The first visit lands on the requested weekday on or after start.
    Monthly steps are computed from that first date so short months
    do not pull later visits earlier.
    """
    first = start
    if day_of_week is not None and 0 <= day_of_week <= 6:
        first = start + timedelta(days=(day_of_week - sunday_based_weekday(start)) % 7)

    dates = []
    if frequency in MONTH_INTERVALS:
        months = MONTH_INTERVALS[frequency]
        step = 0
        current = first
        while current <= end:
            dates.append(current)
            step += 1
            current = first + relativedelta(months=months * step)
        return dates

    interval = timedelta(days=DAY_INTERVALS.get(frequency, 7))
    current = first
    while current <= end:
        dates.append(current)
        current += interval
    return dates
