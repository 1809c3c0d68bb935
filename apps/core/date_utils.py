"""Calendar helpers for schedules and expiry windows."""

import calendar
from datetime import date, timedelta


# Day interval for sub-monthly installment frequencies
PERIOD_DAYS = {
    2: 14,  # bi-weekly
    4: 7,   # weekly
}


def add_months(start: date, months: int) -> date:
    """
    Shift a date by whole months, clamping to the last day of the target month.

    Example:
        add_months(date(2024, 1, 31), 1) -> date(2024, 2, 29)
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def add_periods(start: date, *, periods_per_month: int, count: int) -> date:
    """
    Advance `count` installment periods from `start`.

    Monthly periods follow calendar months. Bi-weekly and weekly
    periods are counted in days.

    Raises:
        ValueError: If periods_per_month is not 1, 2 or 4
    """
    if periods_per_month == 1:
        return add_months(start, count)
    try:
        interval_days = PERIOD_DAYS[periods_per_month]
    except KeyError:
        raise ValueError(f"Unsupported installment frequency: {periods_per_month} per month")
    return start + timedelta(days=interval_days * count)
