"""Return period date range utilities."""
from calendar import monthrange
from datetime import date
from typing import Tuple


def calculate_month_range(year: int, month: int) -> Tuple[date, date]:
    """Calculate the inclusive (first_day, last_day) of a filing month.

    Raises:
        ValueError: If year or month is missing or out of range
    """
    if not year:
        raise ValueError("year is required")
    if not month:
        raise ValueError("month is required")
    try:
        last_day = monthrange(year, month)[1]
        return (date(year, month, 1), date(year, month, last_day))
    except ValueError as e:
        raise ValueError(f"Invalid month: {year}-{month}") from e
