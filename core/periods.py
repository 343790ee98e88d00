"""
Calendar-month arithmetic used by billing schedules.
"""
import calendar
from datetime import date


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, clamping the day to the month's last valid day"""
    return date(year, month, min(day, last_day_of_month(year, month)))


def add_months(value: date, months: int, day: int = None) -> date:
    """
    Shift a date by whole calendar months.

    The target day defaults to the source day and is clamped, so
    Jan 31 + 1 month is Feb 28/29 rather than an overflow into March.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    return clamp_day(year, month, day or value.day)
