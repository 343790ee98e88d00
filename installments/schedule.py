"""
Billing schedule computation.

Pure functions: given lease terms, return the billing periods and their due
dates. Persistence lives in installments.services.
"""
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from core.constants import BillingFrequency
from core.exceptions import ValidationError
from core.periods import add_months, clamp_day


@dataclass(frozen=True)
class BillingPeriod:
    period_start: date
    due_date: date

    @property
    def period_year(self):
        return self.period_start.year

    @property
    def period_month(self):
        return self.period_start.month


def due_date_for(period_start: date, due_day_of_month: int) -> date:
    """
    Due day inside the period start's month, clamped to the month's length.
    A due date before the period start rolls to the following month.
    """
    due = clamp_day(period_start.year, period_start.month, due_day_of_month)
    if due < period_start:
        due = add_months(due, 1, day=due_day_of_month)
    return due


def schedule_end(start_date: date, end_date: Optional[date], today: date, horizon_months: int) -> date:
    """Last date a period may start on; open-ended leases look horizon_months past today"""
    if end_date:
        return end_date
    return add_months(max(start_date, today), horizon_months)


def compute_billing_periods(start_date: date, until: date, billing_frequency: str,
                            due_day_of_month: int) -> List[BillingPeriod]:
    """
    Periods start at start_date + k * step calendar months (day clamped) and
    are produced while the period start is on or before ``until``.
    """
    step = BillingFrequency.MONTHS.get(billing_frequency)
    if step is None:
        raise ValidationError(
            message=f"Unsupported billing frequency: {billing_frequency}",
            code="UNSUPPORTED_FREQUENCY",
            details={'billing_frequency': billing_frequency}
        )

    periods = []
    k = 0
    period_start = start_date
    while period_start <= until:
        periods.append(BillingPeriod(period_start, due_date_for(period_start, due_day_of_month)))
        k += 1
        period_start = add_months(start_date, k * step, day=start_date.day)
    return periods
