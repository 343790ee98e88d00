"""Calendar arithmetic and billing period computation."""
from datetime import date

import pytest

from core.constants import BillingFrequency
from core.exceptions import ValidationError
from core.periods import add_months, clamp_day, last_day_of_month
from installments.schedule import compute_billing_periods, due_date_for, schedule_end


class TestCalendarArithmetic:

    def test_last_day_of_month_handles_leap_years(self):
        assert last_day_of_month(2024, 2) == 29
        assert last_day_of_month(2025, 2) == 28
        assert last_day_of_month(2025, 4) == 30

    def test_clamp_day(self):
        assert clamp_day(2025, 2, 31) == date(2025, 2, 28)
        assert clamp_day(2025, 3, 31) == date(2025, 3, 31)

    def test_add_months_clamps_instead_of_overflowing(self):
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)

    def test_add_months_with_explicit_day(self):
        assert add_months(date(2025, 2, 28), 1, day=31) == date(2025, 3, 31)


class TestDueDates:

    def test_due_day_inside_period_month(self):
        assert due_date_for(date(2025, 1, 1), 5) == date(2025, 1, 5)

    def test_due_day_clamped_to_month_end(self):
        assert due_date_for(date(2025, 2, 1), 31) == date(2025, 2, 28)

    def test_due_day_before_period_start_rolls_to_next_month(self):
        assert due_date_for(date(2025, 1, 15), 5) == date(2025, 2, 5)

    def test_rolled_due_date_is_clamped_again(self):
        assert due_date_for(date(2025, 1, 31), 30) == date(2025, 2, 28)


class TestBillingPeriods:

    def test_monthly_calendar_year_gives_twelve_periods(self):
        periods = compute_billing_periods(date(2025, 1, 1), date(2025, 12, 31), BillingFrequency.MONTHLY, 5)

        assert len(periods) == 12
        assert [p.period_month for p in periods] == list(range(1, 13))
        assert periods[0].due_date == date(2025, 1, 5)
        assert periods[-1].due_date == date(2025, 12, 5)

    def test_quarterly_and_annual_steps(self):
        quarterly = compute_billing_periods(date(2025, 1, 1), date(2025, 12, 31), BillingFrequency.QUARTERLY, 1)
        annual = compute_billing_periods(date(2025, 1, 1), date(2027, 12, 31), BillingFrequency.ANNUAL, 1)

        assert [p.period_month for p in quarterly] == [1, 4, 7, 10]
        assert [p.period_year for p in annual] == [2025, 2026, 2027]

    def test_period_starts_keep_the_start_day(self):
        periods = compute_billing_periods(date(2025, 1, 31), date(2025, 4, 30), BillingFrequency.MONTHLY, 31)

        assert [p.period_start for p in periods] == [
            date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31), date(2025, 4, 30),
        ]

    def test_unsupported_frequency(self):
        with pytest.raises(ValidationError):
            compute_billing_periods(date(2025, 1, 1), date(2025, 12, 31), 'WEEKLY', 5)

    def test_schedule_end_for_open_ended_lease_uses_horizon(self):
        assert schedule_end(date(2025, 1, 1), None, date(2025, 3, 10), 3) == date(2025, 6, 10)
        assert schedule_end(date(2025, 1, 1), date(2025, 6, 30), date(2025, 3, 10), 3) == date(2025, 6, 30)
