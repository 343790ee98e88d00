"""
Late penalty tests.

Covers:
- Pure computation: grace boundary, modes, cap, threshold, paid-toward-penalty floor
- Batch runs: idempotence, skipped installments, run result
- Single recalculation and manual overrides
"""
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from core.constants import InstallmentStatus, PenaltyMode
from core.exceptions import InvalidStateError, ValidationError
from installments.models import Installment
from installments.services import InstallmentService
from payments.allocation import AllocationService
from penalties.calculator import compute_penalty
from penalties.models import PenaltyAssessment
from penalties.services import PenaltyService

DUE = date(2025, 1, 5)


def make_installment(rent='100000', service='0', paid='0'):
    return SimpleNamespace(
        due_date=DUE,
        amount_rent=Decimal(rent),
        amount_service=Decimal(service),
        amount_other_fees=Decimal('0'),
        amount_paid=Decimal(paid),
    )


def make_terms(mode=PenaltyMode.PERCENT_OF_RENT, rate='0.10', fixed='0', grace=5, cap=None, threshold=None):
    return SimpleNamespace(
        penalty_mode=mode,
        penalty_rate=Decimal(rate),
        penalty_fixed_amount=Decimal(fixed),
        penalty_grace_days=grace,
        penalty_cap=Decimal(cap) if cap is not None else None,
        min_balance_threshold=Decimal(threshold) if threshold is not None else None,
    )


class TestComputePenalty:

    @pytest.mark.parametrize('days', [0, 1, 5])
    def test_no_penalty_within_grace(self, days):
        result = compute_penalty(make_installment(), make_terms(), DUE + timedelta(days=days))

        assert result.in_grace
        assert result.amount is None

    def test_penalty_starts_the_day_after_grace(self):
        result = compute_penalty(make_installment(), make_terms(), DUE + timedelta(days=6))

        assert result.days_late == 6
        assert result.amount == Decimal('10000.00')

    def test_cap_applies(self):
        result = compute_penalty(make_installment(), make_terms(cap='5000'), date(2025, 2, 1))

        assert result.amount == Decimal('5000.00')

    def test_fixed_amount(self):
        terms = make_terms(mode=PenaltyMode.FIXED_AMOUNT, fixed='2500', grace=0)

        assert compute_penalty(make_installment(), terms, date(2025, 1, 6)).amount == Decimal('2500.00')

    def test_percent_of_balance_ignores_paid_part(self):
        terms = make_terms(mode=PenaltyMode.PERCENT_OF_BALANCE, rate='0.05', grace=0)
        item = make_installment(rent='100000', service='20000', paid='20000')

        assert compute_penalty(item, terms, date(2025, 2, 1)).amount == Decimal('5000.00')

    def test_balance_under_threshold_carries_no_penalty(self):
        terms = make_terms(mode=PenaltyMode.PERCENT_OF_BALANCE, rate='0.05', grace=0, threshold='150000')

        assert compute_penalty(make_installment(), terms, date(2025, 2, 1)).amount == Decimal('0.00')

    def test_money_paid_toward_penalty_is_kept(self):
        terms = make_terms(mode=PenaltyMode.PERCENT_OF_BALANCE, rate='0.05', grace=0)
        item = make_installment(rent='100000', paid='103000')

        assert compute_penalty(item, terms, date(2025, 2, 1)).amount == Decimal('3000.00')

    def test_result_depends_only_on_inputs(self):
        item, terms, today = make_installment(), make_terms(), date(2025, 3, 1)

        assert compute_penalty(item, terms, today) == compute_penalty(item, terms, today)


@pytest.mark.django_db
class TestPenaltyRuns:

    @pytest.fixture
    def lease(self, account, make_lease):
        lease = make_lease(
            penalty_mode=PenaltyMode.PERCENT_OF_RENT,
            penalty_rate=Decimal('0.10'),
            penalty_grace_days=5,
            end_date=date(2025, 3, 31),
        )
        InstallmentService().generate_installments(account.id, lease.id)
        return lease

    @pytest.fixture
    def january(self, lease):
        return Installment.objects.get(lease=lease, period_month=1)

    def test_grace_period_leaves_penalty_untouched(self, account, lease, january):
        result = PenaltyService().calculate_penalties(today=date(2025, 1, 10), account_id=account.id)

        january.refresh_from_db()
        assert (result.processed, result.updated, result.skipped) == (1, 0, 1)
        assert january.penalty_amount == Decimal('0')

    def test_penalty_applied_after_grace(self, account, lease, january):
        result = PenaltyService().calculate_penalties(today=date(2025, 1, 11), account_id=account.id)

        january.refresh_from_db()
        assert result.updated == 1
        assert january.penalty_amount == Decimal('10000.00')
        assert january.status == InstallmentStatus.OVERDUE
        assert PenaltyAssessment.objects.get(installment=january).days_late == 6

    def test_rerun_on_the_same_day_does_not_compound(self, account, lease, january):
        service = PenaltyService()
        service.calculate_penalties(today=date(2025, 1, 20), account_id=account.id)

        second = service.calculate_penalties(today=date(2025, 1, 20), account_id=account.id)

        january.refresh_from_db()
        assert second.processed == 1
        assert second.updated == 0
        assert january.penalty_amount == Decimal('10000.00')

    def test_paid_installments_are_not_candidates(self, account, lease, january, make_payment):
        payment = make_payment('100000', lease=lease)
        AllocationService().allocate_payment(account.id, payment.id, today=date(2025, 1, 2))

        result = PenaltyService().calculate_penalties(today=date(2025, 1, 20), account_id=account.id)

        assert result.processed == 0

    def test_other_accounts_are_left_alone(self, account, other_account, lease, january):
        result = PenaltyService().calculate_penalties(today=date(2025, 1, 20), account_id=other_account.id)

        assert result.processed == 0

    def test_single_calculation(self, account, lease, january):
        installment = PenaltyService().calculate_penalty(account.id, january.id, today=date(2025, 1, 20))

        assert installment.penalty_amount == Decimal('10000.00')

    def test_single_calculation_within_grace(self, account, lease, january):
        with pytest.raises(InvalidStateError) as exc_info:
            PenaltyService().calculate_penalty(account.id, january.id, today=date(2025, 1, 7))

        assert exc_info.value.code == 'GRACE_PERIOD_ACTIVE'


@pytest.mark.django_db
class TestPenaltyOverride:

    @pytest.fixture
    def january(self, account, make_lease):
        lease = make_lease(penalty_mode=PenaltyMode.FIXED_AMOUNT, penalty_fixed_amount=Decimal('3000'))
        InstallmentService().generate_installments(account.id, lease.id)
        return Installment.objects.get(lease=lease, period_month=1)

    def test_override_is_frozen_against_runs(self, account, january):
        service = PenaltyService()
        service.override_penalty(account.id, january.id, '500', 'Negotiated with renter', today=date(2025, 1, 20))

        result = service.calculate_penalties(today=date(2025, 1, 25), account_id=account.id)

        january.refresh_from_db()
        assert result.skipped == 1
        assert january.penalty_amount == Decimal('500.00')
        with pytest.raises(InvalidStateError):
            service.calculate_penalty(account.id, january.id, today=date(2025, 1, 25))

    def test_cleared_override_is_recomputed(self, account, january):
        service = PenaltyService()
        service.override_penalty(account.id, january.id, '0', 'Waived', today=date(2025, 1, 20))
        service.clear_override(account.id, january.id)

        service.calculate_penalties(today=date(2025, 1, 25), account_id=account.id)

        january.refresh_from_db()
        assert january.penalty_amount == Decimal('3000.00')

    def test_override_requires_a_reason(self, account, january):
        with pytest.raises(ValidationError):
            PenaltyService().override_penalty(account.id, january.id, '500', '  ')

    def test_clear_without_override(self, account, january):
        with pytest.raises(InvalidStateError):
            PenaltyService().clear_override(account.id, january.id)

    def test_paid_installment_cannot_be_overridden(self, account, january, make_payment):
        payment = make_payment('100000', lease=january.lease)
        AllocationService().allocate_payment(account.id, payment.id, today=date(2025, 1, 2))

        with pytest.raises(InvalidStateError) as exc:
            PenaltyService().override_penalty(account.id, january.id, '5000', 'late', today=date(2025, 1, 20))

        january.refresh_from_db()
        assert exc.value.code == 'INSTALLMENT_PAID'
        assert january.status == InstallmentStatus.PAID
        assert january.penalty_amount == Decimal('0.00')
        assert not PenaltyAssessment.objects.filter(installment=january).exists()

    def test_override_on_partial_installment_keeps_it_partial(self, account, january, make_payment):
        payment = make_payment('40000', lease=january.lease)
        AllocationService().allocate_payment(account.id, payment.id, today=date(2025, 1, 2))

        PenaltyService().override_penalty(account.id, january.id, '5000', 'late', today=date(2025, 1, 20))

        january.refresh_from_db()
        assert january.status == InstallmentStatus.PARTIAL
        assert january.remaining_due == Decimal('65000.00')

    def test_lowered_override_settles_a_covered_installment(self, account, january, make_payment):
        service = PenaltyService()
        service.override_penalty(account.id, january.id, '5000', 'late', today=date(2025, 1, 20))
        payment = make_payment('100000', lease=january.lease)
        AllocationService().allocate_payment(account.id, payment.id, today=date(2025, 1, 21))
        january.refresh_from_db()
        assert january.status == InstallmentStatus.PARTIAL

        service.override_penalty(account.id, january.id, '0', 'Waived', today=date(2025, 1, 22))

        january.refresh_from_db()
        assert january.status == InstallmentStatus.PAID
        assert january.paid_at is not None
