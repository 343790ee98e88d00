"""
Allocation engine tests.

Covers:
- Priority ordering (overdue first, most late first)
- Greedy planning with manual amounts
- End-to-end allocation over a lease schedule
- Conservation: allocations never exceed the payment or the installment
- All-or-nothing writes when a step fails
"""
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.db import DatabaseError

from core.constants import InstallmentStatus, PaymentStatus
from core.dto import AllocationRequestDTO
from core.exceptions import FatalError, InvalidStateError, NotFoundError, ValidationError
from installments.models import Installment
from installments.services import InstallmentService
from payments.allocation import AllocationService, plan_allocations, prioritize_installments
from payments.models import PaymentAllocation
from payments.services import PaymentLedgerService


def installment(id, due_date, total_due='100.00'):
    return SimpleNamespace(
        id=id,
        due_date=due_date,
        period_year=due_date.year,
        period_month=due_date.month,
        total_due=Decimal(total_due),
    )


class TestPrioritize:

    def test_overdue_come_first_most_late_first(self):
        today = date(2025, 4, 10)
        march = installment(3, date(2025, 3, 5))
        january = installment(1, date(2025, 1, 5))
        may = installment(5, date(2025, 5, 5))
        april = installment(4, date(2025, 4, 10))

        ordered = prioritize_installments([march, may, april, january], today)

        assert [i.id for i in ordered] == [1, 3, 4, 5]

    def test_ties_fall_back_to_id(self):
        today = date(2025, 1, 1)
        a = installment(9, date(2025, 2, 5))
        b = installment(2, date(2025, 2, 5))

        assert [i.id for i in prioritize_installments([a, b], today)] == [2, 9]


class TestPlanAllocations:

    def test_greedy_split_over_installments(self):
        items = [installment(1, date(2025, 1, 5)), installment(2, date(2025, 2, 5))]

        plan = plan_allocations(items, Decimal('150.00'), {}, {})

        assert [(i.id, amount) for i, amount in plan] == [(1, Decimal('100.00')), (2, Decimal('50.00'))]

    def test_already_allocated_amounts_are_deducted(self):
        items = [installment(1, date(2025, 1, 5)), installment(2, date(2025, 2, 5))]

        plan = plan_allocations(items, Decimal('150.00'), {1: Decimal('100.00')}, {})

        assert [(i.id, amount) for i, amount in plan] == [(2, Decimal('100.00'))]

    def test_manual_amount_is_clamped(self):
        items = [installment(1, date(2025, 1, 5)), installment(2, date(2025, 2, 5))]

        plan = plan_allocations(items, Decimal('150.00'), {}, {1: Decimal('30.00'), 2: Decimal('500.00')})

        assert [(i.id, amount) for i, amount in plan] == [(1, Decimal('30.00')), (2, Decimal('100.00'))]

    def test_nothing_left_gives_empty_plan(self):
        items = [installment(1, date(2025, 1, 5))]

        assert plan_allocations(items, Decimal('50.00'), {1: Decimal('100.00')}, {}) == []


@pytest.mark.django_db
class TestAllocatePayment:

    @pytest.fixture
    def lease(self, account, make_lease):
        lease = make_lease(service_charge_amount=Decimal('20000'))
        InstallmentService().generate_installments(account.id, lease.id)
        return lease

    @pytest.fixture
    def january(self, lease):
        return Installment.objects.get(lease=lease, period_year=2025, period_month=1)

    def test_partial_then_full_then_nothing_left(self, account, lease, january, make_payment):
        service = AllocationService()
        today = date(2025, 1, 20)

        first = make_payment('90000', lease=lease)
        result = service.allocate_payment(account.id, first.id, today=today)
        january.refresh_from_db()
        assert result.total_allocated == Decimal('90000.00')
        assert january.status == InstallmentStatus.PARTIAL
        assert january.amount_paid == Decimal('90000.00')

        second = make_payment('30000', lease=lease)
        service.allocate_payment(account.id, second.id, today=today)
        january.refresh_from_db()
        assert january.status == InstallmentStatus.PAID
        assert january.amount_paid == Decimal('120000.00')
        assert january.paid_at is not None

        third = make_payment('5000', lease=lease)
        with pytest.raises(InvalidStateError) as exc_info:
            service.allocate_payment(
                account.id, third.id, AllocationRequestDTO(installment_ids=[january.id]), today=today
            )
        assert exc_info.value.code == 'NO_ALLOCATION_POSSIBLE'

    def test_overdue_installments_are_paid_first(self, account, lease, make_payment):
        payment = make_payment('180000', lease=lease)

        result = AllocationService().allocate_payment(account.id, payment.id, today=date(2025, 2, 20))

        periods = sorted((a.installment.period_month, a.amount) for a in result.allocations)
        assert periods == [(1, Decimal('120000.00')), (2, Decimal('60000.00'))]
        assert result.unallocated_amount == Decimal('0.00')

    def test_surplus_stays_unallocated_on_the_payment(self, account, make_lease, make_payment):
        lease = make_lease(end_date=date(2025, 1, 31))
        InstallmentService().generate_installments(account.id, lease.id)
        payment = make_payment('150000', lease=lease)

        result = AllocationService().allocate_payment(account.id, payment.id, today=date(2025, 1, 2))

        assert result.total_allocated == Decimal('100000.00')
        assert result.unallocated_amount == Decimal('50000.00')
        with pytest.raises(NotFoundError) as exc_info:
            AllocationService().allocate_payment(account.id, payment.id, today=date(2025, 1, 2))
        assert exc_info.value.code == 'NO_INSTALLMENTS'

    def test_fully_allocated_payment_is_refused(self, account, lease, make_payment):
        payment = make_payment('1000', lease=lease)
        service = AllocationService()
        service.allocate_payment(account.id, payment.id)

        with pytest.raises(InvalidStateError) as exc_info:
            service.allocate_payment(account.id, payment.id)

        assert exc_info.value.code == 'PAYMENT_FULLY_ALLOCATED'

    def test_canceled_payment_cannot_be_allocated(self, account, lease, make_payment):
        payment = make_payment('1000', lease=lease)
        PaymentLedgerService().update_payment_status(account.id, payment.id, PaymentStatus.CANCELED)

        with pytest.raises(InvalidStateError) as exc_info:
            AllocationService().allocate_payment(account.id, payment.id)

        assert exc_info.value.code == 'PAYMENT_NOT_SETTLED'

    def test_lease_without_installments(self, account, make_lease, make_payment):
        payment = make_payment('1000', lease=make_lease())

        with pytest.raises(NotFoundError):
            AllocationService().allocate_payment(account.id, payment.id)

    def test_leaseless_payment_needs_installment_ids(self, account, lease, january, make_payment):
        payment = make_payment('1000', currency='XOF')
        service = AllocationService()

        with pytest.raises(ValidationError):
            service.allocate_payment(account.id, payment.id)

        result = service.allocate_payment(account.id, payment.id, AllocationRequestDTO(installment_ids=[january.id]))
        assert result.total_allocated == Decimal('1000.00')

    def test_installments_of_another_account_are_invisible(self, account, other_account, make_lease, make_payment):
        foreign = make_lease(target_account=other_account)
        InstallmentService().generate_installments(other_account.id, foreign.id)
        target = Installment.objects.filter(lease=foreign).first()
        payment = make_payment('1000', currency='XOF')

        with pytest.raises(NotFoundError):
            AllocationService().allocate_payment(
                account.id, payment.id, AllocationRequestDTO(installment_ids=[target.id])
            )

    def test_allocations_are_conserved(self, account, lease, make_payment):
        service = AllocationService()
        for amount in ('70000', '95000', '12345.67'):
            payment = make_payment(amount, lease=lease)
            service.allocate_payment(account.id, payment.id, today=date(2025, 3, 1))
            allocated = sum(a.amount for a in PaymentAllocation.objects.filter(payment=payment))
            assert allocated <= payment.amount

        for item in Installment.objects.filter(lease=lease):
            allocated = sum(a.amount for a in PaymentAllocation.objects.filter(installment=item))
            assert item.amount_paid == allocated
            assert item.amount_paid <= item.total_due

    def test_failed_write_rolls_back_the_whole_allocation(self, monkeypatch, account, lease, make_payment):
        payment = make_payment('240000', lease=lease)
        original_settle = AllocationService._settle
        calls = {'n': 0}

        def settle(service, installment):
            calls['n'] += 1
            if calls['n'] == 2:
                raise DatabaseError("connection lost")
            return original_settle(service, installment)

        monkeypatch.setattr(AllocationService, '_settle', settle)

        with pytest.raises(FatalError):
            AllocationService().allocate_payment(account.id, payment.id, today=date(2025, 1, 2))

        assert not PaymentAllocation.objects.filter(payment=payment).exists()
        assert all(item.amount_paid == Decimal('0') for item in Installment.objects.filter(lease=lease))
        assert not Installment.objects.filter(lease=lease, status=InstallmentStatus.PAID).exists()

    def test_list_allocations(self, account, lease, make_payment):
        payment = make_payment('130000', lease=lease)
        AllocationService().allocate_payment(account.id, payment.id, today=date(2025, 1, 2))

        allocations = AllocationService().list_allocations(account.id, payment.id)

        assert sum(a.amount for a in allocations) == Decimal('130000.00')
