"""
Security deposit tests.

Covers:
- Single collection at the target amount, backed by a payment
- Refunds and deductions bounded by the held amount
- Movement ledger reconciliation
"""
from decimal import Decimal

import pytest

from core.constants import DepositMovementType
from core.dto import PaymentDTO
from core.exceptions import AlreadyExistsError, InvalidStateError, NotFoundError, ValidationError
from deposits.services import DepositService
from installments.models import Installment
from installments.services import InstallmentService
from payments.services import PaymentLedgerService


@pytest.mark.django_db
class TestDepositLifecycle:

    @pytest.fixture
    def lease(self, make_lease):
        return make_lease(security_deposit_amount=Decimal('200000'))

    @pytest.fixture
    def payment(self, lease, make_payment):
        return make_payment('200000', lease=lease)

    def test_collect_once(self, account, lease, payment):
        service = DepositService()

        deposit = service.collect(account.id, lease.id, '200000', payment_id=payment.id, note='Cash at signing')

        assert deposit.collected_amount == Decimal('200000.00')
        assert deposit.held_amount == Decimal('200000.00')
        assert deposit.collected_at is not None
        for amount in ('200000', '1'):
            with pytest.raises(AlreadyExistsError):
                service.collect(account.id, lease.id, amount, payment_id=payment.id)

    def test_collect_must_match_target(self, account, lease, payment):
        with pytest.raises(ValidationError) as exc_info:
            DepositService().collect(account.id, lease.id, '150000', payment_id=payment.id)

        assert exc_info.value.code == 'DEPOSIT_AMOUNT_MISMATCH'

    def test_collect_linked_to_a_payment(self, account, lease, payment):
        DepositService().collect(account.id, lease.id, '200000', payment_id=payment.id)

        movement = DepositService().list_movements(account.id, lease.id)[0]
        assert movement.payment_id == payment.id

    def test_collect_requires_a_payment(self, account, lease):
        service = DepositService()

        with pytest.raises(ValidationError) as exc_info:
            service.collect(account.id, lease.id, '200000')

        assert exc_info.value.code == 'MISSING_PAYMENT_ID'
        assert service.get_deposit(account.id, lease.id).collected_at is None

    def test_collect_with_a_payment_of_another_account(self, account, other_account, lease):
        foreign = PaymentLedgerService().create_payment(
            other_account.id, PaymentDTO(idempotency_key='foreign-1', method='CASH', amount=Decimal('200000'), currency='XOF')
        )

        with pytest.raises(NotFoundError):
            DepositService().collect(account.id, lease.id, '200000', payment_id=foreign.id)

    def test_refund_and_deduct_reduce_the_held_amount(self, account, lease, payment):
        service = DepositService()
        service.collect(account.id, lease.id, '200000', payment_id=payment.id)

        service.refund(account.id, lease.id, '50000')
        deposit = service.deduct(account.id, lease.id, '30000', note='Broken window')

        assert deposit.held_amount == Decimal('120000.00')
        assert deposit.collected_amount == Decimal('200000.00')
        types = [m.type for m in service.list_movements(account.id, lease.id)]
        assert sorted(types) == sorted([
            DepositMovementType.COLLECT, DepositMovementType.REFUND, DepositMovementType.DEDUCT,
        ])

    def test_outflow_cannot_exceed_held_amount(self, account, lease, payment):
        service = DepositService()
        service.collect(account.id, lease.id, '200000', payment_id=payment.id)

        with pytest.raises(InvalidStateError) as exc_info:
            service.refund(account.id, lease.id, '200000.01')

        assert exc_info.value.code == 'INSUFFICIENT_DEPOSIT'

    def test_nothing_to_refund_before_collection(self, account, lease):
        with pytest.raises(InvalidStateError):
            DepositService().deduct(account.id, lease.id, '1')

    def test_deduction_against_an_installment(self, account, lease, payment):
        service = DepositService()
        service.collect(account.id, lease.id, '200000', payment_id=payment.id)
        InstallmentService().generate_installments(account.id, lease.id)
        january = Installment.objects.get(lease=lease, period_month=1)

        service.deduct(account.id, lease.id, '100000', installment_id=january.id)

        assert service.get_deposit(account.id, lease.id).held_amount == Decimal('100000.00')

    def test_deposit_of_another_account(self, other_account, lease, payment):
        with pytest.raises(NotFoundError):
            DepositService().collect(other_account.id, lease.id, '200000', payment_id=payment.id)
