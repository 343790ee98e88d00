"""
Payment ledger tests.

Covers:
- Idempotent recording, including a lost insert race
- Method-specific field validation
- Currency handling
- Status lifecycle and timestamps
"""
from decimal import Decimal

import pytest

from core.constants import PaymentStatus
from core.dto import PaymentDTO, PaymentFilterDTO
from core.exceptions import InvalidStateError, NotFoundError, ValidationError
from installments.services import InstallmentService
from payments.allocation import AllocationService
from payments.models import Payment
from payments.repositories import PaymentRepository
from payments.services import PaymentLedgerService


@pytest.mark.django_db
class TestCreatePayment:

    def test_payment_is_recorded_as_settled(self, make_lease, make_payment):
        lease = make_lease()

        payment = make_payment('50000', lease=lease)

        assert payment.status == PaymentStatus.SUCCESS
        assert payment.succeeded_at is not None
        assert payment.currency == lease.currency
        assert payment.renter_ref == lease.renter_ref

    def test_replayed_key_returns_the_original_payment(self, make_lease, make_payment):
        lease = make_lease()
        original = make_payment('50000', lease=lease, key='abc-123')

        replay = make_payment('99999', lease=lease, key='abc-123')

        assert replay.id == original.id
        assert replay.amount == Decimal('50000.00')
        assert Payment.objects.filter(idempotency_key='abc-123').count() == 1

    def test_same_key_in_another_account_is_independent(self, account, other_account):
        service = PaymentLedgerService()
        data = PaymentDTO(idempotency_key='shared', method='CASH', amount=Decimal('1000'), currency='XOF')

        mine = service.create_payment(account.id, data)
        theirs = service.create_payment(other_account.id, data)

        assert mine.id != theirs.id

    def test_lost_insert_race_returns_the_winner(self, monkeypatch, make_lease, make_payment):
        lease = make_lease()
        winner = make_payment('50000', lease=lease, key='race-1')
        original_lookup = PaymentRepository.get_by_idempotency_key
        calls = {'n': 0}

        def lookup(repo, account_id, idempotency_key):
            calls['n'] += 1
            if calls['n'] == 1:
                return None
            return original_lookup(repo, account_id, idempotency_key)

        monkeypatch.setattr(PaymentRepository, 'get_by_idempotency_key', lookup)

        loser = make_payment('50000', lease=lease, key='race-1')

        assert loser.id == winner.id
        assert calls['n'] == 2
        assert Payment.objects.filter(idempotency_key='race-1').count() == 1

    def test_mobile_money_requires_operator_and_phone(self, make_lease, make_payment):
        lease = make_lease()

        with pytest.raises(ValidationError) as exc_info:
            make_payment('1000', lease=lease, method='MOBILE_MONEY', mm_operator='ORANGE')

        assert exc_info.value.code == 'MISSING_METHOD_FIELDS'
        assert exc_info.value.details['fields'] == ['mm_phone']

    def test_mobile_money_payment(self, make_lease, make_payment):
        lease = make_lease()

        payment = make_payment('1000', lease=lease, method='MOBILE_MONEY', mm_operator='MTN', mm_phone='0700000000')

        assert payment.mm_operator == 'MTN'

    @pytest.mark.parametrize('amount', ['0', '-10'])
    def test_amount_must_be_positive(self, make_lease, make_payment, amount):
        lease = make_lease()

        with pytest.raises(ValidationError):
            make_payment(amount, lease=lease)

    def test_float_amount_is_rejected(self, account):
        data = PaymentDTO(idempotency_key='float', method='CASH', amount=100.5, currency='XOF')

        with pytest.raises(ValidationError):
            PaymentLedgerService().create_payment(account.id, data)

    def test_currency_must_match_the_lease(self, make_lease, make_payment):
        lease = make_lease()

        with pytest.raises(ValidationError) as exc_info:
            make_payment('1000', lease=lease, currency='EUR')

        assert exc_info.value.code == 'CURRENCY_MISMATCH'

    def test_leaseless_payment_needs_a_currency(self, make_payment):
        with pytest.raises(ValidationError):
            make_payment('1000')

    def test_lease_of_another_account_is_not_found(self, other_account, make_lease, make_payment):
        lease = make_lease(target_account=other_account)

        with pytest.raises(NotFoundError):
            make_payment('1000', lease=lease)


@pytest.mark.django_db
class TestPaymentStatus:

    def test_success_can_be_canceled_once(self, account, make_lease, make_payment):
        payment = make_payment('1000', lease=make_lease())
        service = PaymentLedgerService()

        payment = service.update_payment_status(account.id, payment.id, PaymentStatus.CANCELED)

        assert payment.status == PaymentStatus.CANCELED
        assert payment.canceled_at is not None
        with pytest.raises(InvalidStateError):
            service.update_payment_status(account.id, payment.id, PaymentStatus.SUCCESS)

    def test_allocated_payment_cannot_be_canceled(self, account, make_lease, make_payment):
        lease = make_lease()
        InstallmentService().generate_installments(account.id, lease.id)
        payment = make_payment('1000', lease=lease)
        AllocationService().allocate_payment(account.id, payment.id)

        with pytest.raises(InvalidStateError) as exc_info:
            PaymentLedgerService().update_payment_status(account.id, payment.id, PaymentStatus.CANCELED)

        assert exc_info.value.code == 'PAYMENT_ALLOCATED'

    def test_unknown_status(self, account, make_lease, make_payment):
        payment = make_payment('1000', lease=make_lease())

        with pytest.raises(ValidationError):
            PaymentLedgerService().update_payment_status(account.id, payment.id, 'REFUNDED')

    def test_list_filters_by_method(self, account, make_lease, make_payment):
        lease = make_lease()
        make_payment('1000', lease=lease)
        make_payment('2000', lease=lease, method='CHECK', check_number='0001234')

        page = PaymentLedgerService().list_payments(account.id, PaymentFilterDTO(method='CHECK'))

        assert page.total == 1
        assert page.items[0].check_number == '0001234'
