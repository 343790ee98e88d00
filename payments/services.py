"""
Payment ledger service.

Records settled payment facts exactly once per idempotency key and moves
payments through their one-way status lifecycle.
"""
from typing import Optional

from django.db import transaction, IntegrityError
from django.utils import timezone

from audit.helpers import log_action
from audit.models import AuditLog
from core.constants import PaymentStatus
from core.dto import PaymentDTO, PaymentFilterDTO, PageDTO
from core.exceptions import NotFoundError, InvalidStateError, ValidationError
from core.services import BaseService
from core.validators import MoneyValidator, PaymentValidator
from leases.repositories import LeaseRepository
from .models import Payment
from .repositories import PaymentRepository, PaymentAllocationRepository


class PaymentLedgerService(BaseService):
    """Service for payment-related business logic"""

    def __init__(self):
        super().__init__()
        self.payment_repo = PaymentRepository()
        self.allocation_repo = PaymentAllocationRepository()
        self.lease_repo = LeaseRepository()

    def create_payment(self, account_id: int, data: PaymentDTO, actor_id: Optional[int] = None) -> Payment:
        """
        Record a payment, or return the one already recorded under the same key.

        A replayed idempotency key returns the original row unchanged, even if
        the rest of the request differs, and has no side effects.

        Raises:
            ValidationError: If amount, method fields or currency are invalid
            NotFoundError: If the lease doesn't exist in the account
        """
        PaymentValidator.validate_idempotency_key(data.idempotency_key)

        existing = self.payment_repo.get_by_idempotency_key(account_id, data.idempotency_key)
        if existing:
            self.log_info("Idempotent payment replay", account_id=account_id, payment_id=existing.id)
            return existing

        amount = MoneyValidator.validate_positive(data.amount, 'amount')
        PaymentValidator.validate_method_fields(data)

        lease = None
        renter_ref = data.renter_ref or ''
        currency = (data.currency or '').upper()
        if data.lease_id is not None:
            lease = self.lease_repo.get_for_account(account_id, data.lease_id)
            if not lease:
                raise NotFoundError(resource_type="Lease", resource_id=data.lease_id)
            if currency and currency != lease.currency:
                raise ValidationError(
                    message=f"Payment currency {currency} does not match lease currency {lease.currency}",
                    code="CURRENCY_MISMATCH",
                    details={'currency': currency, 'lease_currency': lease.currency}
                )
            currency = lease.currency
            renter_ref = renter_ref or lease.renter_ref

        if not currency:
            raise ValidationError(
                message="Currency is required for payments without a lease",
                code="MISSING_CURRENCY"
            )

        with self.datastore_guard("create_payment", account_id=account_id, idempotency_key=data.idempotency_key):
            try:
                with transaction.atomic():
                    payment = self.payment_repo.create(
                        account_id=account_id,
                        lease=lease,
                        renter_ref=renter_ref,
                        method=data.method,
                        mm_operator=data.mm_operator or '',
                        mm_phone=data.mm_phone or '',
                        psp_name=data.psp_name or '',
                        psp_transaction_id=data.psp_transaction_id or '',
                        psp_reference=data.psp_reference or '',
                        check_number=data.check_number or '',
                        amount=amount,
                        currency=currency,
                        idempotency_key=data.idempotency_key,
                        status=PaymentStatus.SUCCESS,
                        succeeded_at=timezone.now(),
                        created_by_id=actor_id,
                    )
                    log_action(
                        account_id=account_id,
                        actor_id=actor_id,
                        action=AuditLog.ACTION_RECORD_PAYMENT,
                        resource_type=AuditLog.RESOURCE_PAYMENT,
                        resource_id=payment.id,
                        description=f"Recorded {payment.get_method_display()} payment of {amount} {currency}",
                        metadata={
                            'amount': str(amount),
                            'method': data.method,
                            'lease_id': lease.id if lease else None,
                        }
                    )
            except IntegrityError:
                # Lost the insert race for this key: return the winner's row
                winner = self.payment_repo.get_by_idempotency_key(account_id, data.idempotency_key)
                if winner is None:
                    raise
                self.log_info("Idempotency race resolved to existing payment",
                              account_id=account_id, payment_id=winner.id)
                return winner

        self.log_info("Payment recorded", account_id=account_id, payment_id=payment.id, amount=str(amount))
        return payment

    def update_payment_status(self, account_id: int, payment_id: int, status: str,
                              actor_id: Optional[int] = None) -> Payment:
        """
        Move a payment to a new status; the matching timestamp is stamped once.

        Raises:
            NotFoundError: If the payment doesn't exist in the account
            InvalidStateError: If the transition isn't allowed
        """
        if status not in PaymentStatus.TRANSITIONS:
            raise ValidationError(
                message=f"Unknown payment status: {status}",
                code="UNKNOWN_PAYMENT_STATUS"
            )

        with self.datastore_guard("update_payment_status", account_id=account_id, payment_id=payment_id):
            with transaction.atomic():
                payment = self.payment_repo.lock_for_account(account_id, payment_id)
                if not payment:
                    raise NotFoundError(resource_type="Payment", resource_id=payment_id)

                old_status = payment.status
                if status == old_status:
                    return payment

                if status not in PaymentStatus.TRANSITIONS[old_status]:
                    raise InvalidStateError(
                        message=f"Cannot move payment from {old_status} to {status}",
                        code="INVALID_PAYMENT_TRANSITION",
                        details={'from': old_status, 'to': status}
                    )

                if status == PaymentStatus.CANCELED and self.allocation_repo.has_allocations(payment.id):
                    raise InvalidStateError(
                        message="An allocated payment cannot be canceled",
                        code="PAYMENT_ALLOCATED",
                        details={'payment_id': payment_id}
                    )

                changes = {'status': status}
                timestamp_field = PaymentStatus.TIMESTAMP_FIELDS[status]
                if getattr(payment, timestamp_field) is None:
                    changes[timestamp_field] = timezone.now()
                self.payment_repo.update(payment, **changes)

                log_action(
                    account_id=account_id,
                    actor_id=actor_id,
                    action=AuditLog.ACTION_STATUS_CHANGE,
                    resource_type=AuditLog.RESOURCE_PAYMENT,
                    resource_id=payment.id,
                    description=f"Payment #{payment.id}: {old_status} -> {status}",
                    metadata={'old_status': old_status, 'new_status': status}
                )

        self.log_info("Payment status updated", account_id=account_id, payment_id=payment_id,
                      old_status=old_status, new_status=status)
        return payment

    def get_payment_by_id(self, account_id: int, payment_id: int) -> Payment:
        payment = self.payment_repo.get_for_account(account_id, payment_id)
        if not payment:
            raise NotFoundError(resource_type="Payment", resource_id=payment_id)
        return payment

    def list_payments(self, account_id: int, filters: PaymentFilterDTO = None, page: int = 1,
                      page_size: Optional[int] = None) -> PageDTO:
        """Newest first"""
        queryset = self.payment_repo.search(account_id, filters or PaymentFilterDTO())
        return self.payment_repo.paginate(queryset, page, page_size)
