"""
Security deposit service.

A deposit is collected once, for exactly its target amount, and then only
decreases through refunds and deductions. Deposit money never flows into
rent allocation.
"""
from decimal import Decimal
from typing import List, Optional

from django.db import transaction
from django.utils import timezone

from audit.helpers import log_action
from audit.models import AuditLog
from core.constants import DepositMovementType
from core.exceptions import NotFoundError, AlreadyExistsError, InvalidStateError, ValidationError
from core.services import BaseService
from core.validators import MoneyValidator
from .models import SecurityDeposit, DepositMovement
from .repositories import SecurityDepositRepository, DepositMovementRepository


class DepositService(BaseService):
    """Service for security deposit business logic"""

    AUDIT_ACTIONS = {
        DepositMovementType.COLLECT: AuditLog.ACTION_DEPOSIT_COLLECT,
        DepositMovementType.REFUND: AuditLog.ACTION_DEPOSIT_REFUND,
        DepositMovementType.DEDUCT: AuditLog.ACTION_DEPOSIT_DEDUCT,
    }

    def __init__(self):
        super().__init__()
        self.deposit_repo = SecurityDepositRepository()
        self.movement_repo = DepositMovementRepository()

    def open_deposit(self, lease) -> SecurityDeposit:
        """Create the (empty) deposit of a newly created lease; target is fixed here"""
        return self.deposit_repo.create(
            account_id=lease.account_id,
            lease=lease,
            currency=lease.currency,
            target_amount=lease.security_deposit_amount,
        )

    def get_deposit(self, account_id: int, lease_id: int) -> SecurityDeposit:
        deposit = self.deposit_repo.get_for_lease(account_id, lease_id)
        if not deposit:
            raise NotFoundError(resource_type="SecurityDeposit", resource_id=lease_id)
        return deposit

    def list_movements(self, account_id: int, lease_id: int) -> List[DepositMovement]:
        deposit = self.get_deposit(account_id, lease_id)
        return list(self.movement_repo.for_deposit(deposit.id))

    def collect(self, account_id: int, lease_id: int, amount, actor_id: Optional[int] = None,
                payment_id: Optional[int] = None, note: str = '') -> SecurityDeposit:
        """
        Record the single collection of the deposit.

        Raises:
            NotFoundError: If the lease (or referenced payment) isn't in the account
            AlreadyExistsError: If the deposit was already collected, whatever the amount
            ValidationError: If amount differs from the target or no payment is referenced
        """
        with self.datastore_guard("collect_deposit", account_id=account_id, lease_id=lease_id):
            with transaction.atomic():
                deposit = self.deposit_repo.lock_for_lease(account_id, lease_id)
                if not deposit:
                    raise NotFoundError(resource_type="SecurityDeposit", resource_id=lease_id)

                if deposit.collected_at is not None:
                    raise AlreadyExistsError(
                        message="deposit already collected",
                        code="DEPOSIT_ALREADY_COLLECTED",
                        details={'lease_id': lease_id}
                    )

                amount = MoneyValidator.validate_positive(amount, 'amount')
                if amount != deposit.target_amount:
                    raise ValidationError(
                        message=f"Collection amount ({amount}) must equal target amount ({deposit.target_amount})",
                        code="DEPOSIT_AMOUNT_MISMATCH",
                        details={'amount': str(amount), 'target_amount': str(deposit.target_amount)}
                    )

                if payment_id is None:
                    raise ValidationError(
                        message="Payment ID is required for deposit collection",
                        code="MISSING_PAYMENT_ID"
                    )
                self._check_payment(account_id, payment_id)

                self._append(deposit, DepositMovementType.COLLECT, amount, actor_id,
                             payment_id=payment_id, note=note)
                deposit.collected_at = timezone.now()
                self._reconcile(deposit, extra_fields=['collected_at'])

        self.log_info("Deposit collected", account_id=account_id, lease_id=lease_id, amount=str(amount))
        return deposit

    def refund(self, account_id: int, lease_id: int, amount, actor_id: Optional[int] = None,
               note: str = '') -> SecurityDeposit:
        """Return part or all of the held deposit to the renter"""
        return self._outflow(DepositMovementType.REFUND, account_id, lease_id, amount, actor_id, note=note)

    def deduct(self, account_id: int, lease_id: int, amount, actor_id: Optional[int] = None,
               note: str = '', installment_id: Optional[int] = None) -> SecurityDeposit:
        """Keep part of the held deposit (damages, unpaid charges)"""
        return self._outflow(DepositMovementType.DEDUCT, account_id, lease_id, amount, actor_id,
                             note=note, installment_id=installment_id)

    def _outflow(self, movement_type: str, account_id: int, lease_id: int, amount, actor_id,
                 note: str = '', installment_id: Optional[int] = None) -> SecurityDeposit:
        amount = MoneyValidator.validate_positive(amount, 'amount')

        with self.datastore_guard(f"deposit_{movement_type.lower()}", account_id=account_id, lease_id=lease_id):
            with transaction.atomic():
                deposit = self.deposit_repo.lock_for_lease(account_id, lease_id)
                if not deposit:
                    raise NotFoundError(resource_type="SecurityDeposit", resource_id=lease_id)

                if amount > deposit.held_amount:
                    raise InvalidStateError(
                        message=f"Insufficient deposit balance. Available: {deposit.held_amount}, Requested: {amount}",
                        code="INSUFFICIENT_DEPOSIT",
                        details={'held_amount': str(deposit.held_amount), 'requested': str(amount)}
                    )

                if installment_id is not None:
                    self._check_installment(account_id, lease_id, installment_id)

                self._append(deposit, movement_type, amount, actor_id, installment_id=installment_id, note=note)
                self._reconcile(deposit)

        self.log_info(f"Deposit {movement_type.lower()} recorded", account_id=account_id,
                      lease_id=lease_id, amount=str(amount), held_amount=str(deposit.held_amount))
        return deposit

    def _append(self, deposit: SecurityDeposit, movement_type: str, amount: Decimal, actor_id,
                payment_id=None, installment_id=None, note: str = '') -> DepositMovement:
        movement = self.movement_repo.create(
            account_id=deposit.account_id,
            deposit=deposit,
            type=movement_type,
            amount=amount,
            payment_id=payment_id,
            installment_id=installment_id,
            note=note or '',
            created_by_id=actor_id,
        )
        log_action(
            account_id=deposit.account_id,
            actor_id=actor_id,
            action=self.AUDIT_ACTIONS[movement_type],
            resource_type=AuditLog.RESOURCE_DEPOSIT,
            resource_id=deposit.id,
            description=f"Deposit {movement_type.lower()} of {amount} {deposit.currency}",
            metadata={'lease_id': deposit.lease_id, 'movement_id': movement.id, 'amount': str(amount)}
        )
        return movement

    def _reconcile(self, deposit: SecurityDeposit, extra_fields=None):
        """Recompute collected and held amounts from the movement ledger"""
        collected = self.movement_repo.collected_total(deposit.id)
        outflows = self.movement_repo.outflow_total(deposit.id)
        fields = {
            'collected_amount': collected,
            'held_amount': collected - outflows,
        }
        for name in extra_fields or []:
            fields[name] = getattr(deposit, name)
        self.deposit_repo.update(deposit, **fields)

    def _check_payment(self, account_id: int, payment_id: int):
        from payments.models import Payment

        if not Payment.objects.filter(id=payment_id, account_id=account_id).exists():
            raise NotFoundError(resource_type="Payment", resource_id=payment_id)

    def _check_installment(self, account_id: int, lease_id: int, installment_id: int):
        from installments.models import Installment

        if not Installment.objects.filter(id=installment_id, account_id=account_id, lease_id=lease_id).exists():
            raise NotFoundError(resource_type="Installment", resource_id=installment_id)
