"""
Allocation engine.

Spreads the unallocated part of a settled payment over a lease's open
installments: overdue ones first (most days late first), then the rest by
due date. Runs as one transaction holding row locks on the payment and on
every candidate installment.
"""
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from audit.helpers import log_action
from audit.models import AuditLog
from core.constants import InstallmentStatus, PaymentStatus
from core.dto import AllocationRequestDTO, AllocationResultDTO
from core.exceptions import NotFoundError, InvalidStateError, ValidationError
from core.money import ZERO, money_sum
from core.services import BaseService
from core.validators import MoneyValidator
from installments.repositories import InstallmentRepository
from .models import PaymentAllocation
from .repositories import PaymentRepository, PaymentAllocationRepository


def prioritize_installments(installments, today: date) -> list:
    """
    Order installments for allocation.

    Overdue (due before today) come first, most days late first; the others
    follow by ascending due date. Ties fall back to period, then id.
    """
    overdue = [i for i in installments if i.due_date < today]
    upcoming = [i for i in installments if i.due_date >= today]
    overdue.sort(key=lambda i: (-(today - i.due_date).days, i.period_year, i.period_month, i.id))
    upcoming.sort(key=lambda i: (i.due_date, i.period_year, i.period_month, i.id))
    return overdue + upcoming


def plan_allocations(installments, available: Decimal, allocated: Dict[int, Decimal],
                     manual: Dict[int, Decimal]) -> List[tuple]:
    """
    Greedy split of ``available`` over already-prioritized installments.

    Returns (installment, amount) pairs with amount > 0. A manual amount is
    clamped to both the installment's remaining due and what is left.
    """
    plan = []
    left = available
    for installment in installments:
        if left <= ZERO:
            break
        remaining_due = installment.total_due - allocated.get(installment.id, ZERO)
        if remaining_due <= ZERO:
            continue
        amount = min(remaining_due, left)
        if installment.id in manual:
            amount = min(manual[installment.id], amount)
        if amount > ZERO:
            plan.append((installment, amount))
            left -= amount
    return plan


class AllocationService(BaseService):
    """Applies payments to installments"""

    def __init__(self):
        super().__init__()
        self.payment_repo = PaymentRepository()
        self.allocation_repo = PaymentAllocationRepository()
        self.installment_repo = InstallmentRepository()

    def _manual_amounts(self, amounts) -> Dict[int, Decimal]:
        manual = {}
        for installment_id, value in (amounts or {}).items():
            manual[int(installment_id)] = MoneyValidator.validate_positive(value, f"amounts[{installment_id}]")
        return manual

    def _allocated_by_installment(self, installment_ids) -> Dict[int, Decimal]:
        rows = (
            PaymentAllocation.objects.filter(installment_id__in=installment_ids)
            .values('installment_id')
            .annotate(total=Sum('amount'))
        )
        return {row['installment_id']: row['total'] or ZERO for row in rows}

    def allocate_payment(self, account_id: int, payment_id: int, request: Optional[AllocationRequestDTO] = None,
                         actor_id: Optional[int] = None, today: Optional[date] = None) -> AllocationResultDTO:
        """
        Allocate the unallocated remainder of a payment.

        Raises:
            NotFoundError: If the payment or candidate installments don't exist in the account
            InvalidStateError: If the payment isn't settled, is fully allocated,
                or nothing can be allocated
            ValidationError: If a manual amount isn't positive
        """
        request = request or AllocationRequestDTO()
        today = self.today(today)
        manual = self._manual_amounts(request.amounts)

        with self.datastore_guard("allocate_payment", account_id=account_id, payment_id=payment_id):
            with transaction.atomic():
                payment = self.payment_repo.lock_for_account(account_id, payment_id)
                if not payment:
                    raise NotFoundError(resource_type="Payment", resource_id=payment_id)

                if payment.status != PaymentStatus.SUCCESS:
                    raise InvalidStateError(
                        message=f"Only successful payments can be allocated (status is {payment.status})",
                        code="PAYMENT_NOT_SETTLED",
                        details={'payment_id': payment_id, 'status': payment.status}
                    )

                remaining = payment.amount - self.allocation_repo.allocated_for_payment(payment.id)
                if remaining <= ZERO:
                    raise InvalidStateError(
                        message="Payment is already fully allocated",
                        code="PAYMENT_FULLY_ALLOCATED",
                        details={'payment_id': payment_id}
                    )

                if request.installment_ids is None and payment.lease_id is None:
                    raise ValidationError(
                        message="installment_ids is required for payments not linked to a lease",
                        code="MISSING_INSTALLMENT_IDS"
                    )

                candidates = self.installment_repo.lock_candidates(
                    account_id, payment.lease_id, request.installment_ids
                )
                if not candidates:
                    raise NotFoundError(
                        resource_type="Installment",
                        message="No installments found to allocate to",
                        code="NO_INSTALLMENTS",
                    )

                mismatched = [i.id for i in candidates if i.currency != payment.currency]
                if mismatched:
                    raise ValidationError(
                        message=f"Installments {mismatched} are not billed in {payment.currency}",
                        code="CURRENCY_MISMATCH",
                        details={'installment_ids': mismatched}
                    )

                allocated = self._allocated_by_installment([i.id for i in candidates])
                plan = plan_allocations(prioritize_installments(candidates, today), remaining, allocated, manual)
                if not plan:
                    raise InvalidStateError(
                        message="No allocation possible",
                        code="NO_ALLOCATION_POSSIBLE",
                        details={'payment_id': payment_id}
                    )

                created = self.allocation_repo.bulk_create([
                    PaymentAllocation(
                        account_id=account_id,
                        payment=payment,
                        installment=installment,
                        amount=amount,
                        currency=payment.currency,
                        created_by_id=actor_id,
                    )
                    for installment, amount in plan
                ])

                for installment, _ in plan:
                    self._settle(installment)

                total = money_sum(amount for _, amount in plan)
                log_action(
                    account_id=account_id,
                    actor_id=actor_id,
                    action=AuditLog.ACTION_ALLOCATE,
                    resource_type=AuditLog.RESOURCE_PAYMENT,
                    resource_id=payment.id,
                    description=f"Allocated {total} {payment.currency} to {len(plan)} installments",
                    metadata={
                        'allocations': {str(i.id): str(amount) for i, amount in plan},
                        'unallocated': str(remaining - total),
                    }
                )

        self.log_info("Payment allocated", account_id=account_id, payment_id=payment_id,
                      total=str(total), installments=len(plan))
        return AllocationResultDTO(
            allocations=created,
            total_allocated=total,
            unallocated_amount=remaining - total,
        )

    def _settle(self, installment):
        """Recompute amount_paid from the allocation ledger and derive the status"""
        paid = self.allocation_repo.allocated_for_installment(installment.id)
        changes = {'amount_paid': paid}
        if paid >= installment.total_due:
            if installment.status != InstallmentStatus.PAID:
                changes['status'] = InstallmentStatus.PAID
                changes['paid_at'] = timezone.now()
        elif paid > ZERO:
            changes['status'] = InstallmentStatus.PARTIAL
        self.installment_repo.update(installment, **changes)

    def list_allocations(self, account_id: int, payment_id: int) -> List[PaymentAllocation]:
        payment = self.payment_repo.get_for_account(account_id, payment_id)
        if not payment:
            raise NotFoundError(resource_type="Payment", resource_id=payment_id)
        return list(self.allocation_repo.for_payment(payment.id).select_related('installment'))
