"""
Penalty service - applies late penalties to unpaid installments.

Each installment is evaluated in its own short transaction under a row
lock, so the batch can run alongside payment allocation.
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.utils import timezone

from audit.helpers import log_action
from audit.models import AuditLog
from core.constants import InstallmentStatus
from core.dto import PenaltyRunResultDTO, PageDTO
from core.exceptions import NotFoundError, InvalidStateError, ValidationError
from core.money import ZERO
from core.services import BaseService
from core.validators import MoneyValidator
from installments.repositories import InstallmentRepository
from .calculator import compute_penalty
from .models import PenaltyAssessment
from .repositories import PenaltyAssessmentRepository

UPDATED = 'updated'
UNCHANGED = 'unchanged'
SKIPPED_PAID = 'paid'
SKIPPED_GRACE = 'grace'
SKIPPED_OVERRIDE = 'override'


class PenaltyService(BaseService):
    """Service for late penalty business logic"""

    def __init__(self):
        super().__init__()
        self.installment_repo = InstallmentRepository()
        self.assessment_repo = PenaltyAssessmentRepository()

    def calculate_penalty(self, account_id: int, installment_id: int, today: Optional[date] = None,
                          actor_id: Optional[int] = None):
        """
        Recompute the penalty of one installment.

        Raises:
            NotFoundError: If the installment doesn't exist in the account
            InvalidStateError: If it is paid, inside its grace period, or manually overridden
        """
        today = self.today(today)
        with self.datastore_guard("calculate_penalty", account_id=account_id, installment_id=installment_id):
            with transaction.atomic():
                installment = self.installment_repo.lock_for_account(account_id, installment_id)
                if not installment:
                    raise NotFoundError(resource_type="Installment", resource_id=installment_id)
                outcome = self._evaluate(installment, today, actor_id)

        if outcome == SKIPPED_PAID:
            raise InvalidStateError(
                message="Installment is already paid",
                code="INSTALLMENT_PAID",
                details={'installment_id': installment_id}
            )
        if outcome == SKIPPED_GRACE:
            raise InvalidStateError(
                message="Installment is not yet overdue (within grace period)",
                code="GRACE_PERIOD_ACTIVE",
                details={'installment_id': installment_id}
            )
        if outcome == SKIPPED_OVERRIDE:
            raise InvalidStateError(
                message="Penalty has been set manually",
                code="PENALTY_OVERRIDDEN",
                details={'installment_id': installment_id}
            )
        return installment

    def calculate_penalties(self, today: Optional[date] = None, account_id: Optional[int] = None,
                            actor_id: Optional[int] = None) -> PenaltyRunResultDTO:
        """
        Batch run over every unpaid, past-due installment.
        One failing installment is logged and reported without stopping the run.
        """
        today = self.today(today)
        result = PenaltyRunResultDTO(run_date=today)
        candidate_ids = list(
            self.installment_repo.penalty_candidates(today, account_id).values_list('id', flat=True)
        )

        for installment_id in candidate_ids:
            result.processed += 1
            try:
                with transaction.atomic():
                    installment = self.installment_repo.lock(installment_id)
                    outcome = self._evaluate(installment, today, actor_id) if installment else SKIPPED_PAID
            except Exception as e:
                self.log_error("Penalty calculation failed", error=e, installment_id=installment_id,
                               account_id=account_id)
                result.errors.append(f"Installment {installment_id}: {e}")
                continue

            if outcome == UPDATED:
                result.updated += 1
            elif outcome != UNCHANGED:
                result.skipped += 1

        self.log_info("Penalty run completed", account_id=account_id or 'all', today=today,
                      processed=result.processed, updated=result.updated,
                      skipped=result.skipped, errors=len(result.errors))
        return result

    def _evaluate(self, installment, today: date, actor_id) -> str:
        """Apply the computed penalty to a locked installment; re-checks state under the lock"""
        if installment.status == InstallmentStatus.PAID:
            return SKIPPED_PAID

        assessment = self.assessment_repo.for_installment(installment.id)
        if assessment and assessment.is_manual_override:
            return SKIPPED_OVERRIDE

        lease = installment.lease
        computation = compute_penalty(installment, lease, today)
        if computation.in_grace:
            return SKIPPED_GRACE

        amount = computation.amount
        fields = {
            'calculated_on': today,
            'days_late': computation.days_late,
            'mode': lease.penalty_mode,
            'rate': lease.penalty_rate,
            'fixed_amount': lease.penalty_fixed_amount,
            'amount': amount,
        }
        if assessment:
            self.assessment_repo.update(assessment, **fields)
        else:
            self.assessment_repo.create(
                account_id=installment.account_id,
                installment=installment,
                currency=installment.currency,
                created_by_id=actor_id,
                **fields
            )

        if amount == installment.penalty_amount:
            return UNCHANGED

        old_amount = installment.penalty_amount
        self._apply_amount(installment, amount, today)
        log_action(
            account_id=installment.account_id,
            actor_id=actor_id,
            action=AuditLog.ACTION_PENALTY,
            resource_type=AuditLog.RESOURCE_INSTALLMENT,
            resource_id=installment.id,
            description=f"Penalty {old_amount} -> {amount} {installment.currency} ({computation.days_late} days late)",
            metadata={'old_amount': str(old_amount), 'new_amount': str(amount), 'today': today.isoformat()}
        )
        return UPDATED

    def _apply_amount(self, installment, amount: Decimal, today: date):
        """Store a new penalty and re-derive the installment status from it"""
        changes = {'penalty_amount': amount}
        installment.penalty_amount = amount
        if installment.amount_paid > ZERO and installment.amount_paid >= installment.total_due:
            changes['status'] = InstallmentStatus.PAID
            changes['paid_at'] = installment.paid_at or timezone.now()
        elif installment.status == InstallmentStatus.PAID:
            changes['status'] = InstallmentStatus.PARTIAL if installment.amount_paid > ZERO else InstallmentStatus.DUE
            changes['paid_at'] = None
        elif installment.status == InstallmentStatus.DUE and installment.due_date < today:
            changes['status'] = InstallmentStatus.OVERDUE
        self.installment_repo.update(installment, **changes)

    def override_penalty(self, account_id: int, installment_id: int, amount, reason: str,
                         actor_id: Optional[int] = None, today: Optional[date] = None) -> PenaltyAssessment:
        """
        Set a penalty by hand. Batch runs will not touch it afterwards.

        Raises:
            NotFoundError: If the installment doesn't exist in the account
            ValidationError: If amount is negative or no reason is given
            InvalidStateError: If the installment is paid, or the amount is below what was
                already paid toward the penalty
        """
        amount = MoneyValidator.validate_non_negative(amount, 'amount')
        if not reason or not reason.strip():
            raise ValidationError(message="An override reason is required", code="MISSING_OVERRIDE_REASON")
        today = self.today(today)

        with self.datastore_guard("override_penalty", account_id=account_id, installment_id=installment_id):
            with transaction.atomic():
                installment = self.installment_repo.lock_for_account(account_id, installment_id)
                if not installment:
                    raise NotFoundError(resource_type="Installment", resource_id=installment_id)

                if installment.status == InstallmentStatus.PAID:
                    raise InvalidStateError(
                        message="Installment is already paid",
                        code="INSTALLMENT_PAID",
                        details={'installment_id': installment_id}
                    )

                if installment.base_due + amount < installment.amount_paid:
                    raise InvalidStateError(
                        message="Penalty cannot be lower than the amount already paid toward it",
                        code="PENALTY_BELOW_PAID",
                        details={'minimum': str(installment.amount_paid - installment.base_due)}
                    )

                assessment = self.assessment_repo.for_installment(installment.id)
                fields = {
                    'calculated_on': today,
                    'days_late': installment.days_late(today),
                    'mode': installment.lease.penalty_mode,
                    'amount': amount,
                    'is_manual_override': True,
                    'override_reason': reason.strip(),
                }
                if assessment:
                    self.assessment_repo.update(assessment, **fields)
                else:
                    assessment = self.assessment_repo.create(
                        account_id=account_id,
                        installment=installment,
                        currency=installment.currency,
                        created_by_id=actor_id,
                        **fields
                    )

                old_amount = installment.penalty_amount
                self._apply_amount(installment, amount, today)
                log_action(
                    account_id=account_id,
                    actor_id=actor_id,
                    action=AuditLog.ACTION_PENALTY_OVERRIDE,
                    resource_type=AuditLog.RESOURCE_INSTALLMENT,
                    resource_id=installment.id,
                    description=f"Penalty overridden {old_amount} -> {amount} {installment.currency}",
                    metadata={'reason': reason.strip(), 'old_amount': str(old_amount), 'new_amount': str(amount)}
                )

        self.log_info("Penalty overridden", account_id=account_id, installment_id=installment_id, amount=str(amount))
        return assessment

    def clear_override(self, account_id: int, installment_id: int, actor_id: Optional[int] = None) -> PenaltyAssessment:
        """Hand the penalty back to automatic calculation (the next run recomputes it)"""
        with transaction.atomic():
            installment = self.installment_repo.lock_for_account(account_id, installment_id)
            if not installment:
                raise NotFoundError(resource_type="Installment", resource_id=installment_id)
            assessment = self.assessment_repo.for_installment(installment.id)
            if not assessment or not assessment.is_manual_override:
                raise InvalidStateError(
                    message="Penalty is not manually overridden",
                    code="NO_OVERRIDE",
                    details={'installment_id': installment_id}
                )
            self.assessment_repo.update(assessment, is_manual_override=False, override_reason='')
            log_action(
                account_id=account_id,
                actor_id=actor_id,
                action=AuditLog.ACTION_PENALTY_OVERRIDE,
                resource_type=AuditLog.RESOURCE_INSTALLMENT,
                resource_id=installment.id,
                description="Penalty override cleared",
            )
        return assessment

    def list_penalties(self, account_id: int, lease_id: Optional[int] = None, installment_id: Optional[int] = None,
                       page: int = 1, page_size: Optional[int] = None) -> PageDTO:
        queryset = self.assessment_repo.search(account_id, lease_id=lease_id, installment_id=installment_id)
        return self.assessment_repo.paginate(queryset, page, page_size)
