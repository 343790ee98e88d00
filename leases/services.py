"""
Lease service - Business logic for the Lease Registry.
"""
from typing import List, Optional

from django.db import transaction, IntegrityError

from accounts.models import Account
from audit.helpers import log_action
from audit.models import AuditLog
from core.constants import LeaseStatus
from core.dto import LeaseDTO, PageDTO
from core.exceptions import NotFoundError, AlreadyExistsError, InvalidStateError, ValidationError
from core.money import to_rate
from core.services import BaseService
from core.validators import LeaseValidator, MoneyValidator
from deposits.services import DepositService
from documents.services import DocumentNumberingService
from .models import Lease, LeaseCoRenter
from .repositories import LeaseRepository, LeaseCoRenterRepository


class LeaseService(BaseService):
    """Service for lease-related business logic"""

    def __init__(self):
        super().__init__()
        self.lease_repo = LeaseRepository()
        self.co_renter_repo = LeaseCoRenterRepository()
        self.numbering = DocumentNumberingService()
        self.deposit_service = DepositService()

    def create_lease(self, account_id: int, data: LeaseDTO, actor_id: Optional[int] = None) -> Lease:
        """
        Create a lease and its security deposit in one transaction.

        Args:
            account_id: Account ID
            data: Lease terms
            actor_id: User creating the lease

        Returns:
            Created Lease instance

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If billing or penalty terms are invalid
            AlreadyExistsError: If the supplied lease_number is already used
        """
        account = Account.objects.filter(id=account_id).first()
        if not account:
            raise NotFoundError(resource_type="Account", resource_id=account_id)

        LeaseValidator.validate_billing_terms(data)
        LeaseValidator.validate_penalty_terms(data)

        if data.status not in (LeaseStatus.DRAFT, LeaseStatus.ACTIVE):
            raise ValidationError(
                message="A lease can only be created as DRAFT or ACTIVE",
                code="INVALID_INITIAL_STATUS"
            )

        amounts = {
            'rent_amount': MoneyValidator.validate_non_negative(data.rent_amount, 'rent_amount'),
            'service_charge_amount': MoneyValidator.validate_non_negative(data.service_charge_amount or 0, 'service_charge_amount'),
            'security_deposit_amount': MoneyValidator.validate_non_negative(data.security_deposit_amount or 0, 'security_deposit_amount'),
            'penalty_fixed_amount': MoneyValidator.validate_non_negative(data.penalty_fixed_amount or 0, 'penalty_fixed_amount'),
        }
        if data.penalty_cap is not None:
            amounts['penalty_cap'] = MoneyValidator.validate_non_negative(data.penalty_cap, 'penalty_cap')
        if data.min_balance_threshold is not None:
            amounts['min_balance_threshold'] = MoneyValidator.validate_non_negative(
                data.min_balance_threshold, 'min_balance_threshold'
            )

        if data.lease_number and self.lease_repo.lease_number_taken(account_id, data.lease_number):
            raise AlreadyExistsError(
                message=f"Lease number {data.lease_number} already exists",
                code="LEASE_NUMBER_TAKEN",
                details={'lease_number': data.lease_number}
            )

        with self.datastore_guard("create_lease", account_id=account_id):
            with transaction.atomic():
                lease_number = data.lease_number or self.numbering.issue_lease_number(
                    account_id,
                    lambda number: self.lease_repo.lease_number_taken(account_id, number),
                )
                try:
                    with transaction.atomic():
                        lease = self.lease_repo.create(
                            account_id=account_id,
                            property_ref=data.property_ref or '',
                            renter_ref=data.renter_ref or '',
                            owner_ref=data.owner_ref or '',
                            lease_number=lease_number,
                            status=data.status,
                            start_date=data.start_date,
                            end_date=data.end_date,
                            billing_frequency=data.billing_frequency,
                            due_day_of_month=int(data.due_day_of_month),
                            currency=(data.currency or account.default_currency).upper(),
                            penalty_grace_days=int(data.penalty_grace_days or 0),
                            penalty_mode=data.penalty_mode,
                            penalty_rate=to_rate(data.penalty_rate, 'penalty_rate'),
                            notes=data.notes or '',
                            created_by_id=actor_id,
                            **amounts
                        )
                except IntegrityError:
                    raise AlreadyExistsError(
                        message=f"Lease number {lease_number} already exists",
                        code="LEASE_NUMBER_TAKEN",
                        details={'lease_number': lease_number}
                    )

                self.deposit_service.open_deposit(lease)

                log_action(
                    account_id=account_id,
                    actor_id=actor_id,
                    action=AuditLog.ACTION_CREATE,
                    resource_type=AuditLog.RESOURCE_LEASE,
                    resource_id=lease.id,
                    description=f"Created lease {lease.lease_number}",
                    metadata={
                        'lease_number': lease.lease_number,
                        'rent_amount': str(lease.rent_amount),
                        'currency': lease.currency,
                    }
                )

        self.log_info(f"Lease created: {lease.lease_number}", lease_id=lease.id, account_id=account_id)
        return lease

    def get_lease(self, account_id: int, lease_id: int) -> Lease:
        lease = self.lease_repo.get_for_account(account_id, lease_id)
        if not lease:
            raise NotFoundError(resource_type="Lease", resource_id=lease_id)
        return lease

    def list_leases(self, account_id: int, status=None, renter_ref=None, property_ref=None, search=None,
                    page: int = 1, page_size: Optional[int] = None) -> PageDTO:
        queryset = self.lease_repo.search(
            account_id, status=status, renter_ref=renter_ref, property_ref=property_ref, search=search
        )
        return self.lease_repo.paginate(queryset, page, page_size)

    def update_lease_status(self, account_id: int, lease_id: int, status: str, actor_id: Optional[int] = None) -> Lease:
        """
        Move a lease through its lifecycle.

        Raises:
            NotFoundError: If the lease doesn't exist in the account
            InvalidStateError: If the transition isn't allowed
        """
        if status not in LeaseStatus.TRANSITIONS:
            raise ValidationError(
                message=f"Unknown lease status: {status}",
                code="UNKNOWN_LEASE_STATUS"
            )

        with self.datastore_guard("update_lease_status", account_id=account_id, lease_id=lease_id):
            with transaction.atomic():
                lease = self.lease_repo.lock_for_account(account_id, lease_id)
                if not lease:
                    raise NotFoundError(resource_type="Lease", resource_id=lease_id)

                old_status = lease.status
                if status not in LeaseStatus.TRANSITIONS[old_status]:
                    raise InvalidStateError(
                        message=f"Cannot move lease from {old_status} to {status}",
                        code="INVALID_LEASE_TRANSITION",
                        details={'from': old_status, 'to': status}
                    )

                self.lease_repo.update(lease, status=status)
                log_action(
                    account_id=account_id,
                    actor_id=actor_id,
                    action=AuditLog.ACTION_STATUS_CHANGE,
                    resource_type=AuditLog.RESOURCE_LEASE,
                    resource_id=lease.id,
                    description=f"Lease {lease.lease_number}: {old_status} -> {status}",
                    metadata={'old_status': old_status, 'new_status': status}
                )

        self.log_info("Lease status updated", lease_id=lease_id, account_id=account_id,
                      old_status=old_status, new_status=status)
        return lease

    def add_co_renter(self, account_id: int, lease_id: int, renter_ref: str,
                      actor_id: Optional[int] = None) -> LeaseCoRenter:
        """
        Attach an additional renter to a lease.

        Raises:
            NotFoundError: If the lease doesn't exist in the account
            ValidationError: If renter_ref is blank
            AlreadyExistsError: If the renter is already on the lease
        """
        renter_ref = (renter_ref or '').strip()
        if not renter_ref:
            raise ValidationError(message="renter_ref is required", code="MISSING_RENTER_REF")

        lease = self.get_lease(account_id, lease_id)
        if self.co_renter_repo.get_by_ref(account_id, lease.id, renter_ref):
            raise self._co_renter_exists(lease.id, renter_ref)

        with self.datastore_guard("add_co_renter", account_id=account_id, lease_id=lease_id):
            with transaction.atomic():
                try:
                    with transaction.atomic():
                        co_renter = self.co_renter_repo.create(
                            account_id=account_id,
                            lease=lease,
                            renter_ref=renter_ref,
                            created_by_id=actor_id,
                        )
                except IntegrityError:
                    raise self._co_renter_exists(lease.id, renter_ref)

                log_action(
                    account_id=account_id,
                    actor_id=actor_id,
                    action=AuditLog.ACTION_CO_RENTER_ADD,
                    resource_type=AuditLog.RESOURCE_LEASE,
                    resource_id=lease.id,
                    description=f"Added co-renter {renter_ref} to lease {lease.lease_number}",
                    metadata={'renter_ref': renter_ref}
                )

        self.log_info("Co-renter added", account_id=account_id, lease_id=lease_id, renter_ref=renter_ref)
        return co_renter

    def remove_co_renter(self, account_id: int, lease_id: int, renter_ref: str,
                         actor_id: Optional[int] = None) -> None:
        """
        Raises:
            NotFoundError: If the lease or the co-renter doesn't exist in the account
        """
        lease = self.get_lease(account_id, lease_id)

        with self.datastore_guard("remove_co_renter", account_id=account_id, lease_id=lease_id):
            with transaction.atomic():
                deleted, _ = self.co_renter_repo.get_all(
                    account_id=account_id, lease_id=lease.id, renter_ref=renter_ref
                ).delete()
                if not deleted:
                    raise NotFoundError(
                        resource_type="LeaseCoRenter",
                        message=f"Co-renter {renter_ref} is not on this lease",
                        code="CO_RENTER_NOT_FOUND",
                    )
                log_action(
                    account_id=account_id,
                    actor_id=actor_id,
                    action=AuditLog.ACTION_CO_RENTER_REMOVE,
                    resource_type=AuditLog.RESOURCE_LEASE,
                    resource_id=lease.id,
                    description=f"Removed co-renter {renter_ref} from lease {lease.lease_number}",
                    metadata={'renter_ref': renter_ref}
                )

        self.log_info("Co-renter removed", account_id=account_id, lease_id=lease_id, renter_ref=renter_ref)

    def list_co_renters(self, account_id: int, lease_id: int) -> List[LeaseCoRenter]:
        lease = self.get_lease(account_id, lease_id)
        return list(self.co_renter_repo.for_lease(account_id, lease.id))

    def _co_renter_exists(self, lease_id: int, renter_ref: str) -> AlreadyExistsError:
        return AlreadyExistsError(
            message="Co-renter already added to this lease",
            code="CO_RENTER_EXISTS",
            details={'lease_id': lease_id, 'renter_ref': renter_ref}
        )
