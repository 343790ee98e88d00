"""
Installment service - expands leases into billing periods.
"""
from datetime import date
from typing import List, Optional

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import Q

from audit.helpers import log_action
from audit.models import AuditLog
from core.constants import LeaseStatus, InstallmentStatus, DefaultLimits
from core.dto import InstallmentFilterDTO, PageDTO
from core.exceptions import NotFoundError, AlreadyExistsError, InvalidStateError
from core.services import BaseService
from core.validators import LeaseValidator
from leases.repositories import LeaseRepository
from .models import Installment
from .repositories import InstallmentRepository
from .schedule import compute_billing_periods, schedule_end


class InstallmentService(BaseService):
    """Service for installment generation and maintenance"""

    def __init__(self):
        super().__init__()
        self.installment_repo = InstallmentRepository()
        self.lease_repo = LeaseRepository()

    @property
    def horizon_months(self) -> int:
        return int(getattr(settings, 'RENTAL_OPEN_ENDED_HORIZON_MONTHS', DefaultLimits.OPEN_ENDED_HORIZON_MONTHS))

    def _load_billable_lease(self, account_id: int, lease_id: int):
        lease = self.lease_repo.get_for_account(account_id, lease_id)
        if not lease:
            raise NotFoundError(resource_type="Lease", resource_id=lease_id)
        if lease.status in LeaseStatus.CLOSED:
            raise InvalidStateError(
                message=f"Cannot generate installments for a {lease.status.lower()} lease",
                code="LEASE_CLOSED",
                details={'lease_id': lease_id, 'status': lease.status}
            )
        LeaseValidator.validate_billing_terms(lease)
        return lease

    def _build(self, lease, periods) -> List[Installment]:
        return [
            Installment(
                account_id=lease.account_id,
                lease=lease,
                period_year=period.period_year,
                period_month=period.period_month,
                due_date=period.due_date,
                status=InstallmentStatus.DUE,
                currency=lease.currency,
                amount_rent=lease.rent_amount,
                amount_service=lease.service_charge_amount,
            )
            for period in periods
        ]

    def _periods_for(self, lease, today: date):
        until = schedule_end(lease.start_date, lease.end_date, today, self.horizon_months)
        return compute_billing_periods(lease.start_date, until, lease.billing_frequency, lease.due_day_of_month)

    def generate_installments(self, account_id: int, lease_id: int, actor_id: Optional[int] = None,
                              today: Optional[date] = None) -> List[Installment]:
        """
        Create one installment per billing period of the lease.

        Raises:
            NotFoundError: If the lease doesn't exist in the account
            ValidationError: If billing terms are missing or unsupported
            InvalidStateError: If the lease is ended or canceled
            AlreadyExistsError: If any computed period already exists
        """
        today = self.today(today)
        lease = self._load_billable_lease(account_id, lease_id)
        periods = self._periods_for(lease, today)

        existing = self.installment_repo.existing_periods(lease.id)
        clashes = [(p.period_year, p.period_month) for p in periods if (p.period_year, p.period_month) in existing]
        if clashes:
            raise AlreadyExistsError(
                message="Installments already exist for this lease",
                code="INSTALLMENTS_EXIST",
                details={'periods': [f"{y}-{m:02d}" for y, m in clashes]}
            )

        installments = self._persist(lease, periods, actor_id, "generate_installments")
        self.log_info("Installments generated", account_id=account_id, lease_id=lease_id, count=len(installments))
        return installments

    def extend_installments(self, account_id: int, lease_id: int, actor_id: Optional[int] = None,
                            today: Optional[date] = None) -> List[Installment]:
        """Create only the billing periods not yet present (roll-forward of open-ended leases)"""
        today = self.today(today)
        lease = self._load_billable_lease(account_id, lease_id)
        existing = self.installment_repo.existing_periods(lease.id)
        missing = [
            p for p in self._periods_for(lease, today)
            if (p.period_year, p.period_month) not in existing
        ]
        if not missing:
            return []

        installments = self._persist(lease, missing, actor_id, "extend_installments")
        self.log_info("Installments extended", account_id=account_id, lease_id=lease_id, count=len(installments))
        return installments

    def _persist(self, lease, periods, actor_id, operation: str) -> List[Installment]:
        with self.datastore_guard(operation, account_id=lease.account_id, lease_id=lease.id):
            try:
                with transaction.atomic():
                    installments = self.installment_repo.bulk_create(self._build(lease, periods))
                    log_action(
                        account_id=lease.account_id,
                        actor_id=actor_id,
                        action=AuditLog.ACTION_GENERATE,
                        resource_type=AuditLog.RESOURCE_LEASE,
                        resource_id=lease.id,
                        description=f"Generated {len(periods)} installments for lease {lease.lease_number}",
                        metadata={
                            'first_period': f"{periods[0].period_year}-{periods[0].period_month:02d}",
                            'last_period': f"{periods[-1].period_year}-{periods[-1].period_month:02d}",
                        }
                    )
            except IntegrityError:
                # A concurrent generation inserted the same periods first
                raise AlreadyExistsError(
                    message="Installments already exist for this lease",
                    code="INSTALLMENTS_EXIST",
                    details={'lease_id': lease.id}
                )
        # bulk_create does not return primary keys on every backend
        created = Q()
        for period in periods:
            created |= Q(period_year=period.period_year, period_month=period.period_month)
        return list(self.installment_repo.for_lease(lease.account_id, lease.id).filter(created))

    def get_installment(self, account_id: int, installment_id: int) -> Installment:
        installment = self.installment_repo.get_for_account(account_id, installment_id)
        if not installment:
            raise NotFoundError(resource_type="Installment", resource_id=installment_id)
        return installment

    def list_installments(self, account_id: int, filters: InstallmentFilterDTO = None, page: int = 1,
                          page_size: Optional[int] = None, today: Optional[date] = None) -> PageDTO:
        queryset = self.installment_repo.search(account_id, filters or InstallmentFilterDTO(), self.today(today))
        return self.installment_repo.paginate(queryset, page, page_size)

    def refresh_overdue_statuses(self, today: Optional[date] = None, account_id: Optional[int] = None) -> int:
        """Move DUE installments past their due date to OVERDUE; PARTIAL and PAID are left alone"""
        today = self.today(today)
        with self.datastore_guard("refresh_overdue_statuses", account_id=account_id):
            updated = self.installment_repo.due_past(today, account_id).update(status=InstallmentStatus.OVERDUE)
        self.log_info("Overdue statuses refreshed", account_id=account_id, today=today, updated=updated)
        return updated

    def delete_installments(self, account_id: int, lease_id: int, actor_id: Optional[int] = None) -> int:
        """
        Remove the whole schedule of a lease so it can be regenerated.
        Refused once any installment has received money.
        """
        lease = self.lease_repo.get_for_account(account_id, lease_id)
        if not lease:
            raise NotFoundError(resource_type="Lease", resource_id=lease_id)

        with self.datastore_guard("delete_installments", account_id=account_id, lease_id=lease_id):
            with transaction.atomic():
                installments = self.installment_repo.lock_for_lease(account_id, lease_id)
                if any(i.allocations.exists() or i.deposit_movements.exists() for i in installments):
                    raise InvalidStateError(
                        message="Installments with allocated payments cannot be deleted",
                        code="INSTALLMENTS_HAVE_PAYMENTS",
                        details={'lease_id': lease_id}
                    )
                count = len(installments)
                self.installment_repo.get_all(id__in=[i.id for i in installments]).delete()
                log_action(
                    account_id=account_id,
                    actor_id=actor_id,
                    action=AuditLog.ACTION_UPDATE,
                    resource_type=AuditLog.RESOURCE_LEASE,
                    resource_id=lease_id,
                    description=f"Deleted {count} installments of lease {lease.lease_number}",
                )

        self.log_info("Installments deleted", account_id=account_id, lease_id=lease_id, count=count)
        return count
