"""
Lease repository - Data access layer for the Lease Registry.
"""
from django.db.models import QuerySet, Q
from core.constants import LeaseStatus
from core.repositories import BaseRepository
from .models import Lease, LeaseCoRenter


class LeaseRepository(BaseRepository[Lease]):
    """Repository for Lease model"""

    def __init__(self):
        super().__init__(Lease)

    def get_by_account(self, account_id: int) -> QuerySet[Lease]:
        return self.get_all(account_id=account_id)

    def lease_number_taken(self, account_id: int, lease_number: str) -> bool:
        return self.exists(account_id=account_id, lease_number=lease_number)

    def search(self, account_id: int, status=None, renter_ref=None, property_ref=None, search=None) -> QuerySet[Lease]:
        queryset = self.get_by_account(account_id)
        if status:
            queryset = queryset.filter(status=status)
        if renter_ref:
            queryset = queryset.filter(renter_ref=renter_ref)
        if property_ref:
            queryset = queryset.filter(property_ref=property_ref)
        if search:
            queryset = queryset.filter(
                Q(lease_number__icontains=search) | Q(notes__icontains=search)
            )
        return queryset.order_by('-created_at', '-id')

    def get_open_ended_active(self, account_id: int = None) -> QuerySet[Lease]:
        """Active leases without an end date (their schedule is rolled forward periodically)"""
        filters = {'status': LeaseStatus.ACTIVE, 'end_date__isnull': True}
        if account_id:
            filters['account_id'] = account_id
        return self.get_all(**filters)


class LeaseCoRenterRepository(BaseRepository[LeaseCoRenter]):
    """Repository for LeaseCoRenter model"""

    def __init__(self):
        super().__init__(LeaseCoRenter)

    def for_lease(self, account_id: int, lease_id: int) -> QuerySet[LeaseCoRenter]:
        return self.get_all(account_id=account_id, lease_id=lease_id).order_by('created_at', 'id')

    def get_by_ref(self, account_id: int, lease_id: int, renter_ref: str):
        return self.get_all(account_id=account_id, lease_id=lease_id, renter_ref=renter_ref).first()
