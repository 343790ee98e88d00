"""
Installment repository - Data access layer for billing periods.
"""
from datetime import date
from typing import List, Set, Tuple

from django.db.models import QuerySet

from core.constants import InstallmentStatus
from core.dto import InstallmentFilterDTO
from core.repositories import BaseRepository
from .models import Installment


class InstallmentRepository(BaseRepository[Installment]):
    """Repository for Installment model"""

    def __init__(self):
        super().__init__(Installment)

    def existing_periods(self, lease_id: int) -> Set[Tuple[int, int]]:
        return set(
            self.get_all(lease_id=lease_id).values_list('period_year', 'period_month')
        )

    def for_lease(self, account_id: int, lease_id: int) -> QuerySet[Installment]:
        return self.get_all(account_id=account_id, lease_id=lease_id).order_by('due_date', 'id')

    def search(self, account_id: int, filters: InstallmentFilterDTO, today: date) -> QuerySet[Installment]:
        queryset = self.get_all(account_id=account_id).select_related('lease')
        if filters.lease_id:
            queryset = queryset.filter(lease_id=filters.lease_id)
        if filters.status:
            queryset = queryset.filter(status=filters.status)
        if filters.year:
            queryset = queryset.filter(period_year=filters.year)
        if filters.month:
            queryset = queryset.filter(period_month=filters.month)
        if filters.overdue:
            queryset = queryset.filter(due_date__lt=today, status__in=InstallmentStatus.OPEN)
        return queryset.order_by('due_date', 'id')

    def lock_candidates(self, account_id: int, lease_id=None, installment_ids=None) -> List[Installment]:
        """
        Row-lock the allocation candidates of a lease, always in id order so
        concurrent allocations acquire locks in the same sequence.
        """
        queryset = self.model.objects.select_for_update().filter(account_id=account_id)
        if lease_id is not None:
            queryset = queryset.filter(lease_id=lease_id)
        if installment_ids is None:
            queryset = queryset.exclude(status=InstallmentStatus.PAID)
        else:
            queryset = queryset.filter(id__in=installment_ids)
        return list(queryset.order_by('id'))

    def lock_for_lease(self, account_id: int, lease_id: int) -> List[Installment]:
        return list(
            self.model.objects.select_for_update().filter(account_id=account_id, lease_id=lease_id).order_by('id')
        )

    def lock(self, installment_id: int) -> Installment:
        return self.model.objects.select_for_update().filter(id=installment_id).first()

    def due_past(self, today: date, account_id: int = None) -> QuerySet[Installment]:
        """DUE installments whose due date has passed"""
        queryset = self.get_all(status=InstallmentStatus.DUE, due_date__lt=today)
        if account_id:
            queryset = queryset.filter(account_id=account_id)
        return queryset

    def penalty_candidates(self, today: date, account_id: int = None) -> QuerySet[Installment]:
        """Unpaid installments already past their due date"""
        queryset = self.get_all(status__in=InstallmentStatus.OPEN, due_date__lt=today)
        if account_id:
            queryset = queryset.filter(account_id=account_id)
        return queryset.order_by('id')
