"""
Payment repositories - ledger rows and their allocations.
"""
from decimal import Decimal
from typing import Optional

from django.db.models import QuerySet

from core.dto import PaymentFilterDTO
from core.repositories import BaseRepository
from .models import Payment, PaymentAllocation


class PaymentRepository(BaseRepository[Payment]):
    """Repository for Payment model"""

    def __init__(self):
        super().__init__(Payment)

    def get_by_idempotency_key(self, account_id: int, idempotency_key: str) -> Optional[Payment]:
        return self.model.objects.filter(account_id=account_id, idempotency_key=idempotency_key).first()

    def search(self, account_id: int, filters: PaymentFilterDTO) -> QuerySet[Payment]:
        queryset = self.get_all(account_id=account_id).select_related('lease')
        if filters.lease_id:
            queryset = queryset.filter(lease_id=filters.lease_id)
        if filters.renter_ref:
            queryset = queryset.filter(renter_ref=filters.renter_ref)
        if filters.status:
            queryset = queryset.filter(status=filters.status)
        if filters.method:
            queryset = queryset.filter(method=filters.method)
        if filters.start_date:
            queryset = queryset.filter(initiated_at__date__gte=filters.start_date)
        if filters.end_date:
            queryset = queryset.filter(initiated_at__date__lte=filters.end_date)
        return queryset.order_by('-initiated_at', '-id')


class PaymentAllocationRepository(BaseRepository[PaymentAllocation]):
    """Repository for PaymentAllocation model"""

    def __init__(self):
        super().__init__(PaymentAllocation)

    def allocated_for_payment(self, payment_id: int) -> Decimal:
        return self.sum_amount(payment_id=payment_id)

    def allocated_for_installment(self, installment_id: int) -> Decimal:
        return self.sum_amount(installment_id=installment_id)

    def has_allocations(self, payment_id: int) -> bool:
        return self.exists(payment_id=payment_id)

    def for_payment(self, payment_id: int) -> QuerySet[PaymentAllocation]:
        return self.get_all(payment_id=payment_id).order_by('created_at', 'id')
