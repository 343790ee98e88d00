"""
Penalty assessment repository.
"""
from typing import Optional

from django.db.models import QuerySet

from core.repositories import BaseRepository
from .models import PenaltyAssessment


class PenaltyAssessmentRepository(BaseRepository[PenaltyAssessment]):
    """Repository for PenaltyAssessment model"""

    def __init__(self):
        super().__init__(PenaltyAssessment)

    def for_installment(self, installment_id: int) -> Optional[PenaltyAssessment]:
        return self.model.objects.filter(installment_id=installment_id).first()

    def search(self, account_id: int, lease_id=None, installment_id=None) -> QuerySet[PenaltyAssessment]:
        queryset = self.get_all(account_id=account_id).select_related('installment', 'installment__lease')
        if lease_id:
            queryset = queryset.filter(installment__lease_id=lease_id)
        if installment_id:
            queryset = queryset.filter(installment_id=installment_id)
        return queryset.order_by('-calculated_on', '-id')
