"""
Deposit repositories - deposits and their movement ledger.
"""
from decimal import Decimal
from typing import Optional

from django.db.models import QuerySet

from core.constants import DepositMovementType
from core.repositories import BaseRepository
from .models import SecurityDeposit, DepositMovement


class SecurityDepositRepository(BaseRepository[SecurityDeposit]):
    """Repository for SecurityDeposit model"""

    def __init__(self):
        super().__init__(SecurityDeposit)

    def get_for_lease(self, account_id: int, lease_id: int) -> Optional[SecurityDeposit]:
        return self.model.objects.filter(account_id=account_id, lease_id=lease_id).select_related('lease').first()

    def lock_for_lease(self, account_id: int, lease_id: int) -> Optional[SecurityDeposit]:
        return self.model.objects.select_for_update().filter(account_id=account_id, lease_id=lease_id).first()


class DepositMovementRepository(BaseRepository[DepositMovement]):
    """Repository for DepositMovement model"""

    def __init__(self):
        super().__init__(DepositMovement)

    def for_deposit(self, deposit_id: int) -> QuerySet[DepositMovement]:
        return self.get_all(deposit_id=deposit_id).order_by('created_at', 'id')

    def collected_total(self, deposit_id: int) -> Decimal:
        return self.sum_amount(deposit_id=deposit_id, type=DepositMovementType.COLLECT)

    def outflow_total(self, deposit_id: int) -> Decimal:
        return self.sum_amount(deposit_id=deposit_id, type__in=DepositMovementType.OUTFLOWS)
