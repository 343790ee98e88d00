"""
Document repositories - counter rows and issued documents.
"""
from django.db import transaction
from django.db.models import F, QuerySet

from core.repositories import BaseRepository
from .models import DocumentCounter, RentalDocument


class DocumentCounterRepository(BaseRepository[DocumentCounter]):
    """Repository for DocumentCounter model"""

    def __init__(self):
        super().__init__(DocumentCounter)

    @transaction.atomic
    def increment(self, account_id: int, doc_type: str, period_key: str) -> int:
        """
        Atomically bump the counter for a key and return the new value.

        The row is created on first use; get_or_create recovers from a
        concurrent insert of the same key by re-reading the winner.
        """
        counter, _ = self.model.objects.select_for_update().get_or_create(
            account_id=account_id,
            doc_type=doc_type,
            period_key=period_key,
        )
        self.model.objects.filter(pk=counter.pk).update(last_number=F('last_number') + 1)
        counter.refresh_from_db(fields=['last_number'])
        return counter.last_number


class RentalDocumentRepository(BaseRepository[RentalDocument]):
    """Repository for RentalDocument model"""

    def __init__(self):
        super().__init__(RentalDocument)

    def get_by_account(self, account_id: int) -> QuerySet[RentalDocument]:
        return self.get_all(account_id=account_id).select_related('lease', 'payment')
