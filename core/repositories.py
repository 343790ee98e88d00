"""
Repository pattern implementation.
Abstracts data access and provides a clean interface for domain services.
Every lookup is scoped to an account so tenant isolation lives in one place.
"""
from typing import Generic, TypeVar, Optional, List
from django.core.paginator import Paginator
from django.db.models import QuerySet, Model, Sum
from django.db import transaction
import logging

from core.constants import Pagination
from core.dto import PageDTO
from core.money import ZERO

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=Model)


class BaseRepository(Generic[T]):
    """
    Base repository providing common account-scoped operations.
    Follows Repository pattern for data access abstraction.
    """

    def __init__(self, model: type[T]):
        self.model = model

    def get_by_id(self, id: int, **filters) -> Optional[T]:
        """Get a single instance by ID"""
        return self.model.objects.filter(id=id, **filters).first()

    def get_for_account(self, account_id: int, id: int) -> Optional[T]:
        """Get an instance by ID only if it belongs to the account"""
        return self.get_by_id(id, account_id=account_id)

    def lock_for_account(self, account_id: int, id: int) -> Optional[T]:
        """Row-lock an instance for the rest of the current transaction"""
        return self.model.objects.select_for_update().filter(id=id, account_id=account_id).first()

    def get_all(self, **filters) -> QuerySet[T]:
        """Get all instances matching filters"""
        return self.model.objects.filter(**filters)

    def create(self, **kwargs) -> T:
        """Create a new instance"""
        return self.model.objects.create(**kwargs)

    def update(self, instance: T, **kwargs) -> T:
        """Update an existing instance"""
        for key, value in kwargs.items():
            setattr(instance, key, value)
        update_fields = list(kwargs.keys())
        if any(f.name == 'updated_at' for f in self.model._meta.concrete_fields):
            update_fields.append('updated_at')
        instance.save(update_fields=update_fields)
        return instance

    def exists(self, **filters) -> bool:
        """Check if instance exists"""
        return self.model.objects.filter(**filters).exists()

    def count(self, **filters) -> int:
        """Count instances matching filters"""
        return self.model.objects.filter(**filters).count()

    def sum_amount(self, field_name: str = 'amount', **filters):
        """Sum a money column, returning zero for an empty set"""
        total = self.model.objects.filter(**filters).aggregate(total=Sum(field_name))['total']
        return total if total is not None else ZERO

    @transaction.atomic
    def bulk_create(self, instances: List[T]) -> List[T]:
        """Bulk create instances"""
        return self.model.objects.bulk_create(instances)

    def paginate(self, queryset: QuerySet[T], page: int = 1, page_size: int = None) -> PageDTO:
        """Slice a queryset into a PageDTO"""
        page_size = min(page_size or Pagination.DEFAULT_PAGE_SIZE, Pagination.MAX_PAGE_SIZE)
        paginator = Paginator(queryset, page_size)
        page_obj = paginator.get_page(page)
        return PageDTO(
            items=list(page_obj.object_list),
            page=page_obj.number,
            page_size=page_size,
            total=paginator.count,
            total_pages=paginator.num_pages,
        )
