"""
Custom filters for multi-tenant data
"""
from rest_framework import filters


class AccountFilterBackend(filters.BaseFilterBackend):
    """
    Filter queryset to only show objects belonging to the user's account
    """

    def filter_queryset(self, request, queryset, view):
        if request.user and request.user.is_authenticated and request.user.account_id:
            return queryset.filter(account_id=request.user.account_id)
        return queryset.none()
