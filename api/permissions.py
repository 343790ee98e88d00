"""
Multi-tenant permissions - ensure users can only access their own account data
"""
from rest_framework import permissions

from core.constants import UserRole


class IsAccountMember(permissions.BasePermission):
    """
    Permission to only allow users attached to an account, and only on objects of that account.
    """

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.account_id)

    def has_object_permission(self, request, view, obj):
        return getattr(obj, 'account_id', None) == request.user.account_id


class IsOwnerOrManager(permissions.BasePermission):
    """
    Permission to allow Owner and Manager roles
    """

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False

        return request.user.role in [UserRole.OWNER, UserRole.MANAGER]


class IsOwner(permissions.BasePermission):
    """Only the account owner may run account-wide operations"""

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        return request.user.role == UserRole.OWNER
