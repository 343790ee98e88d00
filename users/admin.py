from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Owners and managers. The account is required for API access: every
    rental operation runs against request.user.account.
    """
    list_display = ['username', 'email', 'account', 'role', 'is_active', 'is_staff', 'date_joined']
    list_filter = ['role', 'is_active', 'is_staff', 'account']
    search_fields = ['username', 'email', 'account__name', 'phone']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Account Information', {
            'fields': ('account', 'role', 'phone'),
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Account Information', {
            'fields': ('account', 'role', 'phone'),
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        """Make account readonly for existing users to prevent breaking relationships"""
        readonly = list(super().get_readonly_fields(request, obj))
        if obj:
            readonly.append('account')
        return readonly
