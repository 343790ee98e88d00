from django.contrib import admin
from .models import Account
from users.models import User


class UserInline(admin.TabularInline):
    model = User
    fields = ['username', 'email', 'role', 'is_active']
    extra = 0
    show_change_link = True


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    """
    Account (tenant organisation) management.

    Create the account first, then create its OWNER user from the Users
    section. Every lease, payment and document belongs to exactly one account.
    """
    list_display = ['name', 'default_currency', 'is_active', 'lease_count', 'created_at']
    list_filter = ['is_active', 'default_currency', 'created_at']
    search_fields = ['name', 'phone']
    list_editable = ['is_active']
    inlines = [UserInline]

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'default_currency', 'is_active'),
        }),
        ('Contact', {
            'fields': ('phone', 'address'),
            'classes': ('collapse',)
        }),
    )

    def lease_count(self, obj):
        return obj.leases.count()
    lease_count.short_description = 'Leases'
