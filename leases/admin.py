from django.contrib import admin
from .models import Lease, LeaseCoRenter


class LeaseCoRenterInline(admin.TabularInline):
    model = LeaseCoRenter
    fields = ['renter_ref', 'created_by', 'created_at']
    readonly_fields = fields
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Lease)
class LeaseAdmin(admin.ModelAdmin):
    inlines = [LeaseCoRenterInline]
    list_display = ['lease_number', 'account', 'renter_ref', 'property_ref', 'status', 'start_date', 'end_date', 'rent_amount', 'currency']
    list_filter = ['status', 'billing_frequency', 'penalty_mode']
    search_fields = ['lease_number', 'renter_ref', 'property_ref', 'account__name']
    readonly_fields = ['lease_number', 'created_by', 'created_at', 'updated_at']
    date_hierarchy = 'start_date'

    fieldsets = (
        ('Parties', {
            'fields': ('account', 'lease_number', 'property_ref', 'renter_ref', 'owner_ref', 'status')
        }),
        ('Billing', {
            'fields': ('start_date', 'end_date', 'billing_frequency', 'due_day_of_month', 'currency',
                       'rent_amount', 'service_charge_amount', 'security_deposit_amount')
        }),
        ('Penalty Policy', {
            'fields': ('penalty_grace_days', 'penalty_mode', 'penalty_rate', 'penalty_fixed_amount',
                       'penalty_cap', 'min_balance_threshold')
        }),
        ('Notes', {
            'fields': ('notes', 'created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('account')
