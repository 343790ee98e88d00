from django.contrib import admin
from .models import Installment


@admin.register(Installment)
class InstallmentAdmin(admin.ModelAdmin):
    """Installments change through allocations and penalty runs only"""
    list_display = ['lease', 'period_year', 'period_month', 'due_date', 'amount_rent', 'penalty_amount', 'amount_paid', 'status']
    list_filter = ['status', 'period_year']
    search_fields = ['lease__lease_number', 'lease__renter_ref']
    date_hierarchy = 'due_date'
    readonly_fields = [f.name for f in Installment._meta.fields]

    def has_add_permission(self, request):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('lease', 'account')
