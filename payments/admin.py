from django.contrib import admin
from .models import Payment, PaymentAllocation


class PaymentAllocationInline(admin.TabularInline):
    model = PaymentAllocation
    extra = 0
    fields = ['installment', 'amount', 'currency', 'created_at']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['id', 'account', 'lease', 'method', 'amount', 'currency', 'status', 'initiated_at']
    list_filter = ['status', 'method', 'currency']
    search_fields = ['idempotency_key', 'renter_ref', 'lease__lease_number', 'psp_transaction_id', 'check_number']
    date_hierarchy = 'initiated_at'
    readonly_fields = [f.name for f in Payment._meta.fields]
    inlines = [PaymentAllocationInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('lease', 'account')
