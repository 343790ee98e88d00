from django.contrib import admin
from .models import SecurityDeposit, DepositMovement


class DepositMovementInline(admin.TabularInline):
    model = DepositMovement
    extra = 0
    fields = ['type', 'amount', 'payment', 'installment', 'note', 'created_at']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(SecurityDeposit)
class SecurityDepositAdmin(admin.ModelAdmin):
    list_display = ['lease', 'target_amount', 'collected_amount', 'held_amount', 'currency', 'collected_at']
    search_fields = ['lease__lease_number', 'lease__renter_ref']
    readonly_fields = [f.name for f in SecurityDeposit._meta.fields]
    inlines = [DepositMovementInline]

    def has_add_permission(self, request):
        return False
