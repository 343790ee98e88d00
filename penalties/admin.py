from django.contrib import admin
from .models import PenaltyAssessment


@admin.register(PenaltyAssessment)
class PenaltyAssessmentAdmin(admin.ModelAdmin):
    list_display = ['installment', 'calculated_on', 'days_late', 'mode', 'amount', 'currency', 'is_manual_override']
    list_filter = ['mode', 'is_manual_override']
    search_fields = ['installment__lease__lease_number', 'override_reason']
    readonly_fields = [f.name for f in PenaltyAssessment._meta.fields]

    def has_add_permission(self, request):
        return False
