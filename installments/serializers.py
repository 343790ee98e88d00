from rest_framework import serializers

from .models import Installment


class InstallmentSerializer(serializers.ModelSerializer):
    """Serializer for Installment"""
    lease_number = serializers.CharField(source='lease.lease_number', read_only=True)
    base_due = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    total_due = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    remaining_due = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Installment
        fields = [
            'id', 'lease', 'lease_number', 'period_year', 'period_month', 'due_date',
            'status', 'currency', 'amount_rent', 'amount_service', 'amount_other_fees',
            'penalty_amount', 'base_due', 'total_due', 'amount_paid', 'remaining_due',
            'paid_at', 'created_at', 'updated_at'
        ]
        read_only_fields = fields
