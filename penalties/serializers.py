from rest_framework import serializers

from .models import PenaltyAssessment


class PenaltyAssessmentSerializer(serializers.ModelSerializer):
    """Serializer for PenaltyAssessment"""
    lease = serializers.IntegerField(source='installment.lease_id', read_only=True)
    period_year = serializers.IntegerField(source='installment.period_year', read_only=True)
    period_month = serializers.IntegerField(source='installment.period_month', read_only=True)

    class Meta:
        model = PenaltyAssessment
        fields = [
            'id', 'installment', 'lease', 'period_year', 'period_month', 'calculated_on', 'days_late',
            'mode', 'rate', 'fixed_amount', 'amount', 'currency',
            'is_manual_override', 'override_reason', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class PenaltyRunSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


class PenaltyTargetSerializer(serializers.Serializer):
    installment_id = serializers.IntegerField()
    date = serializers.DateField(required=False)


class PenaltyOverrideSerializer(serializers.Serializer):
    installment_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    reason = serializers.CharField()
