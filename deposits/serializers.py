from rest_framework import serializers

from .models import SecurityDeposit, DepositMovement


class DepositMovementSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source='get_type_display', read_only=True)

    class Meta:
        model = DepositMovement
        fields = ['id', 'type', 'type_display', 'amount', 'payment', 'installment', 'note', 'created_by', 'created_at']
        read_only_fields = fields


class SecurityDepositSerializer(serializers.ModelSerializer):
    is_collected = serializers.ReadOnlyField()
    movements = DepositMovementSerializer(many=True, read_only=True)

    class Meta:
        model = SecurityDeposit
        fields = [
            'id', 'lease', 'currency', 'target_amount', 'collected_amount', 'held_amount',
            'is_collected', 'collected_at', 'movements', 'updated_at'
        ]
        read_only_fields = fields


class DepositMovementRequestSerializer(serializers.Serializer):
    """Input for collect / refund / deduct"""
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    note = serializers.CharField(required=False, allow_blank=True, default='')
    payment_id = serializers.IntegerField(required=False, allow_null=True)
    installment_id = serializers.IntegerField(required=False, allow_null=True)
