from rest_framework import serializers

from core.constants import PaymentMethod, PaymentStatus, MobileMoneyOperator
from core.dto import PaymentDTO, AllocationRequestDTO
from .models import Payment, PaymentAllocation


class PaymentSerializer(serializers.ModelSerializer):
    """Serializer for Payment"""
    method_display = serializers.CharField(source='get_method_display', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'idempotency_key', 'lease', 'renter_ref', 'method', 'method_display',
            'mm_operator', 'mm_phone', 'psp_name', 'psp_transaction_id', 'psp_reference', 'check_number',
            'amount', 'currency', 'status', 'initiated_at', 'succeeded_at', 'failed_at', 'canceled_at'
        ]
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    idempotency_key = serializers.CharField(max_length=128, required=False)
    method = serializers.ChoiceField(choices=PaymentMethod.CHOICES)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    lease_id = serializers.IntegerField(required=False, allow_null=True)
    renter_ref = serializers.CharField(max_length=64, required=False, allow_blank=True)
    mm_operator = serializers.ChoiceField(choices=MobileMoneyOperator.CHOICES, required=False, allow_blank=True)
    mm_phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    psp_name = serializers.CharField(max_length=64, required=False, allow_blank=True)
    psp_transaction_id = serializers.CharField(max_length=128, required=False, allow_blank=True)
    psp_reference = serializers.CharField(max_length=128, required=False, allow_blank=True)
    check_number = serializers.CharField(max_length=64, required=False, allow_blank=True)

    def to_dto(self, idempotency_key=None) -> PaymentDTO:
        data = dict(self.validated_data)
        data['idempotency_key'] = data.get('idempotency_key') or idempotency_key or ''
        return PaymentDTO(**data)


class PaymentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PaymentStatus.CHOICES)


class PaymentAllocationSerializer(serializers.ModelSerializer):
    period_year = serializers.IntegerField(source='installment.period_year', read_only=True)
    period_month = serializers.IntegerField(source='installment.period_month', read_only=True)

    class Meta:
        model = PaymentAllocation
        fields = ['id', 'payment', 'installment', 'period_year', 'period_month', 'amount', 'currency', 'created_at']
        read_only_fields = fields


class AllocationRequestSerializer(serializers.Serializer):
    """installment_ids omitted = every unpaid installment of the payment's lease"""
    installment_ids = serializers.ListField(child=serializers.IntegerField(), required=False, allow_empty=False)
    amounts = serializers.DictField(
        child=serializers.DecimalField(max_digits=14, decimal_places=2), required=False
    )

    def validate_amounts(self, value):
        try:
            return {int(key): amount for key, amount in value.items()}
        except ValueError:
            raise serializers.ValidationError("Keys must be installment ids")

    def to_dto(self) -> AllocationRequestDTO:
        return AllocationRequestDTO(
            installment_ids=self.validated_data.get('installment_ids'),
            amounts=self.validated_data.get('amounts', {}),
        )
