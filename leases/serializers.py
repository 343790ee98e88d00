from rest_framework import serializers

from core.constants import LeaseStatus, BillingFrequency, PenaltyMode
from core.dto import LeaseDTO
from .models import Lease, LeaseCoRenter


class LeaseSerializer(serializers.ModelSerializer):
    """Serializer for Lease (read side)"""
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    is_open_ended = serializers.ReadOnlyField()

    class Meta:
        model = Lease
        fields = [
            'id', 'lease_number', 'property_ref', 'renter_ref', 'owner_ref',
            'status', 'status_display', 'start_date', 'end_date', 'is_open_ended',
            'billing_frequency', 'due_day_of_month', 'currency',
            'rent_amount', 'service_charge_amount', 'security_deposit_amount',
            'penalty_grace_days', 'penalty_mode', 'penalty_rate', 'penalty_fixed_amount',
            'penalty_cap', 'min_balance_threshold', 'notes', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class LeaseListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list view"""

    class Meta:
        model = Lease
        fields = [
            'id', 'lease_number', 'renter_ref', 'property_ref', 'status',
            'start_date', 'end_date', 'rent_amount', 'currency'
        ]


class LeaseCreateSerializer(serializers.Serializer):
    """Input for lease creation; money arrives as decimal strings"""
    property_ref = serializers.CharField(max_length=64, required=False, allow_blank=True)
    renter_ref = serializers.CharField(max_length=64, required=False, allow_blank=True)
    owner_ref = serializers.CharField(max_length=64, required=False, allow_blank=True)
    lease_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=[LeaseStatus.DRAFT, LeaseStatus.ACTIVE], default=LeaseStatus.ACTIVE)
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)
    billing_frequency = serializers.ChoiceField(choices=BillingFrequency.CHOICES, default=BillingFrequency.MONTHLY)
    due_day_of_month = serializers.IntegerField(min_value=1, max_value=31, default=5)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    rent_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    service_charge_amount = serializers.DecimalField(max_digits=14, decimal_places=2, default=0)
    security_deposit_amount = serializers.DecimalField(max_digits=14, decimal_places=2, default=0)
    penalty_grace_days = serializers.IntegerField(min_value=0, default=0)
    penalty_mode = serializers.ChoiceField(choices=PenaltyMode.CHOICES, default=PenaltyMode.PERCENT_OF_BALANCE)
    penalty_rate = serializers.DecimalField(max_digits=7, decimal_places=4, default=0)
    penalty_fixed_amount = serializers.DecimalField(max_digits=14, decimal_places=2, default=0)
    penalty_cap = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    min_balance_threshold = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def to_dto(self) -> LeaseDTO:
        data = dict(self.validated_data)
        data['lease_number'] = data.get('lease_number') or None
        data['currency'] = data.get('currency') or None
        return LeaseDTO(**data)


class LeaseStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=LeaseStatus.CHOICES)


class LeaseCoRenterSerializer(serializers.ModelSerializer):

    class Meta:
        model = LeaseCoRenter
        fields = ['id', 'lease', 'renter_ref', 'created_at']
        read_only_fields = fields


class CoRenterRequestSerializer(serializers.Serializer):
    renter_ref = serializers.CharField(max_length=64)
