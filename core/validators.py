"""
Validation utilities and validators.
Centralized validation logic following single responsibility principle.
"""
from decimal import Decimal

from core.constants import BillingFrequency, PenaltyMode, PaymentMethod
from core.exceptions import ValidationError
from core.money import ZERO, to_decimal, to_rate


class MoneyValidator:
    """Validates monetary amounts"""

    MAX_AMOUNT = Decimal('999999999999.99')

    @staticmethod
    def validate_non_negative(amount, field_name: str) -> Decimal:
        amount = to_decimal(amount, field_name)
        if amount < ZERO:
            raise ValidationError(
                message=f"{field_name} cannot be negative",
                code="NEGATIVE_AMOUNT",
                details={'field': field_name}
            )
        if amount > MoneyValidator.MAX_AMOUNT:
            raise ValidationError(
                message=f"{field_name} exceeds maximum allowed",
                code="AMOUNT_TOO_LARGE",
                details={'field': field_name}
            )
        return amount

    @staticmethod
    def validate_positive(amount, field_name: str) -> Decimal:
        amount = MoneyValidator.validate_non_negative(amount, field_name)
        if amount == ZERO:
            raise ValidationError(
                message=f"{field_name} must be greater than zero",
                code="NON_POSITIVE_AMOUNT",
                details={'field': field_name}
            )
        return amount


class LeaseValidator:
    """Validates lease billing terms"""

    @staticmethod
    def validate_billing_terms(data):
        missing = [
            name for name in ('start_date', 'rent_amount', 'billing_frequency', 'due_day_of_month')
            if getattr(data, name, None) in (None, '')
        ]
        if missing:
            raise ValidationError(
                message=f"Missing required billing fields: {', '.join(missing)}",
                code="MISSING_BILLING_FIELDS",
                details={'fields': missing}
            )

        if data.billing_frequency not in BillingFrequency.MONTHS:
            raise ValidationError(
                message=f"Unsupported billing frequency: {data.billing_frequency}",
                code="UNSUPPORTED_FREQUENCY",
                details={'billing_frequency': data.billing_frequency}
            )

        if not 1 <= int(data.due_day_of_month) <= 31:
            raise ValidationError(
                message="Due day of month must be between 1 and 31",
                code="INVALID_DUE_DAY"
            )

        if data.end_date and data.end_date <= data.start_date:
            raise ValidationError(
                message="End date must be after start date",
                code="INVALID_END_DATE"
            )

    @staticmethod
    def validate_penalty_terms(data):
        if data.penalty_mode not in dict(PenaltyMode.CHOICES):
            raise ValidationError(
                message=f"Unsupported penalty mode: {data.penalty_mode}",
                code="UNSUPPORTED_PENALTY_MODE"
            )
        if int(data.penalty_grace_days or 0) < 0:
            raise ValidationError(
                message="Penalty grace days cannot be negative",
                code="INVALID_GRACE_DAYS"
            )
        rate = to_rate(data.penalty_rate, 'penalty_rate')
        if rate < 0 or rate > 1:
            raise ValidationError(
                message="Penalty rate must be a fraction between 0 and 1",
                code="INVALID_PENALTY_RATE"
            )


class PaymentValidator:
    """Validates payment facts"""

    @staticmethod
    def validate_method_fields(data):
        if data.method not in PaymentMethod.REQUIRED_FIELDS:
            raise ValidationError(
                message=f"Unsupported payment method: {data.method}",
                code="UNSUPPORTED_PAYMENT_METHOD"
            )
        missing = [name for name in PaymentMethod.REQUIRED_FIELDS[data.method] if not getattr(data, name, '')]
        if missing:
            raise ValidationError(
                message=f"{data.method} payments require: {', '.join(missing)}",
                code="MISSING_METHOD_FIELDS",
                details={'fields': missing}
            )

    @staticmethod
    def validate_idempotency_key(key: str):
        if not key or not key.strip():
            raise ValidationError(
                message="Idempotency key is required",
                code="MISSING_IDEMPOTENCY_KEY"
            )
        if len(key) > 128:
            raise ValidationError(
                message="Idempotency key must be at most 128 characters",
                code="IDEMPOTENCY_KEY_TOO_LONG"
            )
