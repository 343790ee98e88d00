"""
Fixed-point money helpers.
All monetary values are Decimal quantized to cents; floats are rejected.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from core.exceptions import ValidationError

ZERO = Decimal('0.00')
CENT = Decimal('0.01')
RATE_PLACES = Decimal('0.0001')


def to_decimal(value, field_name: str = 'amount') -> Decimal:
    """Convert an int, str or Decimal to a Decimal quantized to cents"""
    if value is None:
        raise ValidationError(
            message=f"{field_name} is required",
            code="MISSING_AMOUNT",
            details={'field': field_name}
        )
    if isinstance(value, float):
        # Binary floats cannot represent cents exactly
        raise ValidationError(
            message=f"{field_name} must be a decimal string or integer, not a float",
            code="FLOAT_AMOUNT",
            details={'field': field_name}
        )
    try:
        return quantize(Decimal(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(
            message=f"{field_name} is not a valid amount",
            code="INVALID_AMOUNT",
            details={'field': field_name, 'value': str(value)}
        )


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values) -> Decimal:
    total = ZERO
    for value in values:
        total += value or ZERO
    return total


def to_rate(value, field_name: str = 'rate') -> Decimal:
    """Convert a penalty rate (a fraction such as 0.10) to a 4-place Decimal"""
    if value is None or value == '':
        return Decimal('0.0000')
    if isinstance(value, float):
        raise ValidationError(
            message=f"{field_name} must be a decimal string or integer, not a float",
            code="FLOAT_RATE",
            details={'field': field_name}
        )
    try:
        return Decimal(value).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(
            message=f"{field_name} is not a valid rate",
            code="INVALID_RATE",
            details={'field': field_name, 'value': str(value)}
        )
