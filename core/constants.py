"""
Application-wide constants.
Centralized constants following DRY principle.
"""

# User Roles
class UserRole:
    OWNER = 'OWNER'
    MANAGER = 'MANAGER'

    CHOICES = [
        (OWNER, 'Owner'),
        (MANAGER, 'Manager'),
    ]


# Error kinds (machine-readable, mapped to HTTP at the API boundary)
class ErrorKind:
    NOT_FOUND = 'NOT_FOUND'
    ALREADY_EXISTS = 'ALREADY_EXISTS'
    INVALID_STATE = 'INVALID_STATE'
    CONCURRENCY_CONFLICT = 'CONCURRENCY_CONFLICT'
    FATAL = 'FATAL'


# Lease Status
class LeaseStatus:
    DRAFT = 'DRAFT'
    ACTIVE = 'ACTIVE'
    SUSPENDED = 'SUSPENDED'
    ENDED = 'ENDED'
    CANCELED = 'CANCELED'

    CHOICES = [
        (DRAFT, 'Draft'),
        (ACTIVE, 'Active'),
        (SUSPENDED, 'Suspended'),
        (ENDED, 'Ended'),
        (CANCELED, 'Canceled'),
    ]

    TRANSITIONS = {
        DRAFT: [ACTIVE, CANCELED],
        ACTIVE: [SUSPENDED, ENDED, CANCELED],
        SUSPENDED: [ACTIVE, ENDED, CANCELED],
        ENDED: [],
        CANCELED: [],
    }

    # Leases in these states no longer produce billing periods
    CLOSED = [ENDED, CANCELED]


# Billing Frequency
class BillingFrequency:
    MONTHLY = 'MONTHLY'
    QUARTERLY = 'QUARTERLY'
    SEMIANNUAL = 'SEMIANNUAL'
    ANNUAL = 'ANNUAL'

    CHOICES = [
        (MONTHLY, 'Monthly'),
        (QUARTERLY, 'Quarterly'),
        (SEMIANNUAL, 'Semiannual'),
        (ANNUAL, 'Annual'),
    ]

    # Calendar months per billing period
    MONTHS = {
        MONTHLY: 1,
        QUARTERLY: 3,
        SEMIANNUAL: 6,
        ANNUAL: 12,
    }


# Penalty Mode
class PenaltyMode:
    FIXED_AMOUNT = 'FIXED_AMOUNT'
    PERCENT_OF_RENT = 'PERCENT_OF_RENT'
    PERCENT_OF_BALANCE = 'PERCENT_OF_BALANCE'

    CHOICES = [
        (FIXED_AMOUNT, 'Fixed amount'),
        (PERCENT_OF_RENT, 'Percent of rent'),
        (PERCENT_OF_BALANCE, 'Percent of balance'),
    ]


# Installment Status
class InstallmentStatus:
    DUE = 'DUE'
    PARTIAL = 'PARTIAL'
    OVERDUE = 'OVERDUE'
    PAID = 'PAID'

    CHOICES = [
        (DUE, 'Due'),
        (PARTIAL, 'Partial'),
        (OVERDUE, 'Overdue'),
        (PAID, 'Paid'),
    ]

    OPEN = [DUE, PARTIAL, OVERDUE]


# Payment Status
class PaymentStatus:
    PENDING = 'PENDING'
    SUCCESS = 'SUCCESS'
    FAILED = 'FAILED'
    CANCELED = 'CANCELED'

    CHOICES = [
        (PENDING, 'Pending'),
        (SUCCESS, 'Success'),
        (FAILED, 'Failed'),
        (CANCELED, 'Canceled'),
    ]

    TRANSITIONS = {
        PENDING: [SUCCESS, FAILED, CANCELED],
        SUCCESS: [CANCELED],
        FAILED: [],
        CANCELED: [],
    }

    # Timestamp field stamped on the first transition into each status
    TIMESTAMP_FIELDS = {
        SUCCESS: 'succeeded_at',
        FAILED: 'failed_at',
        CANCELED: 'canceled_at',
    }


# Payment Method
class PaymentMethod:
    CASH = 'CASH'
    BANK_TRANSFER = 'BANK_TRANSFER'
    MOBILE_MONEY = 'MOBILE_MONEY'
    CARD = 'CARD'
    CHECK = 'CHECK'

    CHOICES = [
        (CASH, 'Cash'),
        (BANK_TRANSFER, 'Bank transfer'),
        (MOBILE_MONEY, 'Mobile money'),
        (CARD, 'Card / PSP'),
        (CHECK, 'Check'),
    ]

    # Method-specific fields that must be present for each variant
    REQUIRED_FIELDS = {
        CASH: [],
        BANK_TRANSFER: [],
        MOBILE_MONEY: ['mm_operator', 'mm_phone'],
        CARD: ['psp_name', 'psp_transaction_id'],
        CHECK: ['check_number'],
    }


# Mobile money operators
class MobileMoneyOperator:
    ORANGE = 'ORANGE'
    MTN = 'MTN'
    MOOV = 'MOOV'
    WAVE = 'WAVE'

    CHOICES = [
        (ORANGE, 'Orange Money'),
        (MTN, 'MTN Mobile Money'),
        (MOOV, 'Moov Money'),
        (WAVE, 'Wave'),
    ]


# Deposit Movement Type
class DepositMovementType:
    COLLECT = 'COLLECT'
    REFUND = 'REFUND'
    DEDUCT = 'DEDUCT'

    CHOICES = [
        (COLLECT, 'Collect'),
        (REFUND, 'Refund'),
        (DEDUCT, 'Deduct'),
    ]

    OUTFLOWS = [REFUND, DEDUCT]


# Document Type
class DocumentType:
    LEASE_CONTRACT = 'LEASE_CONTRACT'
    LEASE_NUMBER = 'LEASE_NUMBER'
    RENT_RECEIPT = 'RENT_RECEIPT'
    RENT_STATEMENT = 'RENT_STATEMENT'

    CHOICES = [
        (LEASE_CONTRACT, 'Lease contract'),
        (LEASE_NUMBER, 'Lease number'),
        (RENT_RECEIPT, 'Rent receipt'),
        (RENT_STATEMENT, 'Rent statement'),
    ]

    ANNUAL = [LEASE_CONTRACT, LEASE_NUMBER]
    MONTHLY = [RENT_RECEIPT, RENT_STATEMENT]

    PREFIXES = {
        LEASE_CONTRACT: 'BAIL',
        LEASE_NUMBER: 'BAIL',
        RENT_RECEIPT: 'RCU',
        RENT_STATEMENT: 'RLV',
    }


# Document Status
class DocumentStatus:
    ISSUED = 'ISSUED'
    RENDERED = 'RENDERED'
    FAILED = 'FAILED'

    CHOICES = [
        (ISSUED, 'Issued'),
        (RENDERED, 'Rendered'),
        (FAILED, 'Failed'),
    ]


# Default Limits
class DefaultLimits:
    CURRENCY = 'XOF'
    DUE_DAY = 5
    OPEN_ENDED_HORIZON_MONTHS = 3
    DOCUMENT_NUMBER_WIDTH = 4


# Pagination
class Pagination:
    DEFAULT_PAGE_SIZE = 50
    MAX_PAGE_SIZE = 200
