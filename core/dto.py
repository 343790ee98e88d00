"""
Data Transfer Objects (DTOs).
Used for passing data between layers without exposing domain models.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from decimal import Decimal
from datetime import date

from core.constants import (
    BillingFrequency,
    DefaultLimits,
    PenaltyMode,
    LeaseStatus,
)


@dataclass
class LeaseDTO:
    """Data Transfer Object for Lease"""
    property_ref: str = ""
    renter_ref: str = ""
    owner_ref: str = ""
    lease_number: Optional[str] = None
    status: str = LeaseStatus.ACTIVE
    start_date: date = None
    end_date: Optional[date] = None
    billing_frequency: str = BillingFrequency.MONTHLY
    due_day_of_month: int = DefaultLimits.DUE_DAY
    currency: Optional[str] = None
    rent_amount: Decimal = None
    service_charge_amount: Decimal = Decimal('0')
    security_deposit_amount: Decimal = Decimal('0')
    penalty_grace_days: int = 0
    penalty_mode: str = PenaltyMode.PERCENT_OF_BALANCE
    penalty_rate: Decimal = Decimal('0')
    penalty_fixed_amount: Decimal = Decimal('0')
    penalty_cap: Optional[Decimal] = None
    min_balance_threshold: Optional[Decimal] = None
    notes: str = ""


@dataclass
class PaymentDTO:
    """Data Transfer Object for Payment (closed method variant + optional fields)"""
    idempotency_key: str = ""
    method: str = ""
    amount: Decimal = None
    currency: Optional[str] = None
    lease_id: Optional[int] = None
    renter_ref: str = ""
    mm_operator: str = ""
    mm_phone: str = ""
    psp_name: str = ""
    psp_transaction_id: str = ""
    psp_reference: str = ""
    check_number: str = ""


@dataclass
class PaymentFilterDTO:
    lease_id: Optional[int] = None
    renter_ref: Optional[str] = None
    status: Optional[str] = None
    method: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass
class InstallmentFilterDTO:
    lease_id: Optional[int] = None
    status: Optional[str] = None
    year: Optional[int] = None
    month: Optional[int] = None
    overdue: bool = False


@dataclass
class AllocationRequestDTO:
    """Which installments to allocate to; amounts map installment id -> manual amount"""
    installment_ids: Optional[List[int]] = None
    amounts: Dict[int, Decimal] = field(default_factory=dict)


@dataclass
class AllocationResultDTO:
    allocations: List[Any] = field(default_factory=list)
    total_allocated: Decimal = Decimal('0.00')
    unallocated_amount: Decimal = Decimal('0.00')


@dataclass
class PenaltyRunResultDTO:
    """Outcome of a penalty batch run"""
    run_date: date = None
    processed: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class PageDTO:
    """One page of a tenant-scoped listing"""
    items: List[Any] = field(default_factory=list)
    page: int = 1
    page_size: int = 50
    total: int = 0
    total_pages: int = 0
