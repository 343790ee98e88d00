"""
Late penalty computation.

Pure and deterministic: the result depends only on (today, installment,
lease terms), so recomputing for the same day never compounds.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from core.constants import PenaltyMode
from core.money import ZERO, quantize


@dataclass(frozen=True)
class PenaltyComputation:
    days_late: int
    amount: Optional[Decimal]

    @property
    def in_grace(self):
        """True when the current penalty must be left as it is"""
        return self.amount is None


def compute_penalty(installment, lease, today: date) -> PenaltyComputation:
    """
    Compute the penalty an installment should carry on ``today``.

    Within the grace period the amount is None (keep the current value).
    Percent-of-balance uses the balance of rent, service and fees only; a
    balance under min_balance_threshold carries no penalty. The cap applies to
    every mode, and money already paid toward the penalty is never taken back.
    """
    days_late = max(0, (today - installment.due_date).days)
    if days_late <= lease.penalty_grace_days:
        return PenaltyComputation(days_late=days_late, amount=None)

    base_due = installment.amount_rent + installment.amount_service + installment.amount_other_fees

    if lease.penalty_mode == PenaltyMode.FIXED_AMOUNT:
        amount = lease.penalty_fixed_amount or ZERO
    elif lease.penalty_mode == PenaltyMode.PERCENT_OF_RENT:
        amount = installment.amount_rent * lease.penalty_rate
    elif lease.penalty_mode == PenaltyMode.PERCENT_OF_BALANCE:
        balance = max(ZERO, base_due - installment.amount_paid)
        threshold = lease.min_balance_threshold
        if threshold is not None and balance < threshold:
            amount = ZERO
        else:
            amount = balance * lease.penalty_rate
    else:
        raise ValueError(f"Unsupported penalty mode: {lease.penalty_mode}")

    if lease.penalty_cap is not None:
        amount = min(amount, lease.penalty_cap)

    already_paid_toward_penalty = max(ZERO, installment.amount_paid - base_due)
    amount = max(quantize(amount), already_paid_toward_penalty)
    return PenaltyComputation(days_late=days_late, amount=amount)
