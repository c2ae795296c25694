"""
accrual.py - Interest accrual calculation

Pure function architecture, mirroring how the rest of the core separates
calculation from mutation:

1. PURE CALCULATION (calculate_accrual):
   - Takes the recorded total debt, the market's observed debt and the fee
     rate explicitly
   - No bank record, no market handle, no hidden state

2. APPLICATION (DebtLedger.accrue):
   - Reads the market once, calls calculate_accrual(), borrows the fee,
     then commits the result to the bank record

Key Formulas:
    interest       = observed - recorded            (if observed > recorded)
    fee            = floor(interest * fee_rate_bps / 10000)
    new_total_debt = observed + fee

The fee is borrowed from the market in the same step it is recognized, so it
is part of the externally owed debt immediately and every share holder pays
their proportion of it. Total share never changes during accrual: the growing
debt-per-share ratio is how interest reaches every position.
"""

from __future__ import annotations

from .core import AccrualResult, BPS_DENOMINATOR
from .share_math import checked_add, checked_sub, mul_div_down


def validate_fee_rate_bps(fee_rate_bps: int) -> int:
    """Return fee_rate_bps if it lies in [0, BPS_DENOMINATOR], else raise ValueError."""
    if isinstance(fee_rate_bps, bool) or not isinstance(fee_rate_bps, int):
        raise ValueError(f"fee_rate_bps must be an int, got {type(fee_rate_bps).__name__}")
    if not 0 <= fee_rate_bps <= BPS_DENOMINATOR:
        raise ValueError(f"fee_rate_bps must be in [0, {BPS_DENOMINATOR}], got {fee_rate_bps}")
    return fee_rate_bps


def calculate_accrual(total_debt: int, observed_debt: int, fee_rate_bps: int) -> AccrualResult:
    """
    Calculate the effect of syncing a bank with its market's debt figure.

    PURE FUNCTION - All inputs explicit, no hidden state.

    Args:
        total_debt: Bank total_debt recorded at the last accrual
        observed_debt: Authoritative debt reported by the market now
        fee_rate_bps: Protocol fee on accrued interest, in basis points

    Returns:
        AccrualResult. When observed_debt <= total_debt there is no interest
        and no fee; new_total_debt is simply observed_debt.

    Example:
        calculate_accrual(1000, 1100, 1000)
        # AccrualResult(interest=100, fee=10, new_total_debt=1110)
    """
    if observed_debt <= total_debt:
        return AccrualResult(interest=0, fee=0, new_total_debt=observed_debt)

    interest = checked_sub(observed_debt, total_debt)
    fee = mul_div_down(interest, fee_rate_bps, BPS_DENOMINATOR)
    return AccrualResult(
        interest=interest,
        fee=fee,
        new_total_debt=checked_add(observed_debt, fee),
    )
