"""
markets.py - In-memory external lending market

SimulatedMarket implements the ExternalMarket protocol the way a
Compound-style money market behaves towards a single borrower: it lends,
accepts repayments, and reports an outstanding balance that grows with
interest the ledger has not observed yet.

It is used for simulations, demos and tests. Production deployments plug in
an adapter to a real market instead.
"""

from __future__ import annotations
from typing import Optional

from .core import BPS_DENOMINATOR


class SimulatedMarket:
    """
    External market with explicit interest steps.

    Interest is applied only when asked for (add_interest or accrue_rate), so
    simulations decide exactly when the ledger sees new debt.

    Example:
        market = SimulatedMarket("USDC", liquidity=1_000_000)
        market.borrow(1000)         # -> 1000
        market.add_interest(100)
        market.current_debt()       # -> 1100
    """

    def __init__(self, symbol: str, liquidity: Optional[int] = None):
        """
        Args:
            symbol: Underlying token symbol; becomes the bank id
            liquidity: Cash available to lend (None = unlimited)
        """
        if not symbol or not symbol.strip():
            raise ValueError("Market symbol cannot be empty")
        self.symbol = symbol
        self.liquidity = liquidity
        self.debt = 0
        self.total_borrowed = 0
        self.total_repaid = 0

    def borrow(self, amount: int) -> int:
        if amount <= 0:
            raise ValueError(f"Borrow amount must be positive, got {amount}")
        if self.liquidity is not None:
            if amount > self.liquidity:
                raise ValueError(
                    f"{self.symbol}: insufficient liquidity {self.liquidity} for borrow {amount}"
                )
            self.liquidity -= amount
        self.debt += amount
        self.total_borrowed += amount
        return amount

    def repay(self, amount: int) -> int:
        if amount <= 0:
            raise ValueError(f"Repay amount must be positive, got {amount}")
        if amount > self.debt:
            raise ValueError(f"{self.symbol}: repay {amount} exceeds borrow balance {self.debt}")
        self.debt -= amount
        self.total_repaid += amount
        if self.liquidity is not None:
            self.liquidity += amount
        return amount

    def current_debt(self) -> int:
        return self.debt

    def add_interest(self, amount: int) -> None:
        """Grow the outstanding balance by a fixed amount of interest."""
        if amount < 0:
            raise ValueError(f"Interest must be non-negative, got {amount}")
        self.debt += amount

    def accrue_rate(self, rate_bps: int) -> int:
        """Grow the outstanding balance by rate_bps of itself (rounded down); return the interest."""
        interest = self.debt * rate_bps // BPS_DENOMINATOR
        self.add_interest(interest)
        return interest

    def __repr__(self):
        return f"SimulatedMarket({self.symbol}, debt={self.debt}, liquidity={self.liquidity})"
