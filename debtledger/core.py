"""
Core types for the debt-tracking accounting core.

This module provides the foundational data structures and protocols:
1. Constants: capacity, fee defaults, integer domain bounds
2. Protocols: ExternalMarket and Oracle collaborators
3. Exceptions: DebtLedgerError and domain-specific error types
4. Immutable records: BankInfo, PositionInfo, AccrualResult, BorrowResult,
   RepayResult, DebtEvent

Nothing in this module mutates ledger state. All amounts are unsigned integers
in the market's underlying unit; only valuations (via the Oracle) are Decimal.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import (
    Dict, Tuple, Optional, Callable, Any, Protocol, runtime_checkable,
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Upper bound of the unsigned integer domain used for all debt and share math.
MAX_UINT256 = 2**256 - 1

# Width of the active-debt bitmask; doubles as the bank capacity.
MASK_WIDTH = 256
MAX_BANKS = MASK_WIDTH

# Fee rates are expressed in basis points of accrued interest.
BPS_DENOMINATOR = 10000
DEFAULT_FEE_RATE_BPS = 1000

# Sentinel for repay()/liquidation_repay(): pay the full outstanding debt.
REPAY_ALL = -1


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Stable identifier of a registered bank (the market's underlying symbol).
BankId = str

# Opaque position identifier.
PositionId = int

# Mapping from bank id to the debt share held by one position.
DebtShares = Dict[BankId, int]

# valuation_fn(bank_id, amount, owner) -> value in the oracle's common unit
ValuationFn = Callable[[BankId, int, Any], Decimal]


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class ExternalMarket(Protocol):
    """
    External lending market a bank borrows from (Compound-style money market).

    The ledger is the single borrower of record: current_debt() is the
    authoritative outstanding balance of the ledger's aggregate borrowing,
    including interest the ledger may not have observed yet.
    """
    symbol: str

    def borrow(self, amount: int) -> int:
        """Borrow amount of the underlying; return the amount actually disbursed."""
        ...

    def repay(self, amount: int) -> int:
        """Repay amount of the underlying; return the amount actually applied."""
        ...

    def current_debt(self) -> int:
        """Return the authoritative outstanding debt, interest included."""
        ...


@runtime_checkable
class Oracle(Protocol):
    """Converts a token amount into a common valuation unit."""

    def value_in_common_unit(self, bank_id: BankId, amount: int, owner: Any) -> Decimal:
        ...


# ============================================================================
# ENUMS
# ============================================================================

class EventType(Enum):
    """Kind of committed ledger operation recorded in the event log."""
    ADD_BANK = "add_bank"
    ACCRUE = "accrue"
    BORROW = "borrow"
    REPAY = "repay"
    LIQUIDATE = "liquidate"
    WITHDRAW_RESERVE = "withdraw_reserve"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class DebtLedgerError(Exception):
    """Base exception for all debt ledger errors."""
    pass


class UnknownBank(DebtLedgerError):
    """Raised when an operation references a bank that is not listed."""
    pass


class UnknownPosition(DebtLedgerError):
    """Raised when an operation references a position that was never opened."""
    pass


class CapacityExceeded(DebtLedgerError):
    """Raised when registering a bank while MAX_BANKS banks are already listed."""
    pass


class DuplicateMarket(DebtLedgerError):
    """Raised when registering a market (or symbol) already bound to a listed bank."""
    pass


class OverRepayment(DebtLedgerError):
    """Raised when a repayment exceeds the position's outstanding debt."""
    pass


class ArithmeticOverflow(DebtLedgerError):
    """Raised when share or debt math leaves the unsigned 256-bit domain."""
    pass


class ExternalMarketFailure(DebtLedgerError):
    """
    Raised when a market call fails or moves a different amount than asked.

    When the market did move funds, requested and moved record both amounts
    so the caller can reconcile the market's balance with the ledger.
    """

    def __init__(self, message: str, requested: Optional[int] = None, moved: Optional[int] = None):
        super().__init__(message)
        self.requested = requested
        self.moved = moved


class InsufficientReserve(DebtLedgerError):
    """Raised when withdrawing more than a bank's accumulated reserve."""
    pass


class ReentrancyViolation(DebtLedgerError):
    """Raised when a mutating operation is entered while another is in flight."""
    pass


class AccrualError(DebtLedgerError):
    """Raised by accrue_many() when accrual of one bank fails."""

    def __init__(self, bank_id: BankId, message: str):
        super().__init__(message)
        self.bank_id = bank_id


# ============================================================================
# IMMUTABLE RECORDS
# ============================================================================

@dataclass(frozen=True, slots=True)
class BankInfo:
    """
    Read-only snapshot of a bank's bookkeeping.

    Attributes:
        bank_id: Stable identifier (the market's symbol)
        index: Position in the registry, also the bit in every debt mask
        listed: Existence flag
        reserve: Protocol-owned fee balance in the underlying unit
        total_debt: Debt owed to the external market as of the last accrual
        total_share: Sum of all positions' debt shares
    """
    bank_id: BankId
    index: int
    listed: bool
    reserve: int
    total_debt: int
    total_share: int


@dataclass(frozen=True, slots=True)
class PositionInfo:
    """Read-only snapshot of a position (debt shares are copied)."""
    position_id: PositionId
    owner: Any
    collateral_ref: Optional[str]
    collateral_amount: int
    debt_shares: Tuple[Tuple[BankId, int], ...]
    debt_mask: int

    def share_of(self, bank_id: BankId) -> int:
        return dict(self.debt_shares).get(bank_id, 0)


@dataclass(frozen=True, slots=True)
class AccrualResult:
    """
    Outcome of syncing a bank's recorded debt with the external market.

    Attributes:
        interest: Observed increase of the external debt (0 if none)
        fee: Protocol fee borrowed and credited to reserve
        new_total_debt: Bank total_debt after accrual (observed debt + fee)
    """
    interest: int
    fee: int
    new_total_debt: int

    @property
    def is_noop(self) -> bool:
        return self.interest == 0 and self.fee == 0


@dataclass(frozen=True, slots=True)
class BorrowResult:
    """Values computed for a borrow before it is committed."""
    share: int
    new_total_share: int
    new_total_debt: int
    new_position_share: int


@dataclass(frozen=True, slots=True)
class RepayResult:
    """Values computed for a repayment before it is committed."""
    paid: int
    less_share: int
    old_debt: int
    new_total_share: int
    new_total_debt: int
    new_position_share: int


@dataclass(frozen=True, slots=True)
class DebtEvent:
    """
    Immutable record of a committed ledger operation.

    Attributes:
        sequence_number: Monotonic within the ledger (for ordering)
        event_type: Which operation was committed
        bank_id: Bank involved
        position_id: Position involved (None for bank-level events)
        amount: Underlying amount moved (borrowed, paid, fee, withdrawn)
        share: Shares minted or burned (0 where not applicable)
        details: Extra operation-specific fields
    """
    sequence_number: int
    event_type: EventType
    bank_id: BankId
    position_id: Optional[PositionId] = None
    amount: int = 0
    share: int = 0
    details: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        target = f" pos={self.position_id}" if self.position_id is not None else ""
        return (
            f"DebtEvent(#{self.sequence_number} {self.event_type.value} "
            f"{self.bank_id}{target} amount={self.amount} share={self.share})"
        )
